"""Value editor dispatch.

Maps a field type and operator to the input control that edits the value,
and provides the edit operations each control emits. Controls only ever
produce values of their own shape, so out-of-domain input never reaches a
condition.
"""

from datetime import date
from enum import Enum
from typing import Optional

from .field_schema import FieldType
from .operators import LIST_OPERATORS, NULLARY_OPERATORS, RANGE_OPERATORS
from .values import (
    EMPTY,
    BoolValue,
    DateRange,
    Empty,
    FilterValue,
    SelectValue,
    TextValue,
)


class ValueControl(str, Enum):
    """Input control rendered for a condition's value."""

    NONE = "none"
    TEXT = "text"
    SELECT = "select"
    MULTI_SELECT = "multi_select"
    DATE = "date"
    DATE_RANGE = "date_range"
    BOOLEAN = "boolean"


def control_for(field_type: Optional[FieldType], operator: str) -> ValueControl:
    """
    Pick the control for a field type and operator.

    Nullary operators take no input. Unknown types are edited as text.
    """
    if operator in NULLARY_OPERATORS:
        return ValueControl.NONE

    if field_type == FieldType.SELECT:
        return ValueControl.MULTI_SELECT if operator in LIST_OPERATORS else ValueControl.SELECT
    if field_type == FieldType.DATE:
        return ValueControl.DATE_RANGE if operator in RANGE_OPERATORS else ValueControl.DATE
    if field_type == FieldType.BOOLEAN:
        return ValueControl.BOOLEAN
    return ValueControl.TEXT


def set_text(text: str) -> FilterValue:
    """Text input; clearing the box clears the value."""
    return TextValue(text) if text else EMPTY


def set_option(option: str) -> FilterValue:
    """Single select."""
    return TextValue(option) if option else EMPTY


def _check_iso_date(iso_date: str) -> str:
    if iso_date:
        # Raises ValueError on anything but YYYY-MM-DD
        date.fromisoformat(iso_date)
    return iso_date


def set_date(iso_date: str) -> FilterValue:
    """Single date picker; only ISO dates are accepted."""
    return TextValue(_check_iso_date(iso_date)) if iso_date else EMPTY


def toggle_option(value: FilterValue, option: str) -> FilterValue:
    """
    Toggle an option's membership in a multi-select value.

    Args:
        value: Current value; a scalar is treated as a one-item selection.
        option: Option to add or remove.

    Returns:
        Updated selection, or ``Empty`` once the last option is removed.
    """
    if isinstance(value, SelectValue):
        current = list(value.options)
    elif isinstance(value, TextValue) and value.text:
        current = [value.text]
    else:
        current = []

    if option in current:
        current.remove(option)
    else:
        current.append(option)

    return SelectValue.of(current) if current else EMPTY


def set_range_bound(value: FilterValue, side: str, iso_date: str) -> FilterValue:
    """
    Set the ``"start"`` or ``"end"`` side of a date range.

    Either side may stay blank while editing; a range with both sides blank
    collapses back to ``Empty``.
    """
    if side not in ("start", "end"):
        raise ValueError(f"Range side must be 'start' or 'end', got {side!r}")
    iso_date = _check_iso_date(iso_date)

    if isinstance(value, DateRange):
        current = value
    elif isinstance(value, TextValue):
        current = DateRange(value.text, "")
    else:
        current = DateRange("", "")

    updated = DateRange(iso_date, current.end) if side == "start" else DateRange(current.start, iso_date)
    if not updated.start and not updated.end:
        return EMPTY
    return updated


def set_boolean(flag: bool) -> FilterValue:
    """Yes/No choice."""
    return BoolValue(bool(flag))


def display_boolean(value: FilterValue) -> bool:
    """What the Yes/No control shows; an unset value displays as No."""
    return isinstance(value, BoolValue) and value.flag


def coerce_value(value: FilterValue, field_type: Optional[FieldType], operator: str) -> FilterValue:
    """
    Convert a value to the shape expected after an operator change.

    Args:
        value: Current value.
        field_type: Type of the condition's field.
        operator: Newly selected operator.

    Returns:
        Value of the shape the new control emits.
    """
    control = control_for(field_type, operator)

    if control == ValueControl.NONE or isinstance(value, Empty):
        return EMPTY

    if control == ValueControl.MULTI_SELECT:
        if isinstance(value, SelectValue):
            return value
        if isinstance(value, TextValue):
            return SelectValue.of([value.text]) if value.text else EMPTY
        return EMPTY

    if control == ValueControl.DATE_RANGE:
        if isinstance(value, DateRange):
            return value
        if isinstance(value, TextValue):
            return DateRange(value.text, "") if value.text else EMPTY
        return EMPTY

    if control == ValueControl.BOOLEAN:
        if isinstance(value, BoolValue):
            return value
        if isinstance(value, TextValue) and value.text.lower() in ("true", "false"):
            return BoolValue(value.text.lower() == "true")
        return EMPTY

    # Scalar controls: text, select, date
    if isinstance(value, TextValue):
        return value
    if isinstance(value, SelectValue):
        return TextValue(value.options[0]) if value.options else EMPTY
    if isinstance(value, DateRange):
        return TextValue(value.start) if value.start else EMPTY
    return EMPTY
