"""Tagged filter values.

A filter condition's value is one of a closed set of variants, each tied to
the kind of input control that produced it:

- ``Empty``: nothing supplied yet
- ``TextValue``: one scalar string (free text, a single select option or an ISO date)
- ``SelectValue``: an ordered, de-duplicated list of select options
- ``DateRange``: a ``[from, to]`` pair of ISO dates
- ``BoolValue``: ``True`` or ``False``

On the wire and in the preferences cache values keep the loose JSON shape
(``null``, string, list or boolean).
"""

from dataclasses import dataclass
from typing import Any, Iterable, List, Tuple, Union

from roster.config.logging_config import get_logger

logger = get_logger("values")


@dataclass(frozen=True)
class Empty:
    """No value supplied."""

    pass


@dataclass(frozen=True)
class TextValue:
    """A single scalar string."""

    text: str


@dataclass(frozen=True)
class SelectValue:
    """An ordered list of distinct option strings."""

    options: Tuple[str, ...]

    @classmethod
    def of(cls, options: Iterable[str]) -> "SelectValue":
        """Build from any iterable, dropping duplicates but keeping first-seen order."""
        return cls(tuple(dict.fromkeys(str(o) for o in options)))


@dataclass(frozen=True)
class DateRange:
    """Inclusive date range; either bound may be blank while editing."""

    start: str = ""
    end: str = ""


@dataclass(frozen=True)
class BoolValue:
    """A boolean choice."""

    flag: bool


FilterValue = Union[Empty, TextValue, SelectValue, DateRange, BoolValue]

FILTER_VALUE_TYPES = (Empty, TextValue, SelectValue, DateRange, BoolValue)

EMPTY = Empty()

WireValue = Union[None, str, bool, List[str]]


def is_empty(value: FilterValue) -> bool:
    """
    Check whether a value counts as "not yet supplied".

    Blank strings, empty option lists and ranges with both bounds blank are
    treated the same as ``Empty``.
    """
    if isinstance(value, Empty):
        return True
    if isinstance(value, TextValue):
        return value.text == ""
    if isinstance(value, SelectValue):
        return len(value.options) == 0
    if isinstance(value, DateRange):
        return not value.start and not value.end
    if isinstance(value, BoolValue):
        return False
    raise TypeError(f"Not a filter value: {value!r}")


def to_wire(value: FilterValue) -> WireValue:
    """Convert a tagged value into its JSON shape."""
    if isinstance(value, Empty):
        return None
    if isinstance(value, TextValue):
        return value.text
    if isinstance(value, SelectValue):
        return list(value.options)
    if isinstance(value, DateRange):
        return [value.start, value.end]
    if isinstance(value, BoolValue):
        return value.flag
    raise TypeError(f"Not a filter value: {value!r}")


def from_wire(raw: Any, operator: str = "") -> FilterValue:
    """
    Decode a JSON value into its tagged variant.

    The operator disambiguates list shapes: ``between`` yields a ``DateRange``,
    anything else a ``SelectValue``. Legacy ``"true"``/``"false"`` strings are
    only turned into booleans by the caller, which knows the field type.

    Args:
        raw: Value as stored in JSON.
        operator: Operator of the owning condition.

    Returns:
        Tagged value; unrecognized shapes decode to ``Empty``.
    """
    if raw is None:
        return EMPTY
    if isinstance(raw, bool):
        return BoolValue(raw)
    if isinstance(raw, (list, tuple)):
        items = ["" if item is None else str(item) for item in raw]
        if operator == "between":
            start = items[0] if len(items) > 0 else ""
            end = items[1] if len(items) > 1 else ""
            return DateRange(start, end)
        items = [item for item in items if item != ""]
        return SelectValue.of(items) if items else EMPTY
    if isinstance(raw, (str, int, float)):
        text = str(raw)
        return TextValue(text) if text != "" else EMPTY

    logger.debug(f"Discarding unrecognized filter value shape: {raw!r}")
    return EMPTY


def describe(value: FilterValue) -> str:
    """Human readable rendering used in summaries and chips."""
    if isinstance(value, Empty):
        return ""
    if isinstance(value, TextValue):
        return value.text
    if isinstance(value, SelectValue):
        return ", ".join(value.options)
    if isinstance(value, DateRange):
        return f"{value.start or '...'} to {value.end or '...'}"
    if isinstance(value, BoolValue):
        return "Yes" if value.flag else "No"
    raise TypeError(f"Not a filter value: {value!r}")
