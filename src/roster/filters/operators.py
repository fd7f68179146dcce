"""Operator resolution for filter conditions.

Each field type has a fixed, ordered operator list. The first entry is the
default chosen when a field is picked for a condition.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from roster.config.logging_config import get_logger
from roster.exceptions import UnknownFieldError
from .field_schema import FieldSchema, FieldType

logger = get_logger("operators")


@dataclass(frozen=True)
class Operator:
    """An operator with its panel label."""

    value: str
    label: str


OPERATORS: Dict[FieldType, List[Operator]] = {
    FieldType.TEXT: [
        Operator("contains", "Contains"),
        Operator("not_contains", "Does not contain"),
        Operator("equals", "Equals"),
        Operator("not_equals", "Does not equal"),
        Operator("starts_with", "Starts with"),
        Operator("ends_with", "Ends with"),
        Operator("is_null", "Is empty"),
        Operator("is_not_null", "Is not empty"),
    ],
    FieldType.SELECT: [
        Operator("equals", "Equals"),
        Operator("not_equals", "Does not equal"),
        Operator("in", "Is one of"),
        Operator("not_in", "Is not one of"),
    ],
    FieldType.DATE: [
        Operator("equals", "Equals"),
        Operator("greater_than", "After"),
        Operator("greater_than_or_equal", "On or after"),
        Operator("less_than", "Before"),
        Operator("less_than_or_equal", "On or before"),
        Operator("between", "Between"),
    ],
    FieldType.BOOLEAN: [
        Operator("equals", "Is"),
    ],
}

# Compact forms used on active-filter chips
OPERATOR_SYMBOLS: Dict[str, str] = {
    "equals": "=",
    "not_equals": "≠",
    "contains": "contains",
    "not_contains": "does not contain",
    "starts_with": "starts with",
    "ends_with": "ends with",
    "greater_than": ">",
    "greater_than_or_equal": "≥",
    "less_than": "<",
    "less_than_or_equal": "≤",
    "in": "is one of",
    "not_in": "is not one of",
    "is_null": "is empty",
    "is_not_null": "is not empty",
    "between": "between",
}

NULLARY_OPERATORS = frozenset({"is_null", "is_not_null"})
LIST_OPERATORS = frozenset({"in", "not_in"})
RANGE_OPERATORS = frozenset({"between"})

DEFAULT_OPERATOR = "contains"


def operators_for_type(field_type: Optional[FieldType]) -> List[Operator]:
    """Operators legal for a field type; unknown types get the text set."""
    if field_type is None:
        return list(OPERATORS[FieldType.TEXT])
    return list(OPERATORS.get(field_type, OPERATORS[FieldType.TEXT]))


def default_operator(field_type: Optional[FieldType]) -> str:
    """First operator listed for the type."""
    return operators_for_type(field_type)[0].value


def is_nullary(operator: str) -> bool:
    """True for operators that carry no value."""
    return operator in NULLARY_OPERATORS


def resolve_operators(
    schema: FieldSchema,
    field_key: str,
    strict: bool = False,
) -> List[Operator]:
    """
    Resolve the operator list for a field in the schema.

    A blank key (field not chosen yet) resolves to the text operators. A key
    missing from the schema, or a field whose declared type is not
    recognized, also falls back to the text operators with a warning, unless
    ``strict`` is set.

    Args:
        schema: Field catalog.
        field_key: Key of the condition's field.
        strict: Raise instead of falling back for unknown fields.

    Returns:
        Ordered operator list.

    Raises:
        UnknownFieldError: If ``strict`` and the field cannot be resolved.
    """
    if not field_key:
        return operators_for_type(FieldType.TEXT)

    cfg = schema.get(field_key)
    if cfg is None:
        if strict:
            raise UnknownFieldError(field_key)
        logger.warning(f"No configuration for filter field {field_key!r}, using text operators")
        return operators_for_type(FieldType.TEXT)

    if cfg.type is None:
        if strict:
            raise UnknownFieldError(field_key, cfg.declared_type)
        logger.warning(
            f"Filter field {field_key!r} has unrecognized type {cfg.declared_type!r}, using text operators"
        )
        return operators_for_type(FieldType.TEXT)

    return operators_for_type(cfg.type)


def is_legal(schema: FieldSchema, field_key: str, operator: str) -> bool:
    """Check an operator against the field's resolved operator list."""
    return any(op.value == operator for op in resolve_operators(schema, field_key))


def operator_label(operator: str, field_type: Optional[FieldType] = None) -> str:
    """Panel label for an operator, looked up in the type's list first."""
    for op in operators_for_type(field_type):
        if op.value == operator:
            return op.label
    for ops in OPERATORS.values():
        for op in ops:
            if op.value == operator:
                return op.label
    return operator


def operator_symbol(operator: str) -> str:
    """Chip symbol for an operator; unknown operators are shown as-is."""
    return OPERATOR_SYMBOLS.get(operator, operator)
