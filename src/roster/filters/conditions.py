"""Filter conditions authored in the advanced filter panel."""

import json
import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional

from .field_schema import FieldType
from .operators import DEFAULT_OPERATOR, is_nullary
from .values import (
    EMPTY,
    FILTER_VALUE_TYPES,
    BoolValue,
    FilterValue,
    TextValue,
    from_wire,
    is_empty,
    to_wire,
)


def new_condition_id() -> str:
    """Generate an opaque id, stable for the lifetime of a condition."""
    return f"filter-{uuid.uuid4().hex}"


@dataclass(frozen=True)
class FilterCondition:
    """One predicate: field, operator and value."""

    id: str = field(default_factory=new_condition_id)
    field: str = ""
    operator: str = DEFAULT_OPERATOR
    value: FilterValue = EMPTY

    @property
    def is_valid(self) -> bool:
        """
        A condition is valid once a field is chosen and it either uses a
        nullary operator or carries a non-empty value.
        """
        return is_valid(self)

    def with_changes(self, **changes: Any) -> "FilterCondition":
        """Return a copy with the given attributes replaced."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire/persistence shape."""
        return {
            "id": self.id,
            "field": self.field,
            "operator": self.operator,
            "value": to_wire(self.value),
        }

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        field_type: Optional[FieldType] = None,
    ) -> "FilterCondition":
        """
        Create from the wire/persistence shape.

        Args:
            data: Mapping with id, field, operator and value keys.
            field_type: Declared type of the field, when known. Boolean
                fields turn legacy ``"true"``/``"false"`` strings into
                booleans.

        Returns:
            Decoded FilterCondition.
        """
        operator = str(data.get("operator") or DEFAULT_OPERATOR)
        value = decode_value(data.get("value"), operator, field_type)
        if is_nullary(operator):
            value = EMPTY
        return cls(
            id=str(data.get("id") or new_condition_id()),
            field=str(data.get("field") or ""),
            operator=operator,
            value=value,
        )


def decode_value(raw: Any, operator: str, field_type: Optional[FieldType] = None) -> FilterValue:
    """
    Tag a value; already tagged values pass through unchanged.

    Boolean fields turn ``"true"``/``"false"`` strings into booleans.
    """
    if isinstance(raw, FILTER_VALUE_TYPES):
        return raw
    value = from_wire(raw, operator)
    if field_type == FieldType.BOOLEAN and isinstance(value, TextValue):
        value = BoolValue(value.text.lower() == "true")
    return value


def new_condition() -> FilterCondition:
    """A fresh row: no field, default operator, no value."""
    return FilterCondition()


def is_valid(condition: FilterCondition) -> bool:
    """Validity rule for transmission."""
    if not condition.field:
        return False
    if is_nullary(condition.operator):
        return True
    return not is_empty(condition.value)


def valid_conditions(conditions: Iterable[FilterCondition]) -> List[FilterCondition]:
    """Keep only valid conditions, preserving order."""
    return [c for c in conditions if is_valid(c)]


def serialize_conditions(conditions: Iterable[FilterCondition]) -> str:
    """Encode conditions as the compact JSON transport string."""
    return json.dumps([c.to_dict() for c in conditions], separators=(",", ":"), ensure_ascii=False)
