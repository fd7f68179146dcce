"""Ordered collection of filter conditions and its structural mutations."""

from typing import Any, Callable, Iterable, List, Optional

from roster.config.logging_config import get_logger
from .conditions import FilterCondition, decode_value, is_valid, new_condition, valid_conditions
from .field_schema import FieldSchema
from .operators import default_operator, is_legal, is_nullary
from .value_editor import coerce_value
from .values import EMPTY

logger = get_logger("filter_model")

ConditionsCallback = Callable[[List[FilterCondition]], None]


class FilterModel:
    """
    Owns the advanced filter rows.

    Operations on ids that are not in the list are no-ops. Invalid rows are
    kept as-is; they are simply left out of what gets transmitted.

    Args:
        schema: Field catalog used for default operators and value shapes.
        conditions: Initial rows, e.g. restored from the preferences cache.
        on_change: Called with the full list after every mutation.
        on_valid_removed: Called with the remaining rows when a valid row is removed.
    """

    def __init__(
        self,
        schema: FieldSchema,
        conditions: Optional[Iterable[FilterCondition]] = None,
        on_change: Optional[ConditionsCallback] = None,
        on_valid_removed: Optional[ConditionsCallback] = None,
    ):
        self.schema = schema
        self._conditions: List[FilterCondition] = list(conditions or [])
        self.on_change = on_change
        self.on_valid_removed = on_valid_removed

    def __len__(self) -> int:
        return len(self._conditions)

    def __iter__(self):
        return iter(list(self._conditions))

    @property
    def conditions(self) -> List[FilterCondition]:
        return list(self._conditions)

    def get(self, condition_id: str) -> Optional[FilterCondition]:
        for condition in self._conditions:
            if condition.id == condition_id:
                return condition
        return None

    def valid(self) -> List[FilterCondition]:
        """Conditions that would be transmitted, in order."""
        return valid_conditions(self._conditions)

    def valid_count(self) -> int:
        """Number of valid conditions; gates the Apply control and badges the filter button."""
        return len(self.valid())

    def add(self) -> FilterCondition:
        """Append an empty row."""
        condition = new_condition()
        self._conditions.append(condition)
        self._changed()
        return condition

    def remove(self, condition_id: str) -> Optional[FilterCondition]:
        """
        Remove a row.

        If the removed row was valid, ``on_valid_removed`` is invoked with the
        remaining rows so the listing can be refreshed without an explicit
        Apply.

        Returns:
            The removed condition, or None if the id was unknown.
        """
        removed = self.get(condition_id)
        if removed is None:
            return None

        self._conditions = [c for c in self._conditions if c.id != condition_id]
        self._changed()

        if is_valid(removed) and self.on_valid_removed is not None:
            logger.debug(f"Removed effective filter {removed.field!r}, scheduling re-apply")
            self.on_valid_removed(self.conditions)
        return removed

    def update(self, condition_id: str, **changes: Any) -> Optional[FilterCondition]:
        """
        Merge changes into a row.

        Choosing a different field resets the operator to that field type's
        first operator (unless a legal operator is passed along) and clears
        the value (unless one is passed along). Switching to a nullary
        operator clears the value; other operator changes convert the value
        to the shape the new operator expects.

        Args:
            condition_id: Row to update.
            **changes: Any of ``field``, ``operator``, ``value``.

        Returns:
            The updated condition, or None if the id was unknown.
        """
        current = self.get(condition_id)
        if current is None:
            return None

        unknown = set(changes) - {"field", "operator", "value"}
        if unknown:
            logger.debug(f"Ignoring unknown condition attributes: {sorted(unknown)}")
            changes = {k: v for k, v in changes.items() if k not in unknown}

        if "value" in changes:
            # Raw wire shapes (str, list, bool, None) are tagged here
            operator = changes.get("operator") or current.operator
            field_type = self.schema.type_for(changes.get("field", current.field))
            changes["value"] = decode_value(changes["value"], operator, field_type)

        updated = current.with_changes(**changes)

        if "field" in changes and changes["field"] != current.field:
            new_field = updated.field
            operator = changes.get("operator")
            if not operator or not is_legal(self.schema, new_field, operator):
                operator = default_operator(self.schema.type_for(new_field))
            value = changes.get("value", EMPTY)
            updated = updated.with_changes(operator=operator, value=value)

        if is_nullary(updated.operator):
            updated = updated.with_changes(value=EMPTY)
        elif "operator" in changes and "value" not in changes:
            field_type = self.schema.type_for(updated.field)
            updated = updated.with_changes(value=coerce_value(updated.value, field_type, updated.operator))

        self._conditions = [updated if c.id == condition_id else c for c in self._conditions]
        self._changed()
        return updated

    def replace(self, conditions: Iterable[FilterCondition]) -> None:
        """Swap in a whole new list of rows."""
        self._conditions = list(conditions)
        self._changed()

    def clear(self) -> None:
        """Remove every row."""
        self._conditions = []
        self._changed()

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change(self.conditions)
