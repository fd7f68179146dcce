"""Advanced filter panel interaction logic.

Holds the panel's own state (field search, expanded groups, which rows have
their field selector open) and turns user gestures into filter model
updates. Rendering is left to the UI layer.
"""

from typing import Callable, Dict, List, Optional, Set

from roster.config.logging_config import get_logger
from . import value_editor
from .conditions import FilterCondition
from .field_schema import FieldGroup
from .filter_model import FilterModel
from .operators import Operator, is_nullary, operator_label, operator_symbol, resolve_operators
from .value_editor import ValueControl
from .values import SelectValue, describe

logger = get_logger("builder")

ApplyCallback = Callable[[Optional[List[FilterCondition]]], None]


class FilterBuilder:
    """
    State and actions of the advanced filter panel.

    Args:
        model: Filter rows being edited.
        on_apply: Invoked by ``apply()``.
        on_clear: Invoked by ``clear_all()`` after the rows are cleared.
    """

    def __init__(
        self,
        model: FilterModel,
        on_apply: Optional[ApplyCallback] = None,
        on_clear: Optional[Callable[[], None]] = None,
    ):
        self.model = model
        self.on_apply = on_apply
        self.on_clear = on_clear
        self.field_search: str = ""
        # All groups start collapsed
        self.expanded_groups: Set[str] = set()
        self._selector_open: Dict[str, bool] = {}
        self.is_open: bool = False

    @property
    def schema(self):
        return self.model.schema

    # -------------------------------------------------------------------------
    # Panel
    # -------------------------------------------------------------------------

    def open(self) -> None:
        self.is_open = True

    def close(self) -> None:
        self.is_open = False

    @property
    def badge_count(self) -> int:
        """Count shown on the filter button."""
        return self.model.valid_count()

    @property
    def apply_enabled(self) -> bool:
        return self.model.valid_count() > 0

    # -------------------------------------------------------------------------
    # Field selector
    # -------------------------------------------------------------------------

    def search_fields(self, term: str) -> None:
        self.field_search = term

    def visible_groups(self) -> List[FieldGroup]:
        """Groups and fields matching the current search term."""
        return self.schema.search(self.field_search)

    def toggle_group(self, group_key: str) -> None:
        if group_key in self.expanded_groups:
            self.expanded_groups.discard(group_key)
        else:
            self.expanded_groups.add(group_key)

    def is_expanded(self, group_key: str) -> bool:
        return group_key in self.expanded_groups

    def open_field_selector(self, condition_id: str) -> None:
        self._selector_open[condition_id] = True

    def close_field_selector(self, condition_id: str) -> None:
        self._selector_open[condition_id] = False

    def toggle_field_selector(self, condition_id: str) -> None:
        self._selector_open[condition_id] = not self._selector_open.get(condition_id, False)

    def shows_field_selector(self, condition: FilterCondition) -> bool:
        """The selector is always shown until a field has been picked."""
        return not condition.field or self._selector_open.get(condition.id, False)

    def choose_field(self, condition_id: str, field_key: str) -> Optional[FilterCondition]:
        """Pick a field for a row, resetting its operator and value."""
        updated = self.model.update(condition_id, field=field_key)
        self.field_search = ""
        self._selector_open[condition_id] = False
        return updated

    # -------------------------------------------------------------------------
    # Row edits
    # -------------------------------------------------------------------------

    def add(self) -> FilterCondition:
        return self.model.add()

    def remove(self, condition_id: str) -> Optional[FilterCondition]:
        self._selector_open.pop(condition_id, None)
        return self.model.remove(condition_id)

    def set_operator(self, condition_id: str, operator: str) -> Optional[FilterCondition]:
        return self.model.update(condition_id, operator=operator)

    def set_text(self, condition_id: str, text: str) -> Optional[FilterCondition]:
        return self.model.update(condition_id, value=value_editor.set_text(text))

    def set_option(self, condition_id: str, option: str) -> Optional[FilterCondition]:
        return self.model.update(condition_id, value=value_editor.set_option(option))

    def set_date(self, condition_id: str, iso_date: str) -> Optional[FilterCondition]:
        return self.model.update(condition_id, value=value_editor.set_date(iso_date))

    def toggle_option(self, condition_id: str, option: str) -> Optional[FilterCondition]:
        condition = self.model.get(condition_id)
        if condition is None:
            return None
        return self.model.update(condition_id, value=value_editor.toggle_option(condition.value, option))

    def set_range_bound(self, condition_id: str, side: str, iso_date: str) -> Optional[FilterCondition]:
        condition = self.model.get(condition_id)
        if condition is None:
            return None
        return self.model.update(
            condition_id, value=value_editor.set_range_bound(condition.value, side, iso_date)
        )

    def set_boolean(self, condition_id: str, flag: bool) -> Optional[FilterCondition]:
        return self.model.update(condition_id, value=value_editor.set_boolean(flag))

    def clear_all(self) -> None:
        """Drop every row, then let the owner refresh the listing."""
        self.model.clear()
        self._selector_open.clear()
        if self.on_clear is not None:
            self.on_clear()

    def apply(self) -> None:
        """Close the panel and hand the rows to the owner."""
        self.close()
        if self.on_apply is not None:
            self.on_apply(None)

    # -------------------------------------------------------------------------
    # Row presentation
    # -------------------------------------------------------------------------

    def operators(self, condition: FilterCondition) -> List[Operator]:
        return resolve_operators(self.schema, condition.field)

    def control(self, condition: FilterCondition) -> ValueControl:
        """Input control for the row's value; none until a field is picked."""
        if not condition.field:
            return ValueControl.NONE
        return value_editor.control_for(self.schema.type_for(condition.field), condition.operator)

    def options(self, condition: FilterCondition) -> List[str]:
        cfg = self.schema.get(condition.field)
        return list(cfg.options) if cfg else []

    def selected_options(self, condition: FilterCondition) -> List[str]:
        if isinstance(condition.value, SelectValue):
            return list(condition.value.options)
        text = describe(condition.value)
        return [text] if text else []

    def is_required(self, condition: FilterCondition) -> bool:
        """Rows without a field are marked as needing one."""
        return not condition.field

    def summary(self, condition: FilterCondition) -> str:
        """
        Sentence describing a row, e.g. ``Status Equals "active"``.

        Rows with no field read "Incomplete filter"; fields missing from the
        catalog are shown by key.
        """
        if not condition.field:
            return "Incomplete filter"
        cfg = self.schema.get(condition.field)
        if cfg is None:
            return condition.field

        op_label = operator_label(condition.operator, cfg.type)
        if is_nullary(condition.operator):
            return f"{cfg.label} {op_label}"

        value_text = describe(condition.value)
        return f'{cfg.label} {op_label} "{value_text}"' if value_text else f"{cfg.label} {op_label}"

    def chip(self, condition: FilterCondition) -> str:
        """Compact label for the active-filter chip row."""
        label = self.schema.label_for(condition.field)
        symbol = operator_symbol(condition.operator)
        if is_nullary(condition.operator):
            return f"{label} {symbol}"
        value_text = describe(condition.value)
        return f'{label} {symbol} "{value_text}"' if value_text else f"{label} {symbol}"

    def chips(self) -> List[FilterCondition]:
        """Rows shown as chips under the toolbar: those with a field chosen."""
        return [c for c in self.model.conditions if c.field]
