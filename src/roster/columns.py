"""Employee table column catalog and visibility rules."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from roster.config.config_loader import get_table_config
from roster.config.logging_config import get_logger
from roster.exceptions import ColumnLimitError

logger = get_logger("columns")

ACTIONS_COLUMN = "actions"


@dataclass(frozen=True)
class TableColumn:
    """A column of the employee table."""

    key: str
    label: str
    group: str
    always_visible: bool = False
    is_action: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TableColumn":
        return cls(
            key=data["key"],
            label=data.get("label", data["key"]),
            group=data.get("group", ""),
            always_visible=bool(data.get("always_visible", False)),
            is_action=bool(data.get("is_action", False)),
        )


class ColumnCatalog:
    """
    Column definitions plus the operations on a visible-column list.

    Visible-column lists are plain lists of keys, ordered by when each
    column was turned on; the catalog never mutates them in place.
    """

    def __init__(
        self,
        columns: List[TableColumn],
        core_columns: List[str],
        max_visible: int = 100,
        group_labels: Optional[Dict[str, str]] = None,
    ):
        self.columns = list(columns)
        self.core_columns = list(core_columns)
        self.max_visible = max_visible
        self.group_labels = dict(group_labels or {})
        self._by_key = {col.key: col for col in self.columns}

    @classmethod
    def from_config(cls) -> "ColumnCatalog":
        """Build from table_columns.yaml."""
        table = get_table_config()
        return cls(
            columns=[TableColumn.from_dict(c) for c in table.columns],
            core_columns=table.core_columns,
            max_visible=table.max_visible_columns,
            group_labels=table.group_labels,
        )

    def get(self, key: str) -> Optional[TableColumn]:
        return self._by_key.get(key)

    def default_visible(self) -> List[str]:
        """Core columns plus the actions column."""
        return [*self.core_columns, ACTIONS_COLUMN]

    def reset(self) -> List[str]:
        """Visible list after "Reset to default"."""
        return self.default_visible()

    def sanitize(self, visible: List[str]) -> List[str]:
        """Drop unknown and duplicate keys from a restored list, keeping the cap."""
        result: List[str] = []
        for key in visible:
            if key in self._by_key and key not in result:
                result.append(key)
        if len(result) > self.max_visible:
            logger.warning(f"Restored {len(result)} visible columns, keeping first {self.max_visible}")
            result = result[: self.max_visible]
        return result

    def groups(self) -> List[str]:
        """Column groups in catalog order, excluding the actions group."""
        seen: List[str] = []
        for col in self.columns:
            if col.group and col.group != ACTIONS_COLUMN and col.group not in seen:
                seen.append(col.group)
        return seen

    def group_label(self, group: str) -> str:
        return self.group_labels.get(group) or group.replace("_", " ")

    def group_columns(self, group: str) -> List[str]:
        return [col.key for col in self.columns if col.group == group]

    def search_groups(self, term: str) -> List[str]:
        """Groups whose label, or any of whose columns' label or key, contains the term."""
        if not term:
            return self.groups()
        needle = term.lower()
        result = []
        for group in self.groups():
            if needle in self.group_label(group).lower():
                result.append(group)
                continue
            if any(
                needle in col.label.lower() or needle in col.key.lower()
                for col in self.columns if col.group == group
            ):
                result.append(group)
        return result

    def visible_columns(self, visible: List[str]) -> List[TableColumn]:
        """Columns to render, in catalog order; always-visible columns included."""
        return [col for col in self.columns if col.key in visible or col.always_visible]

    def data_columns(self, visible: List[str]) -> List[TableColumn]:
        """Rendered columns that hold data (no action column)."""
        return [col for col in self.visible_columns(visible) if not col.is_action]

    def toggle(self, visible: List[str], key: str) -> List[str]:
        """
        Show or hide one column.

        Raises:
            ColumnLimitError: If showing the column would exceed the cap.
        """
        col = self.get(key)
        if col is not None and col.always_visible:
            return list(visible)
        if key in visible:
            return [k for k in visible if k != key]
        if len(visible) >= self.max_visible:
            raise ColumnLimitError(self.max_visible)
        return [*visible, key]

    def toggle_group(self, visible: List[str], group: str) -> List[str]:
        """
        Hide a group if all of its columns are shown, otherwise show all of them.

        Raises:
            ColumnLimitError: If showing the group would exceed the cap; the
                visible list is left unchanged.
        """
        group_keys = self.group_columns(group)
        if group_keys and all(k in visible for k in group_keys):
            return [k for k in visible if k not in group_keys]

        updated = list(visible)
        for key in group_keys:
            col = self.get(key)
            if key in updated or (col is not None and col.always_visible):
                continue
            if len(updated) >= self.max_visible:
                raise ColumnLimitError(self.max_visible)
            updated.append(key)
        return updated
