"""Client-local preferences cache.

Each listing fragment (quick filters, advanced filters, rows per page,
visible columns, view mode) is stored under its own key so that writes are
independent. Reads are tolerant: a missing or malformed entry yields the
default and never raises.
"""

import json
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence

from roster.config.logging_config import get_logger
from roster.filters.conditions import FilterCondition
from roster.filters.field_schema import FieldSchema
from .query_state import ListingState, QuickFilters, ViewMode

logger = get_logger("preferences")

VISIBLE_COLUMNS_KEY = "employeeTableVisibleColumns"
VIEW_MODE_KEY = "employeeTableViewMode"

DEFAULT_PAGE_SIZE_OPTIONS = (5, 10, 25, 50, 100)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class PreferencesStore(Protocol):
    """String key-value store the listing page persists its fragments in."""

    def get(self, key: str) -> Optional[str]: ...
    def set(self, key: str, value: str) -> None: ...
    def remove(self, key: str) -> None: ...


class InMemoryPreferencesStore:
    """Dict-backed store, for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class FilePreferencesStore:
    """
    One file per key in a directory.

    Every write replaces the whole file, so a torn write can only ever
    corrupt the single fragment being written.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Invalid preference key: {key!r}")
        return self.directory / f"{key}.pref"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read preference {key}: {e}")
            return None

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(path)

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class ListingPreferences:
    """
    Typed access to the persisted fragments of one listing resource.

    Args:
        store: Injected key-value store.
        resource: Key prefix, e.g. ``employees``.
        page_size_options: Allowed rows-per-page values; anything else
            read back from the store is ignored.
    """

    def __init__(
        self,
        store: PreferencesStore,
        resource: str = "employees",
        page_size_options: Sequence[int] = DEFAULT_PAGE_SIZE_OPTIONS,
    ):
        self.store = store
        self.resource = resource
        self.page_size_options = tuple(int(o) for o in page_size_options)

    def key(self, name: str) -> str:
        return f"{self.resource}_{name}"

    @property
    def status_key(self) -> str:
        return self.key("filter_status")

    @property
    def department_key(self) -> str:
        return self.key("filter_department")

    @property
    def position_key(self) -> str:
        return self.key("filter_position")

    @property
    def employee_type_key(self) -> str:
        return self.key("filter_employee_type")

    @property
    def show_deleted_key(self) -> str:
        return self.key("filter_show_deleted")

    @property
    def advanced_filters_key(self) -> str:
        return self.key("advanced_filters")

    @property
    def per_page_key(self) -> str:
        return self.key("perPage")

    # -------------------------------------------------------------------------
    # Quick filters
    # -------------------------------------------------------------------------

    def get_status(self) -> str:
        return self.store.get(self.status_key) or ""

    def set_status(self, status: str) -> None:
        self._set_or_remove(self.status_key, status)

    def get_departments(self) -> List[str]:
        return self._get_id_list(self.department_key)

    def set_departments(self, ids: Sequence[str]) -> None:
        self._set_or_remove(self.department_key, json.dumps([str(i) for i in ids]) if ids else "")

    def get_positions(self) -> List[str]:
        return self._get_id_list(self.position_key)

    def set_positions(self, ids: Sequence[str]) -> None:
        self._set_or_remove(self.position_key, json.dumps([str(i) for i in ids]) if ids else "")

    def get_employee_type(self) -> str:
        return self.store.get(self.employee_type_key) or ""

    def set_employee_type(self, employee_type: str) -> None:
        self._set_or_remove(self.employee_type_key, employee_type)

    def get_show_deleted(self) -> Optional[bool]:
        """Stored flag, or None when nothing usable is stored."""
        raw = self.store.get(self.show_deleted_key)
        if raw == "true":
            return True
        if raw == "false":
            return False
        return None

    def set_show_deleted(self, flag: bool) -> None:
        self.store.set(self.show_deleted_key, "true" if flag else "false")

    def save_quick_filters(self, quick: QuickFilters) -> None:
        """Write every quick filter fragment."""
        self.set_status(quick.status)
        self.set_departments(quick.department_ids)
        self.set_positions(quick.position_ids)
        self.set_employee_type(quick.employee_type)
        self.set_show_deleted(quick.show_deleted)

    def load_quick_filters(self) -> QuickFilters:
        return QuickFilters(
            status=self.get_status(),
            department_ids=tuple(self.get_departments()),
            position_ids=tuple(self.get_positions()),
            employee_type=self.get_employee_type(),
            show_deleted=bool(self.get_show_deleted()),
        )

    # -------------------------------------------------------------------------
    # Advanced filters
    # -------------------------------------------------------------------------

    def get_advanced_filters(self, schema: Optional[FieldSchema] = None) -> List[FilterCondition]:
        """
        Restore the advanced filter rows, valid or not.

        Args:
            schema: Field catalog, used to decode boolean values stored as strings.

        Returns:
            Conditions in stored order; an empty list if nothing usable is stored.
        """
        raw = self.store.get(self.advanced_filters_key)
        if not raw:
            return []
        parsed = self._loads(self.advanced_filters_key, raw)
        if not isinstance(parsed, list):
            return []

        conditions = []
        for item in parsed:
            if not isinstance(item, dict):
                logger.warning(f"Skipping malformed stored filter: {item!r}")
                continue
            field_type = schema.type_for(str(item.get("field") or "")) if schema else None
            conditions.append(FilterCondition.from_dict(item, field_type=field_type))
        return conditions

    def set_advanced_filters(self, conditions: Sequence[FilterCondition]) -> None:
        """Persist the rows; an empty list removes the key."""
        if conditions:
            self.store.set(
                self.advanced_filters_key,
                json.dumps([c.to_dict() for c in conditions], ensure_ascii=False),
            )
        else:
            self.clear_advanced_filters()

    def clear_advanced_filters(self) -> None:
        self.store.remove(self.advanced_filters_key)

    # -------------------------------------------------------------------------
    # Table preferences
    # -------------------------------------------------------------------------

    def get_per_page(self) -> Optional[int]:
        """Stored rows per page, or None if missing or not an allowed option."""
        raw = self.store.get(self.per_page_key)
        if not raw:
            return None
        try:
            value = int(raw)
        except ValueError:
            logger.warning(f"Ignoring non-numeric {self.per_page_key}: {raw!r}")
            return None
        if value not in self.page_size_options:
            logger.warning(f"Ignoring {self.per_page_key}={value}, not one of {self.page_size_options}")
            return None
        return value

    def set_per_page(self, per_page: int) -> None:
        self.store.set(self.per_page_key, str(int(per_page)))

    def get_visible_columns(self) -> Optional[List[str]]:
        raw = self.store.get(VISIBLE_COLUMNS_KEY)
        if not raw:
            return None
        parsed = self._loads(VISIBLE_COLUMNS_KEY, raw)
        if not isinstance(parsed, list):
            return None
        return [str(k) for k in parsed]

    def set_visible_columns(self, columns: Sequence[str]) -> None:
        self.store.set(VISIBLE_COLUMNS_KEY, json.dumps(list(columns)))

    def get_view_mode(self) -> ViewMode:
        raw = self.store.get(VIEW_MODE_KEY)
        try:
            return ViewMode(raw) if raw else ViewMode.AUTO
        except ValueError:
            logger.warning(f"Ignoring unknown view mode: {raw!r}")
            return ViewMode.AUTO

    def set_view_mode(self, mode: ViewMode) -> None:
        self.store.set(VIEW_MODE_KEY, ViewMode(mode).value)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _set_or_remove(self, key: str, value: str) -> None:
        """A cleared filter removes its key instead of storing a blank."""
        if value:
            self.store.set(key, value)
        else:
            self.store.remove(key)

    def _loads(self, key: str, raw: str) -> Any:
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Malformed JSON in preference {key}: {e}")
            return None

    def _get_id_list(self, key: str) -> List[str]:
        """Read an id list; a legacy bare value is treated as a one-element list."""
        raw = self.store.get(key)
        if not raw:
            return []
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            return [raw]
        if isinstance(parsed, list):
            return [str(v) for v in parsed]
        return [str(parsed)] if parsed else []


def restore_state(
    prefs: ListingPreferences,
    default_visible_columns: Sequence[str],
    default_per_page: int = 10,
) -> ListingState:
    """
    Build the initial listing state from the cache, read once on mount.

    Args:
        prefs: Preferences accessor.
        default_visible_columns: Columns used when none are stored.
        default_per_page: Rows per page used when none (or an invalid value) is stored.

    Returns:
        ListingState with every restorable fragment filled in.
    """
    visible = prefs.get_visible_columns()
    per_page = prefs.get_per_page()
    return ListingState(
        quick=prefs.load_quick_filters(),
        per_page=per_page if per_page is not None else default_per_page,
        visible_columns=list(visible) if visible is not None else list(default_visible_columns),
        view_mode=prefs.get_view_mode(),
    )
