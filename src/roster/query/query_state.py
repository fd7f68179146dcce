"""Listing query state and its request parameter encoding."""

import json
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import httpx

from roster.filters.conditions import FilterCondition, serialize_conditions, valid_conditions


class SearchMode(str, Enum):
    """Which attribute the free-text search looks at."""

    ANY = "any"
    ID = "id"
    NAME = "name"
    POSITION = "position"
    DEPARTMENT = "department"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class ViewMode(str, Enum):
    """Table layout: automatic by viewport, always table, or always cards."""

    AUTO = "auto"
    TABLE = "table"
    CARD = "card"


DEFAULT_SORT_BY = "created_at"

QUICK_FILTER_NAMES = ("status", "department_ids", "position_ids", "employee_type", "show_deleted")


@dataclass(frozen=True)
class QuickFilters:
    """Toolbar filters: status, departments, positions, employee type and deleted rows."""

    status: str = ""
    department_ids: Tuple[str, ...] = ()
    position_ids: Tuple[str, ...] = ()
    employee_type: str = ""
    show_deleted: bool = False

    @property
    def is_active(self) -> bool:
        """Check if any quick filter narrows (or widens) the listing."""
        return self.active_count > 0

    @property
    def active_count(self) -> int:
        """Count of active quick filters."""
        count = 0
        if self.status:
            count += 1
        if self.department_ids:
            count += 1
        if self.position_ids:
            count += 1
        if self.employee_type:
            count += 1
        if self.show_deleted:
            count += 1
        return count

    def cleared(self) -> "QuickFilters":
        return QuickFilters()

    def with_changes(self, **changes: Any) -> "QuickFilters":
        for key in ("department_ids", "position_ids"):
            if key in changes:
                changes[key] = tuple(str(v) for v in changes[key] or ())
        return replace(self, **changes)


@dataclass
class ListingState:
    """Mutable in-memory state fragments of the listing page."""

    search: str = ""
    search_mode: SearchMode = SearchMode.ANY
    quick: QuickFilters = field(default_factory=QuickFilters)
    sort_by: str = DEFAULT_SORT_BY
    sort_order: SortOrder = SortOrder.ASC
    page: int = 1
    per_page: int = 10
    visible_columns: List[str] = field(default_factory=list)
    view_mode: ViewMode = ViewMode.AUTO


@dataclass(frozen=True)
class QueryState:
    """
    Snapshot sent to the listing endpoint.

    Only valid advanced filters are ever carried. When there are none the
    ``advanced_filters`` parameter is left out entirely; the server tells
    "no advanced filtering" apart from an empty filter list by the key's
    absence.
    """

    page: int = 1
    per_page: int = 10
    search: str = ""
    search_mode: SearchMode = SearchMode.ANY
    quick: QuickFilters = field(default_factory=QuickFilters)
    sort_by: str = DEFAULT_SORT_BY
    sort_order: SortOrder = SortOrder.ASC
    visible_columns: Tuple[str, ...] = ()
    advanced_filters: Tuple[FilterCondition, ...] = ()
    need_dropdowns: bool = False

    @property
    def wants_dropdowns(self) -> bool:
        """Facet option lists are requested whenever a quick filter is active."""
        return self.need_dropdowns or self.quick.is_active

    def to_params(self) -> Dict[str, Any]:
        """
        Build the flat request parameter mapping.

        Keys whose value is empty (blank string, None, empty list) are
        dropped. Lists stay lists; ``to_query_string`` gives them the ``[]``
        suffix.

        Returns:
            Ordered parameter mapping.
        """
        quick = self.quick
        params: Dict[str, Any] = {
            "page": self.page,
            "per_page": self.per_page,
            "search": self.search,
            "search_mode": SearchMode(self.search_mode).value,
            "status": quick.status,
            "department_ids": list(quick.department_ids),
            "position_ids": list(quick.position_ids),
            # Singular keys kept for older server versions
            "department_id": quick.department_ids[0] if len(quick.department_ids) == 1 else "",
            "position_id": quick.position_ids[0] if len(quick.position_ids) == 1 else "",
            "employee_type": quick.employee_type,
            "show_deleted": "true" if quick.show_deleted else "false",
            "sort_by": self.sort_by,
            "sort_order": SortOrder(self.sort_order).value,
            "visible_columns": json.dumps(list(self.visible_columns), separators=(",", ":")),
        }

        valid = valid_conditions(self.advanced_filters)
        if valid:
            params["advanced_filters"] = serialize_conditions(valid)

        if self.wants_dropdowns:
            params["need_dropdowns"] = "true"

        return {key: value for key, value in params.items() if not _is_blank(value)}

    def to_query_string(self) -> str:
        """Encode the parameters as a URL query string."""
        return str(httpx.QueryParams(encode_params(self.to_params())))


def encode_params(params: Dict[str, Any]) -> List[Tuple[str, str]]:
    """Flatten a parameter mapping into pairs, list keys getting the ``[]`` suffix."""
    pairs: List[Tuple[str, str]] = []
    for key, value in params.items():
        if isinstance(value, (list, tuple)):
            pairs.extend((f"{key}[]", str(item)) for item in value)
        elif isinstance(value, bool):
            pairs.append((key, "true" if value else "false"))
        else:
            pairs.append((key, str(value)))
    return pairs


def _is_blank(value: Any) -> bool:
    return value is None or value == "" or (isinstance(value, (list, tuple)) and len(value) == 0)


def build_query(
    state: ListingState,
    conditions: Iterable[FilterCondition],
    page: Optional[int] = None,
    per_page: Optional[int] = None,
    search: Optional[str] = None,
    search_mode: Optional[SearchMode] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[SortOrder] = None,
    need_dropdowns: bool = False,
    **quick_overrides: Any,
) -> QueryState:
    """
    Snapshot the current state in one pass, applying per-request overrides.

    Args:
        state: Current listing fragments.
        conditions: Advanced filter rows; invalid rows are dropped here.
        page, per_page, search, search_mode, sort_by, sort_order: Overrides
            for this request only.
        need_dropdowns: Ask the server for facet option lists.
        **quick_overrides: Overrides for any of the quick filter fields.

    Returns:
        Frozen QueryState.
    """
    unknown = set(quick_overrides) - set(QUICK_FILTER_NAMES)
    if unknown:
        raise TypeError(f"Unknown query overrides: {sorted(unknown)}")

    quick = state.quick.with_changes(**quick_overrides) if quick_overrides else state.quick
    return QueryState(
        page=page if page is not None else state.page,
        per_page=per_page if per_page is not None else state.per_page,
        search=search if search is not None else state.search,
        search_mode=search_mode if search_mode is not None else state.search_mode,
        quick=quick,
        sort_by=sort_by or state.sort_by or DEFAULT_SORT_BY,
        sort_order=sort_order or state.sort_order,
        visible_columns=tuple(state.visible_columns),
        advanced_filters=tuple(valid_conditions(conditions)),
        need_dropdowns=need_dropdowns,
    )


def active_filter_count(quick: QuickFilters, conditions: Sequence[FilterCondition]) -> int:
    """Toolbar badge: active quick filters plus advanced rows with a field chosen."""
    return quick.active_count + sum(1 for c in conditions if c.field)
