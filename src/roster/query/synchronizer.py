"""Query synchronizer: the single initiator of listing requests.

Every user gesture that changes what the listing shows ends up here. The
synchronizer updates the in-memory state, persists the fragment that
changed, snapshots a QueryState and sends it. Each request carries a
generation number; a response is applied only if no newer request has been
issued since, and a superseded in-flight request is cancelled.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from roster.columns import ColumnCatalog
from roster.config import config, load_filter_fields
from roster.config.logging_config import get_logger
from roster.exceptions import ListingRequestError
from roster.filters.conditions import FilterCondition
from roster.filters.field_schema import FieldSchema
from roster.filters.filter_model import FilterModel
from .client import ListingClient, ListingPage
from .preferences import ListingPreferences, restore_state
from .query_state import (
    ListingState,
    QueryState,
    QuickFilters,
    SearchMode,
    SortOrder,
    ViewMode,
    active_filter_count,
    build_query,
)

logger = get_logger("synchronizer")

PageCallback = Callable[[ListingPage], None]


@dataclass(frozen=True)
class ListingRequest:
    """One outgoing listing request and its navigation options."""

    generation: int
    query: QueryState
    params: Dict[str, Any]
    preserve_state: bool = True
    preserve_scroll: bool = False
    # History entry is always replaced, never pushed
    replace: bool = True

    @property
    def query_string(self) -> str:
        return self.query.to_query_string()


class QuerySynchronizer:
    """
    Owns the listing state and turns changes into listing requests.

    Args:
        client: Listing transport.
        preferences: Persisted fragments; read once here, written on each change.
        schema: Field catalog for the advanced filters.
        columns: Column catalog for visibility changes.
        state: Initial state; restored from ``preferences`` when omitted.
        conditions: Initial advanced filter rows; restored from ``preferences`` when omitted.
        debounce_seconds: Quiet period before a search-text request fires.
        reapply_delay_seconds: Delay before re-applying filters after an
            effective row is removed.
        on_page: Called with every applied page.
    """

    def __init__(
        self,
        client: ListingClient,
        preferences: ListingPreferences,
        schema: FieldSchema,
        columns: ColumnCatalog,
        state: Optional[ListingState] = None,
        conditions: Optional[Sequence[FilterCondition]] = None,
        debounce_seconds: Optional[float] = None,
        reapply_delay_seconds: Optional[float] = None,
        on_page: Optional[PageCallback] = None,
    ):
        self.client = client
        self.preferences = preferences
        self.schema = schema
        self.columns = columns
        self.on_page = on_page

        self.debounce_seconds = (
            debounce_seconds if debounce_seconds is not None else config.sync.debounce_seconds
        )
        self.reapply_delay_seconds = (
            reapply_delay_seconds
            if reapply_delay_seconds is not None
            else config.sync.reapply_delay_seconds
        )

        if state is None:
            state = restore_state(preferences, columns.default_visible())
            state.visible_columns = columns.sanitize(state.visible_columns) or columns.default_visible()
        self.state = state

        if conditions is None:
            conditions = preferences.get_advanced_filters(schema)
        self.filters = FilterModel(
            schema,
            conditions,
            on_change=self._persist_filters,
            on_valid_removed=self._on_valid_removed,
        )

        self.generation = 0
        self.loading = False
        self.page: Optional[ListingPage] = None
        self.last_error: Optional[ListingRequestError] = None
        self.last_request: Optional[ListingRequest] = None
        self.location = ""

        self._inflight: Optional[asyncio.Task] = None
        self._debounce_task: Optional[asyncio.Task] = None
        self._reapply_task: Optional[asyncio.Task] = None

    # -------------------------------------------------------------------------
    # Request dispatch
    # -------------------------------------------------------------------------

    async def fetch(
        self,
        preserve_state: bool = True,
        preserve_scroll: bool = False,
        **overrides: Any,
    ) -> Optional[ListingPage]:
        """
        Snapshot the current state and request a page.

        Args:
            preserve_state: Keep client-side state across the request.
            preserve_scroll: Keep the scroll position at the table.
            **overrides: Per-request overrides accepted by ``build_query``.

        Returns:
            The applied page, or None if the request was superseded.

        Raises:
            ListingRequestError: If this is still the latest request and it failed.
        """
        self._cancel_timers()
        query = build_query(self.state, self.filters.conditions, **overrides)
        return await self._dispatch(query, preserve_state, preserve_scroll)

    async def _dispatch(
        self, query: QueryState, preserve_state: bool, preserve_scroll: bool
    ) -> Optional[ListingPage]:
        self.generation += 1
        generation = self.generation
        request = ListingRequest(
            generation=generation,
            query=query,
            params=query.to_params(),
            preserve_state=preserve_state,
            preserve_scroll=preserve_scroll,
        )
        self.last_request = request
        self.location = request.query_string
        self.loading = True

        if self._inflight is not None and not self._inflight.done():
            logger.debug(f"Cancelling superseded request {generation - 1}")
            self._inflight.cancel()

        task = asyncio.ensure_future(self.client.fetch(request.params))
        self._inflight = task
        logger.debug(f"Request {generation}: {self.location}")

        try:
            page = await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                if generation == self.generation:
                    self.loading = False
                raise
            logger.debug(f"Request {generation} superseded")
            return None
        except ListingRequestError as e:
            if generation != self.generation:
                logger.debug(f"Ignoring failure of stale request {generation}: {e}")
                return None
            self.loading = False
            self.last_error = e
            logger.error(f"Listing request failed: {e}")
            raise

        if generation != self.generation:
            logger.debug(f"Discarding stale response {generation} (latest {self.generation})")
            return None

        self.loading = False
        self.last_error = None
        self.page = page
        self.state.page = page.meta.current_page
        if page.filter_fields_config:
            self.set_schema(FieldSchema.from_config(
                page.filter_fields_config, load_filter_fields().get("group_labels", {})
            ))
        if self.on_page is not None:
            self.on_page(page)
        return page

    async def load(self) -> Optional[ListingPage]:
        """Initial request on mount, asking for the facet option lists."""
        return await self.fetch(page=1, need_dropdowns=True)

    def set_schema(self, schema: FieldSchema) -> None:
        """Swap in a field catalog supplied by the server."""
        self.schema = schema
        self.filters.schema = schema

    def _cancel_timers(self) -> None:
        """Drop pending debounced/delayed requests unless one of them is the caller."""
        current = asyncio.current_task()
        for task in (self._debounce_task, self._reapply_task):
            if task is not None and task is not current and not task.done():
                task.cancel()

    async def _run_background(self, coro: Awaitable[Optional[ListingPage]]) -> None:
        try:
            await coro
        except ListingRequestError as e:
            # Already recorded in last_error
            logger.warning(f"Background listing request failed: {e}")

    async def drain(self) -> None:
        """Wait for pending debounced, delayed and in-flight requests to settle."""
        while True:
            pending = [
                t
                for t in (self._debounce_task, self._reapply_task, self._inflight)
                if t is not None and not t.done()
            ]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def aclose(self) -> None:
        """Cancel every pending and in-flight request."""
        for task in (self._debounce_task, self._reapply_task, self._inflight):
            if task is not None and not task.done():
                task.cancel()
        await asyncio.gather(
            *[t for t in (self._debounce_task, self._reapply_task, self._inflight) if t is not None],
            return_exceptions=True,
        )
        self.loading = False

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    def search(self, text: str) -> None:
        """
        Record search text and fire a page-1 request after the quiet period.

        Each call restarts the quiet period. Must be called from within a
        running event loop.
        """
        self.state.search = text
        if self._debounce_task is not None and not self._debounce_task.done():
            self._debounce_task.cancel()
        loop = asyncio.get_running_loop()
        self._debounce_task = loop.create_task(self._debounced_search())

    async def _debounced_search(self) -> None:
        await asyncio.sleep(self.debounce_seconds)
        await self._run_background(self.fetch(page=1))

    async def submit_search(self, text: str) -> Optional[ListingPage]:
        """Search immediately, skipping the quiet period."""
        self.state.search = text
        return await self.fetch(page=1)

    async def set_search_mode(self, mode: SearchMode) -> Optional[ListingPage]:
        """Change the search mode; re-query only when there is search text."""
        self.state.search_mode = SearchMode(mode)
        if self.state.search:
            return await self.fetch(page=1)
        return None

    # -------------------------------------------------------------------------
    # Quick filters
    # -------------------------------------------------------------------------

    def _set_quick(self, quick: QuickFilters) -> None:
        self.state.quick = quick

    def set_status(self, status: str) -> None:
        self._set_quick(self.state.quick.with_changes(status=status or ""))
        self.preferences.set_status(self.state.quick.status)

    def set_departments(self, ids: Sequence[str]) -> None:
        self._set_quick(self.state.quick.with_changes(department_ids=list(dict.fromkeys(ids))))
        self.preferences.set_departments(self.state.quick.department_ids)

    def toggle_department(self, department_id: str) -> None:
        current = list(self.state.quick.department_ids)
        key = str(department_id)
        self.set_departments([d for d in current if d != key] if key in current else [*current, key])

    def set_positions(self, ids: Sequence[str]) -> None:
        self._set_quick(self.state.quick.with_changes(position_ids=list(dict.fromkeys(ids))))
        self.preferences.set_positions(self.state.quick.position_ids)

    def toggle_position(self, position_id: str) -> None:
        current = list(self.state.quick.position_ids)
        key = str(position_id)
        self.set_positions([p for p in current if p != key] if key in current else [*current, key])

    def set_employee_type(self, employee_type: str) -> None:
        self._set_quick(self.state.quick.with_changes(employee_type=employee_type or ""))
        self.preferences.set_employee_type(self.state.quick.employee_type)

    async def apply_quick_filters(self) -> Optional[ListingPage]:
        """Apply the quick filter selections, back to page 1."""
        self.preferences.save_quick_filters(self.state.quick)
        return await self.fetch(page=1)

    async def toggle_show_deleted(self) -> Optional[ListingPage]:
        """Flip "show deleted" and re-query page 1 with facet lists."""
        flag = not self.state.quick.show_deleted
        self._set_quick(self.state.quick.with_changes(show_deleted=flag))
        self.preferences.set_show_deleted(flag)
        return await self.fetch(page=1, need_dropdowns=True)

    async def remove_quick_filter(self, name: str) -> Optional[ListingPage]:
        """
        Clear one quick filter from its chip and re-query page 1.

        Args:
            name: One of status, department_ids, position_ids, employee_type, show_deleted.
        """
        if name == "status":
            self.set_status("")
        elif name == "department_ids":
            self.set_departments([])
        elif name == "position_ids":
            self.set_positions([])
        elif name == "employee_type":
            self.set_employee_type("")
        elif name == "show_deleted":
            self._set_quick(self.state.quick.with_changes(show_deleted=False))
            self.preferences.set_show_deleted(False)
        else:
            raise ValueError(f"Unknown quick filter: {name}")
        return await self.fetch(page=1)

    # -------------------------------------------------------------------------
    # Sorting and pagination
    # -------------------------------------------------------------------------

    async def sort(self, column: str) -> Optional[ListingPage]:
        """Sort by a column; clicking the current ascending column flips to descending."""
        if self.state.sort_by == column and self.state.sort_order == SortOrder.ASC:
            order = SortOrder.DESC
        else:
            order = SortOrder.ASC
        self.state.sort_by = column
        self.state.sort_order = order
        return await self.fetch(page=1)

    async def change_page(self, page: int) -> Optional[ListingPage]:
        """Go to a page, keeping the scroll position at the table."""
        return await self.fetch(page=max(1, int(page)), preserve_scroll=True)

    async def change_per_page(self, per_page: int) -> Optional[ListingPage]:
        per_page = int(per_page)
        if per_page not in self.preferences.page_size_options:
            raise ValueError(f"Rows per page must be one of {self.preferences.page_size_options}")
        self.state.per_page = per_page
        self.preferences.set_per_page(per_page)
        return await self.fetch(page=1)

    # -------------------------------------------------------------------------
    # Columns and view
    # -------------------------------------------------------------------------

    def _set_visible(self, visible: List[str]) -> bool:
        """Store a new visible list; True if any column was added."""
        added = any(k not in self.state.visible_columns for k in visible)
        self.state.visible_columns = visible
        self.preferences.set_visible_columns(visible)
        return added

    async def toggle_column(self, key: str) -> Optional[ListingPage]:
        """
        Show or hide a column. Showing one re-queries so its data is loaded.

        Raises:
            ColumnLimitError: If the cap is reached; nothing changes.
        """
        visible = self.columns.toggle(self.state.visible_columns, key)
        if self._set_visible(visible):
            return await self.fetch()
        return None

    async def toggle_column_group(self, group: str) -> Optional[ListingPage]:
        """
        Show or hide a whole column group.

        Raises:
            ColumnLimitError: If the cap is reached; nothing changes.
        """
        visible = self.columns.toggle_group(self.state.visible_columns, group)
        if self._set_visible(visible):
            return await self.fetch()
        return None

    def reset_columns(self) -> None:
        self._set_visible(self.columns.reset())

    def set_view_mode(self, mode: ViewMode) -> None:
        self.state.view_mode = ViewMode(mode)
        self.preferences.set_view_mode(self.state.view_mode)

    # -------------------------------------------------------------------------
    # Advanced filters
    # -------------------------------------------------------------------------

    def _persist_filters(self, conditions: List[FilterCondition]) -> None:
        self.preferences.set_advanced_filters(conditions)

    async def apply_filters(
        self, conditions: Optional[Sequence[FilterCondition]] = None
    ) -> Optional[ListingPage]:
        """
        Apply the advanced filters, back to page 1.

        Args:
            conditions: Rows to apply instead of the current ones; they
                replace the model's rows first.
        """
        if conditions is not None:
            self.filters.replace(conditions)
        return await self.fetch(page=1, preserve_state=False)

    async def clear_advanced_filters(self) -> Optional[ListingPage]:
        """Drop all advanced rows and re-query page 1 without them."""
        self.filters.clear()
        self.preferences.clear_advanced_filters()
        return await self.fetch(page=1, preserve_state=False)

    async def remove_filter(self, condition_id: str) -> Optional[ListingPage]:
        """Remove one advanced row from its chip and re-query page 1."""
        if self.filters.remove(condition_id) is None:
            return None
        # fetch() cancels the delayed re-apply the removal may have scheduled
        return await self.fetch(page=1, preserve_state=False)

    def _on_valid_removed(self, remaining: List[FilterCondition]) -> None:
        """An effective row was removed in the panel: re-apply shortly after."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop (e.g. a synchronous UI rerun); the caller re-queries itself
            logger.debug("No running event loop, skipping delayed re-apply")
            return
        if self._reapply_task is not None and not self._reapply_task.done():
            self._reapply_task.cancel()
        self._reapply_task = loop.create_task(self._delayed_reapply())

    async def _delayed_reapply(self) -> None:
        await asyncio.sleep(self.reapply_delay_seconds)
        await self._run_background(self.fetch(page=1, preserve_state=False))

    async def clear_all(self) -> Optional[ListingPage]:
        """Reset every quick filter and advanced row, then re-query page 1."""
        self._set_quick(self.state.quick.cleared())
        self.preferences.save_quick_filters(self.state.quick)
        self.filters.clear()
        self.preferences.clear_advanced_filters()
        return await self.fetch(page=1)

    # -------------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------------

    @property
    def active_filter_count(self) -> int:
        return active_filter_count(self.state.quick, self.filters.conditions)

    @property
    def has_active_filters(self) -> bool:
        return self.active_filter_count > 0 or bool(self.state.search)
