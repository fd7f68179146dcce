"""Session-scoped engine objects for the employee listing page."""

import asyncio
from typing import Awaitable, Optional, TypeVar

import streamlit as st

from roster.columns import ColumnCatalog
from roster.config import config, get_logger
from roster.exceptions import ColumnLimitError, ListingRequestError
from roster.filters import FilterBuilder, load_default_schema
from roster.query import (
    FilePreferencesStore,
    ListingClient,
    ListingPreferences,
    QuerySynchronizer,
)
from roster.config.config_loader import get_table_config

logger = get_logger("app.session")

SYNC_KEY = "roster_synchronizer"
BUILDER_KEY = "roster_filter_builder"
FACETS_KEY = "roster_facets"

T = TypeVar("T")


def run_action(coro: Awaitable[T]) -> Optional[T]:
    """
    Run one engine action to completion from a Streamlit rerun.

    Request failures are reported in the page; the previous results stay.
    """
    sync = get_synchronizer()

    async def _run():
        result = await coro
        # Let delayed re-applies scheduled during the action finish too
        await sync.drain()
        return result

    try:
        return asyncio.run(_run())
    except ListingRequestError as e:
        st.error(f"Could not load employees: {e}")
    except ColumnLimitError as e:
        st.error(str(e))
    return None


def get_synchronizer() -> QuerySynchronizer:
    """Create the synchronizer once per session, restoring cached preferences."""
    if SYNC_KEY not in st.session_state:
        table = get_table_config()
        preferences = ListingPreferences(
            FilePreferencesStore(config.preferences.path),
            resource=config.preferences.resource,
            page_size_options=table.page_size_options,
        )
        sync = QuerySynchronizer(
            client=ListingClient(),
            preferences=preferences,
            schema=load_default_schema(),
            columns=ColumnCatalog.from_config(),
            on_page=_remember_facets,
        )
        st.session_state[SYNC_KEY] = sync
        logger.info("Created listing synchronizer")
    return st.session_state[SYNC_KEY]


def get_filter_builder() -> FilterBuilder:
    """Advanced filter panel state, bound to the synchronizer's filter rows."""
    if BUILDER_KEY not in st.session_state:
        sync = get_synchronizer()
        st.session_state[BUILDER_KEY] = FilterBuilder(
            sync.filters,
            on_apply=lambda conditions: run_action(sync.apply_filters(conditions)),
            on_clear=lambda: run_action(sync.clear_advanced_filters()),
        )
    return st.session_state[BUILDER_KEY]


def _remember_facets(page) -> None:
    """Keep the last facet option lists; the server only sends them on request."""
    facets = st.session_state.setdefault(FACETS_KEY, {"departments": [], "positions": []})
    if page.departments is not None:
        facets["departments"] = page.departments
    if page.positions is not None:
        facets["positions"] = page.positions


def get_facets() -> dict:
    return st.session_state.get(FACETS_KEY, {"departments": [], "positions": []})


def sync_location_to_url(sync: QuerySynchronizer) -> None:
    """
    Mirror the latest request's parameters into the browser URL.

    The URL is replaced, never pushed, so the back button skips filter changes.
    """
    if sync.last_request is None:
        return
    params = {}
    for key, value in sync.last_request.params.items():
        params[key] = [str(v) for v in value] if isinstance(value, list) else str(value)
    st.query_params.from_dict(params)
