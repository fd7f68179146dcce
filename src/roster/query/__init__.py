"""Listing query state, persistence, transport and synchronization."""

from .query_state import (
    SearchMode,
    SortOrder,
    ViewMode,
    QuickFilters,
    ListingState,
    QueryState,
    build_query,
    encode_params,
    active_filter_count,
)
from .preferences import (
    PreferencesStore,
    InMemoryPreferencesStore,
    FilePreferencesStore,
    ListingPreferences,
    restore_state,
)
from .client import PageMeta, FlashMessages, ListingPage, ListingClient
from .synchronizer import ListingRequest, QuerySynchronizer
