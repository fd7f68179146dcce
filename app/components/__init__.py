"""Reusable UI components for the Roster employee listing."""

from .session import (
    get_synchronizer,
    get_filter_builder,
    get_facets,
    run_action,
    sync_location_to_url,
)
from .listing_toolbar import render_search_bar, render_quick_filters, render_active_filter_chips
from .advanced_filter_panel import render_advanced_filter_panel
from .employee_table import render_column_selector, render_employee_table

__all__ = [
    "get_synchronizer",
    "get_filter_builder",
    "get_facets",
    "run_action",
    "sync_location_to_url",
    "render_search_bar",
    "render_quick_filters",
    "render_active_filter_chips",
    "render_advanced_filter_panel",
    "render_column_selector",
    "render_employee_table",
]
