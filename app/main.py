"""
Roster - Employee Listing Streamlit Application

Run with: streamlit run app/main.py
"""

import streamlit as st
from pathlib import Path
import sys

# Add project root to path for the app package imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from roster.config import config, setup_logging
from roster.query import ViewMode

from app.components import (
    get_filter_builder,
    get_synchronizer,
    render_active_filter_chips,
    render_advanced_filter_panel,
    render_column_selector,
    render_employee_table,
    render_quick_filters,
    render_search_bar,
    run_action,
    sync_location_to_url,
)

VIEW_MODE_LABELS = {
    ViewMode.AUTO: "Auto",
    ViewMode.TABLE: "Table",
    ViewMode.CARD: "Cards",
}


def main():
    """Main application entry point."""
    st.set_page_config(
        page_title=config.app.name,
        page_icon="👥",
        layout="wide",
        initial_sidebar_state="expanded",
    )

    if "logging_configured" not in st.session_state:
        setup_logging(config.app.log_level)
        st.session_state.logging_configured = True

    sync = get_synchronizer()
    builder = get_filter_builder()

    if sync.page is None and sync.last_error is None:
        run_action(sync.load())

    # Sidebar
    with st.sidebar:
        st.title("👥 Employees")
        st.caption(f"v{config.app.version}")

        st.divider()

        st.subheader("Quick Filters")
        render_quick_filters(sync)

        st.divider()

        st.subheader("View")
        modes = list(ViewMode)
        mode = st.radio(
            "Layout",
            options=modes,
            index=modes.index(sync.state.view_mode),
            format_func=lambda m: VIEW_MODE_LABELS[m],
            horizontal=True,
        )
        if mode != sync.state.view_mode:
            sync.set_view_mode(mode)
            st.rerun()

        render_column_selector(sync)

        st.divider()
        st.caption(f"API: {config.api.base_url}{config.api.listing_path}")

    # Main content area
    st.title("Employees")

    render_search_bar(sync)
    render_advanced_filter_panel(builder)
    render_active_filter_chips(sync, builder)

    if sync.last_error is not None:
        st.error(f"Last request failed: {sync.last_error}")

    render_employee_table(sync)

    if sync.page is not None and sync.page.flash is not None:
        if sync.page.flash.success:
            st.toast(sync.page.flash.success)
        if sync.page.flash.error:
            st.toast(sync.page.flash.error)

    sync_location_to_url(sync)


if __name__ == "__main__":
    main()
