"""Search bar, quick filters and active-filter chips."""

from typing import Any, Dict, List

import streamlit as st

from roster.filters import FilterBuilder
from roster.query import QuerySynchronizer, SearchMode

from .session import get_facets, run_action

SEARCH_MODE_LABELS = {
    SearchMode.ANY: "Any",
    SearchMode.ID: "ID",
    SearchMode.NAME: "Name",
    SearchMode.POSITION: "Position",
    SearchMode.DEPARTMENT: "Department",
}

STATUS_OPTIONS = ["", "active", "inactive", "on-leave"]
EMPLOYEE_TYPE_OPTIONS = ["", "Teaching", "Non-Teaching"]


def _facet_label(item: Dict[str, Any]) -> str:
    for key in ("name", "faculty_name", "pos_name", "title"):
        if item.get(key):
            return str(item[key])
    return str(item.get("id", ""))


def render_search_bar(sync: QuerySynchronizer) -> None:
    """Search mode selector plus a search box submitted on Enter."""
    col1, col2 = st.columns([1, 4])
    with col1:
        modes = list(SearchMode)
        mode = st.selectbox(
            "Search in",
            options=modes,
            index=modes.index(sync.state.search_mode),
            format_func=lambda m: SEARCH_MODE_LABELS[m],
            key="search_mode",
        )
        if mode != sync.state.search_mode:
            run_action(sync.set_search_mode(mode))
    with col2:
        text = st.text_input(
            "Search employees",
            value=sync.state.search,
            placeholder="Search by ID, name, position or department",
            key="search_text",
        )
        if text != sync.state.search:
            run_action(sync.submit_search(text))


def render_quick_filters(sync: QuerySynchronizer) -> None:
    """Quick filter form; selections are applied together with one request."""
    facets = get_facets()
    quick = sync.state.quick

    with st.form("quick_filters"):
        col1, col2 = st.columns(2)
        with col1:
            status = st.selectbox(
                "Status",
                options=STATUS_OPTIONS,
                index=STATUS_OPTIONS.index(quick.status) if quick.status in STATUS_OPTIONS else 0,
                format_func=lambda s: s or "All",
            )
            employee_type = st.selectbox(
                "Employee type",
                options=EMPLOYEE_TYPE_OPTIONS,
                index=(
                    EMPLOYEE_TYPE_OPTIONS.index(quick.employee_type)
                    if quick.employee_type in EMPLOYEE_TYPE_OPTIONS
                    else 0
                ),
                format_func=lambda s: s or "All",
            )
        with col2:
            departments = _id_options(facets["departments"])
            dept_ids = st.multiselect(
                "Departments",
                options=list(departments),
                default=[d for d in quick.department_ids if d in departments],
                format_func=lambda d: departments.get(d, d),
            )
            positions = _id_options(facets["positions"])
            pos_ids = st.multiselect(
                "Positions",
                options=list(positions),
                default=[p for p in quick.position_ids if p in positions],
                format_func=lambda p: positions.get(p, p),
            )

        if st.form_submit_button("Apply filters", type="primary"):
            sync.set_status(status)
            sync.set_employee_type(employee_type)
            sync.set_departments(dept_ids)
            sync.set_positions(pos_ids)
            run_action(sync.apply_quick_filters())
            st.rerun()

    deleted = st.toggle("Show deleted", value=quick.show_deleted, key="show_deleted")
    if deleted != quick.show_deleted:
        run_action(sync.toggle_show_deleted())
        st.rerun()


def _id_options(items: List[Dict[str, Any]]) -> Dict[str, str]:
    return {str(item.get("id")): _facet_label(item) for item in items if item.get("id") is not None}


def render_active_filter_chips(sync: QuerySynchronizer, builder: FilterBuilder) -> None:
    """One removable chip per active quick filter and per advanced row with a field."""
    if sync.active_filter_count == 0:
        return

    quick = sync.state.quick
    chips = []
    if quick.status:
        chips.append(("status", f"Status: {quick.status}"))
    if quick.department_ids:
        chips.append(("department_ids", f"Departments: {len(quick.department_ids)}"))
    if quick.position_ids:
        chips.append(("position_ids", f"Positions: {len(quick.position_ids)}"))
    if quick.employee_type:
        chips.append(("employee_type", f"Type: {quick.employee_type}"))
    if quick.show_deleted:
        chips.append(("show_deleted", "Showing deleted"))

    st.caption(f"Active filters ({sync.active_filter_count})")
    cols = st.columns(4)
    slot = 0
    for name, label in chips:
        with cols[slot % 4]:
            if st.button(f"✕ {label}", key=f"chip_{name}"):
                run_action(sync.remove_quick_filter(name))
                st.rerun()
        slot += 1

    for condition in builder.chips():
        with cols[slot % 4]:
            if st.button(f"✕ {builder.chip(condition)}", key=f"chip_{condition.id}"):
                run_action(sync.remove_filter(condition.id))
                st.rerun()
        slot += 1

    if st.button("Clear all filters", key="clear_all_filters"):
        run_action(sync.clear_all())
        st.rerun()
