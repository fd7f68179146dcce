"""Employee table, column selector, pagination and exports."""

import pandas as pd
import streamlit as st

from roster.config import config
from roster.export import ListingExporter, export_filename, rows_to_frame
from roster.query import QuerySynchronizer, ViewMode

from .session import run_action


def render_column_selector(sync: QuerySynchronizer) -> None:
    """Grouped column picker with search, capped at the catalog's maximum."""
    catalog = sync.columns
    visible = sync.state.visible_columns

    with st.expander(f"Columns ({len(visible)}/{catalog.max_visible})"):
        term = st.text_input("Search columns", key="column_search")
        groups = catalog.search_groups(term)
        if not groups:
            st.caption("No columns match your search")

        for group in groups:
            keys = catalog.group_columns(group)
            shown = sum(1 for k in keys if k in visible)
            col1, col2 = st.columns([3, 1])
            with col1:
                st.markdown(f"**{catalog.group_label(group)}** ({shown}/{len(keys)})")
            with col2:
                action = "Hide all" if keys and shown == len(keys) else "Show all"
                if st.button(action, key=f"colgroup_{group}"):
                    run_action(sync.toggle_column_group(group))
                    st.rerun()
            for key in keys:
                column = catalog.get(key)
                checked = st.checkbox(
                    column.label if column else key,
                    value=key in visible,
                    key=f"col_{key}",
                    disabled=bool(column and column.always_visible),
                )
                if checked != (key in visible):
                    run_action(sync.toggle_column(key))
                    st.rerun()

        if st.button("Reset to default", key="columns_reset"):
            sync.reset_columns()
            st.success("Columns reset to default")
            st.rerun()


def render_employee_table(sync: QuerySynchronizer) -> None:
    """Render the current page in the chosen view mode."""
    page = sync.page
    if page is None:
        st.info("No results loaded yet.")
        return

    columns = sync.columns.data_columns(sync.state.visible_columns)
    df = rows_to_frame(page.data, columns)

    if sync.loading:
        st.caption("Loading...")

    if df.empty:
        st.info("No employees match the current filters.")
    elif sync.state.view_mode == ViewMode.CARD:
        _render_cards(df)
    else:
        st.dataframe(df, use_container_width=True, hide_index=True)

    _render_sort_controls(sync, columns)
    _render_pagination(sync)
    _render_exports(sync, columns)


def _render_cards(df: pd.DataFrame) -> None:
    for _, row in df.iterrows():
        with st.container(border=True):
            for label, value in row.items():
                st.markdown(f"**{label}:** {value}")


def _render_sort_controls(sync: QuerySynchronizer, columns) -> None:
    keys = [c.key for c in columns]
    if not keys:
        return
    labels = {c.key: c.label for c in columns}
    col1, col2 = st.columns([3, 1])
    with col1:
        current = sync.state.sort_by if sync.state.sort_by in keys else keys[0]
        column = st.selectbox(
            "Sort by",
            options=keys,
            index=keys.index(current),
            format_func=lambda k: labels.get(k, k),
            key="sort_column",
        )
    with col2:
        arrow = "▲" if sync.state.sort_order.value == "asc" else "▼"
        if st.button(f"Sort {arrow}", key="sort_apply"):
            run_action(sync.sort(column))
            st.rerun()


def _render_pagination(sync: QuerySynchronizer) -> None:
    meta = sync.page.meta
    col1, col2, col3, col4 = st.columns([1, 2, 1, 1])
    with col1:
        if st.button("◀ Prev", disabled=meta.current_page <= 1, key="page_prev"):
            run_action(sync.change_page(meta.current_page - 1))
            st.rerun()
    with col2:
        st.caption(
            f"Showing {meta.from_ or 0}-{meta.to or 0} of {meta.total:,} "
            f"(page {meta.current_page} of {meta.last_page})"
        )
    with col3:
        if st.button("Next ▶", disabled=meta.current_page >= meta.last_page, key="page_next"):
            run_action(sync.change_page(meta.current_page + 1))
            st.rerun()
    with col4:
        options = list(sync.preferences.page_size_options)
        per_page = st.selectbox(
            "Rows",
            options=options,
            index=options.index(sync.state.per_page) if sync.state.per_page in options else 0,
            key="per_page",
        )
        if per_page != sync.state.per_page:
            run_action(sync.change_per_page(per_page))
            st.rerun()


def _render_exports(sync: QuerySynchronizer, columns) -> None:
    exporter = ListingExporter(config.app.exports_path)
    rows = sync.page.data
    col1, col2 = st.columns(2)
    with col1:
        st.download_button(
            label="📥 Export CSV",
            data=exporter.export_csv_buffer(rows, columns).getvalue(),
            file_name=export_filename("csv"),
            mime="text/csv",
            disabled=not rows,
        )
    with col2:
        st.download_button(
            label="📥 Export Excel",
            data=exporter.export_excel_buffer(rows, columns),
            file_name=export_filename("xlsx"),
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            disabled=not rows,
        )
