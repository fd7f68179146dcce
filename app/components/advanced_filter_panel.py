"""Advanced filter panel for the employee listing.

Each row picks a field from the grouped catalog, an operator for that
field's type and a value in the control the operator calls for.
"""

from datetime import date
from typing import Optional

import streamlit as st

from roster.filters import FilterBuilder, FilterCondition, ValueControl
from roster.filters.value_editor import display_boolean
from roster.filters.values import DateRange, TextValue

from .session import run_action


def render_advanced_filter_panel(builder: FilterBuilder) -> None:
    """Render the panel inside an expander."""
    label = "Advanced Filters"
    if builder.badge_count:
        label += f" ({builder.badge_count})"

    with st.expander(label, expanded=builder.is_open):
        conditions = builder.model.conditions
        if not conditions:
            st.caption("No filters yet. Add one to narrow the employee list.")

        for index, condition in enumerate(conditions):
            _render_condition_row(builder, condition, index)

        col1, col2, col3 = st.columns(3)
        with col1:
            if st.button("Add filter", key="adv_add", use_container_width=True):
                builder.open()
                builder.add()
                st.rerun()
        with col2:
            if st.button(
                "Apply",
                key="adv_apply",
                type="primary",
                disabled=not builder.apply_enabled,
                use_container_width=True,
            ):
                builder.apply()
                st.rerun()
        with col3:
            if st.button("Clear all", key="adv_clear", disabled=not conditions, use_container_width=True):
                builder.clear_all()
                st.rerun()


def _render_condition_row(builder: FilterBuilder, condition: FilterCondition, index: int) -> None:
    cid = condition.id
    st.markdown(f"**{index + 1}.** {builder.summary(condition)}")

    if builder.shows_field_selector(condition):
        _render_field_selector(builder, condition)
    elif st.button("Change field", key=f"{cid}_change"):
        builder.open_field_selector(cid)
        st.rerun()

    if not condition.field:
        st.warning("Select a field for this filter")
    else:
        col1, col2 = st.columns([1, 2])
        with col1:
            operators = builder.operators(condition)
            values = [op.value for op in operators]
            labels = {op.value: op.label for op in operators}
            current = values.index(condition.operator) if condition.operator in values else 0
            chosen = st.selectbox(
                "Operator",
                options=values,
                index=current,
                format_func=lambda v: labels.get(v, v),
                key=f"{cid}_op",
            )
            if chosen != condition.operator:
                builder.set_operator(cid, chosen)
                st.rerun()
        with col2:
            _render_value_control(builder, condition)

    if st.button("Remove", key=f"{cid}_remove"):
        run_action(_remove(builder, cid))
        st.rerun()
    st.divider()


async def _remove(builder: FilterBuilder, condition_id: str) -> Optional[FilterCondition]:
    # Removing an effective row schedules a re-apply on the running loop
    return builder.remove(condition_id)


def _render_field_selector(builder: FilterBuilder, condition: FilterCondition) -> None:
    cid = condition.id
    term = st.text_input("Search fields", value=builder.field_search, key=f"{cid}_field_search")
    if term != builder.field_search:
        builder.search_fields(term)

    groups = builder.visible_groups()
    if not groups:
        st.caption("No fields match your search")
        return

    for group in groups:
        # Matching groups open automatically while searching
        expanded = bool(builder.field_search) or builder.is_expanded(group.key)
        with st.expander(f"{group.label} ({len(group.fields)})", expanded=expanded):
            for field_cfg in group.fields:
                if st.button(field_cfg.label, key=f"{cid}_pick_{field_cfg.key}"):
                    builder.choose_field(cid, field_cfg.key)
                    st.rerun()


def _render_value_control(builder: FilterBuilder, condition: FilterCondition) -> None:
    cid = condition.id
    control = builder.control(condition)
    value = condition.value

    if control == ValueControl.NONE:
        st.caption("No value needed")

    elif control == ValueControl.TEXT:
        current = value.text if isinstance(value, TextValue) else ""
        text = st.text_input("Value", value=current, key=f"{cid}_text")
        if text != current:
            builder.set_text(cid, text)

    elif control == ValueControl.SELECT:
        options = [""] + builder.options(condition)
        current = value.text if isinstance(value, TextValue) else ""
        chosen = st.selectbox(
            "Value",
            options=options,
            index=options.index(current) if current in options else 0,
            format_func=lambda o: o or "Select...",
            key=f"{cid}_select",
        )
        if chosen != current:
            builder.set_option(cid, chosen)
            st.rerun()

    elif control == ValueControl.MULTI_SELECT:
        selected = builder.selected_options(condition)
        options = builder.options(condition)
        chosen = st.multiselect(
            "Values",
            options=options,
            default=[o for o in selected if o in options],
            key=f"{cid}_multi",
        )
        for option in [o for o in chosen if o not in selected] + [o for o in selected if o not in chosen]:
            builder.toggle_option(cid, option)

    elif control == ValueControl.DATE:
        current = _parse_date(value.text if isinstance(value, TextValue) else "")
        picked = st.date_input("Date", value=current, key=f"{cid}_date")
        iso = picked.isoformat() if isinstance(picked, date) else ""
        if iso and iso != (current.isoformat() if current else ""):
            builder.set_date(cid, iso)

    elif control == ValueControl.DATE_RANGE:
        rng = value if isinstance(value, DateRange) else DateRange()
        col1, col2 = st.columns(2)
        with col1:
            start = st.date_input("From", value=_parse_date(rng.start), key=f"{cid}_from")
        with col2:
            end = st.date_input("To", value=_parse_date(rng.end), key=f"{cid}_to")
        start_iso = start.isoformat() if isinstance(start, date) else ""
        end_iso = end.isoformat() if isinstance(end, date) else ""
        if start_iso != rng.start:
            builder.set_range_bound(cid, "start", start_iso)
        if end_iso != rng.end:
            builder.set_range_bound(cid, "end", end_iso)

    elif control == ValueControl.BOOLEAN:
        key = f"{cid}_bool"
        # Unset shows as off but stays unset until the switch is touched
        st.toggle(
            "Yes",
            value=display_boolean(value),
            key=key,
            on_change=lambda: builder.set_boolean(cid, st.session_state[key]),
        )


def _parse_date(iso: str) -> Optional[date]:
    try:
        return date.fromisoformat(iso) if iso else None
    except ValueError:
        return None
