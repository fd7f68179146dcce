"""Tests for query state snapshots and parameter encoding."""

import json

import httpx
import pytest

from roster.filters import FilterCondition
from roster.filters.values import SelectValue, TextValue
from roster.query import (
    ListingState,
    QueryState,
    QuickFilters,
    SearchMode,
    SortOrder,
    active_filter_count,
    build_query,
)


def _status_filter():
    return FilterCondition(id="f1", field="status", operator="equals", value=TextValue("active"))


class TestQuickFilters:
    """Tests for QuickFilters."""

    def test_inactive_by_default(self):
        """Test the default quick filters."""
        quick = QuickFilters()
        assert not quick.is_active
        assert quick.active_count == 0

    def test_active_count(self):
        """Test that each set quick filter counts once."""
        quick = QuickFilters(status="active", department_ids=("1", "2"), show_deleted=True)
        assert quick.active_count == 3
        assert quick.cleared() == QuickFilters()

    def test_with_changes_normalizes_ids(self):
        """Test that id lists become string tuples."""
        quick = QuickFilters().with_changes(department_ids=[3, 4])
        assert quick.department_ids == ("3", "4")


class TestToParams:
    """Tests for QueryState.to_params."""

    def test_defaults_strip_empty_values(self):
        """Test that blank keys are omitted."""
        params = QueryState().to_params()
        assert params == {
            "page": 1,
            "per_page": 10,
            "search_mode": "any",
            "show_deleted": "false",
            "sort_by": "created_at",
            "sort_order": "asc",
            "visible_columns": "[]",
        }

    def test_advanced_filters_absent_without_valid_rows(self):
        """Test that only invalid rows leave the key out entirely."""
        state = QueryState(advanced_filters=(FilterCondition(), FilterCondition(field="surname")))
        assert "advanced_filters" not in state.to_params()

    def test_advanced_filters_encoded(self):
        """Test that valid rows are sent as one compact JSON string."""
        state = QueryState(advanced_filters=(_status_filter(), FilterCondition()))
        encoded = json.loads(state.to_params()["advanced_filters"])
        assert encoded == [{"id": "f1", "field": "status", "operator": "equals", "value": "active"}]

    def test_single_department_sends_legacy_key(self):
        """Test the singular keys for exactly one selected id."""
        params = QueryState(quick=QuickFilters(department_ids=("7",), position_ids=("1", "2"))).to_params()
        assert params["department_ids"] == ["7"]
        assert params["department_id"] == "7"
        assert "position_id" not in params
        assert params["position_ids"] == ["1", "2"]

    def test_need_dropdowns_with_active_quick_filter(self):
        """Test that facet lists are requested when a quick filter is active."""
        assert QueryState(quick=QuickFilters(status="active")).to_params()["need_dropdowns"] == "true"
        assert QueryState(quick=QuickFilters(show_deleted=True)).to_params()["need_dropdowns"] == "true"
        assert QueryState(need_dropdowns=True).to_params()["need_dropdowns"] == "true"
        assert "need_dropdowns" not in QueryState().to_params()

    def test_visible_columns_json(self):
        """Test that visible columns are a JSON array string."""
        params = QueryState(visible_columns=("id", "surname")).to_params()
        assert params["visible_columns"] == '["id","surname"]'

    def test_idempotent(self):
        """Test that the same filter set encodes identically twice."""
        state = QueryState(advanced_filters=(_status_filter(),), quick=QuickFilters(position_ids=("3",)))
        assert state.to_params() == state.to_params()
        assert state.to_query_string() == state.to_query_string()


class TestQueryString:
    """Tests for QueryState.to_query_string."""

    def test_list_keys_get_brackets(self):
        """Test the [] suffix on list parameters."""
        query = QueryState(quick=QuickFilters(department_ids=("1", "2"))).to_query_string()
        parsed = httpx.QueryParams(query)
        assert parsed.get_list("department_ids[]") == ["1", "2"]
        assert "department_ids" not in parsed

    def test_starts_with_page(self):
        """Test the parameter order."""
        assert QueryState(page=3).to_query_string().startswith("page=3&per_page=10")


class TestBuildQuery:
    """Tests for build_query snapshots."""

    def test_overrides_do_not_touch_state(self):
        """Test that per-request overrides leave the state alone."""
        state = ListingState(search="joan", page=4)
        query = build_query(state, [], page=1, status="active")
        assert query.page == 1
        assert query.quick.status == "active"
        assert state.page == 4
        assert state.quick.status == ""

    def test_only_valid_conditions_are_kept(self):
        """Test that invalid rows are dropped in the snapshot."""
        query = build_query(ListingState(), [FilterCondition(), _status_filter()])
        assert [c.id for c in query.advanced_filters] == ["f1"]

    def test_sort_and_mode(self):
        """Test sort and search mode overrides."""
        query = build_query(
            ListingState(), [], sort_by="surname", sort_order=SortOrder.DESC, search_mode=SearchMode.NAME
        )
        params = query.to_params()
        assert params["sort_by"] == "surname"
        assert params["sort_order"] == "desc"
        assert params["search_mode"] == "name"

    def test_unknown_override(self):
        """Test that misspelled overrides are rejected."""
        with pytest.raises(TypeError):
            build_query(ListingState(), [], colour="red")


class TestActiveFilterCount:
    """Tests for the toolbar badge count."""

    def test_counts_quick_and_rows_with_field(self):
        """Test that rows with a field count even when incomplete."""
        rows = [FilterCondition(field="surname"), FilterCondition(), _status_filter()]
        quick = QuickFilters(employee_type="Teaching")
        assert active_filter_count(quick, rows) == 3

    def test_select_value_rows(self):
        """Test with a multi-select row."""
        rows = [FilterCondition(field="status", operator="in", value=SelectValue(("active",)))]
        assert active_filter_count(QuickFilters(), rows) == 1
