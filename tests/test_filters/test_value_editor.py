"""Tests for value editor dispatch."""

import pytest

from roster.filters import FieldType, ValueControl, control_for
from roster.filters.value_editor import (
    coerce_value,
    display_boolean,
    set_boolean,
    set_date,
    set_range_bound,
    set_text,
    toggle_option,
)
from roster.filters.values import EMPTY, BoolValue, DateRange, SelectValue, TextValue


class TestControlFor:
    """Tests for control dispatch."""

    @pytest.mark.parametrize("field_type,operator,expected", [
        (FieldType.TEXT, "contains", ValueControl.TEXT),
        (FieldType.TEXT, "is_null", ValueControl.NONE),
        (FieldType.SELECT, "equals", ValueControl.SELECT),
        (FieldType.SELECT, "in", ValueControl.MULTI_SELECT),
        (FieldType.SELECT, "not_in", ValueControl.MULTI_SELECT),
        (FieldType.DATE, "less_than", ValueControl.DATE),
        (FieldType.DATE, "between", ValueControl.DATE_RANGE),
        (FieldType.BOOLEAN, "equals", ValueControl.BOOLEAN),
        (None, "contains", ValueControl.TEXT),
    ])
    def test_dispatch(self, field_type, operator, expected):
        """Test the control picked for each type/operator pair."""
        assert control_for(field_type, operator) == expected


class TestMultiSelect:
    """Tests for toggle_option."""

    def test_toggle_adds_and_removes(self):
        """Test adding two options then removing the first."""
        value = toggle_option(EMPTY, "active")
        value = toggle_option(value, "inactive")
        assert value == SelectValue(("active", "inactive"))
        value = toggle_option(value, "active")
        assert value == SelectValue(("inactive",))

    def test_removing_last_option_empties(self):
        """Test that the last removal yields Empty."""
        value = toggle_option(SelectValue(("active",)), "active")
        assert value is EMPTY

    def test_scalar_promoted(self):
        """Test that a single option becomes the first selected option."""
        assert toggle_option(TextValue("active"), "on-leave") == SelectValue(("active", "on-leave"))


class TestDateRange:
    """Tests for set_range_bound."""

    def test_set_each_bound(self):
        """Test building a range one side at a time."""
        value = set_range_bound(EMPTY, "start", "2024-01-01")
        assert value == DateRange("2024-01-01", "")
        value = set_range_bound(value, "end", "2024-03-31")
        assert value == DateRange("2024-01-01", "2024-03-31")

    def test_clearing_both_sides_empties(self):
        """Test that a range with no bounds collapses to Empty."""
        value = set_range_bound(DateRange("2024-01-01", ""), "start", "")
        assert value is EMPTY

    def test_rejects_bad_side_and_date(self):
        """Test validation at the control boundary."""
        with pytest.raises(ValueError):
            set_range_bound(EMPTY, "middle", "2024-01-01")
        with pytest.raises(ValueError):
            set_range_bound(EMPTY, "start", "01/02/2024")


class TestScalarEdits:
    """Tests for text, date and boolean edits."""

    def test_blank_text_is_empty(self):
        """Test that clearing the text box clears the value."""
        assert set_text("") is EMPTY
        assert set_text("Cruz") == TextValue("Cruz")

    def test_set_date_validates(self):
        """Test that only ISO dates are accepted."""
        assert set_date("2024-02-29") == TextValue("2024-02-29")
        with pytest.raises(ValueError):
            set_date("next tuesday")

    def test_boolean(self):
        """Test boolean edits and display."""
        assert set_boolean(False) == BoolValue(False)
        assert display_boolean(EMPTY) is False
        assert display_boolean(BoolValue(True)) is True


class TestCoerce:
    """Tests for shape conversion on operator change."""

    def test_range_to_single_date(self):
        """Test that between -> equals keeps the start date."""
        assert coerce_value(DateRange("2024-01-01", "2024-02-01"), FieldType.DATE, "equals") == TextValue(
            "2024-01-01"
        )

    def test_single_date_to_range(self):
        """Test that equals -> between keeps the date as start."""
        assert coerce_value(TextValue("2024-01-01"), FieldType.DATE, "between") == DateRange("2024-01-01", "")

    def test_selection_to_single(self):
        """Test that in -> equals keeps the first option."""
        assert coerce_value(SelectValue(("a", "b")), FieldType.SELECT, "equals") == TextValue("a")

    def test_nullary_empties(self):
        """Test that nullary operators drop the value."""
        assert coerce_value(TextValue("x"), FieldType.TEXT, "is_null") is EMPTY
