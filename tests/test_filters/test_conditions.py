"""Tests for filter conditions."""

import json

from roster.filters import FieldType
from roster.filters.conditions import (
    FilterCondition,
    is_valid,
    new_condition,
    serialize_conditions,
    valid_conditions,
)
from roster.filters.values import EMPTY, BoolValue, DateRange, SelectValue, TextValue


class TestValidity:
    """Tests for the validity rule."""

    def test_new_condition_is_invalid(self):
        """Test that a fresh row is incomplete."""
        condition = new_condition()
        assert condition.field == ""
        assert condition.operator == "contains"
        assert condition.value is EMPTY
        assert not is_valid(condition)

    def test_field_and_value_required(self):
        """Test that a field without a value is invalid."""
        assert not is_valid(FilterCondition(field="surname", operator="contains"))
        assert is_valid(FilterCondition(field="surname", operator="contains", value=TextValue("Cruz")))

    def test_value_without_field_is_invalid(self):
        """Test that a value alone does not make a row valid."""
        assert not is_valid(FilterCondition(field="", operator="equals", value=TextValue("x")))

    def test_nullary_operators_need_no_value(self):
        """Test is_null/is_not_null rows are valid without a value."""
        assert is_valid(FilterCondition(field="surname", operator="is_null"))
        assert is_valid(FilterCondition(field="surname", operator="is_not_null"))

    def test_empty_selection_is_invalid(self):
        """Test that an empty option list is invalid."""
        assert not is_valid(FilterCondition(field="status", operator="in", value=SelectValue(())))

    def test_blank_range_is_invalid(self):
        """Test that a range with both bounds blank is invalid, one bound is enough."""
        assert not is_valid(FilterCondition(field="date_hired", operator="between", value=DateRange("", "")))
        assert is_valid(
            FilterCondition(field="date_hired", operator="between", value=DateRange("2024-01-01", ""))
        )

    def test_false_boolean_is_valid(self):
        """Test that an explicit No is a valid value."""
        assert is_valid(FilterCondition(field="is_solo_parent", operator="equals", value=BoolValue(False)))

    def test_property_matches_function(self):
        """Test the is_valid property."""
        condition = FilterCondition(field="surname", operator="is_null")
        assert condition.is_valid is True

    def test_valid_conditions_keeps_order(self):
        """Test that invalid rows are dropped and order is kept."""
        a = FilterCondition(field="surname", value=TextValue("a"))
        b = FilterCondition()
        c = FilterCondition(field="id", operator="is_not_null")
        assert valid_conditions([a, b, c]) == [a, c]


class TestIds:
    """Tests for condition ids."""

    def test_ids_are_unique_and_stable(self):
        """Test that ids differ between rows and survive edits."""
        a = new_condition()
        b = new_condition()
        assert a.id != b.id
        assert a.id.startswith("filter-")
        assert a.with_changes(field="surname").id == a.id


class TestSerialization:
    """Tests for dict and JSON conversion."""

    def test_to_dict(self):
        """Test the wire shape."""
        condition = FilterCondition(id="f1", field="status", operator="in", value=SelectValue(("active",)))
        assert condition.to_dict() == {
            "id": "f1",
            "field": "status",
            "operator": "in",
            "value": ["active"],
        }

    def test_from_dict_boolean_strings(self):
        """Test that legacy "true"/"false" strings become booleans for boolean fields."""
        data = {"id": "f1", "field": "is_solo_parent", "operator": "equals", "value": "false"}
        condition = FilterCondition.from_dict(data, field_type=FieldType.BOOLEAN)
        assert condition.value == BoolValue(False)

    def test_from_dict_keeps_strings_for_text_fields(self):
        """Test that "true" stays text for non-boolean fields."""
        data = {"id": "f1", "field": "surname", "operator": "equals", "value": "true"}
        assert FilterCondition.from_dict(data).value == TextValue("true")

    def test_from_dict_nullary_drops_value(self):
        """Test that nullary rows never carry a value."""
        data = {"id": "f1", "field": "surname", "operator": "is_null", "value": "leftover"}
        assert FilterCondition.from_dict(data).value is EMPTY

    def test_from_dict_missing_keys(self):
        """Test defaults for a sparse mapping."""
        condition = FilterCondition.from_dict({})
        assert condition.field == ""
        assert condition.operator == "contains"
        assert condition.id.startswith("filter-")

    def test_serialize_is_compact_json(self):
        """Test the transport string."""
        condition = FilterCondition(id="f1", field="surname", operator="contains", value=TextValue("Peña"))
        encoded = serialize_conditions([condition])
        assert encoded == '[{"id":"f1","field":"surname","operator":"contains","value":"Peña"}]'
        assert json.loads(encoded)[0]["value"] == "Peña"
