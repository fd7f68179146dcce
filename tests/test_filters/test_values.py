"""Tests for tagged filter values."""

import pytest

from roster.filters.values import (
    EMPTY,
    BoolValue,
    DateRange,
    SelectValue,
    TextValue,
    describe,
    from_wire,
    is_empty,
    to_wire,
)


class TestIsEmpty:
    """Tests for the emptiness rule."""

    def test_empty_variants(self):
        """Test that blank shapes all count as empty."""
        assert is_empty(EMPTY)
        assert is_empty(TextValue(""))
        assert is_empty(SelectValue(()))
        assert is_empty(DateRange("", ""))

    def test_non_empty_variants(self):
        """Test that supplied values are not empty."""
        assert not is_empty(TextValue("joan"))
        assert not is_empty(SelectValue(("active",)))
        assert not is_empty(DateRange("2024-01-01", ""))
        assert not is_empty(DateRange("", "2024-12-31"))

    def test_false_is_a_value(self):
        """Test that a False boolean is still a supplied value."""
        assert not is_empty(BoolValue(False))

    def test_rejects_foreign_objects(self):
        """Test that raw JSON values are not accepted."""
        with pytest.raises(TypeError):
            is_empty("active")


class TestSelectValue:
    """Tests for SelectValue construction."""

    def test_of_drops_duplicates_keeping_order(self):
        """Test that duplicates are dropped in first-seen order."""
        value = SelectValue.of(["b", "a", "b", "c", "a"])
        assert value.options == ("b", "a", "c")


class TestWireConversion:
    """Tests for to_wire/from_wire."""

    def test_to_wire_shapes(self):
        """Test the JSON shape of each variant."""
        assert to_wire(EMPTY) is None
        assert to_wire(TextValue("x")) == "x"
        assert to_wire(SelectValue(("a", "b"))) == ["a", "b"]
        assert to_wire(DateRange("2024-01-01", "")) == ["2024-01-01", ""]
        assert to_wire(BoolValue(True)) is True

    def test_from_wire_list_depends_on_operator(self):
        """Test that between decodes lists as ranges, other operators as selections."""
        assert from_wire(["2024-01-01", "2024-02-01"], "between") == DateRange("2024-01-01", "2024-02-01")
        assert from_wire(["active", "inactive"], "in") == SelectValue(("active", "inactive"))

    def test_from_wire_short_range(self):
        """Test that a one-element range keeps a blank end."""
        assert from_wire(["2024-01-01"], "between") == DateRange("2024-01-01", "")

    def test_from_wire_blank_values(self):
        """Test that blank values decode to Empty."""
        assert from_wire(None) is EMPTY
        assert from_wire("") is EMPTY
        assert from_wire([], "in") is EMPTY

    def test_from_wire_scalars(self):
        """Test scalar decoding."""
        assert from_wire(True) == BoolValue(True)
        assert from_wire("true") == TextValue("true")
        assert from_wire(42) == TextValue("42")

    def test_from_wire_unknown_shape(self):
        """Test that objects decode to Empty."""
        assert from_wire({"a": 1}) is EMPTY


class TestDescribe:
    """Tests for human readable rendering."""

    def test_describe(self):
        """Test rendering of each variant."""
        assert describe(EMPTY) == ""
        assert describe(SelectValue(("a", "b"))) == "a, b"
        assert describe(DateRange("2024-01-01", "")) == "2024-01-01 to ..."
        assert describe(BoolValue(False)) == "No"
