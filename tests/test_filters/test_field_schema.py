"""Tests for the field catalog."""

from roster.filters import FieldSchema, FieldType, load_default_schema


class TestFieldSchema:
    """Tests for FieldSchema parsing and lookup."""

    def test_from_config(self, schema):
        """Test that groups and fields are parsed in order."""
        assert [g.key for g in schema.groups] == ["identification", "employment", "personal"]
        assert len(schema) == 7
        assert "status" in schema
        assert schema.get("status").options == ["active", "inactive", "on-leave"]

    def test_group_labels(self, schema):
        """Test configured labels and the title-cased fallback."""
        assert schema.group_label("employment") == "Employment Details"
        assert schema.group_label("personal") == "Personal"

    def test_unrecognized_type_is_kept(self, schema):
        """Test that an unknown type is kept as None with the declared string."""
        cfg = schema.get("blood_type")
        assert cfg is not None
        assert cfg.type is None
        assert cfg.declared_type == "rating"

    def test_label_and_type_lookup(self, schema):
        """Test fallbacks for missing keys."""
        assert schema.label_for("date_hired") == "Date Hired"
        assert schema.label_for("missing") == "missing"
        assert schema.type_for("date_hired") == FieldType.DATE
        assert schema.type_for("missing") is None

    def test_empty_config(self):
        """Test that an empty catalog is allowed."""
        schema = FieldSchema.from_config({})
        assert len(schema) == 0
        assert schema.search("x") == []

    def test_malformed_entries_skipped(self):
        """Test that groups and fields of the wrong shape are dropped."""
        schema = FieldSchema.from_config({
            "identification": ["surname"],
            "employment": {
                "status": "select",
                "position": {"type": "select", "options": "Teacher I"},
                "date_hired": {"type": "date"},
            },
        })
        assert [g.key for g in schema.groups] == ["employment"]
        assert sorted(schema.fields) == ["date_hired", "position"]
        assert schema.get("position").options == []

    def test_non_mapping_config(self):
        """Test that a catalog that is not a mapping yields an empty schema."""
        assert len(FieldSchema.from_config(["surname"])) == 0


class TestFieldSearch:
    """Tests for grouped field search."""

    def test_blank_term_returns_everything(self, schema):
        """Test that no term returns every group."""
        assert len(schema.search("")) == 3

    def test_matches_field_label_only_keeps_matching_fields(self, schema):
        """Test that only matching fields are returned, grouped."""
        groups = schema.search("sur")
        assert [g.key for g in groups] == ["identification"]
        assert [f.key for f in groups[0].fields] == ["surname"]

    def test_matches_key(self, schema):
        """Test matching on the field key."""
        groups = schema.search("date_h")
        assert [f.key for g in groups for f in g.fields] == ["date_hired"]

    def test_group_label_match_returns_whole_group(self, schema):
        """Test that a group label match keeps all of its fields."""
        groups = schema.search("EMPLOYMENT det")
        assert [g.key for g in groups] == ["employment"]
        assert len(groups[0].fields) == 3

    def test_no_match(self, schema):
        """Test that unmatched terms return nothing."""
        assert schema.search("zzz") == []


class TestDefaultSchema:
    """Tests for the packaged catalog."""

    def test_load_default_schema(self):
        """Test that the packaged yaml loads with typed fields."""
        schema = load_default_schema()
        assert schema.type_for("status") == FieldType.SELECT
        assert schema.type_for("date_hired") == FieldType.DATE
        assert schema.type_for("is_solo_parent") == FieldType.BOOLEAN
        assert schema.type_for("surname") == FieldType.TEXT
