"""
Unit tests for schema discovery.
"""

import pytest

from json_connector.common.errors import FieldIdentificationError, InvalidSchemaError
from json_connector.ingest.schema_discoverer import (
    FieldDefinition,
    FieldSet,
    SchemaDiscoverer,
    discover,
    element_key,
    normalize_key,
)
from json_connector.ingest.semantic_types import ConceptType, SemanticType


def types_by_id(fields):
    return {field.id: field.semantic_type for field in fields}


class TestKeys:

    def test_normalize_key(self):
        assert normalize_key("First Name") == "first_name"
        assert normalize_key("A\tB") == "a_b"

    def test_element_key_top_level(self):
        assert element_key(None, "name") == "name"

    def test_element_key_nested(self):
        assert element_key("user", "city") == "user.city"

    def test_element_key_replaces_first_dot_only(self):
        assert element_key(None, "a.b.c") == "a_b.c"

    def test_element_key_empty(self):
        assert element_key("parent", "") is None


class TestFlatDiscovery:

    def test_top_level_scalars_typed_by_own_value(self):
        fields = discover({"Name": "Ann", "Age": 30, "Url": "http://x.co"})

        assert fields.ids() == ["name", "age", "url"]
        assert types_by_id(fields) == {
            "name": SemanticType.TEXT,
            "age": SemanticType.NUMBER,
            "url": SemanticType.URL,
        }

    def test_display_name_keeps_raw_key(self):
        fields = discover({"First Name": "Ann"})
        field = fields.get("first_name")
        assert field.name == "First Name"

    def test_metric_and_dimension(self):
        fields = discover({"count": 3, "label": "x", "active": True})
        assert fields.get("count").concept_type == ConceptType.METRIC
        assert fields.get("label").concept_type == ConceptType.DIMENSION
        assert fields.get("active").concept_type == ConceptType.DIMENSION

    def test_arrays_are_opaque_text_fields(self):
        fields = discover({"tags": ["a", "b"]})
        assert types_by_id(fields) == {"tags": SemanticType.TEXT}

    def test_empty_object_has_no_fields(self):
        assert len(discover({})) == 0


class TestNestedDiscovery:

    def test_nested_leaves_get_dotted_ids(self):
        fields = discover({"user": {"name": "Bob", "address": {"City": "NYC", "zip": 10001}}})

        assert fields.ids() == ["user.name", "user.address.city", "user.address.zip"]
        assert fields.get("user.address.city").name == "user.address.City"

    def test_nested_leaves_typed_by_own_value(self):
        fields = discover({"stats": {"views": 10, "home": "example.com"}})
        assert types_by_id(fields) == {
            "stats.views": SemanticType.NUMBER,
            "stats.home": SemanticType.URL,
        }

    def test_null_leaf_uses_bare_key_and_container_type(self):
        # Probable latent defect kept on purpose: a null leaf is named by its
        # bare key and typed from the enclosing object, so it is always TEXT
        # and loses its parent path.
        fields = discover({"user": {"id": 7, "nickname": None}})

        assert "user.nickname" not in fields
        assert fields.get("nickname").semantic_type == SemanticType.TEXT
        assert fields.get("nickname").name == "nickname"
        assert fields.get("user.id").semantic_type == SemanticType.NUMBER

    def test_top_level_null_is_text(self):
        fields = discover({"score": None})
        assert types_by_id(fields) == {"score": SemanticType.TEXT}


class TestDuplicates:

    def test_duplicate_normalised_ids_collapse_last_wins(self):
        fields = discover({"Total": "n/a", "total": 5})

        assert len(fields) == 1
        field = fields.get("total")
        assert field.name == "total"
        assert field.semantic_type == SemanticType.NUMBER

    def test_distinct_keys_give_distinct_fields(self):
        fields = discover({"a": 1, "b": 2, "c": {"d": 3}})
        assert fields.ids() == ["a", "b", "c.d"]

    def test_null_leaves_in_different_branches_overwrite(self):
        fields = discover({"a": {"x": None}, "b": {"x": None}})
        assert fields.ids() == ["x"]


class TestFailures:

    @pytest.mark.parametrize("sample", [None, 5, "text", [1, 2], True])
    def test_non_object_sample(self, sample):
        with pytest.raises(InvalidSchemaError):
            discover(sample)

    def test_empty_array_content(self):
        with pytest.raises(InvalidSchemaError):
            SchemaDiscoverer().discover_content([])

    def test_array_of_scalars_content(self):
        with pytest.raises(InvalidSchemaError):
            SchemaDiscoverer().discover_content([1, 2, 3])

    def test_empty_key_cannot_be_identified(self):
        with pytest.raises(FieldIdentificationError):
            discover({"": "value"})

    def test_error_message(self):
        with pytest.raises(InvalidSchemaError) as exc:
            discover(None)
        assert exc.value.message == "Invalid JSON format"


class TestDiscoverContent:

    def test_samples_first_row_only(self):
        fields = SchemaDiscoverer().discover_content([{"a": 1}, {"b": 2}])
        assert fields.ids() == ["a"]

    def test_single_object_content(self):
        fields = SchemaDiscoverer().discover_content({"a": 1})
        assert fields.ids() == ["a"]

    def test_non_inline_discovery_uses_top_level_keys(self):
        fields = SchemaDiscoverer(inline=False).discover({"a": 1, "b": {"c": 2}})
        assert fields.ids() == ["a", "b"]
        assert all(f.semantic_type == SemanticType.TEXT for f in fields)


class TestFieldSet:

    def test_for_ids_keeps_request_order_and_drops_unknown(self):
        fields = discover({"a": 1, "b": "x", "c": True})
        subset = fields.for_ids(["c", "missing", "a"])
        assert subset.ids() == ["c", "a"]

    def test_overwrite_keeps_first_position(self):
        fields = FieldSet()
        fields.add(FieldDefinition("a", "a", SemanticType.TEXT))
        fields.add(FieldDefinition("b", "b", SemanticType.TEXT))
        fields.add(FieldDefinition("a", "A", SemanticType.NUMBER))

        assert fields.ids() == ["a", "b"]
        assert fields.get("a").name == "A"

    def test_build(self):
        built = discover({"Age": 30}).build()
        assert built == [{
            "id": "age",
            "name": "Age",
            "dataType": "NUMBER",
            "semanticType": "NUMBER",
            "conceptType": "METRIC",
        }]

    def test_path_segments(self):
        field = FieldDefinition("user.address.city", "user.address.City", SemanticType.TEXT)
        assert field.path == ["user", "address", "city"]
