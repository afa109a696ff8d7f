"""Tests for Schema preparation, validation and field look-up."""

from __future__ import annotations

from datetime import datetime

import pytest

from rest_layer import ID_FIELD, Field, Schema
from rest_layer.schema import UPDATED_FIELD, Array, Dict, Integer, Object, String


@pytest.fixture
def schema() -> Schema:
    return Schema(
        fields={
            "id": ID_FIELD,
            "updated": UPDATED_FIELD,
            "title": Field(required=True, validator=String(max_len=10)),
            "status": Field(default="draft", validator=String()),
            "address": Field(
                validator=Object(Schema(fields={"city": Field(filterable=True)}))
            ),
            "tags": Field(validator=Array(values=Field(validator=String()))),
            "meta": Field(validator=Dict(values=Field(filterable=True))),
        }
    )


class TestLookup:
    def test_top_level(self, schema: Schema):
        assert schema.get_field("title") is schema.fields["title"]

    def test_nested_object(self, schema: Schema):
        field = schema.get_field("address.city")
        assert field is not None
        assert field.filterable is True

    def test_dict_values(self, schema: Schema):
        field = schema.get_field("meta.anything")
        assert field is not None
        assert field.filterable is True

    def test_unknown(self, schema: Schema):
        assert schema.get_field("nope") is None
        assert schema.get_field("address.zip") is None
        assert schema.get_field("title.sub") is None


class TestCompile:
    def test_valid_schema(self, schema: Schema):
        schema.compile()

    def test_dotted_name(self):
        with pytest.raises(ValueError, match="invalid field name"):
            Schema(fields={"a.b": Field()}).compile()

    def test_invalid_default(self):
        with pytest.raises(ValueError, match="invalid default: not an integer"):
            Schema(fields={"n": Field(default="x", validator=Integer())}).compile()

    def test_nested_errors_are_prefixed(self):
        nested = Schema(fields={"": Field()})
        with pytest.raises(ValueError, match="^sub\\."):
            Schema(fields={"sub": Field(validator=Object(nested))}).compile()


class TestCreate:
    def test_hooks_and_defaults(self, schema: Schema):
        changes, base = schema.prepare({"title": "hello"})
        doc, result = schema.validate(changes, base)
        assert result.is_valid, result.errors
        assert doc["title"] == "hello"
        assert doc["status"] == "draft"
        assert isinstance(doc["id"], str)
        assert isinstance(doc["updated"], datetime)

    def test_client_id_is_kept(self, schema: Schema):
        changes, base = schema.prepare({"id": "abc", "title": "t"})
        doc, result = schema.validate(changes, base)
        assert result.is_valid
        assert doc["id"] == "abc"

    def test_collects_every_issue(self, schema: Schema):
        changes, base = schema.prepare(
            {"updated": "2020-01-01T00:00:00Z", "bogus": 1, "tags": ["a", 2]}
        )
        _, result = schema.validate(changes, base)
        assert result.errors == {
            "updated": ["read-only"],
            "bogus": ["invalid field"],
            "title": ["required"],
            "tags": ["invalid value at #1: not a string"],
        }

    def test_nested_issues_use_dotted_names(self):
        schema = Schema(
            fields={
                "address": Field(
                    validator=Object(
                        Schema(fields={"city": Field(validator=String())})
                    )
                )
            }
        )
        _, result = schema.validate({"address": {"city": 3}}, {})
        assert result.errors == {"address.city": ["not a string"]}


class TestUpdate:
    @pytest.fixture
    def original(self, schema: Schema) -> dict:
        changes, base = schema.prepare({"title": "first", "status": "live"})
        doc, _ = schema.validate(changes, base)
        return doc

    def test_patch_keeps_other_fields(self, schema: Schema, original: dict):
        changes, base = schema.prepare({"title": "second"}, original)
        doc, result = schema.validate(changes, base)
        assert result.is_valid
        assert doc["status"] == "live"
        assert doc["id"] == original["id"]
        assert doc["updated"] >= original["updated"]

    def test_none_removes_a_field(self, schema: Schema, original: dict):
        changes, base = schema.prepare({"status": None}, original)
        doc, result = schema.validate(changes, base)
        assert result.is_valid
        assert "status" not in doc

    def test_replace_resets_writable_fields(self, schema: Schema, original: dict):
        changes, base = schema.prepare({"title": "other"}, original, replace=True)
        doc, result = schema.validate(changes, base)
        assert result.is_valid
        assert doc["status"] == "draft"
        assert doc["id"] == original["id"]

    def test_read_only_field_cannot_change(self, schema: Schema, original: dict):
        changes, base = schema.prepare({"id": "other"}, original)
        _, result = schema.validate(changes, base)
        assert result.errors == {"id": ["read-only"]}

    def test_read_only_field_may_be_resent(self, schema: Schema, original: dict):
        changes, base = schema.prepare({"id": original["id"]}, original)
        _, result = schema.validate(changes, base)
        assert result.is_valid


def test_describe():
    schema = Schema(
        fields={"n": Field(required=True, read_only=True, validator=Integer())},
        description="numbers",
    )
    assert schema.describe() == {
        "type": "object",
        "properties": {"n": {"type": "integer", "readOnly": True}},
        "required": ["n"],
        "description": "numbers",
    }
