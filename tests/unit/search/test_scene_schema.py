"""Unit tests for the scene index schema."""

import pytest
import tantivy

from catalog_search.search.schema import (
    DEFAULT_TOKENIZER,
    RAW_TOKENIZER,
    FieldType,
    KeywordField,
    NumericField,
    Schema,
    TextField,
    create_scene_schema,
)


@pytest.mark.unit
def test_scene_schema_declares_every_document_field():
    schema = create_scene_schema()

    assert [f.name for f in schema] == ["id", "title", "description", "cast", "site", "released", "added", "duration"]
    assert schema.unique_field == "id"
    assert schema["id"].field_type is FieldType.KEYWORD
    assert schema["released"].field_type is FieldType.DATE
    assert schema["duration"].field_type is FieldType.NUMERIC


@pytest.mark.unit
def test_scene_schema_text_fields_share_default_tokenizer():
    schema = create_scene_schema()

    assert {f.name for f in schema.text_fields} == {"title", "description", "cast", "site"}
    assert all(f.tokenizer_name == DEFAULT_TOKENIZER == "default" for f in schema.text_fields)
    assert schema.default_query_fields() == ["title", "description", "cast", "site"]


@pytest.mark.unit
def test_schema_getitem_contains_len_and_boosts():
    schema = Schema(fields=[KeywordField("id"), TextField("title", boost=2.0)])

    assert schema["title"].boost == 2.0
    assert "title" in schema
    assert "missing" not in schema
    assert len(schema) == 2
    assert schema.field_boosts() == {"title": 2.0}


@pytest.mark.unit
def test_schema_raises_when_unique_field_missing():
    with pytest.raises(ValueError, match="Unique field"):
        Schema(fields=[TextField("title")], unique_field="id")


@pytest.mark.unit
def test_schema_requires_keyword_unique_field():
    with pytest.raises(ValueError, match="keyword field"):
        Schema(fields=[TextField("id")], unique_field="id")


@pytest.mark.unit
def test_stored_field_names_skip_unstored_fields():
    schema = Schema(fields=[KeywordField("id"), TextField("body", stored=False), NumericField("n")])

    assert schema.stored_field_names == ["id", "n"]


@pytest.mark.unit
def test_to_tantivy_builds_engine_schema():
    engine_schema = create_scene_schema().to_tantivy()

    assert isinstance(engine_schema, tantivy.Schema)


@pytest.mark.unit
def test_keyword_field_registers_raw_tokenizer():
    calls = []

    class _Builder:
        def add_text_field(self, name, stored, tokenizer_name):
            calls.append((name, stored, tokenizer_name))

    KeywordField("id").add_to(_Builder())

    assert calls == [("id", True, RAW_TOKENIZER)]


@pytest.mark.unit
def test_schema_rejects_duplicate_field_names():
    with pytest.raises(ValueError, match="Duplicate field 'title'"):
        Schema(fields=[KeywordField("id"), TextField("title"), TextField("title")])
