"""
Schema definition for the scene search index.

Field definitions are engine-neutral dataclasses; ``Schema.to_tantivy`` turns
them into the engine's schema. Supported field types:
- TextField: Analyzed text with a named tokenizer
- KeywordField: Exact-match identifiers (raw tokenizer)
- DateField: Day-precision dates for range queries
- NumericField: Integer values for range queries and sorting

Each field can have:
- stored: Whether the raw value is returned with search hits
- indexed: Whether the field is searchable
- boost: Field weight applied when the field is a default query field
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

import tantivy


# Tokenizers built into the engine. "default" splits on word boundaries and
# lowercases without stemming; "raw" keeps the whole value as one term.
DEFAULT_TOKENIZER = "default"
RAW_TOKENIZER = "raw"


class FieldType(str, Enum):
    """Engine value kinds a field can hold."""

    TEXT = "text"
    KEYWORD = "keyword"
    DATE = "date"
    NUMERIC = "numeric"


@dataclass(frozen=True)
class SchemaField(ABC):
    """One named field of an index schema."""

    name: str
    stored: bool = True
    indexed: bool = True
    boost: float = 1.0

    @property
    @abstractmethod
    def field_type(self) -> FieldType:
        """Value kind stored in this field."""

    @abstractmethod
    def add_to(self, builder: tantivy.SchemaBuilder) -> None:
        """Register this field on an engine schema builder."""


@dataclass(frozen=True)
class TextField(SchemaField):
    """Tokenized text matched by the fuzzy query.

    ``tokenizer_name`` selects one of the engine's registered tokenizers; the
    default splits on word boundaries and lowercases.
    """

    tokenizer_name: str = DEFAULT_TOKENIZER

    @property
    def field_type(self) -> FieldType:
        return FieldType.TEXT

    def add_to(self, builder: tantivy.SchemaBuilder) -> None:
        builder.add_text_field(self.name, stored=self.stored, tokenizer_name=self.tokenizer_name)


@dataclass(frozen=True)
class KeywordField(SchemaField):
    """
    Exact-match keyword field, stored as-is without analysis.

    Use for identifiers that must match byte-for-byte.
    """

    @property
    def field_type(self) -> FieldType:
        return FieldType.KEYWORD

    def add_to(self, builder: tantivy.SchemaBuilder) -> None:
        builder.add_text_field(self.name, stored=self.stored, tokenizer_name=RAW_TOKENIZER)


@dataclass(frozen=True)
class DateField(SchemaField):
    """Date field; values are truncated to day precision before indexing."""

    @property
    def field_type(self) -> FieldType:
        return FieldType.DATE

    def add_to(self, builder: tantivy.SchemaBuilder) -> None:
        builder.add_date_field(self.name, stored=self.stored, indexed=self.indexed, fast=True)


@dataclass(frozen=True)
class NumericField(SchemaField):
    """Signed integer field for range queries and sorting."""

    @property
    def field_type(self) -> FieldType:
        return FieldType.NUMERIC

    def add_to(self, builder: tantivy.SchemaBuilder) -> None:
        builder.add_integer_field(self.name, stored=self.stored, indexed=self.indexed, fast=True)


@dataclass
class Schema:
    """
    Named field set of one index, keyed by a unique keyword field.

    Example:
        schema = Schema(
            fields=[KeywordField("id"), TextField("title", boost=2.0), DateField("released")],
            unique_field="id",
        )
    """

    fields: list[SchemaField]
    unique_field: str = "id"
    name: str = "default"

    def __post_init__(self) -> None:
        self._by_name: dict[str, SchemaField] = {}
        for schema_field in self.fields:
            if schema_field.name in self._by_name:
                raise ValueError(f"Duplicate field '{schema_field.name}' in schema {self.name}")
            self._by_name[schema_field.name] = schema_field

        unique = self._by_name.get(self.unique_field)
        if unique is None:
            raise ValueError(f"Unique field '{self.unique_field}' not found in schema {self.name}")
        if not isinstance(unique, KeywordField):
            raise ValueError(f"Unique field '{self.unique_field}' must be a keyword field")

    def __getitem__(self, name: str) -> SchemaField:
        return self._by_name[name]

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

    def __iter__(self):
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    @property
    def text_fields(self) -> list[TextField]:
        return [f for f in self.fields if isinstance(f, TextField)]

    @property
    def stored_field_names(self) -> list[str]:
        return [f.name for f in self.fields if f.stored]

    def default_query_fields(self) -> list[str]:
        """Fields searched when a query term carries no field prefix."""
        return [f.name for f in self.text_fields if f.indexed]

    def field_boosts(self) -> dict[str, float]:
        return {f.name: f.boost for f in self.text_fields if f.boost != 1.0}

    def to_tantivy(self) -> tantivy.Schema:
        """Build the engine schema for these fields."""
        builder = tantivy.SchemaBuilder()
        for schema_field in self.fields:
            schema_field.add_to(builder)
        return builder.build()


def create_scene_schema() -> Schema:
    """
    Create the schema for the scene index.

    All text fields share the engine's "default" tokenizer: split on word
    boundaries, lowercase, no stemming.

    Fields:
    - id: Scene identifier (keyword, unique)
    - title: Scene title
    - description: Synopsis
    - cast: Cast names, spaced and concatenated
    - site: Publishing site
    - released: Release date, day precision
    - added: Date the scene entered the catalog, day precision
    - duration: Length in seconds
    """
    return Schema(
        name="scenes",
        unique_field="id",
        fields=[
            KeywordField("id"),
            TextField("title"),
            TextField("description"),
            TextField("cast"),
            TextField("site"),
            DateField("released"),
            DateField("added"),
            NumericField("duration"),
        ],
    )
