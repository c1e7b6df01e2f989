"""Index store backed by an embedded tantivy index.

``SceneIndex`` owns one named index directory: it creates the index on first
use, reopens it on later runs, and exposes the small surface the indexing
pipeline and the query engine need (exists/put/delete/search/commit/close).

Writes are buffered in the engine's writer until ``commit``; the handle keeps
track of ids written or deleted since the last commit so ``exists`` reflects
them immediately.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Any

import tantivy

from catalog_search.search.mapper import IndexedDocument
from catalog_search.search.schema import (
    DateField,
    KeywordField,
    NumericField,
    Schema,
    TextField,
    create_scene_schema,
)


logger = logging.getLogger(__name__)

DEFAULT_HEAP_SIZE = 50_000_000
SCORE_DESCENDING = "-_score"
SCORE_ASCENDING = "_score"

# Exceptions the engine bindings raise for engine-level failures.
_ENGINE_ERRORS = (ValueError, RuntimeError, OSError)
_SYNTAX_ERROR_PREFIX = "Syntax Error"


class IndexStoreError(Exception):
    """Base error for index store operations."""


class IndexOpenError(IndexStoreError):
    """Raised when the index storage cannot be created or opened."""


class DocumentWriteError(IndexStoreError):
    """Raised when a single document cannot be written."""

    def __init__(self, scene_id: str, reason: object) -> None:
        super().__init__(f"Failed to index scene {scene_id}: {reason}")
        self.scene_id = scene_id


class DocumentDeleteError(IndexStoreError):
    """Raised when a single document cannot be deleted."""

    def __init__(self, scene_id: str, reason: object) -> None:
        super().__init__(f"Failed to delete scene {scene_id} from index: {reason}")
        self.scene_id = scene_id


class QueryError(IndexStoreError):
    """Raised when a query cannot be parsed or executed."""


@dataclass(frozen=True, slots=True)
class SearchHit:
    """One ranked hit with the requested stored fields."""

    id: str
    score: float
    fields: dict[str, Any] = field(default_factory=dict)


class SceneIndex:
    """Handle on one named scene index."""

    def __init__(
        self,
        index: tantivy.Index,
        schema: Schema,
        path: Path,
        *,
        read_only: bool = False,
        heap_size: int = DEFAULT_HEAP_SIZE,
    ) -> None:
        self._index = index
        self.schema = schema
        self.path = path
        self.read_only = read_only
        self._writer: tantivy.IndexWriter | None = None
        self._pending_puts: set[str] = set()
        self._pending_deletes: set[str] = set()
        self._closed = False

        if not read_only:
            try:
                self._writer = index.writer(heap_size=heap_size)
            except _ENGINE_ERRORS as exc:
                raise IndexOpenError(f"Cannot open writer for index at {path}: {exc}") from exc

    @classmethod
    def open_or_create(
        cls,
        name: str,
        root: str | Path,
        *,
        schema: Schema | None = None,
        read_only: bool = False,
        heap_size: int = DEFAULT_HEAP_SIZE,
    ) -> SceneIndex:
        """Open the index ``root/name``, creating it if it does not exist yet.

        Raises:
            IndexOpenError: the directory or the index cannot be created/opened.
        """
        schema = schema or create_scene_schema()
        path = Path(root) / name
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise IndexOpenError(f"Cannot create index directory {path}: {exc}") from exc

        try:
            if tantivy.Index.exists(str(path)):
                index = tantivy.Index.open(str(path))
                logger.debug("Opened existing index at %s", path)
            else:
                # reuse=True opens an index created concurrently instead of failing.
                index = tantivy.Index(schema.to_tantivy(), path=str(path), reuse=True)
                logger.info("Created index %s at %s", name, path)
        except _ENGINE_ERRORS as exc:
            raise IndexOpenError(f"Cannot open index at {path}: {exc}") from exc

        return cls(index, schema, path, read_only=read_only, heap_size=heap_size)

    def __enter__(self) -> SceneIndex:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def _id_query(self, scene_id: str) -> tantivy.Query:
        return tantivy.Query.term_query(self._index.schema, self.schema.unique_field, scene_id)

    def _require_writer(self) -> tantivy.IndexWriter:
        if self._closed:
            raise IndexStoreError(f"Index at {self.path} is closed")
        if self._writer is None:
            raise IndexStoreError(f"Index at {self.path} is open read-only")
        return self._writer

    def _to_engine_document(self, document: IndexedDocument) -> tantivy.Document:
        engine_doc = tantivy.Document()
        for name, value in document.to_fields().items():
            schema_field = self.schema[name]
            if isinstance(schema_field, (TextField, KeywordField)):
                engine_doc.add_text(name, str(value))
            elif isinstance(schema_field, DateField):
                engine_doc.add_date(name, value)
            elif isinstance(schema_field, NumericField):
                engine_doc.add_integer(name, int(value))
        return engine_doc

    def exists(self, scene_id: str) -> bool:
        """Whether a document for ``scene_id`` is indexed.

        Lookup failures are reported as "not indexed" rather than raised.
        """
        if scene_id in self._pending_puts:
            return True
        if scene_id in self._pending_deletes or self._closed:
            return False
        try:
            result = self._index.searcher().search(self._id_query(scene_id), 1)
        except _ENGINE_ERRORS as exc:
            logger.debug("Existence check for %s failed: %s", scene_id, exc)
            return False
        return bool(result.count)

    def put(self, scene_id: str, document: IndexedDocument) -> None:
        """Write ``document`` for ``scene_id``, replacing any previous document.

        Raises:
            DocumentWriteError: the engine rejected the document.
        """
        writer = self._require_writer()
        try:
            writer.delete_documents_by_query(self._id_query(scene_id))
            writer.add_document(self._to_engine_document(document))
        except (*_ENGINE_ERRORS, TypeError) as exc:
            raise DocumentWriteError(scene_id, exc) from exc
        self._pending_deletes.discard(scene_id)
        self._pending_puts.add(scene_id)

    def delete(self, scene_id: str) -> None:
        """Remove the document for ``scene_id``; a missing document is not an error.

        Raises:
            DocumentDeleteError: the engine rejected the delete.
        """
        writer = self._require_writer()
        try:
            writer.delete_documents_by_query(self._id_query(scene_id))
        except _ENGINE_ERRORS as exc:
            raise DocumentDeleteError(scene_id, exc) from exc
        self._pending_puts.discard(scene_id)
        self._pending_deletes.add(scene_id)

    def commit(self) -> None:
        """Persist buffered writes and make them visible to new searchers."""
        writer = self._require_writer()
        try:
            writer.commit()
            self._index.reload()
        except _ENGINE_ERRORS as exc:
            raise IndexStoreError(f"Commit failed for index at {self.path}: {exc}") from exc
        self._pending_puts.clear()
        self._pending_deletes.clear()

    def count(self) -> int:
        """Number of committed documents."""
        try:
            self._index.reload()
            return int(self._index.searcher().num_docs)
        except _ENGINE_ERRORS as exc:
            raise IndexStoreError(f"Cannot count documents in {self.path}: {exc}") from exc

    def _parse(self, query_string: str) -> tantivy.Query:
        """Parse with the strict grammar, retrying leniently on syntax errors.

        Free text such as ``Doe's`` is a syntax error to the strict parser; the
        lenient parser turns it into plain terms and drops what it cannot read.
        Other strict failures, such as an unknown field, still fail the query.
        """
        default_fields = self.schema.default_query_fields()
        boosts = self.schema.field_boosts()
        try:
            return self._index.parse_query(query_string, default_fields, field_boosts=boosts)
        except ValueError as exc:
            if not str(exc).startswith(_SYNTAX_ERROR_PREFIX):
                raise QueryError(f"Invalid query {query_string!r}: {exc}") from exc
            logger.debug("Strict parse of %r failed (%s), retrying leniently", query_string, exc)

        try:
            query, errors = self._index.parse_query_lenient(query_string, default_fields, field_boosts=boosts)
        except ValueError as exc:
            raise QueryError(f"Invalid query {query_string!r}: {exc}") from exc
        if errors:
            logger.debug("Lenient parse of %r dropped: %s", query_string, "; ".join(str(error) for error in errors))
        return query

    def search(
        self,
        query_string: str,
        fields: list[str] | None = None,
        max_results: int = 25,
        sort_by: str = SCORE_DESCENDING,
    ) -> list[SearchHit]:
        """Run a query-string query and return ranked hits.

        The grammar is the engine's: ``title:foo``, ``+must -mustnot``,
        ``"exact phrase"``, ``AND``/``OR``, ``released:[a TO b]``. Unprefixed
        terms are matched against every text field.

        Args:
            query_string: Query in the engine's query-string syntax
            fields: Stored fields to return with each hit (default: all stored)
            max_results: Maximum number of hits
            sort_by: ``-_score`` (best first) or ``_score``

        Raises:
            QueryError: the query cannot be parsed or executed.
            ValueError: ``sort_by`` is not supported.
        """
        if sort_by not in (SCORE_DESCENDING, SCORE_ASCENDING):
            raise ValueError(f"Unsupported sort order: {sort_by}")
        if self._closed:
            raise QueryError(f"Index at {self.path} is closed")

        requested = [name for name in (fields or self.schema.stored_field_names) if name in self.schema]
        query = self._parse(query_string)

        try:
            searcher = self._index.searcher()
            result = searcher.search(query, max_results)
            hits: list[SearchHit] = []
            for score, address in result.hits:
                doc = searcher.doc(address)
                values = {name: doc.get_first(name) for name in requested}
                scene_id = str(doc.get_first(self.schema.unique_field))
                hits.append(SearchHit(id=scene_id, score=float(score), fields=values))
        except _ENGINE_ERRORS as exc:
            raise QueryError(f"Query {query_string!r} failed: {exc}") from exc

        hits.sort(key=lambda hit: hit.score, reverse=sort_by == SCORE_DESCENDING)
        return hits

    def close(self) -> None:
        """Commit pending writes and release the writer. Safe to call twice."""
        if self._closed:
            return
        writer = self._writer
        self._writer = None
        self._closed = True
        if writer is None:
            return
        try:
            writer.commit()
            writer.wait_merging_threads()
        except _ENGINE_ERRORS as exc:
            logger.error("Failed to commit index at %s on close: %s", self.path, exc)
        self._pending_puts.clear()
        self._pending_deletes.clear()
