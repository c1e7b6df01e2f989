"""Indexing pipeline: full rebuild, incremental update and delete.

Every entry point takes the ``"index"`` lock from the shared registry before
touching the index. When another indexing operation holds it, the call logs
and returns a ``SKIPPED`` result without doing any work. Failures local to one
scene are logged and counted; failing to open the index aborts the whole
operation.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
import logging
import time

from catalog_search.adapters.scene_repository import AbstractSceneRepository
from catalog_search.config import Settings
from catalog_search.domain.migration import MigrationStatus
from catalog_search.domain.model import SceneRecord, ScrapedScene
from catalog_search.observability.context import operation_scope
from catalog_search.observability.metrics import (
    DELETED_DOCUMENTS,
    DOCUMENT_FAILURES,
    INDEXED_DOCUMENTS,
    SKIPPED_OPERATIONS,
)
from catalog_search.observability.tracing import create_span
from catalog_search.search.index_store import (
    DocumentDeleteError,
    DocumentWriteError,
    IndexOpenError,
    IndexStoreError,
    SceneIndex,
)
from catalog_search.search.locks import INDEX_LOCK_NAME, LockRegistry
from catalog_search.search.mapper import to_document


logger = logging.getLogger(__name__)

IndexOpener = Callable[[], SceneIndex]


class IndexingStatus(str, Enum):
    """Outcome of an indexing operation."""

    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class IndexingResult:
    """Summary of one indexing operation."""

    operation: str
    status: IndexingStatus
    total: int = 0
    processed: int = 0
    indexed: int = 0
    deleted: int = 0
    failed: int = 0
    errors: tuple[str, ...] = ()

    @property
    def skipped(self) -> bool:
        return self.status is IndexingStatus.SKIPPED


class _ProgressTicker:
    """Rate-limits progress lines to one per ``interval`` seconds."""

    def __init__(self, interval: float, clock: Callable[[], float]) -> None:
        self._interval = interval
        self._clock = clock
        self._last = clock()

    def due(self) -> bool:
        now = self._clock()
        if now - self._last > self._interval:
            self._last = now
            return True
        return False


class IndexingService:
    """Keeps the scene index in step with the record store."""

    def __init__(
        self,
        repository: AbstractSceneRepository,
        locks: LockRegistry,
        settings: Settings | None = None,
        *,
        migration: MigrationStatus | None = None,
        index_opener: IndexOpener | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._repository = repository
        self._locks = locks
        self._settings = settings or Settings()
        self._migration = migration or MigrationStatus()
        self._index_opener = index_opener or self._open_default_index
        self._clock = clock

    def _open_default_index(self) -> SceneIndex:
        return SceneIndex.open_or_create(
            self._settings.index_name,
            self._settings.index_root,
            heap_size=self._settings.writer_heap_size,
        )

    def _skipped(self, operation: str) -> IndexingResult:
        logger.info("Indexing already in progress, skipping %s", operation)
        SKIPPED_OPERATIONS.labels(operation=operation).inc()
        return IndexingResult(operation=operation, status=IndexingStatus.SKIPPED)

    def _open_index(self, operation: str) -> SceneIndex | IndexingResult:
        try:
            return self._index_opener()
        except IndexOpenError as exc:
            logger.error("Cannot open search index for %s: %s", operation, exc)
            return IndexingResult(operation=operation, status=IndexingStatus.FAILED, errors=(str(exc),))

    def rebuild_index(self) -> IndexingResult:
        """Index every scene in the record store that is not indexed yet.

        Documents for scenes that no longer exist are left in place.
        """
        operation = "rebuild"
        with create_span("index.rebuild"), operation_scope("index", operation=operation):
            with self._locks.hold(INDEX_LOCK_NAME) as acquired:
                if not acquired:
                    return self._skipped(operation)
                opened = self._open_index(operation)
                if isinstance(opened, IndexingResult):
                    return opened
                with opened as index:
                    return self._rebuild(index)

    def _rebuild(self, index: SceneIndex) -> IndexingResult:
        page_size = self._settings.page_size
        total = self._repository.count_scenes()
        offset = current = indexed = failed = 0
        errors: list[str] = []

        logger.info("Building search index...")
        while True:
            scenes = self._repository.fetch_scenes_page(offset, page_size)
            if not scenes:
                break

            for scene in scenes:
                if not index.exists(scene.scene_id):
                    try:
                        index.put(scene.scene_id, to_document(scene))
                        indexed += 1
                    except DocumentWriteError as exc:
                        logger.error("%s", exc)
                        errors.append(str(exc))
                        failed += 1
                current += 1

            try:
                index.commit()
            except IndexStoreError as exc:
                logger.error("Aborting rebuild: %s", exc)
                return IndexingResult(
                    operation="rebuild",
                    status=IndexingStatus.FAILED,
                    total=total,
                    processed=current,
                    indexed=indexed,
                    failed=failed,
                    errors=(*errors, str(exc)),
                )

            logger.info("Indexed %d/%d scenes", current, total)
            if self._migration.is_running:
                self._migration.update_status(
                    self._migration.current, current, total, f"Reindexing scenes: {current}/{total}"
                )
            offset += page_size

        INDEXED_DOCUMENTS.labels(operation="rebuild").inc(indexed)
        if failed:
            DOCUMENT_FAILURES.labels(operation="rebuild").inc(failed)
        logger.info("Search index built!")
        return IndexingResult(
            operation="rebuild",
            status=IndexingStatus.COMPLETED,
            total=total,
            processed=current,
            indexed=indexed,
            failed=failed,
            errors=tuple(errors),
        )

    def index_scenes(self, scenes: Iterable[SceneRecord]) -> IndexingResult:
        """Add or refresh the documents for ``scenes``.

        An existing document is removed before the current record is written so
        no stale field values survive.
        """
        operation = "update"
        scenes = list(scenes)
        with create_span("index.update", attributes={"index.scenes": len(scenes)}), operation_scope(
            "index", operation=operation
        ):
            with self._locks.hold(INDEX_LOCK_NAME) as acquired:
                if not acquired:
                    return self._skipped(operation)
                opened = self._open_index(operation)
                if isinstance(opened, IndexingResult):
                    return opened
                with opened as index:
                    return self._update(index, scenes)

    def _update(self, index: SceneIndex, scenes: list[SceneRecord]) -> IndexingResult:
        ticker = _ProgressTicker(self._settings.progress_time_interval, self._clock)
        indexed = failed = processed = 0
        errors: list[str] = []

        logger.info("Adding scraped scenes to search index...")
        for scene in scenes:
            if ticker.due():
                logger.info("Indexed %d of %d scenes", indexed, len(scenes))

            if index.exists(scene.scene_id):
                try:
                    index.delete(scene.scene_id)
                except DocumentDeleteError as exc:
                    logger.warning("%s", exc)

            try:
                index.put(scene.scene_id, to_document(scene))
                indexed += 1
            except DocumentWriteError as exc:
                logger.error("%s", exc)
                errors.append(str(exc))
                failed += 1
            processed += 1

        status = IndexingStatus.COMPLETED
        try:
            index.commit()
        except IndexStoreError as exc:
            logger.error("%s", exc)
            errors.append(str(exc))
            status = IndexingStatus.FAILED

        INDEXED_DOCUMENTS.labels(operation="update").inc(indexed)
        if failed:
            DOCUMENT_FAILURES.labels(operation="update").inc(failed)
        logger.info("Indexed %d scenes", indexed)
        return IndexingResult(
            operation="update",
            status=status,
            total=len(scenes),
            processed=processed,
            indexed=indexed,
            failed=failed,
            errors=tuple(errors),
        )

    def index_scraped_scenes(self, scraped_scenes: Iterable[ScrapedScene]) -> IndexingResult:
        """Resolve scraped scenes to their stored records, then index those.

        Scraped scenes that are no longer in the record store are skipped.
        """
        scenes: list[SceneRecord] = []
        for scraped in scraped_scenes:
            scene = self._repository.get_scene_if_exists(scraped.scene_id)
            if scene is None:
                logger.debug("Scraped scene %s not in record store, not indexing", scraped.scene_id)
                continue
            scenes.append(scene)
        return self.index_scenes(scenes)

    def delete_scenes(self, scenes: Iterable[SceneRecord]) -> IndexingResult:
        """Remove the documents for ``scenes``; scenes that are not indexed are ignored."""
        operation = "delete"
        scenes = list(scenes)
        with create_span("index.delete", attributes={"index.scenes": len(scenes)}), operation_scope(
            "index", operation=operation
        ):
            with self._locks.hold(INDEX_LOCK_NAME) as acquired:
                if not acquired:
                    return self._skipped(operation)
                opened = self._open_index(operation)
                if isinstance(opened, IndexingResult):
                    return opened
                with opened as index:
                    return self._delete(index, scenes)

    def _delete(self, index: SceneIndex, scenes: list[SceneRecord]) -> IndexingResult:
        ticker = _ProgressTicker(self._settings.progress_time_interval, self._clock)
        deleted = failed = processed = 0
        errors: list[str] = []

        logger.info("Deleting scenes from search index...")
        for scene in scenes:
            if ticker.due():
                logger.info("Deleting scene index %d of %d scenes", processed, len(scenes))

            if index.exists(scene.scene_id):
                try:
                    index.delete(scene.scene_id)
                    deleted += 1
                except DocumentDeleteError as exc:
                    logger.error("%s", exc)
                    errors.append(str(exc))
                    failed += 1
            processed += 1

        status = IndexingStatus.COMPLETED
        try:
            index.commit()
        except IndexStoreError as exc:
            logger.error("%s", exc)
            errors.append(str(exc))
            status = IndexingStatus.FAILED

        DELETED_DOCUMENTS.inc(deleted)
        if failed:
            DOCUMENT_FAILURES.labels(operation="delete").inc(failed)
        logger.info("Deleted %d scenes from search index", deleted)
        return IndexingResult(
            operation="delete",
            status=status,
            total=len(scenes),
            processed=processed,
            deleted=deleted,
            failed=failed,
            errors=tuple(errors),
        )
