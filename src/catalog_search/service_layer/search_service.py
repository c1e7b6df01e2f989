"""Fuzzy query engine over the scene index.

``fuzzy_search`` never raises: an unavailable index, an unparsable query or a
failing engine all degrade to an empty result list, so callers can use it on
request paths without guarding it.
"""

from __future__ import annotations

from collections.abc import Callable
import logging

from catalog_search.adapters.scene_repository import AbstractSceneRepository
from catalog_search.config import Settings
from catalog_search.domain.model import ScoredScene
from catalog_search.observability.metrics import SEARCH_LATENCY, SEARCH_RESULTS, track_latency
from catalog_search.observability.tracing import create_span
from catalog_search.search.index_store import (
    SCORE_DESCENDING,
    IndexOpenError,
    QueryError,
    SceneIndex,
    SearchHit,
)


logger = logging.getLogger(__name__)

RESULT_FIELDS = ("id", "title", "cast", "site", "description")


class SearchService:
    """Runs free-text queries and hydrates hits into scene records."""

    def __init__(
        self,
        repository: AbstractSceneRepository,
        settings: Settings | None = None,
        *,
        index_opener: Callable[[], SceneIndex] | None = None,
    ) -> None:
        self._repository = repository
        self._settings = settings or Settings()
        self._index_opener = index_opener or self._open_default_index

    def _open_default_index(self) -> SceneIndex:
        return SceneIndex.open_or_create(self._settings.index_name, self._settings.index_root, read_only=True)

    def fuzzy_search(self, query: str) -> list[ScoredScene]:
        """Search scenes with the engine's query-string syntax.

        Returns at most ``search_limit`` scenes, best match first, each carrying
        its relevance score. Hits whose scene is gone from the record store are
        dropped. Returns ``[]`` instead of raising on any failure.
        """
        if not query or not query.strip():
            return []

        with create_span("search.fuzzy", attributes={"search.query_length": len(query)}):
            with track_latency(SEARCH_LATENCY):
                hits = self._run_query(query)
            scenes = self._hydrate(hits)

        SEARCH_RESULTS.observe(len(scenes))
        logger.debug("Search %r returned %d scenes (%d hits)", query, len(scenes), len(hits))
        return scenes

    def _run_query(self, query: str) -> list[SearchHit]:
        try:
            index = self._index_opener()
        except IndexOpenError as exc:
            logger.warning("Search index unavailable: %s", exc)
            return []

        with index:
            try:
                return index.search(query, list(RESULT_FIELDS), self._settings.search_limit, SCORE_DESCENDING)
            except QueryError as exc:
                logger.debug("%s", exc)
                return []

    def _hydrate(self, hits: list[SearchHit]) -> list[ScoredScene]:
        scenes: list[ScoredScene] = []
        for hit in hits:
            try:
                scene = self._repository.get_scene_if_exists(hit.id)
            except Exception:
                logger.warning("Record lookup failed for scene %s", hit.id, exc_info=True)
                continue
            if scene is None:
                continue
            scenes.append(ScoredScene(scene=scene, score=hit.score))
        return scenes
