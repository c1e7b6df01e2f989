"""Record store adapters consumed by the search core.

The relational record store is an external collaborator. The search core
needs exactly three reads from it, captured by ``AbstractSceneRepository``.
``InMemorySceneRepository`` backs tests and the CLI, which loads a JSON
catalog dump into memory.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
import logging
from pathlib import Path
from typing import Any

import orjson
from pydantic import TypeAdapter, ValidationError

from catalog_search.domain.model import SceneRecord


logger = logging.getLogger(__name__)

_SCENE_LIST_ADAPTER = TypeAdapter(list[SceneRecord])


class CatalogLoadError(Exception):
    """Raised when a catalog dump cannot be read or validated."""


class AbstractSceneRepository(ABC):
    """Read-only view of the scene record store."""

    @abstractmethod
    def count_scenes(self) -> int:
        """Count all scenes in the store."""
        raise NotImplementedError

    @abstractmethod
    def fetch_scenes_page(self, offset: int, limit: int) -> list[SceneRecord]:
        """Fetch one page of scenes in the store's natural order.

        Cast and tags must be attached to every returned record.
        An empty list signals the end of the store.
        """
        raise NotImplementedError

    @abstractmethod
    def get_scene_if_exists(self, scene_id: str) -> SceneRecord | None:
        """Return the scene for ``scene_id`` or None when it no longer exists."""
        raise NotImplementedError


class InMemorySceneRepository(AbstractSceneRepository):
    """In-memory record store preserving insertion order."""

    def __init__(self, scenes: Iterable[SceneRecord] = ()) -> None:
        self._scenes: dict[str, SceneRecord] = {}
        for scene in scenes:
            self.add(scene)

    def add(self, scene: SceneRecord) -> None:
        """Insert or replace a scene, keeping its original position on replace."""
        self._scenes[scene.scene_id] = scene

    def remove(self, scene_id: str) -> bool:
        return self._scenes.pop(scene_id, None) is not None

    def count_scenes(self) -> int:
        return len(self._scenes)

    def fetch_scenes_page(self, offset: int, limit: int) -> list[SceneRecord]:
        if offset < 0 or limit <= 0:
            return []
        return list(self._scenes.values())[offset : offset + limit]

    def get_scene_if_exists(self, scene_id: str) -> SceneRecord | None:
        return self._scenes.get(scene_id)


def parse_scenes(payload: Any) -> list[SceneRecord]:
    """Validate a decoded JSON payload (list of scene objects) into records."""
    try:
        return _SCENE_LIST_ADAPTER.validate_python(payload)
    except ValidationError as exc:
        raise CatalogLoadError(f"Invalid scene catalog: {exc}") from exc


def load_scenes_json(path: str | Path) -> InMemorySceneRepository:
    """Load a JSON catalog dump into an in-memory repository."""
    catalog_path = Path(path)
    try:
        payload = orjson.loads(catalog_path.read_bytes())
    except OSError as exc:
        raise CatalogLoadError(f"Cannot read catalog {catalog_path}: {exc}") from exc
    except orjson.JSONDecodeError as exc:
        raise CatalogLoadError(f"Catalog {catalog_path} is not valid JSON: {exc}") from exc

    scenes = parse_scenes(payload)
    logger.debug("Loaded %d scenes from %s", len(scenes), catalog_path)
    return InMemorySceneRepository(scenes)
