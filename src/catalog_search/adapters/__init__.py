"""Adapters for the external scene record store."""

from catalog_search.adapters.scene_repository import (
    AbstractSceneRepository,
    CatalogLoadError,
    InMemorySceneRepository,
    load_scenes_json,
)


__all__ = [
    "AbstractSceneRepository",
    "CatalogLoadError",
    "InMemorySceneRepository",
    "load_scenes_json",
]
