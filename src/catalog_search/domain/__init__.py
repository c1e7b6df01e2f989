"""Domain layer - catalog records and migration state.

Contains no infrastructure dependencies: the record store, the search engine
and logging all live in outer layers.
"""

from catalog_search.domain.migration import MigrationProgress, MigrationStatus
from catalog_search.domain.model import CastMember, SceneRecord, ScoredScene, ScrapedScene, Tag


__all__ = [
    "CastMember",
    "MigrationProgress",
    "MigrationStatus",
    "SceneRecord",
    "ScoredScene",
    "ScrapedScene",
    "Tag",
]
