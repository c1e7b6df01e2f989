"""Domain model - catalog entities and value objects.

The search core reads these records but never mutates them. They are owned by
the external record store; the core only needs the fields that feed the index
and the identity used to hydrate search hits back into records.

Uses Pydantic dataclasses so records built from untyped sources (JSON catalog
dumps, scraper payloads) are validated at construction.
"""

from datetime import datetime, timezone

from pydantic import Field
from pydantic.dataclasses import dataclass


@dataclass(frozen=True)
class CastMember:
    """A performer credited on a scene."""

    name: str = Field(min_length=1)


@dataclass(frozen=True)
class Tag:
    """A free-form label attached to a scene."""

    name: str = Field(min_length=1)


@dataclass(frozen=True)
class SceneRecord:
    """A catalog entry as stored by the record store.

    Identity is ``scene_id``; two records with the same id describe the same
    scene even if other fields differ (e.g. before and after a re-scrape).
    """

    scene_id: str = Field(min_length=1)
    title: str = ""
    synopsis: str = ""
    site: str = ""
    release_date: datetime | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    duration: int = Field(default=0, ge=0)
    cast: list[CastMember] = Field(default_factory=list)
    tags: list[Tag] = Field(default_factory=list)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SceneRecord):
            return False
        return self.scene_id == other.scene_id

    def __hash__(self) -> int:
        return hash(self.scene_id)

    @property
    def cast_names(self) -> list[str]:
        return [member.name for member in self.cast]


@dataclass(frozen=True)
class ScrapedScene:
    """Lightweight record emitted by scrapers.

    Only ``scene_id`` is used by the search core; the full record is read back
    from the record store before indexing.
    """

    scene_id: str = Field(min_length=1)
    title: str = ""
    site: str = ""


@dataclass(frozen=True)
class ScoredScene:
    """A search hit resolved to its full record plus the engine's relevance score."""

    scene: SceneRecord
    score: float = 0.0

    @property
    def scene_id(self) -> str:
        return self.scene.scene_id
