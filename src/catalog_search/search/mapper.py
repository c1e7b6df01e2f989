"""Map scene records onto the index document shape."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timezone
from typing import Any

from catalog_search.domain.model import SceneRecord


EARLIEST_INDEXABLE_DAY = datetime(1677, 9, 22, tzinfo=timezone.utc)
LATEST_INDEXABLE_DAY = datetime(2262, 4, 11, tzinfo=timezone.utc)


@dataclass(frozen=True, slots=True)
class IndexedDocument:
    """The searchable projection of one scene, keyed by ``id``."""

    id: str
    title: str
    description: str
    cast: str
    site: str
    released: datetime | None
    added: datetime | None
    duration: int

    def to_fields(self) -> dict[str, Any]:
        """Engine-neutral field mapping; dates that are unset or out of range are omitted."""
        fields: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "cast": self.cast,
            "site": self.site,
            "duration": self.duration,
        }
        if self.released is not None:
            fields["released"] = self.released
        if self.added is not None:
            fields["added"] = self.added
        return fields


def truncate_to_day(value: datetime) -> datetime:
    """Midnight UTC of the calendar date recorded in ``value``.

    The date is taken as recorded, in the value's own offset; it is not
    converted to UTC first. ``2021-03-14T23:30-05:00`` becomes
    ``2021-03-14T00:00Z``, not the 15th.
    """
    return datetime.combine(value.date(), time.min, tzinfo=timezone.utc)


def indexable_day(value: datetime | None) -> datetime | None:
    """``truncate_to_day(value)``, or None when the engine cannot store that day.

    Date fields hold nanosecond timestamps, which cover roughly 1677 to 2262.
    Placeholder dates such as ``0001-01-01`` fall outside and are dropped.
    """
    if value is None:
        return None
    day = truncate_to_day(value)
    if not EARLIEST_INDEXABLE_DAY <= day <= LATEST_INDEXABLE_DAY:
        return None
    return day


def cast_field(names: list[str]) -> str:
    """Spaced names followed by the same names with spaces removed.

    ``["Jane Doe"]`` becomes ``"Jane Doe JaneDoe"`` so both spellings match.
    """
    spaced = [name.strip() for name in names if name.strip()]
    concatenated = ["".join(name.split()) for name in spaced]
    return " ".join(spaced + concatenated)


def to_document(scene: SceneRecord) -> IndexedDocument:
    return IndexedDocument(
        id=str(scene.scene_id),
        title=str(scene.title),
        description=str(scene.synopsis),
        cast=cast_field(scene.cast_names),
        site=str(scene.site),
        released=indexable_day(scene.release_date),
        added=indexable_day(scene.created_at),
        duration=int(scene.duration),
    )
