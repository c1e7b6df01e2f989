"""Shared test fixtures and configuration."""

from datetime import datetime, timezone
import os

import pytest

from catalog_search.adapters.scene_repository import InMemorySceneRepository
from catalog_search.config import Settings
from catalog_search.domain.model import CastMember, SceneRecord, Tag
from catalog_search.search.locks import LockRegistry


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Drop CATALOG_SEARCH_* overrides and keep any .env file out of reach."""
    for key in list(os.environ):
        if key.upper().startswith("CATALOG_SEARCH_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a per-test index root."""
    return Settings(
        index_root=tmp_path / "indexes",
        page_size=2,
        progress_time_interval=15,
        log_json=False,
    )


@pytest.fixture
def make_scene():
    """Factory for scene records with sensible defaults."""

    def _make(scene_id: str, **overrides) -> SceneRecord:
        cast = overrides.pop("cast", [])
        tags = overrides.pop("tags", [])
        values = {
            "title": f"Scene {scene_id}",
            "synopsis": "",
            "site": "Example Studio",
            "release_date": datetime(2021, 3, 14, 18, 30, tzinfo=timezone.utc),
            "created_at": datetime(2022, 1, 2, 9, 15, tzinfo=timezone.utc),
            "duration": 1800,
        }
        values.update(overrides)
        return SceneRecord(
            scene_id=scene_id,
            cast=[CastMember(name=name) for name in cast],
            tags=[Tag(name=name) for name in tags],
            **values,
        )

    return _make


@pytest.fixture
def sample_scenes(make_scene):
    """A small catalog with distinct titles, cast and sites."""
    return [
        make_scene("s1", title="Morning at the Beach", cast=["Jane Doe"], site="Sunny Studio"),
        make_scene("s2", title="Mountain Cabin", cast=["John Roe"], synopsis="A quiet weekend in the hills"),
        make_scene("s3", title="City Lights", cast=["Anna Smith", "Jane Doe"], site="Metro"),
        make_scene("s4", title="PXVR 258 Premiere", site="Pixel VR"),
        make_scene("s5", title="Desert Road", release_date=None),
    ]


@pytest.fixture
def repository(sample_scenes):
    return InMemorySceneRepository(sample_scenes)


@pytest.fixture
def lock_registry():
    return LockRegistry()
