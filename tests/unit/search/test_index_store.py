"""Unit tests for the tantivy-backed scene index."""

import pytest

from catalog_search.search.index_store import (
    SCORE_ASCENDING,
    IndexOpenError,
    IndexStoreError,
    QueryError,
    SceneIndex,
)
from catalog_search.search.mapper import to_document


@pytest.fixture
def index_root(tmp_path):
    return tmp_path / "indexes"


@pytest.fixture
def scene_index(index_root):
    index = SceneIndex.open_or_create("scenes", index_root)
    yield index
    index.close()


@pytest.mark.unit
def test_open_or_create_creates_named_directory(index_root):
    with SceneIndex.open_or_create("scenes", index_root) as index:
        assert index.path == index_root / "scenes"
        assert index.path.is_dir()
        assert index.count() == 0


@pytest.mark.unit
def test_open_or_create_fails_when_root_is_a_file(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")

    with pytest.raises(IndexOpenError):
        SceneIndex.open_or_create("scenes", blocker)


@pytest.mark.unit
def test_exists_reflects_put_before_commit(scene_index, make_scene):
    scene = make_scene("s1")

    assert scene_index.exists("s1") is False
    scene_index.put("s1", to_document(scene))

    assert scene_index.exists("s1") is True


@pytest.mark.unit
def test_exists_reflects_delete_before_commit(scene_index, make_scene):
    scene_index.put("s1", to_document(make_scene("s1")))
    scene_index.commit()

    scene_index.delete("s1")

    assert scene_index.exists("s1") is False
    scene_index.commit()
    assert scene_index.exists("s1") is False
    assert scene_index.count() == 0


@pytest.mark.unit
def test_delete_of_unknown_id_is_not_an_error(scene_index):
    scene_index.delete("missing")
    scene_index.commit()

    assert scene_index.count() == 0


@pytest.mark.unit
def test_put_replaces_previous_document(scene_index, make_scene):
    scene_index.put("s1", to_document(make_scene("s1", title="Lighthouse")))
    scene_index.commit()

    scene_index.put("s1", to_document(make_scene("s1", title="Windmill")))
    scene_index.commit()

    assert scene_index.count() == 1
    assert scene_index.search("lighthouse") == []
    hits = scene_index.search("windmill")
    assert [hit.id for hit in hits] == ["s1"]


@pytest.mark.unit
def test_committed_documents_survive_reopen(index_root, make_scene):
    with SceneIndex.open_or_create("scenes", index_root) as index:
        index.put("s1", to_document(make_scene("s1")))
        index.put("s2", to_document(make_scene("s2")))

    with SceneIndex.open_or_create("scenes", index_root, read_only=True) as reopened:
        assert reopened.count() == 2
        assert reopened.exists("s1")
        assert reopened.exists("s2")


@pytest.mark.unit
def test_read_only_index_rejects_writes(index_root, make_scene):
    with SceneIndex.open_or_create("scenes", index_root, read_only=True) as index:
        with pytest.raises(IndexStoreError, match="read-only"):
            index.put("s1", to_document(make_scene("s1")))
        with pytest.raises(IndexStoreError, match="read-only"):
            index.delete("s1")


@pytest.mark.unit
def test_search_returns_requested_fields_ranked(scene_index, make_scene):
    scene_index.put("s1", to_document(make_scene("s1", title="Harbor Morning", cast=["Jane Doe"])))
    scene_index.put("s2", to_document(make_scene("s2", title="Harbor Night")))
    scene_index.commit()

    hits = scene_index.search("janedoe", fields=["id", "title"])

    assert len(hits) == 1
    assert hits[0].id == "s1"
    assert hits[0].fields == {"id": "s1", "title": "Harbor Morning"}
    assert hits[0].score > 0


@pytest.mark.unit
def test_search_orders_by_score(scene_index, make_scene):
    scene_index.put("s1", to_document(make_scene("s1", title="Harbor")))
    scene_index.put("s2", to_document(make_scene("s2", title="Harbor Harbor Harbor Night")))
    scene_index.commit()

    best_first = scene_index.search("harbor")
    worst_first = scene_index.search("harbor", sort_by=SCORE_ASCENDING)

    assert [hit.score for hit in best_first] == sorted((hit.score for hit in best_first), reverse=True)
    assert [hit.id for hit in worst_first] == [hit.id for hit in reversed(best_first)]


@pytest.mark.unit
def test_search_honours_max_results(scene_index, make_scene):
    for number in range(5):
        scene_index.put(f"s{number}", to_document(make_scene(f"s{number}", title="Harbor")))
    scene_index.commit()

    assert len(scene_index.search("harbor", max_results=3)) == 3


@pytest.mark.unit
def test_search_supports_field_prefixes(scene_index, make_scene):
    scene_index.put("s1", to_document(make_scene("s1", title="Harbor", site="Coast")))
    scene_index.put("s2", to_document(make_scene("s2", title="Coast", site="Inland")))
    scene_index.commit()

    assert [hit.id for hit in scene_index.search("site:coast")] == ["s1"]


@pytest.mark.unit
def test_search_rejects_unknown_field(scene_index):
    with pytest.raises(QueryError):
        scene_index.search("nosuchfield:value")


@pytest.mark.unit
def test_search_rejects_unsupported_sort(scene_index):
    with pytest.raises(ValueError, match="Unsupported sort"):
        scene_index.search("harbor", sort_by="title")


@pytest.mark.unit
def test_close_is_idempotent_and_blocks_further_use(index_root, make_scene):
    index = SceneIndex.open_or_create("scenes", index_root)
    index.put("s1", to_document(make_scene("s1")))

    index.close()
    index.close()

    assert index.closed
    with pytest.raises(IndexStoreError, match="closed"):
        index.put("s2", to_document(make_scene("s2")))
    with pytest.raises(QueryError):
        index.search("scene")


@pytest.mark.unit
@pytest.mark.parametrize("query", ["doe's", "Jane Doe's Day", "title:off doe's"])
def test_search_accepts_apostrophes_in_free_text(scene_index, make_scene, query):
    scene_index.put("p1", to_document(make_scene("p1", title="Jane Doe's Day Off")))
    scene_index.put("p2", to_document(make_scene("p2", title="Harbor Morning")))
    scene_index.commit()

    assert [hit.id for hit in scene_index.search(query)] == ["p1"]
