"""Unit tests for the named lock registry."""

import threading

import pytest

from catalog_search.search.locks import INDEX_LOCK_NAME, LockRegistry


@pytest.mark.unit
def test_try_acquire_is_exclusive_until_release():
    registry = LockRegistry()

    assert registry.try_acquire(INDEX_LOCK_NAME, owner="first") is True
    assert registry.try_acquire(INDEX_LOCK_NAME, owner="second") is False
    assert registry.lease(INDEX_LOCK_NAME).owner == "first"

    registry.release(INDEX_LOCK_NAME)

    assert registry.is_held(INDEX_LOCK_NAME) is False
    assert registry.try_acquire(INDEX_LOCK_NAME) is True


@pytest.mark.unit
def test_locks_are_independent_per_name():
    registry = LockRegistry()

    assert registry.try_acquire("index")
    assert registry.try_acquire("scrape")


@pytest.mark.unit
def test_release_of_free_lock_is_noop():
    registry = LockRegistry()

    registry.release("index")

    assert registry.lease("index") is None


@pytest.mark.unit
def test_hold_releases_on_exception():
    registry = LockRegistry()

    with pytest.raises(RuntimeError):
        with registry.hold("index") as acquired:
            assert acquired
            raise RuntimeError("boom")

    assert registry.is_held("index") is False


@pytest.mark.unit
def test_hold_does_not_release_lock_it_did_not_take():
    registry = LockRegistry()
    registry.try_acquire("index", owner="other")

    with registry.hold("index") as acquired:
        assert acquired is False

    assert registry.is_held("index")
    assert registry.lease("index").owner == "other"


@pytest.mark.unit
def test_only_one_thread_acquires_under_contention():
    registry = LockRegistry()
    barrier = threading.Barrier(8)
    winners = []

    def _contend():
        barrier.wait()
        if registry.try_acquire("index"):
            winners.append(threading.current_thread().name)

    threads = [threading.Thread(target=_contend) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(winners) == 1
    assert registry.lease("index").owner == winners[0]
