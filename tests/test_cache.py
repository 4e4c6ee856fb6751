"""Tests for the pipeline cache and its key-value stores.

HOW: PipelineCache gets an injected clock so TTL boundaries are exact.
Store failures are simulated with MagicMock stores whose methods raise.
DirectoryStore tests use pytest's tmp_path.
"""

import json
from unittest.mock import MagicMock

import pytest

from clip_repurposer.cache import (
    CachedPipelineSnapshot,
    DirectoryStore,
    InMemoryStore,
    PipelineCache,
    StoreError,
)
from clip_repurposer.cache.pipeline_cache import KEY_PREFIX


class FakeClock:
    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def cache(store, clock):
    return PipelineCache(store, ttl_s=300, clock=clock)


def _snapshot():
    return CachedPipelineSnapshot(
        transcript={"segments": [{"text": "Hi", "start": 0, "end": 1}]},
        derived_stats={"word_count": 1, "filler_count": 0},
        stage_flags={"transcribed": True, "clipsGenerated": False},
    )


class TestPipelineCache:
    def test_save_then_load(self, cache, clock):
        saved = cache.save("proj-1", _snapshot())
        assert saved.cached_at_ms == int(clock.now * 1000)

        clock.now += 60
        loaded = cache.load("proj-1")
        assert loaded == saved

    def test_stored_under_prefixed_key(self, cache, store):
        cache.save("proj-1", _snapshot())
        assert store.keys() == [KEY_PREFIX + "proj-1"]
        data = json.loads(store.get(KEY_PREFIX + "proj-1"))
        assert set(data) == {"transcript", "derivedStats", "stageFlags", "cachedAt"}

    def test_missing_entry(self, cache):
        assert cache.load("nope") is None

    def test_exactly_at_ttl_is_fresh(self, cache, clock):
        cache.save("proj-1", _snapshot())
        clock.now += 300
        assert cache.load("proj-1") is not None

    def test_expired_entry_deleted(self, cache, clock, store):
        cache.save("proj-1", _snapshot())
        clock.now += 301
        assert cache.load("proj-1") is None
        assert store.keys() == []

    def test_save_overwrites_and_restamps(self, cache, clock):
        cache.save("proj-1", _snapshot())
        clock.now += 250
        updated = CachedPipelineSnapshot(
            transcript={}, stage_flags={"transcribed": True, "clipsGenerated": True}
        )
        cache.save("proj-1", updated)

        clock.now += 250
        loaded = cache.load("proj-1")
        assert loaded.stage_flags["clipsGenerated"] is True

    def test_corrupt_entry_discarded(self, cache, store):
        store.set(KEY_PREFIX + "proj-1", "{not json")
        assert cache.load("proj-1") is None
        assert store.get(KEY_PREFIX + "proj-1") is None

    def test_schema_invalid_entry_discarded(self, cache, store):
        store.set(
            KEY_PREFIX + "proj-1",
            json.dumps({"transcript": {}, "derivedStats": {}, "stageFlags": {"x": "yes"},
                        "cachedAt": 1}),
        )
        assert cache.load("proj-1") is None
        assert store.keys() == []

    def test_invalidate(self, cache, store):
        cache.save("proj-1", _snapshot())
        cache.invalidate("proj-1")
        assert cache.load("proj-1") is None
        cache.invalidate("never-cached")

    def test_projects_are_independent(self, cache):
        cache.save("a", _snapshot())
        assert cache.load("b") is None
        assert cache.load("a") is not None


class TestStoreFailures:
    """Store errors are logged and swallowed, never raised."""

    def _failing_store(self):
        store = MagicMock()
        store.get.side_effect = StoreError("disk unavailable")
        store.set.side_effect = StoreError("quota exceeded")
        store.delete.side_effect = StoreError("read-only")
        return store

    def test_load_returns_none(self, clock):
        cache = PipelineCache(self._failing_store(), clock=clock)
        assert cache.load("proj-1") is None

    def test_save_still_returns_stamped_snapshot(self, clock):
        cache = PipelineCache(self._failing_store(), clock=clock)
        stamped = cache.save("proj-1", _snapshot())
        assert stamped.cached_at_ms == int(clock.now * 1000)

    def test_invalidate_does_not_raise(self, clock):
        cache = PipelineCache(self._failing_store(), clock=clock)
        cache.invalidate("proj-1")

    def test_stale_delete_failure_swallowed(self, clock):
        store = MagicMock()
        store.get.return_value = json.dumps(
            dict(_snapshot().to_dict(), cachedAt=0)
        )
        store.delete.side_effect = StoreError("read-only")
        cache = PipelineCache(store, ttl_s=300, clock=clock)
        assert cache.load("proj-1") is None
        store.delete.assert_called_once_with(KEY_PREFIX + "proj-1")


class TestInMemoryStore:
    def test_get_set_delete(self, store):
        assert store.get("k") is None
        store.set("k", "v")
        assert store.get("k") == "v"
        store.delete("k")
        assert store.get("k") is None
        store.delete("k")


class TestDirectoryStore:
    def test_roundtrip_creates_directory(self, tmp_path):
        store = DirectoryStore(tmp_path / "cache")
        store.set("pipeline-cache:proj-1", '{"a": 1}')
        assert store.get("pipeline-cache:proj-1") == '{"a": 1}'
        assert (tmp_path / "cache").is_dir()

    def test_missing_key(self, tmp_path):
        assert DirectoryStore(tmp_path).get("absent") is None

    def test_delete_missing_is_noop(self, tmp_path):
        DirectoryStore(tmp_path).delete("absent")

    def test_delete(self, tmp_path):
        store = DirectoryStore(tmp_path)
        store.set("k", "v")
        store.delete("k")
        assert store.get("k") is None
        assert list(tmp_path.iterdir()) == []

    def test_keys_cannot_escape_directory(self, tmp_path):
        store = DirectoryStore(tmp_path / "cache")
        path = store.path_for("../../etc/passwd")
        assert path.parent == tmp_path / "cache"
        assert path.name == "..%2F..%2Fetc%2Fpasswd.json"

    def test_colon_encoded(self, tmp_path):
        store = DirectoryStore(tmp_path)
        assert store.path_for("pipeline-cache:p1").name == "pipeline-cache%3Ap1.json"

    @pytest.mark.parametrize(
        "first, second",
        [
            ("pipeline-cache:team/a", "pipeline-cache:team_a"),
            ("a b", "a_b"),
            ("50%", "50%25"),
        ],
    )
    def test_distinct_keys_use_distinct_files(self, tmp_path, first, second):
        store = DirectoryStore(tmp_path)
        assert store.path_for(first) != store.path_for(second)

        store.set(first, "first")
        assert store.get(second) is None
        store.set(second, "second")
        assert store.get(first) == "first"
        assert store.get(second) == "second"

    def test_similar_project_ids_do_not_share_snapshots(self, tmp_path, clock):
        cache = PipelineCache(DirectoryStore(tmp_path), clock=clock)
        cache.save("team/a", CachedPipelineSnapshot(transcript={"owner": "team/a"}))
        assert cache.load("team_a") is None
        assert cache.load("team/a").transcript == {"owner": "team/a"}

    def test_no_temp_files_left_behind(self, tmp_path):
        store = DirectoryStore(tmp_path)
        store.set("k", "v1")
        store.set("k", "v2")
        assert [p.name for p in tmp_path.iterdir()] == ["k.json"]

    def test_read_error_wrapped(self, tmp_path):
        store = DirectoryStore(tmp_path)
        store.path_for("k").mkdir()
        with pytest.raises(StoreError):
            store.get("k")

    def test_works_with_pipeline_cache(self, tmp_path, clock):
        cache = PipelineCache(DirectoryStore(tmp_path), clock=clock)
        cache.save("proj-1", _snapshot())
        assert cache.load("proj-1").derived_stats["word_count"] == 1
