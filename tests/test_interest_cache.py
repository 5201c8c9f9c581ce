"""Tests for the local key-value stores and the interest cache."""

import json
import re

import pytest

from app.core.config import settings
from app.interest.cache import DEVICE_KEY, INTERESTED_KEY, InterestCache, generate_device_id
from app.interest.storage import JsonFileStore, MemoryStore


class BrokenStore:
    """Store whose every operation fails, like storage disabled in private mode."""

    def get(self, key):
        raise OSError("storage unavailable")

    def set(self, key, value):
        raise OSError("quota exceeded")

    def remove(self, key):
        raise OSError("storage unavailable")


class TestJsonFileStore:
    def test_missing_file_reads_as_empty(self, tmp_path):
        store = JsonFileStore(tmp_path / "storage.json")
        assert store.get("anything") is None

    def test_set_get_remove(self, tmp_path):
        path = tmp_path / "nested" / "storage.json"
        store = JsonFileStore(path)

        store.set("a", "1")
        store.set("b", "2")
        assert store.get("a") == "1"
        assert json.loads(path.read_text()) == {"a": "1", "b": "2"}

        store.remove("a")
        assert store.get("a") is None
        assert store.get("b") == "2"

    def test_persists_across_instances(self, tmp_path):
        JsonFileStore(tmp_path / "s.json").set("k", "v")
        assert JsonFileStore(tmp_path / "s.json").get("k") == "v"

    def test_corrupt_file_raises(self, tmp_path):
        path = tmp_path / "s.json"
        path.write_text("[1, 2, 3]")
        with pytest.raises(ValueError):
            JsonFileStore(path).get("k")


class TestDeviceId:
    def test_format(self):
        assert re.fullmatch(r"web-\d+-[0-9a-z]{7}", generate_device_id())

    def test_created_once_and_persisted(self, cache: InterestCache, store: MemoryStore):
        first = cache.device_id()
        assert store.get(DEVICE_KEY) == first
        assert cache.device_id() == first
        assert InterestCache(store).device_id() == first

    def test_existing_id_reused(self):
        cache = InterestCache(MemoryStore({DEVICE_KEY: "web-1-abcdefg"}))
        assert cache.device_id() == "web-1-abcdefg"

    def test_works_without_storage(self):
        cache = InterestCache(BrokenStore())
        device_id = cache.device_id()
        assert device_id.startswith("web-")
        assert cache.device_id() == device_id


class TestInterestRecords:
    def test_mark_and_clear(self, cache: InterestCache, store: MemoryStore):
        cache.mark_interested(42, at_ms=1736503200000)

        assert cache.is_interested(42)
        assert cache.is_interested("42")
        assert json.loads(store.get(INTERESTED_KEY)) == {"42": 1736503200000}

        cache.clear_interested(42)
        assert not cache.is_interested(42)
        assert json.loads(store.get(INTERESTED_KEY)) == {}

    def test_mark_uses_current_time(self, cache: InterestCache):
        cache.mark_interested(1)
        assert cache.read_interested()["1"] > 0

    def test_other_records_untouched(self, cache: InterestCache):
        cache.mark_interested(1, at_ms=10)
        cache.mark_interested(2, at_ms=20)
        cache.clear_interested(1)
        assert cache.read_interested() == {"2": 20}
        assert cache.interested_event_ids() == ["2"]

    def test_clear_missing_record(self, cache: InterestCache):
        cache.clear_interested(99)
        assert cache.read_interested() == {}

    def test_corrupt_json_reads_as_empty(self):
        cache = InterestCache(MemoryStore({INTERESTED_KEY: "{not json"}))
        assert cache.read_interested() == {}
        assert not cache.is_interested(1)

    def test_non_object_json_reads_as_empty(self):
        cache = InterestCache(MemoryStore({INTERESTED_KEY: "[1, 2]"}))
        assert cache.read_interested() == {}

    def test_broken_storage_is_silent(self):
        cache = InterestCache(BrokenStore())
        cache.mark_interested(1)
        cache.clear_interested(1)
        assert cache.read_interested() == {}

    def test_file_backed_cache(self, tmp_path):
        cache = InterestCache(JsonFileStore(tmp_path / "storage.json"))
        cache.mark_interested(5, at_ms=1)
        assert InterestCache(JsonFileStore(tmp_path / "storage.json")).is_interested(5)

    def test_from_settings_uses_configured_path(self, tmp_path, monkeypatch):
        path = tmp_path / "device" / "storage.json"
        monkeypatch.setattr(settings, "interest_storage_path", str(path))

        cache = InterestCache.from_settings()
        cache.mark_interested(8, at_ms=1)

        assert json.loads(path.read_text())[INTERESTED_KEY] == json.dumps({"8": 1})
