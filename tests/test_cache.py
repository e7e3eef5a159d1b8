"""Unit tests for the file-based introspection cache."""

import json
import time

from dota_graphql_mcp import cache

ENDPOINT = "https://api.stratz.com/graphql"


class TestCache:
    def test_save_and_load(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setenv("CACHE_DIR", str(tmp_path))
        cache.save_introspection(ENDPOINT, {"__schema": {"types": []}})

        assert cache.load_introspection(ENDPOINT) == {"__schema": {"types": []}}

    def test_is_cached_returns_true_when_fresh(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setenv("CACHE_DIR", str(tmp_path))
        cache.save_introspection(ENDPOINT, {"__schema": {}})

        assert cache.is_cached(ENDPOINT) is True

    def test_is_cached_returns_false_when_missing(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setenv("CACHE_DIR", str(tmp_path))
        assert cache.is_cached(ENDPOINT) is False
        assert cache.load_introspection(ENDPOINT) is None

    def test_is_cached_returns_false_when_expired(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setenv("CACHE_DIR", str(tmp_path))
        monkeypatch.setenv("CACHE_TTL_HOURS", "0.0001")  # ~0.36 seconds

        cache.save_introspection(ENDPOINT, {"__schema": {}})
        # Rewrite metadata with a timestamp in the past
        meta_path = next(tmp_path.glob("*/_meta.json"))
        meta_path.write_text(json.dumps({"fetched_at": time.time() - 3600}))

        assert cache.is_cached(ENDPOINT) is False

    def test_endpoints_do_not_collide(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setenv("CACHE_DIR", str(tmp_path))
        cache.save_introspection(ENDPOINT, {"__schema": {"a": 1}})
        cache.save_introspection("https://api.stratz.com/graphql/v2", {"__schema": {"b": 2}})

        assert cache.load_introspection(ENDPOINT) == {"__schema": {"a": 1}}
        dirs = sorted(p.name for p in tmp_path.iterdir())
        assert len(dirs) == 2
        assert all(d.startswith("api.stratz.com-") for d in dirs)

    def test_corrupt_file_returns_none(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setenv("CACHE_DIR", str(tmp_path))
        cache.save_introspection(ENDPOINT, {"__schema": {}})
        next(tmp_path.glob("*/introspection.json")).write_text("{broken")

        assert cache.load_introspection(ENDPOINT) is None

    def test_clear(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setenv("CACHE_DIR", str(tmp_path))
        cache.save_introspection(ENDPOINT, {"__schema": {}})
        cache.clear(ENDPOINT)

        assert cache.is_cached(ENDPOINT) is False
