"""Unit tests for ReadThroughCache."""

from __future__ import annotations

import pytest
from django.core.cache import cache

from modules.core.cache import ReadThroughCache

pytestmark = pytest.mark.unit


@pytest.fixture()
def read_through():
    return ReadThroughCache(default_ttl=60)


class TestGetOrSet:
    def test_loader_called_once(self, read_through):
        calls = []

        def loader():
            calls.append(1)
            return {"value": 42}

        assert read_through.get_or_set("k", loader) == {"value": 42}
        assert read_through.get_or_set("k", loader) == {"value": 42}
        assert len(calls) == 1

    def test_none_is_not_cached(self, read_through):
        calls = []

        def loader():
            calls.append(1)
            return None

        read_through.get_or_set("missing", loader)
        read_through.get_or_set("missing", loader)
        assert len(calls) == 2

    def test_delete(self, read_through):
        read_through.set("a", 1)
        read_through.set("b", 2)
        read_through.delete("a", "b")
        assert read_through.get("a") is None
        assert read_through.get("b") is None


class TestNamespaces:
    def test_invalidate_changes_key(self, read_through):
        before = read_through.namespace_key("things:list", "page_1")
        assert read_through.namespace_key("things:list", "page_1") == before
        read_through.invalidate_namespace("things:list")
        assert read_through.namespace_key("things:list", "page_1") != before

    def test_evicted_version_does_not_resurrect_old_pages(self, read_through):
        old_key = read_through.namespace_key("things:list", "page_1")
        read_through.set(old_key, "stale")
        cache.delete("things:list:version")
        assert read_through.namespace_key("things:list", "page_1") != old_key


class BrokenBackend:
    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise ConnectionError("redis down")

        return fail


class TestFailureIsolation:
    @pytest.fixture()
    def broken(self, monkeypatch):
        read_through = ReadThroughCache()
        monkeypatch.setattr(ReadThroughCache, "_backend", property(lambda self: BrokenBackend()))
        return read_through

    def test_errors_are_misses(self, broken):
        assert broken.get("k") is None
        assert broken.get_or_set("k", lambda: "fresh") == "fresh"

    def test_writes_do_not_raise(self, broken):
        broken.set("k", "v")
        broken.delete("k")
        broken.invalidate_namespace("ns")
        assert broken.namespace_key("ns", "x") == "ns:v0:x"
