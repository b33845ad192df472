# tests/unit/cache/test_models.py — v2
"""Tests for cache/models.py — namespaces and TTL policy."""

from __future__ import annotations

import dataclasses

import pytest

from newsrag.cache.models import CLEAR_TYPES, CacheNamespace, CacheStats, CacheTTLs
from newsrag.config.settings import Settings


class TestCacheNamespace:
    def test_prefixes(self):
        assert CacheNamespace.EMBEDDING.prefix == "embedding:"
        assert CacheNamespace.QUERY.prefix == "query:"
        assert CacheNamespace.SEARCH.prefix == "search:"

    def test_clear_types_cover_every_namespace(self):
        assert set(CLEAR_TYPES["all"]) == set(CacheNamespace)


class TestCacheTTLs:
    def test_from_settings(self):
        s = Settings(_env_file=None, cache_query_ttl_s=7_200, cache_empty_result_ttl_s=600)
        ttls = CacheTTLs.from_settings(s)
        assert ttls.query_s == 7_200
        assert ttls.empty_result_s == 600
        assert ttls.embedding_s == 86_400

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            CacheTTLs().query_s = 1  # type: ignore[misc]


class TestCacheStats:
    def test_defaults_zero(self):
        assert CacheStats().total_keys == 0
