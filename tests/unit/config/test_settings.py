# tests/unit/config/test_settings.py — v3
"""Tests for config/settings.py — typed Settings and validation rules."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from newsrag.config.settings import ConfigurationError, Settings, load_settings
from newsrag.core.errors import NewsRAGError


class TestSettingsDefaults:
    def test_default_cache(self):
        s = Settings(_env_file=None)
        assert s.cache_backend == "redis"
        assert s.cache_key_hash_length == 16
        assert s.cache_embedding_ttl_s == 86_400
        assert s.cache_query_ttl_s == 3_600
        assert s.cache_empty_result_ttl_s == 1_800
        assert s.cache_search_ttl_s == 1_800

    def test_default_providers(self):
        s = Settings(_env_file=None)
        assert s.embedding_provider == "jina"
        assert s.embedding_dimensions == 768
        assert s.llm_provider == "google"
        assert s.vector_db_collection == "news_articles"

    def test_default_pipeline(self):
        s = Settings(_env_file=None)
        assert s.rag_search_limit == 5
        assert s.rag_content_excerpt_chars == 300
        assert s.session_ttl_s == 3_600
        assert s.llm_stream_natively is False

    def test_warm_queries_list(self):
        s = Settings(_env_file=None, cache_warm_queries=" a , b,,c ")
        assert s.cache_warm_queries_list == ["a", "b", "c"]


class TestSettingsValidation:
    def test_empty_result_ttl_must_be_shorter(self):
        with pytest.raises(ConfigurationError, match="CACHE_EMPTY_RESULT_TTL_S"):
            Settings(_env_file=None, cache_query_ttl_s=600, cache_empty_result_ttl_s=600)

    def test_redis_requires_url(self):
        with pytest.raises(ConfigurationError, match="REDIS_URL"):
            Settings(_env_file=None, cache_backend="redis", redis_url="")

    def test_memory_backend_without_url(self):
        s = Settings(_env_file=None, cache_backend="memory", redis_url="")
        assert s.cache_backend == "memory"

    def test_ttl_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, cache_search_ttl_s=0)

    def test_search_limit_positive(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, rag_search_limit=0)

    def test_hash_length_bounds(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, cache_key_hash_length=4)
        with pytest.raises(ValidationError):
            Settings(_env_file=None, cache_key_hash_length=65)

    def test_unknown_backend_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, cache_backend="memcached")

    def test_unknown_providers_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, embedding_provider="cohere")
        with pytest.raises(ValidationError):
            Settings(_env_file=None, llm_provider="mistral")

    def test_configuration_error_in_hierarchy(self):
        with pytest.raises(NewsRAGError):
            Settings(_env_file=None, cache_query_ttl_s=600, cache_empty_result_ttl_s=600)


class TestEnvironment:
    def test_env_vars(self, monkeypatch):
        monkeypatch.setenv("CACHE_BACKEND", "memory")
        monkeypatch.setenv("RAG_SEARCH_LIMIT", "8")
        monkeypatch.setenv("LLM_PROVIDER", "openai")
        s = Settings(_env_file=None)
        assert s.cache_backend == "memory"
        assert s.rag_search_limit == 8
        assert s.llm_provider == "openai"


class TestLoadSettings:
    def test_overrides(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        s = load_settings(llm_model="gemini-1.5-flash")
        assert s.llm_model == "gemini-1.5-flash"
