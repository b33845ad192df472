# tests/unit/rag/embeddings/test_unit_embedder_factory.py — v3
"""Tests for rag/embeddings/embedder_factory.py."""

from __future__ import annotations

import pytest

from pydantic import ValidationError

from newsrag.config.settings import Settings
from newsrag.core.errors import UnsupportedProviderError
from newsrag.rag.embeddings.embedder_factory import create_embedder, register_embedding_provider


class TestCreateEmbedder:
    def test_default_jina(self):
        embedder = create_embedder()
        assert embedder.provider_name == "jina"
        assert embedder.dimensions == 768

    def test_unsupported_provider(self):
        with pytest.raises(UnsupportedProviderError, match="nonexistent"):
            create_embedder(Settings(_env_file=None), provider="nonexistent")

    def test_unknown_provider_rejected_by_settings(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, embedding_provider="nonexistent")

    def test_jina_from_settings(self):
        s = Settings(_env_file=None, embedding_model="jina-embeddings-v3", embedding_dimensions=1024)
        embedder = create_embedder(s)
        assert embedder.model_name == "jina-embeddings-v3"
        assert embedder.dimensions == 1024

    def test_ollama_from_settings(self):
        s = Settings(
            _env_file=None, embedding_provider="ollama", embedding_ollama_model="mxbai-embed-large"
        )
        embedder = create_embedder(s)
        assert embedder.provider_name == "ollama"
        assert embedder.model_name == "mxbai-embed-large"

    def test_openai_from_settings(self):
        s = Settings(
            _env_file=None, embedding_provider="openai",
            embedding_model="text-embedding-3-small", embedding_dimensions=768,
        )
        embedder = create_embedder(s)
        assert embedder.provider_name == "openai"
        assert embedder.dimensions == 768

    def test_register_provider(self):
        register_embedding_provider(
            "jina-alt", "newsrag.rag.embeddings.jina_embedder.JinaEmbedder"
        )
        # Non-jina branches pass only dimensions
        embedder = create_embedder(Settings(_env_file=None), provider="jina-alt")
        assert embedder.provider_name == "jina"
