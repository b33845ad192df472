# src/rag/embeddings/embedder_factory.py — v3
"""Factory: instantiate embedding provider from configuration."""

from __future__ import annotations

import importlib
import logging

from newsrag.config.settings import Settings
from newsrag.core.errors import UnsupportedProviderError
from newsrag.rag.embeddings.base_embedder import BaseEmbedder

logger = logging.getLogger(__name__)

_PROVIDER_REGISTRY: dict[str, str] = {
    "jina": "newsrag.rag.embeddings.jina_embedder.JinaEmbedder",
    "openai": "newsrag.rag.embeddings.openai_embedder.OpenAIEmbedder",
    "ollama": "newsrag.rag.embeddings.ollama_embedder.OllamaEmbedder",
}


def create_embedder(
    settings: Settings | None = None, provider: str | None = None
) -> BaseEmbedder:
    """Instantiate the configured embedding provider.

    Args:
        settings: Application settings. Uses EMBEDDING_PROVIDER and EMBEDDING_MODEL.
        provider: Overrides EMBEDDING_PROVIDER, e.g. a name added with
            register_embedding_provider.

    Returns:
        Configured BaseEmbedder instance.
    """
    if settings is None:
        from newsrag.rag.embeddings.jina_embedder import JinaEmbedder
        return JinaEmbedder()

    provider = provider or settings.embedding_provider
    if provider not in _PROVIDER_REGISTRY:
        raise UnsupportedProviderError(
            f"Unsupported embedding provider: {provider!r}. "
            f"Available: {', '.join(sorted(_PROVIDER_REGISTRY))}"
        )

    cls = _import_class(_PROVIDER_REGISTRY[provider])

    kwargs: dict = {"dimensions": settings.embedding_dimensions}

    if provider == "jina":
        kwargs["model"] = settings.embedding_model
        kwargs["api_key"] = settings.jina_api_key
        kwargs["api_url"] = settings.jina_api_url
        kwargs["timeout_s"] = settings.embedding_timeout_s
    elif provider == "openai":
        kwargs["model"] = settings.embedding_model
        kwargs["api_key"] = settings.openai_api_key
    elif provider == "ollama":
        kwargs["model"] = settings.embedding_ollama_model
        kwargs["base_url"] = settings.ollama_base_url
        kwargs["timeout_s"] = settings.embedding_timeout_s

    logger.debug("Creating embedder: provider=%s", provider)
    return cls(**kwargs)


def register_embedding_provider(name: str, class_path: str) -> None:
    """Register a custom embedding provider."""
    _PROVIDER_REGISTRY[name] = class_path


def _import_class(class_path: str) -> type:
    """Dynamically import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
