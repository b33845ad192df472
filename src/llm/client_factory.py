# src/llm/client_factory.py — v3
"""Factory: instantiate the LLM client from settings."""

from __future__ import annotations

import importlib
import logging

from newsrag.config.settings import Settings
from newsrag.core.errors import UnsupportedProviderError
from newsrag.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)

# Registry of provider name → adapter class path (lazy import).
_PROVIDER_REGISTRY: dict[str, str] = {
    "google": "newsrag.llm.adapters.google_adapter.GoogleAdapter",
    "openai": "newsrag.llm.adapters.openai_adapter.OpenAIAdapter",
}


def create_llm_client(
    settings: Settings,
    provider: str | None = None,
    model: str | None = None,
    **kwargs: object,
) -> BaseLLMClient:
    """Instantiate the correct adapter.

    Args:
        settings: Application settings (provider, model, API keys).
        provider: Overrides LLM_PROVIDER.
        model: Overrides LLM_MODEL.
        **kwargs: Additional provider-specific arguments.

    Raises:
        UnsupportedProviderError: If provider is not registered.
    """
    provider = provider or settings.llm_provider
    model = model or settings.llm_model
    if provider not in _PROVIDER_REGISTRY:
        raise UnsupportedProviderError(
            f"Unsupported LLM provider: {provider!r}. "
            f"Available: {', '.join(sorted(_PROVIDER_REGISTRY))}"
        )

    adapter_cls = _import_class(_PROVIDER_REGISTRY[provider])

    init_kwargs = dict(kwargs)
    init_kwargs["model"] = model
    if provider == "google":
        init_kwargs.setdefault("api_key", settings.google_api_key)
    elif provider == "openai":
        init_kwargs.setdefault("api_key", settings.openai_api_key)

    logger.debug("Creating LLM client: provider=%s, model=%s", provider, model)
    return adapter_cls(**init_kwargs)


def register_provider(name: str, class_path: str) -> None:
    """Register a custom provider adapter.

    Args:
        name: Provider identifier.
        class_path: Fully qualified class path implementing BaseLLMClient.
    """
    _PROVIDER_REGISTRY[name] = class_path
    logger.info("Registered LLM provider: %s → %s", name, class_path)


def _import_class(class_path: str) -> type:
    """Dynamically import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
