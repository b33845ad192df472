# src/config/settings.py — v3
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for all deployment-specific settings. Components
never read these values implicitly: the container in api/container.py
passes them into constructors.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from newsrag.core.errors import ConfigurationError

__all__ = ["ConfigurationError", "Settings", "load_settings"]


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Cache store ===
    cache_backend: Literal["redis", "memory"] = "redis"
    redis_url: str = "redis://localhost:6379"
    cache_key_hash_length: int = 16
    cache_vector_precision: int = 8
    cache_embedding_ttl_s: int = 86_400
    cache_query_ttl_s: int = 3_600
    cache_empty_result_ttl_s: int = 1_800
    cache_search_ttl_s: int = 1_800
    cache_warm_queries: str = (
        "latest news today,breaking news,technology updates,"
        "political developments,business news,sports news,health news,"
        "climate change news,economic updates,international news"
    )

    # === Embeddings ===
    embedding_provider: Literal["jina", "openai", "ollama"] = "jina"
    embedding_model: str = "jina-embeddings-v2-base-en"
    embedding_dimensions: int = 768
    embedding_ollama_model: str = "nomic-embed-text"
    embedding_timeout_s: float = 30.0
    embedding_retry_attempts: int = 3
    embedding_retry_delay_s: float = 1.0
    jina_api_key: str = ""
    jina_api_url: str = "https://api.jina.ai/v1/embeddings"
    openai_api_key: str = ""
    ollama_base_url: str = "http://localhost:11434"

    # === Vector index ===
    vector_db_url: str = "http://localhost:6333"
    vector_db_api_key: str = ""
    vector_db_collection: str = "news_articles"
    vector_db_distance: Literal["cosine", "dot", "euclid"] = "cosine"

    # === Generation ===
    llm_provider: Literal["google", "openai"] = "google"
    llm_model: str = "gemini-pro"
    google_api_key: str = ""
    llm_temperature: float = 0.7
    llm_top_k: int = 40
    llm_top_p: float = 0.95
    llm_max_output_tokens: int = 1024
    llm_stream_natively: bool = False
    stream_token_delay_s: float = 0.0

    # === Pipeline ===
    rag_search_limit: int = 5
    rag_content_excerpt_chars: int = 300

    # === Sessions ===
    session_ttl_s: int = 3_600

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator(
        "cache_embedding_ttl_s",
        "cache_query_ttl_s",
        "cache_empty_result_ttl_s",
        "cache_search_ttl_s",
        "session_ttl_s",
    )
    @classmethod
    def validate_ttl(cls, v: int) -> int:  # noqa: N805
        if v <= 0:
            raise ValueError("TTL values must be > 0 seconds")
        return v

    @field_validator("embedding_dimensions", "rag_search_limit", "embedding_retry_attempts")
    @classmethod
    def validate_positive(cls, v: int) -> int:  # noqa: N805
        if v < 1:
            raise ValueError("must be >= 1")
        return v

    @field_validator("cache_key_hash_length")
    @classmethod
    def validate_hash_length(cls, v: int) -> int:  # noqa: N805
        """SHA-256 hex digests are 64 chars; below 8 collisions become plausible."""
        if not 8 <= v <= 64:
            raise ValueError("cache_key_hash_length must be between 8 and 64")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.cache_empty_result_ttl_s >= self.cache_query_ttl_s:
            errors.append(
                "CACHE_EMPTY_RESULT_TTL_S must be < CACHE_QUERY_TTL_S"
            )

        if self.cache_backend == "redis" and not self.redis_url:
            errors.append("REDIS_URL must be set when CACHE_BACKEND=redis")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def cache_warm_queries_list(self) -> list[str]:
        """Parse comma-separated warm-up queries."""
        return [q.strip() for q in self.cache_warm_queries.split(",") if q.strip()]


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or CLI flags).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
