# src/rag/vector_store/vector_store_factory.py — v2
"""Factory: instantiate vector store from configuration."""

from __future__ import annotations

import logging

from newsrag.config.settings import Settings
from newsrag.rag.vector_store.base_vector_store import BaseVectorStore

logger = logging.getLogger(__name__)


def create_vector_store(settings: Settings) -> BaseVectorStore:
    """Instantiate the configured vector store.

    VECTOR_DB_URL may be an http(s) URL, ":memory:" for an in-process
    index, or a filesystem path for local persistence.
    """
    from newsrag.rag.vector_store.qdrant_store import QdrantStore

    url = settings.vector_db_url
    if not url or url == ":memory:":
        logger.debug("Creating in-memory Qdrant store")
        return QdrantStore()
    if "://" in url:
        return QdrantStore(url=url, api_key=settings.vector_db_api_key or None)
    return QdrantStore(path=url)
