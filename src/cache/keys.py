# src/cache/keys.py — v1
"""Deterministic content-derived cache keys.

key = namespace prefix + first N hex chars of SHA-256(canonical content).
Callers never supply raw keys; they supply content and a namespace.
"""

from __future__ import annotations

import hashlib
from typing import Sequence

from newsrag.cache.models import CacheNamespace

DEFAULT_HASH_LENGTH = 16
DEFAULT_VECTOR_PRECISION = 8


def generate_key(prefix: str, content: str, length: int = DEFAULT_HASH_LENGTH) -> str:
    """Prefix + truncated SHA-256 hex digest of the UTF-8 content."""
    digest = hashlib.sha256(content.encode("utf-8")).hexdigest()
    return f"{prefix}{digest[:length]}"


def canonical_text(text: str) -> str:
    """Texts are hashed exactly as given: no trimming or case folding."""
    return text


def canonical_search_content(
    vector: Sequence[float],
    limit: int,
    precision: int = DEFAULT_VECTOR_PRECISION,
) -> str:
    """Fixed-precision vector serialization followed by the limit.

    Fixed precision keeps 0.1 and 0.1000000000000001 (same vector after a
    JSON round trip on another platform) on the same key.
    """
    body = ",".join(f"{float(x):.{precision}f}" for x in vector)
    return f"[{body}]_{int(limit)}"


def embedding_key(text: str, length: int = DEFAULT_HASH_LENGTH) -> str:
    return generate_key(CacheNamespace.EMBEDDING.prefix, canonical_text(text), length)


def query_key(query: str, length: int = DEFAULT_HASH_LENGTH) -> str:
    return generate_key(CacheNamespace.QUERY.prefix, canonical_text(query), length)


def search_key(
    vector: Sequence[float],
    limit: int,
    length: int = DEFAULT_HASH_LENGTH,
    precision: int = DEFAULT_VECTOR_PRECISION,
) -> str:
    return generate_key(
        CacheNamespace.SEARCH.prefix,
        canonical_search_content(vector, limit, precision),
        length,
    )
