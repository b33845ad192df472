# src/rag/context_assembler.py — v3
"""Context assembler — numbered excerpts from ranked search hits.

Each hit becomes "[n] title" followed by its summary, or by the first
excerpt_chars characters of its content when no summary exists. Hits keep
their search rank order; the generator relies on [n] matching sources[n-1].
"""

from __future__ import annotations

import logging
from typing import Sequence

from newsrag.rag.models import SearchHit

logger = logging.getLogger(__name__)

DEFAULT_EXCERPT_CHARS = 300


class ContextAssembler:
    """Build the prompt context block from search hits.

    Args:
        excerpt_chars: Content characters kept for hits without a summary.
    """

    def __init__(self, excerpt_chars: int = DEFAULT_EXCERPT_CHARS) -> None:
        self._excerpt_chars = excerpt_chars

    def excerpt(self, hit: SearchHit) -> str:
        """Summary, or truncated content when the summary is empty."""
        return hit.summary or hit.content[: self._excerpt_chars]

    def assemble(self, hits: Sequence[SearchHit]) -> str:
        """Join numbered excerpts with blank lines, in rank order."""
        blocks = [
            f"[{rank}] {hit.title}\n{self.excerpt(hit)}"
            for rank, hit in enumerate(hits, start=1)
        ]
        context = "\n\n".join(blocks)
        logger.debug("Assembled context from %d hits (%d chars)", len(blocks), len(context))
        return context
