"""Embeddings for knowledge-base entries and incoming queries.

Entries are embedded once at startup as ``question\\nanswer`` so that a query
phrased like either half lands close to the entry. Queries are embedded one
at a time, at most once per request.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np
from openai import OpenAI

from .config import config
from .models import EmbeddingRecord, KnowledgeEntry

if TYPE_CHECKING:
    from .models import KnowledgeBase

logger = config.get_logger(__name__)


def entry_text(entry: KnowledgeEntry) -> str:
    """Text that represents ``entry`` in embedding space."""
    return f"{entry.question}\n{entry.answer}"


class EmbeddingService:
    """Client for the OpenAI embeddings endpoint."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: OpenAI API key. If None, reads from OPENAI_API_KEY.
            model: Embedding model name. If None, uses config.EMBEDDING_MODEL.
        """
        self.client = OpenAI(
            api_key=api_key or config.get_openai_api_key(),
            base_url=config.OPENAI_BASE_URL,
            timeout=config.OPENAI_TIMEOUT,
            default_headers=config.get_api_headers() or None,
        )
        self.model = model or config.EMBEDDING_MODEL

    def _create(self, payload: str | list[str]) -> list[np.ndarray]:
        try:
            response = self.client.embeddings.create(model=self.model, input=payload)
        except Exception:
            logger.exception("Embedding request failed (model=%s)", self.model)
            raise
        return [np.array(item.embedding) for item in response.data]

    def get_embedding(self, text: str) -> np.ndarray:
        """Embed a single query."""
        return self._create(text)[0]

    def get_embeddings_batch(
        self,
        texts: Sequence[str],
        batch_size: int | None = None,
    ) -> list[np.ndarray]:
        """Embed ``texts`` in order, ``batch_size`` per request.

        Any failed batch aborts the whole call.
        """
        batch_size = batch_size or config.EMBEDDING_BATCH_SIZE
        vectors: list[np.ndarray] = []
        for start in range(0, len(texts), batch_size):
            vectors.extend(self._create(list(texts[start : start + batch_size])))
            logger.debug("Embedded %d/%d texts", len(vectors), len(texts))
        return vectors

    def embed_knowledge_base(
        self, knowledge_base: KnowledgeBase
    ) -> list[EmbeddingRecord]:
        """Embed every entry, keyed by its position in the knowledge base.

        Raises:
            ValueError: If the provider returned a different number of
                vectors than there are entries.
        """
        vectors = self.get_embeddings_batch([entry_text(e) for e in knowledge_base])
        if len(vectors) != len(knowledge_base):
            msg = (
                f"Expected {len(knowledge_base)} embeddings, got {len(vectors)}"
            )
            raise ValueError(msg)
        logger.info("Embedded %d knowledge base entries", len(vectors))
        return [
            EmbeddingRecord(index=index, vector=vector)
            for index, vector in enumerate(vectors)
        ]
