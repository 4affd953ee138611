"""Follow-up question suggestions drawn from the knowledge base."""

from __future__ import annotations

import threading
from collections import deque
from typing import TYPE_CHECKING

from .config import config
from .context import stride_sample
from .normalizer import normalize_query

if TYPE_CHECKING:
    from .retrieval import RetrievalService

logger = config.get_logger(__name__)

MAX_SUGGESTIONS = 5
RECENT_WINDOW = 15


class SuggestionService:
    """Ranks knowledge-base questions and de-prioritizes recently shown ones."""

    def __init__(
        self, retrieval: RetrievalService, recent_window: int = RECENT_WINDOW
    ) -> None:
        self.retrieval = retrieval
        self._recent: deque[str] = deque(maxlen=recent_window)
        self._lock = threading.Lock()

    def _candidates(self, query: str) -> list[str]:
        knowledge_base = self.retrieval.knowledge_base
        ranked = []
        if query:
            result = self.retrieval.search(query, limit=len(knowledge_base))
            ranked = [item.entry.question for item in result.entries]
        sampled = [
            item.entry.question
            for item in stride_sample(knowledge_base, len(knowledge_base))
        ]

        asked = query.strip(" ?.!").lower()
        candidates = []
        for question in ranked + sampled:
            if question in candidates or question.strip(" ?.!").lower() == asked:
                continue
            candidates.append(question)
        return candidates

    def suggest(self, query: str | None = None, limit: int = MAX_SUGGESTIONS) -> list[str]:
        """Return up to ``limit`` questions to offer the user next."""
        limit = max(0, min(limit, MAX_SUGGESTIONS))
        query = normalize_query((query or "").strip())
        candidates = self._candidates(query)

        with self._lock:
            recent = set(self._recent)
            fresh = [q for q in candidates if q not in recent]
            stale = [q for q in candidates if q in recent]
            chosen = (fresh + stale)[:limit]
            self._recent.extend(chosen)

        logger.debug("Suggested %d questions for %r", len(chosen), query[:50])
        return chosen
