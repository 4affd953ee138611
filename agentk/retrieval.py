"""Hybrid lexical + semantic retrieval over the knowledge base."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

from .config import config
from .models import ConfidenceTier, EmbeddingRecord, KnowledgeEntry, ScoredEntry

if TYPE_CHECKING:
    from .embeddings import EmbeddingService
    from .models import KnowledgeBase

logger = config.get_logger(__name__)

KEYWORD_HIT_SCORE = 25
QUESTION_PREFIX_SCORE = 10
TOKEN_OVERLAP_SCORE = 3
QUESTION_PREFIX_LENGTH = 20
MIN_TOKEN_LENGTH = 3

_TRAILING_PUNCT = "?.! \t\n"


def lexical_score(query: str, entry: KnowledgeEntry) -> int:
    """Score keyword, question-prefix and token overlap between query and entry.

    Returns:
        Non-negative integer; 0 means no lexical signal at all.
    """
    q = (query or "").lower().strip()
    if not q:
        return 0

    question = entry.question.lower()
    answer = entry.answer.lower()
    keywords = [k.lower() for k in entry.keywords if k]

    score = 0
    if any(k in q for k in keywords):
        score += KEYWORD_HIT_SCORE

    prefix = question[:QUESTION_PREFIX_LENGTH]
    if prefix and prefix in q:
        score += QUESTION_PREFIX_SCORE

    for token in q.split():
        if len(token) < MIN_TOKEN_LENGTH:
            continue
        if token in question or token in answer or any(token in k for k in keywords):
            score += TOKEN_OVERLAP_SCORE

    return score


def cosine_similarity(a: np.ndarray | None, b: np.ndarray | None) -> float:
    """Cosine similarity that returns 0.0 instead of failing on bad input.

    Returns:
        Similarity in [-1, 1]; 0.0 for missing, empty, zero-norm or
        mismatched vectors.
    """
    if a is None or b is None:
        return 0.0
    a = np.asarray(a, dtype=float).ravel()
    b = np.asarray(b, dtype=float).ravel()
    if a.size == 0 or a.shape != b.shape:
        return 0.0
    norm = np.linalg.norm(a) * np.linalg.norm(b)
    if norm == 0.0:
        return 0.0
    return float(np.clip(np.dot(a, b) / norm, -1.0, 1.0))


def fuse(
    lexical: Mapping[int, int],
    semantic: Mapping[int, float],
    entries: Sequence[KnowledgeEntry],
    limit: int = 5,
    *,
    lexical_weight: float | None = None,
    semantic_weight: float | None = None,
) -> list[ScoredEntry]:
    """Combine lexical and semantic scores into one descending ranking.

    Lexical scores are normalized by this request's best lexical score;
    semantic scores are used as raw cosine similarity. Ties are broken by
    knowledge-base position so the ordering is deterministic.

    Returns:
        At most ``limit`` entries with a combined score above zero.
    """
    lw = config.LEXICAL_WEIGHT if lexical_weight is None else lexical_weight
    sw = config.SEMANTIC_WEIGHT if semantic_weight is None else semantic_weight
    max_lexical = max(lexical.values(), default=0)

    scored = []
    for index in sorted(set(lexical) | set(semantic)):
        if not 0 <= index < len(entries):
            continue
        raw_lexical = lexical.get(index, 0)
        lexical_normalized = raw_lexical / max_lexical if max_lexical > 0 else 0.0
        similarity = semantic.get(index, 0.0)
        combined = lw * lexical_normalized + sw * similarity
        if combined <= 0:
            continue
        scored.append(
            ScoredEntry(
                entry=entries[index],
                index=index,
                score=combined,
                lexical=raw_lexical,
                semantic=similarity,
            )
        )

    scored.sort(key=lambda item: (-item.score, item.index))
    return scored[:limit]


def lexical_confidence(raw: int) -> float:
    """Map a raw lexical score onto the 0-1 confidence scale.

    ``LEXICAL_STRONG_SCORE`` lands exactly on ``STRONG_THRESHOLD``.
    """
    if raw <= 0:
        return 0.0
    return min(1.0, raw * config.STRONG_THRESHOLD / config.LEXICAL_STRONG_SCORE)


@dataclass
class RetrievalResult:
    """Ranked entries for one query."""

    entries: list[ScoredEntry] = field(default_factory=list)
    semantic_active: bool = False
    exact_match: bool = False

    @property
    def top(self) -> ScoredEntry | None:
        return self.entries[0] if self.entries else None

    @property
    def confidence(self) -> float:
        """Confidence of the best entry on the 0-1 scale.

        With semantic scoring this is the fused score. Without it the raw
        lexical score is calibrated onto the same scale.
        """
        top = self.top
        if top is None:
            return 0.0
        if self.exact_match:
            return 1.0
        if self.semantic_active:
            return top.score
        return lexical_confidence(top.lexical)

    @property
    def tier(self) -> ConfidenceTier:
        confidence = self.confidence
        if self.top is not None and confidence >= config.STRONG_THRESHOLD:
            return ConfidenceTier.STRONG
        if self.top is not None and confidence >= config.WEAK_THRESHOLD:
            return ConfidenceTier.WEAK
        return ConfidenceTier.NONE


def _canonical_question(text: str) -> str:
    return re.sub(r"\s+", " ", text.strip(_TRAILING_PUNCT).lower())


class RetrievalService:
    """Read-only knowledge base plus its embeddings, built once at startup."""

    def __init__(
        self,
        knowledge_base: KnowledgeBase,
        records: Sequence[EmbeddingRecord] | None = None,
        embedding_service: EmbeddingService | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            knowledge_base: Entries in their fixed positional order.
            records: One embedding per entry, or None when semantic scoring
                is unavailable for the lifetime of the process.
            embedding_service: Used to embed incoming queries.
        """
        self.knowledge_base: KnowledgeBase = tuple(knowledge_base)
        self.records: tuple[EmbeddingRecord, ...] = tuple(records or ())
        self.embedding_service = embedding_service
        self._questions = {
            _canonical_question(entry.question): index
            for index, entry in reversed(list(enumerate(self.knowledge_base)))
        }
        self.keyword_vocabulary: frozenset[str] = frozenset(
            k.lower() for entry in self.knowledge_base for k in entry.keywords
        )

    @classmethod
    def build(
        cls,
        knowledge_base: KnowledgeBase,
        embedding_service: EmbeddingService | None = None,
    ) -> RetrievalService:
        """Embed every entry once; stay lexical-only if that is not possible.

        Returns:
            A ready RetrievalService.
        """
        if embedding_service is None or not knowledge_base:
            logger.info("Semantic scoring disabled; using lexical retrieval only")
            return cls(knowledge_base)

        try:
            records = embedding_service.embed_knowledge_base(knowledge_base)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Could not embed knowledge base (%s); "
                "semantic scoring disabled for this process",
                exc,
            )
            return cls(knowledge_base)

        return cls(knowledge_base, records, embedding_service)

    @property
    def semantic_enabled(self) -> bool:
        return bool(self.records) and self.embedding_service is not None

    def __len__(self) -> int:
        return len(self.knowledge_base)

    def lexical_scores(self, query: str) -> dict[int, int]:
        """Return positive lexical scores keyed by entry index."""
        scores = {}
        for index, entry in enumerate(self.knowledge_base):
            score = lexical_score(query, entry)
            if score > 0:
                scores[index] = score
        return scores

    def semantic_scores(self, query: str) -> dict[int, float]:
        """Return cosine similarities keyed by entry index.

        Any failure to embed the query yields an empty map for this request.
        """
        if not self.semantic_enabled or not query.strip():
            return {}
        try:
            query_vector = self.embedding_service.get_embedding(query)
        except Exception:  # noqa: BLE001
            logger.warning("Query embedding failed; falling back to lexical ranking")
            return {}
        return {
            record.index: cosine_similarity(query_vector, record.vector)
            for record in self.records
        }

    def find_exact_question(self, query: str) -> int | None:
        """Index of the entry whose question equals the query, if any."""
        return self._questions.get(_canonical_question(query or ""))

    def search(self, query: str, limit: int | None = None) -> RetrievalResult:
        """Rank knowledge-base entries for a query.

        Returns:
            RetrievalResult with fused entries, best first.
        """
        limit = limit or config.RETRIEVAL_LIMIT
        lexical = self.lexical_scores(query)
        semantic = self.semantic_scores(query)
        entries = fuse(lexical, semantic, self.knowledge_base, limit)

        exact_index = self.find_exact_question(query)
        exact = exact_index is not None
        if exact:
            entries = [item for item in entries if item.index != exact_index]
            entries.insert(
                0,
                ScoredEntry(
                    entry=self.knowledge_base[exact_index],
                    index=exact_index,
                    score=1.0,
                    lexical=lexical.get(exact_index, 0),
                    semantic=semantic.get(exact_index, 0.0),
                ),
            )
            entries = entries[:limit]

        return RetrievalResult(
            entries=entries, semantic_active=bool(semantic), exact_match=exact
        )

