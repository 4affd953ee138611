"""Data models for the Agent K service."""

from dataclasses import dataclass
from enum import Enum

import numpy as np


@dataclass(frozen=True)
class KnowledgeEntry:
    """One curated question/answer fact about the subject."""

    question: str
    answer: str
    keywords: tuple[str, ...] = ()
    category: str | None = None


KnowledgeBase = tuple[KnowledgeEntry, ...]


@dataclass(frozen=True)
class EmbeddingRecord:
    """Embedding of the knowledge entry at ``index``."""

    index: int
    vector: np.ndarray


@dataclass
class ScoredEntry:
    """A knowledge entry ranked for a single query."""

    entry: KnowledgeEntry
    index: int
    score: float
    lexical: int = 0
    semantic: float = 0.0


@dataclass
class ConversationTurn:
    """The current query plus whatever the caller echoes back of the last answer."""

    query: str
    last_bot_message: str = ""


class ConfidenceTier(Enum):
    """Threshold band of the best retrieval match."""

    STRONG = "strong"
    WEAK = "weak"
    NONE = "none"
