"""Agent K - grounded Q&A about one person's professional background."""

from .conversation import Answer, AnswerEngine
from .embeddings import EmbeddingService
from .generation import GenerationService
from .intents import Intent, IntentClassifier, IntentDecision
from .knowledge_base import KnowledgeBaseLoader
from .models import (
    ConfidenceTier,
    ConversationTurn,
    EmbeddingRecord,
    KnowledgeEntry,
    ScoredEntry,
)
from .pipeline import Services, build_services
from .retrieval import RetrievalService
from .suggestions import SuggestionService

__all__ = [
    "Answer",
    "AnswerEngine",
    "ConfidenceTier",
    "ConversationTurn",
    "EmbeddingRecord",
    "EmbeddingService",
    "GenerationService",
    "Intent",
    "IntentClassifier",
    "IntentDecision",
    "KnowledgeBaseLoader",
    "KnowledgeEntry",
    "RetrievalService",
    "ScoredEntry",
    "Services",
    "SuggestionService",
    "build_services",
]
