"""Startup wiring: Load knowledge base -> Embed -> build request services."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .config import config
from .conversation import AnswerEngine
from .embeddings import EmbeddingService
from .generation import GenerationService
from .knowledge_base import KnowledgeBaseLoader
from .retrieval import RetrievalService
from .suggestions import SuggestionService

logger = config.get_logger(__name__)


@dataclass
class Services:
    """Everything a request handler needs, built once per process."""

    retrieval: RetrievalService
    engine: AnswerEngine
    suggestions: SuggestionService


def build_services(
    knowledge_base_path: Path | None = None,
    openai_api_key: str | None = None,
    embeddings_enabled: bool | None = None,
) -> Services:
    """Load the knowledge base, embed it, and construct the services.

    Args:
        knowledge_base_path: JSON file to load. If None, uses
            config.KNOWLEDGE_BASE_PATH.
        openai_api_key: API key. If None, reads from OPENAI_API_KEY.
        embeddings_enabled: Whether to try semantic scoring. If None, uses
            config.EMBEDDINGS_ENABLED.

    Returns:
        Services sharing one read-only RetrievalService.
    """
    if knowledge_base_path is None:
        knowledge_base_path = config.KNOWLEDGE_BASE_PATH
    if embeddings_enabled is None:
        embeddings_enabled = config.EMBEDDINGS_ENABLED

    knowledge_base = KnowledgeBaseLoader.load(knowledge_base_path)

    embedding_service = (
        EmbeddingService(api_key=openai_api_key) if embeddings_enabled else None
    )
    retrieval = RetrievalService.build(knowledge_base, embedding_service)
    logger.info(
        "Retrieval ready: %d entries, semantic scoring %s",
        len(retrieval),
        "enabled" if retrieval.semantic_enabled else "disabled",
    )

    engine = AnswerEngine(retrieval, GenerationService(api_key=openai_api_key))
    return Services(
        retrieval=retrieval,
        engine=engine,
        suggestions=SuggestionService(retrieval),
    )
