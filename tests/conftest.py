"""Test configuration and fixtures for Agent K tests.

This module provides reusable test fixtures organized by functionality:
- Constants and test data
- Mock services and API responses
- Knowledge base and retrieval fixtures
- Answer engine and HTTP client factories
"""

import hashlib
from contextlib import contextmanager
from pathlib import Path
from unittest.mock import Mock, create_autospec, patch

import numpy as np
import pytest

from agentk import (
    AnswerEngine,
    EmbeddingRecord,
    EmbeddingService,
    GenerationService,
    KnowledgeEntry,
    RetrievalService,
    Services,
    SuggestionService,
)
from agentk.embeddings import entry_text

PROJECT_ROOT = Path(__file__).resolve().parent.parent
SAMPLE_KNOWLEDGE_BASE = PROJECT_ROOT / "data" / "knowledge-base.json"


class TestConstants:
    """Centralized test constants to avoid repetition across test files."""

    # API Configuration
    TEST_API_KEY = "test-key"
    TEST_CHAT_MODEL = "test-chat-model"
    DEFAULT_EMBEDDING_DIMENSION = 64

    # Persona Configuration
    SUBJECT = "Kyle"
    PERSONA = "Agent K"


class MockEmbeddingService:
    """Mock embedding service for testing without API calls.

    Generates deterministic embeddings based on text content hash,
    ensuring consistent test results across runs.
    """

    def __init__(
        self, dimension: int = TestConstants.DEFAULT_EMBEDDING_DIMENSION
    ) -> None:
        self.dimension = dimension
        self.calls = 0

    def get_embedding(self, text: str) -> np.ndarray:
        """Generate deterministic mock embedding based on text hash."""
        self.calls += 1
        return self._vector(text)

    def _vector(self, text: str) -> np.ndarray:
        seed = int.from_bytes(
            hashlib.sha256(text.lower().encode("utf-8")).digest()[:8],
            byteorder="big",
            signed=False,
        )
        rng = np.random.default_rng(seed)
        embedding = rng.normal(0, 1, self.dimension)
        return (embedding / np.linalg.norm(embedding)).astype(np.float32)

    def get_embeddings_batch(self, texts: list[str]) -> list[np.ndarray]:
        """Generate batch of mock embeddings."""
        return [self._vector(text) for text in texts]

    def embed_knowledge_base(self, knowledge_base) -> list[EmbeddingRecord]:  # noqa: ANN001
        """Embed entries the same way EmbeddingService does."""
        return [
            EmbeddingRecord(index=i, vector=self._vector(entry_text(entry)))
            for i, entry in enumerate(knowledge_base)
        ]


def create_mock_openai_response(embeddings: list[list[float]]) -> Mock:
    """Create a mock OpenAI embeddings API response."""
    mock_response = Mock()
    mock_response.data = [Mock(embedding=emb) for emb in embeddings]
    return mock_response


def create_mock_chat_response(content: str | None) -> Mock:
    """Create a mock OpenAI chat completion response."""
    mock_response = Mock()
    mock_response.choices = [Mock(message=Mock(content=content))]
    return mock_response


@pytest.fixture
def openai_embeddings_api_mock():
    """Patch OpenAI embeddings.create and hand back the mock."""
    with patch("openai.resources.embeddings.Embeddings.create") as mock_create:
        yield mock_create


@pytest.fixture
def openai_embeddings_factory(openai_embeddings_api_mock):
    """Factory for creating OpenAI embeddings API mocks with different scenarios."""

    def _create_mock(  # noqa: ANN202
        scenario="single_success",
        embeddings=None,
        error_message="API Error",
    ):
        openai_embeddings_api_mock.reset_mock()
        openai_embeddings_api_mock.side_effect = None
        openai_embeddings_api_mock.return_value = None

        if scenario == "single_success":
            mock_embedding = embeddings or [0.1, 0.2, 0.3, 0.4, 0.5]
            openai_embeddings_api_mock.return_value = create_mock_openai_response([
                mock_embedding
            ])
        elif scenario == "batch_success":
            mock_embeddings = embeddings or [
                [0.1, 0.2, 0.3],
                [0.4, 0.5, 0.6],
                [0.7, 0.8, 0.9],
            ]
            openai_embeddings_api_mock.return_value = create_mock_openai_response(
                mock_embeddings
            )
        elif scenario == "multiple_batches":
            openai_embeddings_api_mock.side_effect = [
                create_mock_openai_response([[0.1, 0.2], [0.3, 0.4]]),
                create_mock_openai_response([[0.5, 0.6], [0.7, 0.8]]),
            ]
        elif scenario == "error":
            openai_embeddings_api_mock.side_effect = Exception(error_message)
        elif scenario == "partial_failure":
            openai_embeddings_api_mock.side_effect = [
                create_mock_openai_response([[0.1, 0.2]]),
                Exception("Second batch failed"),
            ]

        return openai_embeddings_api_mock

    return _create_mock


@pytest.fixture
def embedding_service_factory():
    """Factory for creating EmbeddingService instances with different configurations."""

    def _create_service(api_key=None, model=None):  # noqa: ANN202
        api_key = api_key or TestConstants.TEST_API_KEY
        if model is not None:
            return EmbeddingService(api_key=api_key, model=model)
        return EmbeddingService(api_key=api_key)

    return _create_service


@pytest.fixture
def embedding_service(embedding_service_factory):
    """Default EmbeddingService with test API key for most tests."""
    return embedding_service_factory()


@pytest.fixture
def generation_service():
    """Real GenerationService client with a test key; patch its client per test."""
    return GenerationService(
        api_key=TestConstants.TEST_API_KEY, model=TestConstants.TEST_CHAT_MODEL
    )


@pytest.fixture
def generation_chat_mock_factory():
    """Factory mock fixture for a GenerationService's chat.completions.create."""

    @contextmanager
    def _mock_chat(service, content: str | None = "Test response", side_effect=None):  # noqa: ANN202
        with patch.object(service.client.chat.completions, "create") as mock_create:
            if side_effect is not None:
                mock_create.side_effect = side_effect
            else:
                mock_create.return_value = create_mock_chat_response(content)
            yield mock_create

    return _mock_chat


@pytest.fixture(scope="session")
def mock_embedding_service():
    """Pre-configured MockEmbeddingService for consistent test embeddings."""
    return MockEmbeddingService()


@pytest.fixture
def sample_knowledge_base_path():
    """Path to the knowledge base shipped in data/."""
    return SAMPLE_KNOWLEDGE_BASE


@pytest.fixture
def knowledge_base():
    """Small fixed knowledge base used across retrieval and engine tests."""
    return (
        KnowledgeEntry(
            question="What autonomous vehicle testing has Kyle done?",
            answer=(
                "Kyle validated autonomous driving software through scenario-based "
                "field test plans in rain, fog and night conditions."
            ),
            keywords=("autonomous", "self-driving", "field testing"),
            category="technical",
        ),
        KnowledgeEntry(
            question="What programs has Kyle managed?",
            answer=(
                "Kyle ran cross-functional test programs that aligned engineering "
                "and operations on schedules and coverage."
            ),
            keywords=("program management", "roadmap"),
            category="program",
        ),
        KnowledgeEntry(
            question="What AI tools has Kyle built?",
            answer=(
                "Kyle builds applied AI tools with Node.js, Express and external "
                "model APIs."
            ),
            keywords=("ai tools", "node.js", "express"),
            category="technical",
        ),
        KnowledgeEntry(
            question="What is Kyle's customer success experience?",
            answer=(
                "Kyle onboarded enterprise SaaS clients and was their technical "
                "point of contact during rollout."
            ),
            keywords=("customer success", "onboarding", "saas"),
            category="customer",
        ),
        KnowledgeEntry(
            question="How does Kyle handle ambiguity?",
            answer=(
                "Kyle lists what is known and assumed, then runs small experiments "
                "to close the biggest unknowns."
            ),
            keywords=("ambiguity",),
            category="behavioral",
        ),
        KnowledgeEntry(
            question="What scripting languages does Kyle use?",
            answer="Kyle uses JavaScript, Python and shell scripting for tooling.",
            keywords=("scripting", "javascript", "python"),
            category="technical",
        ),
    )


@pytest.fixture
def retrieval_service(knowledge_base):
    """Lexical-only retrieval service over the fixture knowledge base."""
    return RetrievalService(knowledge_base)


@pytest.fixture
def semantic_retrieval_factory(knowledge_base):
    """Factory for retrieval services with mock embeddings for every entry."""

    def _create(embedder=None) -> RetrievalService:  # noqa: ANN001
        embedder = embedder or MockEmbeddingService()
        records = embedder.embed_knowledge_base(knowledge_base)
        return RetrievalService(knowledge_base, records, embedder)

    return _create


@pytest.fixture
def mock_generation():
    """Autospec'd GenerationService whose replies each test configures."""
    service = create_autospec(GenerationService, instance=True)
    service.generate.return_value = "Kyle has relevant experience."
    return service


@pytest.fixture
def engine_factory(retrieval_service, mock_generation):
    """Factory for AnswerEngine instances with mock generation."""

    def _create_engine(retrieval=None, generation=None) -> AnswerEngine:  # noqa: ANN001
        return AnswerEngine(
            retrieval or retrieval_service,
            generation or mock_generation,
            subject_name=TestConstants.SUBJECT,
            persona_name=TestConstants.PERSONA,
        )

    return _create_engine


@pytest.fixture
def engine(engine_factory):
    """Default lexical-only AnswerEngine."""
    return engine_factory()


@pytest.fixture
def services(retrieval_service, engine):
    """Services bundle for HTTP tests."""
    return Services(
        retrieval=retrieval_service,
        engine=engine,
        suggestions=SuggestionService(retrieval_service),
    )
