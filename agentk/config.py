"""Configuration management for the Agent K service."""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

env_path = Path(__file__).parent.parent / ".env"

if env_path.exists():
    load_dotenv(env_path)


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Config:
    """Application configuration loaded from environment variables."""

    # OpenAI-compatible API Configuration
    @classmethod
    def get_openai_api_key(cls) -> str:
        """Get OpenAI API key from environment variables.

        Returns:
            OpenAI API key from environment or empty string if not set.
        """
        return os.getenv("OPENAI_API_KEY", "")

    OPENAI_BASE_URL: str | None = os.getenv("OPENAI_BASE_URL")
    OPENAI_TIMEOUT: float = float(os.getenv("OPENAI_TIMEOUT", "30"))

    # Logging Configuration
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    OPENAI_LOG_LEVEL: str = os.getenv("OPENAI_LOG_LEVEL", "WARNING").upper()

    # Application Settings
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    KNOWLEDGE_BASE_PATH: Path = Path(
        os.getenv("KNOWLEDGE_BASE_PATH", "data/knowledge-base.json")
    )
    SUBJECT_NAME: str = os.getenv("SUBJECT_NAME", "Kyle")
    PERSONA_NAME: str = os.getenv("PERSONA_NAME", "Agent K")

    # Embedding Configuration
    EMBEDDING_MODEL: str = os.getenv("EMBEDDING_MODEL", "text-embedding-3-small")
    EMBEDDINGS_ENABLED: bool = _env_bool("EMBEDDINGS_ENABLED", "true")
    EMBEDDING_BATCH_SIZE: int = int(os.getenv("EMBEDDING_BATCH_SIZE", "100"))

    # Chat Model Configuration
    CHAT_MODEL: str = os.getenv("CHAT_MODEL", "gpt-4.1-nano-2025-04-14")
    CHAT_MAX_TOKENS: int = int(os.getenv("CHAT_MAX_TOKENS", "600"))
    STAR_MAX_TOKENS: int = int(os.getenv("STAR_MAX_TOKENS", "800"))

    # Retrieval Configuration
    LEXICAL_WEIGHT: float = float(os.getenv("LEXICAL_WEIGHT", "0.35"))
    SEMANTIC_WEIGHT: float = float(os.getenv("SEMANTIC_WEIGHT", "0.65"))
    STRONG_THRESHOLD: float = float(os.getenv("STRONG_THRESHOLD", "0.9"))
    WEAK_THRESHOLD: float = float(os.getenv("WEAK_THRESHOLD", "0.3"))
    LEXICAL_STRONG_SCORE: int = int(os.getenv("LEXICAL_STRONG_SCORE", "12"))
    RETRIEVAL_LIMIT: int = int(os.getenv("RETRIEVAL_LIMIT", "5"))

    # Context and Post-processing Configuration
    CONTEXT_MAX_ENTRIES: int = int(os.getenv("CONTEXT_MAX_ENTRIES", "5"))
    CONTEXT_MAX_CHARS: int = int(os.getenv("CONTEXT_MAX_CHARS", "6000"))
    REPEAT_THRESHOLD: float = float(os.getenv("REPEAT_THRESHOLD", "0.8"))

    # API Header Configuration
    API_USER_AGENT: str = os.getenv("API_USER_AGENT", "AgentK/1.0")
    API_TEST_HEADER_NAME: str | None = os.getenv("API_TEST_HEADER_NAME")
    API_TEST_HEADER_VALUE: str | None = os.getenv("API_TEST_HEADER_VALUE")

    @classmethod
    def validate(cls) -> None:
        """Validate required configuration values.

        Raises:
            ValueError: If OPENAI_API_KEY is not set or the confidence
                thresholds are inconsistent.
        """
        if not cls.get_openai_api_key():
            msg = (
                "OPENAI_API_KEY is required. Please set it in .env file or environment."
            )
            raise ValueError(msg)
        if not 0.0 < cls.WEAK_THRESHOLD < cls.STRONG_THRESHOLD <= 1.0:
            msg = "Thresholds must satisfy 0 < WEAK_THRESHOLD < STRONG_THRESHOLD <= 1."
            raise ValueError(msg)

    @classmethod
    def is_development(cls) -> bool:
        """Check if running in development environment.

        Returns:
            True if environment is development.
        """
        return cls.ENVIRONMENT.lower() == "development"

    @classmethod
    def setup_logging(cls) -> None:
        """Setup basic logging configuration.

        Configure logging once at application startup with:
        - Console output for all levels
        - Simple, readable format
        - Configurable level via environment variable
        - Time-only timestamps in development, full dates elsewhere
        """
        logging.basicConfig(
            level=getattr(logging, cls.LOG_LEVEL, logging.INFO),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S" if cls.is_development() else "%Y-%m-%d %H:%M:%S",
        )

        # Third-party client loggers are noisy at INFO
        third_party_level = getattr(logging, cls.OPENAI_LOG_LEVEL, logging.WARNING)
        for name in ("openai", "httpx"):
            logging.getLogger(name).setLevel(third_party_level)

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Get a logger with the specified name.

        Args:
            name: Logger name (typically __name__)

        Returns:
            Logger instance
        """
        return logging.getLogger(name)

    @classmethod
    def get_api_headers(cls) -> dict[str, str]:
        """Build default headers for outbound API calls.

        Returns:
            Mapping of header names to values used on outbound HTTP requests.
        """
        headers: dict[str, str] = {}

        if cls.API_USER_AGENT:
            headers["User-Agent"] = cls.API_USER_AGENT

        if cls.API_TEST_HEADER_NAME and cls.API_TEST_HEADER_VALUE:
            headers[cls.API_TEST_HEADER_NAME] = cls.API_TEST_HEADER_VALUE

        return headers


config = Config()
