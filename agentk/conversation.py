"""Answer engine: routes one query through classification, retrieval and generation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .config import config
from .context import build_context
from .exceptions import GenerationError, InvalidQueryError
from .intents import Intent, IntentClassifier
from .models import ConfidenceTier, ConversationTurn
from .normalizer import normalize_query
from .postprocess import format_paragraphs, sanitize
from .repetition import is_repeat
from .responses import (
    FALLBACK_ANSWER,
    Shape,
    build_retry_message,
    build_system_prompt,
    build_user_message,
    canned_response,
    select_shape,
)

if TYPE_CHECKING:
    from .generation import GenerationService
    from .retrieval import RetrievalService

logger = config.get_logger(__name__)

STAR_TEMPERATURE = 0.4
GROUNDED_TEMPERATURE = 0.3
UNGROUNDED_TEMPERATURE = 0.6
RETRY_TEMPERATURE_BOOST = 0.2

_STAR_SHAPES = {Shape.GENERATED_STAR, Shape.GENERATED_STAR_MULTIPART}


@dataclass
class Answer:
    """Final answer plus how it was produced."""

    text: str
    shape: Shape
    intent: Intent
    tier: ConfidenceTier | None = None
    regenerated: bool = False


class AnswerEngine:
    """Stateless question answering over the knowledge base."""

    def __init__(
        self,
        retrieval: RetrievalService,
        generation: GenerationService,
        classifier: IntentClassifier | None = None,
        subject_name: str | None = None,
        persona_name: str | None = None,
    ) -> None:
        """Initialize AnswerEngine.

        Args:
            retrieval: Shared read-only retrieval service.
            generation: Chat-completion client.
            classifier: Intent classifier. If None, one is built from the
                subject name and the knowledge-base keywords.
            subject_name: Person being described. Defaults to config.
            persona_name: Assistant persona name. Defaults to config.
        """
        self.retrieval = retrieval
        self.generation = generation
        self.subject_name = subject_name or config.SUBJECT_NAME
        self.persona_name = persona_name or config.PERSONA_NAME
        self.classifier = classifier or IntentClassifier(
            self.subject_name, retrieval.keyword_vocabulary
        )

    def answer(self, query: str, last_bot_message: str = "") -> str:
        """Answer a query; see ``respond``."""
        return self.respond(ConversationTurn(query, last_bot_message or "")).text

    def respond(self, turn: ConversationTurn) -> Answer:
        """Answer one conversation turn.

        Returns:
            Answer with the final text.

        Raises:
            InvalidQueryError: If the query is empty.
        """
        raw_query = (turn.query or "").strip()
        if not raw_query:
            msg = "Query required"
            raise InvalidQueryError(msg)

        normalized = normalize_query(raw_query)
        decision = self.classifier.classify(normalized, turn.last_bot_message)
        logger.info("Query %r classified as %s", normalized[:50], decision.intent.value)

        if not decision.needs_retrieval:
            text = canned_response(decision, self.subject_name, self.persona_name)
            return Answer(format_paragraphs(text), Shape.CANNED, decision.intent)

        result = self.retrieval.search(decision.query)
        tier = result.tier
        logger.info(
            "Found %d relevant entries (tier=%s, confidence=%.3f, semantic=%s)",
            len(result.entries),
            tier.value,
            result.confidence,
            result.semantic_active,
        )

        if tier is ConfidenceTier.STRONG and result.top is not None:
            logger.info("Knowledge base direct hit on entry %d", result.top.index)
            return Answer(
                format_paragraphs(result.top.entry.answer),
                Shape.VERBATIM,
                decision.intent,
                tier,
            )

        context = build_context(result.entries, tier, self.retrieval.knowledge_base)
        shape = select_shape(decision, has_matches=tier is not ConfidenceTier.NONE)
        system_prompt = build_system_prompt(
            context, self.subject_name, self.persona_name
        )
        user_message = build_user_message(shape, decision.query, self.subject_name)
        temperature, max_tokens = self._generation_params(shape, tier)

        first = self._generate(system_prompt, user_message, temperature, max_tokens)
        if first is None:
            return Answer(FALLBACK_ANSWER, shape, decision.intent, tier)

        previous = (turn.last_bot_message or "").strip()
        if not previous or not is_repeat(previous, first):
            return Answer(first, shape, decision.intent, tier)

        logger.info("Answer repeats the previous turn; regenerating once")
        try:
            second = self._generate(
                system_prompt,
                build_retry_message(user_message, previous),
                temperature + RETRY_TEMPERATURE_BOOST,
                max_tokens,
            )
        except GenerationError:
            logger.warning("Regeneration failed; keeping the first answer")
            second = None

        if second is None or is_repeat(previous, second):
            return Answer(first, shape, decision.intent, tier)
        return Answer(second, shape, decision.intent, tier, regenerated=True)

    @staticmethod
    def _generation_params(shape: Shape, tier: ConfidenceTier) -> tuple[float, int]:
        if shape in _STAR_SHAPES:
            return STAR_TEMPERATURE, config.STAR_MAX_TOKENS
        if tier is ConfidenceTier.WEAK:
            return GROUNDED_TEMPERATURE, config.CHAT_MAX_TOKENS
        return UNGROUNDED_TEMPERATURE, config.CHAT_MAX_TOKENS

    def _generate(
        self,
        system_prompt: str,
        user_message: str,
        temperature: float,
        max_tokens: int,
    ) -> str | None:
        raw = self.generation.generate(
            system_prompt,
            user_message,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        if not raw:
            logger.warning("Generation returned no content")
            return None
        return sanitize(raw, self.subject_name, self.persona_name) or None
