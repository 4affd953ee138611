"""Chat-completion client used to generate grounded answers."""

from openai import APIConnectionError, APIStatusError, OpenAI

from .config import config
from .exceptions import GenerationError

logger = config.get_logger(__name__)


class GenerationService:
    """Sends a system instruction plus one user message to a chat model."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
    ) -> None:
        """Initialize the GenerationService.

        Args:
            api_key: API key. If None, reads from OPENAI_API_KEY.
            model: Chat model name. If None, uses config.CHAT_MODEL.
        """
        default_headers = config.get_api_headers()
        self.client = OpenAI(
            api_key=api_key or config.get_openai_api_key(),
            base_url=config.OPENAI_BASE_URL,
            timeout=config.OPENAI_TIMEOUT,
            default_headers=default_headers or None,
        )
        self.model = model or config.CHAT_MODEL

    def generate(
        self,
        system_prompt: str,
        user_message: str,
        *,
        temperature: float,
        max_tokens: int,
    ) -> str | None:
        """Generate a reply.

        Returns:
            The stripped reply text, or None when the API answered with an
            error status or an empty message.

        Raises:
            GenerationError: If the API could not be reached at all.
        """
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_message},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except APIConnectionError as e:
            logger.exception("Generation service unreachable")
            msg = "Generation service unreachable"
            raise GenerationError(msg) from e
        except APIStatusError as e:
            logger.warning("Generation service returned status %s", e.status_code)
            return None

        if not response.choices:
            return None
        content = response.choices[0].message.content
        return content.strip() if content and content.strip() else None
