"""Anthropic text generation adapter.

Retries only on Claude 529 OverloadedError; every other API error surfaces
immediately as GenerationError so the registry can fall back.
"""

import anthropic
import structlog
from anthropic._exceptions import OverloadedError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from studykit.core.config import get_settings
from studykit.core.exceptions import GenerationError

logger = structlog.get_logger(__name__)


class AnthropicTextGenerator:
    """TextGenerator backed by anthropic.AsyncAnthropic messages API."""

    def __init__(
        self,
        model: str | None = None,
        api_key: str | None = None,
        max_tokens: int | None = None,
        client: anthropic.AsyncAnthropic | None = None,
    ) -> None:
        settings = get_settings()
        self.model = model or settings.text_model
        self.max_tokens = max_tokens or settings.text_max_tokens
        self._client = client or anthropic.AsyncAnthropic(api_key=api_key or settings.anthropic_api_key)

    @retry(
        retry=retry_if_exception_type(OverloadedError),
        stop=stop_after_attempt(4),
        wait=wait_exponential(multiplier=2, min=2, max=30),
        reraise=True,
        before_sleep=lambda rs: logger.warning(
            "claude_overloaded_retrying",
            attempt=rs.attempt_number,
            sleep_seconds=rs.next_action.sleep,
        ),
    )
    async def _create(self, prompt: str, system: str | None) -> str:
        kwargs = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            kwargs["system"] = system
        response = await self._client.messages.create(**kwargs)
        return "".join(block.text for block in response.content if getattr(block, "type", "text") == "text")

    async def generate(self, prompt: str, system: str | None = None) -> str:
        try:
            text = await self._create(prompt, system)
        except anthropic.APIError as exc:
            logger.warning("anthropic_generation_failed", model=self.model, error=str(exc), error_type=type(exc).__name__)
            raise GenerationError(f"Anthropic API error: {type(exc).__name__}") from exc

        if not text.strip():
            raise GenerationError("Anthropic returned an empty completion")
        return text
