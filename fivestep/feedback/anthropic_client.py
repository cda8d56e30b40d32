"""Anthropic Feedback Client - Tutor text via Claude models."""

from __future__ import annotations

from dataclasses import dataclass

from anthropic import APIError, AsyncAnthropic

from fivestep.exceptions import FeedbackError
from fivestep.feedback.base import FeedbackClient
from fivestep.observability.logging import get_logger

logger = get_logger(__name__)


@dataclass
class AnthropicFeedbackConfig:
    """Configuration for the Anthropic feedback client."""

    api_key: str
    model: str = "claude-3-5-sonnet-20241022"
    max_tokens: int = 512
    temperature: float = 0.7
    timeout_s: float = 30.0


class AnthropicFeedbackClient(FeedbackClient):
    """Non-streaming Claude completion.

    Usage:
        client = AnthropicFeedbackClient(AnthropicFeedbackConfig(api_key=key))
        await client.start()
        text = await client.generate(prompt, system_instruction=SYSTEM)
        await client.close()
    """

    def __init__(self, config: AnthropicFeedbackConfig) -> None:
        self._config = config
        self._client: AsyncAnthropic | None = None

    @property
    def name(self) -> str:
        return "anthropic"

    @property
    def model(self) -> str:
        return self._config.model

    async def start(self) -> None:
        if self._client is None:
            self._client = AsyncAnthropic(
                api_key=self._config.api_key,
                timeout=self._config.timeout_s,
            )
            logger.info(
                "anthropic_feedback_started",
                model=self._config.model,
                max_tokens=self._config.max_tokens,
            )

    async def generate(
        self,
        prompt: str,
        system_instruction: str | None = None,
    ) -> str:
        if self._client is None:
            await self.start()

        try:
            message = await self._client.messages.create(
                model=self._config.model,
                max_tokens=self._config.max_tokens,
                temperature=self._config.temperature,
                system=system_instruction or "",
                messages=[{"role": "user", "content": prompt}],
            )
        except APIError as e:
            logger.warning(
                "anthropic_feedback_failed",
                error=str(e),
                status_code=getattr(e, "status_code", None),
            )
            raise FeedbackError(str(e), model=self._config.model) from e

        return "".join(
            block.text for block in message.content if getattr(block, "type", "") == "text"
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
