"""Gemini Feedback Client - Tutor text via google-genai."""

from __future__ import annotations

from dataclasses import dataclass

from google import genai
from google.genai import types

from fivestep.exceptions import FeedbackError
from fivestep.feedback.base import FeedbackClient
from fivestep.observability.logging import get_logger

logger = get_logger(__name__)


@dataclass
class GeminiFeedbackConfig:
    """Configuration for the Gemini feedback client."""

    api_key: str
    model: str = "gemini-2.5-flash"
    temperature: float | None = None
    max_output_tokens: int | None = None


class GeminiFeedbackClient(FeedbackClient):
    """Single-shot Gemini text generation.

    Usage:
        client = GeminiFeedbackClient(GeminiFeedbackConfig(api_key=key))
        await client.start()
        text = await client.generate(prompt, system_instruction=SYSTEM)
    """

    def __init__(self, config: GeminiFeedbackConfig) -> None:
        self._config = config
        self._client: genai.Client | None = None

    @property
    def name(self) -> str:
        return "gemini"

    @property
    def model(self) -> str:
        return self._config.model

    async def start(self) -> None:
        if self._client is None:
            self._client = genai.Client(api_key=self._config.api_key)
            logger.info("gemini_feedback_started", model=self._config.model)

    async def generate(
        self,
        prompt: str,
        system_instruction: str | None = None,
    ) -> str:
        if self._client is None:
            await self.start()

        try:
            response = await self._client.aio.models.generate_content(
                model=self._config.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    system_instruction=system_instruction,
                    temperature=self._config.temperature,
                    max_output_tokens=self._config.max_output_tokens,
                ),
            )
        except Exception as e:
            logger.warning("gemini_feedback_failed", model=self._config.model, error=str(e))
            raise FeedbackError(str(e) or type(e).__name__, model=self._config.model) from e

        return response.text or ""

    async def close(self) -> None:
        self._client = None
