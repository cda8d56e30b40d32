"""Tutor Feedback - The five feedback operations of the curriculum.

Wraps a FeedbackClient with prompts and safe defaults. None of these
methods raise on provider failure: the learner always gets a message.
"""

from __future__ import annotations

from fivestep.config.constants import CURRICULUM
from fivestep.exceptions import FeedbackError
from fivestep.feedback import prompts
from fivestep.feedback.base import FeedbackClient
from fivestep.observability.logging import get_logger
from fivestep.utils.errors import is_quota_error

logger = get_logger(__name__)

QUOTA_MESSAGE = (
    "⚠️ API quota exceeded (429). Please wait a minute and try again."
)
UNAVAILABLE_MESSAGE = "Unable to get feedback at this time."
EMPTY_MESSAGE = "I don't have feedback for that yet. Let's keep going!"


class TutorFeedback:
    """Tutor feedback with graceful degradation.

    Usage:
        tutor = TutorFeedback(create_feedback_client())
        clue = await tutor.hint(chunk)
        focus = await tutor.extract_grammar_focus(raw_text)
    """

    def __init__(
        self,
        client: FeedbackClient,
        system_instruction: str = prompts.SYSTEM_INSTRUCTION,
    ) -> None:
        self._client = client
        self._system_instruction = system_instruction

    @property
    def client(self) -> FeedbackClient:
        return self._client

    async def hint(self, chunk: str) -> str:
        """Non-translating contextual clue for a chunk."""
        return await self._feedback(
            "hint", prompts.HINT_TEMPLATE.format(chunk=chunk)
        )

    async def explain(self, chunk: str) -> str:
        """Grammar and meaning of a chunk in simple terms."""
        return await self._feedback(
            "explain", prompts.EXPLAIN_TEMPLATE.format(chunk=chunk)
        )

    async def correct_summary(self, source: str, summary: str) -> str:
        """Polite grammar correction plus an understanding score out of 10."""
        return await self._feedback(
            "correct_summary",
            prompts.CORRECT_SUMMARY_TEMPLATE.format(source=source, summary=summary),
        )

    async def check_structure(self, structure: str, sentence: str) -> str:
        """Praise or correct the learner's use of a grammar structure."""
        return await self._feedback(
            "check_structure",
            prompts.CHECK_STRUCTURE_TEMPLATE.format(
                structure=structure, sentence=sentence
            ),
        )

    async def extract_grammar_focus(self, source: str) -> str:
        """Name ONE structure from source for the learner to practise.

        Falls back to FALLBACK_GRAMMAR_FOCUS on failure and
        DEFAULT_GRAMMAR_FOCUS on an empty answer.
        """
        try:
            text = await self._client.generate(
                prompts.GRAMMAR_FOCUS_TEMPLATE.format(source=source)
            )
        except FeedbackError as e:
            logger.warning("grammar_focus_failed", engine=self._client.name, error=str(e))
            return CURRICULUM.FALLBACK_GRAMMAR_FOCUS

        focus = text.strip().strip('"').strip()
        return focus or CURRICULUM.DEFAULT_GRAMMAR_FOCUS

    async def _feedback(self, kind: str, prompt: str) -> str:
        try:
            text = await self._client.generate(prompt, self._system_instruction)
        except FeedbackError as e:
            quota = is_quota_error(e)
            logger.warning(
                "feedback_failed",
                kind=kind,
                engine=self._client.name,
                quota=quota,
                error=str(e),
            )
            return QUOTA_MESSAGE if quota else UNAVAILABLE_MESSAGE

        text = text.strip()
        if not text:
            logger.debug("feedback_empty", kind=kind, engine=self._client.name)
            return EMPTY_MESSAGE
        return text
