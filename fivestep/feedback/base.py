"""Feedback Client Interface - Text generation for tutor feedback.

All feedback engines implement this interface. TutorFeedback talks only
to FeedbackClient, so engines can be swapped via FEEDBACK_ENGINE.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class FeedbackClient(ABC):
    """Abstract base class for text feedback engines.

    Implementations raise FeedbackError (chained to the provider error)
    when generation fails.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Engine name identifier."""
        ...

    @property
    @abstractmethod
    def model(self) -> str:
        """Model used for generation."""
        ...

    async def start(self) -> None:
        """Create provider clients. Default: no-op."""
        pass

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        system_instruction: str | None = None,
    ) -> str:
        """Generate a complete text answer.

        Args:
            prompt: The user-turn prompt
            system_instruction: Optional system instruction

        Returns:
            Generated text (may be empty)
        """
        ...

    async def close(self) -> None:
        """Release provider clients. Default: no-op."""
        pass
