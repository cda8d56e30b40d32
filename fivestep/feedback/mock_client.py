"""Mock Feedback Client - For testing without a model provider.

Usage:
    Set FEEDBACK_ENGINE=mock in .env to use this client.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from fivestep.feedback.base import FeedbackClient

# Canned answers keyed by a phrase that appears in the prompt
PATTERN_RESPONSES = {
    "contextual clue": "Think about what usually happens in this situation.",
    "Explain the grammar": "This sentence uses the simple past to describe a finished action.",
    "summarized the text": "Good summary! Small fix: use the past tense throughout. Understanding: 8/10.",
    "required structure": "Well done! You used the structure correctly.",
    "ONE key grammatical structure": "Simple Past Tense",
}

DEFAULT_RESPONSE = "Good work. Keep going!"


@dataclass
class MockFeedbackClient(FeedbackClient):
    """Deterministic canned feedback.

    Records prompts so tests can assert on what was asked.
    """

    responses: dict[str, str] = field(default_factory=lambda: dict(PATTERN_RESPONSES))
    default: str = DEFAULT_RESPONSE
    prompts: list[str] = field(default_factory=list)

    @property
    def name(self) -> str:
        return "mock"

    @property
    def model(self) -> str:
        return "mock"

    async def generate(
        self,
        prompt: str,
        system_instruction: str | None = None,
    ) -> str:
        self.prompts.append(prompt)
        for pattern, response in self.responses.items():
            if pattern.lower() in prompt.lower():
                return response
        return self.default
