"""Tests for tutor feedback and feedback clients.

Tests cover:
- MockFeedbackClient canned answers
- TutorFeedback graceful degradation (quota, failure, empty answers)
- Grammar focus defaults
- Engine selection
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from fivestep.config.constants import CURRICULUM
from fivestep.config.settings import Settings
from fivestep.exceptions import FeedbackError, InvalidConfigError, MissingConfigError
from fivestep.feedback import create_feedback_client
from fivestep.feedback.mock_client import DEFAULT_RESPONSE, MockFeedbackClient
from fivestep.feedback.tutor import (
    EMPTY_MESSAGE,
    QUOTA_MESSAGE,
    UNAVAILABLE_MESSAGE,
    TutorFeedback,
)


def failing_client(error: Exception) -> MockFeedbackClient:
    client = MockFeedbackClient()
    client.generate = AsyncMock(side_effect=error)
    return client


def answering_client(text: str) -> MockFeedbackClient:
    client = MockFeedbackClient()
    client.generate = AsyncMock(return_value=text)
    return client


class TestMockFeedbackClient:
    @pytest.mark.asyncio
    async def test_pattern_match_is_case_insensitive(self):
        client = MockFeedbackClient()
        answer = await client.generate("Please EXPLAIN THE GRAMMAR of this")
        assert "simple past" in answer

    @pytest.mark.asyncio
    async def test_default(self):
        client = MockFeedbackClient()
        assert await client.generate("something unrelated") == DEFAULT_RESPONSE
        assert client.prompts == ["something unrelated"]

    @pytest.mark.asyncio
    async def test_custom_responses(self):
        client = MockFeedbackClient(responses={"cat": "meow"}, default="?")
        assert await client.generate("the cat") == "meow"
        assert await client.generate("the dog") == "?"


class TestTutorFeedback:
    """Tests for TutorFeedback."""

    @pytest.mark.asyncio
    async def test_hint_prompt(self, tutor, feedback_client):
        answer = await tutor.hint("The cat sat on the mat.")

        assert answer == "Think about what usually happens in this situation."
        prompt = feedback_client.prompts[-1]
        assert '"The cat sat on the mat."' in prompt
        assert "Do not translate" in prompt

    @pytest.mark.asyncio
    async def test_system_instruction_passed(self):
        client = answering_client("ok")
        tutor = TutorFeedback(client, system_instruction="be brief")

        await tutor.explain("A sentence.")

        assert client.generate.await_args.args[1] == "be brief"

    @pytest.mark.asyncio
    async def test_correct_summary_includes_both_texts(self, tutor, feedback_client):
        await tutor.correct_summary("Original story.", "My summary.")
        prompt = feedback_client.prompts[-1]
        assert "Original story." in prompt
        assert "My summary." in prompt

    @pytest.mark.asyncio
    async def test_check_structure(self, tutor):
        answer = await tutor.check_structure("Used to", "I used to swim.")
        assert answer == "Well done! You used the structure correctly."

    @pytest.mark.asyncio
    async def test_answers_are_trimmed(self):
        tutor = TutorFeedback(answering_client("  Nice work.\n"))
        assert await tutor.hint("x") == "Nice work."

    @pytest.mark.asyncio
    async def test_empty_answer(self):
        tutor = TutorFeedback(answering_client("   "))
        assert await tutor.explain("x") == EMPTY_MESSAGE

    @pytest.mark.asyncio
    async def test_quota_failure_message(self):
        tutor = TutorFeedback(failing_client(FeedbackError("429 RESOURCE_EXHAUSTED")))
        assert await tutor.hint("x") == QUOTA_MESSAGE

    @pytest.mark.asyncio
    async def test_quota_detected_from_cause(self):
        class ProviderError(Exception):
            code = 429

        error = FeedbackError("provider error")
        error.__cause__ = ProviderError("too many")
        tutor = TutorFeedback(failing_client(error))

        assert await tutor.correct_summary("a", "b") == QUOTA_MESSAGE

    @pytest.mark.asyncio
    async def test_other_failure_message(self):
        tutor = TutorFeedback(failing_client(FeedbackError("connection reset")))
        assert await tutor.check_structure("x", "y") == UNAVAILABLE_MESSAGE

    @pytest.mark.asyncio
    async def test_unexpected_errors_propagate(self):
        tutor = TutorFeedback(failing_client(RuntimeError("bug")))
        with pytest.raises(RuntimeError):
            await tutor.hint("x")


class TestGrammarFocus:
    @pytest.mark.asyncio
    async def test_extracts_focus(self, tutor):
        assert await tutor.extract_grammar_focus("Yesterday I walked.") == "Simple Past Tense"

    @pytest.mark.asyncio
    async def test_no_system_instruction(self):
        client = answering_client("Used to...")
        tutor = TutorFeedback(client)

        await tutor.extract_grammar_focus("text")

        assert len(client.generate.await_args.args) == 1

    @pytest.mark.asyncio
    async def test_quotes_stripped(self):
        tutor = TutorFeedback(answering_client(' "It takes..." \n'))
        assert await tutor.extract_grammar_focus("text") == "It takes..."

    @pytest.mark.asyncio
    async def test_empty_answer_uses_default(self):
        tutor = TutorFeedback(answering_client(""))
        assert await tutor.extract_grammar_focus("text") == CURRICULUM.DEFAULT_GRAMMAR_FOCUS

    @pytest.mark.asyncio
    async def test_failure_uses_fallback(self):
        tutor = TutorFeedback(failing_client(FeedbackError("quota")))
        assert await tutor.extract_grammar_focus("text") == CURRICULUM.FALLBACK_GRAMMAR_FOCUS


class TestCreateFeedbackClient:
    """Tests for engine selection."""

    def test_mock(self, test_settings):
        assert isinstance(create_feedback_client("mock", test_settings), MockFeedbackClient)

    def test_engine_from_settings(self, test_settings):
        assert create_feedback_client(settings=test_settings).name == "mock"

    def test_gemini_requires_key(self):
        settings = Settings(feedback_engine="gemini", gemini_api_key=None)
        with pytest.raises(MissingConfigError):
            create_feedback_client(settings=settings)

    def test_gemini(self):
        settings = Settings(gemini_api_key="test-key", feedback_model="gemini-2.5-flash")
        client = create_feedback_client("gemini", settings)
        assert client.name == "gemini"
        assert client.model == "gemini-2.5-flash"

    def test_anthropic_requires_key(self):
        settings = Settings(anthropic_api_key=None)
        with pytest.raises(MissingConfigError):
            create_feedback_client("anthropic", settings)

    def test_anthropic(self):
        settings = Settings(anthropic_api_key="test-key")
        client = create_feedback_client("anthropic", settings)
        assert client.name == "anthropic"

    def test_unknown_engine(self, test_settings):
        with pytest.raises(InvalidConfigError, match="feedback_engine"):
            create_feedback_client("openai", test_settings)


class TestGeminiFeedbackClient:
    @pytest.mark.asyncio
    async def test_generate(self):
        from fivestep.feedback.gemini_client import (
            GeminiFeedbackClient,
            GeminiFeedbackConfig,
        )

        sdk = MagicMock()
        sdk.aio.models.generate_content = AsyncMock(
            return_value=SimpleNamespace(text="Nice.")
        )
        with patch("fivestep.feedback.gemini_client.genai.Client", return_value=sdk):
            client = GeminiFeedbackClient(GeminiFeedbackConfig(api_key="k"))
            answer = await client.generate("prompt", "system")

        assert answer == "Nice."
        kwargs = sdk.aio.models.generate_content.await_args.kwargs
        assert kwargs["contents"] == "prompt"
        assert kwargs["config"].system_instruction == "system"

    @pytest.mark.asyncio
    async def test_provider_error_wrapped(self):
        from fivestep.feedback.gemini_client import (
            GeminiFeedbackClient,
            GeminiFeedbackConfig,
        )

        sdk = MagicMock()
        sdk.aio.models.generate_content = AsyncMock(side_effect=RuntimeError("429 quota"))
        with patch("fivestep.feedback.gemini_client.genai.Client", return_value=sdk):
            client = GeminiFeedbackClient(GeminiFeedbackConfig(api_key="k"))
            with pytest.raises(FeedbackError) as exc_info:
                await client.generate("prompt")

        assert isinstance(exc_info.value.__cause__, RuntimeError)


class TestAnthropicFeedbackClient:
    @pytest.mark.asyncio
    async def test_generate_joins_text_blocks(self):
        from fivestep.feedback.anthropic_client import (
            AnthropicFeedbackClient,
            AnthropicFeedbackConfig,
        )

        sdk = MagicMock()
        sdk.messages.create = AsyncMock(
            return_value=SimpleNamespace(
                content=[
                    SimpleNamespace(type="text", text="Good "),
                    SimpleNamespace(type="tool_use"),
                    SimpleNamespace(type="text", text="job."),
                ]
            )
        )
        sdk.close = AsyncMock()
        with patch("fivestep.feedback.anthropic_client.AsyncAnthropic", return_value=sdk):
            client = AnthropicFeedbackClient(AnthropicFeedbackConfig(api_key="k"))
            answer = await client.generate("prompt", "system")
            await client.close()

        assert answer == "Good job."
        kwargs = sdk.messages.create.await_args.kwargs
        assert kwargs["system"] == "system"
        assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]
        sdk.close.assert_awaited_once()
