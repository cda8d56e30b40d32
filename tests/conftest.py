"""Pytest configuration and shared fixtures."""

import os
from typing import Generator

import numpy as np
import pytest
from fastapi.testclient import TestClient

# Set test environment variables before importing settings
os.environ.update({
    "MAX_CONCURRENT_SESSIONS": "5",
    "SYNTHESIS_ENGINE": "mock",  # Silence instead of Gemini TTS
    "FEEDBACK_ENGINE": "mock",  # Canned tutor answers
    "ENVIRONMENT": "development",
    "LOG_LEVEL": "DEBUG",
})


class FakeOutput:
    """AudioOutput double that records what was played."""

    def __init__(self) -> None:
        self.played: list[tuple[np.ndarray, int]] = []
        self.stops = 0
        self.closed = False
        self._active = False

    def play(self, samples: np.ndarray, sample_rate: int) -> None:
        self.played.append((samples, sample_rate))
        self._active = True

    def stop(self) -> None:
        self.stops += 1
        self._active = False

    @property
    def is_active(self) -> bool:
        return self._active

    def close(self) -> None:
        self.closed = True
        self._active = False


@pytest.fixture
def test_settings():
    """Provide test settings instance."""
    from fivestep.config.settings import Settings
    return Settings(
        max_concurrent_sessions=5,
        synthesis_engine="mock",
        feedback_engine="mock",
        quota_retry_delay_s=0.0,
    )


@pytest.fixture
def mock_backend():
    """Synthesis backend returning silence."""
    from fivestep.audio.tts.backends.mock_backend import MockBackend
    return MockBackend()


@pytest.fixture
def speech_cache():
    from fivestep.audio.tts.cache import SpeechCache
    return SpeechCache()


@pytest.fixture
def gateway(mock_backend, speech_cache):
    """Gateway over the mock backend with no retry delay."""
    from fivestep.audio.tts.gateway import SpeechSynthesisGateway
    return SpeechSynthesisGateway(mock_backend, speech_cache, quota_retry_delay_s=0.0)


@pytest.fixture
def feedback_client():
    from fivestep.feedback.mock_client import MockFeedbackClient
    return MockFeedbackClient()


@pytest.fixture
def tutor(feedback_client):
    from fivestep.feedback.tutor import TutorFeedback
    return TutorFeedback(feedback_client)


@pytest.fixture
def fake_output() -> FakeOutput:
    return FakeOutput()


@pytest.fixture
def controller(gateway, tutor):
    """Started SessionController over mock engines."""
    from fivestep.orchestrator.controller import SessionController
    session = SessionController("session-test", gateway, tutor)
    session.start()
    return session


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """Provide FastAPI test client."""
    from fivestep.main import app
    with TestClient(app) as c:
        yield c
