"""Session Manager - Owns concurrent learner sessions.

All sessions share one SpeechCache (through one gateway), so a text
synthesized for one learner is served from cache for every other.
"""

from __future__ import annotations

import asyncio
import uuid

from fivestep.audio.tts import create_speech_gateway
from fivestep.audio.tts.cache import SpeechCache
from fivestep.audio.tts.gateway import SpeechSynthesisGateway
from fivestep.config.constants import CURRICULUM
from fivestep.config.settings import Settings, get_settings
from fivestep.exceptions import (
    SessionExistsError,
    SessionLimitError,
    SessionNotFoundError,
)
from fivestep.feedback import TutorFeedback, create_feedback_client
from fivestep.observability.logging import get_logger
from fivestep.observability.metrics import record_session_end, record_session_start
from fivestep.orchestrator.controller import SessionController
from fivestep.orchestrator.state_machine import Stage

logger = get_logger(__name__)


class SessionManager:
    """Manages multiple concurrent sessions.

    Provides:
    - Session creation and lookup
    - Concurrent session limits
    - Session cleanup

    Usage:
        manager = await SessionManager.from_settings()

        session = await manager.create_session()
        # ... use session ...
        await manager.end_session(session.session_id)
    """

    def __init__(
        self,
        gateway: SpeechSynthesisGateway,
        tutor: TutorFeedback,
        max_sessions: int = CURRICULUM.MAX_CONCURRENT_SESSIONS,
        min_chunk_words: int = CURRICULUM.MIN_CHUNK_WORDS,
    ) -> None:
        self._gateway = gateway
        self._tutor = tutor
        self._max_sessions = max_sessions
        self._min_chunk_words = min_chunk_words
        self._sessions: dict[str, SessionController] = {}
        self._lock = asyncio.Lock()

    @classmethod
    async def from_settings(cls, settings: Settings | None = None) -> "SessionManager":
        """Build the shared cache, gateway and tutor from settings."""
        settings = settings or get_settings()
        gateway = await create_speech_gateway(cache=SpeechCache(), settings=settings)
        client = create_feedback_client(settings=settings)
        await client.start()
        return cls(
            gateway=gateway,
            tutor=TutorFeedback(client),
            max_sessions=settings.max_concurrent_sessions,
            min_chunk_words=settings.min_chunk_words,
        )

    @property
    def gateway(self) -> SpeechSynthesisGateway:
        return self._gateway

    @property
    def cache(self) -> SpeechCache:
        return self._gateway.cache

    @property
    def tutor(self) -> TutorFeedback:
        return self._tutor

    @property
    def max_sessions(self) -> int:
        return self._max_sessions

    @property
    def active_count(self) -> int:
        """Number of active sessions."""
        return len(self._sessions)

    @property
    def available_slots(self) -> int:
        """Number of available session slots."""
        return self._max_sessions - len(self._sessions)

    async def create_session(self, session_id: str | None = None) -> SessionController:
        """Create and start a new session.

        Raises:
            SessionLimitError: If every slot is taken
            SessionExistsError: If session_id is already in use
        """
        async with self._lock:
            if session_id and session_id in self._sessions:
                raise SessionExistsError(session_id)
            if len(self._sessions) >= self._max_sessions:
                logger.warning(
                    "session_limit_reached",
                    max_sessions=self._max_sessions,
                )
                raise SessionLimitError(self._max_sessions, len(self._sessions))

            session_id = session_id or f"session-{uuid.uuid4().hex[:12]}"
            session = SessionController(
                session_id,
                self._gateway,
                self._tutor,
                min_chunk_words=self._min_chunk_words,
            )
            session.start()

            self._sessions[session_id] = session
            record_session_start()
            return session

    def get_session(self, session_id: str) -> SessionController | None:
        """Get session by ID."""
        return self._sessions.get(session_id)

    async def end_session(self, session_id: str, reason: str = "normal") -> None:
        """End and remove a session.

        Raises:
            SessionNotFoundError: If no such session is active
        """
        async with self._lock:
            session = self._sessions.pop(session_id, None)
            if session is None:
                raise SessionNotFoundError(session_id)
            await session.close(reason)
            record_session_end(reason)

    async def end_all_sessions(self, reason: str = "shutdown") -> int:
        """End all active sessions.

        Returns:
            Number of sessions ended
        """
        async with self._lock:
            count = len(self._sessions)
            for session in list(self._sessions.values()):
                await session.close(reason)
                record_session_end(reason)
            self._sessions.clear()
            return count

    async def shutdown(self) -> None:
        """End every session and release shared provider clients."""
        await self.end_all_sessions("shutdown")
        await self._tutor.client.close()
        await self._gateway.backend.shutdown()

    def list_sessions(self) -> list[str]:
        """List all active session IDs."""
        return list(self._sessions.keys())

    def get_sessions_by_stage(self, stage: Stage) -> list[SessionController]:
        """Sessions currently in a given stage."""
        return [s for s in self._sessions.values() if s.stage == stage]
