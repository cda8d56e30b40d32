"""Structured Logging - JSON logs with correlation.

Provides structured logging for:
- Session events (start, end, stage changes)
- Learner turns (started, completed, failed, rejected)
- Speech synthesis (cache, retries, fallback, manual retry)

All session logs include session_id for correlation.
"""

import logging
import sys
from typing import Any

import structlog


def configure_logging(
    level: str = "INFO",
    json_format: bool = True,
) -> None:
    """Configure structured logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: If True, output JSON; else human-readable
    """
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    level_no = logging.getLevelName(_normalize_level(level))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_no),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Also configure standard logging so library output lands in the same stream
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level_no,
    )


def _normalize_level(level: str) -> str:
    level = level.upper()
    return "WARNING" if level == "WARN" else level


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a structured logger.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Bound structlog logger
    """
    return structlog.get_logger(name)


def bind_session(session_id: str) -> None:
    """Bind session_id to all logs in current context.

    Args:
        session_id: Session identifier
    """
    structlog.contextvars.bind_contextvars(session_id=session_id)


def unbind_session() -> None:
    """Remove session_id from log context."""
    structlog.contextvars.unbind_contextvars("session_id")


# -----------------------------------------------------------------------------
# Event-specific logging functions
# -----------------------------------------------------------------------------


class SessionLogger:
    """Logger for session and turn events."""

    def __init__(self, session_id: str) -> None:
        self._session_id = session_id
        self._log = get_logger("session").bind(session_id=session_id)

    def session_started(self, metadata: dict[str, Any] | None = None) -> None:
        """Log session start."""
        self._log.info(
            "session_started",
            event_type="session.started",
            **(metadata or {}),
        )

    def session_ended(self, reason: str, duration_s: float) -> None:
        """Log session end."""
        self._log.info(
            "session_ended",
            event_type="session.ended",
            reason=reason,
            duration_s=duration_s,
        )

    def stage_change(
        self,
        old_stage: str,
        new_stage: str,
        reason: str,
        chunk_index: int,
    ) -> None:
        """Log stage transition."""
        self._log.info(
            "stage_change",
            event_type="session.stage_change",
            old_stage=old_stage,
            new_stage=new_stage,
            reason=reason,
            chunk_index=chunk_index,
        )

    def turn_started(self, turn_id: int, stage: str) -> None:
        """Log turn start."""
        self._log.debug(
            "turn_started",
            event_type="turn.started",
            turn_id=turn_id,
            stage=stage,
        )

    def turn_completed(self, turn_id: int, stage: str, total_ms: float) -> None:
        """Log turn completion."""
        self._log.info(
            "turn_completed",
            event_type="turn.completed",
            turn_id=turn_id,
            stage=stage,
            total_ms=total_ms,
        )

    def turn_failed(self, turn_id: int, stage: str, error: str) -> None:
        """Log a turn that raised and was rolled back."""
        self._log.error(
            "turn_failed",
            event_type="turn.failed",
            turn_id=turn_id,
            stage=stage,
            error=error,
        )

    def turn_rejected(self, reason: str) -> None:
        """Log input ignored because of the busy guard or empty text."""
        self._log.warning(
            "turn_rejected",
            event_type="turn.rejected",
            reason=reason,
        )

    def curriculum_completed(self, chunk_count: int, grammar_focus: str | None) -> None:
        """Log the end of a full five-step cycle."""
        self._log.info(
            "curriculum_completed",
            event_type="session.curriculum_completed",
            chunk_count=chunk_count,
            grammar_focus=grammar_focus,
        )


class SynthesisLogger:
    """Logger for speech synthesis gateway events."""

    def __init__(self, backend: str, session_id: str | None = None) -> None:
        self._log = get_logger("synthesis").bind(backend=backend)
        if session_id:
            self._log = self._log.bind(session_id=session_id)

    def cache_hit(self, text_length: int) -> None:
        """Log audio served from cache."""
        self._log.debug(
            "synthesis_cache_hit",
            event_type="synthesis.cache_hit",
            text_length=text_length,
        )

    def synthesized(self, text_length: int, audio_bytes: int, latency_ms: float) -> None:
        """Log successful backend synthesis."""
        self._log.info(
            "synthesis_completed",
            event_type="synthesis.completed",
            text_length=text_length,
            audio_bytes=audio_bytes,
            latency_ms=latency_ms,
        )

    def failed(self, kind: str, error: str) -> None:
        """Log classified backend failure."""
        self._log.warning(
            "synthesis_failed",
            event_type="synthesis.failed",
            kind=kind,
            error=error,
        )

    def fallback(self, text_length: int, reason: str) -> None:
        """Log degradation to the fallback voice."""
        self._log.warning(
            "synthesis_fallback",
            event_type="synthesis.fallback",
            text_length=text_length,
            reason=reason,
        )

    def manual_retry(self, entry_id: str, outcome: str, error: str | None = None) -> None:
        """Log learner-triggered HD retry."""
        self._log.info(
            "synthesis_manual_retry",
            event_type="synthesis.manual_retry",
            entry_id=entry_id,
            outcome=outcome,
            error=error,
        )


# Initialize default logging configuration
def init_logging(json_format: bool = True, level: str = "INFO") -> None:
    """Initialize logging with defaults.

    Call this once at application startup.
    """
    configure_logging(level=level, json_format=json_format)
