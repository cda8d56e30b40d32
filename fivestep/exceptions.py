"""FiveStep Exception Hierarchy.

Provides structured exception classes for better error handling.

Hierarchy:
    FiveStepError (base)
    ├── SessionError
    │   ├── SessionNotFoundError
    │   ├── SessionLimitError
    │   ├── SessionExistsError
    │   └── SessionStateError
    ├── ConfigurationError
    │   ├── MissingConfigError
    │   └── InvalidConfigError
    ├── SynthesisError
    │   ├── QuotaExceededError
    │   └── SynthesisFailedError
    ├── FeedbackError
    ├── PlaybackError
    │   └── FallbackVoiceUnavailableError
    └── RecordingError
"""

from typing import Any


class FiveStepError(Exception):
    """Base exception for all FiveStep errors.

    Attributes:
        message: Human-readable error description
        details: Additional context about the error
        recoverable: Whether the error can be recovered from
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# Session Errors
# =============================================================================


class SessionError(FiveStepError):
    """Base exception for session-related errors."""

    def __init__(
        self,
        message: str,
        session_id: str | None = None,
        details: dict[str, Any] | None = None,
        recoverable: bool = False,
    ) -> None:
        details = details or {}
        if session_id:
            details["session_id"] = session_id
        super().__init__(message, details, recoverable)
        self.session_id = session_id


class SessionNotFoundError(SessionError):
    """Raised when a session cannot be found."""

    def __init__(self, session_id: str) -> None:
        super().__init__(
            message=f"Session not found: {session_id}",
            session_id=session_id,
            recoverable=False,
        )


class SessionLimitError(SessionError):
    """Raised when session limit is reached."""

    def __init__(self, max_sessions: int, current_sessions: int) -> None:
        super().__init__(
            message=f"Session limit reached: {current_sessions}/{max_sessions}",
            details={
                "max_sessions": max_sessions,
                "current_sessions": current_sessions,
            },
            recoverable=True,  # Can retry when a session ends
        )


class SessionExistsError(SessionError):
    """Raised when a session id is already in use."""

    def __init__(self, session_id: str) -> None:
        super().__init__(
            message=f"Session already exists: {session_id}",
            session_id=session_id,
            recoverable=False,
        )


class SessionStateError(SessionError):
    """Raised for invalid stage transitions or stage-bound misuse."""

    def __init__(
        self,
        message: str,
        session_id: str | None = None,
        current_stage: str | None = None,
        target_stage: str | None = None,
    ) -> None:
        details = {}
        if current_stage:
            details["current_stage"] = current_stage
        if target_stage:
            details["target_stage"] = target_stage
        super().__init__(message, session_id, details, recoverable=False)


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(FiveStepError):
    """Base exception for configuration-related errors."""

    pass


class MissingConfigError(ConfigurationError):
    """Raised when a required configuration is missing."""

    def __init__(self, config_key: str, description: str | None = None) -> None:
        message = f"Missing required configuration: {config_key}"
        if description:
            message += f" - {description}"
        super().__init__(
            message=message,
            details={"config_key": config_key},
            recoverable=False,
        )


class InvalidConfigError(ConfigurationError):
    """Raised when a configuration value is invalid."""

    def __init__(
        self,
        config_key: str,
        value: Any,
        reason: str,
    ) -> None:
        super().__init__(
            message=f"Invalid configuration for {config_key}: {reason}",
            details={
                "config_key": config_key,
                "value": str(value),
                "reason": reason,
            },
            recoverable=False,
        )


# =============================================================================
# Synthesis Errors
# =============================================================================


class SynthesisError(FiveStepError):
    """Base exception for speech synthesis errors."""

    pass


class QuotaExceededError(SynthesisError):
    """Raised when the synthesis provider reports rate or quota exhaustion."""

    def __init__(self, reason: str, backend: str | None = None) -> None:
        details: dict[str, Any] = {"reason": reason}
        if backend:
            details["backend"] = backend
        super().__init__(
            message=f"Synthesis quota exceeded: {reason}",
            details=details,
            recoverable=True,  # Quota windows reopen after a short wait
        )


class SynthesisFailedError(SynthesisError):
    """Raised when synthesis fails for any reason other than quota."""

    def __init__(
        self,
        reason: str,
        text_length: int | None = None,
        backend: str | None = None,
    ) -> None:
        details: dict[str, Any] = {"reason": reason}
        if text_length is not None:
            details["text_length"] = text_length
        if backend:
            details["backend"] = backend
        super().__init__(
            message=f"Synthesis failed: {reason}",
            details=details,
            recoverable=False,
        )


# =============================================================================
# Feedback Errors
# =============================================================================


class FeedbackError(FiveStepError):
    """Raised when the text feedback capability fails."""

    def __init__(self, reason: str, model: str | None = None) -> None:
        details: dict[str, Any] = {"reason": reason}
        if model:
            details["model"] = model
        super().__init__(
            message=f"Feedback generation failed: {reason}",
            details=details,
            recoverable=True,
        )


# =============================================================================
# Playback Errors
# =============================================================================


class PlaybackError(FiveStepError):
    """Raised when an audio artifact cannot be rendered."""

    def __init__(self, reason: str, entry_id: str | None = None) -> None:
        details: dict[str, Any] = {"reason": reason}
        if entry_id:
            details["entry_id"] = entry_id
        super().__init__(
            message=f"Playback failed: {reason}",
            details=details,
            recoverable=False,
        )


class FallbackVoiceUnavailableError(PlaybackError):
    """Raised when no local voice can speak a fallback artifact."""

    def __init__(self, available_voices: int = 0) -> None:
        super().__init__(reason="no suitable fallback voice available")
        self.details["available_voices"] = available_voices


# =============================================================================
# Recording Errors
# =============================================================================


class RecordingError(FiveStepError):
    """Raised when a learner recording is rejected."""

    def __init__(self, reason: str, mime_type: str | None = None) -> None:
        details: dict[str, Any] = {"reason": reason}
        if mime_type is not None:
            details["mime_type"] = mime_type
        super().__init__(
            message=f"Recording rejected: {reason}",
            details=details,
            recoverable=True,
        )
