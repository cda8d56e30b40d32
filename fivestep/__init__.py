"""FiveStep - Five-stage listening curriculum engine."""

__version__ = "0.1.0"

# Export exception hierarchy for easy importing
from fivestep.exceptions import (
    FiveStepError,
    SessionError,
    SessionNotFoundError,
    SessionLimitError,
    SessionExistsError,
    SessionStateError,
    ConfigurationError,
    MissingConfigError,
    InvalidConfigError,
    SynthesisError,
    QuotaExceededError,
    SynthesisFailedError,
    FeedbackError,
    PlaybackError,
    FallbackVoiceUnavailableError,
    RecordingError,
)

__all__ = [
    "__version__",
    # Base
    "FiveStepError",
    # Session
    "SessionError",
    "SessionNotFoundError",
    "SessionLimitError",
    "SessionExistsError",
    "SessionStateError",
    # Configuration
    "ConfigurationError",
    "MissingConfigError",
    "InvalidConfigError",
    # Synthesis
    "SynthesisError",
    "QuotaExceededError",
    "SynthesisFailedError",
    # Feedback
    "FeedbackError",
    # Playback
    "PlaybackError",
    "FallbackVoiceUnavailableError",
    # Recording
    "RecordingError",
]
