"""Orchestrator module - Curriculum state and message log.

Provides:
- CurriculumStateMachine: Five-stage FSM
- InMemoryMessageLog: Conversation log

SessionController (fivestep.orchestrator.controller) and SessionManager
(fivestep.orchestrator.session) depend on the audio stack and are
imported from their modules directly.
"""

from fivestep.orchestrator.messages import (
    SUPPORTED_RECORDING_MIME_TYPES,
    AudioPayload,
    DividerPayload,
    InMemoryMessageLog,
    LogEntry,
    MessageLog,
    RecordingPayload,
    Sender,
    TextPayload,
)
from fivestep.orchestrator.state_machine import (
    LOOPING_STAGES,
    VALID_TRANSITIONS,
    CurriculumStateMachine,
    SessionState,
    Stage,
)

__all__ = [
    # State machine
    "CurriculumStateMachine",
    "LOOPING_STAGES",
    "SessionState",
    "Stage",
    "VALID_TRANSITIONS",
    # Message log
    "AudioPayload",
    "DividerPayload",
    "InMemoryMessageLog",
    "LogEntry",
    "MessageLog",
    "RecordingPayload",
    "SUPPORTED_RECORDING_MIME_TYPES",
    "Sender",
    "TextPayload",
]
