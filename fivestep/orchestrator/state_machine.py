"""Curriculum State Machine - Five-stage FSM for a learning session.

Stages:
- INITIALIZATION: Waiting for the learner's text
- GET_THE_GIST: Full text played; learner states the main idea
- LISTEN_UNDERSTAND: Chunk by chunk comprehension (loop)
- LISTEN_SPEAK: Chunk by chunk shadowing (loop)
- RECORD_COMPARE: Chunk by chunk recording and self-evaluation (loop)
- SUMMARIZE_PERSONALIZE: Full summary, then one personalized sentence

Stages only move forward; SUMMARIZE_PERSONALIZE returns to
INITIALIZATION when the cycle completes.
"""

from __future__ import annotations

import dataclasses
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from fivestep.exceptions import SessionStateError
from fivestep.observability.logging import get_logger

logger = get_logger(__name__)


class Stage(Enum):
    """Curriculum stage."""

    INITIALIZATION = "initialization"
    GET_THE_GIST = "get_the_gist"
    LISTEN_UNDERSTAND = "listen_understand"
    LISTEN_SPEAK = "listen_speak"
    RECORD_COMPARE = "record_compare"
    SUMMARIZE_PERSONALIZE = "summarize_personalize"


# Stages that walk the chunk list
LOOPING_STAGES = frozenset(
    {Stage.LISTEN_UNDERSTAND, Stage.LISTEN_SPEAK, Stage.RECORD_COMPARE}
)

# Valid stage transitions
VALID_TRANSITIONS: dict[Stage, set[Stage]] = {
    Stage.INITIALIZATION: {Stage.GET_THE_GIST},
    Stage.GET_THE_GIST: {Stage.LISTEN_UNDERSTAND},
    Stage.LISTEN_UNDERSTAND: {Stage.LISTEN_SPEAK},
    Stage.LISTEN_SPEAK: {Stage.RECORD_COMPARE},
    Stage.RECORD_COMPARE: {Stage.SUMMARIZE_PERSONALIZE},
    Stage.SUMMARIZE_PERSONALIZE: {Stage.INITIALIZATION},
}

# Learner-facing stage titles
STAGE_TITLES: dict[Stage, str] = {
    Stage.GET_THE_GIST: "1. Get the Gist",
    Stage.LISTEN_UNDERSTAND: "2. Listen & Understand",
    Stage.LISTEN_SPEAK: "3. Listen & Speak (Shadowing)",
    Stage.RECORD_COMPARE: "4. Record & Compare",
    Stage.SUMMARIZE_PERSONALIZE: "5. Summarize & Personalize",
}


@dataclass(frozen=True)
class SessionState:
    """Snapshot of a session's curriculum position.

    Immutable: every change produces a new instance, so a snapshot taken
    at turn start can be restored as-is.
    """

    stage: Stage = Stage.INITIALIZATION
    raw_text: str = ""
    chunks: tuple[str, ...] = ()
    chunk_index: int = 0
    grammar_focus: str | None = None

    @property
    def chunk_count(self) -> int:
        return len(self.chunks)

    @property
    def current_chunk(self) -> str | None:
        if self.stage in LOOPING_STAGES and 0 <= self.chunk_index < len(self.chunks):
            return self.chunks[self.chunk_index]
        return None


@dataclass
class StageTransition:
    """Record of a stage transition."""

    old_stage: Stage
    new_stage: Stage
    t_ms: int
    reason: str
    chunk_index: int = 0
    metadata: dict = field(default_factory=dict)


StageChangeCallback = Callable[[StageTransition], None]


def _now_ms() -> int:
    return int(time.monotonic() * 1000)


class CurriculumStateMachine:
    """Owns a session's SessionState and validates every change.

    Usage:
        fsm = CurriculumStateMachine(session_id="session-123")
        fsm.on_stage_change(handle_stage_change)

        fsm.begin(raw_text, chunks)             # -> GET_THE_GIST
        fsm.transition_to(Stage.LISTEN_UNDERSTAND, "gist_answered")
        if not fsm.advance_chunk():
            fsm.transition_to(Stage.LISTEN_SPEAK, "chunks_exhausted")
    """

    def __init__(self, session_id: str) -> None:
        self._session_id = session_id
        self._state = SessionState()
        self._on_change_callbacks: list[StageChangeCallback] = []
        self._history: list[StageTransition] = []
        self._max_history = 100
        self._transition_count = 0
        self._mark: tuple[SessionState, int] | None = None

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def state(self) -> SessionState:
        """Current (immutable) state."""
        return self._state

    @property
    def stage(self) -> Stage:
        return self._state.stage

    @property
    def history(self) -> list[StageTransition]:
        """Transition history (most recent last)."""
        return self._history.copy()

    def on_stage_change(self, callback: StageChangeCallback) -> None:
        """Register callback for any stage change."""
        self._on_change_callbacks.append(callback)

    def snapshot(self) -> SessionState:
        self._mark = (self._state, self._transition_count)
        return self._state

    def restore(self, snapshot: SessionState) -> None:
        """Put the state back to a previous snapshot (no callbacks fire).

        Restoring the most recent snapshot also drops the transitions
        recorded after it.
        """
        if snapshot is not self._state:
            logger.info(
                "state_restored",
                session_id=self._session_id,
                from_stage=self._state.stage.value,
                to_stage=snapshot.stage.value,
                chunk_index=snapshot.chunk_index,
            )
        if self._mark is not None and self._mark[0] is snapshot:
            undone = self._transition_count - self._mark[1]
            if undone > 0:
                del self._history[-undone:]
            self._transition_count = self._mark[1]
        self._state = snapshot

    def transition_to(self, new_stage: Stage, reason: str = "") -> StageTransition:
        """Move to new_stage; looping stages start at chunk 0.

        Raises:
            SessionStateError: If the transition is not allowed
        """
        old_stage = self._state.stage
        if new_stage not in VALID_TRANSITIONS.get(old_stage, set()):
            raise SessionStateError(
                f"Invalid transition: {old_stage.value} → {new_stage.value}",
                session_id=self._session_id,
                current_stage=old_stage.value,
                target_stage=new_stage.value,
            )

        if new_stage == Stage.INITIALIZATION:
            self._state = SessionState()
        else:
            self._state = dataclasses.replace(self._state, stage=new_stage, chunk_index=0)

        transition = StageTransition(
            old_stage=old_stage,
            new_stage=new_stage,
            t_ms=_now_ms(),
            reason=reason,
            chunk_index=self._state.chunk_index,
        )

        self._history.append(transition)
        self._transition_count += 1
        if len(self._history) > self._max_history:
            self._history.pop(0)

        for callback in self._on_change_callbacks:
            callback(transition)

        return transition

    def begin(self, raw_text: str, chunks: list[str]) -> StageTransition:
        """Store the learner's text and chunks, and enter GET_THE_GIST."""
        self._require(Stage.INITIALIZATION, "begin")
        if not chunks:
            raise SessionStateError(
                "Cannot begin a curriculum without chunks",
                session_id=self._session_id,
                current_stage=self._state.stage.value,
            )
        self._state = dataclasses.replace(
            self._state,
            raw_text=raw_text,
            chunks=tuple(chunks),
            chunk_index=0,
            grammar_focus=None,
        )
        return self.transition_to(Stage.GET_THE_GIST, "text_submitted")

    def advance_chunk(self) -> bool:
        """Move to the next chunk of the current loop.

        Returns:
            True if there is a next chunk, False if the loop is exhausted
            (the index is left unchanged).
        """
        if self._state.stage not in LOOPING_STAGES:
            raise SessionStateError(
                f"Cannot advance chunks in {self._state.stage.value}",
                session_id=self._session_id,
                current_stage=self._state.stage.value,
            )
        next_index = self._state.chunk_index + 1
        if next_index >= len(self._state.chunks):
            return False
        self._state = dataclasses.replace(self._state, chunk_index=next_index)
        return True

    def set_grammar_focus(self, focus: str) -> None:
        """Record the grammar focus; allowed once per cycle."""
        self._require(Stage.SUMMARIZE_PERSONALIZE, "set_grammar_focus")
        if self._state.grammar_focus is not None:
            raise SessionStateError(
                "Grammar focus already set for this cycle",
                session_id=self._session_id,
                current_stage=self._state.stage.value,
            )
        self._state = dataclasses.replace(self._state, grammar_focus=focus)

    def reset(self) -> StageTransition:
        """Complete the cycle and clear all curriculum data."""
        return self.transition_to(Stage.INITIALIZATION, "curriculum_completed")

    def _require(self, stage: Stage, operation: str) -> None:
        if self._state.stage != stage:
            raise SessionStateError(
                f"{operation} is only valid in {stage.value}",
                session_id=self._session_id,
                current_stage=self._state.stage.value,
                target_stage=stage.value,
            )
