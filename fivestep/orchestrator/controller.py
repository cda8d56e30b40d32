"""Session Controller - Drives one learner through the five-step cycle.

One learner turn at a time:
1. submit() sets the busy flag before its first await; overlapping
   calls are rejected with accepted=False
2. The learner's text is logged and dispatched to the current stage
3. Stage handlers request feedback and speech, append system entries,
   and move the state machine forward
4. If anything raises, the state is restored to the snapshot taken at
   turn start and a single error entry is appended, so the same input
   can be sent again
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from fivestep.audio.playback.engine import AudioPlaybackEngine
from fivestep.audio.tts.gateway import SpeechSynthesisGateway
from fivestep.config.constants import CURRICULUM
from fivestep.exceptions import RecordingError
from fivestep.feedback.tutor import TutorFeedback
from fivestep.observability.logging import SessionLogger, get_logger
from fivestep.observability.metrics import record_curriculum_completed, record_turn
from fivestep.orchestrator import prompts
from fivestep.orchestrator.messages import (
    SUPPORTED_RECORDING_MIME_TYPES,
    AudioPayload,
    DividerPayload,
    InMemoryMessageLog,
    LogEntry,
    MessageLog,
    Payload,
    RecordingPayload,
    Sender,
    TextPayload,
    audio_label,
)
from fivestep.orchestrator.state_machine import (
    STAGE_TITLES,
    CurriculumStateMachine,
    SessionState,
    Stage,
    StageTransition,
)
from fivestep.text.chunker import chunk_text

logger = get_logger(__name__)

CONFIRM_COMMANDS = frozenset({"yes", "y"})
HINT_COMMAND = "hint"
EXPLAIN_COMMAND = "explain"
NEXT_COMMANDS = frozenset({"next", "/next"})


def normalize_command(text: str) -> str:
    return text.strip().lower()


def normalize_mime_type(mime_type: str) -> str:
    """'Audio/WebM; codecs=opus' -> 'audio/webm;codecs=opus'."""
    return ";".join(part.strip() for part in mime_type.lower().split(";") if part.strip())


@dataclass
class TurnResult:
    """Outcome of one submitted learner turn."""

    accepted: bool
    stage: Stage
    chunk_index: int
    entries: list[LogEntry] = field(default_factory=list)
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class SessionController:
    """Five-step curriculum controller for a single learner.

    Usage:
        controller = SessionController("session-1", gateway, tutor)
        controller.start()

        result = await controller.submit(pasted_text)
        for entry in result.entries:
            render(entry)
    """

    def __init__(
        self,
        session_id: str,
        gateway: SpeechSynthesisGateway,
        tutor: TutorFeedback,
        playback: AudioPlaybackEngine | None = None,
        log: MessageLog | None = None,
        min_chunk_words: int = CURRICULUM.MIN_CHUNK_WORDS,
    ) -> None:
        self._session_id = session_id
        self._gateway = gateway
        self._tutor = tutor
        self._playback = playback or AudioPlaybackEngine(gateway, session_id=session_id)
        self._log = log if log is not None else InMemoryMessageLog()
        self._min_chunk_words = min_chunk_words

        self._fsm = CurriculumStateMachine(session_id)
        self._fsm.on_stage_change(self._on_stage_change)
        self._session_log = SessionLogger(session_id)

        self._busy = False
        self._started = False
        self._turn_count = 0
        self._created_at = time.time()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def state(self) -> SessionState:
        return self._fsm.state

    @property
    def stage(self) -> Stage:
        return self._fsm.stage

    @property
    def log(self) -> MessageLog:
        return self._log

    @property
    def playback(self) -> AudioPlaybackEngine:
        return self._playback

    @property
    def is_busy(self) -> bool:
        return self._busy

    @property
    def turn_count(self) -> int:
        return self._turn_count

    @property
    def stage_history(self) -> list[StageTransition]:
        return self._fsm.history

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> list[LogEntry]:
        """Post the welcome message (once)."""
        if self._started:
            return []
        self._started = True
        self._session_log.session_started({"min_chunk_words": self._min_chunk_words})
        return [self._say(prompts.WELCOME)]

    async def close(self, reason: str = "normal") -> None:
        """Stop playback and release the audio output."""
        await self._playback.close()
        self._session_log.session_ended(reason, time.time() - self._created_at)

    # ------------------------------------------------------------------
    # Learner input
    # ------------------------------------------------------------------

    async def submit(self, text: str) -> TurnResult:
        """Process one learner text turn."""
        if self._busy:
            return self._reject("busy")

        text = (text or "").strip()
        if not text:
            return self._reject("empty_input")

        self._busy = True
        self._turn_count += 1
        turn_id = self._turn_count
        stage = self._fsm.stage
        snapshot = self._fsm.snapshot()
        first_entry = len(self._log)
        start = time.perf_counter()
        error: str | None = None

        try:
            self._session_log.turn_started(turn_id, stage.value)
            self._append(Sender.LEARNER, TextPayload(text))
            await self._dispatch(text)
        except Exception as e:
            error = str(e) or type(e).__name__
            self._fsm.restore(snapshot)
            self._session_log.turn_failed(turn_id, stage.value, error)
            self._say(prompts.ERROR_PREFIX + error)
        finally:
            self._busy = False

        latency_ms = (time.perf_counter() - start) * 1000
        if error is None:
            self._session_log.turn_completed(turn_id, stage.value, latency_ms)
            record_turn("completed", latency_ms)
        else:
            record_turn("failed", latency_ms)

        return self._result(True, first_entry, error)

    async def submit_recording(self, data: bytes, mime_type: str) -> TurnResult:
        """Accept the learner's recording of the current chunk.

        Raises:
            RecordingError: Wrong stage, unsupported mime type or empty payload
        """
        if self._busy:
            return self._reject("busy")

        if self._fsm.stage != Stage.RECORD_COMPARE:
            raise RecordingError(
                f"recordings are only accepted in {Stage.RECORD_COMPARE.value}",
                mime_type=mime_type,
            )
        normalized = normalize_mime_type(mime_type or "")
        if normalized not in SUPPORTED_RECORDING_MIME_TYPES:
            raise RecordingError("unsupported recording format", mime_type=mime_type)
        if not data:
            raise RecordingError("empty recording", mime_type=mime_type)

        first_entry = len(self._log)
        self._append(
            Sender.LEARNER,
            RecordingPayload(data=bytes(data), mime_type=normalized),
            label=prompts.LABEL_LEARNER,
        )
        self._say(prompts.SELF_EVALUATION_REQUEST)
        logger.info(
            "recording_received",
            session_id=self._session_id,
            chunk_index=self._fsm.state.chunk_index,
            mime_type=normalized,
            size_bytes=len(data),
        )
        return self._result(True, first_entry)

    def should_offer_recording(self) -> bool:
        """Whether the recorder should be shown for the current chunk."""
        if self._fsm.stage != Stage.RECORD_COMPARE:
            return False
        last = self._log.last()
        if last is None or last.sender != Sender.SYSTEM:
            return False
        return not (
            isinstance(last.payload, TextPayload)
            and last.payload.text == prompts.SELF_EVALUATION_REQUEST
        )

    async def retry_audio(self, entry_id: str) -> bool:
        """Ask for HD audio again for a backup audio entry."""
        return await self._playback.retry_hd(self._log, entry_id)

    # ------------------------------------------------------------------
    # Stage handlers
    # ------------------------------------------------------------------

    async def _dispatch(self, text: str) -> None:
        stage = self._fsm.stage
        if stage == Stage.INITIALIZATION:
            await self._handle_initialization(text)
        elif stage == Stage.GET_THE_GIST:
            await self._handle_gist(text)
        elif stage == Stage.LISTEN_UNDERSTAND:
            await self._handle_understand(text)
        elif stage == Stage.LISTEN_SPEAK:
            await self._handle_shadowing(text)
        elif stage == Stage.RECORD_COMPARE:
            await self._handle_record(text)
        elif stage == Stage.SUMMARIZE_PERSONALIZE:
            await self._handle_summarize(text)

    async def _handle_initialization(self, text: str) -> None:
        chunks = chunk_text(text, self._min_chunk_words)
        self._fsm.begin(text, chunks)
        self._divider(Stage.GET_THE_GIST)
        await self._speak(text, prompts.LABEL_FULL_STORY, auto_play=True)
        self._say(prompts.GIST_QUESTION)

    async def _handle_gist(self, text: str) -> None:
        self._say(await self._tutor.correct_summary(self._fsm.state.raw_text, text))
        self._enter(Stage.LISTEN_UNDERSTAND, "gist_answered")
        await self._present_understand()

    async def _handle_understand(self, text: str) -> None:
        command = normalize_command(text)
        chunk = self._fsm.state.current_chunk

        if command in CONFIRM_COMMANDS:
            if self._fsm.advance_chunk():
                await self._present_understand()
            else:
                self._enter(Stage.LISTEN_SPEAK, "chunks_understood")
                await self._present_shadowing()
        elif command == HINT_COMMAND:
            self._say(prompts.HINT_PREFIX + await self._tutor.hint(chunk))
        elif command == EXPLAIN_COMMAND:
            self._say(prompts.EXPLANATION_PREFIX + await self._tutor.explain(chunk))
        else:
            self._say(prompts.UNDERSTAND_REPROMPT)

    async def _handle_shadowing(self, text: str) -> None:
        if normalize_command(text) not in NEXT_COMMANDS:
            self._say(prompts.SHADOWING_REPROMPT)
            return

        if self._fsm.advance_chunk():
            await self._present_shadowing()
        else:
            self._enter(Stage.RECORD_COMPARE, "chunks_shadowed")
            await self._present_record()

    async def _handle_record(self, text: str) -> None:
        self._say(prompts.REFLECTION_ACK)
        if self._fsm.advance_chunk():
            await self._present_record()
        else:
            self._enter(Stage.SUMMARIZE_PERSONALIZE, "chunks_recorded")
            self._say(prompts.SUMMARY_REQUEST)

    async def _handle_summarize(self, text: str) -> None:
        state = self._fsm.state

        if state.grammar_focus is None:
            self._say(await self._tutor.correct_summary(state.raw_text, text))
            focus = await self._tutor.extract_grammar_focus(state.raw_text)
            self._fsm.set_grammar_focus(focus)
            self._say(prompts.PERSONALIZE_TEMPLATE.format(focus=focus))
            return

        self._say(await self._tutor.check_structure(state.grammar_focus, text))
        self._say(prompts.COMPLETION)
        self._session_log.curriculum_completed(state.chunk_count, state.grammar_focus)
        record_curriculum_completed()
        self._fsm.reset()

    # ------------------------------------------------------------------
    # Chunk presentation
    # ------------------------------------------------------------------

    async def _present_understand(self) -> None:
        state = self._fsm.state
        chunk = state.current_chunk
        self._say(prompts.chunk_heading("Sentence", state.chunk_index, state.chunk_count, chunk))
        await self._speak(chunk, prompts.LABEL_TEACHER, auto_play=True)
        self._say(prompts.UNDERSTAND_QUESTION)

    async def _present_shadowing(self) -> None:
        state = self._fsm.state
        chunk = state.current_chunk
        self._say(prompts.chunk_heading("Shadowing", state.chunk_index, state.chunk_count, chunk))
        await self._speak(chunk, prompts.LABEL_SHADOWING, auto_play=True)
        self._say(prompts.SHADOWING_INSTRUCTION)

    async def _present_record(self) -> None:
        state = self._fsm.state
        chunk = state.current_chunk
        self._say(prompts.chunk_heading("Recording", state.chunk_index, state.chunk_count, chunk))
        await self._speak(chunk, prompts.LABEL_MODEL_AUDIO, auto_play=False)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _enter(self, stage: Stage, reason: str) -> None:
        self._fsm.transition_to(stage, reason)
        self._divider(stage)

    async def _speak(self, text: str, label: str, auto_play: bool) -> LogEntry:
        artifact = await self._gateway.synthesize_with_fallback(text, self._session_id)
        return self._append(
            Sender.SYSTEM,
            AudioPayload(artifact),
            auto_play=auto_play,
            label=audio_label(label, artifact),
        )

    def _say(self, text: str) -> LogEntry:
        return self._append(Sender.SYSTEM, TextPayload(text))

    def _divider(self, stage: Stage) -> LogEntry:
        return self._append(Sender.SYSTEM, DividerPayload(STAGE_TITLES[stage]))

    def _append(
        self,
        sender: Sender,
        payload: Payload,
        auto_play: bool = False,
        label: str | None = None,
    ) -> LogEntry:
        return self._log.append(
            LogEntry(sender=sender, payload=payload, auto_play=auto_play, label=label)
        )

    def _reject(self, reason: str) -> TurnResult:
        self._session_log.turn_rejected(reason)
        record_turn("rejected")
        return TurnResult(
            accepted=False,
            stage=self._fsm.stage,
            chunk_index=self._fsm.state.chunk_index,
        )

    def _result(self, accepted: bool, first_entry: int, error: str | None = None) -> TurnResult:
        return TurnResult(
            accepted=accepted,
            stage=self._fsm.stage,
            chunk_index=self._fsm.state.chunk_index,
            entries=self._log.entries()[first_entry:],
            error=error,
        )

    def _on_stage_change(self, transition: StageTransition) -> None:
        self._session_log.stage_change(
            transition.old_stage.value,
            transition.new_stage.value,
            transition.reason,
            transition.chunk_index,
        )
