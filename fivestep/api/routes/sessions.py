"""Session API Routes - Learner sessions over HTTP.

Provides REST endpoints for:
- Session create / status / delete / list
- Learner text turns and recordings
- Message log, HD audio download and manual HD retry
"""

from __future__ import annotations

import io

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel, Field

from fivestep.audio.artifacts import FailedArtifact, FallbackArtifact, HDArtifact
from fivestep.audio.playback.engine import decode_pcm16
from fivestep.exceptions import PlaybackError, RecordingError
from fivestep.orchestrator.controller import SessionController, TurnResult
from fivestep.orchestrator.messages import (
    AudioPayload,
    DividerPayload,
    LogEntry,
    RecordingPayload,
    TextPayload,
)
from fivestep.orchestrator.session import SessionManager

router = APIRouter(prefix="/sessions", tags=["sessions"])

# Global manager (initialized on startup)
_session_manager: SessionManager | None = None


def set_session_manager(manager: SessionManager | None) -> None:
    """Install the process-wide session manager."""
    global _session_manager
    _session_manager = manager


def get_session_manager() -> SessionManager:
    """Get global session manager."""
    if _session_manager is None:
        raise HTTPException(status_code=503, detail="Service is starting up")
    return _session_manager


def get_session(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> SessionController:
    session = manager.get_session(session_id)
    if session is None:
        raise HTTPException(
            status_code=404,
            detail=f"Session {session_id} not found",
        )
    return session


# Request/Response models
class CreateSessionRequest(BaseModel):
    """Request to create a new session."""

    session_id: str | None = Field(
        None,
        description="Optional session ID (generated if not provided)",
    )


class MessageEntryModel(BaseModel):
    """One message log entry."""

    entry_id: str
    sender: str
    kind: str = Field(..., description="text, audio, recording or divider")
    text: str | None = None
    label: str | None = None
    auto_play: bool = False
    audio_kind: str | None = Field(None, description="hd, fallback or failed")
    mime_type: str | None = None
    size_bytes: int | None = None
    duration_ms: int | None = None
    created_at: float


class SessionStatusResponse(BaseModel):
    """Session status response."""

    session_id: str
    stage: str
    chunk_index: int
    chunk_count: int
    grammar_focus: str | None
    busy: bool
    offer_recording: bool
    turns: int
    messages: int


class CreateSessionResponse(BaseModel):
    """Response after creating a session."""

    session_id: str
    stage: str
    entries: list[MessageEntryModel]


class InputRequest(BaseModel):
    """Learner text turn."""

    text: str = Field(..., description="Learner text or command")


class TurnResponse(BaseModel):
    """Result of a learner turn."""

    accepted: bool
    stage: str
    chunk_index: int
    entries: list[MessageEntryModel]
    error: str | None = None
    offer_recording: bool = False


class RetryResponse(BaseModel):
    """Result of a manual HD retry."""

    retried: bool
    entry: MessageEntryModel


def entry_to_model(entry: LogEntry) -> MessageEntryModel:
    """Serialize a log entry (audio bytes are fetched separately)."""
    model = MessageEntryModel(
        entry_id=entry.entry_id,
        sender=entry.sender.value,
        kind="text",
        label=entry.label,
        auto_play=entry.auto_play,
        created_at=entry.created_at,
    )
    payload = entry.payload
    if isinstance(payload, TextPayload):
        model.text = payload.text
    elif isinstance(payload, DividerPayload):
        model.kind = "divider"
        model.text = payload.title
    elif isinstance(payload, RecordingPayload):
        model.kind = "recording"
        model.mime_type = payload.mime_type
        model.size_bytes = payload.size_bytes
    elif isinstance(payload, AudioPayload):
        model.kind = "audio"
        artifact = payload.artifact
        model.audio_kind = artifact.kind.value
        if isinstance(artifact, HDArtifact):
            model.duration_ms = artifact.duration_ms
        elif isinstance(artifact, FallbackArtifact):
            model.text = artifact.source_text
        elif isinstance(artifact, FailedArtifact):
            model.text = artifact.reason
    return model


def _turn_response(session: SessionController, result: TurnResult) -> TurnResponse:
    return TurnResponse(
        accepted=result.accepted,
        stage=result.stage.value,
        chunk_index=result.chunk_index,
        entries=[entry_to_model(e) for e in result.entries],
        error=result.error,
        offer_recording=session.should_offer_recording(),
    )


def _reject_unaccepted(session: SessionController, result: TurnResult) -> None:
    if result.accepted:
        return
    if session.is_busy:
        raise HTTPException(status_code=409, detail="A turn is already in progress")
    raise HTTPException(status_code=422, detail="Input is empty")


def encode_wav(artifact: HDArtifact) -> bytes:
    """HD PCM as a 16-bit WAV file."""
    import soundfile as sf

    buffer = io.BytesIO()
    sf.write(
        buffer,
        decode_pcm16(artifact.audio),
        artifact.sample_rate,
        format="WAV",
        subtype="PCM_16",
    )
    return buffer.getvalue()


# Endpoints
@router.post("", response_model=CreateSessionResponse)
async def create_session(
    request: CreateSessionRequest | None = None,
    manager: SessionManager = Depends(get_session_manager),
) -> CreateSessionResponse:
    """Create a new learner session and return the welcome entries.

    A full manager (503) and a duplicate id (409) are mapped by the
    app-level FiveStepError handler.
    """
    session_id = request.session_id if request else None
    session = await manager.create_session(session_id=session_id)

    return CreateSessionResponse(
        session_id=session.session_id,
        stage=session.stage.value,
        entries=[entry_to_model(e) for e in session.log.entries()],
    )


@router.get("")
async def list_sessions(manager: SessionManager = Depends(get_session_manager)) -> dict:
    """List all active sessions."""
    return {
        "active_count": manager.active_count,
        "available_slots": manager.available_slots,
        "sessions": manager.list_sessions(),
    }


@router.get("/{session_id}", response_model=SessionStatusResponse)
async def get_session_status(
    session: SessionController = Depends(get_session),
) -> SessionStatusResponse:
    """Get status of a session."""
    state = session.state
    return SessionStatusResponse(
        session_id=session.session_id,
        stage=state.stage.value,
        chunk_index=state.chunk_index,
        chunk_count=state.chunk_count,
        grammar_focus=state.grammar_focus,
        busy=session.is_busy,
        offer_recording=session.should_offer_recording(),
        turns=session.turn_count,
        messages=len(session.log),
    )


@router.delete("/{session_id}")
async def delete_session(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> dict:
    """End and delete a session."""
    await manager.end_session(session_id)
    return {"message": f"Session {session_id} ended"}


@router.post("/{session_id}/input", response_model=TurnResponse)
async def submit_input(
    request: InputRequest,
    session: SessionController = Depends(get_session),
) -> TurnResponse:
    """Submit one learner text turn."""
    result = await session.submit(request.text)
    _reject_unaccepted(session, result)
    return _turn_response(session, result)


@router.post("/{session_id}/recording", response_model=TurnResponse)
async def submit_recording(
    request: Request,
    session: SessionController = Depends(get_session),
) -> TurnResponse:
    """Submit the learner's recording (raw body; Content-Type is the mime type)."""
    data = await request.body()
    mime_type = request.headers.get("content-type", "")
    try:
        result = await session.submit_recording(data, mime_type)
    except RecordingError as e:
        raise HTTPException(status_code=422, detail=e.to_dict())
    _reject_unaccepted(session, result)
    return _turn_response(session, result)


@router.get("/{session_id}/messages", response_model=list[MessageEntryModel])
async def list_messages(
    since: int = 0,
    session: SessionController = Depends(get_session),
) -> list[MessageEntryModel]:
    """Message log entries, optionally only those after the first `since`."""
    return [entry_to_model(e) for e in session.log.entries()[max(since, 0):]]


@router.get("/{session_id}/messages/{entry_id}/audio")
async def get_entry_audio(
    entry_id: str,
    session: SessionController = Depends(get_session),
) -> Response:
    """HD audio of an entry as WAV.

    Backup entries return 409 with the text to speak with a local voice.
    """
    entry = session.log.get(entry_id)
    if entry is None or not isinstance(entry.payload, AudioPayload):
        raise HTTPException(status_code=404, detail=f"No audio for entry {entry_id}")

    artifact = entry.payload.artifact
    if isinstance(artifact, FallbackArtifact):
        raise HTTPException(
            status_code=409,
            detail={
                "message": "HD audio unavailable; speak the text with a local voice",
                "text": artifact.source_text,
            },
        )
    if not isinstance(artifact, HDArtifact):
        raise HTTPException(status_code=404, detail=f"No audio for entry {entry_id}")

    return Response(content=encode_wav(artifact), media_type="audio/wav")


@router.post("/{session_id}/messages/{entry_id}/retry", response_model=RetryResponse)
async def retry_entry_audio(
    entry_id: str,
    session: SessionController = Depends(get_session),
) -> RetryResponse:
    """Retry HD synthesis for a backup audio entry."""
    if session.log.get(entry_id) is None:
        raise HTTPException(status_code=404, detail=f"Entry {entry_id} not found")
    try:
        retried = await session.retry_audio(entry_id)
    except PlaybackError as e:
        raise HTTPException(status_code=409, detail=e.to_dict())

    return RetryResponse(
        retried=retried,
        entry=entry_to_model(session.log.get(entry_id)),
    )
