"""FiveStep terminal client.

Runs one learner session in the terminal and plays tutor audio through
the default sound device.

Usage:
    fivestep                      # engines from .env / environment
    fivestep --mock --no-audio    # offline, silent

Commands inside the session:
    :play N      play audio entry N
    :retry N     retry HD audio for backup entry N
    :record PATH submit an audio file as your recording (step 4)
    :quit        leave
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from fivestep import __version__
from fivestep.audio.playback.engine import AudioPlaybackEngine
from fivestep.audio.playback.local_voice import LocalVoiceSynthesizer
from fivestep.audio.playback.output import SoundDeviceOutput
from fivestep.audio.tts import create_speech_gateway
from fivestep.audio.tts.cache import SpeechCache
from fivestep.config.settings import get_settings
from fivestep.exceptions import FiveStepError, PlaybackError, RecordingError
from fivestep.feedback import TutorFeedback, create_feedback_client
from fivestep.observability.logging import init_logging
from fivestep.orchestrator import prompts
from fivestep.orchestrator.controller import SessionController
from fivestep.orchestrator.messages import (
    AudioPayload,
    DividerPayload,
    LogEntry,
    RecordingPayload,
    Sender,
    TextPayload,
)
from fivestep.orchestrator.state_machine import Stage

RECORDING_MIME_TYPES = {
    ".webm": "audio/webm",
    ".ogg": "audio/ogg",
    ".opus": "audio/ogg",
    ".m4a": "audio/mp4",
    ".mp4": "audio/mp4",
    ".aac": "audio/aac",
}


def format_entry(number: int, entry: LogEntry) -> str:
    """One log entry as terminal text."""
    payload = entry.payload
    who = "You" if entry.sender == Sender.LEARNER else "Tutor"

    if isinstance(payload, DividerPayload):
        return "\n" + prompts.divider(payload.title)
    if isinstance(payload, TextPayload):
        return f"[{number}] {who}: {payload.text}"
    if isinstance(payload, RecordingPayload):
        return f"[{number}] {who}: 🎙️ recording ({payload.mime_type}, {payload.size_bytes} bytes)"
    if isinstance(payload, AudioPayload):
        artifact = payload.artifact
        label = entry.label or "Audio"
        hint = ""
        if entry.is_backup_audio:
            hint = f"  (:retry {number} for HD audio)"
        return f"[{number}] 🔊 {label} [{artifact.kind.value}]{hint}"
    return f"[{number}] {who}: {payload}"


class TerminalSession:
    """Interactive loop around one SessionController."""

    def __init__(self, controller: SessionController, autoplay: bool = True) -> None:
        self._controller = controller
        self._autoplay = autoplay
        self._shown = 0

    async def run(self) -> None:
        self._controller.start()
        await self._show_new()

        while True:
            try:
                line = await self._read_input()
            except EOFError:
                break

            if line is None:
                continue
            if line.startswith(":"):
                if not await self._command(line):
                    break
                continue

            result = await self._controller.submit(line)
            if not result.accepted:
                print("(nothing to send)")
            await self._show_new()
            if self._controller.should_offer_recording():
                print("⏺️  Record yourself reading the sentence, then :record PATH")

    async def _read_input(self) -> str | None:
        """Read a line; in step 0 a blank line ends a multi-line paste."""
        first = await asyncio.to_thread(input, "> ")
        if self._controller.stage != Stage.INITIALIZATION or first.startswith(":"):
            return first.strip() or None

        lines = [first]
        while lines[-1].strip():
            lines.append(await asyncio.to_thread(input, "... "))
        text = "\n".join(line for line in lines if line.strip())
        return text or None

    async def _command(self, line: str) -> bool:
        name, _, arg = line.partition(" ")
        arg = arg.strip()

        if name in (":quit", ":q", ":exit"):
            return False

        try:
            if name == ":play":
                await self._controller.playback.play(self._audio_entry(arg).payload.artifact)
            elif name == ":retry":
                entry = self._entry(arg)
                ok = await self._controller.retry_audio(entry.entry_id)
                print("✅ HD audio ready" if ok else "HD audio still unavailable, try again later")
                print(format_entry(int(arg), self._controller.log.get(entry.entry_id)))
            elif name == ":record":
                await self._record(Path(arg).expanduser())
            else:
                print("Commands: :play N, :retry N, :record PATH, :quit")
        except (FiveStepError, ValueError, OSError) as e:
            print(f"{prompts.ERROR_PREFIX}{e}")
        return True

    async def _record(self, path: Path) -> None:
        mime_type = RECORDING_MIME_TYPES.get(path.suffix.lower())
        if mime_type is None:
            raise RecordingError("unsupported file type", mime_type=path.suffix)
        result = await self._controller.submit_recording(path.read_bytes(), mime_type)
        if not result.accepted:
            print("(busy, try again)")
        await self._show_new()

    def _entry(self, arg: str) -> LogEntry:
        entries = self._controller.log.entries()
        index = int(arg) - 1
        if not 0 <= index < len(entries):
            raise ValueError(f"no entry {arg}")
        return entries[index]

    def _audio_entry(self, arg: str) -> LogEntry:
        entry = self._entry(arg)
        if not isinstance(entry.payload, AudioPayload):
            raise PlaybackError(f"entry {arg} has no audio")
        return entry

    async def _show_new(self) -> None:
        entries = self._controller.log.entries()
        for number, entry in enumerate(entries[self._shown:], start=self._shown + 1):
            print(format_entry(number, entry))
            if self._autoplay and entry.auto_play and isinstance(entry.payload, AudioPayload):
                try:
                    await self._controller.playback.play(entry.payload.artifact)
                except PlaybackError as e:
                    print(f"{prompts.ERROR_PREFIX}{e}")
        self._shown = len(entries)


async def _run(args: argparse.Namespace) -> None:
    settings = get_settings()
    synthesis_engine = "mock" if args.mock else None
    feedback_engine = "mock" if args.mock else None

    gateway = await create_speech_gateway(
        cache=SpeechCache(), engine=synthesis_engine, settings=settings
    )
    client = create_feedback_client(feedback_engine, settings)
    await client.start()

    output = None
    if not args.no_audio:
        output = SoundDeviceOutput()

    playback = AudioPlaybackEngine(
        gateway,
        output=output,
        local_voice=LocalVoiceSynthesizer(
            rate=settings.fallback_voice_rate,
            sample_rate=settings.fallback_voice_sample_rate,
        ),
        session_id="terminal",
    )

    controller = SessionController(
        "terminal",
        gateway,
        TutorFeedback(client),
        playback=playback,
        min_chunk_words=args.min_words or settings.min_chunk_words,
    )

    try:
        await TerminalSession(controller, autoplay=not args.no_audio).run()
    finally:
        await controller.close()
        await client.close()
        await gateway.backend.shutdown()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="fivestep",
        description="Five-step listening course in the terminal",
    )
    parser.add_argument(
        "--mock", action="store_true", help="Use mock synthesis and feedback engines"
    )
    parser.add_argument(
        "--no-audio", action="store_true", help="Do not open an audio output"
    )
    parser.add_argument(
        "--min-words", type=int, default=None, help="Minimum words per chunk"
    )
    parser.add_argument(
        "--log-level", default="WARNING", help="Log level (default: WARNING)"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    args = parser.parse_args(argv)
    init_logging(json_format=False, level=args.log_level)

    try:
        asyncio.run(_run(args))
    except KeyboardInterrupt:
        print()
    except FiveStepError as e:
        print(f"{prompts.ERROR_PREFIX}{e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
