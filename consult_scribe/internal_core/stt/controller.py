from __future__ import annotations

import asyncio
import functools
import logging
import time
from datetime import datetime
from typing import Any, Callable, List, Optional, Sequence
from uuid import uuid4

from consult_scribe.note.webhook import NoteWorkflowClient
from consult_scribe.transcript.accumulator import TranscriptAccumulator

from .. import audit
from ..config import ScribeConfig
from ..contracts import MedicalRecording, RecordingSnapshot, SessionNote, SessionState
from ..session_store import InMemoryRecordingStore
from .base import AlreadyRecordingError, NotRecordingError, STTError, STTProvider, StreamError
from .factory import create_stt_provider

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[RecordingSnapshot], None]


def _display_date(now: datetime) -> str:
    return f"{now:%B} {now.day}"


def _display_time(now: datetime) -> str:
    suffix = "am" if now.hour < 12 else "pm"
    return f"{now.hour % 12 or 12}:{now:%M}{suffix}"


class RecordingController:
    def __init__(
        self,
        store: InMemoryRecordingStore,
        cfg: ScribeConfig,
        provider_factory: Callable[[ScribeConfig], STTProvider] = create_stt_provider,
        note_client: Optional[NoteWorkflowClient] = None,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._store = store
        self._cfg = cfg
        self._provider_factory = provider_factory
        self._note_client = note_client
        self._clock = clock
        self._now = now
        self._accumulator = TranscriptAccumulator(recency_size=cfg.SCRIBE_RECENCY_WINDOW)
        self._listeners: List[SnapshotListener] = []
        self._state: SessionState = "idle"
        self._provider: Optional[STTProvider] = None
        self._recording: Optional[MedicalRecording] = None
        self._final_received: Optional[asyncio.Event] = None
        self._is_transcribing = False
        self._transcription_error: Optional[str] = None
        self._is_paused = False
        self._started_at = 0.0
        self._paused_at = 0.0
        self._paused_total = 0.0
        self._stopped_duration = 0
        self._session_seq = 0

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def provider(self) -> Optional[STTProvider]:
        return self._provider

    @property
    def store(self) -> InMemoryRecordingStore:
        return self._store

    @property
    def accumulator(self) -> TranscriptAccumulator:
        return self._accumulator

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def snapshot(self) -> RecordingSnapshot:
        views = self._accumulator.views()
        recording = self._recording
        return RecordingSnapshot(
            state=self._state,
            recording_id=recording.id if recording else None,
            patient_name=recording.patient_name if recording else None,
            is_paused=self._is_paused,
            is_transcribing=self._is_transcribing,
            duration=self._duration_seconds(),
            live_transcription=views.live_text,
            transcription=views.transcript,
            speaker_segments=views.segments,
            transcription_error=self._transcription_error,
        )

    async def start(self, patient_name: str) -> RecordingSnapshot:
        if self._state != "idle":
            raise AlreadyRecordingError("Already recording")

        now = self._now()
        self._state = "recording"
        self._session_seq += 1
        session_seq = self._session_seq
        self._accumulator.reset()
        self._provider = None
        self._final_received = asyncio.Event()
        self._is_transcribing = False
        self._transcription_error = None
        self._is_paused = False
        self._started_at = self._clock()
        self._paused_total = 0.0
        self._stopped_duration = 0
        self._recording = MedicalRecording(
            id=uuid4().hex,
            patient_name=patient_name,
            date=_display_date(now),
            time=_display_time(now),
        )
        recording_id = self._recording.id
        audit.log_event(self._store, recording_id, "SESSION_STARTED", "SESSION_START", f"stt={self._cfg.SCRIBE_STT_PROVIDER}")

        try:
            provider = self._provider_factory(self._cfg)
            await provider.start(
                on_partial=functools.partial(self._on_partial, session_seq),
                on_final=functools.partial(self._on_final, session_seq),
                on_error=functools.partial(self._on_error, session_seq),
            )
        except STTError as e:
            # Recording continues without live transcription.
            self._transcription_error = e.message
            logger.warning("stt unavailable recording_id=%s code=%s provider=%s", recording_id, e.code, e.provider_name)
            audit.log_event(self._store, recording_id, "STT_UNAVAILABLE", e.code, f"provider={e.provider_name}")
        else:
            self._provider = provider
            self._is_transcribing = True
            logger.info("recording started recording_id=%s provider=%s", recording_id, provider.name())

        self._publish()
        return self.snapshot()

    def pause(self) -> RecordingSnapshot:
        if self._state != "recording":
            raise NotRecordingError("Not recording")
        if not self._is_paused:
            self._is_paused = True
            self._paused_at = self._clock()
            self._publish()
        return self.snapshot()

    def resume(self) -> RecordingSnapshot:
        if self._state != "recording":
            raise NotRecordingError("Not recording")
        if self._is_paused:
            self._paused_total += max(0.0, self._clock() - self._paused_at)
            self._is_paused = False
            self._publish()
        return self.snapshot()

    async def stop(self, session_notes: Optional[Sequence[SessionNote]] = None) -> MedicalRecording:
        if self._state != "recording" or self._recording is None:
            raise NotRecordingError("Not recording")

        self._stopped_duration = self._duration_seconds()
        self._state = "stopping"
        self._publish()
        start_monotonic = time.monotonic()
        stream_closed = False
        try:
            await self._close_stream()
            stream_closed = True
        finally:
            # Runs on cancellation too: accumulated text is never discarded.
            views = self._accumulator.finish()
            recording = self._recording.model_copy(
                update={
                    "duration": self._stopped_duration,
                    "transcription": views.transcript,
                    "live_transcription": views.live_text,
                    "speaker_segments": views.segments,
                    "session_notes": list(session_notes or []),
                    "transcription_error": self._transcription_error,
                    # An interrupted stop never reaches the note workflow.
                    "is_processing": stream_closed and self._should_send_note(views.transcript),
                }
            )
            self._recording = recording
            self._store.save_recording(recording)
            audit.log_event(
                self._store,
                recording.id,
                "SESSION_STOPPED",
                "SESSION_STOP",
                f"final_tokens={views.final_token_count} segments={len(views.segments)}",
                duration_ms=int((time.monotonic() - start_monotonic) * 1000),
            )
            self._provider = None
            self._is_transcribing = False
            self._is_paused = False
            self._state = "idle"
            self._publish()

        if recording.is_processing:
            recording = await self._send_note(recording)
        return recording

    async def _close_stream(self) -> None:
        provider = self._provider
        if provider is None:
            return
        try:
            await provider.stop()
        except STTError as e:
            self._transcription_error = e.message
            logger.warning("stt stop failed code=%s provider=%s", e.code, e.provider_name)
            return
        except Exception:
            logger.exception("stt stop failed provider=%s", provider.name())
            return

        if self._accumulator.finished or self._final_received is None:
            return
        timeout = self._cfg.SCRIBE_FINISH_TIMEOUT_SECONDS
        try:
            await asyncio.wait_for(self._final_received.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.info("no final result within %.2fs; finishing with accumulated transcript", timeout)

    def _should_send_note(self, transcription: str) -> bool:
        return self._note_client is not None and bool(transcription.strip())

    async def _send_note(self, recording: MedicalRecording) -> MedicalRecording:
        start_monotonic = time.monotonic()
        analysis = await self._note_client.send(recording.transcription, recording.session_notes)
        duration_ms = int((time.monotonic() - start_monotonic) * 1000)
        if analysis is None:
            audit.log_event(self._store, recording.id, "NOTE_FAILED", "NOTE_NO_ANALYSIS", "", duration_ms=duration_ms)
        else:
            audit.log_event(self._store, recording.id, "NOTE_SENT", "NOTE_OK", "", duration_ms=duration_ms)
        updated = self._store.update_recording(recording.id, note_analysis=analysis, is_processing=False)
        if self._recording is not None and self._recording.id == updated.id:
            self._recording = updated
        return updated

    def _is_current(self, session_seq: int) -> bool:
        return session_seq == self._session_seq and self._state != "idle"

    def _on_partial(self, session_seq: int, payload: Any) -> None:
        if not self._is_current(session_seq):
            return
        self._accumulator.ingest(payload)
        self._publish()

    def _on_final(self, session_seq: int, payload: Any) -> None:
        if not self._is_current(session_seq):
            return
        self._accumulator.finish(payload)
        self._is_transcribing = False
        if self._final_received is not None:
            self._final_received.set()
        self._publish()

    def _on_error(self, session_seq: int, message: str) -> None:
        if not self._is_current(session_seq) or self._recording is None:
            return
        provider_name = self._provider.name() if self._provider else "unknown"
        error = StreamError("STT_STREAM_ERROR", f"Transcription error: {message}", provider_name)
        self._transcription_error = error.message
        self._is_transcribing = False
        logger.error("stt stream error recording_id=%s provider=%s", self._recording.id, provider_name)
        audit.log_event(self._store, self._recording.id, "STT_ERROR", error.code, f"provider={provider_name}")
        # No closing final result will follow a failed stream.
        if self._final_received is not None:
            self._final_received.set()
        self._publish()

    def _duration_seconds(self) -> int:
        if self._state != "recording":
            return self._stopped_duration
        now = self._clock()
        paused = self._paused_total
        if self._is_paused:
            paused += max(0.0, now - self._paused_at)
        return max(0, int(now - self._started_at - paused))

    def _publish(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                # Listener failures must never break transcript ingestion.
                logger.exception("transcript listener failed")
