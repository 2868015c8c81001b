from __future__ import annotations

"""
API surface for the consult-scribe recording service.

Design intent:
- Keep API orchestration thin and typed.
- Delegate transcript reconciliation to the recording controller and engine.
- Relay recognizer callbacks from the browser SDK over one WebSocket.
"""

import asyncio
import json
import logging
from typing import Any

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from consult_scribe.internal_core.config import ScribeConfig, load_config
from consult_scribe.internal_core.contracts import (
    AuditEvent,
    MedicalRecording,
    RecordingSnapshot,
    SessionNote,
)
from consult_scribe.internal_core.session_store import InMemoryRecordingStore
from consult_scribe.internal_core.stt import (
    AlreadyRecordingError,
    NotRecordingError,
    RecordingController,
    RelaySTTProvider,
)
from consult_scribe.note.webhook import NoteWorkflowClient


class StartRecordingRequest(BaseModel):
    patient_name: str = Field(min_length=1, max_length=256)


class StopRecordingRequest(BaseModel):
    session_notes: list[SessionNote] = Field(default_factory=list)


class SttClientConfigResponse(BaseModel):
    provider: str
    configured: bool
    model: str
    enable_speaker_diarization: bool
    enable_language_identification: bool
    language_hints: list[str] = Field(default_factory=list)


class RecordingListResponse(BaseModel):
    recordings: list[MedicalRecording] = Field(default_factory=list)


class RecordingAuditResponse(BaseModel):
    recording_id: str
    events: list[AuditEvent] = Field(default_factory=list)


app = FastAPI(title="consult-scribe backend service")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, str(level_name or "").strip().upper(), logging.INFO)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _get_config() -> ScribeConfig:
    existing = getattr(app.state, "scribe_config", None)
    if isinstance(existing, ScribeConfig):
        return existing
    created = load_config()
    setattr(app.state, "scribe_config", created)
    return created


def _get_controller() -> RecordingController:
    existing = getattr(app.state, "recording_controller", None)
    if isinstance(existing, RecordingController):
        return existing

    cfg = _get_config()
    _configure_logging(cfg.SCRIBE_LOG_LEVEL)
    note_client = None
    if cfg.note_webhook_enabled:
        note_client = NoteWorkflowClient(
            cfg.SCRIBE_NOTE_WEBHOOK_URL,
            cfg.SCRIBE_NOTE_WEBHOOK_TOKEN,
            timeout_sec=cfg.SCRIBE_NOTE_WEBHOOK_TIMEOUT_SECONDS,
        )
    created = RecordingController(
        InMemoryRecordingStore(max_recordings=cfg.SCRIBE_MAX_RECORDINGS),
        cfg,
        note_client=note_client,
    )
    setattr(app.state, "recording_controller", created)
    return created


def _relay_provider() -> RelaySTTProvider | None:
    provider = _get_controller().provider
    if isinstance(provider, RelaySTTProvider):
        return provider
    return None


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/stt/config", response_model=SttClientConfigResponse)
async def stt_config() -> SttClientConfigResponse:
    cfg = _get_config()
    return SttClientConfigResponse(
        provider=cfg.SCRIBE_STT_PROVIDER,
        configured=cfg.stt_configured,
        model=cfg.SCRIBE_STT_MODEL,
        enable_speaker_diarization=cfg.SCRIBE_STT_DIARIZATION,
        enable_language_identification=cfg.SCRIBE_STT_LANGUAGE_ID,
        language_hints=list(cfg.SCRIBE_STT_LANGUAGE_HINTS),
    )


@app.post("/recordings/start", response_model=RecordingSnapshot)
async def start_recording(payload: StartRecordingRequest) -> RecordingSnapshot:
    try:
        return await _get_controller().start(payload.patient_name.strip() or payload.patient_name)
    except AlreadyRecordingError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc


@app.post("/recordings/stop", response_model=MedicalRecording)
async def stop_recording(payload: StopRecordingRequest | None = None) -> MedicalRecording:
    session_notes = payload.session_notes if payload is not None else []
    try:
        return await _get_controller().stop(session_notes)
    except NotRecordingError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc


@app.post("/recordings/pause", response_model=RecordingSnapshot)
async def pause_recording() -> RecordingSnapshot:
    try:
        return _get_controller().pause()
    except NotRecordingError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc


@app.post("/recordings/resume", response_model=RecordingSnapshot)
async def resume_recording() -> RecordingSnapshot:
    try:
        return _get_controller().resume()
    except NotRecordingError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc


@app.get("/recordings/current", response_model=RecordingSnapshot)
async def current_recording() -> RecordingSnapshot:
    return _get_controller().snapshot()


@app.get("/recordings", response_model=RecordingListResponse)
async def list_recordings() -> RecordingListResponse:
    return RecordingListResponse(recordings=_get_controller().store.list_recordings())


@app.get("/recordings/{recording_id}", response_model=MedicalRecording)
async def get_recording(recording_id: str) -> MedicalRecording:
    try:
        return _get_controller().store.get_recording(recording_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=f"Unknown recording_id: {recording_id}") from exc


@app.get("/recordings/{recording_id}/audit", response_model=RecordingAuditResponse)
async def get_recording_audit(recording_id: str) -> RecordingAuditResponse:
    return RecordingAuditResponse(
        recording_id=recording_id,
        events=_get_controller().store.audit_events(recording_id),
    )


def _update_message(snapshot: RecordingSnapshot) -> dict[str, Any]:
    return {"type": "transcript_update", **snapshot.model_dump(mode="json")}


@app.websocket("/ws/transcription")
async def transcription_ws(websocket: WebSocket) -> None:
    await websocket.accept()
    controller = _get_controller()
    updates: asyncio.Queue[RecordingSnapshot] = asyncio.Queue()
    unsubscribe = controller.subscribe(updates.put_nowait)

    async def _forward_updates() -> None:
        while True:
            snapshot = await updates.get()
            await websocket.send_json(_update_message(snapshot))

    forwarder = asyncio.create_task(_forward_updates())
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                payload = json.loads(raw)
            except json.JSONDecodeError:
                await websocket.send_json({"type": "error", "detail": "invalid_json"})
                continue
            if not isinstance(payload, dict):
                await websocket.send_json({"type": "error", "detail": "invalid_message"})
                continue

            message_type = str(payload.get("type", "")).strip().lower()
            if message_type not in {"partial", "final", "error"}:
                await websocket.send_json({"type": "error", "detail": "unknown_message_type"})
                continue

            provider = _relay_provider()
            if provider is None:
                await websocket.send_json({"type": "error", "detail": "not_transcribing"})
                continue

            if message_type == "partial":
                delivered = provider.push_partial(payload.get("result"))
            elif message_type == "final":
                delivered = provider.push_final(payload.get("result"))
            else:
                delivered = provider.push_error(str(payload.get("message", "") or "unknown error"))
            if not delivered:
                await websocket.send_json({"type": "error", "detail": "not_transcribing"})
    except WebSocketDisconnect:
        logger.info("transcription websocket disconnected")
    finally:
        unsubscribe()
        forwarder.cancel()
        await asyncio.gather(forwarder, return_exceptions=True)
