from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from consult_scribe.transcript.models import SpeakerSegment

SessionState = Literal["idle", "recording", "stopping"]


class SessionNote(BaseModel):
    model_config = ConfigDict(extra="forbid")

    timestamp: str
    note: str


class NoteAnalysis(BaseModel):
    model_config = ConfigDict(extra="ignore")

    soa_markdown: str = ""
    risk_hypotheses: List[str] = Field(default_factory=list)
    red_flags: List[str] = Field(default_factory=list)
    next_visit_metrics: List[str] = Field(default_factory=list)


class MedicalRecording(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    patient_name: str
    date: str
    time: str
    duration: int = 0
    transcription: str = ""
    live_transcription: str = ""
    session_notes: List[SessionNote] = Field(default_factory=list)
    speaker_segments: List[SpeakerSegment] = Field(default_factory=list)
    note_analysis: Optional[NoteAnalysis] = None
    transcription_error: Optional[str] = None
    is_processing: bool = False


class RecordingSnapshot(BaseModel):
    model_config = ConfigDict(extra="forbid")

    state: SessionState
    recording_id: Optional[str] = None
    patient_name: Optional[str] = None
    is_paused: bool = False
    is_transcribing: bool = False
    duration: int = 0
    live_transcription: str = ""
    transcription: str = ""
    speaker_segments: List[SpeakerSegment] = Field(default_factory=list)
    transcription_error: Optional[str] = None


AuditEventType = Literal[
    "SESSION_STARTED",
    "STT_UNAVAILABLE",
    "STT_ERROR",
    "SESSION_STOPPED",
    "NOTE_SENT",
    "NOTE_FAILED",
]


class AuditEvent(BaseModel):
    model_config = ConfigDict(extra="forbid")

    ts_iso: str
    recording_id: str
    type: AuditEventType
    code: str
    detail: str
    duration_ms: Optional[int] = None
