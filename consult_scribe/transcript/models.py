"""
Typed transcript data contracts shared by the engine and the API.

Design intent:
- Keep tokens immutable once the recognizer hands them over.
- Treat speaker ids as opaque strings; numeric labels exist only on segments.
- Accept both token-level and pre-grouped segment payloads in one event shape.
"""
from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator

EventKind = Literal["partial", "final"]


def normalize_speaker_id(raw: Any) -> str | None:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, float) and raw.is_integer():
        raw = int(raw)
    label = str(raw).strip()
    return label or None


class Token(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str = ""
    is_final: bool = False
    speaker: str | None = None

    @field_validator("text", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("speaker", mode="before")
    @classmethod
    def _coerce_speaker(cls, value: Any) -> str | None:
        return normalize_speaker_id(value)


class SpeakerSegment(BaseModel):
    speaker: int | None = None
    speaker_id: str | None = None
    text: str

    @field_validator("speaker_id", mode="before")
    @classmethod
    def _coerce_speaker_id(cls, value: Any) -> str | None:
        return normalize_speaker_id(value)


class RecognitionEvent(BaseModel):
    kind: EventKind = "partial"
    text: str = ""
    tokens: list[Token] | None = None
    speaker_segments: list[SpeakerSegment] | None = None

    @property
    def is_final(self) -> bool:
        return self.kind == "final"

    def is_empty(self) -> bool:
        return not self.tokens and not self.speaker_segments and not self.text.strip()

