"""
Normalize raw recognizer callbacks into typed recognition events.

Design intent:
- Accept loosely-shaped SDK payloads (camelCase or snake_case keys).
- Sanitize instead of reject: missing fields become empty text / no speaker.
- Keep malformed items out of the engine without raising.
"""
from __future__ import annotations

from typing import Any, Mapping

from consult_scribe.transcript.models import EventKind, RecognitionEvent, SpeakerSegment, Token


def _first_present(item: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in item:
            return item[key]
    return None


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "t", "yes", "y"}
    return bool(value)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (str, int, float)):
        return str(value)
    return ""


def token_from_payload(item: Any) -> Token | None:
    if isinstance(item, Token):
        return item
    if not isinstance(item, Mapping):
        return None
    return Token(
        text=_as_text(item.get("text")),
        is_final=_as_bool(_first_present(item, "is_final", "isFinal", "final")),
        speaker=_first_present(item, "speaker", "speaker_id", "speakerId"),
    )


def segment_from_payload(item: Any) -> SpeakerSegment | None:
    if isinstance(item, SpeakerSegment):
        return item
    if not isinstance(item, Mapping):
        return None
    text = _as_text(item.get("text"))
    if not text.strip():
        return None
    return SpeakerSegment(
        speaker=None,
        speaker_id=_first_present(item, "speaker", "speaker_id", "speakerId"),
        text=text,
    )


def _collect(raw: Any, convert) -> list | None:
    if raw is None:
        return None
    if not isinstance(raw, (list, tuple)):
        return []
    out = []
    for item in raw:
        converted = convert(item)
        if converted is not None:
            out.append(converted)
    return out


def event_from_payload(payload: Any, *, kind: EventKind = "partial") -> RecognitionEvent:
    if isinstance(payload, RecognitionEvent):
        return payload
    if not isinstance(payload, Mapping):
        return RecognitionEvent(kind=kind)

    raw_kind = str(payload.get("kind", "") or "").strip().lower()
    if raw_kind in {"partial", "final"}:
        kind = raw_kind  # type: ignore[assignment]

    return RecognitionEvent(
        kind=kind,
        text=_as_text(payload.get("text")),
        tokens=_collect(payload.get("tokens"), token_from_payload),
        speaker_segments=_collect(
            _first_present(payload, "speaker_segments", "speakerSegments"),
            segment_from_payload,
        ),
    )
