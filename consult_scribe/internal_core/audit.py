from __future__ import annotations

import datetime as _dt
import re
from typing import Optional

from .contracts import AuditEvent, AuditEventType
from .session_store import InMemoryRecordingStore

_MAX_DETAIL_CHARS = 200
_SPEAKER_LABEL_RE = re.compile(r"\[Speaker [^\]]*\]")
_WHITESPACE_RE = re.compile(r"\s+")


def _ts_iso() -> str:
    return _dt.datetime.now(_dt.timezone.utc).isoformat()


def sanitize_detail(detail: Optional[str]) -> str:
    # Audit details carry codes and counters only; transcript lines
    # are recognisable by their speaker labels and are cut at the first one.
    text = detail or ""
    label = _SPEAKER_LABEL_RE.search(text)
    if label is not None:
        text = text[: label.start()] + "[redacted]"
    text = _WHITESPACE_RE.sub(" ", text).strip()
    if len(text) > _MAX_DETAIL_CHARS:
        text = text[:_MAX_DETAIL_CHARS] + "…"
    return text


def log_event(
    store: InMemoryRecordingStore,
    recording_id: str,
    event_type: AuditEventType,
    code: str,
    detail: Optional[str],
    duration_ms: Optional[int] = None,
) -> AuditEvent:
    event = AuditEvent(
        ts_iso=_ts_iso(),
        recording_id=recording_id,
        type=event_type,
        code=code,
        detail=sanitize_detail(detail),
        duration_ms=duration_ms,
    )
    store.append_audit_event(recording_id, event)
    return event
