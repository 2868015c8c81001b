from __future__ import annotations

from collections import OrderedDict
from threading import RLock
from typing import Any, Dict, List

from .contracts import AuditEvent, MedicalRecording


class InMemoryRecordingStore:
    def __init__(self, max_recordings: int = 200):
        self._max_recordings = max(1, int(max_recordings))
        self._lock = RLock()
        self._recordings: "OrderedDict[str, MedicalRecording]" = OrderedDict()
        self._audit_events: Dict[str, List[AuditEvent]] = {}

    def save_recording(self, recording: MedicalRecording) -> None:
        with self._lock:
            self._recordings.pop(recording.id, None)
            self._recordings[recording.id] = recording
            self._evict_if_needed()

    def update_recording(self, recording_id: str, **changes: Any) -> MedicalRecording:
        with self._lock:
            existing = self._recordings.get(recording_id)
            if existing is None:
                raise KeyError(f"Unknown recording_id: {recording_id}")
            updated = existing.model_copy(update=changes)
            self._recordings[recording_id] = updated
            return updated

    def get_recording(self, recording_id: str) -> MedicalRecording:
        with self._lock:
            recording = self._recordings.get(recording_id)
            if recording is None:
                raise KeyError(f"Unknown recording_id: {recording_id}")
            return recording

    def list_recordings(self) -> List[MedicalRecording]:
        with self._lock:
            return list(reversed(self._recordings.values()))

    def append_audit_event(self, recording_id: str, event: AuditEvent) -> None:
        with self._lock:
            self._audit_events.setdefault(recording_id, []).append(event)

    def audit_events(self, recording_id: str) -> List[AuditEvent]:
        with self._lock:
            return list(self._audit_events.get(recording_id, []))

    def _evict_if_needed(self) -> None:
        while len(self._recordings) > self._max_recordings:
            recording_id, _ = self._recordings.popitem(last=False)
            self._audit_events.pop(recording_id, None)
