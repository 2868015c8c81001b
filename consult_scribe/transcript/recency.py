"""
Bounded most-recent-first set of active speaker ids.

Design intent:
- Scope the live panel to the speakers who talked last.
- Never influence the canonical transcript.
"""
from __future__ import annotations


class RecencyWindow:
    def __init__(self, capacity: int = 2) -> None:
        self._capacity = max(1, int(capacity))
        self._speakers: list[str] = []

    @property
    def capacity(self) -> int:
        return self._capacity

    def touch(self, speaker_id: str | None) -> None:
        if speaker_id is None:
            return
        if speaker_id in self._speakers:
            self._speakers.remove(speaker_id)
        self._speakers.insert(0, speaker_id)
        del self._speakers[self._capacity :]

    def contains(self, speaker_id: str | None) -> bool:
        return speaker_id in self._speakers

    def current(self) -> list[str]:
        return list(self._speakers)

    def clear(self) -> None:
        self._speakers = []

    def __len__(self) -> int:
        return len(self._speakers)
