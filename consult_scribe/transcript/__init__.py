"""
Transcript module boundary for the consult-scribe backend.

Design intent:
- Reconcile partial/final recognition tokens into stable transcript views.
- Keep the engine pure and testable without a live streaming connection.
- Leave provider wiring and persistence to `internal_core`.
"""
from __future__ import annotations

from .accumulator import TranscriptAccumulator, TranscriptViews
from .models import RecognitionEvent, SpeakerSegment, Token
from .recency import RecencyWindow
from .segments import build_segments, format_segments, segments_text, speaker_number

__all__ = [
    "RecencyWindow",
    "RecognitionEvent",
    "SpeakerSegment",
    "Token",
    "TranscriptAccumulator",
    "TranscriptViews",
    "build_segments",
    "format_segments",
    "segments_text",
    "speaker_number",
]
