"""
Group recognition tokens into contiguous same-speaker segments.

Design intent:
- Stay pure so the accumulator can rebuild views from scratch on every event.
- Keep raw token text inside segments; trimming happens only when rendering.
- Map opaque speaker ids to numeric labels at the display boundary.
"""
from __future__ import annotations

from typing import Mapping, Sequence

from consult_scribe.transcript.models import SpeakerSegment, Token


def speaker_number(
    speaker_id: str | None,
    speaker_numbers: Mapping[str, int] | None = None,
) -> int | None:
    if speaker_id is None:
        return None
    if speaker_numbers is not None and speaker_id in speaker_numbers:
        return speaker_numbers[speaker_id]
    if speaker_id.isdigit():
        return int(speaker_id)
    return None


def build_segments(
    tokens: Sequence[Token],
    speaker_numbers: Mapping[str, int] | None = None,
) -> list[SpeakerSegment]:
    runs: list[tuple[str | None, str]] = []
    current_speaker: str | None = None
    current_text = ""
    started = False

    for token in tokens:
        if started and token.speaker != current_speaker:
            runs.append((current_speaker, current_text))
            current_text = ""
        current_speaker = token.speaker
        current_text += token.text
        started = True
    if started:
        runs.append((current_speaker, current_text))

    segments: list[SpeakerSegment] = []
    carry = ""
    for speaker_id, text in runs:
        # Blank runs never become segments of their own.
        if not text.strip():
            carry += text
            continue
        segments.append(
            SpeakerSegment(
                speaker=speaker_number(speaker_id, speaker_numbers),
                speaker_id=speaker_id,
                text=carry + text,
            )
        )
        carry = ""

    if carry and segments:
        last = segments[-1]
        segments[-1] = last.model_copy(update={"text": last.text + carry})
    return segments


def segment_label(segment: SpeakerSegment) -> str | None:
    if segment.speaker is not None:
        return f"Speaker {segment.speaker}"
    if segment.speaker_id is not None:
        return f"Speaker {segment.speaker_id}"
    return None


def format_segments(segments: Sequence[SpeakerSegment]) -> str:
    lines: list[str] = []
    for segment in segments:
        text = segment.text.strip()
        if not text:
            continue
        label = segment_label(segment)
        lines.append(f"[{label}] {text}" if label else text)
    return "\n".join(lines)


def segments_text(segments: Sequence[SpeakerSegment]) -> str:
    return "".join(segment.text for segment in segments)
