"""
Maintain the session-scoped final-token log behind the live transcript UX.

Design intent:
- Accept repeated/overlapping recognizer batches without double-committing tokens.
- Rebuild live text, canonical transcript and speaker segments from owned state.
- Never shrink the canonical transcript and never raise on garbled upstream data.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

from consult_scribe.transcript.events import event_from_payload
from consult_scribe.transcript.models import RecognitionEvent, SpeakerSegment, Token
from consult_scribe.transcript.recency import RecencyWindow
from consult_scribe.transcript.segments import build_segments, format_segments

logger = logging.getLogger(__name__)


def _assign_speaker_number(numbers: dict[str, int], speaker_id: str) -> None:
    if speaker_id in numbers:
        return
    used = set(numbers.values())
    if speaker_id.isdigit() and int(speaker_id) not in used:
        numbers[speaker_id] = int(speaker_id)
        return
    numbers[speaker_id] = max(used, default=0) + 1


@dataclass(frozen=True)
class TranscriptViews:
    live_text: str
    transcript: str
    segments: list[SpeakerSegment] = field(default_factory=list)
    final_token_count: int = 0
    finished: bool = False


class TranscriptAccumulator:
    def __init__(self, *, recency_size: int = 2) -> None:
        self._recency = RecencyWindow(recency_size)
        self.reset()

    def reset(self) -> None:
        self._final_tokens: list[Token] = []
        self._batch: list[Token] = []
        self._tentative: list[Token] = []
        self._speaker_numbers: dict[str, int] = {}
        self._fallback_committed = ""
        self._recency.clear()
        self._live_text = ""
        self._transcript = ""
        self._segments: list[SpeakerSegment] = []
        self._finished = False

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def final_tokens(self) -> tuple[Token, ...]:
        return tuple(self._final_tokens)

    @property
    def final_text(self) -> str:
        return "".join(token.text for token in self._final_tokens)

    @property
    def recent_speakers(self) -> list[str]:
        return self._recency.current()

    def views(self) -> TranscriptViews:
        return TranscriptViews(
            live_text=self._live_text,
            transcript=self._transcript,
            segments=list(self._segments),
            final_token_count=len(self._final_tokens),
            finished=self._finished,
        )

    def ingest(self, event: RecognitionEvent | dict[str, Any] | None) -> TranscriptViews:
        if self._finished:
            logger.debug("transcript already finished; ignoring event")
            return self.views()

        parsed = event_from_payload(event, kind="partial")
        if parsed.is_empty():
            return self.views()

        self._apply(parsed)
        return self._refresh()

    def finish(self, event: RecognitionEvent | dict[str, Any] | None = None) -> TranscriptViews:
        if self._finished:
            return self.views()

        if event is not None:
            parsed = event_from_payload(event, kind="final")
            if not parsed.is_empty():
                self._apply(parsed)

        # Tentative text is never promoted by the closing pass alone.
        self._tentative = []
        self._refresh()
        self._finished = True
        logger.info(
            "transcript finished final_tokens=%s speakers=%s chars=%s",
            len(self._final_tokens),
            len(self._speaker_numbers),
            len(self._transcript),
        )
        return self.views()

    def _apply(self, event: RecognitionEvent) -> None:
        tokens = list(event.tokens or [])
        if not tokens and event.speaker_segments:
            tokens = [
                Token(text=f" {segment.text.strip()}", is_final=event.is_final, speaker=segment.speaker_id)
                for segment in event.speaker_segments
                if segment.text.strip()
            ]

        if tokens:
            finals = [token for token in tokens if token.is_final]
            self._tentative = [token for token in tokens if not token.is_final]
            newly_final = self._newly_final(finals)
            if newly_final:
                self._commit(newly_final)
            return

        self._apply_fallback_text(event.text, is_final=event.is_final)

    def _newly_final(self, finals: Sequence[Token]) -> list[Token]:
        if not finals:
            return []

        committed = self._batch
        if committed and list(finals[: len(committed)]) == committed:
            # Same batch resent or extended: only the suffix past the cursor is new.
            self._batch = list(finals)
            return list(finals[len(committed) :])

        # A shorter batch is new speech even when its text repeats the last one.
        self._batch = list(finals)
        return list(finals)

    def _commit(self, tokens: Sequence[Token]) -> None:
        for token in tokens:
            self._final_tokens.append(token)
            if token.speaker is None:
                continue
            _assign_speaker_number(self._speaker_numbers, token.speaker)
            self._recency.touch(token.speaker)

    def _live_speaker_numbers(self) -> dict[str, int]:
        # Tentative speakers get the number they will receive once committed.
        numbers = dict(self._speaker_numbers)
        for token in self._tentative:
            if token.speaker is not None:
                _assign_speaker_number(numbers, token.speaker)
        return numbers

    def _apply_fallback_text(self, text: str, *, is_final: bool) -> None:
        committed = self._fallback_committed
        extends = text.startswith(committed)
        extension = text[len(committed) :] if extends else text
        if (not extends or not committed) and self._final_tokens and not extension[:1].isspace():
            extension = f" {extension}"

        if not is_final:
            self._tentative = [Token(text=extension)] if extension.strip() else []
            return

        self._tentative = []
        if len(text) > len(committed) and extension.strip():
            self._commit([Token(text=extension, is_final=True)])
            self._fallback_committed = text

    def _live_tokens(self) -> list[Token]:
        start = len(self._final_tokens)
        while start > 0:
            speaker = self._final_tokens[start - 1].speaker
            if speaker is not None and not self._recency.contains(speaker):
                break
            start -= 1
        return self._final_tokens[start:] + self._tentative

    def _refresh(self) -> TranscriptViews:
        segments = build_segments(self._final_tokens, self._speaker_numbers)
        transcript = format_segments(segments)
        if len(transcript) < len(self._transcript):
            logger.warning(
                "transcript regression rejected previous_chars=%s candidate_chars=%s",
                len(self._transcript),
                len(transcript),
            )
        else:
            self._transcript = transcript
            self._segments = segments

        self._live_text = format_segments(build_segments(self._live_tokens(), self._live_speaker_numbers()))
        return self.views()
