from consult_scribe.transcript.accumulator import TranscriptAccumulator
from consult_scribe.transcript.models import RecognitionEvent


def _event(*tokens: tuple[str, bool, str | None]) -> dict:
    return {
        "text": "",
        "tokens": [
            {"text": text, "isFinal": is_final, "speaker": speaker}
            for text, is_final, speaker in tokens
        ],
    }


def test_partial_then_final_token_updates_live_and_transcript() -> None:
    acc = TranscriptAccumulator()

    views = acc.ingest({"tokens": [{"text": "Hel", "isFinal": False}]})
    assert views.live_text == "Hel"
    assert views.transcript == ""

    views = acc.ingest({"tokens": [{"text": "Hello", "isFinal": True, "speaker": "1"}]})
    assert views.transcript == "[Speaker 1] Hello"
    assert views.live_text == "[Speaker 1] Hello"
    assert views.final_token_count == 1


def test_live_text_is_scoped_to_recent_speakers_while_transcript_keeps_everyone() -> None:
    acc = TranscriptAccumulator(recency_size=2)
    acc.ingest(_event(("Hello doctor.", True, "1")))
    acc.ingest(_event((" Hi, what brings you in?", True, "2")))
    views = acc.ingest(_event((" I am the nurse.", True, "3")))

    assert views.transcript == (
        "[Speaker 1] Hello doctor.\n"
        "[Speaker 2] Hi, what brings you in?\n"
        "[Speaker 3] I am the nurse."
    )
    assert views.live_text == "[Speaker 2] Hi, what brings you in?\n[Speaker 3] I am the nurse."
    assert [item.speaker for item in views.segments] == [1, 2, 3]
    assert acc.recent_speakers == ["3", "2"]


def test_wider_recency_window_shows_all_recent_speakers() -> None:
    acc = TranscriptAccumulator(recency_size=3)
    acc.ingest(_event(("A.", True, "1")))
    acc.ingest(_event((" B.", True, "2")))
    views = acc.ingest(_event((" C.", True, "3")))

    assert views.live_text == views.transcript


def test_live_text_layers_tentative_tokens_over_recent_finals() -> None:
    acc = TranscriptAccumulator()
    views = acc.ingest(_event(("My back hurts", True, "1"), (" since", False, "1"), (" Mon", False, "1")))

    assert views.transcript == "[Speaker 1] My back hurts"
    assert views.live_text == "[Speaker 1] My back hurts since Mon"

    views = acc.ingest(_event((" since Monday", False, "1")))
    assert views.transcript == "[Speaker 1] My back hurts"
    assert views.live_text == "[Speaker 1] My back hurts since Monday"


def test_finish_drops_tentative_text_and_keeps_final_log() -> None:
    acc = TranscriptAccumulator()
    acc.ingest(_event(("Hello", True, "1")))
    acc.ingest(_event((" how are", False, "1")))

    views = acc.finish()

    assert views.finished is True
    assert views.transcript == "[Speaker 1] Hello"
    assert views.live_text == "[Speaker 1] Hello"
    assert views.final_token_count == 1


def test_finish_tolerates_missing_and_empty_events() -> None:
    acc = TranscriptAccumulator()
    assert acc.finish(None).transcript == ""

    acc = TranscriptAccumulator()
    views = acc.finish({})
    assert views.finished is True
    assert views.transcript == ""


def test_finish_applies_closing_final_tokens_once() -> None:
    acc = TranscriptAccumulator()
    acc.ingest(_event(("Take ibuprofen", False, "2")))

    views = acc.finish(_event(("Take ibuprofen twice daily.", True, "2")))
    assert views.transcript == "[Speaker 2] Take ibuprofen twice daily."

    again = acc.finish(_event((" Extra.", True, "2")))
    assert again.transcript == views.transcript
    assert again.final_token_count == 1


def test_ingest_after_finish_is_ignored() -> None:
    acc = TranscriptAccumulator()
    acc.ingest(_event(("Hello", True, "1")))
    frozen = acc.finish()

    views = acc.ingest(_event((" more", True, "1")))

    assert views.transcript == frozen.transcript
    assert views.final_token_count == 1
    assert acc.final_text == "Hello"


def test_empty_or_malformed_events_leave_views_unchanged() -> None:
    acc = TranscriptAccumulator()
    acc.ingest(_event(("Hello", True, "1"), (" wor", False, "1")))
    before = acc.views()

    for payload in [{"tokens": []}, {}, None, "garbage", 42, {"tokens": [], "text": "   "}]:
        views = acc.ingest(payload)
        assert views.live_text == before.live_text
        assert views.transcript == before.transcript


def test_malformed_token_items_are_sanitized() -> None:
    acc = TranscriptAccumulator()
    views = acc.ingest(
        {
            "tokens": [
                None,
                5,
                {"isFinal": True},
                {"text": "ok", "is_final": "true", "speaker": ""},
            ]
        }
    )

    assert views.transcript == "ok"
    assert views.final_token_count == 2
    assert acc.recent_speakers == []


def test_duplicate_event_delivery_does_not_grow_the_log() -> None:
    acc = TranscriptAccumulator()
    event = _event(("Hello", True, "1"), (" wor", False, "1"))

    first = acc.ingest(event)
    second = acc.ingest(event)

    assert first.final_token_count == second.final_token_count == 1
    assert second.transcript == first.transcript
    assert second.live_text == first.live_text


def test_cumulative_batches_append_only_the_new_suffix() -> None:
    acc = TranscriptAccumulator()
    acc.ingest(_event(("Yes", True, "1")))
    views = acc.ingest(_event(("Yes", True, "1"), (" yes", True, "1")))
    assert views.final_token_count == 2
    assert views.transcript == "[Speaker 1] Yes yes"

    views = acc.ingest(_event(("Yes", True, "1"), (" yes", True, "1")))
    assert views.final_token_count == 2


def test_shorter_batch_repeating_earlier_text_is_kept_as_new_speech() -> None:
    acc = TranscriptAccumulator()
    acc.ingest(_event((" No", True, "1"), (".", True, "1")))
    acc.ingest(_event((" No", True, "1")))
    views = acc.ingest(_event((".", True, "1")))

    assert views.final_token_count == 4
    assert views.transcript == "[Speaker 1] No. No."
    assert acc.final_text == " No. No."


def test_tentative_speakers_use_the_number_they_get_once_final() -> None:
    acc = TranscriptAccumulator()

    views = acc.ingest(_event(("Good morning", False, "abc")))
    assert views.live_text == "[Speaker 1] Good morning"

    views = acc.ingest(_event(("Good morning.", True, "abc")))
    assert views.live_text == "[Speaker 1] Good morning."

    views = acc.ingest(_event((" Hi", False, "1")))
    assert views.live_text == "[Speaker 1] Good morning.\n[Speaker 2] Hi"

    views = acc.ingest(_event((" Hi.", True, "1")))
    assert views.transcript == "[Speaker 1] Good morning.\n[Speaker 2] Hi."


def test_fresh_batches_are_appended_in_order() -> None:
    acc = TranscriptAccumulator()
    acc.ingest(_event(("Any allergies?", True, "1")))
    acc.ingest(_event((" No.", True, "2")))
    views = acc.ingest(_event((" Good.", True, "1")))

    assert views.final_token_count == 3
    assert views.transcript == "[Speaker 1] Any allergies?\n[Speaker 2] No.\n[Speaker 1] Good."
    assert acc.final_text == "Any allergies? No. Good."


def test_transcript_length_never_decreases() -> None:
    acc = TranscriptAccumulator()
    script = [
        _event(("Hel", False, None)),
        _event(("Hello", True, "1"), (" doc", False, "1")),
        _event(("Hello", True, "1"), (" doctor", True, "1")),
        {"tokens": []},
        _event((" I", False, "2")),
        _event((" I have", True, "2"), (" pain", False, "2")),
        _event((" ", True, "3")),
        _event((" pain", True, "2")),
        {"text": "fallback text"},
        RecognitionEvent(kind="final", text="fallback text only"),
        _event((" Okay.", True, "1")),
    ]

    previous = 0
    for event in script:
        views = acc.ingest(event)
        assert len(views.transcript) >= previous
        previous = len(views.transcript)

    assert "".join(item.text for item in acc.views().segments) == acc.final_text


def test_pre_grouped_speaker_segments_are_handled_like_tokens() -> None:
    acc = TranscriptAccumulator()
    segments = [{"speaker": 1, "text": "Hello"}, {"speaker": 2, "text": "Hi"}]

    views = acc.ingest({"text": "Hello Hi", "speakerSegments": segments})
    assert views.transcript == ""
    assert views.live_text == "[Speaker 1] Hello\n[Speaker 2] Hi"

    views = acc.finish({"text": "Hello Hi", "speakerSegments": segments})
    assert views.transcript == "[Speaker 1] Hello\n[Speaker 2] Hi"
    assert [item.speaker_id for item in views.segments] == ["1", "2"]


def test_text_only_fallback_is_tentative_until_longer_final_arrives() -> None:
    acc = TranscriptAccumulator()

    views = acc.ingest({"text": "Patient reports"})
    assert views.live_text == "Patient reports"
    assert views.transcript == ""

    views = acc.ingest({"text": "Patient reports back pain"})
    assert views.live_text == "Patient reports back pain"

    views = acc.ingest(RecognitionEvent(kind="final", text="Patient reports back pain."))
    assert views.transcript == "Patient reports back pain."

    views = acc.ingest(RecognitionEvent(kind="final", text="Patient reports"))
    assert views.transcript == "Patient reports back pain."
    assert views.final_token_count == 1

    views = acc.ingest({"text": "Patient reports back pain. Since Monday"})
    assert views.live_text == "Patient reports back pain. Since Monday"
    assert views.transcript == "Patient reports back pain."

    assert acc.finish().transcript == "Patient reports back pain."


def test_fallback_text_layers_on_top_of_existing_token_log() -> None:
    acc = TranscriptAccumulator()
    acc.ingest(_event(("Hello", True, "1")))

    views = acc.ingest({"text": "continuing"})

    assert views.transcript == "[Speaker 1] Hello"
    assert views.live_text == "[Speaker 1] Hello\ncontinuing"


def test_opaque_speaker_ids_get_stable_numbers() -> None:
    acc = TranscriptAccumulator()
    acc.ingest(_event(("Hi", True, "spk_a")))
    acc.ingest(_event((" Hello", True, "spk_b")))
    views = acc.ingest(_event((" Bye", True, "spk_a")))

    assert [item.speaker for item in views.segments] == [1, 2, 1]
    assert views.transcript == "[Speaker 1] Hi\n[Speaker 2] Hello\n[Speaker 1] Bye"


def test_reset_clears_session_state() -> None:
    acc = TranscriptAccumulator()
    acc.ingest(_event(("Hello", True, "1")))
    acc.finish()

    acc.reset()

    views = acc.ingest(_event(("New visit", True, "2")))
    assert views.transcript == "[Speaker 2] New visit"
    assert views.finished is False
    assert acc.recent_speakers == ["2"]
