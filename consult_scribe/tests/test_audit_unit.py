from consult_scribe.internal_core import audit
from consult_scribe.internal_core.session_store import InMemoryRecordingStore


def test_sanitize_detail_redacts_transcript_lines() -> None:
    detail = "provider=relay reason=[Speaker 1] I have chest pain\n[Speaker 2] Since when?"

    assert audit.sanitize_detail(detail) == "provider=relay reason=[redacted]"


def test_sanitize_detail_collapses_whitespace_and_truncates() -> None:
    assert audit.sanitize_detail("final_tokens=3\n  segments=2") == "final_tokens=3 segments=2"
    assert audit.sanitize_detail(None) == ""

    long_detail = audit.sanitize_detail("x" * 250)
    assert len(long_detail) == 201
    assert long_detail.endswith("…")


def test_log_event_appends_sanitized_event_to_store() -> None:
    store = InMemoryRecordingStore()

    event = audit.log_event(store, "rec-1", "STT_ERROR", "STT_STREAM_ERROR", "[Speaker spk_a] hello", duration_ms=12)

    assert event.detail == "[redacted]"
    assert store.audit_events("rec-1") == [event]
    assert store.audit_events("rec-2") == []
