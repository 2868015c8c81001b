from consult_scribe.transcript.recency import RecencyWindow


def test_recency_window_keeps_two_most_recent_distinct_speakers() -> None:
    window = RecencyWindow()
    for speaker in ["1", "2", "3"]:
        window.touch(speaker)

    assert window.current() == ["3", "2"]
    assert not window.contains("1")
    assert window.contains("2")


def test_recency_window_moves_existing_speaker_to_front() -> None:
    window = RecencyWindow(capacity=2)
    for speaker in ["1", "2", "1", "1"]:
        window.touch(speaker)

    assert window.current() == ["1", "2"]
    assert len(window) == 2


def test_recency_window_bound_holds_for_long_sequences() -> None:
    window = RecencyWindow(capacity=2)
    sequence = ["a", "b", "c", "a", "d", "d", "b", "e", "c"]
    for speaker in sequence:
        window.touch(speaker)
        current = window.current()
        assert len(current) <= 2
        assert current[0] == speaker
        assert len(set(current)) == len(current)

    assert window.current() == ["c", "e"]


def test_recency_window_ignores_missing_speaker_and_clears() -> None:
    window = RecencyWindow()
    window.touch(None)
    assert window.current() == []
    assert not window.contains(None)

    window.touch("1")
    window.clear()
    assert window.current() == []
