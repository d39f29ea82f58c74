"""Unit tests for word timing validation and statistics."""

import pytest

from lingua_learn.core.errors import ValidationFailedError
from lingua_learn.server.services.word_timings import timing_stats, validate_word_timings, word_timing_errors

WORD_IDS = {10, 11, 12}


def _timing(word_id, start, end, **metadata):
    timing = {"word_id": word_id, "start_time": start, "end_time": end}
    if metadata:
        timing["metadata"] = metadata
    return timing


def test_valid_timings_have_no_errors():
    timings = [_timing(10, 0.0, 0.5), _timing(11, 0.6, 1.1), _timing(12, 1.2, 1.8)]
    assert word_timing_errors(timings, 2.0, WORD_IDS, 3) == {}
    validate_word_timings(timings, 2.0, WORD_IDS, 3)


def test_missing_fields_are_reported_per_index():
    errors = word_timing_errors([{"word_id": 10}], 2.0, WORD_IDS, 1)
    assert errors["timings.0.start_time"] == ["The start time field is required."]
    assert errors["timings.0.end_time"] == ["The end time field is required."]


def test_empty_timings_and_missing_duration():
    errors = word_timing_errors([], None, WORD_IDS, 3)
    assert errors == {
        "audio_duration": ["The audio duration field is required."],
        "timings": ["The timings field is required."],
    }


def test_word_outside_the_sentence():
    errors = word_timing_errors([_timing(99, 0.0, 0.5)], 2.0, WORD_IDS, 1)
    assert errors["timings.0.word_id"] == ["One or more words do not belong to this sentence."]


def test_end_before_start():
    errors = word_timing_errors([_timing(10, 1.0, 0.5)], 2.0, WORD_IDS, 1)
    assert errors["timings.0.end_time"] == ["End time must be greater than start time."]


def test_overlap_is_reported_on_the_later_request_index():
    # Request order differs from time order; the error keeps the request index.
    timings = [_timing(11, 0.4, 1.0), _timing(10, 0.0, 0.5)]
    errors = word_timing_errors(timings, 2.0, WORD_IDS, 2)
    assert errors["timings.0.start_time"] == ["Word timing overlaps with previous word."]


def test_long_gap_needs_a_pause_marker():
    errors = word_timing_errors([_timing(10, 0.0, 0.5), _timing(11, 3.0, 3.5)], 4.0, WORD_IDS, 2)
    assert errors["timings.1.start_time"] == ["Unreasonable gap detected between words."]

    paused = [_timing(10, 0.0, 0.5, pause_after=2.5), _timing(11, 3.0, 3.5)]
    assert word_timing_errors(paused, 4.0, WORD_IDS, 2) == {}


def test_every_word_needs_a_timing():
    errors = word_timing_errors([_timing(10, 0.0, 0.5)], 2.0, WORD_IDS, 3)
    assert errors["timings"] == ["Timing information must be provided for all 3 words in the sentence."]


def test_timings_cannot_exceed_audio():
    errors = word_timing_errors([_timing(10, 0.0, 2.5)], 2.0, WORD_IDS, 1)
    assert errors["timings"] == ["Word timings cannot exceed the audio duration."]


def test_metadata_types_are_checked():
    timing = {"word_id": 10, "start_time": 0.0, "end_time": 0.5, "metadata": {"emphasis": "yes", "pause_after": -1}}
    errors = word_timing_errors([timing], 2.0, WORD_IDS, 1)
    assert errors["timings.0.metadata.emphasis"] == ["The emphasis field must be true or false."]
    assert errors["timings.0.metadata.pause_after"] == ["Pause duration cannot be negative."]


def test_validate_raises_with_field_errors():
    with pytest.raises(ValidationFailedError) as exc_info:
        validate_word_timings([_timing(10, -1.0, 0.5)], 2.0, WORD_IDS, 1)
    assert exc_info.value.status_code == 422
    assert "timings.0.start_time" in exc_info.value.errors


def test_timing_stats():
    timings = [_timing(10, 0.0, 0.5, emphasis=True), _timing(11, 0.7, 1.2)]
    stats = timing_stats(timings, 1.5)
    assert stats["word_count"] == 2
    assert stats["total_duration"] == 1.5
    assert stats["average_word_duration"] == pytest.approx(0.5)
    assert stats["total_pause_time"] == pytest.approx(0.2)
    assert stats["words_with_emphasis"] == 1


def test_repeated_word_takes_one_timing_per_occurrence():
    sentence = [10, 11, 10]
    timings = [_timing(10, 0.0, 0.3), _timing(11, 0.3, 0.8), _timing(10, 0.8, 1.1)]
    assert word_timing_errors(timings, 2.0, sentence, 3) == {}

    extra = [_timing(10, 0.0, 0.3), _timing(10, 0.3, 0.8)]
    errors = word_timing_errors(extra, 2.0, [10, 11], 2)
    assert errors == {"timings.1.word_id": ["The word has more timings than occurrences in the sentence."]}
