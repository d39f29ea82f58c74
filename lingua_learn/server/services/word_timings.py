"""
Word timing validation.

Checks a ``PUT /sentences/{id}/word-timings`` body before it is applied.
Field errors are keyed by the index the timing had in the request
(``timings.3.start_time``); the cross-timing checks run afterwards on the
timings sorted by start time.
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Collection, Dict, List, Optional

from lingua_learn.core.errors import ValidationFailedError

MAX_GAP_SECONDS = 2


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class _Errors:
    def __init__(self) -> None:
        self.messages: Dict[str, List[str]] = {}

    def add(self, key: str, message: str) -> None:
        self.messages.setdefault(key, []).append(message)

    def has_any(self, *keys: str) -> bool:
        return any(key in self.messages for key in keys)


def _check_metadata(errors: _Errors, index: int, metadata: Any) -> None:
    prefix = f"timings.{index}.metadata"
    if metadata is None:
        return
    if not isinstance(metadata, dict):
        errors.add(prefix, "The metadata must be an object.")
        return
    emphasis = metadata.get("emphasis")
    if emphasis is not None and not isinstance(emphasis, bool):
        errors.add(f"{prefix}.emphasis", "The emphasis field must be true or false.")
    pause = metadata.get("pause_after")
    if pause is not None:
        if not _is_number(pause):
            errors.add(f"{prefix}.pause_after", "The pause after must be a number.")
        elif pause < 0:
            errors.add(f"{prefix}.pause_after", "Pause duration cannot be negative.")
    notes = metadata.get("pronunciation_notes")
    if notes is not None and not isinstance(notes, str):
        errors.add(f"{prefix}.pronunciation_notes", "The pronunciation notes must be a string.")


def word_timing_errors(
    timings: Any,
    audio_duration: Any,
    sentence_word_ids: Collection[int],
    word_count: int,
) -> Dict[str, List[str]]:
    """Collect every problem with a word timing update.

    Args:
        timings: The ``timings`` list from the request body.
        audio_duration: Length of the sentence recording in seconds.
        sentence_word_ids: Word id of every word in the sentence; a word used
            twice appears twice and may then take two timings.
        word_count: Number of words in the sentence.

    Returns:
        Messages keyed by field path; empty when the update is valid.
    """
    errors = _Errors()

    if audio_duration is None:
        errors.add("audio_duration", "The audio duration field is required.")
    elif not _is_number(audio_duration):
        errors.add("audio_duration", "The audio duration must be a number.")
    elif audio_duration < 0:
        errors.add("audio_duration", "The audio duration must be at least 0.")

    if timings is None or timings == []:
        errors.add("timings", "The timings field is required.")
        return errors.messages
    if not isinstance(timings, list):
        errors.add("timings", "The timings must be a list.")
        return errors.messages

    available = Counter(sentence_word_ids)
    used: Counter = Counter()
    checked: List[tuple] = []
    for index, timing in enumerate(timings):
        if not isinstance(timing, dict):
            errors.add(f"timings.{index}", "Each timing must be an object.")
            continue
        word_id = timing.get("word_id")
        if word_id is None:
            errors.add(f"timings.{index}.word_id", "The word id field is required.")
        elif not isinstance(word_id, int) or isinstance(word_id, bool):
            errors.add(f"timings.{index}.word_id", "The word id must be an integer.")
        elif word_id not in sentence_word_ids:
            errors.add(f"timings.{index}.word_id", "One or more words do not belong to this sentence.")
        else:
            used[word_id] += 1
            if used[word_id] > available[word_id]:
                errors.add(f"timings.{index}.word_id", "The word has more timings than occurrences in the sentence.")

        start = timing.get("start_time")
        end = timing.get("end_time")
        start_ok = end_ok = False
        if start is None:
            errors.add(f"timings.{index}.start_time", "The start time field is required.")
        elif not _is_number(start):
            errors.add(f"timings.{index}.start_time", "The start time must be a number.")
        elif start < 0:
            errors.add(f"timings.{index}.start_time", "Start time cannot be negative.")
            start_ok = True
        else:
            start_ok = True
        if end is None:
            errors.add(f"timings.{index}.end_time", "The end time field is required.")
        elif not _is_number(end):
            errors.add(f"timings.{index}.end_time", "The end time must be a number.")
        else:
            end_ok = True
            if start_ok and end <= start:
                errors.add(f"timings.{index}.end_time", "End time must be greater than start time.")

        _check_metadata(errors, index, timing.get("metadata"))
        if start_ok and end_ok:
            checked.append((index, timing))

    ordered = sorted(checked, key=lambda item: item[1]["start_time"])
    previous: Optional[Dict[str, Any]] = None
    for index, timing in ordered:
        if previous is not None:
            if timing["start_time"] < previous["end_time"]:
                errors.add(f"timings.{index}.start_time", "Word timing overlaps with previous word.")
            gap = timing["start_time"] - previous["end_time"]
            metadata = previous.get("metadata") if isinstance(previous.get("metadata"), dict) else {}
            if gap > MAX_GAP_SECONDS and not metadata.get("pause_after"):
                errors.add(f"timings.{index}.start_time", "Unreasonable gap detected between words.")
        previous = timing

    if len(timings) != word_count:
        errors.add("timings", f"Timing information must be provided for all {word_count} words in the sentence.")

    if not errors.has_any("timings", "audio_duration") and checked:
        last_end = max(timing["end_time"] for _, timing in checked)
        if last_end > audio_duration:
            errors.add("timings", "Word timings cannot exceed the audio duration.")

    return errors.messages


def validate_word_timings(
    timings: Any,
    audio_duration: Any,
    sentence_word_ids: Collection[int],
    word_count: int,
) -> None:
    """Raise :class:`ValidationFailedError` when the timing update is invalid."""
    errors = word_timing_errors(timings, audio_duration, sentence_word_ids, word_count)
    if errors:
        raise ValidationFailedError(errors)


def timing_stats(timings: List[Dict[str, Any]], audio_duration: float) -> Dict[str, Any]:
    """Summary figures for a validated timing list."""
    durations = [timing["end_time"] - timing["start_time"] for timing in timings]
    ordered = sorted(timings, key=lambda timing: timing["start_time"])
    pause = sum(current["start_time"] - prior["end_time"] for prior, current in zip(ordered, ordered[1:]))
    return {
        "total_duration": audio_duration,
        "word_count": len(timings),
        "average_word_duration": sum(durations) / len(durations) if durations else None,
        "total_pause_time": pause,
        "words_with_emphasis": sum(1 for timing in timings if (timing.get("metadata") or {}).get("emphasis")),
    }
