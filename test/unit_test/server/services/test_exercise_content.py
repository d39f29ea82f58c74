"""Unit tests for per-type exercise content rules."""

import pytest

from lingua_learn.core.errors import ValidationFailedError
from lingua_learn.server.services.exercises import exercise_content_errors, validate_exercise_content


@pytest.mark.parametrize(
    "exercise_type, content",
    [
        ("multiple_choice", {"question": "Hola?", "options": ["Hi", "Bye"], "correct": "Hi"}),
        ("fill_blank", {"text": "___ días", "blanks": [0], "correct": ["Buenos"]}),
        ("matching", {"items": ["dog", "cat"], "matches": ["perro", "gato"]}),
        ("writing", {"prompt": "Describe your day", "min_words": 10, "max_words": 50}),
        ("speaking", {"prompt": "Introduce yourself", "duration": 30}),
    ],
)
def test_valid_content(exercise_type, content):
    assert exercise_content_errors(exercise_type, content) == {}


def test_multiple_choice_answer_must_be_an_option():
    errors = exercise_content_errors("multiple_choice", {"question": "?", "options": ["a", "b"], "correct": "c"})
    assert errors == {"content.correct": ["The correct answer must be one of the options."]}


def test_matching_needs_equal_lengths():
    errors = exercise_content_errors("matching", {"items": ["a", "b"], "matches": ["x"]})
    assert errors == {"content.matches": ["The number of matches must equal the number of items."]}


def test_writing_word_bounds():
    errors = exercise_content_errors("writing", {"prompt": "Write", "min_words": 20, "max_words": 10})
    assert errors == {"content.max_words": ["The maximum word count must be greater than the minimum."]}


def test_speaking_duration_range():
    errors = exercise_content_errors("speaking", {"prompt": "Speak", "duration": 2})
    assert errors == {"content.duration": ["The duration must be between 5 and 300 seconds."]}


def test_validate_raises_unprocessable():
    with pytest.raises(ValidationFailedError) as exc_info:
        validate_exercise_content("fill_blank", {"text": "", "blanks": [], "correct": "x"})
    assert set(exc_info.value.errors) == {"content.text", "content.blanks", "content.correct"}
