"""Tests for mastery scoring."""
import random
from unittest.mock import patch

import pytest

from vocabmaster.config import MASTERY_HISTORY_WINDOW, settings
from vocabmaster.models.quiz_models import AttemptRecord, QuestionType
from vocabmaster.services.mastery_calculator import (
    calculate_mastery_level,
    efficiency_factor,
    recent_attempts,
)

SPELLING = QuestionType.SPELLING
EN_TO_CN = QuestionType.EN_TO_CN
CN_TO_EN = QuestionType.CN_TO_EN


def attempts(question_type, correct: int, wrong: int = 0, time_spent: int = 1000):
    """Build a history with the given number of correct and wrong answers."""
    return (
        [AttemptRecord(question_type, True, time_spent) for _ in range(correct)]
        + [AttemptRecord(question_type, False, time_spent) for _ in range(wrong)]
    )


def test_empty_history_scores_zero() -> None:
    assert calculate_mastery_level([]) == 0


def test_single_fast_correct_spelling_is_capped() -> None:
    """One correct answer never reads as mastered."""
    assert calculate_mastery_level(attempts(SPELLING, 1, time_spent=2000)) == 55


def test_two_fast_correct_answers_are_capped() -> None:
    assert calculate_mastery_level(attempts(CN_TO_EN, 2)) == 75
    assert calculate_mastery_level(attempts(SPELLING, 2, time_spent=3000)) == 75


def test_three_fast_correct_spellings_score_full() -> None:
    assert calculate_mastery_level(attempts(SPELLING, 3, time_spent=5000)) == 100


def test_perfect_shortcut_requires_spelling() -> None:
    """Multiple choice only streaks go through the regular blend."""
    # 70 accuracy + 0.9 * 30 efficiency
    assert calculate_mastery_level(attempts(EN_TO_CN, 3, time_spent=5000)) == 97


def test_perfect_shortcut_requires_fast_average() -> None:
    # 70 accuracy + 0.85 * 30 efficiency
    assert calculate_mastery_level(attempts(SPELLING, 3, time_spent=12000)) == 96


def test_all_wrong_fast_multiple_choice() -> None:
    # 0 accuracy + 30 efficiency - 20 penalty
    assert calculate_mastery_level(attempts(EN_TO_CN, 0, wrong=3)) == 10


def test_all_wrong_slow_spelling_is_floored() -> None:
    assert calculate_mastery_level(attempts(SPELLING, 0, wrong=3, time_spent=60000)) == 5


def test_single_wrong_answer_is_floored() -> None:
    assert calculate_mastery_level(attempts(SPELLING, 0, wrong=1, time_spent=60000)) == 5


def test_spelling_counts_double() -> None:
    correct_spelling = [
        AttemptRecord(SPELLING, True, 20000),
        AttemptRecord(EN_TO_CN, False, 20000),
        AttemptRecord(CN_TO_EN, False, 20000),
    ]
    correct_mcq = [
        AttemptRecord(SPELLING, False, 20000),
        AttemptRecord(SPELLING, False, 20000),
        AttemptRecord(EN_TO_CN, True, 20000),
    ]
    # 0.5 * 70 + 0.65 * 30 - 6.67 penalty
    assert calculate_mastery_level(correct_spelling) == 48
    # 0.2 * 70 + 0.65 * 30 - 6.67 penalty
    assert calculate_mastery_level(correct_mcq) == 27


def test_no_penalty_at_half_error_rate() -> None:
    # 35 accuracy + 30 efficiency, no penalty
    assert calculate_mastery_level(attempts(EN_TO_CN, 2, wrong=2)) == 65


def test_rounds_half_up() -> None:
    # 52.5 accuracy + 30 efficiency = 82.5
    assert calculate_mastery_level(attempts(EN_TO_CN, 3, wrong=1)) == 83


def test_unknown_question_type_counts_as_multiple_choice() -> None:
    history = attempts("FILL_IN_BLANK_MCQ", 3, time_spent=5000)
    assert calculate_mastery_level(history) == calculate_mastery_level(attempts(EN_TO_CN, 3, time_spent=5000))


def test_legacy_spelling_name_counts_as_spelling() -> None:
    history = attempts(QuestionType.CN_TO_EN_SPELLING.value, 3, time_spent=5000)
    assert calculate_mastery_level(history) == 100


def test_negative_time_is_treated_as_zero() -> None:
    history = attempts(EN_TO_CN, 3, time_spent=-5000)
    assert calculate_mastery_level(history) == 100


def test_order_does_not_matter() -> None:
    history = attempts(SPELLING, 2, wrong=1, time_spent=9000) + attempts(EN_TO_CN, 1, wrong=2, time_spent=4000)
    shuffled = list(history)
    random.Random(7).shuffle(shuffled)
    assert calculate_mastery_level(history) == calculate_mastery_level(shuffled)


def test_same_history_same_score() -> None:
    history = attempts(SPELLING, 4, wrong=3, time_spent=14000)
    assert calculate_mastery_level(history) == calculate_mastery_level(history)


def test_score_bounds_for_random_histories() -> None:
    rng = random.Random(42)
    types = [SPELLING, EN_TO_CN, CN_TO_EN, "UNKNOWN"]
    for _ in range(500):
        history = [
            AttemptRecord(rng.choice(types), rng.random() < 0.5, rng.randint(0, 90000))
            for _ in range(rng.randint(1, 60))
        ]
        level = calculate_mastery_level(history)
        assert 5 <= level <= 100
        if len(history) == 1:
            assert level <= 55
        elif len(history) == 2:
            assert level <= 75


@pytest.mark.parametrize(
    "avg_time,has_spelling,expected",
    [
        (7999, True, 1.0),
        (8000, True, 0.85),
        (29999, True, 0.65),
        (49999, True, 0.4),
        (50000, True, 0.2),
        (2999, False, 1.0),
        (3000, False, 0.9),
        (14999, False, 0.7),
        (29999, False, 0.4),
        (30000, False, 0.2),
    ],
)
def test_efficiency_bands(avg_time, has_spelling, expected) -> None:
    assert efficiency_factor(avg_time, has_spelling) == expected


def test_recent_attempts_keeps_newest() -> None:
    history = list(range(80))
    assert recent_attempts(history) == list(range(MASTERY_HISTORY_WINDOW))
    assert recent_attempts(history, 3) == [0, 1, 2]


def test_recent_attempts_rejects_empty_window() -> None:
    with pytest.raises(ValueError):
        recent_attempts([1, 2, 3], 0)


def test_recent_attempts_follows_configured_window() -> None:
    with patch.object(settings.mastery, "history_window", 4):
        assert recent_attempts(list(range(10))) == [0, 1, 2, 3]
