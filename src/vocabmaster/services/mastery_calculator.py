"""Mastery scoring for a single word's attempt history.

The score blends three parts:

* accuracy (up to 70 points), with spelling answers weighted twice as much as
  multiple-choice answers since recall is harder than recognition;
* efficiency (up to 30 points) from the average answer time over all attempts,
  with more lenient bands once spelling is involved;
* an error penalty (up to 20 points) when more than half the answers are wrong.

The result is then banded by attempt count so that one or two lucky answers
never read as mastered.
"""
import logging
import math
from typing import Iterable, List, Optional, Sequence, Tuple

from vocabmaster.config import settings
from vocabmaster.models.quiz_models import is_spelling_type

logger = logging.getLogger(__name__)

MAX_LEVEL = 100
MIN_PRACTICED_LEVEL = 5
ACCURACY_POINTS = 70
EFFICIENCY_POINTS = 30
MAX_ERROR_PENALTY = 20
ERROR_RATE_THRESHOLD = 0.5
SPELLING_WEIGHT = 2

# Caps applied while the history is still short: attempt count -> max level
ATTEMPT_COUNT_CAPS = {1: 55, 2: 75}

# Perfect streaks answered this fast (with at least one spelling) score 100
PERFECT_AVG_TIME_MS = 10_000

# (upper bound in ms, factor); first band whose bound exceeds the average wins
SPELLING_TIME_BANDS: Tuple[Tuple[int, float], ...] = (
    (8_000, 1.0),
    (15_000, 0.85),
    (30_000, 0.65),
    (50_000, 0.4),
)
MCQ_TIME_BANDS: Tuple[Tuple[int, float], ...] = (
    (3_000, 1.0),
    (8_000, 0.9),
    (15_000, 0.7),
    (30_000, 0.4),
)
SLOWEST_FACTOR = 0.2


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _time_spent(attempt) -> int:
    return max(0, attempt.time_spent or 0)


def efficiency_factor(avg_time_ms: float, has_spelling: bool) -> float:
    """Map an average answer time to an efficiency factor in [0.2, 1.0]."""
    bands = SPELLING_TIME_BANDS if has_spelling else MCQ_TIME_BANDS
    for upper_bound, factor in bands:
        if avg_time_ms < upper_bound:
            return factor
    return SLOWEST_FACTOR


def recent_attempts(attempts: Sequence, window: Optional[int] = None) -> List:
    """Trim a newest-first history to the scoring window (MASTERY_HISTORY_WINDOW by default)."""
    if window is None:
        window = settings.mastery.history_window
    if window < 1:
        raise ValueError("window must be positive")
    return list(attempts[:window])


def calculate_mastery_level(attempts: Iterable) -> int:
    """Compute a 0-100 mastery level from one word's attempts.

    Each attempt needs ``question_type``, ``is_correct`` and ``time_spent``
    (milliseconds). Order does not matter. An empty history scores 0, any
    practiced word scores at least 5.
    """
    attempts = list(attempts)
    if not attempts:
        return 0

    total = len(attempts)
    total_correct = sum(1 for a in attempts if a.is_correct)

    spelling = [a for a in attempts if is_spelling_type(a.question_type)]
    mcq = [a for a in attempts if not is_spelling_type(a.question_type)]
    spelling_correct = sum(1 for a in spelling if a.is_correct)
    mcq_correct = sum(1 for a in mcq if a.is_correct)

    # Accuracy: spelling counts double when both kinds are present
    if spelling and mcq:
        weighted = (SPELLING_WEIGHT * spelling_correct + mcq_correct) / (
            SPELLING_WEIGHT * len(spelling) + len(mcq)
        )
        accuracy_score = weighted * ACCURACY_POINTS
    elif spelling:
        accuracy_score = spelling_correct / len(spelling) * ACCURACY_POINTS
    else:
        accuracy_score = mcq_correct / len(mcq) * ACCURACY_POINTS

    # Efficiency over all attempts, correct or not
    avg_time = sum(_time_spent(a) for a in attempts) / total
    efficiency_score = efficiency_factor(avg_time, bool(spelling)) * EFFICIENCY_POINTS

    error_rate = 1 - total_correct / total
    error_penalty = 0.0
    if error_rate > ERROR_RATE_THRESHOLD:
        error_penalty = (error_rate - ERROR_RATE_THRESHOLD) * 2 * MAX_ERROR_PENALTY

    raw = accuracy_score + efficiency_score - error_penalty
    logger.debug(
        f"Mastery components: accuracy={accuracy_score:.2f} efficiency={efficiency_score:.2f} "
        f"penalty={error_penalty:.2f} attempts={total}"
    )

    if total in ATTEMPT_COUNT_CAPS:
        return min(ATTEMPT_COUNT_CAPS[total], max(MIN_PRACTICED_LEVEL, _round_half_up(raw)))

    # Perfect, fast and including recall: mastered outright
    if total_correct == total and avg_time < PERFECT_AVG_TIME_MS and spelling:
        return MAX_LEVEL

    return min(MAX_LEVEL, max(MIN_PRACTICED_LEVEL, _round_half_up(raw)))
