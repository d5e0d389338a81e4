"""Word selection strategies for quizzes."""
import logging
import random
from typing import List, Mapping, Optional, Sequence, TypeVar, Union

from vocabmaster.models.quiz_models import MasteryRecord, QuizStrategy, WordPoolEntry

logger = logging.getLogger(__name__)

T = TypeVar("T")

CRITICAL_LEVEL = 40  # below this a word needs urgent work
NEEDS_PRACTICE_LEVEL = 60  # below this a word still needs practice


def resolve_strategy(strategy: Union[QuizStrategy, str]) -> QuizStrategy:
    """Map a strategy name to QuizStrategy, unknown names fall back to random."""
    if isinstance(strategy, QuizStrategy):
        return strategy
    try:
        return QuizStrategy(str(strategy).lower())
    except ValueError:
        logger.warning(f"Unknown quiz strategy {strategy!r}, falling back to random")
        return QuizStrategy.RANDOM


def select_words_by_strategy(
    words: Sequence[WordPoolEntry],
    mastery_by_word_id: Mapping[str, MasteryRecord],
    strategy: Union[QuizStrategy, str],
    count: int,
    rng: Optional[random.Random] = None,
) -> List[WordPoolEntry]:
    """Choose at most ``count`` distinct words for the next quiz."""
    if not words:
        return []
    rng = rng or random
    actual_count = max(0, min(count, len(words)))
    strategy = resolve_strategy(strategy)
    logger.debug(f"Selecting {actual_count} of {len(words)} words with {strategy.value} strategy")

    if strategy == QuizStrategy.BALANCED:
        return select_balanced_words(words, mastery_by_word_id, actual_count, rng)
    if strategy == QuizStrategy.FOCUS:
        return select_focus_words(words, mastery_by_word_id, actual_count, rng)
    return select_random_words(words, actual_count, rng)


def select_random_words(words: Sequence[T], count: int, rng=random) -> List[T]:
    """Uniform shuffle, first ``count`` items."""
    shuffled = list(words)
    rng.shuffle(shuffled)
    return shuffled[:count]


def select_balanced_words(
    words: Sequence[WordPoolEntry],
    mastery_by_word_id: Mapping[str, MasteryRecord],
    count: int,
    rng=random,
) -> List[WordPoolEntry]:
    """Favour less practiced words: weight = 1 / (attempt_count + 1)."""
    weights = []
    for word in words:
        mastery = mastery_by_word_id.get(word.word_id)
        attempt_count = mastery.attempt_count if mastery else 0
        weights.append(1 / (max(0, attempt_count) + 1))
    return weighted_random_select(words, weights, count, rng)


def select_focus_words(
    words: Sequence[WordPoolEntry],
    mastery_by_word_id: Mapping[str, MasteryRecord],
    count: int,
    rng=random,
) -> List[WordPoolEntry]:
    """Drain low mastery tiers first: critical, needs practice, then the rest.

    Words without a mastery record count as level 0.
    """
    critical, needs_practice, others = [], [], []
    for word in words:
        mastery = mastery_by_word_id.get(word.word_id)
        level = mastery.mastery_level if mastery else 0
        if level < CRITICAL_LEVEL:
            critical.append(word)
        elif level < NEEDS_PRACTICE_LEVEL:
            needs_practice.append(word)
        else:
            others.append(word)

    selected: List[WordPoolEntry] = []
    for tier in (critical, needs_practice, others):
        rng.shuffle(tier)
        selected.extend(tier[:count - len(selected)])
        if len(selected) >= count:
            break
    return selected


def weighted_random_select(
    items: Sequence[T], weights: Sequence[float], count: int, rng=random
) -> List[T]:
    """Weighted sampling without replacement by cumulative roulette."""
    if len(items) != len(weights):
        raise ValueError("items and weights must have the same length")

    remaining = list(zip(items, weights))
    selected: List[T] = []
    while remaining and len(selected) < count:
        total_weight = sum(weight for _, weight in remaining)
        target = rng.random() * total_weight
        accumulated = 0.0
        chosen = len(remaining) - 1  # float drift lands on the last item
        for index, (_, weight) in enumerate(remaining):
            accumulated += weight
            if target <= accumulated:
                chosen = index
                break
        item, _ = remaining.pop(chosen)
        selected.append(item)
    return selected
