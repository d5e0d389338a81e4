"""Quiz service: choose words and render them as questions."""
import logging
import math
import random
import re
from typing import List, Optional, Sequence, Union

from vocabmaster import monitoring
from vocabmaster.config import settings
from vocabmaster.models.quiz_models import (
    QuestionType,
    QuizMode,
    QuizQuestion,
    QuizStrategy,
    WordPoolEntry,
)
from vocabmaster.services.progress_service import ProgressService
from vocabmaster.services.quiz_strategy import resolve_strategy, select_words_by_strategy

logger = logging.getLogger(__name__)

MEANING_SEPARATORS = re.compile(r"[；;]")


def first_meaning(word: WordPoolEntry) -> str:
    """Only the first meaning keeps questions and options short."""
    return MEANING_SEPARATORS.split(word.definition or "", 1)[0].strip()


def normalize_answer(answer: Optional[str]) -> str:
    return " ".join((answer or "").split()).lower()


class QuizService:
    """Service for building quizzes from a word pool."""

    def __init__(self, progress_service: ProgressService, rng: Optional[random.Random] = None):
        """Initialize the service with a progress service for mastery lookups."""
        self.progress_service = progress_service
        self.rng = rng or random.Random()

    def select_quiz_words(
        self,
        words: Sequence[WordPoolEntry],
        strategy: Union[QuizStrategy, str, None] = None,
        count: Optional[int] = None,
    ) -> List[WordPoolEntry]:
        """Pick the words for the next quiz using current mastery data."""
        if not words:
            return []
        if strategy is None:
            strategy = settings.quiz.default_strategy
        if count is None:
            count = settings.quiz.question_count

        mastery = self.progress_service.get_batch_mastery(word.word_id for word in words)
        selected = select_words_by_strategy(words, mastery, strategy, count, rng=self.rng)

        strategy_name = resolve_strategy(strategy).value
        monitoring.quiz_selections.labels(strategy=strategy_name).inc()
        logger.info(f"Selected {len(selected)} of {len(words)} words ({strategy_name}, {len(mastery)} practiced)")
        return selected

    def build_questions(
        self,
        selected: Sequence[WordPoolEntry],
        pool: Sequence[WordPoolEntry],
        mode: QuizMode = QuizMode.SPELLING,
    ) -> List[QuizQuestion]:
        """Render selected words as questions, in shuffled order."""
        if mode == QuizMode.MIXED:
            spelling_count = math.floor(len(selected) * settings.quiz.mixed_spelling_ratio)
            questions = [self._spelling_question(word) for word in selected[:spelling_count]]
            for word in selected[spelling_count:]:
                if self.rng.random() > 0.5:
                    questions.append(self._en_to_cn_question(word, pool))
                else:
                    questions.append(self._cn_to_en_question(word, pool))
        else:
            # Multiple choice only modes are no longer offered and fall back to spelling
            questions = [self._spelling_question(word) for word in selected]

        self.rng.shuffle(questions)
        return questions

    def check_answer(self, question: QuizQuestion, answer: Optional[str]) -> bool:
        """Compare an answer ignoring case and surrounding whitespace."""
        return normalize_answer(answer) == normalize_answer(question.correct_answer)

    def _spelling_question(self, word: WordPoolEntry) -> QuizQuestion:
        return QuizQuestion(
            word=word,
            type=QuestionType.SPELLING,
            question=first_meaning(word),
            correct_answer=word.term,
        )

    def _en_to_cn_question(self, word: WordPoolEntry, pool: Sequence[WordPoolEntry]) -> QuizQuestion:
        answer = first_meaning(word)
        distractors = self._distractors(word, pool, first_meaning, exclude=answer)
        return QuizQuestion(
            word=word,
            type=QuestionType.EN_TO_CN,
            question=word.term,
            correct_answer=answer,
            options=self._shuffled([answer, *distractors]),
        )

    def _cn_to_en_question(self, word: WordPoolEntry, pool: Sequence[WordPoolEntry]) -> QuizQuestion:
        distractors = self._distractors(word, pool, lambda w: w.term, exclude=word.term)
        return QuizQuestion(
            word=word,
            type=QuestionType.CN_TO_EN,
            question=first_meaning(word),
            correct_answer=word.term,
            options=self._shuffled([word.term, *distractors]),
        )

    def _distractors(self, word, pool, render, exclude: str) -> List[str]:
        candidates = [w for w in pool if w.word_id != word.word_id]
        self.rng.shuffle(candidates)
        distractors: List[str] = []
        for candidate in candidates:
            text = render(candidate)
            if text and text != exclude and text not in distractors:
                distractors.append(text)
            if len(distractors) >= settings.quiz.mcq_options - 1:
                break
        return distractors

    def _shuffled(self, options: List[str]) -> List[str]:
        self.rng.shuffle(options)
        return options
