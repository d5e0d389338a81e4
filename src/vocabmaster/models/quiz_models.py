"""Models for quiz and progress data structures."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class QuestionType(Enum):
    """Question types recorded with each attempt."""
    EN_TO_CN = "EN_TO_CN"  # Pick the definition for a term
    CN_TO_EN = "CN_TO_EN"  # Pick the term for a definition
    SPELLING = "SPELLING"  # Type the term for a definition
    CN_TO_EN_SPELLING = "CN_TO_EN_SPELLING"  # Legacy name for SPELLING


SPELLING_TYPES = frozenset({QuestionType.SPELLING.value, QuestionType.CN_TO_EN_SPELLING.value})


def is_spelling_type(question_type: Any) -> bool:
    """Return True for spelling question types.

    Anything that is not a known spelling type counts as multiple choice.
    """
    if isinstance(question_type, QuestionType):
        question_type = question_type.value
    return question_type in SPELLING_TYPES


class QuizMode(Enum):
    """Question mix requested for a quiz."""
    SPELLING = "CN_TO_EN_SPELLING"
    MIXED = "MIXED"
    EN_TO_CN_MCQ = "EN_TO_CN_MCQ"  # Deprecated, rendered as spelling
    CN_TO_EN_MCQ = "CN_TO_EN_MCQ"  # Deprecated, rendered as spelling


class QuizStrategy(Enum):
    """Word selection policy for the next quiz."""
    RANDOM = "random"  # Uniform shuffle
    BALANCED = "balanced"  # Less practiced words are more likely
    FOCUS = "focus"  # Low mastery words first


@dataclass(frozen=True)
class AttemptRecord:
    """One answered question, as seen by the mastery calculator."""
    question_type: Any
    is_correct: bool
    time_spent: int  # milliseconds
    word_id: Optional[str] = None
    occurred_at: Optional[datetime] = None


@dataclass
class AttemptSubmission:
    """An answer submitted for recording."""
    word_id: str
    word_term: str
    question_type: Any
    is_correct: bool
    time_spent: int  # milliseconds
    unit_id: str = ""
    user_answer: str = ""
    occurred_at: Optional[datetime] = None


@dataclass
class MasteryRecord:
    """Current mastery of one word."""
    word_id: str
    mastery_level: int = 0
    attempt_count: int = 0
    correct_count: int = 0
    total_time_spent: int = 0
    last_attempt_at: Optional[datetime] = None
    last_correct_at: Optional[datetime] = None
    word_term: Optional[str] = None
    unit_id: Optional[str] = None


@dataclass(frozen=True)
class WordPoolEntry:
    """A catalog word available for quizzes."""
    word_id: str
    term: str
    unit_id: str
    definition: str = ""


@dataclass
class QuizQuestion:
    """A presentable quiz question."""
    word: WordPoolEntry
    type: QuestionType
    question: str
    correct_answer: str
    options: Optional[List[str]] = None


@dataclass
class LearningStats:
    """Aggregated learning statistics for a user."""
    total_attempts: int = 0
    total_correct: int = 0
    total_time_spent: int = 0
    unique_words: int = 0
    by_question_type: List[Dict[str, Any]] = field(default_factory=list)
    recent_trend: List[Dict[str, Any]] = field(default_factory=list)
    mastery_distribution: Dict[str, int] = field(default_factory=dict)

    @property
    def accuracy(self) -> float:
        """Share of correct answers, 0.0 when nothing was answered."""
        if not self.total_attempts:
            return 0.0
        return self.total_correct / self.total_attempts
