"""Database models for progress tracking."""
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Integer,
    String,
)

from vocabmaster.models.base import Base, TimestampMixin, utcnow
from vocabmaster.models.quiz_models import AttemptRecord, MasteryRecord


class Attempt(Base):
    """One recorded answer. Rows are only ever appended."""

    __tablename__ = "attempts"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, default="default", index=True)
    word_id = Column(String, nullable=False, index=True)  # e.g. "starter-0"
    word_term = Column(String, nullable=False)
    question_type = Column(String, nullable=False)  # EN_TO_CN, CN_TO_EN, SPELLING
    is_correct = Column(Boolean, nullable=False)
    time_spent = Column(Integer, nullable=False, default=0)  # in milliseconds
    user_answer = Column(String, default="")
    occurred_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    def to_record(self) -> AttemptRecord:
        """Convert to the calculator input type."""
        return AttemptRecord(
            question_type=self.question_type,
            is_correct=bool(self.is_correct),
            time_spent=self.time_spent or 0,
            word_id=self.word_id,
            occurred_at=self.occurred_at,
        )


class WordMastery(Base, TimestampMixin):
    """Current mastery of one word, recomputed after every attempt."""

    __tablename__ = "mastery"

    word_id = Column(String, primary_key=True)
    word_term = Column(String, nullable=False)
    unit_id = Column(String, nullable=False, default="", index=True)
    mastery_level = Column(Integer, nullable=False, default=0, index=True)  # 0-100
    attempt_count = Column(Integer, nullable=False, default=0)
    correct_count = Column(Integer, nullable=False, default=0)
    total_time_spent = Column(Integer, nullable=False, default=0)  # in milliseconds
    last_attempt_at = Column(DateTime(timezone=True))
    last_correct_at = Column(DateTime(timezone=True))

    def to_record(self) -> MasteryRecord:
        """Convert to a detached mastery record."""
        return MasteryRecord(
            word_id=self.word_id,
            mastery_level=self.mastery_level,
            attempt_count=self.attempt_count,
            correct_count=self.correct_count,
            total_time_spent=self.total_time_spent,
            last_attempt_at=self.last_attempt_at,
            last_correct_at=self.last_correct_at,
            word_term=self.word_term,
            unit_id=self.unit_id,
        )
