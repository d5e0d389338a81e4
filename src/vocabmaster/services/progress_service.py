"""Progress service for recording attempts and querying mastery."""
import logging
from collections import defaultdict
from datetime import UTC, datetime, timedelta
from typing import Dict, Iterable, List, Optional

from sqlalchemy import case, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vocabmaster import monitoring
from vocabmaster.config import settings
from vocabmaster.models.base import utcnow
from vocabmaster.models.models import Attempt, WordMastery
from vocabmaster.models.quiz_models import (
    AttemptSubmission,
    LearningStats,
    MasteryRecord,
    QuestionType,
    is_spelling_type,
)
from vocabmaster.services.mastery_calculator import calculate_mastery_level, recent_attempts
from vocabmaster.services.mastery_refresh import MasteryRefreshManager

logger = logging.getLogger(__name__)

MASTERED_LEVEL = 80
LEARNING_LEVEL = 50
TREND_DAYS = 7


def _to_utc(value: Optional[datetime]) -> datetime:
    if value is None:
        return utcnow()
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _question_type_value(question_type) -> str:
    if isinstance(question_type, QuestionType):
        return question_type.value
    return str(question_type)


def mastery_band(level: int) -> str:
    """Name the band a mastery level falls into."""
    if level >= MASTERED_LEVEL:
        return "mastered"
    if level >= LEARNING_LEVEL:
        return "learning"
    if level > 0:
        return "started"
    return "new"


class ProgressService:
    """Service for recording answer attempts and reading mastery data."""

    def __init__(self, db: Session, refresh_manager: Optional[MasteryRefreshManager] = None):
        """Initialize the service with a database session."""
        self.db = db
        self.refresh_manager = refresh_manager
        self.history_window = settings.mastery.history_window

    def record_attempts(self, submissions: Iterable[AttemptSubmission], user_id: str = "default") -> int:
        """Append attempts and recompute mastery for each answered word."""
        submissions = list(submissions)
        if not submissions:
            raise ValueError("At least one attempt is required")

        logger.info(f"Recording {len(submissions)} attempts for user {user_id}")
        try:
            for submission in submissions:
                self._record_attempt(submission, user_id)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            monitoring.db_errors.labels(operation="record_attempts").inc()
            logger.error(f"Failed to record attempts for user {user_id}: {e}")
            raise
        except Exception:
            # A bad submission discards the whole batch
            self.db.rollback()
            logger.exception(f"Rejected attempt batch for user {user_id}")
            raise

        if self.refresh_manager is not None:
            self.refresh_manager.refresh()
        return len(submissions)

    def _record_attempt(self, submission: AttemptSubmission, user_id: str) -> WordMastery:
        occurred_at = _to_utc(submission.occurred_at)
        time_spent = max(0, int(submission.time_spent or 0))
        question_type = _question_type_value(submission.question_type)
        is_correct = bool(submission.is_correct)

        attempt = Attempt(
            user_id=user_id,
            word_id=submission.word_id,
            word_term=submission.word_term,
            question_type=question_type,
            is_correct=is_correct,
            time_spent=time_spent,
            user_answer=submission.user_answer or "",
            occurred_at=occurred_at,
        )
        self.db.add(attempt)
        self.db.flush()

        # The new answer is always scored, even when it is older than stored ones
        earlier = (
            self.db.query(Attempt)
            .filter(Attempt.word_id == submission.word_id, Attempt.id != attempt.id)
            .order_by(Attempt.occurred_at.desc(), Attempt.id.desc())
            .limit(self.history_window - 1)
            .all()
        )
        history = [attempt.to_record()] + [row.to_record() for row in earlier]
        level = calculate_mastery_level(recent_attempts(history, self.history_window))
        monitoring.mastery_recalculations.inc()
        monitoring.mastery_levels.observe(level)
        monitoring.attempts_recorded.labels(
            category="spelling" if is_spelling_type(question_type) else "mcq"
        ).inc()

        mastery = self.db.get(WordMastery, submission.word_id)
        if mastery is None:
            mastery = WordMastery(
                word_id=submission.word_id,
                word_term=submission.word_term,
                unit_id=submission.unit_id or "",
                attempt_count=0,
                correct_count=0,
                total_time_spent=0,
            )
            self.db.add(mastery)

        mastery.mastery_level = level
        mastery.attempt_count += 1
        mastery.correct_count += 1 if is_correct else 0
        mastery.total_time_spent += time_spent
        if mastery.last_attempt_at is None or _to_utc(mastery.last_attempt_at) < occurred_at:
            mastery.last_attempt_at = occurred_at
        if is_correct and (mastery.last_correct_at is None or _to_utc(mastery.last_correct_at) < occurred_at):
            mastery.last_correct_at = occurred_at
        self.db.flush()

        logger.debug(
            f"Word {submission.word_id}: level={level} attempts={mastery.attempt_count} "
            f"correct={mastery.correct_count}"
        )
        return mastery

    def get_mastery(self, word_id: str) -> MasteryRecord:
        """Get a word's mastery, a level 0 record if it was never practiced."""
        mastery = self.db.get(WordMastery, word_id)
        if mastery is None:
            return MasteryRecord(word_id=word_id)
        return mastery.to_record()

    def get_batch_mastery(self, word_ids: Iterable[str]) -> Dict[str, MasteryRecord]:
        """Get mastery records for the practiced words among ``word_ids``."""
        word_ids = list(word_ids)
        if not word_ids:
            raise ValueError("word_ids must not be empty")
        rows = self.db.query(WordMastery).filter(WordMastery.word_id.in_(word_ids)).all()
        return {row.word_id: row.to_record() for row in rows}

    def get_word_attempts(self, word_id: str, limit: Optional[int] = None) -> List[Attempt]:
        """Get a word's attempts, newest first."""
        if limit is None:
            limit = settings.mastery.default_attempts_limit
        return (
            self.db.query(Attempt)
            .filter(Attempt.word_id == word_id)
            .order_by(Attempt.occurred_at.desc(), Attempt.id.desc())
            .limit(limit)
            .all()
        )

    def get_words_need_practice(
        self,
        unit_id: Optional[str] = None,
        limit: Optional[int] = None,
        max_mastery_level: Optional[int] = None,
    ) -> List[WordMastery]:
        """Get practiced words below a mastery level, weakest and stalest first."""
        if limit is None:
            limit = settings.mastery.default_need_practice_limit
        if max_mastery_level is None:
            max_mastery_level = settings.mastery.default_need_practice_threshold

        query = self.db.query(WordMastery).filter(WordMastery.mastery_level < max_mastery_level)
        if unit_id:
            query = query.filter(WordMastery.unit_id == unit_id)
        return (
            query.order_by(WordMastery.mastery_level.asc(), WordMastery.last_attempt_at.asc())
            .limit(limit)
            .all()
        )

    def get_stats(self, user_id: str = "default") -> LearningStats:
        """Aggregate a user's learning statistics."""
        correct = case((Attempt.is_correct == True, 1), else_=0)  # noqa: E712

        total_attempts, total_correct, total_time, unique_words = (
            self.db.query(
                func.count(Attempt.id),
                func.sum(correct),
                func.sum(Attempt.time_spent),
                func.count(func.distinct(Attempt.word_id)),
            )
            .filter(Attempt.user_id == user_id)
            .one()
        )

        by_type = (
            self.db.query(
                Attempt.question_type,
                func.count(Attempt.id),
                func.sum(correct),
                func.avg(Attempt.time_spent),
            )
            .filter(Attempt.user_id == user_id)
            .group_by(Attempt.question_type)
            .all()
        )

        cutoff = utcnow() - timedelta(days=TREND_DAYS)
        recent = (
            self.db.query(Attempt.occurred_at, Attempt.is_correct)
            .filter(Attempt.user_id == user_id, Attempt.occurred_at >= cutoff)
            .all()
        )
        trend = defaultdict(lambda: {"attempts": 0, "correct": 0})
        for occurred_at, is_correct in recent:
            day = _to_utc(occurred_at).date().isoformat()
            trend[day]["attempts"] += 1
            trend[day]["correct"] += 1 if is_correct else 0

        distribution = defaultdict(int)
        for (level,) in self.db.query(WordMastery.mastery_level).all():
            distribution[mastery_band(level or 0)] += 1

        return LearningStats(
            total_attempts=total_attempts or 0,
            total_correct=int(total_correct or 0),
            total_time_spent=int(total_time or 0),
            unique_words=unique_words or 0,
            by_question_type=[
                {
                    "question_type": question_type,
                    "count": count,
                    "correct": int(type_correct or 0),
                    "avg_time": round(avg_time or 0),
                }
                for question_type, count, type_correct, avg_time in by_type
            ],
            recent_trend=[
                {"date": day, **values}
                for day, values in sorted(trend.items(), reverse=True)
            ],
            mastery_distribution=dict(distribution),
        )

    def reset_unit(self, unit_id: str) -> int:
        """Delete all attempts and mastery for a unit's words."""
        word_ids = [
            word_id
            for (word_id,) in self.db.query(WordMastery.word_id)
            .filter(WordMastery.unit_id == unit_id)
            .all()
        ]
        if not word_ids:
            logger.info(f"No progress found for unit {unit_id}")
            return 0

        try:
            self.db.query(Attempt).filter(Attempt.word_id.in_(word_ids)).delete(synchronize_session=False)
            self.db.query(WordMastery).filter(WordMastery.unit_id == unit_id).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            monitoring.db_errors.labels(operation="reset_unit").inc()
            logger.error(f"Failed to reset unit {unit_id}: {e}")
            raise

        monitoring.unit_resets.inc()
        logger.info(f"Reset {len(word_ids)} words in unit {unit_id}")
        if self.refresh_manager is not None:
            self.refresh_manager.refresh()
        return len(word_ids)
