"""Tests for database models."""
from datetime import UTC, datetime

from faker import Faker
from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from vocabmaster.models.base import Base, init_db
from vocabmaster.models.models import Attempt, WordMastery
from vocabmaster.models.quiz_models import LearningStats, QuestionType, is_spelling_type

fake = Faker()


def test_attempt_creation(db: Session) -> None:
    """Test attempt creation and defaults."""
    attempt = Attempt(
        word_id="starter-0",
        word_term=fake.word(),
        question_type=QuestionType.SPELLING.value,
        is_correct=True,
        time_spent=3200,
    )
    db.add(attempt)
    db.commit()
    db.refresh(attempt)

    assert attempt.id is not None
    assert attempt.user_id == "default"
    assert attempt.user_answer == ""
    assert attempt.occurred_at is not None

    record = attempt.to_record()
    assert record.word_id == "starter-0"
    assert record.is_correct is True
    assert record.time_spent == 3200
    assert is_spelling_type(record.question_type)


def test_word_mastery_creation(db: Session) -> None:
    """Test mastery record creation and conversion."""
    now = datetime.now(UTC)
    mastery = WordMastery(word_id="unit1-3", word_term="polite", unit_id="unit1", last_attempt_at=now)
    db.add(mastery)
    db.commit()
    db.refresh(mastery)

    assert mastery.mastery_level == 0
    assert mastery.attempt_count == 0
    assert mastery.created_at is not None

    record = mastery.to_record()
    assert record.word_id == "unit1-3"
    assert record.word_term == "polite"
    assert record.unit_id == "unit1"
    assert record.last_correct_at is None


def test_is_spelling_type() -> None:
    assert is_spelling_type(QuestionType.SPELLING)
    assert is_spelling_type("CN_TO_EN_SPELLING")
    assert not is_spelling_type(QuestionType.EN_TO_CN)
    assert not is_spelling_type("FILL_IN_BLANK_SPELLING")
    assert not is_spelling_type(None)


def test_learning_stats_accuracy() -> None:
    assert LearningStats().accuracy == 0.0
    assert LearningStats(total_attempts=4, total_correct=3).accuracy == 0.75


def test_init_db_is_idempotent() -> None:
    """Test that init_db creates both tables and can run again safely."""
    engine = create_engine("sqlite://", poolclass=StaticPool)
    init_db(engine)
    init_db(engine)

    assert set(inspect(engine).get_table_names()) == {"attempts", "mastery"}
    engine.dispose()


def test_attempts_are_not_tied_to_mastery_rows() -> None:
    """Attempts reference words by id only, a mastery row is optional."""
    for table in Base.metadata.tables.values():
        assert not table.foreign_keys
