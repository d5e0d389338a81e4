"""Test configuration."""
import os
from pathlib import Path
from typing import Generator

import pytest
from dotenv import load_dotenv

# Set test environment before any imports
os.environ["ENV"] = "test"

# Load test environment variables
test_env_path = Path(__file__).parent.parent.parent.parent / ".env.test"
load_dotenv(test_env_path)

# Import after environment setup
from faker import Faker
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from vocabmaster.models.base import init_db
from vocabmaster.models.quiz_models import WordPoolEntry

fake = Faker()


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create a fresh in-memory database session for each test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def make_words():
    """Factory for word pools with unique ids and terms."""
    def _make_words(count: int, unit_id: str = "unit1"):
        terms = set()
        while len(terms) < count:
            terms.add(fake.unique.word())
        return [
            WordPoolEntry(word_id=f"{unit_id}-{i}", term=term, unit_id=unit_id, definition=f"meaning {i}")
            for i, term in enumerate(sorted(terms))
        ]
    return _make_words
