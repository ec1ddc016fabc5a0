"""Test configuration."""
import os
from datetime import UTC, datetime
from pathlib import Path
from typing import Generator

import pytest
from dotenv import load_dotenv

# Set test environment before any imports
os.environ["ENV"] = "test"
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LLM_API_KEY", "")

# Load test environment variables
test_env_path = Path(__file__).parent.parent.parent.parent / ".env.test"
load_dotenv(test_env_path)

# Import after environment setup
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from vocabsrs.models.base import init_db
from vocabsrs.models.intervals import IntervalTable
from vocabsrs.models.progress import ProgressRecord, WordStatus


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create a fresh in-memory database session for each test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def table() -> IntervalTable:
    """Five-step ladder used across the tests."""
    return IntervalTable([1, 3, 7, 14, 30])


@pytest.fixture
def now() -> datetime:
    """Fixed review time."""
    return datetime(2026, 3, 1, 9, 30, tzinfo=UTC)


@pytest.fixture
def make_record(now):
    """Factory for progress records with sensible defaults."""
    def _make(
        word_id: str = "abate",
        status: WordStatus = WordStatus.REVIEWING,
        interval_index: int = 1,
        streak: int = 1,
        total_reviews: int = 1,
        next_review_at=None,
        last_reviewed_at=None,
    ) -> ProgressRecord:
        if next_review_at is None and status is not WordStatus.MASTERED:
            next_review_at = now
        return ProgressRecord(
            word_id=word_id,
            status=status,
            last_reviewed_at=last_reviewed_at or now,
            next_review_at=next_review_at,
            interval_index=interval_index,
            streak=streak,
            total_reviews=total_reviews,
        )

    return _make
