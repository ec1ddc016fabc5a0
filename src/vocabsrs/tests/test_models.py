"""Tests for progress records and database models."""
from dataclasses import replace
from datetime import UTC, datetime, timedelta

import pytest
from faker import Faker
from sqlalchemy.orm import Session

from vocabsrs.models.intervals import IntervalTable
from vocabsrs.models.models import Word, WordProgress
from vocabsrs.models.progress import (
    WordStatus,
    current_interval_days,
    parse_timestamp,
    record_from_dict,
    record_to_dict,
)

fake = Faker()


def test_record_to_dict_shape(make_record, now) -> None:
    """Test the persisted shape of a record."""
    record = make_record(interval_index=2, streak=2, total_reviews=3, next_review_at=now + timedelta(days=7))

    data = record_to_dict(record)

    assert data == {
        "word_id": "abate",
        "status": "reviewing",
        "last_reviewed_at": "2026-03-01T09:30:00+00:00",
        "next_review_at": "2026-03-08T09:30:00+00:00",
        "interval_index": 2,
        "streak": 2,
        "total_reviews": 3,
    }


def test_mastered_record_has_null_next_review(make_record) -> None:
    """Test that a mastered record persists without a next review."""
    record = make_record(status=WordStatus.MASTERED, interval_index=4)

    data = record_to_dict(record)

    assert data["next_review_at"] is None
    assert record_from_dict(data) == record


def test_record_from_dict_missing_field() -> None:
    """Test that incomplete persisted data is rejected."""
    with pytest.raises(ValueError, match="interval_index"):
        record_from_dict({"word_id": "abate", "status": "learning"})


def test_record_from_dict_unknown_status() -> None:
    """Test that an unknown status is rejected."""
    with pytest.raises(ValueError):
        record_from_dict({"word_id": "abate", "status": "forgotten", "interval_index": 0})


def test_parse_timestamp_assumes_utc() -> None:
    """Test that naive timestamps are read as UTC."""
    parsed = parse_timestamp("2026-03-01T09:30:00")
    assert parsed == datetime(2026, 3, 1, 9, 30, tzinfo=UTC)
    assert parse_timestamp(None) is None
    assert parse_timestamp("2026-03-01T11:30:00+02:00") == datetime(2026, 3, 1, 9, 30, tzinfo=UTC)


def test_validate_accepts_valid_record(make_record, table: IntervalTable) -> None:
    """Test validation of a consistent record."""
    make_record().validate(table)
    make_record(status=WordStatus.MASTERED, interval_index=4).validate(table)


@pytest.mark.parametrize(
    "overrides",
    [
        {"status": WordStatus.NEW},
        {"interval_index": 5},
        {"interval_index": -1},
        {"streak": -1},
        {"status": WordStatus.MASTERED, "interval_index": 2},
        {"status": WordStatus.MASTERED, "interval_index": 4, "next_review_at": datetime(2026, 4, 1, tzinfo=UTC)},
        {"word_id": ""},
    ],
)
def test_validate_rejects_broken_records(make_record, table: IntervalTable, overrides) -> None:
    """Test validation of inconsistent records."""
    with pytest.raises(ValueError):
        make_record(**overrides).validate(table)


def test_record_without_last_review_is_invalid(make_record, table: IntervalTable) -> None:
    """Test that a stored record always carries its last review time."""
    broken = replace(make_record(), last_reviewed_at=None)
    with pytest.raises(ValueError, match="last review"):
        broken.validate(table)


@pytest.mark.parametrize(
    "overrides",
    [
        {"interval_index": None},
        {"interval_index": 1.9},
        {"interval_index": "1"},
        {"interval_index": True},
        {"streak": None},
        {"total_reviews": 2.0},
        {"word_id": 7},
        {"last_reviewed_at": 1772357400},
        {"status": ["reviewing"]},
    ],
)
def test_record_from_dict_rejects_malformed_values(make_record, overrides) -> None:
    """Test that wrongly typed persisted values raise ValueError."""
    data = {**record_to_dict(make_record()), **overrides}
    with pytest.raises(ValueError):
        record_from_dict(data)


def test_record_from_dict_rejects_non_object() -> None:
    """Test that a persisted record must be a JSON object."""
    with pytest.raises(ValueError):
        record_from_dict(["abate", "reviewing", 1])


def test_reviewing_record_without_next_review_is_invalid(make_record, table: IntervalTable) -> None:
    """Test that only mastered records may lack a next review."""
    record = make_record()
    broken = replace(record, next_review_at=None)
    with pytest.raises(ValueError):
        broken.validate(table)


def test_is_due(make_record, now) -> None:
    """Test the due check."""
    assert make_record(next_review_at=now).is_due(now)
    assert not make_record(next_review_at=now + timedelta(seconds=1)).is_due(now)
    assert not make_record(status=WordStatus.MASTERED, interval_index=4).is_due(now)


def test_level_and_interval_days(make_record, table: IntervalTable) -> None:
    """Test display helpers."""
    record = make_record(interval_index=3)
    assert record.level == 4
    assert current_interval_days(record, table) == 14


def test_word_creation(db: Session) -> None:
    """Test word creation."""
    text = fake.unique.word()
    word = Word(id=text.lower(), text=text, definition="a definition")
    db.add(word)
    db.commit()
    db.refresh(word)

    assert word.id == text.lower()
    assert word.created_at is not None
    assert word.example_sentence is None


def test_word_progress_creation(db: Session) -> None:
    """Test progress row creation and defaults."""
    row = WordProgress(word_id="abate", status="learning")
    db.add(row)
    db.commit()
    db.refresh(row)

    assert row.interval_index == 0
    assert row.streak == 0
    assert row.total_reviews == 0
    assert row.next_review_at is None


if __name__ == "__main__":
    pytest.main([__file__])
