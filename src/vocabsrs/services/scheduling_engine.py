"""Review scheduling: creates and advances per-word progress records.

The interval ladder is fixed. A correct answer climbs one rung, a wrong
answer drops two rungs (never below the first), and a correct answer on
the top rung marks the word as mastered. Failure always revokes mastery.
"""
import logging
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from typing import Optional

from vocabsrs.models.intervals import IntervalTable, get_interval_table
from vocabsrs.models.progress import ProgressRecord, WordStatus

logger = logging.getLogger(__name__)

DEMOTION_STEPS = 2


def calculate_next_review(base: datetime, interval_days: int) -> datetime:
    """Calculate the review date ``interval_days`` after ``base``."""
    return base + timedelta(days=interval_days)


def create_record(
    word_id: str,
    now: Optional[datetime] = None,
    table: Optional[IntervalTable] = None,
) -> ProgressRecord:
    """Create the first progress record of a word.

    The caller is responsible for checking that no record exists yet.
    """
    if not word_id:
        raise ValueError("word_id must be non-empty")
    now = now or datetime.now(UTC)
    table = table or get_interval_table()

    return ProgressRecord(
        word_id=word_id,
        status=WordStatus.LEARNING,
        last_reviewed_at=now,
        next_review_at=calculate_next_review(now, table[0]),
        interval_index=0,
        streak=0,
        total_reviews=0,
    )


def advise_review(
    record: ProgressRecord,
    remembered_correctly: bool,
    now: Optional[datetime] = None,
    table: Optional[IntervalTable] = None,
) -> ProgressRecord:
    """Compute the record that follows a review of ``record``.

    Returns a new record; ``record`` itself is left untouched.
    """
    now = now or datetime.now(UTC)
    table = table or get_interval_table()
    assert table.is_valid_index(record.interval_index), (
        f"Interval index {record.interval_index} of {record.word_id!r} is out of range"
    )

    interval_index = record.interval_index
    status = record.status

    if remembered_correctly:
        streak = record.streak + 1
        if table.is_last(interval_index):
            # pinned at the top of the ladder
            status = WordStatus.MASTERED
        else:
            interval_index += 1
            if status is WordStatus.LEARNING:
                status = WordStatus.REVIEWING
    else:
        streak = 0
        interval_index = max(0, interval_index - DEMOTION_STEPS)
        if status is WordStatus.MASTERED:
            status = WordStatus.REVIEWING

    if status is WordStatus.MASTERED:
        next_review_at = None
    else:
        next_review_at = calculate_next_review(now, table[interval_index])

    logger.debug(
        f"Review of {record.word_id}: remembered={remembered_correctly}, "
        f"{record.status.value}@{record.interval_index} -> {status.value}@{interval_index}"
    )

    return replace(
        record,
        status=status,
        last_reviewed_at=now,
        next_review_at=next_review_at,
        interval_index=interval_index,
        streak=streak,
        total_reviews=record.total_reviews + 1,
    )
