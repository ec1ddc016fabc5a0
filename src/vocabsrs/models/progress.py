"""Per-word learning progress records."""
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Dict, Optional

from vocabsrs.models.intervals import IntervalTable


class WordStatus(Enum):
    """Learning status of a word."""
    NEW = "new"  # virtual: the word has no stored record
    LEARNING = "learning"
    REVIEWING = "reviewing"
    MASTERED = "mastered"


@dataclass(frozen=True)
class ProgressRecord:
    """Learning state of one word that has been seen at least once."""
    word_id: str
    status: WordStatus
    last_reviewed_at: Optional[datetime]
    next_review_at: Optional[datetime]
    interval_index: int
    streak: int = 0
    total_reviews: int = 0

    @property
    def level(self) -> int:
        """One-based position on the interval ladder."""
        return self.interval_index + 1

    @property
    def is_mastered(self) -> bool:
        return self.status is WordStatus.MASTERED

    def is_due(self, now: datetime) -> bool:
        """Check whether the word should be reviewed at ``now``."""
        if self.is_mastered or self.next_review_at is None:
            return False
        return self.next_review_at <= now

    def validate(self, table: IntervalTable) -> None:
        """Check the record invariants and raise ValueError if violated."""
        if not self.word_id:
            raise ValueError("Progress record needs a word id")
        if self.status is WordStatus.NEW:
            raise ValueError(f"Stored record for {self.word_id!r} cannot be NEW")
        if self.last_reviewed_at is None:
            raise ValueError(f"Stored record for {self.word_id!r} has no last review time")
        if not table.is_valid_index(self.interval_index):
            raise ValueError(
                f"Interval index {self.interval_index} of {self.word_id!r} "
                f"outside [0, {len(table)})"
            )
        if self.streak < 0 or self.total_reviews < 0:
            raise ValueError(f"Counters of {self.word_id!r} cannot be negative")
        if self.is_mastered != (self.next_review_at is None):
            raise ValueError(
                f"Record {self.word_id!r} must have no next review exactly when mastered"
            )
        if self.is_mastered and not table.is_last(self.interval_index):
            raise ValueError(f"Mastered record {self.word_id!r} is not at the top interval")


def current_interval_days(record: ProgressRecord, table: IntervalTable) -> int:
    """Get the number of days of the record's current interval."""
    return table.days_at(record.interval_index)


def _format_timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 string into an aware UTC datetime."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"Timestamp must be an ISO-8601 string, got {value!r}")
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def _read_int(data: Dict[str, Any], key: str, default: Optional[int] = None) -> int:
    value = data[key] if default is None else data.get(key, default)
    # bool is an int subclass but never a valid counter
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Field {key!r} must be an integer, got {value!r}")
    return value


def record_to_dict(record: ProgressRecord) -> Dict[str, Any]:
    """Convert a record to its persisted JSON shape."""
    return {
        "word_id": record.word_id,
        "status": record.status.value,
        "last_reviewed_at": _format_timestamp(record.last_reviewed_at),
        "next_review_at": _format_timestamp(record.next_review_at),
        "interval_index": record.interval_index,
        "streak": record.streak,
        "total_reviews": record.total_reviews,
    }


def record_from_dict(data: Dict[str, Any]) -> ProgressRecord:
    """Build a record from its persisted JSON shape.

    Raises ValueError for missing fields or values of the wrong type.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Persisted progress record must be an object, got {data!r}")
    try:
        word_id = data["word_id"]
        if not isinstance(word_id, str):
            raise ValueError(f"Field 'word_id' must be a string, got {word_id!r}")
        return ProgressRecord(
            word_id=word_id,
            status=WordStatus(data["status"]),
            last_reviewed_at=parse_timestamp(data.get("last_reviewed_at")),
            next_review_at=parse_timestamp(data.get("next_review_at")),
            interval_index=_read_int(data, "interval_index"),
            streak=_read_int(data, "streak", 0),
            total_reviews=_read_int(data, "total_reviews", 0),
        )
    except KeyError as e:
        raise ValueError(f"Persisted progress record is missing field {e}") from e
    except TypeError as e:
        raise ValueError(f"Persisted progress record is malformed: {e}") from e
