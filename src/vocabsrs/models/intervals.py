"""Fixed interval ladder used by the review scheduler."""
from typing import Iterable, Iterator, Optional, Tuple

from vocabsrs.config import settings

DEFAULT_INTERVALS: Tuple[int, ...] = (1, 3, 7, 14, 30, 90, 180)


class InvalidIndexError(IndexError):
    """Raised when the interval ladder is read outside its bounds."""


class IntervalTable:
    """Immutable ordered sequence of day counts between reviews."""

    __slots__ = ("_days",)

    def __init__(self, days: Iterable[int] = DEFAULT_INTERVALS):
        days = tuple(int(d) for d in days)
        if len(days) < 2:
            raise ValueError("An interval table needs at least two entries")
        if any(d <= 0 for d in days):
            raise ValueError(f"Interval days must be positive, got {days}")
        object.__setattr__(self, "_days", days)

    def __setattr__(self, name, value):
        raise AttributeError("IntervalTable is immutable")

    def __len__(self) -> int:
        return len(self._days)

    def __iter__(self) -> Iterator[int]:
        return iter(self._days)

    def __getitem__(self, index: int) -> int:
        return self.days_at(index)

    def __eq__(self, other) -> bool:
        if not isinstance(other, IntervalTable):
            return NotImplemented
        return self._days == other._days

    def __hash__(self) -> int:
        return hash(self._days)

    def __repr__(self) -> str:
        return f"IntervalTable({list(self._days)})"

    @property
    def last_index(self) -> int:
        """Index of the final (mastery) interval."""
        return len(self._days) - 1

    def is_valid_index(self, index: int) -> bool:
        return isinstance(index, int) and 0 <= index < len(self._days)

    def is_last(self, index: int) -> bool:
        return index == self.last_index

    def days_at(self, index: int) -> int:
        """Get the day count at the given position; negative indices are not wrapped."""
        if not self.is_valid_index(index):
            raise InvalidIndexError(
                f"Interval index {index} outside [0, {len(self._days)})"
            )
        return self._days[index]


_configured_table: Optional[IntervalTable] = None


def get_interval_table() -> IntervalTable:
    """Get the interval table built from the learning settings."""
    global _configured_table
    if _configured_table is None:
        _configured_table = IntervalTable(settings.learning.repetition_intervals)
    return _configured_table
