"""Storage of progress records keyed by word id."""
import json
import logging
import threading
import weakref
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Union

from sqlalchemy.orm import Session

from vocabsrs.models.intervals import IntervalTable, get_interval_table
from vocabsrs.models.models import WordProgress
from vocabsrs.models.progress import (
    ProgressRecord,
    WordStatus,
    record_from_dict,
    record_to_dict,
)
from vocabsrs.monitoring import store_operations

logger = logging.getLogger(__name__)


class ProgressStore(ABC):
    """Mapping from word id to progress record.

    A missing record means the word is still NEW. Writes are last-write-wins
    per word; use ``locked`` around a read-modify-write of one word.
    """

    def __init__(self):
        # entries disappear once no caller holds or waits on the lock
        self._locks: weakref.WeakValueDictionary = weakref.WeakValueDictionary()
        self._locks_guard = threading.Lock()

    @abstractmethod
    def get(self, word_id: str) -> Optional[ProgressRecord]:
        """Get the record of a word, or None if the word is NEW."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def upsert(self, record: ProgressRecord) -> None:
        """Insert or replace the record of ``record.word_id``."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def reset(self, word_id: str) -> bool:
        """Remove the record of a word. Returns False if there was none."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def records(self) -> List[ProgressRecord]:
        """Get all stored records."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def _replace_all(self, records: List[ProgressRecord]) -> None:
        raise NotImplementedError("Subclasses must implement this method")

    def load_all(self, records: Iterable[ProgressRecord]) -> None:
        """Replace the whole mapping with ``records``."""
        by_id: Dict[str, ProgressRecord] = {}
        for record in records:
            by_id[record.word_id] = record
        self._replace_all(list(by_id.values()))
        store_operations.labels(operation_type="load_all").inc()
        logger.info(f"Loaded {len(by_id)} progress records")

    def persist_all(self) -> Dict[str, ProgressRecord]:
        """Get a snapshot of the whole mapping."""
        snapshot = {record.word_id: record for record in self.records()}
        store_operations.labels(operation_type="persist_all").inc()
        return snapshot

    @contextmanager
    def locked(self, word_id: str) -> Iterator[None]:
        """Serialize read-modify-write cycles on a single word."""
        with self._locks_guard:
            lock = self._locks.get(word_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[word_id] = lock
        with lock:
            yield

    def __contains__(self, word_id: str) -> bool:
        return self.get(word_id) is not None

    def __len__(self) -> int:
        return len(self.records())


class InMemoryProgressStore(ProgressStore):
    """Progress store kept in a dictionary."""

    def __init__(self, records: Optional[Iterable[ProgressRecord]] = None):
        super().__init__()
        self._records: Dict[str, ProgressRecord] = {}
        if records:
            self._replace_all(list(records))

    def get(self, word_id: str) -> Optional[ProgressRecord]:
        store_operations.labels(operation_type="get").inc()
        return self._records.get(word_id)

    def upsert(self, record: ProgressRecord) -> None:
        store_operations.labels(operation_type="upsert").inc()
        self._records[record.word_id] = record

    def reset(self, word_id: str) -> bool:
        store_operations.labels(operation_type="reset").inc()
        return self._records.pop(word_id, None) is not None

    def records(self) -> List[ProgressRecord]:
        return list(self._records.values())

    def _replace_all(self, records: List[ProgressRecord]) -> None:
        self._records = {record.word_id: record for record in records}

    def __len__(self) -> int:
        return len(self._records)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite drops tzinfo on the way back; stored values are always UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def _stored_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(UTC)


class SqlProgressStore(ProgressStore):
    """Progress store backed by the ``word_progress`` table.

    A Session is not thread-safe, so every use of ``db`` goes through one
    store-wide lock. Per-word locks still guard read-modify-write cycles.
    """

    def __init__(self, db: Session):
        """Initialize the store with a database session."""
        super().__init__()
        self.db = db
        self._session_lock = threading.RLock()

    @staticmethod
    def _to_record(row: WordProgress) -> ProgressRecord:
        return ProgressRecord(
            word_id=row.word_id,
            status=WordStatus(row.status),
            last_reviewed_at=_as_utc(row.last_reviewed_at),
            next_review_at=_as_utc(row.next_review_at),
            interval_index=row.interval_index,
            streak=row.streak,
            total_reviews=row.total_reviews,
        )

    @staticmethod
    def _apply(row: WordProgress, record: ProgressRecord) -> None:
        row.status = record.status.value
        row.last_reviewed_at = _stored_utc(record.last_reviewed_at)
        row.next_review_at = _stored_utc(record.next_review_at)
        row.interval_index = record.interval_index
        row.streak = record.streak
        row.total_reviews = record.total_reviews

    def _get_row(self, word_id: str) -> Optional[WordProgress]:
        return self.db.query(WordProgress).filter(WordProgress.word_id == word_id).first()

    def get(self, word_id: str) -> Optional[ProgressRecord]:
        store_operations.labels(operation_type="get").inc()
        with self._session_lock:
            row = self._get_row(word_id)
            return self._to_record(row) if row else None

    def upsert(self, record: ProgressRecord) -> None:
        store_operations.labels(operation_type="upsert").inc()
        with self._session_lock:
            row = self._get_row(record.word_id)
            if row is None:
                row = WordProgress(word_id=record.word_id)
                self.db.add(row)
            self._apply(row, record)
            self.db.commit()

    def reset(self, word_id: str) -> bool:
        store_operations.labels(operation_type="reset").inc()
        with self._session_lock:
            row = self._get_row(word_id)
            if row is None:
                return False
            self.db.delete(row)
            self.db.commit()
            return True

    def records(self) -> List[ProgressRecord]:
        with self._session_lock:
            rows = self.db.query(WordProgress).order_by(WordProgress.word_id).all()
            return [self._to_record(row) for row in rows]

    def _replace_all(self, records: List[ProgressRecord]) -> None:
        with self._session_lock:
            try:
                self.db.query(WordProgress).delete()
                for record in records:
                    row = WordProgress(word_id=record.word_id)
                    self._apply(row, record)
                    self.db.add(row)
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

    def __len__(self) -> int:
        with self._session_lock:
            return self.db.query(WordProgress).count()


def export_progress(store: ProgressStore, path: Union[str, Path]) -> int:
    """Write every record of ``store`` to a JSON file keyed by word id."""
    path = Path(path)
    snapshot = store.persist_all()
    payload = {word_id: record_to_dict(record) for word_id, record in sorted(snapshot.items())}
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info(f"Exported {len(payload)} progress records to {path}")
    return len(payload)


def import_progress(
    store: ProgressStore,
    path: Union[str, Path],
    table: Optional[IntervalTable] = None,
) -> int:
    """Replace the contents of ``store`` with the records in a JSON file."""
    path = Path(path)
    table = table or get_interval_table()
    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"{path} must contain an object keyed by word id")

    records = []
    for word_id, data in payload.items():
        record = record_from_dict(data)
        if record.word_id != word_id:
            raise ValueError(f"Record key {word_id!r} does not match its word_id {record.word_id!r}")
        record.validate(table)
        records.append(record)

    store.load_all(records)
    logger.info(f"Imported {len(records)} progress records from {path}")
    return len(records)
