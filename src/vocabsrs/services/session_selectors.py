"""Read-side queries deciding what to present in a study session."""
from collections import Counter
from datetime import UTC, datetime
from typing import Dict, Iterable, List, Optional, Tuple

from vocabsrs.models.models import Word
from vocabsrs.models.progress import ProgressRecord, WordStatus
from vocabsrs.services.progress_store import ProgressStore


def status_of(store: ProgressStore, word_id: str) -> WordStatus:
    """Get the status of a word; words without a record are NEW."""
    record = store.get(word_id)
    return record.status if record else WordStatus.NEW


def words_for_review(
    store: ProgressStore,
    now: Optional[datetime] = None,
    limit: Optional[int] = None,
) -> List[ProgressRecord]:
    """Get stored records due for review, longest overdue first."""
    now = now or datetime.now(UTC)
    due = [record for record in store.records() if record.is_due(now)]
    due.sort(key=lambda record: (record.next_review_at, record.word_id))
    return due[:limit] if limit is not None else due


def new_words_to_introduce(
    store: ProgressStore,
    word_ids: Iterable[str],
    limit: Optional[int] = None,
) -> List[str]:
    """Get catalog word ids that have never been reviewed, sorted by id."""
    seen = {record.word_id for record in store.records()}
    fresh = sorted({word_id for word_id in word_ids if word_id not in seen})
    return fresh[:limit] if limit is not None else fresh


def words_due_now(
    store: ProgressStore,
    word_ids: Iterable[str] = (),
    now: Optional[datetime] = None,
) -> List[str]:
    """Get the ids of every word to present now.

    Due records come first, ordered by next review time and then word id.
    They are followed by the catalog words with no record, ordered by id.
    """
    due = [record.word_id for record in words_for_review(store, now)]
    return due + new_words_to_introduce(store, word_ids)


def all_words_with_status(
    store: ProgressStore,
    words: Iterable[Word],
) -> List[Tuple[Word, WordStatus, Optional[ProgressRecord]]]:
    """Pair every catalog word with its status and record, sorted by text."""
    records = store.persist_all()
    rows = []
    for word in sorted(words, key=lambda w: w.text.lower()):
        record = records.get(word.id)
        rows.append((word, record.status if record else WordStatus.NEW, record))
    return rows


def progress_summary(store: ProgressStore, word_ids: Iterable[str] = ()) -> Dict[WordStatus, int]:
    """Count words per status, including NEW catalog words."""
    records = store.persist_all()
    counts = Counter(record.status for record in records.values())
    counts[WordStatus.NEW] = len({word_id for word_id in word_ids if word_id not in records})
    return {status: counts.get(status, 0) for status in WordStatus}
