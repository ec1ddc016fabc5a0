"""Review service: applies review events to the progress store."""
import logging
import time
from datetime import UTC, datetime
from typing import Optional

from vocabsrs.models.intervals import IntervalTable, get_interval_table
from vocabsrs.models.progress import ProgressRecord, WordStatus
from vocabsrs.models.review_models import ReviewResult
from vocabsrs.monitoring import (
    mastery_revoked,
    progress_resets,
    review_duration,
    reviews_processed,
    words_introduced,
    words_mastered,
)
from vocabsrs.services.content_generator import (
    LOOKUP_FAILED_DEFINITION,
    NO_DEFINITION,
    ContentGenerator,
    DefinitionUnavailableError,
)
from vocabsrs.services.explanation_judge import ExplanationJudge
from vocabsrs.services.progress_store import ProgressStore
from vocabsrs.services.scheduling_engine import advise_review, create_record
from vocabsrs.services.session_selectors import status_of
from vocabsrs.services.word_service import WordService

logger = logging.getLogger(__name__)


class MissingRecordError(LookupError):
    """Raised when a review is submitted for a word that was never introduced."""


class UnknownWordError(LookupError):
    """Raised when a word required for judging is not in the catalog."""


class ReviewService:
    """Service for recording reviews of words."""

    def __init__(
        self,
        store: ProgressStore,
        catalog: Optional[WordService] = None,
        judge: Optional[ExplanationJudge] = None,
        table: Optional[IntervalTable] = None,
        content_generator: Optional[ContentGenerator] = None,
    ):
        self.store = store
        self.catalog = catalog
        self.judge = judge
        self.table = table or get_interval_table()
        self.content_generator = content_generator or ContentGenerator()

    def status_of(self, word_id: str) -> WordStatus:
        """Get the status of a word."""
        return status_of(self.store, word_id)

    def start_learning(self, word_id: str, now: Optional[datetime] = None) -> ProgressRecord:
        """Introduce a word, creating its record if it has none."""
        with self.store.locked(word_id):
            record = self.store.get(word_id)
            if record is not None:
                return record
            record = create_record(word_id, now, self.table)
            self.store.upsert(record)

        words_introduced.inc()
        logger.info(f"Started learning word {word_id}, next review at {record.next_review_at}")
        return record

    def submit_review(
        self,
        word_id: str,
        remembered_correctly: bool,
        now: Optional[datetime] = None,
    ) -> ProgressRecord:
        """Apply a pass/fail review to a word and store the result."""
        if self.catalog is not None and self.catalog.get_word(word_id) is None:
            logger.warning(f"Reviewing word {word_id} which is not in the catalog")

        now = now or datetime.now(UTC)
        started = time.perf_counter()
        with self.store.locked(word_id):
            record = self.store.get(word_id)
            if record is None:
                raise MissingRecordError(f"Word {word_id} has no progress record; start learning it first")
            updated = advise_review(record, remembered_correctly, now, self.table)
            self.store.upsert(updated)
        review_duration.observe(time.perf_counter() - started)

        reviews_processed.labels(outcome="remembered" if remembered_correctly else "forgotten").inc()
        if updated.is_mastered and not record.is_mastered:
            words_mastered.inc()
        if record.is_mastered and not updated.is_mastered:
            mastery_revoked.inc()

        logger.info(
            f"Word {word_id} reviewed (remembered={remembered_correctly}): "
            f"{record.status.value} -> {updated.status.value}, level {updated.level}, "
            f"streak {updated.streak}, next review {updated.next_review_at}"
        )
        return updated

    def submit_explanation(
        self,
        word_id: str,
        user_text: str,
        now: Optional[datetime] = None,
    ) -> ReviewResult:
        """Judge a free-text explanation and record the verdict as a review.

        If the definition cannot be looked up (DefinitionUnavailableError) or the
        judge cannot produce a verdict (JudgeUnavailableError), the error
        propagates and neither the catalog nor the word's progress is touched.
        """
        if not user_text or not user_text.strip():
            raise ValueError("An explanation is required before it can be judged")
        if self.judge is None:
            raise ValueError("No explanation judge configured")
        if self.catalog is None:
            raise ValueError("Judging explanations needs a word catalog")

        word = self.catalog.get_word(word_id)
        if word is None:
            raise UnknownWordError(f"Word {word_id} not found")
        if self.store.get(word_id) is None:
            raise MissingRecordError(f"Word {word_id} has no progress record; start learning it first")

        definition = word.definition
        example = word.example_sentence
        if not definition or definition in (NO_DEFINITION, LOOKUP_FAILED_DEFINITION):
            details = self.content_generator.fetch_word_details(word.text)
            if details.lookup_failed:
                raise DefinitionUnavailableError(f"Could not look up the definition of {word.text!r}")
            self.catalog.update_details(word_id, details)
            definition, example = details.definition, details.example_sentence

        verdict = self.judge.judge(word.text, definition, example or "", user_text.strip())
        record = self.submit_review(word_id, verdict.is_correct, now)
        return ReviewResult(record=record, verdict=verdict)

    def reset_word(self, word_id: str) -> bool:
        """Forget all progress of a word so it becomes NEW again."""
        with self.store.locked(word_id):
            removed = self.store.reset(word_id)
        if removed:
            progress_resets.inc()
            logger.info(f"Progress of word {word_id} reset")
        return removed
