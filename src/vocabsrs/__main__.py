"""Command line entry point for the vocabulary scheduler."""
import argparse
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import List, Optional

from sqlalchemy.orm import Session

from vocabsrs.config import ensure_directories, settings
from vocabsrs.logging_config import setup_logging
from vocabsrs.models.base import SessionLocal, init_db
from vocabsrs.models.intervals import get_interval_table
from vocabsrs.models.progress import ProgressRecord, WordStatus, current_interval_days
from vocabsrs.monitoring import start_monitoring
from vocabsrs.services.content_generator import ContentGenerator, DefinitionUnavailableError
from vocabsrs.services.explanation_judge import JudgeUnavailableError, LLMExplanationJudge
from vocabsrs.services.progress_store import SqlProgressStore, export_progress, import_progress
from vocabsrs.services.review_service import MissingRecordError, ReviewService, UnknownWordError
from vocabsrs.services.session_selectors import (
    all_words_with_status,
    new_words_to_introduce,
    progress_summary,
    words_for_review,
)
from vocabsrs.services.word_service import WordService

logger = logging.getLogger("vocabsrs")


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("yes", "y", "true", "1", "pass", "remembered"):
        return True
    if lowered in ("no", "n", "false", "0", "fail", "forgotten"):
        return False
    raise argparse.ArgumentTypeError(f"expected yes/no, got {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vocabsrs", description="Spaced-repetition vocabulary scheduler")
    parser.add_argument("--log-level", default=None, help="override LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="add words to the catalog")
    add.add_argument("words", nargs="+")

    learn = sub.add_parser("learn", help="introduce a word (or the next new words)")
    learn.add_argument("word_id", nargs="?")

    review = sub.add_parser("review", help="record whether a word was remembered")
    review.add_argument("word_id")
    review.add_argument("remembered", type=_parse_bool)

    explain = sub.add_parser("explain", help="judge an explanation and record the verdict")
    explain.add_argument("word_id")
    explain.add_argument("text")

    sub.add_parser("due", help="list words due for review and new words")

    status = sub.add_parser("status", help="show the progress of a word")
    status.add_argument("word_id")

    sub.add_parser("words", help="list all words with their status")

    reset = sub.add_parser("reset", help="reset the progress of a word")
    reset.add_argument("word_id")

    sub.add_parser("summary", help="count words per status")

    export = sub.add_parser("export", help="write all progress records to JSON")
    export.add_argument("path", nargs="?", type=Path, default=settings.paths.progress_export_file)

    import_ = sub.add_parser("import", help="replace all progress records from JSON")
    import_.add_argument("path", nargs="?", type=Path, default=settings.paths.progress_export_file)

    define = sub.add_parser("define", help="look up a word's definition")
    define.add_argument("word")

    return parser


def _describe(record: Optional[ProgressRecord]) -> str:
    if record is None:
        return "new"
    table = get_interval_table()
    if record.status is WordStatus.MASTERED:
        next_review = "mastered"
    else:
        next_review = record.next_review_at.strftime("%Y-%m-%d %H:%M")
    return (
        f"{record.status.value}, level {record.level} ({current_interval_days(record, table)} days), "
        f"streak {record.streak}, reviews {record.total_reviews}, next: {next_review}"
    )


def run_command(args: argparse.Namespace, db: Session) -> int:
    """Execute one parsed command against the database session."""
    catalog = WordService(db)
    store = SqlProgressStore(db)
    service = ReviewService(store, catalog=catalog, judge=LLMExplanationJudge())
    now = datetime.now(UTC)

    if args.command == "add":
        for word in catalog.add_words(args.words):
            print(f"{word.id}\t{word.text}")

    elif args.command == "learn":
        if args.word_id:
            word_ids = [args.word_id]
        else:
            word_ids = new_words_to_introduce(
                store, catalog.word_ids(), settings.learning.new_words_per_session
            )
        for word_id in word_ids:
            record = service.start_learning(word_id, now)
            print(f"{word_id}\t{_describe(record)}")

    elif args.command == "review":
        record = service.submit_review(args.word_id, args.remembered, now)
        print(f"{args.word_id}\t{_describe(record)}")

    elif args.command == "explain":
        result = service.submit_explanation(args.word_id, args.text, now)
        print(f"{'Correct' if result.verdict.is_correct else 'Incorrect'}: {result.verdict.feedback}")
        print(f"{args.word_id}\t{_describe(result.record)}")

    elif args.command == "due":
        for record in words_for_review(store, now, settings.learning.review_words_per_session):
            print(f"review\t{record.word_id}\t{_describe(record)}")
        for word_id in new_words_to_introduce(store, catalog.word_ids(), settings.learning.new_words_per_session):
            print(f"new\t{word_id}")

    elif args.command == "status":
        print(f"{args.word_id}\t{_describe(store.get(args.word_id))}")

    elif args.command == "words":
        for word, word_status, record in all_words_with_status(store, catalog.list_words()):
            print(f"{word.text}\t{word_status.value}\t{_describe(record)}")

    elif args.command == "reset":
        if service.reset_word(args.word_id):
            print(f"{args.word_id} reset to new")
        else:
            print(f"{args.word_id} had no progress")

    elif args.command == "summary":
        for word_status, count in progress_summary(store, catalog.word_ids()).items():
            print(f"{word_status.value}\t{count}")

    elif args.command == "export":
        count = export_progress(store, args.path)
        print(f"Exported {count} records to {args.path}")

    elif args.command == "import":
        count = import_progress(store, args.path)
        print(f"Imported {count} records from {args.path}")

    elif args.command == "define":
        details = ContentGenerator.fetch_word_details(args.word)
        print(f"{details.text}: {details.definition}")
        print(f"Example: {details.example_sentence}")
        if details.synonyms:
            print(f"Synonyms: {', '.join(details.synonyms)}")
        if details.antonyms:
            print(f"Antonyms: {', '.join(details.antonyms)}")

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Run the command line interface."""
    args = build_parser().parse_args(argv)

    ensure_directories()
    setup_logging(level=args.log_level or settings.logging.level)
    if settings.monitoring.metrics_port:
        start_monitoring(settings.monitoring.metrics_port)

    init_db()
    db = SessionLocal()
    try:
        return run_command(args, db)
    except (
        MissingRecordError,
        UnknownWordError,
        DefinitionUnavailableError,
        JudgeUnavailableError,
        ValueError,
    ) as e:
        logger.error(str(e))
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
