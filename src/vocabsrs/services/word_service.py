"""Service for managing words in the catalog."""
import logging
import re
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from vocabsrs.models.models import Word
from vocabsrs.models.review_models import WordDetails

logger = logging.getLogger(__name__)


def make_word_id(text: str) -> str:
    """Derive the catalog id of a word from its text."""
    word_id = re.sub(r"[^a-z0-9]+", "-", text.strip().lower()).strip("-")
    if not word_id:
        raise ValueError(f"Cannot derive a word id from {text!r}")
    return word_id


class WordService:
    """Service for managing words in the catalog."""

    def __init__(self, db: Session):
        """Initialize the service with a database session."""
        self.db = db

    def get_word(self, word_id: str) -> Optional[Word]:
        """Get a word by its ID."""
        return self.db.query(Word).filter(Word.id == word_id).first()

    def get_word_by_text(self, text: str) -> Optional[Word]:
        """Get a word by its text, ignoring case."""
        return self.db.query(Word).filter(func.lower(Word.text) == text.strip().lower()).first()

    def add_word(
        self,
        text: str,
        definition: Optional[str] = None,
        example_sentence: Optional[str] = None,
    ) -> Word:
        """Add a word to the catalog, or return it if it is already there."""
        text = text.strip()
        existing_word = self.get_word_by_text(text)
        if existing_word:
            return existing_word

        word_id = make_word_id(text)
        if self.get_word(word_id):
            raise ValueError(f"Word id {word_id!r} is already used by another word")

        word = Word(
            id=word_id,
            text=text,
            definition=definition,
            example_sentence=example_sentence,
        )
        self.db.add(word)
        self.db.commit()
        self.db.refresh(word)
        logger.info(f"Word added to catalog: {word.text} ({word.id})")
        return word

    def add_words(self, texts: List[str]) -> List[Word]:
        """Add multiple words at once, skipping blanks."""
        return [self.add_word(text) for text in texts if text.strip()]

    def list_words(self) -> List[Word]:
        """Get every catalog word sorted by text."""
        return self.db.query(Word).order_by(func.lower(Word.text)).all()

    def word_ids(self) -> List[str]:
        """Get the ids of every catalog word."""
        return [word_id for (word_id,) in self.db.query(Word.id).order_by(Word.id).all()]

    def get_word_count(self) -> int:
        """Get the count of words in the catalog."""
        return self.db.query(Word).count()

    def update_details(self, word_id: str, details: WordDetails) -> Optional[Word]:
        """Store fetched definition and example of a word."""
        word = self.get_word(word_id)
        if not word:
            return None

        word.definition = details.definition
        word.example_sentence = details.example_sentence
        self.db.commit()
        self.db.refresh(word)
        return word

    def delete_word(self, word_id: str) -> bool:
        """Delete a word from the catalog."""
        word = self.get_word(word_id)
        if not word:
            return False

        self.db.delete(word)
        self.db.commit()
        return True
