"""Database models for the word catalog and learning progress."""
from sqlalchemy import Column, DateTime, Integer, String, Text

from vocabsrs.models.base import Base, TimestampMixin


class Word(Base, TimestampMixin):
    """Catalog word."""

    __tablename__ = "words"

    id = Column(String, primary_key=True)  # slug of the text, e.g. "abate"
    text = Column(String, nullable=False, unique=True)
    definition = Column(Text)
    example_sentence = Column(Text)

    def __repr__(self) -> str:
        return f"<Word {self.id}>"


class WordProgress(Base, TimestampMixin):
    """Stored progress record of one word."""

    __tablename__ = "word_progress"

    # Not a foreign key: the catalog is an external collaborator
    word_id = Column(String, primary_key=True)
    status = Column(String, nullable=False)  # learning, reviewing, mastered
    last_reviewed_at = Column(DateTime(timezone=True))
    next_review_at = Column(DateTime(timezone=True), index=True)
    interval_index = Column(Integer, nullable=False, default=0)
    streak = Column(Integer, nullable=False, default=0)
    total_reviews = Column(Integer, nullable=False, default=0)
