"""Models for review-related data structures."""
from dataclasses import dataclass, field
from typing import List, Optional

from vocabsrs.models.progress import ProgressRecord


@dataclass
class WordDetails:
    """Display content of a word: definition, example and related words."""
    text: str
    definition: str
    example_sentence: str
    synonyms: List[str] = field(default_factory=list)
    antonyms: List[str] = field(default_factory=list)
    lookup_failed: bool = False  # placeholders stand in for the real content


@dataclass
class JudgeResult:
    """Verdict on a user's free-text explanation of a word."""
    is_correct: bool
    feedback: str
    confidence: Optional[float] = None


@dataclass
class ReviewResult:
    """Outcome of a judged review."""
    record: ProgressRecord
    verdict: JudgeResult
