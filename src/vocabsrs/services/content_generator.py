"""Definition and example lookup using NLTK WordNet."""
import logging
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

import nltk
from nltk.corpus import wordnet

from vocabsrs.models.review_models import WordDetails

logger = logging.getLogger(__name__)

NO_DEFINITION = "No definition found."
NO_EXAMPLE = "No example sentence found."
LOOKUP_FAILED_DEFINITION = "Could not load definition for this word."
LOOKUP_FAILED_EXAMPLE = "Could not load example for this word."
MAX_RELATED_WORDS = 3


class DefinitionUnavailableError(RuntimeError):
    """Raised when a word's definition is required but WordNet could not be read."""


class ContentGenerator:
    """Service for looking up word content in WordNet.

    Lookups never raise. A failed lookup returns placeholder text with
    ``lookup_failed`` set, so callers that need real content can refuse it.
    """
    _last_check: Optional[datetime] = None
    _check_interval = timedelta(days=7)  # Check for updates every 7 days

    @classmethod
    def _ensure_wordnet(cls) -> None:
        """Download WordNet data if it is not installed yet."""
        current_time = datetime.now()
        if cls._last_check is not None and current_time - cls._last_check < cls._check_interval:
            return
        try:
            nltk.data.find("corpora/wordnet")
        except LookupError:
            nltk.download("wordnet", quiet=True)
            logger.info("Downloaded NLTK wordnet data")
        cls._last_check = current_time

    @staticmethod
    def _related_words(synsets, antonyms: bool = False) -> List[str]:
        words: List[str] = []
        for synset in synsets:
            for lemma in synset.lemmas():
                candidates = lemma.antonyms() if antonyms else [lemma]
                for candidate in candidates:
                    name = candidate.name().replace("_", " ")
                    if name not in words:
                        words.append(name)
        return words

    @classmethod
    def fetch_word_details(cls, word: str) -> WordDetails:
        """Get definition, example sentence, synonyms and antonyms of a word."""
        try:
            cls._ensure_wordnet()
            synsets = wordnet.synsets(word.replace(" ", "_"))
        except Exception as e:
            logger.error(f"Error fetching word details for {word!r}: {e}")
            return WordDetails(
                text=word,
                definition=LOOKUP_FAILED_DEFINITION,
                example_sentence=LOOKUP_FAILED_EXAMPLE,
                lookup_failed=True,
            )

        if not synsets:
            logger.info(f"No WordNet entry for word: {word}")
            return WordDetails(text=word, definition=NO_DEFINITION, example_sentence=NO_EXAMPLE)

        primary = synsets[0]
        examples = [example for synset in synsets for example in synset.examples()]
        synonyms = [w for w in cls._related_words(synsets) if w.lower() != word.lower()]
        antonyms = cls._related_words(synsets, antonyms=True)

        details = WordDetails(
            text=word,
            definition=primary.definition() or NO_DEFINITION,
            example_sentence=examples[0] if examples else NO_EXAMPLE,
            synonyms=synonyms[:MAX_RELATED_WORDS],
            antonyms=antonyms[:MAX_RELATED_WORDS],
        )
        logger.debug(f"Details fetched for word: {word}, details: {details}")
        return details

    @classmethod
    def fetch_multiple_word_details(cls, words: Iterable[str]) -> Dict[str, WordDetails]:
        """Get details for every requested word; each word gets an entry."""
        return {word: cls.fetch_word_details(word) for word in words}
