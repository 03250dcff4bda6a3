"""Tag paragraph words as "important" content words or function words.

Only important words end up on a learner's review list; stumbling over
"the" or "of" is not worth drilling.  Lexical class comes from a pluggable
part-of-speech tagger, spaCy by default.
"""

from __future__ import annotations

import enum
import logging
import threading
from typing import Iterable, Protocol

import spacy

from readcoach.services.normalizer import clean_word, normalise

logger = logging.getLogger(__name__)


class WordTag(str, enum.Enum):
    NOUN = "noun"
    VERB = "verb"
    ADJECTIVE = "adjective"
    ADVERB = "adverb"
    OTHER_WORD = "other_word"
    PROPER_NOUN = "proper_noun"


IMPORTANT_TAGS = frozenset({
    WordTag.NOUN,
    WordTag.VERB,
    WordTag.ADJECTIVE,
    WordTag.ADVERB,
    WordTag.OTHER_WORD,
})

# Short, frequent words that taggers sometimes call nouns or verbs.
STOP_WORDS = frozenset({"a", "an", "is", "for", "i", "my", "we"})


class Tagger(Protocol):
    def tag(self, token: str) -> frozenset[WordTag]:
        """Return the tags of a single token (empty when it has no content class)."""
        ...


# spaCy universal POS → our tags
_SPACY_POS_TAGS: dict[str, frozenset[WordTag]] = {
    "NOUN": frozenset({WordTag.NOUN}),
    "PROPN": frozenset({WordTag.NOUN, WordTag.PROPER_NOUN}),
    "VERB": frozenset({WordTag.VERB}),
    "AUX": frozenset({WordTag.VERB}),
    "ADJ": frozenset({WordTag.ADJECTIVE}),
    "ADV": frozenset({WordTag.ADVERB}),
    "X": frozenset({WordTag.OTHER_WORD}),
}


class SpacyTagger:
    """Single-token tagging with a spaCy pipeline, loaded on first use."""

    def __init__(self, model: str = "en_core_web_sm") -> None:
        self.model = model
        self._nlp = None
        # Sessions are built on worker threads; one pipeline call at a time
        self._lock = threading.Lock()

    def _load(self):
        if self._nlp is None:
            try:
                self._nlp = spacy.load(self.model, disable=["parser", "ner", "lemmatizer"])
            except OSError:
                # Model package not installed yet
                from spacy.cli import download

                logger.info("Downloading spaCy model %r", self.model)
                download(self.model)
                self._nlp = spacy.load(self.model, disable=["parser", "ner", "lemmatizer"])
        return self._nlp

    def tag(self, token: str) -> frozenset[WordTag]:
        with self._lock:
            doc = self._load()(token)
        if len(doc) == 0:
            return frozenset()
        return _SPACY_POS_TAGS.get(doc[0].pos_, frozenset())


class WordClassifier:
    """Memoising wrapper around a :class:`Tagger`."""

    def __init__(self, tagger: Tagger) -> None:
        self.tagger = tagger
        self._cache: dict[str, frozenset[WordTag]] = {}

    def _tags(self, word: str) -> frozenset[WordTag]:
        tags = self._cache.get(word)
        if tags is None:
            tags = self.tagger.tag(word)
            self._cache[word] = tags
        return tags

    def is_important(self, token: str) -> bool:
        word = normalise(token)
        if not word or word in STOP_WORDS:
            return False
        # Tag the cased form so taggers can still see proper nouns
        return bool(self._tags(clean_word(token)) & IMPORTANT_TAGS)

    def is_proper_noun(self, token: str) -> bool:
        word = clean_word(token)
        if not word:
            return False
        return WordTag.PROPER_NOUN in self._tags(word)

    def warm(self, tokens: Iterable[str]) -> int:
        """Classify *tokens* ahead of time. Returns the number of newly tagged words."""
        before = len(self._cache)
        for token in tokens:
            self.is_important(token)
            self.is_proper_noun(token)
        return len(self._cache) - before
