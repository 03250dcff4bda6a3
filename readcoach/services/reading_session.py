"""Word-by-word reading progress through one paragraph.

A speech-to-text source pushes its latest (cumulative) transcript on every
recognition tick.  Each tick is checked against the *current* paragraph word
only: a match moves the cursor on, a miss counts an attempt.  Important words
the learner gets stuck on (two failed ticks, or more than two seconds on the
word) go onto a review list; a word that is fixed again within a short grace
window is taken back off, so a single misheard tick is forgiven.

The session is a plain synchronous state machine with no locking.  One owner
must drive it; transports that receive transcripts on several tasks or
threads serialise calls themselves.  All mutators are no-ops once the
session is completed.
"""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import asdict, dataclass
from typing import Callable, Optional

from readcoach.services.feedback import FeedbackSink, LoggingFeedbackSink
from readcoach.services.normalizer import clean_word, normalise, tokenize
from readcoach.services.paragraph import Paragraph
from readcoach.services.word_classifier import SpacyTagger, WordClassifier
from readcoach.services.word_matcher import WordMatcher, default_matcher

logger = logging.getLogger(__name__)

Clock = Callable[[], float]

SENTENCE_ENDINGS = (".", "!", "?")
# Closing quotes/brackets that may follow the sentence punctuation.
_TRAILING_CLOSERS = "\"')]}’”»"


def ends_sentence(word: str) -> bool:
    return word.rstrip(_TRAILING_CLOSERS).endswith(SENTENCE_ENDINGS)


@dataclass(frozen=True)
class SessionThresholds:
    grace_seconds: float = 1.0  # self-correction window, mid-sentence word
    sentence_grace_seconds: float = 3.0  # self-correction window, first word of a sentence
    stuck_seconds: float = 2.0
    stuck_attempts: int = 2


class SessionState(str, enum.Enum):
    NOT_STARTED = "not_started"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


@dataclass
class WordAnalysis:
    word: str
    index: int
    is_correct: bool = False
    is_missing: bool = False
    is_mispronounced: bool = False
    is_current_word: bool = False
    is_important_word: bool = False
    is_proper_noun: bool = False
    spoken_text: Optional[str] = None

    def reset(self) -> None:
        """Back to unattempted; classification flags are kept."""
        self.is_correct = False
        self.is_missing = False
        self.is_mispronounced = False
        self.is_current_word = False
        self.spoken_text = None

    def to_dict(self) -> dict:
        return asdict(self)


_default_classifier: WordClassifier | None = None


def _get_default_classifier() -> WordClassifier:
    global _default_classifier
    if _default_classifier is None:
        _default_classifier = WordClassifier(SpacyTagger())
    return _default_classifier


class ReadingSession:
    def __init__(
        self,
        paragraph: Paragraph,
        *,
        matcher: Optional[WordMatcher] = None,
        classifier: Optional[WordClassifier] = None,
        clock: Clock = time.monotonic,
        feedback: Optional[FeedbackSink] = None,
        thresholds: Optional[SessionThresholds] = None,
    ) -> None:
        self.paragraph = paragraph
        self.matcher = matcher or default_matcher
        self.classifier = classifier or _get_default_classifier()
        self.clock = clock
        self.feedback = feedback or LoggingFeedbackSink()
        self.thresholds = thresholds or SessionThresholds()

        # Classified once here; words never change during a session
        self.word_analyses: list[WordAnalysis] = [
            WordAnalysis(
                word=word,
                index=i,
                is_current_word=i == 0,
                is_important_word=self.classifier.is_important(word),
                is_proper_noun=self.classifier.is_proper_noun(word),
            )
            for i, word in enumerate(paragraph.words)
        ]

        self.current_word_index = 0
        self.correct_words = 0
        self.current_word_attempts = 0
        self.current_word_start_time: Optional[float] = None

        # Review list: clean word -> time it was added
        self.incorrect_important_words: set[str] = set()
        self.incorrect_important_word_timestamps: dict[str, float] = {}

        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None
        self.is_paused = False
        self._pause_started_at: Optional[float] = None
        self._paused_seconds = 0.0

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def total_words(self) -> int:
        return len(self.word_analyses)

    @property
    def is_completed(self) -> bool:
        return self.current_word_index >= self.total_words

    @property
    def current_word(self) -> Optional[str]:
        if self.is_completed:
            return None
        return self.paragraph.words[self.current_word_index]

    @property
    def accuracy(self) -> float:
        if self.total_words == 0:
            return 0.0
        return self.correct_words / self.total_words

    @property
    def words_to_review(self) -> list[str]:
        return sorted(self.incorrect_important_words)

    @property
    def state(self) -> SessionState:
        if self.is_completed:
            return SessionState.COMPLETED
        if self.start_time is None:
            return SessionState.NOT_STARTED
        if self.is_paused:
            return SessionState.PAUSED
        return SessionState.ACTIVE

    @property
    def elapsed_seconds(self) -> float:
        """Reading time between start and end (or now), pauses excluded."""
        if self.start_time is None:
            return 0.0
        end = self.end_time if self.end_time is not None else self.clock()
        paused = self._paused_seconds
        if self.is_paused and self._pause_started_at is not None and self._pause_started_at < end:
            paused += end - self._pause_started_at
        return max(0.0, end - self.start_time - paused)

    # ------------------------------------------------------------------
    # Transcript analysis
    # ------------------------------------------------------------------

    def analyze_transcription(self, transcript: str) -> bool:
        """Check the latest transcript against the current word.

        Returns True iff the current word was just completed.
        """
        if self.is_completed or self.is_paused:
            return False
        if self.start_time is None:
            self.start()

        spoken = [w for w in (normalise(t) for t in tokenize(transcript)) if w]
        index = self.current_word_index
        expected = self.paragraph.words[index]
        analysis = self.word_analyses[index]

        matched = next((t for t in spoken if self.matcher.is_match(expected, t)), None)
        compound = False
        if matched is None and len(spoken) >= 2:
            compound = self.matcher.is_compound_match(expected, spoken[-2:])

        # A lone dash or ellipsis in the text cannot be read aloud
        is_correct = matched is not None or compound or not normalise(expected)

        analysis.is_correct = is_correct
        analysis.is_missing = not is_correct and not spoken
        analysis.is_mispronounced = not is_correct and bool(spoken)
        if compound:
            analysis.spoken_text = " ".join(spoken[-2:])
        else:
            analysis.spoken_text = matched

        now = self.clock()
        logger.debug(
            "word %d %r vs %d spoken tokens: correct=%s compound=%s",
            index, expected, len(spoken), is_correct, compound,
        )

        if is_correct:
            self._forgive_quick_correction(analysis, now)
            self.correct_words += 1
            self._advance_to_next_word()
            return True

        if self.current_word_start_time is None:
            self.current_word_start_time = now
        self.current_word_attempts += 1
        time_on_word = now - self.current_word_start_time

        if analysis.is_important_word and (
            self.current_word_attempts >= self.thresholds.stuck_attempts
            or time_on_word > self.thresholds.stuck_seconds
        ):
            self._flag_for_review(analysis, now)
        return False

    def _flag_for_review(self, analysis: WordAnalysis, now: float) -> None:
        word = clean_word(analysis.word)
        if not word or word in self.incorrect_important_words:
            return
        self.incorrect_important_words.add(word)
        self.incorrect_important_word_timestamps[word] = now
        logger.info(
            "Added %r to review list (attempts=%d)", word, self.current_word_attempts
        )
        self.feedback.word_flagged(word)

    def _forgive_quick_correction(self, analysis: WordAnalysis, now: float) -> None:
        """Take a word back off the review list if it was fixed right away."""
        if not analysis.is_important_word:
            return
        word = clean_word(analysis.word)
        if word not in self.incorrect_important_words:
            return
        flagged_at = self.incorrect_important_word_timestamps.get(word)
        if flagged_at is None:
            return

        if self.find_sentence_start(analysis.index) == analysis.index:
            grace = self.thresholds.sentence_grace_seconds
        else:
            grace = self.thresholds.grace_seconds
        if now - flagged_at <= grace:
            self.incorrect_important_words.discard(word)
            del self.incorrect_important_word_timestamps[word]
            logger.info(
                "Removed %r from review list (fixed after %.2fs)", word, now - flagged_at
            )

    def _advance_to_next_word(self, skipped: bool = False) -> None:
        index = self.current_word_index
        self.current_word_attempts = 0
        self.current_word_start_time = None

        self.word_analyses[index].is_current_word = False
        self.current_word_index += 1
        if self.current_word_index < self.total_words:
            self.word_analyses[self.current_word_index].is_current_word = True
        else:
            self._finish()

        if skipped:
            self.feedback.word_skipped(index)
        else:
            self.feedback.word_advanced(index)

    def _finish(self) -> None:
        now = self.clock()
        if self.is_paused:
            if self._pause_started_at is not None and self.end_time is None:
                self._paused_seconds += now - self._pause_started_at
            self.is_paused = False
            self._pause_started_at = None
        if self.end_time is None:
            self.end_time = now
        logger.info(
            "Paragraph %r completed: %d/%d correct, %d to review",
            self.paragraph.id,
            self.correct_words,
            self.total_words,
            len(self.incorrect_important_words),
        )

    # ------------------------------------------------------------------
    # Sentence boundaries
    # ------------------------------------------------------------------

    def find_sentence_start(self, index: Optional[int] = None) -> int:
        """Index of the first word of the sentence containing *index*.

        Defaults to the current word.  Only words before *index* are looked
        at, so the search is bounded by the reader's position.
        """
        if index is None:
            index = self.current_word_index
        words = self.paragraph.words
        for i in range(min(index, len(words)) - 1, -1, -1):
            if ends_sentence(words[i]):
                return i + 1
        return 0

    def reset_to_sentence_start(self) -> None:
        """Rewind the cursor to the start of the current sentence."""
        if self.is_completed:
            return
        start = self.find_sentence_start()
        logger.info(
            "Rewinding from word %d to sentence start %d", self.current_word_index, start
        )

        self.current_word_index = start
        self.current_word_attempts = 0
        self.current_word_start_time = None
        for analysis in self.word_analyses[start:]:
            analysis.reset()
        self.word_analyses[start].is_current_word = True
        self.correct_words = sum(1 for a in self.word_analyses[:start] if a.is_correct)

    # ------------------------------------------------------------------
    # Skipping
    # ------------------------------------------------------------------

    def skip_current_word(self) -> None:
        """Move past the current word without crediting or flagging it."""
        if self.is_completed:
            return
        logger.info("Skipping word %d %r", self.current_word_index, self.current_word)
        self._advance_to_next_word(skipped=True)

    def skip_to_end(self) -> None:
        """Give up on the paragraph; earlier verdicts are left as they are."""
        if self.is_completed:
            return
        logger.info(
            "Skipping to end from word %d of %d", self.current_word_index, self.total_words
        )
        self.word_analyses[self.current_word_index].is_current_word = False
        self.current_word_index = self.total_words
        self.current_word_attempts = 0
        self.current_word_start_time = None
        self._finish()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Begin (or, after :meth:`stop`, continue) listening."""
        if self.is_completed:
            return
        if self.start_time is None:
            self.start_time = self.clock()
        elif self.is_paused:
            self.resume()
        self.end_time = None

    def pause(self) -> None:
        if self.is_completed or self.is_paused or self.start_time is None:
            return
        self.is_paused = True
        self._pause_started_at = self.clock()

    def resume(self) -> None:
        if self.is_completed or not self.is_paused:
            return
        now = self.clock()
        span = now - self._pause_started_at if self._pause_started_at is not None else 0.0
        self._paused_seconds += span
        # Time spent paused does not count towards being stuck
        if self.current_word_start_time is not None:
            self.current_word_start_time += span
        self.is_paused = False
        self._pause_started_at = None
        # Listening again after stop(): the recorded end no longer holds
        self.end_time = None

    def stop(self) -> None:
        """Stop listening and record the end time; :meth:`start` or :meth:`resume` continues."""
        if self.is_completed or self.start_time is None:
            return
        self.pause()
        self.end_time = self._pause_started_at

    def restarted(self) -> "ReadingSession":
        """A fresh session over the same paragraph and collaborators."""
        return ReadingSession(
            self.paragraph,
            matcher=self.matcher,
            classifier=self.classifier,
            clock=self.clock,
            feedback=self.feedback,
            thresholds=self.thresholds,
        )

    def to_dict(self) -> dict:
        return {
            "paragraph_id": self.paragraph.id,
            "state": self.state.value,
            "current_word_index": self.current_word_index,
            "current_word": self.current_word,
            "total_words": self.total_words,
            "correct_words": self.correct_words,
            "accuracy": round(self.accuracy, 4),
            "words_to_review": self.words_to_review,
            "is_completed": self.is_completed,
            "elapsed_seconds": round(self.elapsed_seconds, 2),
            "words": [a.to_dict() for a in self.word_analyses],
        }
