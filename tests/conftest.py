"""Shared fixtures: a controllable clock, a dictionary tagger, session factories."""

import os
import tempfile

# Point the app at a throwaway database before anything imports the config
_TMP_DIR = tempfile.mkdtemp(prefix="readcoach-tests-")
os.environ["READCOACH_DB_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TMP_DIR, 'test.db')}"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from readcoach.services.feedback import RecordingFeedbackSink  # noqa: E402
from readcoach.services.paragraph import Paragraph  # noqa: E402
from readcoach.services.reading_session import ReadingSession  # noqa: E402
from readcoach.services.word_classifier import WordClassifier, WordTag  # noqa: E402


FUNCTION_WORDS = {
    "the", "a", "an", "and", "of", "to", "in", "on", "at", "for", "with",
    "by", "is", "was", "were", "it", "he", "she", "i", "my", "we", "or", "but",
}


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def set(self, value: float) -> None:
        self.now = value

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTagger:
    """Function words get no tags, listed names are proper nouns, the rest nouns."""

    def __init__(self, proper_nouns=()) -> None:
        self.proper_nouns = set(proper_nouns)
        self.calls: list[str] = []

    def tag(self, token: str) -> frozenset:
        self.calls.append(token)
        if token in self.proper_nouns:
            return frozenset({WordTag.NOUN, WordTag.PROPER_NOUN})
        if token.lower() in FUNCTION_WORDS:
            return frozenset()
        return frozenset({WordTag.NOUN})


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def tagger():
    return FakeTagger(proper_nouns={"Tom"})


@pytest.fixture
def classifier(tagger):
    return WordClassifier(tagger)


@pytest.fixture
def feedback():
    return RecordingFeedbackSink()


@pytest.fixture
def make_session(clock, classifier, feedback):
    """Factory: make_session("Some text.", thresholds=...) -> ReadingSession."""

    def _make(text: str, **kwargs) -> ReadingSession:
        paragraph = Paragraph(id="test", title="Test paragraph", text=text)
        return ReadingSession(
            paragraph,
            classifier=classifier,
            clock=clock,
            feedback=feedback,
            **kwargs,
        )

    return _make


def read_words(session: ReadingSession, count: int) -> None:
    """Read the next *count* words correctly, one word per tick."""
    for _ in range(count):
        assert session.analyze_transcription(session.current_word)


def assert_invariants(session: ReadingSession) -> None:
    assert session.correct_words <= session.current_word_index <= session.total_words
    current = [a.index for a in session.word_analyses if a.is_current_word]
    if session.is_completed:
        assert current == []
    else:
        assert current == [session.current_word_index]
    assert set(session.incorrect_important_word_timestamps) == session.incorrect_important_words


@pytest.fixture
def client(classifier):
    """TestClient over the full app, with the fake tagger swapped in."""
    from main import app
    from readcoach.routes.sessions import get_classifier

    app.dependency_overrides[get_classifier] = lambda: classifier
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
