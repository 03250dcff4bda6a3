"""Tests for session summaries and learner-facing messages."""

import pytest

from readcoach.services.scoring import build_summary, completion_message, feedback_message

from conftest import read_words


def test_summary_of_a_finished_session(make_session, clock):
    session = make_session("The cat sat.")
    session.start()
    clock.set(1.0)
    session.analyze_transcription("dog")
    clock.set(2.0)
    session.analyze_transcription("dog")
    session.skip_current_word()
    clock.set(4.0)
    read_words(session, 2)

    summary = build_summary(session)

    assert summary.paragraph_id == "test"
    assert summary.total_words == 3
    assert summary.correct_words == 2
    assert summary.accuracy == pytest.approx(2 / 3)
    assert summary.completed
    assert summary.elapsed_seconds == pytest.approx(4.0)
    assert summary.words_to_review == []

    data = summary.to_dict()
    assert data["accuracy_pct"] == 66.7
    assert data["difficulty"] == "beginner"
    assert data["category"] == "general"


def test_summary_keeps_review_words(make_session, clock):
    session = make_session("Zebras run.")
    session.analyze_transcription("moon")
    session.analyze_transcription("moon")
    session.skip_to_end()

    summary = build_summary(session)
    assert summary.words_to_review == ["Zebras"]
    assert summary.correct_words == 0
    assert summary.to_dict()["words_to_review"] == ["Zebras"]


@pytest.mark.parametrize(
    "accuracy, opening",
    [
        (1.0, "Excellent"),
        (0.9, "Excellent"),
        (0.75, "Good job"),
        (0.5, "Keep practicing"),
        (0.2, "Don't worry"),
        (0.0, "Don't worry"),
    ],
)
def test_feedback_message_tiers(accuracy, opening):
    assert feedback_message(accuracy).startswith(opening)


def test_completion_message():
    assert "perfectly" in completion_message([])
    message = completion_message(["cat", "park"])
    assert message.endswith("Words to practice: cat, park")
