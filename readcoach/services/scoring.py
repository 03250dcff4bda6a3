"""Summaries of a reading session for the learner and for storage.

Accuracy is simply correct words over paragraph words; there is no points
economy.  The summary is what gets persisted, never the live session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from readcoach.services.reading_session import ReadingSession


@dataclass(frozen=True)
class SessionSummary:
    paragraph_id: str
    paragraph_title: str
    difficulty: str
    category: str
    total_words: int
    correct_words: int
    accuracy: float
    elapsed_seconds: float
    completed: bool
    words_to_review: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "paragraph_id": self.paragraph_id,
            "paragraph_title": self.paragraph_title,
            "difficulty": self.difficulty,
            "category": self.category,
            "total_words": self.total_words,
            "correct_words": self.correct_words,
            "accuracy": round(self.accuracy, 4),
            "accuracy_pct": round(self.accuracy * 100, 1),
            "elapsed_seconds": round(self.elapsed_seconds, 1),
            "completed": self.completed,
            "words_to_review": list(self.words_to_review),
        }


def build_summary(session: ReadingSession) -> SessionSummary:
    paragraph = session.paragraph
    return SessionSummary(
        paragraph_id=paragraph.id,
        paragraph_title=paragraph.title,
        difficulty=paragraph.difficulty.value,
        category=paragraph.category.value,
        total_words=session.total_words,
        correct_words=session.correct_words,
        accuracy=session.accuracy,
        elapsed_seconds=session.elapsed_seconds,
        completed=session.is_completed,
        words_to_review=session.words_to_review,
    )


def feedback_message(accuracy: float) -> str:
    """Spoken/displayed feedback when the learner stops reading."""
    if accuracy >= 0.9:
        return "Excellent reading! Your pronunciation was very accurate."
    if accuracy >= 0.7:
        return "Good job! You're making great progress with your pronunciation."
    if accuracy >= 0.5:
        return "Keep practicing! Focus on the highlighted words for improvement."
    return "Don't worry, pronunciation takes time. Try reading more slowly and clearly."


def completion_message(words_to_review: list[str]) -> str:
    if not words_to_review:
        return "Excellent! You've completed the paragraph perfectly!"
    return (
        "Great job! You completed the paragraph. "
        f"Words to practice: {', '.join(words_to_review)}"
    )
