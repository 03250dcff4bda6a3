"""Persist finished sessions and keep per-word progress up to date."""

from __future__ import annotations

import datetime as dt
import json
import logging
from typing import Any, Iterable

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from readcoach.models import ReadingSessionRecord, WordProgress
from readcoach.services.normalizer import normalise
from readcoach.services.reading_session import WordAnalysis
from readcoach.services.scoring import SessionSummary

logger = logging.getLogger(__name__)


def mastery_level(correct_attempts: int, total_attempts: int) -> str:
    if total_attempts == 0:
        return "new"
    accuracy = correct_attempts / total_attempts
    if accuracy < 0.3:
        return "new"
    if accuracy < 0.7:
        return "learning"
    if accuracy < 0.9:
        return "needs_review"
    return "mastered"


async def save_session_summary(
    db: AsyncSession,
    session_key: str,
    summary: SessionSummary,
    analyses: Iterable[WordAnalysis],
) -> ReadingSessionRecord:
    """Store *summary* and fold the session's word verdicts into WordProgress.

    Only words the learner actually reached count as attempts, and every
    review-list word adds one missed attempt on top.  Saving the
    same session key twice returns the existing record unchanged.
    """
    result = await db.execute(
        select(ReadingSessionRecord).where(ReadingSessionRecord.session_key == session_key)
    )
    existing = result.scalar_one_or_none()
    if existing is not None:
        return existing

    record = ReadingSessionRecord(
        session_key=session_key,
        paragraph_id=summary.paragraph_id,
        paragraph_title=summary.paragraph_title,
        difficulty=summary.difficulty,
        category=summary.category,
        total_words=summary.total_words,
        correct_words=summary.correct_words,
        accuracy=summary.accuracy,
        elapsed_seconds=summary.elapsed_seconds,
        words_to_review=json.dumps(summary.words_to_review),
        completed=summary.completed,
    )
    db.add(record)

    # word -> (attempts, correct) for this session
    tallies: dict[str, list[int]] = {}
    for analysis in analyses:
        attempted = analysis.is_correct or analysis.is_missing or analysis.is_mispronounced
        word = normalise(analysis.word)
        if not attempted or not word:
            continue
        tally = tallies.setdefault(word, [0, 0])
        tally[0] += 1
        tally[1] += int(analysis.is_correct)

    flagged = {normalise(w) for w in summary.words_to_review}
    now = dt.datetime.utcnow()

    for word in sorted(set(tallies) | flagged):
        attempts, correct = tallies.get(word, (0, 0))
        result = await db.execute(select(WordProgress).where(WordProgress.word == word))
        progress = result.scalar_one_or_none()
        if progress is None:
            progress = WordProgress(
                word=word,
                total_attempts=0,
                correct_attempts=0,
                times_flagged=0,
            )
            db.add(progress)
        progress.total_attempts += attempts
        progress.correct_attempts += correct
        if word in flagged:
            # Being stuck on a word counts as one missed attempt
            progress.total_attempts += 1
            progress.times_flagged += 1
        progress.mastery_level = mastery_level(
            progress.correct_attempts, progress.total_attempts
        )
        progress.last_practiced_at = now

    await db.commit()
    logger.info(
        "Saved session %s: paragraph=%s accuracy=%.2f review=%d words=%d",
        session_key,
        summary.paragraph_id,
        summary.accuracy,
        len(summary.words_to_review),
        len(tallies),
    )
    return record


async def list_review_words(db: AsyncSession, limit: int = 50) -> list[dict[str, Any]]:
    """Words that have been flagged and are not mastered yet, most-flagged first."""
    result = await db.execute(
        select(WordProgress)
        .where(WordProgress.times_flagged > 0)
        .where(WordProgress.mastery_level != "mastered")
        .order_by(WordProgress.times_flagged.desc(), WordProgress.word)
        .limit(limit)
    )
    return [
        {
            "word": p.word,
            "times_flagged": p.times_flagged,
            "total_attempts": p.total_attempts,
            "correct_attempts": p.correct_attempts,
            "mastery_level": p.mastery_level,
        }
        for p in result.scalars().all()
    ]


async def load_session_summary(db: AsyncSession, session_key: str) -> SessionSummary | None:
    """The latest stored run of a session.

    Runs after a restart are stored as ``<session_key>.<n>``.
    """
    result = await db.execute(
        select(ReadingSessionRecord)
        .where(
            or_(
                ReadingSessionRecord.session_key == session_key,
                ReadingSessionRecord.session_key.startswith(f"{session_key}.", autoescape=True),
            )
        )
        .order_by(ReadingSessionRecord.id.desc())
        .limit(1)
    )
    record = result.scalar_one_or_none()
    if record is None:
        return None
    return SessionSummary(
        paragraph_id=record.paragraph_id,
        paragraph_title=record.paragraph_title,
        difficulty=record.difficulty,
        category=record.category,
        total_words=record.total_words,
        correct_words=record.correct_words,
        accuracy=record.accuracy,
        elapsed_seconds=record.elapsed_seconds,
        completed=record.completed,
        words_to_review=json.loads(record.words_to_review or "[]"),
    )
