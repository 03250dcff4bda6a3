"""SQLAlchemy ORM models for the reading coach."""

from __future__ import annotations

import datetime as dt
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from readcoach.database import Base
from readcoach.services.paragraph import Category, Difficulty, Paragraph


# ---------------------------------------------------------------------------
# Practice paragraphs
# ---------------------------------------------------------------------------


class ParagraphRecord(Base):
    __tablename__ = "paragraphs"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    difficulty: Mapped[str] = mapped_column(String(20), nullable=False)  # beginner | intermediate | advanced
    category: Mapped[str] = mapped_column(String(20), nullable=False)  # general | business | academic | casual
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime, server_default=func.now()
    )

    sessions: Mapped[list["ReadingSessionRecord"]] = relationship(
        back_populates="paragraph"
    )

    def to_paragraph(self) -> Paragraph:
        return Paragraph(
            id=self.id,
            title=self.title,
            text=self.text,
            difficulty=Difficulty(self.difficulty),
            category=Category(self.category),
        )


# ---------------------------------------------------------------------------
# Finished reading sessions (summary only; live state is never stored)
# ---------------------------------------------------------------------------


class ReadingSessionRecord(Base):
    __tablename__ = "reading_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_key: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    paragraph_id: Mapped[str] = mapped_column(String(64), ForeignKey("paragraphs.id"))
    paragraph_title: Mapped[str] = mapped_column(String(300), nullable=False)
    difficulty: Mapped[str] = mapped_column(String(20), nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    total_words: Mapped[int] = mapped_column(Integer, nullable=False)
    correct_words: Mapped[int] = mapped_column(Integer, nullable=False)
    accuracy: Mapped[float] = mapped_column(Float, nullable=False)
    elapsed_seconds: Mapped[float] = mapped_column(Float, default=0.0)
    words_to_review: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # JSON list
    completed: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime, server_default=func.now()
    )

    paragraph: Mapped["ParagraphRecord"] = relationship(back_populates="sessions")


# ---------------------------------------------------------------------------
# Per-word progress aggregate
# ---------------------------------------------------------------------------


class WordProgress(Base):
    __tablename__ = "word_progress"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    word: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    total_attempts: Mapped[int] = mapped_column(Integer, default=0)
    correct_attempts: Mapped[int] = mapped_column(Integer, default=0)
    times_flagged: Mapped[int] = mapped_column(Integer, default=0)  # added to a review list
    mastery_level: Mapped[str] = mapped_column(
        String(20), default="new"
    )  # new | learning | needs_review | mastered
    last_practiced_at: Mapped[dt.datetime] = mapped_column(
        DateTime, server_default=func.now()
    )
