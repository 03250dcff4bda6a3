"""Practice paragraphs and catalog filtering."""

from __future__ import annotations

import enum
import random
from dataclasses import dataclass
from functools import cached_property
from typing import Iterable, Optional

from readcoach.services.normalizer import tokenize


class Difficulty(str, enum.Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Category(str, enum.Enum):
    GENERAL = "general"
    BUSINESS = "business"
    ACADEMIC = "academic"
    CASUAL = "casual"


@dataclass(frozen=True)
class Paragraph:
    id: str
    title: str
    text: str
    difficulty: Difficulty = Difficulty.BEGINNER
    category: Category = Category.GENERAL

    @cached_property
    def words(self) -> tuple[str, ...]:
        """Whitespace tokens of the text.

        Punctuation is kept: sentence boundaries are found from the trailing
        ``.``, ``!`` or ``?`` of a word, and matching normalises it away.
        """
        return tuple(tokenize(self.text))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "text": self.text,
            "difficulty": self.difficulty.value,
            "category": self.category.value,
            "word_count": len(self.words),
        }


def filter_paragraphs(
    paragraphs: Iterable[Paragraph],
    difficulty: Optional[Difficulty] = None,
    category: Optional[Category] = None,
) -> list[Paragraph]:
    result = list(paragraphs)
    if difficulty is not None:
        result = [p for p in result if p.difficulty == difficulty]
    if category is not None:
        result = [p for p in result if p.category == category]
    return result


def pick_random_paragraph(
    paragraphs: Iterable[Paragraph],
    difficulty: Optional[Difficulty] = None,
    category: Optional[Category] = None,
    rng: Optional[random.Random] = None,
) -> Optional[Paragraph]:
    candidates = filter_paragraphs(paragraphs, difficulty, category)
    if not candidates:
        return None
    return (rng or random).choice(candidates)
