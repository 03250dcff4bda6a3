"""Tests for paragraphs and catalog filtering."""

import random

from readcoach.seed import DEFAULT_PARAGRAPHS
from readcoach.services.paragraph import (
    Category,
    Difficulty,
    Paragraph,
    filter_paragraphs,
    pick_random_paragraph,
)


def test_words_keep_punctuation():
    paragraph = Paragraph(id="p", title="T", text="Hello there, Tom.\nHow are you?")
    assert paragraph.words == ("Hello", "there,", "Tom.", "How", "are", "you?")


def test_empty_text_has_no_words():
    assert Paragraph(id="p", title="T", text="   ").words == ()


def test_to_dict():
    paragraph = Paragraph(
        id="p", title="T", text="One two.", difficulty=Difficulty.ADVANCED, category=Category.BUSINESS
    )
    assert paragraph.to_dict() == {
        "id": "p",
        "title": "T",
        "text": "One two.",
        "difficulty": "advanced",
        "category": "business",
        "word_count": 2,
    }


def test_filter_by_difficulty_and_category():
    advanced = filter_paragraphs(DEFAULT_PARAGRAPHS, difficulty=Difficulty.ADVANCED)
    assert {p.id for p in advanced} == {"climate-change-impact", "global-market-dynamics"}

    academic_intermediate = filter_paragraphs(
        DEFAULT_PARAGRAPHS, Difficulty.INTERMEDIATE, Category.ACADEMIC
    )
    assert [p.id for p in academic_intermediate] == ["technology-in-education"]

    assert len(filter_paragraphs(DEFAULT_PARAGRAPHS)) == len(DEFAULT_PARAGRAPHS)


def test_pick_random_paragraph():
    picked = pick_random_paragraph(
        DEFAULT_PARAGRAPHS, category=Category.CASUAL, rng=random.Random(1)
    )
    assert picked.id == "day-at-the-park"
    assert pick_random_paragraph([], difficulty=Difficulty.BEGINNER) is None
