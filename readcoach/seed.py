"""Seed the database with the default practice paragraphs."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from readcoach.models import ParagraphRecord
from readcoach.services.paragraph import Category, Difficulty, Paragraph

DEFAULT_PARAGRAPHS: tuple[Paragraph, ...] = (
    # Beginner
    Paragraph(
        id="day-at-the-park",
        title="A Day at the Park",
        text=(
            "The sun was shining brightly in the sky. Children were playing on "
            "the swings and slides. Birds were singing in the trees. It was a "
            "perfect day for a picnic."
        ),
        difficulty=Difficulty.BEGINNER,
        category=Category.CASUAL,
    ),
    Paragraph(
        id="morning-routine",
        title="My Morning Routine",
        text=(
            "I wake up at seven o'clock every morning. First, I brush my teeth "
            "and wash my face. Then I eat breakfast with my family. After that, "
            "I get dressed and go to work."
        ),
        difficulty=Difficulty.BEGINNER,
        category=Category.GENERAL,
    ),
    # Intermediate
    Paragraph(
        id="technology-in-education",
        title="Technology in Education",
        text=(
            "Modern technology has transformed the way we learn. Students can "
            "now access information instantly through the internet. Digital "
            "tools help teachers create engaging lessons. However, it's "
            "important to balance technology with traditional learning methods."
        ),
        difficulty=Difficulty.INTERMEDIATE,
        category=Category.ACADEMIC,
    ),
    Paragraph(
        id="healthy-living",
        title="Healthy Living",
        text=(
            "Maintaining a healthy lifestyle requires dedication and "
            "consistency. Regular exercise strengthens your body and improves "
            "mental health. Eating nutritious foods provides essential vitamins "
            "and minerals. Getting enough sleep is crucial for overall well-being."
        ),
        difficulty=Difficulty.INTERMEDIATE,
        category=Category.GENERAL,
    ),
    Paragraph(
        id="business-communication",
        title="Business Communication",
        text=(
            "Effective communication is essential in the business world. Clear "
            "emails and presentations help convey your message professionally. "
            "Active listening skills improve team collaboration. Regular "
            "feedback ensures everyone stays aligned with company goals."
        ),
        difficulty=Difficulty.INTERMEDIATE,
        category=Category.BUSINESS,
    ),
    # Advanced
    Paragraph(
        id="climate-change-impact",
        title="Climate Change Impact",
        text=(
            "Climate change represents one of the most pressing challenges of "
            "our time. Rising global temperatures affect ecosystems worldwide, "
            "leading to biodiversity loss and extreme weather events. "
            "Scientists emphasize the urgent need for sustainable practices and "
            "renewable energy adoption. International cooperation is crucial "
            "for implementing effective solutions."
        ),
        difficulty=Difficulty.ADVANCED,
        category=Category.ACADEMIC,
    ),
    Paragraph(
        id="global-market-dynamics",
        title="Global Market Dynamics",
        text=(
            "Contemporary global markets exhibit unprecedented "
            "interconnectedness through digital platforms and international "
            "trade networks. Economic fluctuations in one region can trigger "
            "cascading effects across multiple sectors worldwide. Investors "
            "must navigate complex regulatory environments while adapting to "
            "rapidly evolving technological landscapes."
        ),
        difficulty=Difficulty.ADVANCED,
        category=Category.BUSINESS,
    ),
)


async def seed_default_paragraphs(db: AsyncSession) -> None:
    """Insert any default paragraph that is not in the database yet."""
    result = await db.execute(select(ParagraphRecord.id))
    existing = set(result.scalars().all())

    for paragraph in DEFAULT_PARAGRAPHS:
        if paragraph.id in existing:
            continue
        db.add(
            ParagraphRecord(
                id=paragraph.id,
                title=paragraph.title,
                text=paragraph.text,
                difficulty=paragraph.difficulty.value,
                category=paragraph.category.value,
            )
        )

    await db.commit()
