"""Practice paragraph catalog API."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from readcoach.database import get_db
from readcoach.models import ParagraphRecord
from readcoach.services.paragraph import (
    Category,
    Difficulty,
    Paragraph,
    filter_paragraphs,
    pick_random_paragraph,
)

logger = logging.getLogger(__name__)

router = APIRouter()


async def load_paragraphs(db: AsyncSession) -> list[Paragraph]:
    result = await db.execute(
        select(ParagraphRecord).order_by(ParagraphRecord.created_at, ParagraphRecord.id)
    )
    return [row.to_paragraph() for row in result.scalars().all()]


async def load_paragraph(db: AsyncSession, paragraph_id: str) -> Optional[Paragraph]:
    result = await db.execute(
        select(ParagraphRecord).where(ParagraphRecord.id == paragraph_id)
    )
    row = result.scalar_one_or_none()
    return row.to_paragraph() if row else None


@router.get("/paragraphs")
async def list_paragraphs(
    difficulty: Optional[Difficulty] = None,
    category: Optional[Category] = None,
    db: AsyncSession = Depends(get_db),
):
    """List practice paragraphs, optionally filtered by difficulty and category."""
    paragraphs = filter_paragraphs(await load_paragraphs(db), difficulty, category)
    return JSONResponse({"paragraphs": [p.to_dict() for p in paragraphs]})


@router.get("/paragraphs/random")
async def random_paragraph(
    difficulty: Optional[Difficulty] = None,
    category: Optional[Category] = None,
    db: AsyncSession = Depends(get_db),
):
    paragraph = pick_random_paragraph(await load_paragraphs(db), difficulty, category)
    if paragraph is None:
        return JSONResponse({"error": "No matching paragraph"}, status_code=404)
    return JSONResponse(paragraph.to_dict())


@router.get("/paragraphs/{paragraph_id}")
async def get_paragraph(paragraph_id: str, db: AsyncSession = Depends(get_db)):
    paragraph = await load_paragraph(db, paragraph_id)
    if paragraph is None:
        return JSONResponse({"error": "Paragraph not found"}, status_code=404)
    return JSONResponse(paragraph.to_dict())
