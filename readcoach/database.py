"""Async SQLAlchemy engine and session helpers."""

from __future__ import annotations

import logging

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from readcoach.config import settings

logger = logging.getLogger(__name__)


def _configure_sqlite_engine(sync_engine: Engine) -> None:
    """Enforce foreign keys and wait on locks instead of failing fast."""

    @event.listens_for(sync_engine, "connect")
    def _set_sqlite_pragmas(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute("PRAGMA busy_timeout=30000")
        finally:
            cursor.close()


engine = create_async_engine(settings.database_url, echo=False)
if engine.dialect.name == "sqlite":
    _configure_sqlite_engine(engine.sync_engine)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Request-scoped session; rolled back if the handler raises."""
    async with async_session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    from readcoach.models import (  # noqa: F401 - registers the tables on Base
        ParagraphRecord,
        ReadingSessionRecord,
        WordProgress,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Tables ready on %s", engine.url.render_as_string(hide_password=True))


async def dispose_db() -> None:
    """Close pooled connections (called on application shutdown)."""
    await engine.dispose()
