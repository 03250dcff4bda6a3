"""Reading coach – FastAPI application entry point."""

from __future__ import annotations

import asyncio
import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI

from readcoach.config import settings
from readcoach.database import async_session, dispose_db, init_db
from readcoach.routes.paragraphs import load_paragraphs
from readcoach.routes.sessions import get_classifier
from readcoach.seed import seed_default_paragraphs

# --- Configure logging so readcoach.* loggers are visible alongside uvicorn ---
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:    %(name)s - %(message)s",
    stream=sys.stdout,
    force=True,  # override uvicorn's config
)

log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    # --- startup ---
    await init_db()
    async with async_session() as db:
        await seed_default_paragraphs(db)
        paragraphs = await load_paragraphs(db)
    log.info("Database ready, default paragraphs seeded")

    if settings.warm_classifier:
        # Loads the tagger model (downloading it if needed) off the event loop
        classifier = app.dependency_overrides.get(get_classifier, get_classifier)()
        tagged = await asyncio.to_thread(
            classifier.warm, [word for p in paragraphs for word in p.words]
        )
        log.info("Word classifier ready, %d words tagged", tagged)

    yield

    # --- shutdown ---
    await dispose_db()
    log.info("Database connections closed")


app = FastAPI(title="Reading Coach", version="0.1.0", lifespan=lifespan)

# --- Register routers ---
from readcoach.routes.paragraphs import router as paragraphs_router  # noqa: E402
from readcoach.routes.sessions import router as sessions_router  # noqa: E402

app.include_router(paragraphs_router, prefix="/api")
app.include_router(sessions_router, prefix="/api")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
