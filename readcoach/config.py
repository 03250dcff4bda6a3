"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from readcoach.services.reading_session import SessionThresholds

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = BASE_DIR / "data"


@dataclass(frozen=True)
class Settings:
    # --- Database ---
    database_url: str = os.getenv(
        "READCOACH_DB_URL", f"sqlite+aiosqlite:///{DATA_DIR / 'readcoach.db'}"
    )

    # --- Part-of-speech tagging ---
    spacy_model: str = os.getenv("READCOACH_SPACY_MODEL", "en_core_web_sm")

    # --- Reading session ---
    grace_seconds: float = float(os.getenv("READCOACH_GRACE_SECONDS", "1.0"))
    sentence_grace_seconds: float = float(
        os.getenv("READCOACH_SENTENCE_GRACE_SECONDS", "3.0")
    )
    stuck_seconds: float = float(os.getenv("READCOACH_STUCK_SECONDS", "2.0"))
    stuck_attempts: int = int(os.getenv("READCOACH_STUCK_ATTEMPTS", "2"))

    # --- Live sessions ---
    # Idle sessions without a connected client are dropped after this long
    live_session_ttl_seconds: float = float(
        os.getenv("READCOACH_LIVE_SESSION_TTL_SECONDS", "1800")
    )
    # Load the tagger and classify the seeded paragraphs at startup
    warm_classifier: bool = os.getenv("READCOACH_WARM_CLASSIFIER", "true").lower() in (
        "1", "true", "yes",
    )

    # --- Progress ---
    review_words_limit: int = 50

    def session_thresholds(self) -> SessionThresholds:
        return SessionThresholds(
            grace_seconds=self.grace_seconds,
            sentence_grace_seconds=self.sentence_grace_seconds,
            stuck_seconds=self.stuck_seconds,
            stuck_attempts=self.stuck_attempts,
        )


settings = Settings()

# Ensure directories exist
DATA_DIR.mkdir(parents=True, exist_ok=True)
