"""Fire-and-forget feedback notifications (haptics, sounds, UI flashes).

The reading session only announces events; what a client does with them is
its own business.  Nothing a sink returns is ever read.
"""

from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class FeedbackSink(Protocol):
    def word_advanced(self, index: int) -> None: ...

    def word_skipped(self, index: int) -> None: ...

    def word_flagged(self, word: str) -> None: ...


class LoggingFeedbackSink:
    """Default sink for sessions that have no client attached."""

    def word_advanced(self, index: int) -> None:
        logger.debug("feedback: advanced past word %d", index)

    def word_skipped(self, index: int) -> None:
        logger.debug("feedback: skipped word %d", index)

    def word_flagged(self, word: str) -> None:
        logger.debug("feedback: %r added to review list", word)


class RecordingFeedbackSink:
    """Collects events so a transport can forward them to the client."""

    def __init__(self) -> None:
        self.events: list[dict] = []

    def word_advanced(self, index: int) -> None:
        self.events.append({"event": "advanced", "word_index": index})

    def word_skipped(self, index: int) -> None:
        self.events.append({"event": "skipped", "word_index": index})

    def word_flagged(self, word: str) -> None:
        self.events.append({"event": "flagged", "word": word})

    def drain(self) -> list[dict]:
        events, self.events = self.events, []
        return events
