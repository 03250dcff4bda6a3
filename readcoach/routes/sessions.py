"""Reading session APIs, including the WebSocket that receives transcripts."""

from __future__ import annotations

import asyncio
import json
import logging
import time
import uuid
from dataclasses import dataclass, field

from fastapi import APIRouter, Depends, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from readcoach.config import settings
from readcoach.database import async_session, get_db
from readcoach.routes.paragraphs import load_paragraph
from readcoach.services.feedback import RecordingFeedbackSink
from readcoach.services.progress import (
    list_review_words,
    load_session_summary,
    save_session_summary,
)
from readcoach.services.reading_session import ReadingSession
from readcoach.services.scoring import (
    SessionSummary,
    build_summary,
    completion_message,
    feedback_message,
)
from readcoach.services.word_classifier import SpacyTagger, WordClassifier

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# In-memory registry of live sessions
# ---------------------------------------------------------------------------


@dataclass
class LiveSession:
    session_id: str
    session: ReadingSession
    feedback: RecordingFeedbackSink
    # Single writer: every mutation of `session` happens under this lock
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    completion_sent: bool = False
    saved: bool = False
    restarts: int = 0
    connections: int = 0
    touched_at: float = field(default_factory=time.monotonic)

    @property
    def record_key(self) -> str:
        """Storage key of the current run; a restart after saving starts a new run."""
        if self.restarts == 0:
            return self.session_id
        return f"{self.session_id}.{self.restarts}"


_live_sessions: dict[str, LiveSession] = {}

_classifier: WordClassifier | None = None


def get_classifier() -> WordClassifier:
    """FastAPI dependency: the shared (memoising) word classifier."""
    global _classifier
    if _classifier is None:
        _classifier = WordClassifier(SpacyTagger(settings.spacy_model))
    return _classifier


def evict_idle_sessions(now: float | None = None) -> list[str]:
    """Drop sessions nobody is connected to that have been idle past the TTL."""
    if now is None:
        now = time.monotonic()
    ttl = settings.live_session_ttl_seconds
    idle = [
        session_id
        for session_id, live in _live_sessions.items()
        if live.connections == 0 and now - live.touched_at > ttl
    ]
    for session_id in idle:
        _live_sessions.pop(session_id, None)
    if idle:
        logger.info("Evicted %d idle session(s): %s", len(idle), ", ".join(idle))
    return idle


def _snapshot(live: LiveSession) -> dict:
    return {"type": "state", **live.session.to_dict(), "feedback": live.feedback.drain()}


def _finish_message(summary: SessionSummary) -> str:
    if summary.completed:
        return completion_message(summary.words_to_review)
    return feedback_message(summary.accuracy)


async def _save(db: AsyncSession, live: LiveSession) -> SessionSummary:
    """Persist the current run. Caller holds ``live.lock``; saving twice is a no-op."""
    summary = build_summary(live.session)
    await save_session_summary(db, live.record_key, summary, live.session.word_analyses)
    live.saved = True
    return summary


# ---- Create / inspect / finish ----


@router.post("/sessions")
async def create_session(
    request: Request,
    db: AsyncSession = Depends(get_db),
    classifier: WordClassifier = Depends(get_classifier),
):
    """Open a reading session. Body: {paragraph_id: str}."""
    evict_idle_sessions()

    body = await request.json()
    paragraph_id = body.get("paragraph_id")

    paragraph = await load_paragraph(db, paragraph_id) if paragraph_id else None
    if paragraph is None:
        return JSONResponse({"error": "Paragraph not found"}, status_code=404)

    feedback = RecordingFeedbackSink()
    # Classifying the words may hit the tagger; keep it off the event loop
    session = await asyncio.to_thread(
        ReadingSession,
        paragraph,
        classifier=classifier,
        feedback=feedback,
        thresholds=settings.session_thresholds(),
    )
    session_id = uuid.uuid4().hex[:12]
    _live_sessions[session_id] = LiveSession(
        session_id=session_id, session=session, feedback=feedback
    )
    logger.info(
        "Session %s opened: paragraph=%s words=%d", session_id, paragraph.id, session.total_words
    )

    return JSONResponse({"session_id": session_id, **session.to_dict()})


@router.get("/sessions/{session_id}")
async def get_session(session_id: str):
    live = _live_sessions.get(session_id)
    if live is None:
        return JSONResponse({"error": "Session not found"}, status_code=404)
    return JSONResponse(live.session.to_dict())


@router.post("/sessions/{session_id}/finish")
async def finish_session(session_id: str, db: AsyncSession = Depends(get_db)):
    """Stop the session, persist its summary and forget the live state.

    A session that is no longer live but was saved (finished before, or
    completed and then disconnected) answers with its latest stored run.
    """
    live = _live_sessions.get(session_id)
    if live is None:
        summary = await load_session_summary(db, session_id)
        if summary is None:
            return JSONResponse({"error": "Session not found"}, status_code=404)
    else:
        async with live.lock:
            live.session.stop()
            try:
                summary = await _save(db, live)
            except Exception as e:
                logger.exception("Saving session %s failed", session_id)
                return JSONResponse({"error": str(e)}, status_code=500)
            _live_sessions.pop(session_id, None)

    return JSONResponse({
        "session_id": session_id,
        "summary": summary.to_dict(),
        "message": _finish_message(summary),
    })


@router.get("/review-words")
async def review_words(db: AsyncSession = Depends(get_db)):
    words = await list_review_words(db, limit=settings.review_words_limit)
    return JSONResponse({"words": words})


# ---- WebSocket: transcripts in, session state out ----


def _apply_command(session: ReadingSession, message: dict) -> str | None:
    """Apply one client command. Returns an error string for unknown input."""
    msg_type = message.get("type")
    if msg_type == "transcript":
        text = message.get("text", "")
        if not isinstance(text, str):
            return "transcript text must be a string"
        session.analyze_transcription(text)
    elif msg_type == "start":
        session.start()
    elif msg_type == "pause":
        session.pause()
    elif msg_type == "resume":
        session.resume()
    elif msg_type == "stop":
        session.stop()
    elif msg_type == "skip":
        session.skip_current_word()
    elif msg_type == "skip_to_end":
        session.skip_to_end()
    elif msg_type == "rewind":
        session.reset_to_sentence_start()
    else:
        return f"Unknown command: {msg_type!r}"
    return None


def _restart(live: LiveSession) -> None:
    if live.saved:
        live.restarts += 1
        live.saved = False
    live.session = live.session.restarted()
    live.completion_sent = False


async def _send_completion(websocket: WebSocket, live: LiveSession) -> None:
    """Save the finished run, then tell the client. Caller holds ``live.lock``."""
    live.completion_sent = True
    try:
        async with async_session() as db:
            summary = await _save(db, live)
    except Exception:
        # Stays live and unsaved; /finish can retry
        logger.exception("Saving completed session %s failed", live.session_id)
        summary = build_summary(live.session)
    await websocket.send_json({
        "type": "complete",
        "summary": summary.to_dict(),
        "message": completion_message(summary.words_to_review),
    })


@router.websocket("/ws/sessions/{session_id}")
async def reading_session_ws(websocket: WebSocket, session_id: str):
    """
    Drive a live session from a speech-to-text client.

    Client sends JSON text frames:
      {"type": "transcript", "text": "..."}  latest cumulative transcript
      {"type": "start" | "pause" | "resume" | "stop"}
      {"type": "skip" | "skip_to_end" | "rewind" | "restart"}

    Server sends:
      {"type": "state", ...session snapshot, "feedback": [...]}
      {"type": "complete", "summary": {...}, "message": str}   once per run
      {"type": "error", "message": str}

    A run is saved as soon as it completes; once its last client leaves, the
    session is dropped from memory.  If the session is finished elsewhere the
    socket gets an error frame and is closed.
    """
    await websocket.accept()

    live = _live_sessions.get(session_id)
    if live is None:
        await websocket.send_json({"type": "error", "message": "Session not found"})
        await websocket.close()
        return

    logger.info("Session %s: client connected", session_id)
    live.connections += 1
    try:
        while True:
            raw = await websocket.receive_text()
            if _live_sessions.get(session_id) is not live:
                logger.info("Session %s: finished elsewhere, closing socket", session_id)
                await websocket.send_json({"type": "error", "message": "Session not found"})
                await websocket.close()
                return
            live.touched_at = time.monotonic()

            try:
                message = json.loads(raw)
            except json.JSONDecodeError:
                await websocket.send_json({"type": "error", "message": "Invalid JSON"})
                continue
            if not isinstance(message, dict):
                await websocket.send_json({"type": "error", "message": "Expected a JSON object"})
                continue

            async with live.lock:
                if message.get("type") == "restart":
                    _restart(live)
                    error = None
                else:
                    error = _apply_command(live.session, message)

                if error:
                    await websocket.send_json({"type": "error", "message": error})
                    continue

                await websocket.send_json(_snapshot(live))

                if message.get("type") == "stop":
                    await websocket.send_json({
                        "type": "stopped",
                        "message": feedback_message(live.session.accuracy),
                    })

                if live.session.is_completed and not live.completion_sent:
                    await _send_completion(websocket, live)
    except WebSocketDisconnect:
        logger.info("Session %s: client disconnected", session_id)
    finally:
        live.connections -= 1
        live.touched_at = time.monotonic()
        if (
            live.connections == 0
            and live.saved
            and live.session.is_completed
            and _live_sessions.get(session_id) is live
        ):
            _live_sessions.pop(session_id, None)
            logger.info("Session %s: completed and saved, dropped from memory", session_id)
