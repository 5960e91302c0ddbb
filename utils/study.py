"""Study operations used by the routes: start, grade, abort, summarize."""
from __future__ import annotations

import logging
import random
import threading
from datetime import datetime, timedelta
from typing import Dict, Optional

from config import load_config
from db.repository import CardRepository
from models.deck import DeckSummary
from utils.deck_summary import summarize
from utils.errors import SessionNotFoundError
from utils.queue import build_queue, select_study_cards
from utils.session import StudySession
from utils.sm2 import utcnow

logger = logging.getLogger(__name__)

_SESSIONS: Dict[str, StudySession] = {}
_SESSIONS_LOCK = threading.Lock()


def _expired(session: StudySession, cutoff: datetime) -> bool:
    if session.is_closed:
        return session.finished_at is not None and session.finished_at < cutoff
    return session.last_activity_at < cutoff


def prune_sessions(now: datetime, retention_minutes: int) -> int:
    """Forget sessions idle for more than ``retention_minutes``.

    Closed sessions age from when they finished, active ones from their last
    grade (or start), so abandoned sessions are dropped too.
    """
    cutoff = now - timedelta(minutes=retention_minutes)
    with _SESSIONS_LOCK:
        stale = [
            session_id
            for session_id, session in _SESSIONS.items()
            if _expired(session, cutoff)
        ]
        for session_id in stale:
            del _SESSIONS[session_id]
    if stale:
        logger.info("Pruned %d idle sessions", len(stale))
    return len(stale)


def get_session(session_id: str) -> StudySession:
    with _SESSIONS_LOCK:
        session = _SESSIONS.get(session_id)
    if session is None:
        raise SessionNotFoundError(session_id)
    return session


def clear_sessions() -> None:
    with _SESSIONS_LOCK:
        _SESSIONS.clear()


def start_session(conn, deck_id: int, now: Optional[datetime] = None) -> StudySession:
    """Queue the deck's due cards (all reviews plus capped new cards) and open a session."""
    config = load_config()
    scheduler_cfg = config["scheduler"]
    session_cfg = config["session"]
    now = now or utcnow()
    prune_sessions(now, session_cfg["retention_minutes"])
    cards = CardRepository(conn).list(deck_id)
    selected = select_study_cards(
        cards,
        now,
        new_cap=session_cfg["new_card_cap"],
        review_cap=session_cfg["review_cap"],
    )
    session = StudySession(
        deck_id=deck_id,
        queue=build_queue(selected, now),
        started_at=now,
        rng=random.Random(scheduler_cfg["seed"]),
        fuzz=scheduler_cfg["fuzz"],
        requeue_lapsed=session_cfg["requeue_lapsed"],
    )
    with _SESSIONS_LOCK:
        _SESSIONS[session.id] = session
    logger.info("Session %s started on deck %s with %d cards", session.id, deck_id, len(session.queue))
    return session


def submit_grade(
    conn,
    session_id: str,
    quality: int,
    card_id: Optional[int] = None,
    answer_seconds: Optional[float] = None,
    now: Optional[datetime] = None,
) -> dict:
    session = get_session(session_id)
    now = now or utcnow()
    card = session.submit_grade(
        CardRepository(conn),
        quality,
        card_id=card_id,
        answer_seconds=answer_seconds,
        now=now,
    )
    return {"card": card, "stats": session.stats(now)}


def abort_session(session_id: str, now: Optional[datetime] = None) -> dict:
    session = get_session(session_id)
    session.abort(now)
    return session.stats(now)


def deck_summary(conn, deck_id: int, now: Optional[datetime] = None) -> DeckSummary:
    return summarize(CardRepository(conn).list(deck_id), now or utcnow())
