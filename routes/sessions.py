from fastapi import APIRouter, Depends, status

from db.database import get_db
from models.card import Card
from models.review import GradeSubmit, SessionStart, SessionStats, SessionView
from utils import study
from utils.sm2 import utcnow

router = APIRouter()

def _session_view(session) -> SessionView:
    return SessionView(
        **session.stats(utcnow()),
        queue=list(session.queue),
        current_card_id=session.current_card_id,
    )

@router.post("", response_model=SessionView, status_code=status.HTTP_201_CREATED)
async def start_session(payload: SessionStart, conn = Depends(get_db)):
    """Start a study session over the deck's due cards."""
    session = study.start_session(conn, payload.deck_id)
    return _session_view(session)

@router.get("/{session_id}", response_model=SessionView)
async def get_session(session_id: str):
    return _session_view(study.get_session(session_id))

@router.post("/{session_id}/grade")
async def submit_grade(session_id: str, payload: GradeSubmit, conn = Depends(get_db)):
    """Grade the current card and advance the session."""
    result = study.submit_grade(
        conn,
        session_id,
        payload.resolved_quality(),
        card_id=payload.card_id,
        answer_seconds=payload.answer_seconds,
    )
    return {
        "card": Card.from_record(result["card"]),
        "stats": SessionStats(**result["stats"]),
    }

@router.post("/{session_id}/abort", response_model=SessionStats)
async def abort_session(session_id: str):
    return SessionStats(**study.abort_session(session_id))
