import logging
import sqlite3
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response

from db.database import get_db
from db.repository import CardRepository, deck_exists, from_db_ts
from models.deck import Deck, DeckCreate, DeckSummary
from utils.deck_summary import summarize
from utils.sm2 import utcnow
from utils.study import deck_summary

router = APIRouter()
logger = logging.getLogger(__name__)

def _deck_from_row(row) -> Deck:
    return Deck(
        id=row["id"],
        name=row["name"],
        subject=row["subject"],
        system_owned=bool(row["system_owned"]),
        created_at=from_db_ts(row["created_at"]),
    )

@router.post("", response_model=Deck, status_code=status.HTTP_201_CREATED)
async def create_deck(deck: DeckCreate, conn = Depends(get_db)):
    """Create new deck in DB."""
    name = deck.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Name is required")
    cursor = conn.cursor()
    try:
        cursor.execute(
            "INSERT INTO decks (name, subject, system_owned) VALUES (?, ?, ?)",
            (name, deck.subject.strip(), int(deck.system_owned)),
        )
        conn.commit()
    except sqlite3.IntegrityError:
        raise HTTPException(status_code=400, detail="Deck with this name already exists")
    cursor.execute("SELECT * FROM decks WHERE id = ?", (cursor.lastrowid,))
    return _deck_from_row(cursor.fetchone())

@router.get("", response_model=List[Deck])
async def list_decks(subject: Optional[str] = Query(default=None), conn = Depends(get_db)):
    """List all decks with their due/new/total counts."""
    cursor = conn.cursor()
    if subject:
        cursor.execute(
            "SELECT * FROM decks WHERE deleted_at IS NULL AND subject = ? ORDER BY name",
            (subject,),
        )
    else:
        cursor.execute("SELECT * FROM decks WHERE deleted_at IS NULL ORDER BY name")
    rows = cursor.fetchall()
    repository = CardRepository(conn)
    now = utcnow()
    decks = []
    for row in rows:
        deck = _deck_from_row(row)
        deck.summary = summarize(repository.list(deck.id), now)
        decks.append(deck)
    return decks

@router.get("/{deck_id}", response_model=Deck)
async def deck_detail(deck_id: int, conn = Depends(get_db)):
    cursor = conn.cursor()
    cursor.execute("SELECT * FROM decks WHERE id = ? AND deleted_at IS NULL", (deck_id,))
    row = cursor.fetchone()
    if not row:
        raise HTTPException(status_code=404, detail="Deck not found")
    deck = _deck_from_row(row)
    deck.summary = deck_summary(conn, deck_id)
    return deck

@router.get("/{deck_id}/summary", response_model=DeckSummary)
async def get_deck_summary(deck_id: int, conn = Depends(get_db)):
    return deck_summary(conn, deck_id)

@router.delete("/{deck_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_deck(
    deck_id: int,
    reassign_to: Optional[int] = Query(default=None),
    conn = Depends(get_db),
):
    """Soft-delete a deck; its cards move to ``reassign_to`` or are deleted with it."""
    if not deck_exists(conn, deck_id):
        raise HTTPException(status_code=404, detail="Deck not found")
    if reassign_to == deck_id:
        raise HTTPException(status_code=400, detail="Cannot reassign cards to the deck being deleted")
    cursor = conn.cursor()
    if reassign_to is not None:
        moved = CardRepository(conn).reassign(deck_id, reassign_to)
        logger.info("Moved %d cards from deck %s to deck %s", moved, deck_id, reassign_to)
    else:
        cursor.execute(
            "UPDATE cards SET deleted_at = datetime('now') WHERE deck_id = ? AND deleted_at IS NULL",
            (deck_id,),
        )
    cursor.execute(
        "UPDATE decks SET deleted_at = datetime('now') WHERE id = ? AND deleted_at IS NULL",
        (deck_id,),
    )
    conn.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
