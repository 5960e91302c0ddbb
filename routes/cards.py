from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from db.database import get_db
from db.repository import CardRepository
from models.card import Card, CardCreate

router = APIRouter()

@router.post("/{deck_id}/cards", response_model=Card, status_code=status.HTTP_201_CREATED)
async def create_card(deck_id: int, card: CardCreate, conn = Depends(get_db)):
    """Add a card to a deck; it is due immediately."""
    record = CardRepository(conn).create(deck_id, card.variant, card.payload)
    return Card.from_record(record)

@router.get("/{deck_id}/cards", response_model=List[Card])
async def list_cards(deck_id: int, conn = Depends(get_db)):
    return [Card.from_record(record) for record in CardRepository(conn).list(deck_id)]

@router.get("/{deck_id}/cards/{card_id}", response_model=Card)
async def get_card(deck_id: int, card_id: int, conn = Depends(get_db)):
    record = CardRepository(conn).get(card_id)
    if record.deck_id != deck_id:
        raise HTTPException(status_code=404, detail="Card not found")
    return Card.from_record(record)
