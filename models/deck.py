from pydantic import BaseModel
from typing import Optional
from datetime import datetime

class DeckBase(BaseModel):
    name: str
    subject: str = ""
    system_owned: bool = False

class DeckCreate(DeckBase):
    pass

class DeckSummary(BaseModel):
    total: int = 0
    due: int = 0
    new: int = 0

class Deck(DeckBase):
    id: int
    created_at: Optional[datetime] = None
    summary: Optional[DeckSummary] = None

    class Config:
        from_attributes = True
