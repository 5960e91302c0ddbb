from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel

from utils.sm2 import CardStats, SRSState


class CardVariant(str, Enum):
    BASIC = "basic"
    BASIC_INVERTED = "basic_inverted"
    CLOZE = "cloze"
    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    TYPE_ANSWER = "type_answer"
    IMAGE_OCCLUSION = "image_occlusion"


@dataclass(frozen=True)
class CardRecord:
    """A card as held by the repository: opaque content plus scheduling state."""
    id: int
    deck_id: int
    variant: CardVariant
    srs: SRSState
    stats: CardStats = field(default_factory=CardStats)
    payload: Dict[str, Any] = field(default_factory=dict)
    version: int = 1
    created_at: Optional[datetime] = None


class CardCreate(BaseModel):
    variant: CardVariant = CardVariant.BASIC
    payload: Dict[str, Any] = {}


class Card(BaseModel):
    id: int
    deck_id: int
    variant: CardVariant
    payload: Dict[str, Any] = {}
    interval_days: float = 0.0
    repetitions: int = 0
    ease_factor: float = 2.5
    next_review_at: datetime
    last_reviewed_at: Optional[datetime] = None
    last_quality: Optional[int] = None
    total_reviews: int = 0
    correct_reviews: int = 0
    current_streak: int = 0
    average_answer_seconds: Optional[float] = None
    version: int = 1

    class Config:
        from_attributes = True

    @classmethod
    def from_record(cls, record: CardRecord) -> "Card":
        return cls(
            id=record.id,
            deck_id=record.deck_id,
            variant=record.variant,
            payload=record.payload,
            interval_days=record.srs.interval_days,
            repetitions=record.srs.repetitions,
            ease_factor=record.srs.ease_factor,
            next_review_at=record.srs.next_review_at,
            last_reviewed_at=record.srs.last_reviewed_at,
            last_quality=record.srs.last_quality,
            total_reviews=record.stats.total_reviews,
            correct_reviews=record.stats.correct_reviews,
            current_streak=record.stats.current_streak,
            average_answer_seconds=record.stats.average_answer_seconds,
            version=record.version,
        )
