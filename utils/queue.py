from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional

from models.card import CardRecord


def _queue_key(card: CardRecord):
    return (card.srs.next_review_at, card.id)


def build_queue(cards: Iterable[CardRecord], now: datetime) -> List[int]:
    """Order card ids most overdue first, ties broken by id. Nothing is filtered."""
    return [card.id for card in sorted(cards, key=_queue_key)]


def is_due(card: CardRecord, now: datetime) -> bool:
    return card.srs.next_review_at <= now


def is_unseen(card: CardRecord) -> bool:
    return card.srs.last_reviewed_at is None


def select_study_cards(
    cards: Iterable[CardRecord],
    now: datetime,
    new_cap: Optional[int] = None,
    review_cap: Optional[int] = None,
) -> List[CardRecord]:
    """All due cards, with never-reviewed and previously-reviewed cards capped separately.

    Caps keep the most overdue cards. ``None`` means no cap.
    """
    due = sorted((card for card in cards if is_due(card, now)), key=_queue_key)
    unseen = [card for card in due if is_unseen(card)]
    seen = [card for card in due if not is_unseen(card)]
    if new_cap is not None:
        unseen = unseen[:max(0, new_cap)]
    if review_cap is not None:
        seen = seen[:max(0, review_cap)]
    return seen + unseen
