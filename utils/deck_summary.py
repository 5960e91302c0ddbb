from datetime import datetime
from typing import Iterable

from models.deck import DeckSummary
from models.card import CardRecord


def summarize(cards: Iterable[CardRecord], now: datetime) -> DeckSummary:
    total = due = new = 0
    for card in cards:
        total += 1
        if card.srs.next_review_at <= now:
            due += 1
        if card.srs.repetitions == 0:
            new += 1
    return DeckSummary(total=total, due=due, new=new)


def percentage(part: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return round((part / total) * 100, 1)
