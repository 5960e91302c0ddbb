from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timezone
from typing import List, Optional

from models.card import CardRecord, CardVariant
from utils.errors import CardNotFoundError, DeckNotFoundError, StaleStateError
from utils.sm2 import CardStats, SRSState, new_srs_state

logger = logging.getLogger(__name__)


def to_db_ts(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def from_db_ts(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def record_from_row(row: sqlite3.Row) -> CardRecord:
    average = row["average_answer_seconds"]
    return CardRecord(
        id=int(row["id"]),
        deck_id=int(row["deck_id"]),
        variant=CardVariant(row["variant"]),
        payload=json.loads(row["payload"] or "{}"),
        srs=SRSState(
            interval_days=float(row["interval_days"]),
            repetitions=int(row["repetitions"]),
            ease_factor=float(row["ease_factor"]),
            next_review_at=from_db_ts(row["next_review_at"]),
            last_reviewed_at=from_db_ts(row["last_reviewed_at"]),
            last_quality=row["last_quality"],
        ),
        stats=CardStats(
            total_reviews=int(row["total_reviews"]),
            correct_reviews=int(row["correct_reviews"]),
            current_streak=int(row["current_streak"]),
            average_answer_seconds=float(average) if average is not None else None,
        ),
        version=int(row["version"]),
        created_at=from_db_ts(row["created_at"]),
    )


def deck_exists(conn, deck_id: int) -> bool:
    cursor = conn.cursor()
    cursor.execute("SELECT 1 FROM decks WHERE id = ? AND deleted_at IS NULL", (deck_id,))
    return cursor.fetchone() is not None


class CardRepository:
    """Card lookup and versioned updates over a SQLite connection.

    ``update`` only succeeds when the stored version still matches the
    record's version, so two writers grading the same card cannot both win.
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def get(self, card_id: int) -> CardRecord:
        cursor = self.conn.cursor()
        cursor.execute("SELECT * FROM cards WHERE id = ? AND deleted_at IS NULL", (card_id,))
        row = cursor.fetchone()
        if not row:
            raise CardNotFoundError(card_id)
        return record_from_row(row)

    def list(self, deck_id: int) -> List[CardRecord]:
        if not deck_exists(self.conn, deck_id):
            raise DeckNotFoundError(deck_id)
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT * FROM cards WHERE deck_id = ? AND deleted_at IS NULL ORDER BY id",
            (deck_id,),
        )
        return [record_from_row(row) for row in cursor.fetchall()]

    def create(
        self,
        deck_id: int,
        variant: CardVariant = CardVariant.BASIC,
        payload: Optional[dict] = None,
        now: Optional[datetime] = None,
    ) -> CardRecord:
        if not deck_exists(self.conn, deck_id):
            raise DeckNotFoundError(deck_id)
        created_at = now or datetime.now(timezone.utc)
        srs = new_srs_state(created_at)
        cursor = self.conn.cursor()
        cursor.execute(
            """
            INSERT INTO cards (
                deck_id, variant, payload, interval_days, repetitions,
                ease_factor, next_review_at, created_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                deck_id,
                CardVariant(variant).value,
                json.dumps(payload or {}),
                srs.interval_days,
                srs.repetitions,
                srs.ease_factor,
                to_db_ts(srs.next_review_at),
                to_db_ts(created_at),
            ),
        )
        card_id = cursor.lastrowid
        self.conn.commit()
        return self.get(card_id)

    def update(
        self,
        card: CardRecord,
        srs: SRSState,
        stats: CardStats,
        answer_seconds: Optional[float] = None,
    ) -> CardRecord:
        """Persist a graded card and append it to the review log in one transaction."""
        cursor = self.conn.cursor()
        try:
            cursor.execute(
                """
                UPDATE cards
                SET interval_days = ?, repetitions = ?, ease_factor = ?,
                    next_review_at = ?, last_reviewed_at = ?, last_quality = ?,
                    total_reviews = ?, correct_reviews = ?, current_streak = ?,
                    average_answer_seconds = ?, version = version + 1
                WHERE id = ? AND version = ? AND deleted_at IS NULL
                """,
                (
                    srs.interval_days,
                    srs.repetitions,
                    srs.ease_factor,
                    to_db_ts(srs.next_review_at),
                    to_db_ts(srs.last_reviewed_at),
                    srs.last_quality,
                    stats.total_reviews,
                    stats.correct_reviews,
                    stats.current_streak,
                    stats.average_answer_seconds,
                    card.id,
                    card.version,
                ),
            )
            if cursor.rowcount == 0:
                self.conn.rollback()
                cursor.execute("SELECT 1 FROM cards WHERE id = ? AND deleted_at IS NULL", (card.id,))
                if cursor.fetchone() is None:
                    raise CardNotFoundError(card.id)
                logger.warning("Stale write rejected for card %s at version %s", card.id, card.version)
                raise StaleStateError(card.id, card.version)
            if srs.last_quality is not None:
                cursor.execute(
                    """
                    INSERT INTO reviews (
                        card_id, deck_id, quality, interval_days, ease_factor,
                        answer_seconds, reviewed_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        card.id,
                        card.deck_id,
                        srs.last_quality,
                        srs.interval_days,
                        srs.ease_factor,
                        answer_seconds,
                        to_db_ts(srs.last_reviewed_at),
                    ),
                )
            self.conn.commit()
        except sqlite3.Error:
            self.conn.rollback()
            raise
        return self.get(card.id)

    def reassign(self, from_deck_id: int, to_deck_id: int) -> int:
        if not deck_exists(self.conn, to_deck_id):
            raise DeckNotFoundError(to_deck_id)
        cursor = self.conn.cursor()
        cursor.execute(
            """
            UPDATE cards SET deck_id = ?, version = version + 1
            WHERE deck_id = ? AND deleted_at IS NULL
            """,
            (to_deck_id, from_deck_id),
        )
        return cursor.rowcount
