"""Study session state machine: walks a queue of cards, grading one at a time."""
from __future__ import annotations

import logging
import threading
import uuid
from collections import Counter
from datetime import datetime
from enum import Enum
from typing import List, Optional

from models.card import CardRecord
from utils.errors import CardNotFoundError, SessionClosedError
from utils.sm2 import LAPSE_INTERVAL_DAYS, PASSING_QUALITY, grade, update_stats, utcnow, validate_quality

logger = logging.getLogger(__name__)


class SessionStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ABORTED = "aborted"


class StudySession:
    """One run through a deck's queue.

    Holds only the queue, the position in it, the counters and the status.
    ``repository`` is passed per call so the session never keeps a
    connection alive between requests.
    """

    def __init__(
        self,
        deck_id: int,
        queue: List[int],
        started_at: Optional[datetime] = None,
        rng=None,
        fuzz: bool = True,
        requeue_lapsed: bool = False,
        session_id: Optional[str] = None,
    ):
        self.id = session_id or uuid.uuid4().hex
        self.deck_id = deck_id
        self.queue = list(queue)
        self.current_index = 0
        self.cards_graded = 0
        self.correct_count = 0
        self.grade_counts: Counter = Counter()
        self.started_at = started_at or utcnow()
        self.finished_at: Optional[datetime] = None
        self.last_activity_at = self.started_at
        self.rng = rng
        self.fuzz = fuzz
        self.requeue_lapsed = requeue_lapsed
        self.status = SessionStatus.ACTIVE if self.queue else SessionStatus.COMPLETED
        if not self.queue:
            self.finished_at = self.started_at
        self._lock = threading.Lock()

    @property
    def is_closed(self) -> bool:
        return self.status != SessionStatus.ACTIVE

    @property
    def current_card_id(self) -> Optional[int]:
        if self.is_closed or self.current_index >= len(self.queue):
            return None
        return self.queue[self.current_index]

    @property
    def remaining(self) -> int:
        return max(0, len(self.queue) - self.current_index)

    @property
    def accuracy(self) -> float:
        if self.cards_graded == 0:
            return 0.0
        return self.correct_count / self.cards_graded

    def duration_seconds(self, now: Optional[datetime] = None) -> float:
        end = self.finished_at or now or utcnow()
        return max(0.0, (end - self.started_at).total_seconds())

    def _ensure_open(self) -> None:
        if self.is_closed:
            raise SessionClosedError(self.id, self.status.value)

    def _advance(self, now: datetime) -> None:
        self.last_activity_at = now
        self.current_index += 1
        if self.current_index >= len(self.queue):
            self.status = SessionStatus.COMPLETED
            self.finished_at = now
            logger.info(
                "Session %s completed: %d graded, accuracy %.2f",
                self.id, self.cards_graded, self.accuracy,
            )

    def submit_grade(
        self,
        repository,
        quality: int,
        card_id: Optional[int] = None,
        answer_seconds: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> CardRecord:
        """Grade the current card, persist it and move to the next one.

        Raises InvalidGradeError or SessionClosedError without touching any
        state. CardNotFoundError for a card outside the queue leaves the
        session where it was; for a queued card missing from the repository
        the card is skipped. StaleStateError leaves the session on the same
        card so the caller can retry.
        """
        quality = validate_quality(quality)
        now = now or utcnow()
        with self._lock:
            self._ensure_open()
            current_id = self.queue[self.current_index]
            if card_id is not None and card_id != current_id:
                if card_id not in self.queue[self.current_index:]:
                    raise CardNotFoundError(card_id, "Card not in session queue")
                raise CardNotFoundError(card_id, f"Card is not the current card ({current_id})")
            try:
                card = repository.get(current_id)
            except CardNotFoundError:
                logger.warning("Session %s skipping missing card %s", self.id, current_id)
                self._advance(now)
                raise
            new_srs = grade(card.srs, quality, now, rng=self.rng, fuzz=self.fuzz)
            new_stats = update_stats(card.stats, quality, answer_seconds)
            updated = repository.update(card, new_srs, new_stats, answer_seconds=answer_seconds)
            self.cards_graded += 1
            self.grade_counts[quality] += 1
            if quality >= PASSING_QUALITY:
                self.correct_count += 1
            logger.debug(
                "Session %s graded card %s q=%d -> %.4f days",
                self.id, current_id, quality, new_srs.interval_days,
            )
            if self.requeue_lapsed and new_srs.interval_days <= LAPSE_INTERVAL_DAYS:
                self.queue.append(current_id)
            self._advance(now)
            return updated

    def abort(self, now: Optional[datetime] = None) -> None:
        with self._lock:
            self._ensure_open()
            self.status = SessionStatus.ABORTED
            self.finished_at = now or utcnow()
            self.last_activity_at = self.finished_at
            logger.info("Session %s aborted after %d cards", self.id, self.cards_graded)

    def stats(self, now: Optional[datetime] = None) -> dict:
        return {
            "session_id": self.id,
            "deck_id": self.deck_id,
            "status": self.status.value,
            "cards_graded": self.cards_graded,
            "correct_count": self.correct_count,
            "accuracy": self.accuracy,
            "duration_seconds": self.duration_seconds(now),
            "current_index": self.current_index,
            "queue_length": len(self.queue),
            "remaining": self.remaining,
            "grade_counts": dict(self.grade_counts),
        }
