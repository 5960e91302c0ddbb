"""SM-2 scheduling with fuzz and quality multipliers.

Quality ratings:
  0 - total blackout
  1 - incorrect, forgot
  2 - incorrect but close ("hard")
  3 - correct with effort ("good")
  4 - correct, easy
  5 - correct, instant
"""
from __future__ import annotations

import math
import random
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Optional

from utils.errors import InvalidGradeError

MIN_EASE_FACTOR = 1.3
MAX_EASE_FACTOR = 2.5
PASSING_QUALITY = 3
LAPSE_INTERVAL_DAYS = 10 / (24 * 60)
HARD_INTERVAL_FACTOR = 0.6
FUZZ_RATIO = 0.05
QUALITY_MULTIPLIERS = {5: 1.30, 4: 1.15, 3: 1.00}


@dataclass(frozen=True)
class SRSState:
    interval_days: float
    repetitions: int
    ease_factor: float
    next_review_at: datetime
    last_reviewed_at: Optional[datetime] = None
    last_quality: Optional[int] = None


@dataclass(frozen=True)
class CardStats:
    total_reviews: int = 0
    correct_reviews: int = 0
    current_streak: int = 0
    average_answer_seconds: Optional[float] = None


def new_srs_state(created_at: datetime) -> SRSState:
    """State of a freshly created card: due immediately."""
    return SRSState(
        interval_days=0.0,
        repetitions=0,
        ease_factor=MAX_EASE_FACTOR,
        next_review_at=created_at,
    )


def map_grade_to_quality(grade: str) -> int:
    """Map a study-screen button to an SM-2 quality score (0-5)."""
    mapping = {
        'again': 0,
        'hard': 1,
        'good': 3,
        'easy': 5,
    }
    try:
        return mapping[grade]
    except KeyError:
        raise InvalidGradeError(grade) from None


def validate_quality(quality) -> int:
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidGradeError(quality)
    if quality < 0 or quality > 5:
        raise InvalidGradeError(quality)
    return quality


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp_ease(value: float) -> float:
    return round(min(MAX_EASE_FACTOR, max(MIN_EASE_FACTOR, value)), 2)


def ease_delta(quality: int) -> float:
    miss = 5 - quality
    return 0.1 - miss * (0.08 + miss * 0.02)


def _success_interval(srs: SRSState, quality: int, rng, fuzz: bool) -> int:
    if srs.repetitions == 0:
        interval = 1
    elif srs.repetitions == 1:
        interval = 6
    else:
        interval = _round_half_up(srs.interval_days * srs.ease_factor)
        if fuzz:
            fuzz_range = max(1, math.floor(interval * FUZZ_RATIO))
            interval = max(1, interval + rng.randint(-fuzz_range, fuzz_range))
    return max(1, _round_half_up(interval * QUALITY_MULTIPLIERS[quality]))


def _failure_interval(srs: SRSState, quality: int) -> float:
    if quality == 2:
        return max(1, _round_half_up(srs.interval_days * HARD_INTERVAL_FACTOR))
    if quality == 1:
        return 1
    return LAPSE_INTERVAL_DAYS


def due_after(now: datetime, interval_days: float) -> datetime:
    if interval_days < 1:
        return now + timedelta(minutes=round(interval_days * 24 * 60))
    return now + timedelta(days=int(interval_days))


def grade(
    srs: SRSState,
    quality: int,
    now: datetime,
    rng: Optional[random.Random] = None,
    fuzz: bool = True,
) -> SRSState:
    """Return the SRS state that follows grading ``srs`` with ``quality`` at ``now``.

    ``rng`` only needs a ``randint(a, b)`` method; it is consulted once, for
    the fuzz of a mature card. Nothing is mutated.
    """
    quality = validate_quality(quality)
    if quality >= PASSING_QUALITY:
        if rng is None:
            rng = random.Random()
        interval = float(_success_interval(srs, quality, rng, fuzz))
        repetitions = srs.repetitions + 1
    else:
        interval = float(_failure_interval(srs, quality))
        repetitions = 0
    return SRSState(
        interval_days=interval,
        repetitions=repetitions,
        ease_factor=_clamp_ease(srs.ease_factor + ease_delta(quality)),
        next_review_at=due_after(now, interval),
        last_reviewed_at=now,
        last_quality=quality,
    )


def update_stats(stats: CardStats, quality: int, answer_seconds: Optional[float] = None) -> CardStats:
    """Fold one graded answer into the cumulative card counters."""
    quality = validate_quality(quality)
    correct = quality >= PASSING_QUALITY
    average = stats.average_answer_seconds
    if answer_seconds is not None:
        if average is None or stats.total_reviews == 0:
            average = float(answer_seconds)
        else:
            average = (average * stats.total_reviews + answer_seconds) / (stats.total_reviews + 1)
    return replace(
        stats,
        total_reviews=stats.total_reviews + 1,
        correct_reviews=stats.correct_reviews + (1 if correct else 0),
        current_streak=stats.current_streak + 1 if correct else 0,
        average_answer_seconds=average,
    )


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
