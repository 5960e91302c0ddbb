from pydantic import BaseModel, StrictInt, model_validator
from typing import Dict, Optional
from enum import Enum

from utils.sm2 import map_grade_to_quality

class Grade(str, Enum):
    AGAIN = "again"
    HARD = "hard"
    GOOD = "good"
    EASY = "easy"

class GradeSubmit(BaseModel):
    """A reviewer's answer: either a raw 0-5 quality or one of the study buttons."""
    quality: Optional[StrictInt] = None
    grade: Optional[Grade] = None
    card_id: Optional[int] = None
    answer_seconds: Optional[float] = None

    @model_validator(mode="after")
    def require_quality_or_grade(self):
        if self.quality is None and self.grade is None:
            raise ValueError("Either 'quality' or 'grade' is required")
        return self

    def resolved_quality(self) -> int:
        if self.quality is not None:
            return self.quality
        return map_grade_to_quality(self.grade.value)

class SessionStart(BaseModel):
    deck_id: int

class SessionStats(BaseModel):
    session_id: str
    deck_id: int
    status: str
    cards_graded: int
    correct_count: int
    accuracy: float
    duration_seconds: float
    current_index: int
    queue_length: int
    remaining: int
    grade_counts: Dict[int, int] = {}

class SessionView(SessionStats):
    queue: list[int] = []
    current_card_id: Optional[int] = None
