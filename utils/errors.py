class StudyError(Exception):
    """Base class for flashcard study errors."""


class InvalidGradeError(StudyError, ValueError):
    def __init__(self, quality):
        super().__init__(f"Quality must be an integer between 0 and 5, got {quality!r}")
        self.quality = quality


class SessionClosedError(StudyError):
    def __init__(self, session_id: str, status: str):
        super().__init__(f"Session {session_id} is {status}; no further grades accepted")
        self.session_id = session_id
        self.status = status


class StaleStateError(StudyError):
    """Card changed since it was read; re-fetch and retry the grade."""

    def __init__(self, card_id: int, expected_version: int):
        super().__init__(f"Card {card_id} was modified (expected version {expected_version})")
        self.card_id = card_id
        self.expected_version = expected_version


class CardNotFoundError(StudyError):
    def __init__(self, card_id: int, detail: str = "Card not found"):
        super().__init__(f"{detail}: {card_id}")
        self.card_id = card_id


class SessionNotFoundError(StudyError):
    def __init__(self, session_id: str):
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class DeckNotFoundError(StudyError):
    def __init__(self, deck_id: int):
        super().__init__(f"Deck not found: {deck_id}")
        self.deck_id = deck_id
