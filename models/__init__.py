from .card import Card, CardCreate, CardRecord, CardVariant
from .deck import Deck, DeckCreate, DeckSummary
from .review import Grade, GradeSubmit, SessionStart, SessionStats, SessionView

__all__ = [
    'Card', 'CardCreate', 'CardRecord', 'CardVariant',
    'Deck', 'DeckCreate', 'DeckSummary',
    'Grade', 'GradeSubmit', 'SessionStart', 'SessionStats', 'SessionView',
]
