"""
deckcore - spaced-repetition scheduling for a flashcard deck.
"""

from deckcore.cards import Card, CardState, new_card
from deckcore.config import StudySettings, load_study_settings
from deckcore.fsrs import Rating, is_due, preview, review
from deckcore.session import ReviewSession
from deckcore.session_builders import ReviewQueue, apply_rating, build_queue

__all__ = [
    "Card",
    "CardState",
    "new_card",
    "StudySettings",
    "load_study_settings",
    "Rating",
    "is_due",
    "preview",
    "review",
    "ReviewSession",
    "ReviewQueue",
    "apply_rating",
    "build_queue",
]
