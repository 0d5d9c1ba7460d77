"""
FSRS - Free Spaced Repetition Scheduler

Scheduling engine for the flashcard deck.

This package implements FSRS v4.5 with fixed default weights:
- Power forgetting curve: R = (1 + t / (9S))^-1
- Stability/difficulty updates on recall and on lapse
- new / learning / review / relearning state machine
- Due classification for queue assembly

Quick start:
    from deckcore import fsrs

    # Rate a card (pure, returns an updated copy)
    card = fsrs.review(card, fsrs.Rating.GOOD, now)

    # Labels for the rating buttons
    labels = fsrs.preview(card, now)

    # Is it actionable?
    fsrs.is_due(card, now)

Persistence adapters live in deckcore.fsrs.database.
"""

# Core scheduler API
from deckcore.fsrs.scheduler import format_interval, preview, review

# Due classification
from deckcore.fsrs.due import is_due

# Constants and parameters
from deckcore.fsrs.constants import (
    Rating,
    REQUEST_RETENTION,
    MAXIMUM_INTERVAL,
    S_MIN,
    D_MIN,
    D_MAX,
    SHORT_TERM_MIN_DAYS,
    WEIGHTS,
)

# Memory model (for advanced usage)
from deckcore.fsrs.memory_model import (
    retrievability,
    initial_stability,
    initial_difficulty,
    next_difficulty,
    next_recall_stability,
    next_forget_stability,
    next_interval_days,
    next_due,
    elapsed_days,
)


__all__ = [
    # Core algorithm
    "review",
    "preview",
    "format_interval",
    "is_due",

    # Enums
    "Rating",

    # Memory model
    "retrievability",
    "initial_stability",
    "initial_difficulty",
    "next_difficulty",
    "next_recall_stability",
    "next_forget_stability",
    "next_interval_days",
    "next_due",
    "elapsed_days",

    # Parameters
    "REQUEST_RETENTION",
    "MAXIMUM_INTERVAL",
    "S_MIN",
    "D_MIN",
    "D_MAX",
    "SHORT_TERM_MIN_DAYS",
    "WEIGHTS",
]
