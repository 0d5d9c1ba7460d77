"""
Types for the deck overview.
"""

from __future__ import annotations

from dataclasses import dataclass

from deckcore.cards import Card


@dataclass(frozen=True)
class DeckOverview:
    """
    Headline numbers for a deck at a point in time.
    """
    total: int
    new: int
    due_today: int
    hardest: list[Card]
    due_tomorrow: int
    due_within_three_days: int
