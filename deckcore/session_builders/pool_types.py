"""
Typed pool and queue models shared by the queue builder.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from deckcore.cards import Card


@dataclass
class CardPools:
    """
    Partition of the card set at build time.
    """
    active_learning: list[Card]  # learning/relearning, due now
    due_review: list[Card]       # review, due now, earliest due first
    fresh_new: list[Card]        # new, existing order, truncated to today's quota
    new_available: int = 0       # new cards in the deck before the quota cut

    def candidates(self) -> list[Card]:
        """Priority order: in-progress (re)learning, overdue reviews, new cards."""
        return [*self.active_learning, *self.due_review, *self.fresh_new]


@dataclass
class ReviewQueue:
    """
    Remaining work of one study session.

    `initial_length` is the planned total (for progress display);
    `completed_count` counts cards cleared with a non-AGAIN rating.
    """
    cards: list[Card] = field(default_factory=list)
    initial_length: int = 0
    completed_count: int = 0

    @property
    def head(self) -> Optional[Card]:
        return self.cards[0] if self.cards else None

    def is_empty(self) -> bool:
        return not self.cards

    def ids(self) -> list[str]:
        return [card.id for card in self.cards]

    def __len__(self) -> int:
        return len(self.cards)
