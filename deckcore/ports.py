"""
Ports (interfaces) for the collaborators around the scheduling core.

Persistence, the daily usage counter and the session snapshot store are
external; the core only talks to these abstractions.

Implementations:
    - deckcore.fsrs.database: SQLAlchemy-backed adapters
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, Protocol

from deckcore.cards import Card
from deckcore.session_builders.pool_types import ReviewQueue


class Clock(Protocol):
    """Source of "now"."""

    def now(self) -> datetime: ...


class CardStore(ABC):
    """Port for loading and saving the full card set."""

    @abstractmethod
    def get_all(self) -> list[Card]:
        """Return every card in its existing relative order."""

    @abstractmethod
    def save_all(self, cards: list[Card]) -> None:
        """Persist the given cards (insert or update by id)."""


class DailyUsageCounter(ABC):
    """Port for the per-day new-card and review counters."""

    @abstractmethod
    def get_consumed_new_cards_today(self, now: Optional[datetime] = None) -> int:
        """Number of new cards introduced on the local calendar day of `now`."""

    @abstractmethod
    def record_review(
        self,
        was_new_card: bool,
        elapsed_ms: int,
        now: Optional[datetime] = None
    ) -> None:
        """Count one applied rating (and one introduced card if it was new)."""


class SessionSnapshotStore(ABC):
    """Port for resuming an in-flight review session."""

    @abstractmethod
    def load(self) -> Optional[ReviewQueue]:
        """Return the persisted session, or None if absent."""

    @abstractmethod
    def save(self, queue: ReviewQueue) -> None:
        """Persist the session snapshot."""

    @abstractmethod
    def clear(self) -> None:
        """Forget the persisted session."""
