"""
Pydantic models for serialized deck data.

These models define the JSON shape of cards and of persisted review
sessions, and validate data coming back from storage.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from deckcore.cards import Card, CardState
from deckcore.clock import format_timestamp, parse_timestamp
from deckcore.session_builders.pool_types import ReviewQueue


# ---- Cards ----

class CardDocument(BaseModel):
    """
    Serialized card.

    `due` stays a string so that a malformed stored value survives the round
    trip and is classified as "not due" rather than rejected.
    """
    id: str
    front: str = ""
    pronunciation: str = ""
    meaning: str = ""
    hint: Optional[str] = None

    state: CardState = CardState.NEW
    stability: Optional[float] = None
    difficulty: Optional[float] = None
    due: Optional[str] = None
    last_review: Optional[str] = None
    reps: Optional[int] = None
    position: Optional[int] = None

    # Legacy SM-2 fields (pre-FSRS exports)
    ease_factor: Optional[float] = None
    interval: Optional[float] = Field(None, description="SM-2 interval in days")
    repetitions: Optional[int] = None

    @property
    def is_legacy(self) -> bool:
        """True for SM-2 era cards that never received FSRS fields."""
        return self.stability is None and (
            self.ease_factor is not None
            or self.interval is not None
            or self.repetitions is not None
        )

    @classmethod
    def from_card(cls, card: Card) -> "CardDocument":
        due = card.due
        if isinstance(due, datetime):
            due = format_timestamp(due)
        return cls(
            id=card.id,
            front=card.front,
            pronunciation=card.pronunciation,
            meaning=card.meaning,
            hint=card.hint,
            state=card.state,
            stability=card.stability,
            difficulty=card.difficulty,
            due=due or None,
            last_review=format_timestamp(card.last_review),
            reps=card.reps,
            position=card.position,
        )

    def to_card(self) -> Card:
        parsed_due = parse_timestamp(self.due)
        return Card(
            id=self.id,
            front=self.front,
            pronunciation=self.pronunciation,
            meaning=self.meaning,
            hint=self.hint,
            state=self.state,
            stability=self.stability,
            difficulty=self.difficulty,
            due=parsed_due if parsed_due is not None else (self.due or None),
            last_review=parse_timestamp(self.last_review),
            reps=self.reps if self.reps is not None else self.repetitions,
            position=self.position,
        )


# ---- Review sessions ----

class SessionSnapshotDocument(BaseModel):
    """Persisted in-flight review session."""
    queue: list[CardDocument] = Field(default_factory=list)
    initial_length: int = Field(0, ge=0)
    completed_count: int = Field(0, ge=0)

    @classmethod
    def from_queue(cls, queue: ReviewQueue) -> "SessionSnapshotDocument":
        return cls(
            queue=[CardDocument.from_card(card) for card in queue.cards],
            initial_length=queue.initial_length,
            completed_count=queue.completed_count,
        )

    def to_queue(self) -> ReviewQueue:
        cards = [doc.to_card() for doc in self.queue]
        return ReviewQueue(
            cards=cards,
            initial_length=self.initial_length or len(cards),
            completed_count=self.completed_count,
        )
