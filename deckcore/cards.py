"""
Card - the learnable unit and its persistable scheduling state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from deckcore.clock import TimestampLike


class CardState(str, Enum):
    """Scheduling state of a card."""
    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    RELEARNING = "relearning"


@dataclass
class Card:
    """
    A flashcard plus its FSRS memory state.

    Content fields are opaque to scheduling. `due` is unset (None) exactly
    while the card is `new`; it is normally a datetime but raw strings
    coming from storage are tolerated and parsed lazily.
    """
    id: str
    front: str = ""
    pronunciation: str = ""
    meaning: str = ""
    hint: Optional[str] = None

    # Memory state
    state: CardState = CardState.NEW
    stability: Optional[float] = 0.0   # S, in days
    difficulty: Optional[float] = 0.0  # D, range 1-10 once reviewed

    # Review tracking
    due: TimestampLike = None
    last_review: Optional[datetime] = None
    reps: Optional[int] = 0

    # Insertion order (relative order of new cards); None until stored
    position: Optional[int] = field(default=None, compare=False)

    def __post_init__(self):
        """Coerce plain strings to CardState."""
        if not isinstance(self.state, CardState):
            self.state = CardState(self.state)

    @property
    def is_new(self) -> bool:
        return self.state is CardState.NEW


def new_card(
    card_id: str,
    front: str = "",
    pronunciation: str = "",
    meaning: str = "",
    hint: Optional[str] = None,
    position: Optional[int] = None
) -> Card:
    """
    Create a never-reviewed card (state new, S=0, D=0, due unset).
    """
    return Card(
        id=card_id,
        front=front,
        pronunciation=pronunciation,
        meaning=meaning,
        hint=hint,
        state=CardState.NEW,
        stability=0.0,
        difficulty=0.0,
        due=None,
        last_review=None,
        reps=0,
        position=position,
    )
