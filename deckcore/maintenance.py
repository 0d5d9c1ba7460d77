"""
Deck maintenance - repair and legacy migration.

The scheduling core assumes repaired input (new <=> due unset). These
routines scan a card set and normalize it.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from deckcore.cards import Card, CardState
from deckcore.clock import format_timestamp, utc_now
from deckcore.fsrs.constants import D_MAX, D_MIN
from deckcore.schemas import CardDocument

logger = logging.getLogger(__name__)


@dataclass
class RepairReport:
    cards: list[Card]
    fixed_ids: list[str] = field(default_factory=list)

    @property
    def fixed(self) -> int:
        return len(self.fixed_ids)


def _reset_to_new(card: Card) -> Card:
    return dataclasses.replace(
        card,
        state=CardState.NEW,
        stability=0.0,
        difficulty=0.0,
        due=None,
        last_review=None,
        reps=0,
    )


def repair_card(card: Card) -> Optional[Card]:
    """
    Return a repaired copy of the card, or None if it is healthy.

    Rules (first match wins):
    - new card with a due date: clear the due date
    - non-new card without stability or due: reset to new
    - non-new card never reviewed (reps 0, no last review): reset to new
    - missing reps: set to 0
    """
    if card.state is CardState.NEW:
        if card.due not in (None, ""):
            return dataclasses.replace(card, due=None)
    elif card.stability is None or card.due in (None, ""):
        return _reset_to_new(card)
    elif not card.reps and card.last_review is None:
        return _reset_to_new(card)

    if card.reps is None:
        return dataclasses.replace(card, reps=0)
    return None


def repair_cards(cards: Iterable[Card]) -> RepairReport:
    """
    Normalize data-integrity violations across a card set.
    """
    repaired: list[Card] = []
    fixed_ids: list[str] = []
    for card in cards:
        fixed = repair_card(card)
        if fixed is None:
            repaired.append(card)
        else:
            repaired.append(fixed)
            fixed_ids.append(card.id)

    if fixed_ids:
        logger.info("Repaired %d cards", len(fixed_ids))
    return RepairReport(cards=repaired, fixed_ids=fixed_ids)


def migrate_legacy_card(
    document: CardDocument,
    now: Optional[datetime] = None
) -> CardDocument:
    """
    Convert an SM-2 era card to FSRS fields.

    Mapping:
        stability  = SM-2 interval (days)
        difficulty = clamp(11 - 2 * ease_factor, 1, 10), or 5 without an ease factor
        state      = new (unset due) if repetitions == 0, else review (keep due, or now)
        reps       = repetitions, or 1 for a review card without a repetition count

    Cards that already carry FSRS fields are returned unchanged.
    """
    if not document.is_legacy:
        return document
    if now is None:
        now = utc_now()

    if document.ease_factor is not None:
        difficulty = max(D_MIN, min(D_MAX, 11 - document.ease_factor * 2))
    else:
        difficulty = 5.0

    never_repeated = document.repetitions == 0
    if document.repetitions is not None:
        reps = document.repetitions
    else:
        # Unknown count on a scheduled card
        reps = 1
    return document.model_copy(update={
        "state": CardState.NEW if never_repeated else CardState.REVIEW,
        "stability": float(document.interval or 0),
        "difficulty": difficulty,
        "due": None if never_repeated else (document.due or format_timestamp(now)),
        "reps": reps,
    })
