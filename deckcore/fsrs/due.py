"""
Due classification - is a card actionable now?
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from deckcore.cards import Card
from deckcore.clock import ensure_utc, parse_timestamp, utc_now


def is_due(card: Card, now: Optional[datetime] = None) -> bool:
    """
    True iff the card has a valid due timestamp at or before `now`.

    Unset or unparseable due values are "not due". New cards are never due,
    even with a stray due value (repair_cards clears those).
    """
    if card.is_new:
        return False
    due = parse_timestamp(card.due)
    if due is None:
        return False
    if now is None:
        now = utc_now()
    return due <= ensure_utc(now)


def due_sort_key(card: Card) -> datetime:
    """Sort key for due cards (earliest first); call only on cards that are due."""
    return parse_timestamp(card.due)
