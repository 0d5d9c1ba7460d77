"""
Pool utilities for the queue builder.

Small, order-preserving primitives; no scheduling policy lives here.
"""

from __future__ import annotations

from itertools import islice
from typing import Iterable

from deckcore.cards import Card


def take(cards: Iterable[Card], count: int) -> list[Card]:
    """First `count` cards (none for count <= 0)."""
    if count <= 0:
        return []
    return list(islice(cards, count))


def dedupe_by_id(cards: Iterable[Card]) -> list[Card]:
    """
    Drop repeated card ids, keeping the first occurrence.
    """
    seen: set[str] = set()
    unique: list[Card] = []
    for card in cards:
        if card.id in seen:
            continue
        seen.add(card.id)
        unique.append(card)
    return unique
