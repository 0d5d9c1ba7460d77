"""
Analytics package exports.
"""

from deckcore.analytics.service import build_deck_overview
from deckcore.analytics.types import DeckOverview

__all__ = [
    "build_deck_overview",
    "DeckOverview",
]
