"""
Deck overview computations.
"""

from __future__ import annotations

from datetime import datetime, time, timedelta
from typing import Optional

from deckcore.analytics.types import DeckOverview
from deckcore.cards import Card, CardState
from deckcore.clock import ensure_utc, parse_timestamp, utc_now


HARDEST_LIMIT = 15


def end_of_local_day(now: datetime) -> datetime:
    """Last instant of the local calendar day containing `now`."""
    local_now = ensure_utc(now).astimezone()
    return datetime.combine(local_now.date(), time.max, tzinfo=local_now.tzinfo)


def _scheduled_due(card: Card) -> Optional[datetime]:
    if card.state is CardState.NEW:
        return None
    return parse_timestamp(card.due)


def build_deck_overview(
    cards: list[Card],
    now: Optional[datetime] = None,
    hardest_limit: int = HARDEST_LIMIT
) -> DeckOverview:
    """
    Compute deck counts, hardest cards and a short due forecast.

    - due_today: reviewed cards due before the end of the local day
    - hardest: reviewed cards by descending difficulty
    - due_tomorrow / due_within_three_days: due after now, within 1 / 3 days
    """
    now = ensure_utc(now or utc_now())
    end_of_today = end_of_local_day(now)
    tomorrow = now + timedelta(days=1)
    in_three_days = now + timedelta(days=3)

    due_today = due_tomorrow = due_three_days = 0
    for card in cards:
        due = _scheduled_due(card)
        if due is None:
            continue
        if due <= end_of_today:
            due_today += 1
        if now < due <= tomorrow:
            due_tomorrow += 1
        if now < due <= in_three_days:
            due_three_days += 1

    reviewed = [card for card in cards if card.state is not CardState.NEW]
    hardest = sorted(reviewed, key=lambda c: c.difficulty or 0, reverse=True)[:hardest_limit]

    return DeckOverview(
        total=len(cards),
        new=sum(1 for card in cards if card.state is CardState.NEW),
        due_today=due_today,
        hardest=hardest,
        due_tomorrow=due_tomorrow,
        due_within_three_days=due_three_days,
    )
