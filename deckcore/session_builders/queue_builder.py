"""
Review Queue Builder

Creates the ordered working queue of a study session from three pools:
1. Active learning: learning/relearning cards that are due now
2. Due reviews: review cards due now, longest-overdue first
3. New cards: never-reviewed cards, capped by today's remaining quota

Session Logic:
- Fresh candidates = active learning + due reviews + new, cut at the review limit
- A persisted session is resumed as-is; fresh candidates it does not already
  contain are appended at the end
- AGAIN re-inserts the updated card a few positions ahead of the learner
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import datetime
from typing import Iterable, Optional

from deckcore.cards import Card, CardState
from deckcore.clock import utc_now
from deckcore.config import StudySettings
from deckcore.fsrs.constants import AGAIN_REINSERT_OFFSET, STUDY_MORE_BATCH_SIZE, Rating
from deckcore.fsrs.due import due_sort_key, is_due
from deckcore.session_builders.pool_types import CardPools, ReviewQueue
from deckcore.session_builders.pool_utils import dedupe_by_id, take

logger = logging.getLogger(__name__)


def remaining_new_quota(settings: StudySettings, consumed_today: int) -> int:
    """New cards still allowed today."""
    return max(0, settings.new_cards_per_day - max(0, consumed_today))


def build_pools(
    cards: Iterable[Card],
    settings: StudySettings,
    consumed_today: int,
    now: datetime
) -> CardPools:
    """
    Partition the card set into the three session pools.

    Args:
        cards: Full card set, in its existing relative order
        settings: Daily quotas
        consumed_today: New cards already introduced today
        now: Current time

    Returns:
        CardPools with each pool in presentation order
    """
    active_learning: list[Card] = []
    due_review: list[Card] = []
    new_cards: list[Card] = []

    for card in cards:
        if card.state is CardState.NEW:
            new_cards.append(card)
        elif not is_due(card, now):
            continue
        elif card.state is CardState.REVIEW:
            due_review.append(card)
        else:
            active_learning.append(card)

    # Stable sort keeps deck order among equal due timestamps
    due_review.sort(key=due_sort_key)

    return CardPools(
        active_learning=active_learning,
        due_review=due_review,
        fresh_new=take(new_cards, remaining_new_quota(settings, consumed_today)),
        new_available=len(new_cards),
    )


def fresh_candidates(pools: CardPools, settings: StudySettings) -> list[Card]:
    """Combined candidate list, truncated to the review limit (0 = unlimited)."""
    candidates = pools.candidates()
    if settings.review_limit > 0:
        candidates = candidates[:settings.review_limit]
    return candidates


def build_queue(
    cards: list[Card],
    settings: StudySettings,
    consumed_today: int = 0,
    snapshot: Optional[ReviewQueue] = None,
    now: Optional[datetime] = None
) -> ReviewQueue:
    """
    Build (or resume) the working queue for a study session.

    Persisted queue entries are refreshed to the card set's current state;
    entries whose card no longer exists are dropped and leave the planned
    total (initial_length).

    Args:
        cards: Full card set
        settings: Daily quotas
        consumed_today: New cards already introduced today
        snapshot: Previously persisted session, if any
        now: Current time (defaults to wall-clock now)

    Returns:
        ReviewQueue with no duplicate card ids
    """
    if now is None:
        now = utc_now()

    pools = build_pools(cards, settings, consumed_today, now)
    candidates = fresh_candidates(pools, settings)

    if snapshot is not None and not snapshot.is_empty():
        queued_ids = set(snapshot.ids())
        to_append = [card for card in candidates if card.id not in queued_ids]
        working = [*snapshot.cards, *to_append]
        initial_length = (snapshot.initial_length or len(snapshot)) + len(to_append)
        completed_count = snapshot.completed_count
        logger.debug(
            "Resuming session: %d queued, %d appended", len(snapshot), len(to_append)
        )
    else:
        working = candidates
        initial_length = len(candidates)
        completed_count = 0

    by_id = {card.id: card for card in cards}
    unique = dedupe_by_id(working)
    working = [by_id[card.id] for card in unique if card.id in by_id]
    dropped = len(unique) - len(working)
    if dropped:
        # Deleted cards no longer count towards the planned total
        logger.debug("Dropped %d queued cards missing from the deck", dropped)
        initial_length = max(len(working) + completed_count, initial_length - dropped)

    logger.debug(
        "Queue built: learning=%d review=%d new=%d/%d total=%d",
        len(pools.active_learning),
        len(pools.due_review),
        len(pools.fresh_new),
        pools.new_available,
        len(working),
    )

    return ReviewQueue(
        cards=working,
        initial_length=initial_length,
        completed_count=completed_count,
    )


def apply_rating(queue: ReviewQueue, rating: Rating, updated_card: Card) -> ReviewQueue:
    """
    Advance the session after the head card was rated.

    Rules:
    - AGAIN: re-insert the updated card at min(remaining, 3); not completed
    - HARD/GOOD/EASY: drop the card; completed_count += 1

    Returns:
        New ReviewQueue (the input is not modified)
    """
    if queue.is_empty():
        logger.warning("Rating %s applied to an empty queue; ignoring", Rating.parse(rating).name)
        return queue

    head, remaining = queue.cards[0], list(queue.cards[1:])
    if head.id != updated_card.id:
        logger.warning("Rated card %s is not the queue head %s", updated_card.id, head.id)

    if Rating.parse(rating) is Rating.AGAIN:
        remaining.insert(min(len(remaining), AGAIN_REINSERT_OFFSET), updated_card)
        return dataclasses.replace(queue, cards=remaining)

    return dataclasses.replace(
        queue,
        cards=remaining,
        completed_count=queue.completed_count + 1,
    )


def daily_limit_reached(
    cards: Iterable[Card],
    settings: StudySettings,
    consumed_today: int
) -> bool:
    """
    True when new cards exist but today's quota is spent.

    Callers surface "daily limit reached" and may offer study_more_new_cards().
    """
    has_new = any(card.state is CardState.NEW for card in cards)
    return has_new and consumed_today >= settings.new_cards_per_day


def study_more_new_cards(
    queue: ReviewQueue,
    cards: Iterable[Card],
    count: int = STUDY_MORE_BATCH_SIZE
) -> ReviewQueue:
    """
    Quota override: add up to `count` new cards to the session.

    The daily counter is not touched here; each card still counts once it
    is actually rated.
    """
    queued_ids = set(queue.ids())
    extra = take(
        (card for card in cards if card.state is CardState.NEW and card.id not in queued_ids),
        count,
    )
    if extra:
        logger.info("Adding %d new cards beyond the daily quota", len(extra))
    return dataclasses.replace(
        queue,
        cards=[*queue.cards, *extra],
        initial_length=queue.initial_length + len(extra),
    )
