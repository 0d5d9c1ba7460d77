"""
Review session lifecycle.

Wires the scheduler and the queue builder to the external collaborators:
card store, daily usage counter and (optional) session snapshot store.
The session object owns its in-memory queue; one session per card set.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from deckcore.cards import Card, CardState
from deckcore.clock import SystemClock
from deckcore.config import StudySettings
from deckcore.fsrs import scheduler
from deckcore.fsrs.constants import STUDY_MORE_BATCH_SIZE, Rating
from deckcore.ports import CardStore, Clock, DailyUsageCounter, SessionSnapshotStore
from deckcore.session_builders import queue_builder
from deckcore.session_builders.pool_types import ReviewQueue

logger = logging.getLogger(__name__)


class ReviewSession:
    """
    One study session over a user's deck.

    Typical flow:
        session = ReviewSession(card_store, counter, settings, snapshot_store)
        session.start()
        while session.current_card:
            session.rate(Rating.GOOD, elapsed_ms=4200)
    """

    def __init__(
        self,
        card_store: CardStore,
        usage_counter: DailyUsageCounter,
        settings: StudySettings,
        snapshot_store: Optional[SessionSnapshotStore] = None,
        clock: Optional[Clock] = None
    ):
        self.card_store = card_store
        self.usage_counter = usage_counter
        self.settings = settings
        self.snapshot_store = snapshot_store
        self.clock = clock or SystemClock()
        self.queue = ReviewQueue()

    def _now(self, now: Optional[datetime]) -> datetime:
        return now if now is not None else self.clock.now()

    # ---- Lifecycle ----

    def start(self, now: Optional[datetime] = None) -> ReviewQueue:
        """
        Build the queue, resuming a persisted session when there is one.
        """
        now = self._now(now)
        snapshot = self.snapshot_store.load() if self.snapshot_store else None
        consumed = self.usage_counter.get_consumed_new_cards_today(now)

        self.queue = queue_builder.build_queue(
            self.card_store.get_all(),
            self.settings,
            consumed_today=consumed,
            snapshot=snapshot,
            now=now,
        )
        logger.info(
            "Session started: %d cards (%d/%d done)",
            len(self.queue),
            self.queue.completed_count,
            self.queue.initial_length,
        )
        self._persist()
        return self.queue

    def abandon(self) -> None:
        """Drop the in-memory queue; ratings already applied stay persisted."""
        self.queue = ReviewQueue()

    @property
    def current_card(self) -> Optional[Card]:
        return self.queue.head

    def preview(self, now: Optional[datetime] = None) -> dict[Rating, str]:
        """Button labels for the current card ({} when the queue is empty)."""
        card = self.current_card
        if card is None:
            return {}
        return scheduler.preview(card, self._now(now))

    # ---- Ratings ----

    def rate(
        self,
        rating: Rating,
        elapsed_ms: int = 0,
        now: Optional[datetime] = None
    ) -> Optional[Card]:
        """
        Rate the current card.

        Workflow:
        1. Compute the new card state
        2. Save the updated card set
        3. Record the review on the daily log
        4. Advance the queue (AGAIN re-inserts the card)
        5. Persist or clear the session snapshot

        Returns:
            The updated card, or None when there is nothing to rate
        """
        card = self.current_card
        if card is None:
            logger.warning("No card to rate")
            return None

        now = self._now(now)
        rating = Rating.parse(rating)
        updated = scheduler.review(card, rating, now)

        cards = self.card_store.get_all()
        for index, existing in enumerate(cards):
            if existing.id == updated.id:
                cards[index] = updated
                self.card_store.save_all(cards)
                self.usage_counter.record_review(
                    card.state is CardState.NEW, elapsed_ms, now
                )
                break
        else:
            logger.warning("Card %s is no longer in the deck; not saved", updated.id)

        self.queue = queue_builder.apply_rating(self.queue, rating, updated)
        self._persist()
        return updated

    # ---- Daily quota override ----

    def daily_limit_reached(self, now: Optional[datetime] = None) -> bool:
        consumed = self.usage_counter.get_consumed_new_cards_today(self._now(now))
        return queue_builder.daily_limit_reached(
            self.card_store.get_all(), self.settings, consumed
        )

    def study_more(self, count: int = STUDY_MORE_BATCH_SIZE) -> ReviewQueue:
        """Add up to `count` new cards regardless of the daily quota."""
        self.queue = queue_builder.study_more_new_cards(
            self.queue, self.card_store.get_all(), count
        )
        self._persist()
        return self.queue

    def _persist(self) -> None:
        if self.snapshot_store is None:
            return
        if self.queue.is_empty():
            self.snapshot_store.clear()
        else:
            self.snapshot_store.save(self.queue)
