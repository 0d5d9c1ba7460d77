"""
Tests for the review session lifecycle.
"""

from datetime import timedelta

import pytest

from deckcore.cards import CardState, new_card
from deckcore.config import StudySettings
from deckcore.fsrs.constants import Rating
from deckcore.fsrs.database import SqlCardStore, SqlDailyUsageCounter, SqlSessionSnapshotStore
from deckcore.session import ReviewSession

from conftest import NOW, FakeCardStore, FakeSnapshotStore, FakeUsageCounter, FixedClock, reviewed_card


@pytest.fixture
def stores(new_cards):
    return FakeCardStore(new_cards), FakeUsageCounter(), FakeSnapshotStore()


def make_session(stores, settings):
    card_store, counter, snapshots = stores
    return ReviewSession(card_store, counter, settings, snapshots, clock=FixedClock(NOW))


def test_start_builds_and_persists_queue(stores, settings):
    session = make_session(stores, settings)
    queue = session.start()

    assert [card.id for card in queue.cards] == ["n1", "n2", "n3", "n4", "n5"]
    assert session.current_card.id == "n1"
    assert stores[2].queue == queue


def test_rate_again_flow(stores, settings):
    card_store, counter, snapshots = stores
    session = make_session(stores, settings)
    session.start()

    updated = session.rate(Rating.AGAIN, elapsed_ms=3000)

    assert updated.state is CardState.LEARNING
    assert card_store.cards[0] == updated
    assert counter.reviews == [(True, 3000)]
    assert [card.id for card in session.queue.cards] == ["n2", "n3", "n4", "n1", "n5"]
    assert session.queue.completed_count == 0
    assert snapshots.queue == session.queue


def test_reviewed_card_does_not_consume_quota(settings):
    card_store = FakeCardStore([reviewed_card("r1")])
    counter = FakeUsageCounter()
    session = ReviewSession(card_store, counter, settings, clock=FixedClock(NOW))
    session.start()
    session.rate(Rating.GOOD)
    assert counter.reviews == [(False, 0)]
    assert counter.consumed == 0


def test_finishing_clears_snapshot(stores, settings):
    session = make_session(stores, settings)
    session.start()
    while session.current_card is not None:
        session.rate(Rating.GOOD)

    assert stores[2].queue is None
    assert session.queue.completed_count == 5
    assert session.rate(Rating.GOOD) is None
    assert session.preview() == {}


def test_resume_after_restart(stores, settings):
    first = make_session(stores, settings)
    first.start()
    first.rate(Rating.AGAIN)
    first.rate(Rating.GOOD)

    second = make_session(stores, settings)
    queue = second.start()

    assert [card.id for card in queue.cards] == ["n3", "n4", "n1", "n5"]
    assert queue.completed_count == 1
    assert queue.initial_length == 5
    assert queue.cards[2].state is CardState.LEARNING


def test_quota_spent_and_study_more(settings):
    deck = [new_card(f"n{i}", position=i) for i in range(25)]
    card_store, counter = FakeCardStore(deck), FakeUsageCounter(consumed=10)
    session = ReviewSession(card_store, counter, settings, clock=FixedClock(NOW))

    assert session.start().is_empty()
    assert session.daily_limit_reached()

    queue = session.study_more()
    assert len(queue) == 10
    assert counter.consumed == 10

    session.rate(Rating.GOOD)
    assert counter.consumed == 11


def test_preview_current_card(stores, settings):
    session = make_session(stores, settings)
    session.start()
    assert session.preview()[Rating.GOOD] == "2d"


def test_abandon_keeps_applied_ratings(stores, settings):
    session = make_session(stores, settings)
    session.start()
    session.rate(Rating.EASY)
    session.abandon()

    assert session.current_card is None
    assert stores[0].cards[0].state is CardState.REVIEW


def test_rated_card_deleted_meanwhile(stores, settings):
    card_store, counter, _ = stores
    session = make_session(stores, settings)
    session.start()
    card_store.cards = card_store.cards[1:]

    session.rate(Rating.GOOD)

    assert counter.reviews == []
    assert card_store.saves == 0
    assert session.current_card.id == "n2"


def test_session_on_sql_stores(engine):
    card_store = SqlCardStore(engine, "alice")
    counter = SqlDailyUsageCounter(engine, "alice")
    snapshots = SqlSessionSnapshotStore(engine, "alice")
    card_store.save_all([
        new_card("n1", position=1),
        reviewed_card("r1", due=NOW - timedelta(days=1), position=2),
    ])
    settings = StudySettings(new_cards_per_day=1, review_limit=100)

    session = ReviewSession(card_store, counter, settings, snapshots, clock=FixedClock(NOW))
    assert [card.id for card in session.start().cards] == ["r1", "n1"]

    session.rate(Rating.GOOD)
    session.rate(Rating.AGAIN)

    assert counter.get_consumed_new_cards_today(NOW) == 1
    assert [card.id for card in snapshots.load().cards] == ["n1"]

    # A restart the same day resumes; the learning card is not due yet
    resumed = ReviewSession(card_store, counter, settings, snapshots, clock=FixedClock(NOW))
    assert [card.id for card in resumed.start().cards] == ["n1"]
    assert resumed.daily_limit_reached() is False
