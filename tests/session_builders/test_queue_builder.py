"""
Tests for review queue construction and advancement.
"""

from datetime import timedelta

from deckcore.cards import CardState, new_card
from deckcore.config import StudySettings
from deckcore.fsrs import scheduler
from deckcore.fsrs.constants import Rating
from deckcore.session_builders import (
    ReviewQueue,
    apply_rating,
    build_pools,
    build_queue,
    daily_limit_reached,
    remaining_new_quota,
    study_more_new_cards,
)

from conftest import NOW, reviewed_card


def ids(queue):
    return [card.id for card in queue.cards]


def mixed_deck():
    return [
        new_card("n1", position=1),
        reviewed_card("r_late", due=NOW - timedelta(hours=1), position=2),
        reviewed_card("l1", state=CardState.LEARNING, due=NOW - timedelta(minutes=5), position=3),
        new_card("n2", position=4),
        reviewed_card("r_early", due=NOW - timedelta(days=3), position=5),
        reviewed_card("r_future", due=NOW + timedelta(days=2), position=6),
        reviewed_card("rl1", state=CardState.RELEARNING, due=NOW - timedelta(minutes=1), position=7),
        reviewed_card("l_future", state=CardState.LEARNING, due=NOW + timedelta(hours=1), position=8),
    ]


# ---- Building ----

def test_priority_order(settings):
    queue = build_queue(mixed_deck(), settings, now=NOW)
    assert ids(queue) == ["l1", "rl1", "r_early", "r_late", "n1", "n2"]
    assert queue.initial_length == 6
    assert queue.completed_count == 0


def test_pools(settings):
    pools = build_pools(mixed_deck(), settings, consumed_today=0, now=NOW)
    assert [c.id for c in pools.active_learning] == ["l1", "rl1"]
    assert [c.id for c in pools.due_review] == ["r_early", "r_late"]
    assert pools.new_available == 2


def test_new_quota_respected(new_cards):
    settings = StudySettings(new_cards_per_day=3, review_limit=100)
    assert ids(build_queue(new_cards, settings, consumed_today=0, now=NOW)) == ["n1", "n2", "n3"]
    assert ids(build_queue(new_cards, settings, consumed_today=2, now=NOW)) == ["n1"]
    assert build_queue(new_cards, settings, consumed_today=7, now=NOW).is_empty()


def test_remaining_new_quota():
    settings = StudySettings(new_cards_per_day=10)
    assert remaining_new_quota(settings, 4) == 6
    assert remaining_new_quota(settings, 15) == 0
    assert remaining_new_quota(settings, -2) == 10


def test_review_limit_truncates_combined_list():
    settings = StudySettings(new_cards_per_day=10, review_limit=3)
    assert ids(build_queue(mixed_deck(), settings, now=NOW)) == ["l1", "rl1", "r_early"]


def test_review_limit_zero_is_unlimited():
    settings = StudySettings(new_cards_per_day=10, review_limit=0)
    assert len(build_queue(mixed_deck(), settings, now=NOW)) == 6


def test_equal_due_keeps_deck_order(settings):
    due = NOW - timedelta(hours=2)
    cards = [reviewed_card(card_id, due=due) for card_id in ("b", "a", "c")]
    assert ids(build_queue(cards, settings, now=NOW)) == ["b", "a", "c"]


def test_malformed_due_is_excluded(settings):
    cards = [reviewed_card("bad", due="yesterday-ish"), reviewed_card("ok")]
    assert ids(build_queue(cards, settings, now=NOW)) == ["ok"]


# ---- Resuming ----

def test_resume_appends_fresh_candidates(settings, new_cards):
    snapshot = ReviewQueue(cards=[new_cards[2], new_cards[0]], initial_length=4, completed_count=2)
    queue = build_queue(new_cards[:4], settings, snapshot=snapshot, now=NOW)

    assert ids(queue) == ["n3", "n1", "n2", "n4"]
    assert queue.initial_length == 6
    assert queue.completed_count == 2


def test_resume_dedupes_and_drops_deleted_cards(settings, new_cards):
    snapshot = ReviewQueue(
        cards=[new_cards[1], new_card("gone"), new_cards[1], new_cards[0]],
        initial_length=4,
    )
    queue = build_queue(new_cards[:2], settings, snapshot=snapshot, now=NOW)
    assert ids(queue) == ["n2", "n1"]
    assert len(set(ids(queue))) == len(queue)


def test_resume_shrinks_planned_total_for_deleted_cards(settings, new_cards):
    snapshot = ReviewQueue(
        cards=[new_cards[0], new_card("gone"), new_cards[1]],
        initial_length=5,
        completed_count=2,
    )
    queue = build_queue(new_cards[:2], settings, snapshot=snapshot, now=NOW)

    assert ids(queue) == ["n1", "n2"]
    assert queue.initial_length == 4
    assert queue.completed_count + len(queue) == queue.initial_length


def test_resume_refreshes_card_state(settings):
    stale = reviewed_card("a", stability=1.0)
    current = reviewed_card("a", stability=8.0)
    snapshot = ReviewQueue(cards=[stale], initial_length=1)
    queue = build_queue([current], settings, snapshot=snapshot, now=NOW)
    assert queue.head.stability == 8.0


def test_empty_snapshot_builds_fresh(settings, new_cards):
    queue = build_queue(new_cards, settings, snapshot=ReviewQueue(completed_count=9), now=NOW)
    assert queue.completed_count == 0
    assert len(queue) == 5


# ---- Ratings ----

def test_again_reinserts_three_ahead(settings, new_cards):
    queue = build_queue(new_cards, settings, now=NOW)
    updated = scheduler.review(queue.head, Rating.AGAIN, NOW)

    after = apply_rating(queue, Rating.AGAIN, updated)

    assert ids(after) == ["n2", "n3", "n4", "n1", "n5"]
    assert after.cards[3] is updated
    assert after.completed_count == 0
    assert after.initial_length == queue.initial_length
    assert ids(queue) == ["n1", "n2", "n3", "n4", "n5"]


def test_again_near_end_of_queue(new_cards):
    queue = ReviewQueue(cards=new_cards[:2], initial_length=2)
    updated = scheduler.review(new_cards[0], Rating.AGAIN, NOW)
    assert ids(apply_rating(queue, Rating.AGAIN, updated)) == ["n2", "n1"]

    single = ReviewQueue(cards=[new_cards[0]], initial_length=1)
    assert ids(apply_rating(single, Rating.AGAIN, updated)) == ["n1"]


def test_passing_rating_removes_head(new_cards):
    queue = ReviewQueue(cards=new_cards[:3], initial_length=3)
    for rating in (Rating.HARD, Rating.GOOD, Rating.EASY):
        updated = scheduler.review(queue.head, rating, NOW)
        after = apply_rating(queue, rating, updated)
        assert ids(after) == ["n2", "n3"]
        assert after.completed_count == 1


def test_rating_empty_queue_is_noop(new_cards):
    queue = ReviewQueue()
    updated = scheduler.review(new_cards[0], Rating.GOOD, NOW)
    assert apply_rating(queue, Rating.GOOD, updated) is queue


# ---- Daily limit ----

def test_daily_limit_reached(new_cards):
    settings = StudySettings(new_cards_per_day=2)
    assert daily_limit_reached(new_cards, settings, consumed_today=2)
    assert not daily_limit_reached(new_cards, settings, consumed_today=1)
    # Nothing new left to introduce
    assert not daily_limit_reached([reviewed_card("a")], settings, consumed_today=5)


def test_study_more_adds_unqueued_new_cards():
    deck = [new_card(f"n{i}", position=i) for i in range(15)]
    queue = ReviewQueue(cards=deck[:2], initial_length=2, completed_count=1)

    more = study_more_new_cards(queue, deck)

    assert ids(more) == [f"n{i}" for i in range(12)]
    assert more.initial_length == 12
    assert more.completed_count == 1


def test_study_more_with_few_left(new_cards):
    more = study_more_new_cards(ReviewQueue(), new_cards, count=10)
    assert len(more) == 5
    assert more.initial_length == 5
