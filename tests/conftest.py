from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from deckcore.cards import Card, CardState, new_card
from deckcore.config import StudySettings
from deckcore.fsrs.database import get_engine, init_db
from deckcore.ports import CardStore, DailyUsageCounter, SessionSnapshotStore
from deckcore.session_builders.pool_types import ReviewQueue


NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


def reviewed_card(
    card_id: str,
    state: CardState = CardState.REVIEW,
    due: object = None,
    stability: float = 2.4,
    difficulty: float = 4.93,
    last_review: Optional[datetime] = None,
    position: int = 0,
) -> Card:
    """A card that has been rated at least once."""
    return Card(
        id=card_id,
        front=f"front-{card_id}",
        state=state,
        stability=stability,
        difficulty=difficulty,
        due=due if due is not None else NOW - timedelta(hours=1),
        last_review=last_review if last_review is not None else NOW - timedelta(days=2),
        reps=1,
        position=position,
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def settings():
    return StudySettings(new_cards_per_day=10, review_limit=100)


@pytest.fixture
def new_cards():
    return [new_card(f"n{i}", front=f"word {i}", position=i) for i in range(1, 6)]


@pytest.fixture
def engine(tmp_path):
    """Temporary SQLite database with the deck schema."""
    engine = get_engine(f"sqlite:///{tmp_path / 'deck.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


# ---- In-memory collaborators ----

class FakeCardStore(CardStore):
    def __init__(self, cards):
        self.cards = list(cards)
        self.saves = 0

    def get_all(self):
        return list(self.cards)

    def save_all(self, cards):
        by_id = {card.id: card for card in cards}
        self.cards = [by_id.pop(card.id, card) for card in self.cards] + list(by_id.values())
        self.saves += 1


class FakeUsageCounter(DailyUsageCounter):
    def __init__(self, consumed: int = 0):
        self.consumed = consumed
        self.reviews: list[tuple[bool, int]] = []

    def get_consumed_new_cards_today(self, now=None):
        return self.consumed

    def record_review(self, was_new_card, elapsed_ms, now=None):
        self.reviews.append((was_new_card, elapsed_ms))
        if was_new_card:
            self.consumed += 1


class FakeSnapshotStore(SessionSnapshotStore):
    def __init__(self, queue: Optional[ReviewQueue] = None):
        self.queue = queue

    def load(self):
        return self.queue

    def save(self, queue):
        self.queue = queue

    def clear(self):
        self.queue = None


class FixedClock:
    def __init__(self, value: datetime):
        self.value = value

    def now(self):
        return self.value
