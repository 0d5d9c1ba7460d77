"""
Database - Deck persistence adapters

SQLAlchemy-backed implementations of the card store, the daily usage
counter and the session snapshot store.

This module handles ONLY database I/O.
Scheduling logic lives in the scheduler and queue builder modules.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional

from pydantic import ValidationError
from sqlalchemy import create_engine, func, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from deckcore import config
from deckcore.cards import Card
from deckcore.clock import format_timestamp, local_date, utc_now
from deckcore.daily_log import DailyLog
from deckcore.fsrs.models import Base, CardRecord, DailyLogRecord, ReviewSessionRecord
from deckcore.ports import CardStore, DailyUsageCounter, SessionSnapshotStore
from deckcore.schemas import CardDocument, SessionSnapshotDocument
from deckcore.session_builders.pool_types import ReviewQueue

logger = logging.getLogger(__name__)

TABLES = ('cards', 'daily_log', 'review_sessions')


def get_engine(url: Optional[str] = None) -> Engine:
    """
    Get SQLAlchemy engine for database connection.

    Args:
        url: Connection string (defaults to DATABASE_URL from the environment)

    Returns:
        SQLAlchemy Engine instance
    """
    db_url = url or config.get_database_url()
    if db_url.startswith("sqlite"):
        return create_engine(db_url, echo=False)
    return create_engine(
        db_url,
        pool_size=5,           # Keep 5 connections open
        max_overflow=10,       # Allow up to 10 extra connections
        pool_pre_ping=True,    # Verify connections before use
        echo=False
    )


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """
    Initialize database schema if tables don't exist.

    Safe to call multiple times - only creates tables if they don't exist.
    """
    existing_tables = set(inspect(engine).get_table_names())
    if not set(TABLES) <= existing_tables:
        Base.metadata.create_all(engine)


def reset_db(engine: Engine) -> None:
    """
    DANGEROUS: Delete all data and recreate tables.

    Only use this for testing or when you want to start fresh.
    All cards, logs and sessions will be lost!
    """
    Base.metadata.drop_all(engine)
    logger.info("All tables dropped")
    init_db(engine)


# ---- Cards ----

def _record_to_card(record: CardRecord) -> Card:
    return CardDocument(
        id=record.card_id,
        front=record.front or "",
        pronunciation=record.pronunciation or "",
        meaning=record.meaning or "",
        hint=record.hint,
        state=record.state,
        stability=record.stability,
        difficulty=record.difficulty,
        due=record.due,
        last_review=record.last_review,
        reps=record.reps,
        position=record.position,
    ).to_card()


def _apply_card(record: CardRecord, card: Card) -> None:
    doc = CardDocument.from_card(card)
    record.front = doc.front
    record.pronunciation = doc.pronunciation
    record.meaning = doc.meaning
    record.hint = doc.hint
    record.state = doc.state.value
    record.stability = doc.stability
    record.difficulty = doc.difficulty
    record.due = doc.due
    record.last_review = doc.last_review
    record.reps = doc.reps
    if doc.position is not None:
        record.position = doc.position


class SqlCardStore(CardStore):
    """Card set of one user."""

    def __init__(self, engine: Engine, user_id: Optional[str] = None):
        self._session_factory = make_session_factory(engine)
        self.user_id = user_id or config.get_default_user_id()

    def get_all(self) -> list[Card]:
        """
        Load every card of the user, in insertion order.
        """
        session: Session = self._session_factory()
        try:
            records = session.query(CardRecord).filter(
                CardRecord.user_id == self.user_id
            ).order_by(CardRecord.position, CardRecord.card_id).all()
            return [_record_to_card(record) for record in records]
        finally:
            session.close()

    def save_all(self, cards: list[Card]) -> None:
        """
        Save multiple cards in a single transaction (insert or update by id).

        Inserted cards without a position are appended after the user's
        last card, in the order given; updates keep the stored position.
        """
        if not cards:
            return

        session: Session = self._session_factory()
        try:
            existing = {
                record.card_id: record
                for record in session.query(CardRecord).filter(
                    CardRecord.user_id == self.user_id,
                    CardRecord.card_id.in_([card.id for card in cards])
                ).all()
            }
            last_position = session.query(func.max(CardRecord.position)).filter(
                CardRecord.user_id == self.user_id
            ).scalar()
            next_position = 0 if last_position is None else last_position + 1

            for card in cards:
                record = existing.get(card.id)
                if record is None:
                    record = CardRecord(user_id=self.user_id, card_id=card.id)
                    if card.position is None:
                        record.position = next_position
                        next_position += 1
                    session.add(record)
                    existing[card.id] = record
                _apply_card(record, card)
            session.commit()
        finally:
            session.close()


# ---- Daily log ----

class SqlDailyUsageCounter(DailyUsageCounter):
    """Daily counters of one user, keyed by local calendar date."""

    def __init__(self, engine: Engine, user_id: Optional[str] = None):
        self._session_factory = make_session_factory(engine)
        self.user_id = user_id or config.get_default_user_id()

    def get_log(self, now: Optional[datetime] = None) -> DailyLog:
        """
        Today's counters.

        Loads the latest log up to today; a log from an earlier day rolls
        over to zeros.
        """
        today = local_date(now or utc_now())
        session: Session = self._session_factory()
        try:
            # ISO dates sort chronologically as strings
            record = session.query(DailyLogRecord).filter(
                DailyLogRecord.user_id == self.user_id,
                DailyLogRecord.day <= today.isoformat()
            ).order_by(DailyLogRecord.day.desc()).first()
            if record is None:
                return DailyLog(day=today)
            log = DailyLog(
                day=date.fromisoformat(record.day),
                new_cards_count=record.new_cards_count or 0,
                total_reviews=record.total_reviews or 0,
                time_spent_ms=record.time_spent_ms or 0,
            )
            return log.rolled_over(today)
        finally:
            session.close()

    def get_consumed_new_cards_today(self, now: Optional[datetime] = None) -> int:
        return self.get_log(now).new_cards_count

    def record_review(
        self,
        was_new_card: bool,
        elapsed_ms: int = 0,
        now: Optional[datetime] = None
    ) -> None:
        """
        Count one applied rating on today's log.
        """
        log = self.get_log(now).record_review(was_new_card, elapsed_ms)

        session: Session = self._session_factory()
        try:
            key = (self.user_id, log.day.isoformat())
            record = session.get(DailyLogRecord, key)
            if record is None:
                record = DailyLogRecord(user_id=self.user_id, day=log.day.isoformat())
                session.add(record)
            record.new_cards_count = log.new_cards_count
            record.total_reviews = log.total_reviews
            record.time_spent_ms = log.time_spent_ms
            session.commit()
        finally:
            session.close()


# ---- Review sessions ----

class SqlSessionSnapshotStore(SessionSnapshotStore):
    """Persisted in-flight session of one user."""

    def __init__(self, engine: Engine, user_id: Optional[str] = None):
        self._session_factory = make_session_factory(engine)
        self.user_id = user_id or config.get_default_user_id()

    def load(self) -> Optional[ReviewQueue]:
        """
        Load the persisted session.

        Unreadable payloads are logged and treated as no session.
        """
        session: Session = self._session_factory()
        try:
            record = session.get(ReviewSessionRecord, self.user_id)
            if record is None:
                return None
            try:
                document = SessionSnapshotDocument.model_validate_json(record.payload)
            except ValidationError as exc:
                logger.warning("Discarding unreadable session for %s: %s", self.user_id, exc)
                return None
            return document.to_queue()
        finally:
            session.close()

    def save(self, queue: ReviewQueue) -> None:
        payload = SessionSnapshotDocument.from_queue(queue).model_dump_json()

        session: Session = self._session_factory()
        try:
            record = session.get(ReviewSessionRecord, self.user_id)
            if record is None:
                record = ReviewSessionRecord(user_id=self.user_id)
                session.add(record)
            record.payload = payload
            record.updated_at = format_timestamp(utc_now())
            session.commit()
        finally:
            session.close()

    def clear(self) -> None:
        session: Session = self._session_factory()
        try:
            session.query(ReviewSessionRecord).filter(
                ReviewSessionRecord.user_id == self.user_id
            ).delete()
            session.commit()
        finally:
            session.close()
