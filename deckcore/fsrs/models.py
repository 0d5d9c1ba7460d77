"""
SQLAlchemy ORM Models for the deck database

Defines the card, daily log and review session tables.
Timestamps are stored as ISO-8601 strings.
"""

from sqlalchemy import Column, Float, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class CardRecord(Base):
    """
    Persistent content and FSRS state of a single card.
    """
    __tablename__ = 'cards'

    # Primary key: composite of user_id and card id
    user_id = Column(String(255), primary_key=True, nullable=False)
    card_id = Column(String(255), primary_key=True, nullable=False)

    # Content (opaque to scheduling)
    front = Column(Text, nullable=False, default="")
    pronunciation = Column(Text, nullable=False, default="")
    meaning = Column(Text, nullable=False, default="")
    hint = Column(Text, nullable=True)

    # FSRS memory state
    state = Column(String(20), nullable=False, default="new")
    stability = Column(Float, nullable=True)
    difficulty = Column(Float, nullable=True)
    due = Column(String(64), nullable=True)  # Unset while state == new
    last_review = Column(String(64), nullable=True)
    reps = Column(Integer, nullable=True, default=0)

    # Relative order of cards (new cards are introduced in this order)
    position = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<CardRecord({self.user_id}, {self.card_id}, {self.state})>"


class DailyLogRecord(Base):
    """
    Per-day usage counters (one row per user and local calendar date).
    """
    __tablename__ = 'daily_log'

    user_id = Column(String(255), primary_key=True, nullable=False)
    day = Column(String(10), primary_key=True, nullable=False)  # YYYY-MM-DD

    new_cards_count = Column(Integer, nullable=False, default=0)
    total_reviews = Column(Integer, nullable=False, default=0)
    time_spent_ms = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<DailyLogRecord({self.user_id}, {self.day}, new={self.new_cards_count})>"


class ReviewSessionRecord(Base):
    """
    In-flight review session of a user (at most one).
    """
    __tablename__ = 'review_sessions'

    user_id = Column(String(255), primary_key=True, nullable=False)
    payload = Column(Text, nullable=False)  # SessionSnapshotDocument JSON
    updated_at = Column(String(64), nullable=False)

    def __repr__(self):
        return f"<ReviewSessionRecord({self.user_id}, updated_at={self.updated_at})>"
