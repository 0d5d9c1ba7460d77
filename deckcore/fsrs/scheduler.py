"""
Scheduler - FSRS state machine for a single card

Pure FSRS scheduling and state updates (no database calls).

Main workflow:
1. Load card (caller's responsibility)
2. First review? -> initial S/D from the rating
   Otherwise    -> retrievability, then recall or forget update
3. Pick the next state and due date
4. Return the updated card (caller persists it)

State transitions:
    new        -> learning (AGAIN) | review (HARD/GOOD/EASY)
    learning   -> relearning (AGAIN) | review (GOOD/EASY) | learning (HARD)
    review     -> relearning (AGAIN) | review
    relearning -> relearning (AGAIN/HARD) | review (GOOD/EASY)
"""

from __future__ import annotations

import dataclasses
from datetime import datetime
from typing import Optional

from deckcore.cards import Card, CardState
from deckcore.clock import ensure_utc, utc_now
from deckcore.fsrs import memory_model
from deckcore.fsrs.constants import D_MAX, D_MIN, S_MIN, Rating


RATING_ORDER = (Rating.AGAIN, Rating.HARD, Rating.GOOD, Rating.EASY)


def review(
    card: Card,
    rating: Rating,
    now: Optional[datetime] = None
) -> Card:
    """
    Apply a rating to a card and return its updated copy.

    The input card is never mutated. Malformed memory state on an
    already-reviewed card (missing/zero stability, difficulty out of range,
    last review in the future) is clamped instead of raising.

    Args:
        card: Card in any state
        rating: Learner's rating (Rating, grade or lowercase name)
        now: Review timestamp (defaults to wall-clock now)

    Returns:
        New Card with state, stability, difficulty, due, last_review and reps updated
    """
    if now is None:
        now = utc_now()
    now = ensure_utc(now)
    rating = Rating.parse(rating)
    grade = int(rating)

    if card.state is CardState.NEW:
        difficulty = memory_model.initial_difficulty(grade)
        stability = memory_model.initial_stability(grade)
        next_state = CardState.LEARNING if rating is Rating.AGAIN else CardState.REVIEW
        is_short_term = next_state is CardState.LEARNING
    else:
        current_s = card.stability if card.stability and card.stability > 0 else S_MIN
        current_d = memory_model.clamp(card.difficulty or D_MIN, D_MIN, D_MAX)

        elapsed = memory_model.elapsed_days(card.last_review, now)
        r = memory_model.retrievability(current_s, elapsed)
        difficulty = memory_model.next_difficulty(current_d, grade)

        if rating is Rating.AGAIN:
            stability = memory_model.next_forget_stability(current_d, current_s, r)
            next_state = CardState.RELEARNING
        else:
            stability = memory_model.next_recall_stability(current_d, current_s, r, grade)
            if rating in (Rating.GOOD, Rating.EASY):
                next_state = CardState.REVIEW
            else:
                # HARD does not graduate a (re)learning card
                next_state = card.state
        is_short_term = next_state is CardState.RELEARNING

    stability = memory_model.round_stored(stability)
    difficulty = memory_model.round_stored(difficulty)

    return dataclasses.replace(
        card,
        state=next_state,
        stability=stability,
        difficulty=difficulty,
        due=memory_model.next_due(stability, now, is_short_term),
        last_review=now,
        reps=(card.reps or 0) + 1,
    )


def preview(card: Card, now: Optional[datetime] = None) -> dict[Rating, str]:
    """
    Time-until-due for every possible rating, formatted for buttons.

    Does not mutate the card.

    Returns:
        {Rating.AGAIN: "5m", Rating.HARD: "1d", ...}
    """
    if now is None:
        now = utc_now()
    now = ensure_utc(now)

    result: dict[Rating, str] = {}
    for rating in RATING_ORDER:
        updated = review(card, rating, now)
        minutes = (updated.due - now).total_seconds() / 60.0
        result[rating] = format_interval(minutes)
    return result


def format_interval(minutes: float) -> str:
    """
    Format a duration in minutes as a short label.

    Breakpoints: <1 minute, <60 minutes, <24 hours, <30 days, <365 days,
    else years with one decimal.
    """
    if minutes < 1:
        return "<1m"
    if minutes < 60:
        return f"{memory_model.round_half_up(minutes):.0f}m"
    hours = minutes / 60
    if hours < 24:
        return f"{memory_model.round_half_up(hours):.0f}h"
    days = hours / 24
    if days < 30:
        return f"{memory_model.round_half_up(days):.0f}d"
    if days < 365:
        return f"{memory_model.round_half_up(days / 30):.0f}mo"
    return f"{days / 365:.1f}y"
