"""
Memory Model - FSRS v4.5 formulas

Pure functions over a card's memory state. No I/O, no clock reads.

Key concepts:
- Stability (S): days until recall probability decays to the target retention
- Difficulty (D): intrinsic hardness of the card (1-10 scale)
- Retrievability (R): probability of successful recall after `elapsed` days

Power forgetting curve: R = (1 + t / (9 * S))^-1
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Optional

from deckcore.clock import ensure_utc
from deckcore.fsrs.constants import (
    D_MAX,
    D_MIN,
    MAXIMUM_INTERVAL,
    REQUEST_RETENTION,
    S_MIN,
    SHORT_TERM_MIN_DAYS,
    STORED_DECIMALS,
    WEIGHTS,
)

w = WEIGHTS

SECONDS_PER_DAY = 86400.0


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def round_half_up(value: float, decimals: int = 0) -> float:
    """Round .5 away from zero for positive values (Python's round() is banker's)."""
    factor = 10 ** decimals
    return math.floor(value * factor + 0.5) / factor


def round_stored(value: float) -> float:
    """Round a stability/difficulty value before it is stored."""
    return round(value, STORED_DECIMALS)


def elapsed_days(last_review: Optional[datetime], now: datetime) -> float:
    """
    Fractional days between the last review and now.

    Missing last review, clock skew and NaN all clamp to 0.
    """
    if last_review is None:
        return 0.0
    days = (ensure_utc(now) - ensure_utc(last_review)).total_seconds() / SECONDS_PER_DAY
    if math.isnan(days) or days < 0:
        return 0.0
    return days


def retrievability(stability: float, elapsed: float) -> float:
    """
    Probability of recall after `elapsed` days.

    Formula: R = (1 + elapsed / (9 * S))^-1

    Only meaningful for S > 0; non-positive stability is treated as S_MIN so
    corrupted input still yields a value in [0, 1].

    Args:
        stability: Current stability in days
        elapsed: Days since last review (negative/NaN clamp to 0)

    Returns:
        Retrievability between 0 and 1
    """
    if math.isnan(elapsed) or elapsed < 0:
        elapsed = 0.0
    if not stability or stability <= 0:
        stability = S_MIN
    return 1.0 / (1.0 + elapsed / (9.0 * stability))


def initial_stability(grade: int) -> float:
    """S0 for the first rating: max(0.1, w[grade - 1])."""
    return max(S_MIN, w[grade - 1])


def initial_difficulty(grade: int) -> float:
    """D0 for the first rating: clamp(w4 - (grade - 3) * w5, 1, 10)."""
    return clamp(w[4] - (grade - 3) * w[5], D_MIN, D_MAX)


def next_difficulty(difficulty: float, grade: int) -> float:
    """
    Update difficulty after a review.

    Formula:
        D' = D - w6 * (grade - 3)
        D_new = w7 * D0(EASY) + (1 - w7) * D'

    Returns:
        New difficulty, clamped to [1, 10]
    """
    shifted = difficulty - w[6] * (grade - 3)
    reverted = w[7] * initial_difficulty(4) + (1 - w[7]) * shifted
    return clamp(reverted, D_MIN, D_MAX)


def next_recall_stability(
    difficulty: float,
    stability: float,
    retrievability_value: float,
    grade: int
) -> float:
    """
    Stability after a successful recall (HARD, GOOD, EASY).

    Formula:
        S' = S * (1 + e^w8 * (11 - D) * S^-w9 * (e^(w10 * (1 - R)) - 1)
                  * hard_penalty * easy_bonus)

    Where hard_penalty = w15 for HARD and easy_bonus = w16 for EASY.

    Returns:
        New stability, capped at the maximum interval
    """
    hard_penalty = w[15] if grade == 2 else 1.0
    easy_bonus = w[16] if grade == 4 else 1.0

    growth = (
        math.exp(w[8])
        * (11 - difficulty)
        * math.pow(stability, -w[9])
        * (math.exp(w[10] * (1 - retrievability_value)) - 1)
        * hard_penalty
        * easy_bonus
    )
    return min(MAXIMUM_INTERVAL, stability * (1 + growth))


def next_forget_stability(
    difficulty: float,
    stability: float,
    retrievability_value: float
) -> float:
    """
    Stability after a lapse (AGAIN).

    Formula:
        S' = w11 * D^-w12 * ((S + 1)^w13 - 1) * e^(w14 * (1 - R))

    Returns:
        New stability, at least S_MIN
    """
    new_stability = (
        w[11]
        * math.pow(difficulty, -w[12])
        * (math.pow(stability + 1, w[13]) - 1)
        * math.exp(w[14] * (1 - retrievability_value))
    )
    return clamp(new_stability, S_MIN, MAXIMUM_INTERVAL)


def next_interval_days(stability: float, is_short_term: bool = False) -> float:
    """
    Days until the card should be seen again.

    At the target retention R0 the interval equals S * 9 * (1/R0 - 1).
    Long-term (review) intervals are whole days, minimum one day.
    Short-term (learning/relearning) intervals stay fractional with a
    ~5 minute floor.
    """
    days = stability * 9 * (1 / REQUEST_RETENTION - 1)
    if is_short_term:
        return max(SHORT_TERM_MIN_DAYS, days)
    return min(MAXIMUM_INTERVAL, max(1.0, round_half_up(days)))


def next_due(stability: float, now: datetime, is_short_term: bool = False) -> datetime:
    """Absolute due timestamp: now + next_interval_days(S)."""
    days = next_interval_days(stability, is_short_term)
    return ensure_utc(now) + timedelta(days=days)
