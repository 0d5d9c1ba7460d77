"""
FSRS Constants and Parameters

All fixed parameters for the FSRS v4.5 scheduler in one place.
The weight vector is the published default optimization and is never
re-fitted by this package.
"""

from __future__ import annotations

from enum import IntEnum


# ---- Ratings ----

class Rating(IntEnum):
    """Learner's self-assessed recall quality."""
    AGAIN = 1   # Retrieval failed
    HARD = 2    # Retrieved with high effort
    GOOD = 3    # Retrieved normally
    EASY = 4    # Retrieved fluently

    @classmethod
    def parse(cls, value: "Rating | int | str") -> "Rating":
        """
        Accept a Rating, its grade (1-4) or its lowercase name ("again", ...).
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise ValueError(f"Unknown rating: {value!r}") from None
        return cls(value)


# ---- Global Constants ----

REQUEST_RETENTION = 0.9   # Target retention R0
MAXIMUM_INTERVAL = 36500  # Days (Imax)
S_MIN = 0.1               # Minimum stability once reviewed
D_MIN = 1.0
D_MAX = 10.0

# Learning/relearning cards may come back the same day, but not sooner than ~5 minutes
SHORT_TERM_MIN_DAYS = 0.0035

# Stored stability/difficulty are rounded to this many decimals
STORED_DECIMALS = 2


# ---- FSRS v4.5 default weights ----
# w[0..3]   initial stability for AGAIN, HARD, GOOD, EASY
# w[4..7]   difficulty factors
# w[8..10]  recall stability factors
# w[11..14] forget stability factors
# w[15..16] hard penalty, easy bonus

WEIGHTS = (
    0.4, 0.6, 2.4, 5.8,
    4.93, 0.94, 0.86, 0.01,
    1.49, 0.14, 0.94,
    2.18, 0.05, 0.34, 1.26,
    0.29, 2.61,
)


# ---- Session Configuration ----

AGAIN_REINSERT_OFFSET = 3   # Failed card comes back after ~3 other cards
STUDY_MORE_BATCH_SIZE = 10  # "Study 10 more" quota override
