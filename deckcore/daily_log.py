"""
Daily usage log - per local calendar day counters.

Feeds the new-card quota of the queue builder. Counters reset when the
local date changes.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class DailyLog:
    day: date
    new_cards_count: int = 0
    total_reviews: int = 0
    time_spent_ms: int = 0

    def rolled_over(self, today: date) -> "DailyLog":
        """Return this log if it is for `today`, otherwise a fresh one."""
        if self.day == today:
            return self
        return DailyLog(day=today)

    def record_review(self, was_new_card: bool, elapsed_ms: int = 0) -> "DailyLog":
        """Count one applied rating."""
        return dataclasses.replace(
            self,
            new_cards_count=self.new_cards_count + (1 if was_new_card else 0),
            total_reviews=self.total_reviews + 1,
            time_spent_ms=self.time_spent_ms + max(0, int(elapsed_ms or 0)),
        )
