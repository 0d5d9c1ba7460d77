"""Review queue assembly and session progression."""

from deckcore.session_builders.pool_types import CardPools, ReviewQueue
from deckcore.session_builders.queue_builder import (
    apply_rating,
    build_pools,
    build_queue,
    daily_limit_reached,
    fresh_candidates,
    remaining_new_quota,
    study_more_new_cards,
)

__all__ = [
    "CardPools",
    "ReviewQueue",
    "apply_rating",
    "build_pools",
    "build_queue",
    "daily_limit_reached",
    "fresh_candidates",
    "remaining_new_quota",
    "study_more_new_cards",
]
