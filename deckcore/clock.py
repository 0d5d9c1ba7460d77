"""
Time helpers shared by the scheduler, the queue builder and the stores.

All timestamps handled by deckcore are timezone-aware. Naive datetimes are
interpreted as UTC.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional, Union


TimestampLike = Union[datetime, str, None]


class SystemClock:
    """Wall-clock source of "now"."""

    def now(self) -> datetime:
        return utc_now()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes; leave aware ones untouched."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_timestamp(value: TimestampLike) -> Optional[datetime]:
    """
    Parse a stored timestamp.

    Accepts datetimes and ISO-8601 strings (including a trailing "Z").
    Returns None for empty, missing or unparseable values.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return ensure_utc(datetime.fromisoformat(text))
    except ValueError:
        return None


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    return ensure_utc(value).isoformat() if value is not None else None


def local_date(now: datetime) -> date:
    """Calendar date of `now` in the machine's local timezone."""
    return ensure_utc(now).astimezone().date()
