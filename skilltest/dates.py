from __future__ import annotations

"""Local calendar helpers. Every "day" in skilltest is a local calendar day."""

from datetime import date, datetime
from typing import Callable, Union

Clock = Callable[[], datetime]
DayLike = Union[date, datetime, str]


def local_now() -> datetime:
    return datetime.now().astimezone()


def ensure_aware(value: datetime) -> datetime:
    """Attach the local timezone to naive timestamps; aware ones pass through."""
    if value.tzinfo is None:
        return value.astimezone()
    return value


def calendar_day(ts: datetime) -> date:
    return ensure_aware(ts).astimezone().date()


def parse_day(value: DayLike) -> date:
    """Accept a date, a datetime (its local day) or a ``YYYY-MM-DD`` string."""
    if isinstance(value, datetime):
        return calendar_day(value)
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError as e:
        raise ValueError(f"not a calendar date: {value!r}") from e
