"""Completion periods: which calendar bucket an instant falls into for a habit's frequency.

A period key is a plain date. Daily habits bucket by calendar date; weekly
habits bucket by the Monday that opens the Monday..Sunday week. There is no
timezone handling: the instant is read in whatever calendar it already carries.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Literal

Frequency = Literal["daily", "weekly"]


def _sunday_based_weekday(day: date) -> int:
    """Day of week with Sunday = 0 .. Saturday = 6."""
    return (day.weekday() + 1) % 7


def resolve_period_key(frequency: str, instant: datetime | date) -> date:
    """Map an instant to the canonical period key for `frequency`.

    Weekly: monday = day - weekday + (-6 if Sunday else 1), with month/year
    rollover handled by date arithmetic.
    """
    day = instant.date() if isinstance(instant, datetime) else instant
    if frequency == "daily":
        return day
    if frequency == "weekly":
        weekday = _sunday_based_weekday(day)
        offset = -weekday + (-6 if weekday == 0 else 1)
        return day + timedelta(days=offset)
    msg = f"Unknown frequency: {frequency!r}"
    raise ValueError(msg)


def period_label(frequency: str) -> str:
    """Human label for the current period, used in 'already completed' messages."""
    return "today" if frequency == "daily" else "this week"
