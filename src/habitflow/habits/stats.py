"""Streak and completion-rate calculations.

Pure functions over completion history; nothing here touches the database.
Stats are recomputed from the ledger on every read.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal

# Max days between today and the latest key for the streak to still be alive.
DAILY_GRACE_DAYS = 1
WEEKLY_GRACE_DAYS = 7

# Accepted spacing between consecutive weekly keys.
WEEKLY_LINK_MIN_DAYS = 6
WEEKLY_LINK_MAX_DAYS = 8


def _is_linked(frequency: str, days: int) -> bool:
    if frequency == "daily":
        return days == 1
    return WEEKLY_LINK_MIN_DAYS <= days <= WEEKLY_LINK_MAX_DAYS


def current_streak(period_keys_desc: Sequence[date], frequency: str, today: date) -> int:
    """Length of the unbroken run of periods ending at (or next to) today.

    `period_keys_desc` must be deduplicated and sorted strictly descending.
    The scan stops at the first broken link and never looks past it.
    """
    if not period_keys_desc:
        return 0

    gap = (today - period_keys_desc[0]).days
    grace = DAILY_GRACE_DAYS if frequency == "daily" else WEEKLY_GRACE_DAYS
    if gap > grace:
        return 0

    streak = 1
    for newer, older in zip(period_keys_desc, period_keys_desc[1:]):
        if not _is_linked(frequency, (newer - older).days):
            break
        streak += 1
    return streak


def habit_age_days(created_at: datetime | date, today: date) -> int:
    """Days since creation, counting the creation day itself."""
    created = created_at.date() if isinstance(created_at, datetime) else created_at
    return (today - created).days + 1


def expected_completions(created_at: datetime | date, frequency: str, today: date) -> int:
    """Number of periods the habit could have been completed in so far."""
    age = habit_age_days(created_at, today)
    if frequency == "daily":
        return age
    return math.ceil(age / 7)


def round_half_away(value: float, places: int = 1) -> float:
    """Round half away from zero (Python's round() is banker's rounding)."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def completion_rate(
    created_at: datetime | date,
    frequency: str,
    actual_count: int,
    today: date,
) -> float:
    """Completions as a percentage of expected periods, one decimal. Not clamped at 100."""
    expected = expected_completions(created_at, frequency, today)
    if expected <= 0:
        return 0.0
    return round_half_away(actual_count / expected * 100)
