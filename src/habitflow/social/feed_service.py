"""Activity feed: completions by followed users, newest first.

Per-entry counters are projections over the completion ledger computed at
query time, never stored:

- total_completions: every completion recorded for the entry's habit.
- recent_activity_count: distinct period keys of the habit within
  `window_days` of the habit's most recent period key (anchored to the
  habit's latest activity, not to the time of the query).
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Collection
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import select

from habitflow.config import get_settings
from habitflow.db.models import Habit, HabitCompletion, User
from habitflow.social.follow_service import following_ids

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


@dataclass(frozen=True)
class ActivityFeedEntry:
    user_id: int
    username: str
    full_name: str | None
    habit_id: int
    habit_name: str
    category: str | None
    completed_at: datetime
    period_key: date
    total_completions: int
    recent_activity_count: int


def recent_activity_count(period_keys: Collection[date], window_days: int = 30) -> int:
    """Distinct keys no older than `window_days` before the newest key."""
    distinct = set(period_keys)
    if not distinct:
        return 0
    cutoff = max(distinct) - timedelta(days=window_days)
    return sum(1 for key in distinct if key >= cutoff)


async def _period_keys_by_habit(db: AsyncSession, habit_ids: set[int]) -> dict[int, list[date]]:
    result = await db.execute(
        select(HabitCompletion.habit_id, HabitCompletion.period_key).where(
            HabitCompletion.habit_id.in_(habit_ids)
        )
    )
    keys: dict[int, list[date]] = defaultdict(list)
    for habit_id, period_key in result.all():
        keys[habit_id].append(period_key)
    return keys


async def get_activity_feed(
    db: AsyncSession,
    user_id: int,
    limit: int = 50,
    offset: int = 0,
) -> list[ActivityFeedEntry]:
    """Completions by users `user_id` follows, ordered by completion time descending.

    Ties keep insertion order. `limit`/`offset` apply after ordering and no
    total count is computed.
    """
    followed = await following_ids(db, user_id)
    if not followed:
        return []

    result = await db.execute(
        select(HabitCompletion, Habit, User)
        .join(Habit, HabitCompletion.habit_id == Habit.id)
        .join(User, HabitCompletion.user_id == User.id)
        .where(HabitCompletion.user_id.in_(followed))
        .order_by(HabitCompletion.completed_at.desc(), HabitCompletion.id.asc())
        .limit(limit)
        .offset(offset)
    )
    rows = result.all()
    if not rows:
        return []

    window_days = get_settings().feed_recent_window_days
    keys_by_habit = await _period_keys_by_habit(db, {completion.habit_id for completion, _, _ in rows})

    return [
        ActivityFeedEntry(
            user_id=user.id,
            username=user.username,
            full_name=user.full_name,
            habit_id=habit.id,
            habit_name=habit.name,
            category=habit.category,
            completed_at=completion.completed_at,
            period_key=completion.period_key,
            total_completions=len(keys_by_habit[habit.id]),
            recent_activity_count=recent_activity_count(keys_by_habit[habit.id], window_days),
        )
        for completion, habit, user in rows
    ]
