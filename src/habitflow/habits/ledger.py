"""Completion ledger: append-only (habit, period) facts.

Recording uses one conditional insert against the
uq_habit_completions_habit_period constraint, so two racing requests for the
same habit and period resolve in storage: one row comes back, the other
caller gets AlreadyCompletedError. There is no read-then-write check.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select

from habitflow.database import insert_for
from habitflow.db.models import Habit, HabitCompletion
from habitflow.errors import AlreadyCompletedError, NotFoundError
from habitflow.habits.periods import period_label, resolve_period_key

if TYPE_CHECKING:
    from datetime import date

    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def get_owned_habit(db: AsyncSession, habit_id: int, owner_id: int) -> Habit:
    """Fetch a habit scoped to its owner.

    Raises:
        NotFoundError: If the habit does not exist or belongs to someone else.
    """
    result = await db.execute(
        select(Habit).where(Habit.id == habit_id, Habit.user_id == owner_id)
    )
    habit = result.scalar_one_or_none()
    if habit is None:
        msg = "Habit not found"
        raise NotFoundError(msg)
    return habit


async def insert_completion_if_absent(
    db: AsyncSession,
    habit_id: int,
    user_id: int,
    period_key: date,
    completed_at: datetime,
) -> HabitCompletion | None:
    """Atomically insert a completion unless one exists for (habit_id, period_key).

    Returns the new record, or None when the period was already taken.
    """
    insert = insert_for(db)
    stmt = (
        insert(HabitCompletion)
        .values(
            habit_id=habit_id,
            user_id=user_id,
            period_key=period_key,
            completed_at=completed_at,
        )
        .on_conflict_do_nothing(index_elements=["habit_id", "period_key"])
        .returning(HabitCompletion)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def record_completion(
    db: AsyncSession,
    habit_id: int,
    owner_id: int,
    now: datetime | None = None,
) -> HabitCompletion:
    """Record a completion of `habit_id` for the period containing `now`.

    Raises:
        NotFoundError: If the habit is missing or not owned by `owner_id`.
        AlreadyCompletedError: If the period already has a completion.
    """
    habit = await get_owned_habit(db, habit_id, owner_id)

    if now is None:
        now = datetime.now(timezone.utc)
    period_key = resolve_period_key(habit.frequency, now)

    completion = await insert_completion_if_absent(db, habit.id, owner_id, period_key, now)
    if completion is None:
        logger.info(
            "completion_already_recorded",
            habit_id=habit.id,
            period_key=period_key.isoformat(),
        )
        msg = f"This habit has already been completed for {period_label(habit.frequency)}"
        raise AlreadyCompletedError(msg)

    logger.info(
        "completion_recorded",
        habit_id=habit.id,
        user_id=owner_id,
        period_key=period_key.isoformat(),
    )
    return completion


async def list_period_keys(db: AsyncSession, habit_id: int) -> list[date]:
    """All recorded period keys of a habit, distinct, newest first."""
    result = await db.execute(
        select(HabitCompletion.period_key)
        .where(HabitCompletion.habit_id == habit_id)
        .distinct()
        .order_by(HabitCompletion.period_key.desc())
    )
    return list(result.scalars().all())
