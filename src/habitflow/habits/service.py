"""Habit records and per-habit statistics.

Rules:
- Habit names are unique per owner, case-insensitive
- Frequency is 'daily' or 'weekly'
- Deleting a habit deletes its completions
- Stats are derived from the completion ledger on every call
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from habitflow.db.models import Habit, HabitCompletion
from habitflow.errors import BadRequestError, ConflictError, NotFoundError
from habitflow.habits.ledger import get_owned_habit, list_period_keys
from habitflow.habits.stats import completion_rate, current_streak, expected_completions

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

_UPDATABLE_FIELDS = ("name", "description", "frequency", "category")
_NULLABLE_FIELDS = ("description", "category")


def habit_name_key(name: str) -> str:
    """Comparison key for habit names: Unicode case folding, not just ASCII."""
    return name.casefold()


async def _ensure_name_available(
    db: AsyncSession,
    owner_id: int,
    name: str,
    exclude_id: int | None = None,
) -> None:
    query = select(Habit.id).where(
        Habit.user_id == owner_id,
        Habit.name_key == habit_name_key(name),
    )
    if exclude_id is not None:
        query = query.where(Habit.id != exclude_id)
    existing = await db.execute(query)
    if existing.first() is not None:
        msg = "You already have a habit with this name"
        raise ConflictError(msg)


async def _flush_or_conflict(db: AsyncSession) -> None:
    """Flush, translating a lost race on the name index into ConflictError."""
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        msg = "You already have a habit with this name"
        raise ConflictError(msg) from e


async def list_habits(db: AsyncSession, owner_id: int) -> list[Habit]:
    """All habits of a user with completions loaded, newest habit first."""
    result = await db.execute(
        select(Habit)
        .where(Habit.user_id == owner_id)
        .options(selectinload(Habit.completions))
        .order_by(Habit.created_at.desc(), Habit.id.desc())
    )
    return list(result.scalars().all())


async def get_habit(db: AsyncSession, habit_id: int, owner_id: int) -> Habit:
    """One habit with completions loaded. Raises NotFoundError."""
    result = await db.execute(
        select(Habit)
        .where(Habit.id == habit_id, Habit.user_id == owner_id)
        .options(selectinload(Habit.completions))
    )
    habit = result.scalar_one_or_none()
    if habit is None:
        msg = "Habit not found"
        raise NotFoundError(msg)
    return habit


async def create_habit(
    db: AsyncSession,
    owner_id: int,
    name: str,
    frequency: str,
    description: str | None = None,
    category: str | None = None,
    now: datetime | None = None,
) -> Habit:
    """Create a habit.

    Raises:
        ConflictError: If the owner already has a habit with this name.
    """
    await _ensure_name_available(db, owner_id, name)

    habit = Habit(
        user_id=owner_id,
        name=name,
        name_key=habit_name_key(name),
        description=description,
        frequency=frequency,
        category=category,
        created_at=now or datetime.now(timezone.utc),
    )
    db.add(habit)
    await _flush_or_conflict(db)
    logger.info("habit_created", habit_id=habit.id, user_id=owner_id, frequency=frequency)
    return habit


async def update_habit(
    db: AsyncSession,
    habit_id: int,
    owner_id: int,
    changes: dict[str, Any],
) -> Habit:
    """Apply a partial update.

    Raises:
        NotFoundError: If the habit is missing or not owned.
        BadRequestError: If `changes` has no updatable field.
        ConflictError: If the new name collides with another habit of the owner.
    """
    habit = await get_owned_habit(db, habit_id, owner_id)

    updates = {
        k: v
        for k, v in changes.items()
        if k in _UPDATABLE_FIELDS and (v is not None or k in _NULLABLE_FIELDS)
    }
    if not updates:
        msg = "No fields to update"
        raise BadRequestError(msg)

    new_name = updates.get("name")
    if new_name is not None:
        updates["name_key"] = habit_name_key(new_name)
        await _ensure_name_available(db, owner_id, new_name, exclude_id=habit.id)

    for field, value in updates.items():
        setattr(habit, field, value)
    await _flush_or_conflict(db)
    logger.info("habit_updated", habit_id=habit.id, fields=sorted(updates))
    return habit


async def delete_habit(db: AsyncSession, habit_id: int, owner_id: int) -> None:
    """Delete a habit and every completion recorded for it. Raises NotFoundError."""
    habit = await get_owned_habit(db, habit_id, owner_id)
    await db.execute(delete(HabitCompletion).where(HabitCompletion.habit_id == habit.id))
    await db.delete(habit)
    await db.flush()
    logger.info("habit_deleted", habit_id=habit_id, user_id=owner_id)


async def get_stats(
    db: AsyncSession,
    habit_id: int,
    owner_id: int,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Current streak, totals and completion rate for one habit. Raises NotFoundError."""
    habit = await get_owned_habit(db, habit_id, owner_id)
    today = (now or datetime.now(timezone.utc)).date()

    keys = await list_period_keys(db, habit.id)
    total_result = await db.execute(
        select(func.count()).select_from(HabitCompletion).where(HabitCompletion.habit_id == habit.id)
    )
    total = total_result.scalar_one()

    return {
        "current_streak": current_streak(keys, habit.frequency, today),
        "total_completions": total,
        "completion_rate": completion_rate(habit.created_at, habit.frequency, total, today),
        "expected_completions": expected_completions(habit.created_at, habit.frequency, today),
    }
