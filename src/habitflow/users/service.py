"""Public user profiles."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select

from habitflow.auth.service import get_user_by_id
from habitflow.db.models import Habit, HabitCompletion
from habitflow.errors import NotFoundError
from habitflow.social.follow_service import is_following

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


async def get_public_profile(db: AsyncSession, viewer_id: int, user_id: int) -> dict[str, Any]:
    """Profile of `user_id` as seen by `viewer_id`, with habit and completion totals.

    Raises:
        NotFoundError: If the user does not exist.
    """
    user = await get_user_by_id(db, user_id)
    if user is None:
        msg = "User not found"
        raise NotFoundError(msg)

    habits = await db.execute(select(func.count()).select_from(Habit).where(Habit.user_id == user.id))
    completions = await db.execute(
        select(func.count()).select_from(HabitCompletion).where(HabitCompletion.user_id == user.id)
    )

    return {
        "id": user.id,
        "username": user.username,
        "full_name": user.full_name,
        "created_at": user.created_at,
        "total_habits": habits.scalar_one(),
        "total_completions": completions.scalar_one(),
        "is_following": await is_following(db, viewer_id, user.id),
    }
