"""Habit endpoints: /api/v1/habits/*."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from habitflow.auth.dependencies import get_current_user
from habitflow.database import get_session
from habitflow.db.models import Habit, HabitCompletion, User
from habitflow.habits.ledger import record_completion
from habitflow.habits.schemas import (
    CompletionResponse,
    CompletionSummary,
    CreateHabitRequest,
    HabitDetailResponse,
    HabitResponse,
    HabitStatsResponse,
    UpdateHabitRequest,
)
from habitflow.habits.service import (
    create_habit,
    delete_habit,
    get_habit,
    get_stats,
    list_habits,
    update_habit,
)

router = APIRouter(prefix="/api/v1/habits", tags=["Habits"])


# ── Helpers ──


def _habit_response(habit: Habit) -> HabitResponse:
    return HabitResponse(
        id=habit.id,
        user_id=habit.user_id,
        name=habit.name,
        description=habit.description,
        frequency=habit.frequency,
        category=habit.category,
        created_at=habit.created_at,
    )


def _habit_detail(habit: Habit) -> HabitDetailResponse:
    return HabitDetailResponse(
        **_habit_response(habit).model_dump(),
        completions=[
            CompletionSummary(id=c.id, period_key=c.period_key, completed_at=c.completed_at)
            for c in habit.completions
        ],
    )


def _completion_response(completion: HabitCompletion) -> CompletionResponse:
    return CompletionResponse(
        id=completion.id,
        habit_id=completion.habit_id,
        user_id=completion.user_id,
        period_key=completion.period_key,
        completed_at=completion.completed_at,
    )


# ── Habit records ──


@router.get("", response_model=list[HabitDetailResponse])
async def list_habits_endpoint(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """All of the caller's habits with their completions."""
    habits = await list_habits(db, user.id)
    return [_habit_detail(h) for h in habits]


@router.get("/{habit_id}", response_model=HabitDetailResponse)
async def get_habit_endpoint(
    habit_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    habit = await get_habit(db, habit_id, user.id)
    return _habit_detail(habit)


@router.post("", response_model=HabitResponse, status_code=201)
async def create_habit_endpoint(
    body: CreateHabitRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    habit = await create_habit(
        db,
        user.id,
        name=body.name,
        frequency=body.frequency,
        description=body.description,
        category=body.category,
    )
    await db.commit()
    return _habit_response(habit)


@router.put("/{habit_id}", response_model=HabitResponse)
async def update_habit_endpoint(
    habit_id: int,
    body: UpdateHabitRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Update any of name/description/frequency/category."""
    habit = await update_habit(db, habit_id, user.id, body.model_dump(exclude_unset=True))
    await db.commit()
    return _habit_response(habit)


@router.delete("/{habit_id}")
async def delete_habit_endpoint(
    habit_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    await delete_habit(db, habit_id, user.id)
    await db.commit()
    return {"message": "Habit deleted successfully"}


# ── Completions & stats ──


@router.post("/{habit_id}/complete", response_model=CompletionResponse, status_code=201)
async def complete_habit_endpoint(
    habit_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Mark the habit done for today (daily) or this week (weekly)."""
    completion = await record_completion(db, habit_id, user.id)
    await db.commit()
    return _completion_response(completion)


@router.get("/{habit_id}/stats", response_model=HabitStatsResponse)
async def habit_stats_endpoint(
    habit_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Current streak, completion rate and totals."""
    stats = await get_stats(db, habit_id, user.id)
    return HabitStatsResponse(**stats)
