"""User profile endpoints: /api/v1/users/*."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from habitflow.auth.dependencies import get_current_user
from habitflow.database import get_session
from habitflow.db.models import User
from habitflow.users.service import get_public_profile

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


class PublicProfileResponse(BaseModel):
    id: int
    username: str
    full_name: str | None = None
    created_at: datetime
    total_habits: int
    total_completions: int
    is_following: bool


@router.get("/{user_id}", response_model=PublicProfileResponse)
async def get_user_profile(
    user_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> PublicProfileResponse:
    """Another user's profile with totals and whether the caller follows them."""
    profile = await get_public_profile(db, user.id, user_id)
    return PublicProfileResponse(**profile)
