"""Social API endpoints: follow graph, user search and the activity feed."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from habitflow.auth.dependencies import get_current_user
from habitflow.config import get_settings
from habitflow.database import get_session
from habitflow.db.models import User
from habitflow.social.feed_service import get_activity_feed
from habitflow.social.follow_service import (
    follow,
    list_followers,
    list_following,
    search_users,
    unfollow,
)
from habitflow.social.schemas import (
    ActivityFeedEntryResponse,
    FollowedUserResponse,
    FollowResponse,
    UserSearchResult,
)

router = APIRouter(prefix="/api/v1/social", tags=["Social"])


# ── Users ──


@router.get("/users/search", response_model=list[UserSearchResult])
async def search_users_endpoint(
    q: str = Query(..., min_length=1, max_length=100),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Find users by username or full name."""
    rows = await search_users(db, user.id, q.strip(), limit=get_settings().user_search_limit)
    return [UserSearchResult(**row) for row in rows]


# ── Follow graph ──


@router.post("/follow/{user_id}", response_model=FollowResponse, status_code=201)
async def follow_endpoint(
    user_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    edge = await follow(db, user.id, user_id)
    await db.commit()
    return FollowResponse(
        id=edge.id,
        follower_id=edge.follower_id,
        following_id=edge.following_id,
        created_at=edge.created_at,
    )


@router.delete("/follow/{user_id}")
async def unfollow_endpoint(
    user_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    await unfollow(db, user.id, user_id)
    await db.commit()
    return {"message": "Unfollowed successfully"}


@router.get("/following", response_model=list[FollowedUserResponse])
async def following_endpoint(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    rows = await list_following(db, user.id)
    return [FollowedUserResponse(**row) for row in rows]


@router.get("/followers", response_model=list[FollowedUserResponse])
async def followers_endpoint(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    rows = await list_followers(db, user.id)
    return [FollowedUserResponse(**row) for row in rows]


# ── Activity feed ──


@router.get("/feed", response_model=list[ActivityFeedEntryResponse])
async def feed_endpoint(
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Completions by followed users, newest first."""
    entries = await get_activity_feed(db, user.id, limit=limit, offset=offset)
    return [ActivityFeedEntryResponse(**asdict(entry)) for entry in entries]
