"""Pydantic schemas for social endpoints."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel


# --- Follow graph ---


class FollowResponse(BaseModel):
    id: int
    follower_id: int
    following_id: int
    created_at: datetime


class FollowedUserResponse(BaseModel):
    id: int
    username: str
    full_name: str | None = None
    followed_at: datetime


class UserSearchResult(BaseModel):
    id: int
    username: str
    full_name: str | None = None
    created_at: datetime
    is_following: bool


# --- Activity Feed ---


class ActivityFeedEntryResponse(BaseModel):
    user_id: int
    username: str
    full_name: str | None = None
    habit_id: int
    habit_name: str
    category: str | None = None
    completed_at: datetime
    period_key: date
    total_completions: int
    recent_activity_count: int
