"""Pydantic schemas for habit endpoints."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator

from habitflow.habits.periods import Frequency


class CreateHabitRequest(BaseModel):
    name: str = Field(..., max_length=100)
    description: str | None = None
    frequency: Frequency
    category: str | None = Field(None, max_length=50)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Habit name is required")
        return v

    @field_validator("description", "category")
    @classmethod
    def strip_optional(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None


class UpdateHabitRequest(BaseModel):
    """Partial update; only fields present in the body are applied."""

    name: str | None = Field(None, max_length=100)
    description: str | None = None
    frequency: Frequency | None = None
    category: str | None = Field(None, max_length=50)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("Habit name cannot be empty")
        return v

    @field_validator("description", "category")
    @classmethod
    def strip_optional(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None


class CompletionResponse(BaseModel):
    id: int
    habit_id: int
    user_id: int
    period_key: date
    completed_at: datetime


class CompletionSummary(BaseModel):
    id: int
    period_key: date
    completed_at: datetime


class HabitResponse(BaseModel):
    id: int
    user_id: int
    name: str
    description: str | None = None
    frequency: str
    category: str | None = None
    created_at: datetime


class HabitDetailResponse(HabitResponse):
    completions: list[CompletionSummary] = []


class HabitStatsResponse(BaseModel):
    current_streak: int
    total_completions: int
    completion_rate: float
    expected_completions: int
