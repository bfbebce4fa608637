"""Integration tests: completion ledger and per-habit stats against a real database."""

from __future__ import annotations

import asyncio
from datetime import date, datetime, timezone

import pytest
import pytest_asyncio
from sqlalchemy import func, select

from habitflow.db.models import HabitCompletion, User
from habitflow.errors import AlreadyCompletedError, NotFoundError
from habitflow.habits.ledger import list_period_keys, record_completion
from habitflow.habits.service import create_habit, get_stats

from tests.conftest import open_session


def _at(year: int, month: int, day: int, hour: int = 12) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


async def _new_habit(owner: User, name: str, frequency: str, created: datetime) -> int:
    async with open_session() as db:
        habit = await create_habit(db, owner.id, name=name, frequency=frequency, now=created)
        await db.commit()
        return habit.id


@pytest_asyncio.fixture
async def daily_habit(alice: User) -> int:
    return await _new_habit(alice, "Read", "daily", _at(2024, 1, 1, 8))


@pytest_asyncio.fixture
async def weekly_habit(alice: User) -> int:
    return await _new_habit(alice, "Long run", "weekly", _at(2024, 1, 1, 8))


class TestRecordCompletion:
    @pytest.mark.asyncio
    async def test_first_completion_of_period(self, db_session, alice, daily_habit):
        completion = await record_completion(db_session, daily_habit, alice.id, now=_at(2024, 1, 3))
        await db_session.commit()

        assert completion.id is not None
        assert completion.habit_id == daily_habit
        assert completion.user_id == alice.id
        assert completion.period_key == date(2024, 1, 3)

    @pytest.mark.asyncio
    async def test_second_completion_same_day_rejected(self, db_session, alice, daily_habit):
        await record_completion(db_session, daily_habit, alice.id, now=_at(2024, 1, 3, 7))
        await db_session.commit()

        with pytest.raises(AlreadyCompletedError, match="today"):
            await record_completion(db_session, daily_habit, alice.id, now=_at(2024, 1, 3, 21))

    @pytest.mark.asyncio
    async def test_next_day_is_a_new_period(self, db_session, alice, daily_habit):
        await record_completion(db_session, daily_habit, alice.id, now=_at(2024, 1, 3))
        await record_completion(db_session, daily_habit, alice.id, now=_at(2024, 1, 4))
        await db_session.commit()

        assert await list_period_keys(db_session, daily_habit) == [date(2024, 1, 4), date(2024, 1, 3)]

    @pytest.mark.asyncio
    async def test_weekly_same_week_rejected(self, db_session, alice, weekly_habit):
        first = await record_completion(db_session, weekly_habit, alice.id, now=_at(2024, 1, 3))
        await db_session.commit()
        assert first.period_key == date(2024, 1, 1)

        # Sunday still belongs to the week opened on Monday 1 January
        with pytest.raises(AlreadyCompletedError, match="this week"):
            await record_completion(db_session, weekly_habit, alice.id, now=_at(2024, 1, 7))

    @pytest.mark.asyncio
    async def test_weekly_next_monday_accepted(self, db_session, alice, weekly_habit):
        await record_completion(db_session, weekly_habit, alice.id, now=_at(2024, 1, 7))
        second = await record_completion(db_session, weekly_habit, alice.id, now=_at(2024, 1, 8))
        await db_session.commit()
        assert second.period_key == date(2024, 1, 8)

    @pytest.mark.asyncio
    async def test_foreign_habit_not_found(self, db_session, bob, daily_habit):
        with pytest.raises(NotFoundError):
            await record_completion(db_session, daily_habit, bob.id, now=_at(2024, 1, 3))

    @pytest.mark.asyncio
    async def test_missing_habit_not_found(self, db_session, alice):
        with pytest.raises(NotFoundError):
            await record_completion(db_session, 9999, alice.id)


class TestConcurrentCompletion:
    @pytest.mark.asyncio
    async def test_racing_requests_record_exactly_once(self, alice, daily_habit):
        """Two sessions complete the same habit for the same day at once."""

        async def attempt() -> str:
            async with open_session() as db:
                try:
                    await record_completion(db, daily_habit, alice.id, now=_at(2024, 1, 3))
                    await db.commit()
                    return "recorded"
                except AlreadyCompletedError:
                    await db.rollback()
                    return "already_completed"

        results = await asyncio.gather(attempt(), attempt())
        assert sorted(results) == ["already_completed", "recorded"]

        async with open_session() as db:
            count = await db.execute(
                select(func.count()).select_from(HabitCompletion).where(HabitCompletion.habit_id == daily_habit)
            )
            assert count.scalar_one() == 1


class TestHabitStats:
    @pytest.mark.asyncio
    async def test_three_day_streak(self, db_session, alice, daily_habit):
        for day in (1, 2, 3):
            await record_completion(db_session, daily_habit, alice.id, now=_at(2024, 1, day))
        await db_session.commit()

        stats = await get_stats(db_session, daily_habit, alice.id, now=_at(2024, 1, 3, 18))
        assert stats == {
            "current_streak": 3,
            "total_completions": 3,
            "completion_rate": 100.0,
            "expected_completions": 3,
        }

    @pytest.mark.asyncio
    async def test_streak_lapses_after_gap(self, db_session, alice, daily_habit):
        for day in (1, 2, 3):
            await record_completion(db_session, daily_habit, alice.id, now=_at(2024, 1, day))
        await db_session.commit()

        stats = await get_stats(db_session, daily_habit, alice.id, now=_at(2024, 1, 5))
        assert stats["current_streak"] == 0
        assert stats["total_completions"] == 3
        assert stats["completion_rate"] == 60.0

    @pytest.mark.asyncio
    async def test_weekly_stats(self, db_session, alice, weekly_habit):
        await record_completion(db_session, weekly_habit, alice.id, now=_at(2024, 1, 2))
        await record_completion(db_session, weekly_habit, alice.id, now=_at(2024, 1, 10))
        await db_session.commit()

        stats = await get_stats(db_session, weekly_habit, alice.id, now=_at(2024, 1, 14))
        assert stats["current_streak"] == 2
        assert stats["expected_completions"] == 2
        assert stats["completion_rate"] == 100.0

    @pytest.mark.asyncio
    async def test_no_completions(self, db_session, alice, daily_habit):
        stats = await get_stats(db_session, daily_habit, alice.id, now=_at(2024, 1, 4))
        assert stats["current_streak"] == 0
        assert stats["total_completions"] == 0
        assert stats["completion_rate"] == 0.0
        assert stats["expected_completions"] == 4
