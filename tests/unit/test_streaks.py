"""Unit tests for current-streak calculation."""

from __future__ import annotations

from datetime import date, timedelta

from habitflow.habits.stats import current_streak


def _daily_run(last: date, length: int) -> list[date]:
    return [last - timedelta(days=i) for i in range(length)]


class TestDailyStreak:
    def test_no_history(self):
        assert current_streak([], "daily", date(2024, 1, 3)) == 0

    def test_three_consecutive_days(self):
        keys = [date(2024, 1, 3), date(2024, 1, 2), date(2024, 1, 1)]
        assert current_streak(keys, "daily", date(2024, 1, 3)) == 3

    def test_yesterday_keeps_streak_alive(self):
        keys = [date(2024, 1, 3), date(2024, 1, 2), date(2024, 1, 1)]
        assert current_streak(keys, "daily", date(2024, 1, 4)) == 3

    def test_two_day_gap_resets(self):
        keys = [date(2024, 1, 3), date(2024, 1, 2), date(2024, 1, 1)]
        assert current_streak(keys, "daily", date(2024, 1, 5)) == 0

    def test_stops_at_first_break(self):
        keys = [date(2024, 1, 10), date(2024, 1, 9), date(2024, 1, 7), date(2024, 1, 6)]
        assert current_streak(keys, "daily", date(2024, 1, 10)) == 2

    def test_single_completion_today(self):
        assert current_streak([date(2024, 6, 1)], "daily", date(2024, 6, 1)) == 1

    def test_long_run_across_month_end(self):
        keys = _daily_run(date(2024, 3, 5), 40)
        assert current_streak(keys, "daily", date(2024, 3, 5)) == 40


class TestWeeklyStreak:
    KEYS = [date(2024, 1, 15), date(2024, 1, 8), date(2024, 1, 1)]

    def test_consecutive_weeks(self):
        assert current_streak(self.KEYS, "weekly", date(2024, 1, 17)) == 3

    def test_alive_up_to_seven_days_after_latest_key(self):
        assert current_streak(self.KEYS, "weekly", date(2024, 1, 22)) == 3

    def test_dead_after_seven_days(self):
        assert current_streak(self.KEYS, "weekly", date(2024, 1, 23)) == 0

    def test_skipped_week_breaks(self):
        keys = [date(2024, 1, 29), date(2024, 1, 15), date(2024, 1, 8)]
        assert current_streak(keys, "weekly", date(2024, 1, 29)) == 1

    def test_link_tolerance_band(self):
        today = date(2024, 2, 1)
        assert current_streak([today, today - timedelta(days=6)], "weekly", today) == 2
        assert current_streak([today, today - timedelta(days=8)], "weekly", today) == 2
        assert current_streak([today, today - timedelta(days=5)], "weekly", today) == 1
        assert current_streak([today, today - timedelta(days=9)], "weekly", today) == 1
