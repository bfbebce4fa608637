"""Unit tests for completion period keys."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from habitflow.habits.periods import period_label, resolve_period_key


class TestDailyKeys:
    def test_daily_key_is_calendar_date(self):
        instant = datetime(2024, 1, 3, 23, 59, tzinfo=timezone.utc)
        assert resolve_period_key("daily", instant) == date(2024, 1, 3)

    def test_daily_accepts_plain_date(self):
        assert resolve_period_key("daily", date(2024, 2, 29)) == date(2024, 2, 29)

    def test_same_day_same_key(self):
        morning = datetime(2024, 5, 10, 6, 0)
        night = datetime(2024, 5, 10, 22, 30)
        assert resolve_period_key("daily", morning) == resolve_period_key("daily", night)


class TestWeeklyKeys:
    """Weeks run Monday..Sunday; the key is the Monday."""

    @pytest.mark.parametrize(
        ("day", "monday"),
        [
            (date(2024, 1, 1), date(2024, 1, 1)),  # Monday
            (date(2024, 1, 3), date(2024, 1, 1)),  # Wednesday
            (date(2024, 1, 6), date(2024, 1, 1)),  # Saturday
            (date(2024, 1, 7), date(2024, 1, 1)),  # Sunday closes the week
            (date(2024, 1, 8), date(2024, 1, 8)),
        ],
    )
    def test_weekday_maps_to_monday(self, day: date, monday: date):
        assert resolve_period_key("weekly", day) == monday

    def test_sunday_goes_back_six_days(self):
        assert resolve_period_key("weekly", datetime(2024, 3, 10, 12, 0)) == date(2024, 3, 4)

    def test_month_rollover(self):
        # Friday 1 March 2024 belongs to the week opened on Monday 26 February
        assert resolve_period_key("weekly", date(2024, 3, 1)) == date(2024, 2, 26)

    def test_year_rollover(self):
        assert resolve_period_key("weekly", date(2025, 1, 1)) == date(2024, 12, 30)
        assert resolve_period_key("weekly", date(2023, 12, 31)) == date(2023, 12, 25)

    def test_whole_week_shares_one_key(self):
        keys = {resolve_period_key("weekly", date(2024, 4, d)) for d in range(15, 22)}
        assert keys == {date(2024, 4, 15)}

    def test_key_is_always_a_monday(self):
        for d in range(1, 32):
            assert resolve_period_key("weekly", date(2024, 12, d)).weekday() == 0


class TestPeriodHelpers:
    def test_unknown_frequency_rejected(self):
        with pytest.raises(ValueError, match="Unknown frequency"):
            resolve_period_key("monthly", date(2024, 1, 1))

    def test_labels(self):
        assert period_label("daily") == "today"
        assert period_label("weekly") == "this week"
