"""Unit tests for habit name comparison keys."""

from __future__ import annotations

from habitflow.habits.service import habit_name_key


class TestHabitNameKey:
    def test_ascii_case_folded(self):
        assert habit_name_key("Read") == habit_name_key("READ") == "read"

    def test_non_ascii_case_folded(self):
        assert habit_name_key("Ärger") == habit_name_key("ärger")
        assert habit_name_key("Straße") == habit_name_key("STRASSE")

    def test_distinct_names_stay_distinct(self):
        assert habit_name_key("Run") != habit_name_key("Ruin")
