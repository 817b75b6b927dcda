"""Unit tests for weekday and recurrence date math."""

from datetime import date

import pytest

from src.core.recurrence import (
    first_occurrence_on_or_after,
    month_bounds,
    parse_weekday,
    step_dates,
    sunday_based_weekday,
    weekday_index,
    weekly_occurrences,
)


@pytest.mark.unit
class TestWeekdayIndex:
    """Tests for weekday_index and parse_weekday."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [("Sunday", 0), ("monday", 1), ("TUESDAY", 2), (" Wednesday ", 3), ("thursday", 4), ("Friday", 5), ("saturday", 6)],
    )
    def test_sunday_first_mapping(self, name, expected):
        """Test names map to Sunday=0 indices case-insensitively."""
        assert weekday_index(name) == expected

    def test_unknown_name_defaults_to_sunday(self):
        """Test unrecognised names resolve to Sunday instead of failing."""
        assert weekday_index("Funday") == 0
        assert weekday_index("") == 0

    def test_parse_weekday_rejects_unknown(self):
        """Test the strict variant raises on bad input."""
        with pytest.raises(ValueError, match="Unknown weekday"):
            parse_weekday("Funday")

    def test_parse_weekday_accepts_known(self):
        """Test the strict variant agrees with weekday_index on valid names."""
        assert parse_weekday("Monday") == weekday_index("Monday")

    def test_sunday_based_weekday(self):
        """Test conversion of Python's Monday-first weekday."""
        assert sunday_based_weekday(date(2025, 1, 5)) == 0  # Sunday
        assert sunday_based_weekday(date(2025, 1, 1)) == 3  # Wednesday
        assert sunday_based_weekday(date(2025, 1, 4)) == 6  # Saturday


@pytest.mark.unit
class TestOccurrences:
    """Tests for first_occurrence_on_or_after and weekly_occurrences."""

    def test_first_occurrence_later_in_week(self):
        """Test advancing from a Wednesday to the next Monday."""
        assert first_occurrence_on_or_after(date(2025, 1, 1), 1) == date(2025, 1, 6)

    def test_first_occurrence_same_day(self):
        """Test a start date already on the weekday is returned as is."""
        assert first_occurrence_on_or_after(date(2025, 1, 1), 3) == date(2025, 1, 1)

    def test_first_occurrence_beyond_range_end(self):
        """Test None is returned when the occurrence lies past the range."""
        assert first_occurrence_on_or_after(date(2025, 1, 1), 1, date(2025, 1, 3)) is None

    def test_weekly_occurrences_inclusive_end(self):
        """Test stepping by 7 days up to and including the range end."""
        assert weekly_occurrences(date(2025, 1, 6), date(2025, 1, 27)) == (
            date(2025, 1, 6),
            date(2025, 1, 13),
            date(2025, 1, 20),
            date(2025, 1, 27),
        )

    def test_weekly_occurrences_empty_when_first_after_end(self):
        """Test an empty range yields nothing."""
        assert weekly_occurrences(date(2025, 2, 3), date(2025, 1, 31)) == ()

    def test_weekly_occurrences_is_restartable(self):
        """Test repeated calls with the same inputs give the same result."""
        first = weekly_occurrences(date(2025, 1, 6), date(2025, 3, 31))
        assert weekly_occurrences(date(2025, 1, 6), date(2025, 3, 31)) == first


@pytest.mark.unit
class TestMonthBounds:
    """Tests for month_bounds."""

    def test_leap_february(self):
        """Test February in a leap year ends on the 29th."""
        assert month_bounds(date(2024, 2, 15)) == (date(2024, 2, 1), date(2024, 2, 29))

    def test_december(self):
        """Test the year boundary."""
        assert month_bounds(date(2024, 12, 31)) == (date(2024, 12, 1), date(2024, 12, 31))


@pytest.mark.unit
class TestStepDates:
    """Tests for step_dates."""

    def test_weekly_excludes_anchor(self):
        """Test weekly steps start one week after the anchor and include the end."""
        assert step_dates(date(2024, 1, 8), "weekly", date(2024, 1, 29)) == (
            date(2024, 1, 15),
            date(2024, 1, 22),
            date(2024, 1, 29),
        )

    def test_biweekly(self):
        """Test biweekly steps are 14 days apart."""
        assert step_dates(date(2024, 1, 1), "biweekly", date(2024, 1, 31)) == (date(2024, 1, 15), date(2024, 1, 29))

    def test_monthly_clamps_without_drift(self):
        """Test a month-end anchor is clamped per month and recovers the 31st."""
        assert step_dates(date(2024, 1, 31), "monthly", date(2024, 5, 31)) == (
            date(2024, 2, 29),
            date(2024, 3, 31),
            date(2024, 4, 30),
            date(2024, 5, 31),
        )

    def test_nothing_when_first_step_past_end(self):
        """Test an end date before the first step yields nothing."""
        assert step_dates(date(2024, 1, 8), "weekly", date(2024, 1, 14)) == ()

    def test_onetime_rejected(self):
        """Test a non-recurring frequency raises."""
        with pytest.raises(ValueError, match="does not recur"):
            step_dates(date(2024, 1, 8), "onetime", date(2024, 2, 1))
