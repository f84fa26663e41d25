"""
Tests for Schedule Overlap Validator
Tests conflict detection between schedules of the same medication
"""

import pytest

from tools.overlap_validator import (
    ScheduleOverlapValidator,
    ScheduleCandidate,
    normalize_times,
    normalize_weekdays,
    check_overlap,
)


@pytest.fixture
def validator():
    return ScheduleOverlapValidator()


def daily(times, schedule_id=None, is_active=True):
    return ScheduleCandidate("daily", times=times, is_active=is_active, schedule_id=schedule_id)


def weekly(times, weekdays, schedule_id=None, is_active=True):
    return ScheduleCandidate(
        "weekly", times=times, weekdays=weekdays, is_active=is_active, schedule_id=schedule_id
    )


# =============================================================================
# Normalization
# =============================================================================

@pytest.mark.unit
class TestNormalization:
    """Tests for time and weekday normalization"""

    def test_times_sorted_unique(self):
        assert normalize_times(["20:00", "08:00", "20:00"]) == ["08:00", "20:00"]

    def test_times_not_a_list(self):
        assert normalize_times(None) is None
        assert normalize_times(["08:00", 8]) is None

    def test_weekdays_lowercased_sorted_unique(self):
        assert normalize_weekdays(["Wed", "mon", "MON"]) == ["mon", "wed"]


# =============================================================================
# Daily
# =============================================================================

@pytest.mark.unit
class TestDailyConflicts:
    """Tests for daily schedule conflicts"""

    def test_identical_times_conflict(self, validator):
        result = validator.check(daily(["08:00"]), [daily(["08:00"], schedule_id=1)])

        assert result.ok is False
        assert result.field == "times"
        assert result.conflicting_schedule_id == 1

    def test_inactive_candidate_exempt(self, validator):
        result = validator.check(daily(["08:00"], is_active=False), [daily(["08:00"], schedule_id=1)])
        assert result.ok is True

    def test_order_and_duplicates_ignored(self, validator):
        result = validator.check(
            daily(["20:00", "08:00", "08:00"]),
            [daily(["08:00", "20:00"], schedule_id=1)]
        )
        assert result.ok is False

    def test_different_time_sets(self, validator):
        result = validator.check(daily(["08:00"]), [daily(["08:00", "20:00"], schedule_id=1)])
        assert result.ok is True

    def test_inactive_existing_ignored(self, validator):
        result = validator.check(daily(["08:00"]), [daily(["08:00"], schedule_id=1, is_active=False)])
        assert result.ok is True

    def test_excluded_schedule_ignored(self, validator):
        result = validator.check(
            daily(["08:00"], schedule_id=1),
            [daily(["08:00"], schedule_id=1)],
            exclude_schedule_id=1
        )
        assert result.ok is True

    def test_other_type_ignored(self, validator):
        result = validator.check(daily(["09:00"]), [weekly(["09:00"], ["mon"], schedule_id=1)])
        assert result.ok is True


# =============================================================================
# Weekly
# =============================================================================

@pytest.mark.unit
class TestWeeklyConflicts:
    """Tests for weekly schedule conflicts"""

    def test_shared_weekday_conflict(self, validator):
        result = validator.check(
            weekly(["09:00"], ["wed", "fri"]),
            [weekly(["09:00"], ["mon", "WED"], schedule_id=4)]
        )

        assert result.ok is False
        assert result.field == "weekdays"
        assert result.message == "Overlapping weekly schedules are not allowed."

    def test_disjoint_weekdays(self, validator):
        result = validator.check(weekly(["09:00"], ["tue"]), [weekly(["09:00"], ["mon"], schedule_id=4)])
        assert result.ok is True

    def test_same_days_different_times(self, validator):
        result = validator.check(weekly(["10:00"], ["mon"]), [weekly(["09:00"], ["mon"], schedule_id=4)])
        assert result.ok is True


@pytest.mark.unit
class TestIntervalExempt:
    """Interval schedules never conflict"""

    def test_interval_candidate(self):
        candidate = ScheduleCandidate("interval")
        existing = [ScheduleCandidate("interval", schedule_id=1)]
        assert check_overlap(candidate, existing).ok is True
