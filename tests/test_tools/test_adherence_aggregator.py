"""
Tests for Adherence Aggregator
Tests summary counts, the adherence rate and breakdowns
"""

import pytest
from datetime import datetime, timezone, timedelta

from models import OccurrenceStatus
from tools.recurrence import Occurrence
from tools.intake_matcher import StatusRecord
from tools.adherence_aggregator import (
    AdherenceAggregator,
    AdherenceSummary,
    adherence_rate,
    summarize,
)


UTC = timezone.utc
BASE = datetime(2025, 12, 26, 8, 0, tzinfo=UTC)


@pytest.fixture
def aggregator():
    return AdherenceAggregator()


def record(status: OccurrenceStatus, schedule_id: int = 1, medication_id: int = 10,
           name: str = "Metformin", offset_hours: int = 0) -> StatusRecord:
    return StatusRecord(
        occurrence=Occurrence(
            schedule_id=schedule_id,
            medication_id=medication_id,
            scheduled_at=BASE + timedelta(hours=offset_hours),
            medication_name=name
        ),
        status=status
    )


# =============================================================================
# Rate
# =============================================================================

@pytest.mark.unit
class TestAdherenceRate:
    """Tests for taken / (expected - skipped)"""

    def test_skips_leave_the_denominator(self):
        assert adherence_rate(taken=1, skipped=1, missed=0) == 1.0

    def test_rounded_to_four_places(self):
        assert adherence_rate(taken=2, skipped=0, missed=1) == 0.6667

    def test_zero_denominator(self):
        assert adherence_rate(taken=0, skipped=0, missed=0) == 0.0

    def test_all_skipped(self):
        assert adherence_rate(taken=0, skipped=3, missed=0) == 0.0

    @pytest.mark.parametrize("taken,skipped,missed", [(0, 0, 5), (5, 0, 0), (3, 4, 2), (1, 0, 9)])
    def test_rate_bounded(self, taken, skipped, missed):
        assert 0.0 <= adherence_rate(taken, skipped, missed) <= 1.0


# =============================================================================
# Summary
# =============================================================================

@pytest.mark.unit
class TestSummarize:
    """Tests for counting classified occurrences"""

    def test_counts(self, aggregator):
        records = [
            record(OccurrenceStatus.TAKEN),
            record(OccurrenceStatus.SKIPPED, offset_hours=12),
        ]

        summary = aggregator.summarize(records)

        assert summary == AdherenceSummary(expected=2, taken=1, skipped=1, missed=0, adherence_rate=1.0)

    def test_pending_excluded(self, aggregator):
        records = [
            record(OccurrenceStatus.TAKEN),
            record(OccurrenceStatus.MISSED, offset_hours=1),
            record(OccurrenceStatus.PENDING, offset_hours=2),
        ]

        summary = aggregator.summarize(records)

        assert summary.expected == 2
        assert summary.adherence_rate == 0.5

    def test_empty(self):
        assert summarize([]).to_dict() == {
            "expected": 0,
            "taken": 0,
            "skipped": 0,
            "missed": 0,
            "adherence_rate": 0.0,
        }


# =============================================================================
# Breakdowns
# =============================================================================

@pytest.mark.unit
class TestGroupBy:
    """Tests for per-medication and per-schedule breakdowns"""

    def test_by_medication_labels_and_order(self, aggregator):
        records = [
            record(OccurrenceStatus.MISSED, schedule_id=2, medication_id=20, name="Aspirin"),
            record(OccurrenceStatus.TAKEN, schedule_id=1, medication_id=10, name="Metformin", offset_hours=1),
            record(OccurrenceStatus.TAKEN, schedule_id=3, medication_id=20, name="Aspirin", offset_hours=2),
        ]

        groups = aggregator.group_by(records, "medication_id")

        assert [g["medication_id"] for g in groups] == [20, 10]
        assert groups[0]["medication_name"] == "Aspirin"
        assert groups[0]["expected"] == 2
        assert groups[0]["adherence_rate"] == 0.5
        assert groups[1]["taken"] == 1

    def test_by_schedule(self, aggregator):
        records = [
            record(OccurrenceStatus.TAKEN, schedule_id=1, medication_id=10),
            record(OccurrenceStatus.SKIPPED, schedule_id=2, medication_id=10, offset_hours=1),
        ]

        groups = aggregator.group_by(records, "schedule_id")

        assert groups == [
            {"schedule_id": 1, "medication_id": 10, "expected": 1, "taken": 1,
             "skipped": 0, "missed": 0, "adherence_rate": 1.0},
            {"schedule_id": 2, "medication_id": 10, "expected": 1, "taken": 0,
             "skipped": 1, "missed": 0, "adherence_rate": 0.0},
        ]

    def test_invalid_key(self, aggregator):
        with pytest.raises(ValueError):
            aggregator.group_by([], "user_id")


@pytest.mark.unit
class TestTimeline:
    """Tests for timeline entries"""

    def test_entries(self, aggregator):
        records = [
            record(OccurrenceStatus.TAKEN),
            record(OccurrenceStatus.PENDING, schedule_id=2, offset_hours=12),
        ]

        timeline = aggregator.timeline(records)

        assert timeline == [
            {"scheduled_at": "2025-12-26T08:00:00Z", "status": "taken",
             "medication_id": 10, "schedule_id": 1},
            {"scheduled_at": "2025-12-26T20:00:00Z", "status": "pending",
             "medication_id": 10, "schedule_id": 2},
        ]
