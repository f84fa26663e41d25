"""
Schedule Overlap Validator
Rejects active schedules that would fire at the same moments as an existing
active schedule of the same medication
"""

import logging
from typing import Iterable, List, Optional, Sequence
from dataclasses import dataclass

from models import RecurrenceType


logger = logging.getLogger(__name__)


@dataclass
class ScheduleCandidate:
    """Schedule fields relevant to conflict detection"""
    recurrence_type: str
    times: Optional[Sequence] = None
    weekdays: Optional[Sequence] = None
    is_active: bool = True
    schedule_id: Optional[int] = None

    @classmethod
    def from_model(cls, schedule) -> "ScheduleCandidate":
        return cls(
            recurrence_type=schedule.recurrence_type,
            times=schedule.times,
            weekdays=schedule.weekdays,
            is_active=bool(schedule.is_active),
            schedule_id=schedule.id
        )


@dataclass
class OverlapResult:
    """Outcome of a conflict check"""
    ok: bool = True
    field: Optional[str] = None
    message: Optional[str] = None
    conflicting_schedule_id: Optional[int] = None

    @classmethod
    def conflict(cls, field: str, message: str, schedule_id: Optional[int]) -> "OverlapResult":
        return cls(ok=False, field=field, message=message, conflicting_schedule_id=schedule_id)


def normalize_times(times) -> Optional[List[str]]:
    """Sorted unique time strings, or None when the value is not a list of strings"""
    if not isinstance(times, (list, tuple)):
        return None
    if any(not isinstance(t, str) for t in times):
        return None
    return sorted(set(times))


def normalize_weekdays(weekdays) -> List[str]:
    """Lowercased, sorted, unique weekday names; non-strings are dropped"""
    if not isinstance(weekdays, (list, tuple)):
        return []
    return sorted({w.lower() for w in weekdays if isinstance(w, str)})


class ScheduleOverlapValidator:
    """
    Compares a candidate against existing active schedules of the same
    medication and recurrence type
    """

    def check(
        self,
        candidate: ScheduleCandidate,
        existing: Iterable[ScheduleCandidate],
        exclude_schedule_id: Optional[int] = None
    ) -> OverlapResult:
        """
        Check a candidate schedule for conflicts.

        Interval schedules and inactive candidates are never in conflict.
        Daily schedules conflict on identical time sets; weekly schedules on
        identical time sets sharing at least one weekday.

        Returns:
            OverlapResult; on conflict, the offending field and a message
        """
        try:
            kind = RecurrenceType(candidate.recurrence_type)
        except ValueError:
            return OverlapResult()

        if kind == RecurrenceType.INTERVAL or not candidate.is_active:
            return OverlapResult()

        candidate_times = normalize_times(candidate.times)
        if candidate_times is None:
            return OverlapResult()
        candidate_weekdays = normalize_weekdays(candidate.weekdays)

        for other in existing:
            if exclude_schedule_id is not None and other.schedule_id == exclude_schedule_id:
                continue
            if not other.is_active or other.recurrence_type != kind.value:
                continue

            other_times = normalize_times(other.times)
            if other_times is None or other_times != candidate_times:
                continue

            if kind == RecurrenceType.WEEKLY:
                shared = set(candidate_weekdays) & set(normalize_weekdays(other.weekdays))
                if shared:
                    logger.info(
                        f"Weekly schedule conflicts with schedule {other.schedule_id} "
                        f"on {sorted(shared)}"
                    )
                    return OverlapResult.conflict(
                        "weekdays",
                        "Overlapping weekly schedules are not allowed.",
                        other.schedule_id
                    )
            else:
                logger.info(f"Daily schedule conflicts with schedule {other.schedule_id}")
                return OverlapResult.conflict(
                    "times",
                    "Overlapping schedules with identical times are not allowed.",
                    other.schedule_id
                )

        return OverlapResult()


# Singleton instance
overlap_validator = ScheduleOverlapValidator()


def check_overlap(
    candidate: ScheduleCandidate,
    existing: Iterable[ScheduleCandidate],
    exclude_schedule_id: Optional[int] = None
) -> OverlapResult:
    """Convenience function to check a candidate schedule"""
    return overlap_validator.check(candidate, existing, exclude_schedule_id)
