"""
Intake Matcher
Classifies expected occurrences against logged intake events
"""

import logging
from typing import Dict, List, Optional, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from collections import defaultdict

from config import settings
from models import IntakeStatus, OccurrenceStatus
from tools.recurrence import Occurrence
from tools.time_utils import ensure_utc


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntakeEvent:
    """A logged dose action, as read from storage"""
    intake_id: int
    schedule_id: int
    taken_at: datetime
    status: IntakeStatus


@dataclass(frozen=True)
class StatusRecord:
    """An occurrence with its derived status"""
    occurrence: Occurrence
    status: OccurrenceStatus
    intake_id: Optional[int] = None

    @property
    def schedule_id(self) -> int:
        return self.occurrence.schedule_id

    @property
    def medication_id(self) -> int:
        return self.occurrence.medication_id

    @property
    def medication_name(self) -> Optional[str]:
        return self.occurrence.medication_name

    @property
    def scheduled_at(self) -> datetime:
        return self.occurrence.scheduled_at


class IntakeMatcher:
    """
    Greedy first-fit matching of intakes to occurrences.

    Each occurrence owns the window [scheduled_at, scheduled_at + tolerance].
    Occurrences are visited in time order and take the earliest unconsumed
    intake of the same schedule inside their window. An intake is consumed at
    most once per call.
    """

    def __init__(self, tolerance_minutes: Optional[int] = None):
        if tolerance_minutes is None:
            tolerance_minutes = settings.INTAKE_TOLERANCE_MINUTES
        self.tolerance_minutes = tolerance_minutes

    def match(
        self,
        occurrences: Sequence[Occurrence],
        intakes: Sequence[IntakeEvent],
        now: datetime,
        tolerance_minutes: Optional[int] = None
    ) -> List[StatusRecord]:
        """
        Assign a status to every occurrence.

        Args:
            occurrences: Occurrences in ascending scheduled_at order
            intakes: Intake events for the same schedules, any order
            now: Reference instant deciding missed versus pending
            tolerance_minutes: Override of the configured tolerance

        Returns:
            One StatusRecord per occurrence, in input order
        """
        tolerance = timedelta(
            minutes=self.tolerance_minutes if tolerance_minutes is None else tolerance_minutes
        )
        now = ensure_utc(now)

        by_schedule: Dict[int, List[IntakeEvent]] = defaultdict(list)
        for intake in intakes:
            by_schedule[intake.schedule_id].append(intake)
        for events in by_schedule.values():
            events.sort(key=lambda e: (ensure_utc(e.taken_at), e.intake_id))

        consumed = set()
        records: List[StatusRecord] = []

        for occurrence in occurrences:
            scheduled_at = ensure_utc(occurrence.scheduled_at)
            window_end = scheduled_at + tolerance

            matched = None
            for intake in by_schedule.get(occurrence.schedule_id, ()):
                if intake.intake_id in consumed:
                    continue
                taken_at = ensure_utc(intake.taken_at)
                if taken_at < scheduled_at:
                    continue
                if taken_at > window_end:
                    # Sorted by time, nothing later can fit this window
                    break
                matched = intake
                consumed.add(intake.intake_id)
                break

            if matched is not None:
                status = OccurrenceStatus(IntakeStatus(matched.status).value)
                records.append(StatusRecord(occurrence, status, matched.intake_id))
            elif now > window_end:
                records.append(StatusRecord(occurrence, OccurrenceStatus.MISSED))
            else:
                records.append(StatusRecord(occurrence, OccurrenceStatus.PENDING))

        logger.debug(
            f"Matched {len(consumed)} of {len(intakes)} intakes "
            f"against {len(occurrences)} occurrences"
        )
        return records


# Singleton instance
intake_matcher = IntakeMatcher()


def match_intakes(
    occurrences: Sequence[Occurrence],
    intakes: Sequence[IntakeEvent],
    now: datetime,
    tolerance_minutes: Optional[int] = None
) -> List[StatusRecord]:
    """Convenience function to classify occurrences"""
    return intake_matcher.match(occurrences, intakes, now, tolerance_minutes)
