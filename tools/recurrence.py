"""
Recurrence Expander
Turns recurring schedule definitions into the exact UTC instants at which a
dose is expected
"""

import logging
from typing import List, Optional, Sequence, Union
from dataclasses import dataclass
from datetime import datetime, date, time, timedelta
from zoneinfo import ZoneInfo

from config import settings, engine_config
from models import RecurrenceType
from tools.time_utils import UTC, ensure_utc, parse_hhmm, resolve_timezone


logger = logging.getLogger(__name__)


class RecurrenceError(ValueError):
    """A schedule definition cannot be turned into a recurrence"""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


# ==================== RECURRENCE VARIANTS ====================

@dataclass(frozen=True)
class DailyRecurrence:
    """Every local day at each of `times`"""
    times: tuple = ()

    @property
    def recurrence_type(self) -> RecurrenceType:
        return RecurrenceType.DAILY


@dataclass(frozen=True)
class WeeklyRecurrence:
    """Each local day whose weekday is in `weekdays`, at each of `times`"""
    times: tuple = ()
    weekdays: tuple = ()

    @property
    def recurrence_type(self) -> RecurrenceType:
        return RecurrenceType.WEEKLY


@dataclass(frozen=True)
class IntervalRecurrence:
    """Every `interval_hours`, anchored at the start of the requested range"""
    interval_hours: int

    @property
    def recurrence_type(self) -> RecurrenceType:
        return RecurrenceType.INTERVAL


Recurrence = Union[DailyRecurrence, WeeklyRecurrence, IntervalRecurrence]


def build_recurrence(
    recurrence_type,
    times: Optional[Sequence] = None,
    weekdays: Optional[Sequence] = None,
    interval_hours: Optional[int] = None
) -> Recurrence:
    """
    Build the recurrence variant for stored schedule fields.

    Fields that do not belong to the variant are ignored. Individual time and
    weekday entries are not checked here; the expander skips bad entries.

    Raises:
        RecurrenceError: unknown type, or an interval schedule without a
            usable interval.
    """
    try:
        kind = RecurrenceType(recurrence_type)
    except ValueError:
        raise RecurrenceError(
            "recurrence_type", f"Unknown recurrence type: {recurrence_type!r}"
        )

    if kind == RecurrenceType.DAILY:
        return DailyRecurrence(times=tuple(times or ()))

    if kind == RecurrenceType.WEEKLY:
        return WeeklyRecurrence(
            times=tuple(times or ()),
            weekdays=tuple(weekdays or ())
        )

    if (
        not isinstance(interval_hours, int)
        or isinstance(interval_hours, bool)
        or interval_hours < engine_config.MIN_INTERVAL_HOURS
    ):
        raise RecurrenceError(
            "interval_hours",
            f"Interval schedules need interval_hours >= {engine_config.MIN_INTERVAL_HOURS}"
        )
    return IntervalRecurrence(interval_hours=interval_hours)


@dataclass(frozen=True)
class ScheduleDefinition:
    """A schedule as the expander sees it"""
    schedule_id: int
    medication_id: int
    recurrence: Recurrence
    medication_name: Optional[str] = None


@dataclass(frozen=True)
class Occurrence:
    """One expected dose instant (derived, never persisted)"""
    schedule_id: int
    medication_id: int
    scheduled_at: datetime
    medication_name: Optional[str] = None


# ==================== EXPANDER ====================

class RecurrenceExpander:
    """
    Expands recurrences over a UTC range in a single user's timezone
    """

    def __init__(self, max_occurrences: Optional[int] = None):
        if max_occurrences is None:
            max_occurrences = settings.MAX_OCCURRENCES_PER_SCHEDULE
        self.max_occurrences = max_occurrences

    def expand(
        self,
        recurrence: Recurrence,
        range_start: datetime,
        range_end: datetime,
        tz: Union[ZoneInfo, str, None] = None
    ) -> List[datetime]:
        """
        Generate expected dose instants within [range_start, range_end].

        Args:
            recurrence: Daily, weekly or interval recurrence
            range_start: Inclusive range start
            range_end: Inclusive range end
            tz: User timezone (ZoneInfo or IANA name); local days and
                weekdays are computed in it

        Returns:
            Ascending list of aware UTC datetimes
        """
        start = ensure_utc(range_start)
        end = ensure_utc(range_end)
        if start > end:
            return []

        zone = tz if isinstance(tz, ZoneInfo) else resolve_timezone(tz)

        if isinstance(recurrence, IntervalRecurrence):
            return self._expand_interval(recurrence, start, end)

        if isinstance(recurrence, WeeklyRecurrence):
            allowed = self._weekday_indexes(recurrence.weekdays)
            if not allowed:
                return []
            return self._expand_wall_clock(recurrence.times, start, end, zone, allowed)

        if isinstance(recurrence, DailyRecurrence):
            return self._expand_wall_clock(recurrence.times, start, end, zone, None)

        raise RecurrenceError("recurrence_type", f"Unsupported recurrence: {recurrence!r}")

    def expand_schedule(
        self,
        definition: ScheduleDefinition,
        range_start: datetime,
        range_end: datetime,
        tz: Union[ZoneInfo, str, None] = None
    ) -> List[Occurrence]:
        """Expand a single schedule into Occurrence records"""
        return [
            Occurrence(
                schedule_id=definition.schedule_id,
                medication_id=definition.medication_id,
                scheduled_at=instant,
                medication_name=definition.medication_name
            )
            for instant in self.expand(definition.recurrence, range_start, range_end, tz)
        ]

    def expand_many(
        self,
        definitions: Sequence[ScheduleDefinition],
        range_start: datetime,
        range_end: datetime,
        tz: Union[ZoneInfo, str, None] = None
    ) -> List[Occurrence]:
        """
        Expand several schedules and merge them in time order.

        Equal instants from different schedules stay as separate entries,
        in the order the schedules were given.
        """
        occurrences: List[Occurrence] = []
        for definition in definitions:
            occurrences.extend(self.expand_schedule(definition, range_start, range_end, tz))

        occurrences.sort(key=lambda o: o.scheduled_at)
        return occurrences

    def _expand_interval(
        self,
        recurrence: IntervalRecurrence,
        start: datetime,
        end: datetime
    ) -> List[datetime]:
        step = timedelta(minutes=recurrence.interval_hours * 60)
        instants: List[datetime] = []
        cursor = start

        while cursor <= end:
            if len(instants) >= self.max_occurrences:
                logger.warning(
                    f"Interval expansion truncated at {self.max_occurrences} occurrences "
                    f"(every {recurrence.interval_hours}h from {start.isoformat()})"
                )
                break
            instants.append(cursor)
            try:
                cursor = cursor + step
            except OverflowError:
                break

        return instants

    def _expand_wall_clock(
        self,
        raw_times: Sequence,
        start: datetime,
        end: datetime,
        zone: ZoneInfo,
        allowed_weekdays: Optional[set]
    ) -> List[datetime]:
        times = self._parse_times(raw_times)
        if not times:
            return []

        first_day = start.astimezone(zone).date()
        last_day = end.astimezone(zone).date()

        instants: List[datetime] = []
        day = first_day
        while day <= last_day:
            if allowed_weekdays is None or day.weekday() in allowed_weekdays:
                for t in times:
                    scheduled = self._local_instant(day, t, zone)
                    if start <= scheduled <= end:
                        if len(instants) >= self.max_occurrences:
                            logger.warning(
                                f"Wall-clock expansion truncated at {self.max_occurrences} occurrences"
                            )
                            instants.sort()
                            return instants
                        instants.append(scheduled)
            if day == date.max:
                break
            day = day + timedelta(days=1)

        instants.sort()
        return instants

    @staticmethod
    def _local_instant(day: date, t: time, zone: ZoneInfo) -> datetime:
        """
        Local wall-clock time on `day` converted to UTC.

        Nonexistent local times (spring-forward gap) resolve with the
        pre-transition offset; ambiguous ones take the first reading (fold=0).
        """
        return datetime.combine(day, t, tzinfo=zone).astimezone(UTC)

    @staticmethod
    def _parse_times(raw_times: Sequence) -> List[time]:
        parsed: List[time] = []
        for raw in raw_times:
            t = parse_hhmm(raw)
            if t is None:
                logger.warning(f"Skipping malformed schedule time {raw!r}")
                continue
            if t not in parsed:
                parsed.append(t)
        # Earliest first, so truncation keeps a contiguous prefix
        parsed.sort()
        return parsed

    @staticmethod
    def _weekday_indexes(weekdays: Sequence) -> set:
        allowed = set()
        for raw in weekdays:
            key = raw.strip().lower() if isinstance(raw, str) else None
            if key in engine_config.WEEKDAYS:
                allowed.add(engine_config.WEEKDAYS.index(key))
            else:
                logger.warning(f"Skipping unknown weekday {raw!r}")
        return allowed


# Singleton instance
recurrence_expander = RecurrenceExpander()


def expand(
    recurrence: Recurrence,
    range_start: datetime,
    range_end: datetime,
    tz: Union[ZoneInfo, str, None] = None
) -> List[datetime]:
    """Convenience function to expand a recurrence"""
    return recurrence_expander.expand(recurrence, range_start, range_end, tz)
