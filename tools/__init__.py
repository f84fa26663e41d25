"""
Tools Package
Pure adherence engine for the DoseTrack system: recurrence expansion,
intake matching, adherence aggregation and schedule overlap checks
"""

from .time_utils import (
    utc_now,
    ensure_utc,
    to_naive_utc,
    isoformat_utc,
    is_valid_timezone,
    resolve_timezone,
    parse_hhmm,
    local_range_to_utc
)

from .recurrence import (
    RecurrenceError,
    DailyRecurrence,
    WeeklyRecurrence,
    IntervalRecurrence,
    ScheduleDefinition,
    Occurrence,
    RecurrenceExpander,
    build_recurrence,
    recurrence_expander,
    expand
)

from .intake_matcher import (
    IntakeEvent,
    StatusRecord,
    IntakeMatcher,
    intake_matcher,
    match_intakes
)

from .adherence_aggregator import (
    AdherenceSummary,
    AdherenceAggregator,
    adherence_rate,
    adherence_aggregator,
    summarize
)

from .overlap_validator import (
    ScheduleCandidate,
    OverlapResult,
    ScheduleOverlapValidator,
    normalize_times,
    normalize_weekdays,
    overlap_validator,
    check_overlap
)

__all__ = [
    # Time utilities
    "utc_now",
    "ensure_utc",
    "to_naive_utc",
    "isoformat_utc",
    "is_valid_timezone",
    "resolve_timezone",
    "parse_hhmm",
    "local_range_to_utc",

    # Recurrence
    "RecurrenceError",
    "DailyRecurrence",
    "WeeklyRecurrence",
    "IntervalRecurrence",
    "ScheduleDefinition",
    "Occurrence",
    "RecurrenceExpander",
    "build_recurrence",
    "recurrence_expander",
    "expand",

    # Intake matching
    "IntakeEvent",
    "StatusRecord",
    "IntakeMatcher",
    "intake_matcher",
    "match_intakes",

    # Aggregation
    "AdherenceSummary",
    "AdherenceAggregator",
    "adherence_rate",
    "adherence_aggregator",
    "summarize",

    # Overlap validation
    "ScheduleCandidate",
    "OverlapResult",
    "ScheduleOverlapValidator",
    "normalize_times",
    "normalize_weekdays",
    "overlap_validator",
    "check_overlap"
]
