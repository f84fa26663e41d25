"""
Schedule Service
Business logic for medication schedule management (the write path)
"""

import re
import logging
from typing import Dict, List, Optional, Any, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import and_

from config import engine_config
from database import get_db_context
import models
from models import RecurrenceType
from services.errors import NotFoundError, ScheduleValidationError, ScheduleConflictError
from tools.overlap_validator import ScheduleCandidate, overlap_validator


logger = logging.getLogger(__name__)

_TIME_RE = re.compile(engine_config.TIME_PATTERN)

# Which optional fields each recurrence type owns
VARIANT_FIELDS = {
    RecurrenceType.DAILY: {"times"},
    RecurrenceType.WEEKLY: {"times", "weekdays"},
    RecurrenceType.INTERVAL: {"interval_hours"},
}

UPDATABLE_FIELDS = {"recurrence_type", "times", "weekdays", "interval_hours", "is_active"}


def _absent(value) -> bool:
    return value is None or (isinstance(value, (list, tuple)) and len(value) == 0)


def _check_times(times, errors: Dict[str, str]) -> Optional[List[str]]:
    if not isinstance(times, (list, tuple)) or len(times) == 0:
        errors["times"] = "Times must be a non-empty array."
        return None
    for t in times:
        if not isinstance(t, str) or not _TIME_RE.match(t):
            errors["times"] = "Each time must be in HH:mm format."
            return None
    if len(set(times)) != len(times):
        errors["times"] = "Times must be unique."
        return None
    return list(times)


def _check_weekdays(weekdays, errors: Dict[str, str]) -> Optional[List[str]]:
    if not isinstance(weekdays, (list, tuple)) or len(weekdays) == 0:
        errors["weekdays"] = "Weekdays must be a non-empty array."
        return None
    normalized = []
    for w in weekdays:
        if not isinstance(w, str):
            errors["weekdays"] = "Each weekday must be a string."
            return None
        value = w.lower()
        if value not in engine_config.WEEKDAYS:
            errors["weekdays"] = (
                "Weekdays must be one of " + ", ".join(engine_config.WEEKDAYS) + "."
            )
            return None
        normalized.append(value)
    if len(set(normalized)) != len(normalized):
        errors["weekdays"] = "Weekdays must be unique."
        return None
    return normalized


def _check_interval_hours(interval_hours, errors: Dict[str, str]) -> Optional[int]:
    if interval_hours is None:
        errors["interval_hours"] = "Interval hours is required."
        return None
    if (
        not isinstance(interval_hours, int)
        or isinstance(interval_hours, bool)
        or interval_hours < engine_config.MIN_INTERVAL_HOURS
    ):
        errors["interval_hours"] = (
            f"Interval hours must be an integer of at least {engine_config.MIN_INTERVAL_HOURS}."
        )
        return None
    return interval_hours


def validate_schedule_fields(
    recurrence_type,
    times=None,
    weekdays=None,
    interval_hours=None
) -> Tuple[RecurrenceType, Optional[List[str]], Optional[List[str]], Optional[int]]:
    """
    Strictly validate schedule fields for persistence.

    Every field problem is collected before raising, so callers can report
    all of them at once.

    Returns:
        (recurrence_type, times, weekdays, interval_hours) with the fields
        foreign to the recurrence type set to None and weekdays lowercased

    Raises:
        ScheduleValidationError
    """
    errors: Dict[str, str] = {}

    try:
        kind = RecurrenceType(recurrence_type)
    except ValueError:
        raise ScheduleValidationError({
            "recurrence_type": "Recurrence type must be one of daily, weekly, interval."
        })

    clean_times = clean_weekdays = clean_hours = None

    if kind in (RecurrenceType.DAILY, RecurrenceType.WEEKLY):
        clean_times = _check_times(times, errors)
    elif not _absent(times):
        errors["times"] = "Times are not allowed for interval schedules."

    if kind == RecurrenceType.WEEKLY:
        clean_weekdays = _check_weekdays(weekdays, errors)
    elif not _absent(weekdays):
        errors["weekdays"] = "Weekdays are only allowed for weekly schedules."

    if kind == RecurrenceType.INTERVAL:
        clean_hours = _check_interval_hours(interval_hours, errors)
    elif interval_hours is not None:
        errors["interval_hours"] = "Interval hours are only allowed for interval schedules."

    if errors:
        raise ScheduleValidationError(errors)

    return kind, clean_times, clean_weekdays, clean_hours


class ScheduleService:
    """
    Service for medication schedule management
    """

    def _ensure_no_overlap(
        self,
        session: Session,
        medication_id: int,
        candidate: ScheduleCandidate,
        exclude_schedule_id: Optional[int] = None
    ) -> None:
        """One scoped read of active same-type schedules, then the overlap check"""
        if candidate.recurrence_type == RecurrenceType.INTERVAL.value or not candidate.is_active:
            return

        existing = session.query(models.Schedule).filter(
            and_(
                models.Schedule.medication_id == medication_id,
                models.Schedule.is_active == True,
                models.Schedule.recurrence_type == candidate.recurrence_type
            )
        ).all()

        result = overlap_validator.check(
            candidate,
            [ScheduleCandidate.from_model(s) for s in existing],
            exclude_schedule_id=exclude_schedule_id
        )
        if not result.ok:
            raise ScheduleConflictError(result.field, result.message)

    def _owned_schedule(self, session: Session, user_id: int, schedule_id: int) -> models.Schedule:
        schedule = session.query(models.Schedule).join(models.Medication).filter(
            and_(
                models.Schedule.id == schedule_id,
                models.Medication.user_id == user_id
            )
        ).first()

        if not schedule:
            raise NotFoundError("Schedule", schedule_id)
        return schedule

    async def create_schedule(
        self,
        user_id: int,
        medication_id: int,
        recurrence_type: str,
        times: Optional[List[str]] = None,
        weekdays: Optional[List[str]] = None,
        interval_hours: Optional[int] = None,
        is_active: bool = True,
        db: Optional[Session] = None
    ) -> models.Schedule:
        """
        Create a schedule after validation and overlap checking

        Args:
            user_id: Owner of the medication
            medication_id: Medication ID
            recurrence_type: daily, weekly or interval
            times: HH:MM strings (daily/weekly)
            weekdays: mon..sun (weekly)
            interval_hours: Hours between doses (interval)
            is_active: Inactive schedules skip the overlap check
            db: Database session

        Returns:
            Created Schedule object
        """
        def _create(session: Session) -> models.Schedule:
            medication = session.query(models.Medication).filter(
                and_(
                    models.Medication.id == medication_id,
                    models.Medication.user_id == user_id
                )
            ).first()

            if not medication:
                raise NotFoundError("Medication", medication_id)

            kind, clean_times, clean_weekdays, clean_hours = validate_schedule_fields(
                recurrence_type, times, weekdays, interval_hours
            )

            self._ensure_no_overlap(
                session,
                medication_id,
                ScheduleCandidate(
                    recurrence_type=kind.value,
                    times=clean_times,
                    weekdays=clean_weekdays,
                    is_active=is_active
                )
            )

            schedule = models.Schedule(
                medication_id=medication_id,
                recurrence_type=kind.value,
                times=clean_times,
                weekdays=clean_weekdays,
                interval_hours=clean_hours,
                is_active=is_active
            )

            session.add(schedule)
            session.commit()
            session.refresh(schedule)

            logger.info(
                f"Created {kind.value} schedule {schedule.id} "
                f"for medication {medication_id} (user {user_id})"
            )
            return schedule

        if db:
            return _create(db)

        with get_db_context() as session:
            return _create(session)

    async def get_schedule(
        self,
        user_id: int,
        schedule_id: int,
        db: Optional[Session] = None
    ) -> models.Schedule:
        """Get a schedule owned by the user"""
        def _get(session: Session) -> models.Schedule:
            return self._owned_schedule(session, user_id, schedule_id)

        if db:
            return _get(db)

        with get_db_context() as session:
            return _get(session)

    async def list_for_medication(
        self,
        user_id: int,
        medication_id: int,
        include_inactive: bool = False,
        db: Optional[Session] = None
    ) -> List[models.Schedule]:
        """List a medication's schedules, newest first"""
        def _list(session: Session) -> List[models.Schedule]:
            medication = session.query(models.Medication).filter(
                and_(
                    models.Medication.id == medication_id,
                    models.Medication.user_id == user_id
                )
            ).first()

            if not medication:
                raise NotFoundError("Medication", medication_id)

            query = session.query(models.Schedule).filter(
                models.Schedule.medication_id == medication_id
            )

            if not include_inactive:
                query = query.filter(models.Schedule.is_active == True)

            return query.order_by(models.Schedule.id.desc()).all()

        if db:
            return _list(db)

        with get_db_context() as session:
            return _list(session)

    async def update_schedule(
        self,
        user_id: int,
        schedule_id: int,
        updates: Dict[str, Any],
        db: Optional[Session] = None
    ) -> models.Schedule:
        """
        Partially update a schedule.

        Updates are merged over the stored row. When the recurrence type
        changes, stored fields that the new type does not own are dropped.
        The merged schedule is validated and overlap-checked against the
        other active schedules of the medication.
        """
        def _update(session: Session) -> models.Schedule:
            schedule = self._owned_schedule(session, user_id, schedule_id)

            updates_ = {k: v for k, v in updates.items() if k in UPDATABLE_FIELDS}
            new_type = updates_.get("recurrence_type", schedule.recurrence_type)

            try:
                owned = VARIANT_FIELDS[RecurrenceType(new_type)]
            except ValueError:
                owned = set()

            merged = {}
            for field in ("times", "weekdays", "interval_hours"):
                if field in updates_:
                    merged[field] = updates_[field]
                elif field in owned:
                    merged[field] = getattr(schedule, field)
                else:
                    merged[field] = None

            kind, clean_times, clean_weekdays, clean_hours = validate_schedule_fields(
                new_type, merged["times"], merged["weekdays"], merged["interval_hours"]
            )

            is_active = updates_.get("is_active", schedule.is_active)
            if not isinstance(is_active, bool):
                raise ScheduleValidationError({"is_active": "Is active must be a boolean."})

            self._ensure_no_overlap(
                session,
                schedule.medication_id,
                ScheduleCandidate(
                    recurrence_type=kind.value,
                    times=clean_times,
                    weekdays=clean_weekdays,
                    is_active=is_active,
                    schedule_id=schedule.id
                ),
                exclude_schedule_id=schedule.id
            )

            schedule.recurrence_type = kind.value
            schedule.times = clean_times
            schedule.weekdays = clean_weekdays
            schedule.interval_hours = clean_hours
            schedule.is_active = is_active

            session.commit()
            session.refresh(schedule)

            logger.info(f"Updated schedule {schedule_id} ({kind.value})")
            return schedule

        if db:
            return _update(db)

        with get_db_context() as session:
            return _update(session)

    async def deactivate_schedule(
        self,
        user_id: int,
        schedule_id: int,
        db: Optional[Session] = None
    ) -> models.Schedule:
        """Stop future expansion while keeping intake history"""
        def _deactivate(session: Session) -> models.Schedule:
            schedule = self._owned_schedule(session, user_id, schedule_id)
            schedule.is_active = False

            session.commit()
            session.refresh(schedule)

            logger.info(f"Deactivated schedule {schedule_id}")
            return schedule

        if db:
            return _deactivate(db)

        with get_db_context() as session:
            return _deactivate(session)


# Singleton instance
schedule_service = ScheduleService()
