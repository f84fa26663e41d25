"""
Report Service
Adherence reports: fetch schedules and intakes once, then run the
expansion -> matching -> aggregation pipeline
"""

import calendar
import logging
from typing import Dict, List, Optional, Any, Tuple
from datetime import datetime, date, timedelta
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import and_

from config import settings, engine_config
from database import get_db_context
import models
from models import IntakeStatus
from services.errors import NotFoundError
from tools.recurrence import (
    RecurrenceError,
    ScheduleDefinition,
    build_recurrence,
    recurrence_expander,
)
from tools.intake_matcher import IntakeEvent, StatusRecord, intake_matcher
from tools.adherence_aggregator import adherence_aggregator
from tools.time_utils import (
    ensure_utc,
    isoformat_utc,
    local_range_to_utc,
    resolve_timezone,
    shift_clamped,
    to_naive_utc,
    utc_now,
)


logger = logging.getLogger(__name__)


class ReportService:
    """
    Service for adherence summaries, breakdowns and timelines
    """

    def __init__(self, tolerance_minutes: Optional[int] = None):
        self.tolerance_minutes = (
            settings.INTAKE_TOLERANCE_MINUTES if tolerance_minutes is None else tolerance_minutes
        )

    # ==================== PIPELINE ====================

    def _load_user(self, session: Session, user_id: int) -> models.User:
        user = session.query(models.User).filter(models.User.id == user_id).first()
        if not user:
            raise NotFoundError("User", user_id)
        return user

    def _load_definitions(
        self,
        session: Session,
        user_id: int,
        medication_id: Optional[int],
        schedule_id: Optional[int]
    ) -> List[ScheduleDefinition]:
        """Active schedules of the user as expander input, medication names attached"""
        query = session.query(models.Schedule).join(models.Medication).options(
            joinedload(models.Schedule.medication)
        ).filter(
            and_(
                models.Medication.user_id == user_id,
                models.Schedule.is_active == True
            )
        )

        if medication_id is not None:
            query = query.filter(models.Schedule.medication_id == medication_id)
        if schedule_id is not None:
            query = query.filter(models.Schedule.id == schedule_id)

        definitions = []
        for schedule in query.order_by(models.Schedule.id).all():
            try:
                recurrence = build_recurrence(
                    schedule.recurrence_type,
                    schedule.times,
                    schedule.weekdays,
                    schedule.interval_hours
                )
            except RecurrenceError as e:
                logger.warning(f"Leaving schedule {schedule.id} out of report: {e.message}")
                continue

            definitions.append(ScheduleDefinition(
                schedule_id=schedule.id,
                medication_id=schedule.medication_id,
                recurrence=recurrence,
                medication_name=schedule.medication.name if schedule.medication else None
            ))

        return definitions

    def _load_intakes(
        self,
        session: Session,
        user_id: int,
        schedule_ids: List[int],
        start: datetime,
        end: datetime
    ) -> List[IntakeEvent]:
        """One batched read, widened by the tolerance on both ends"""
        tolerance = timedelta(minutes=self.tolerance_minutes)

        rows = session.query(models.Intake).filter(
            and_(
                models.Intake.user_id == user_id,
                models.Intake.schedule_id.in_(schedule_ids),
                models.Intake.taken_at >= to_naive_utc(shift_clamped(start, -tolerance)),
                models.Intake.taken_at <= to_naive_utc(shift_clamped(end, tolerance))
            )
        ).order_by(models.Intake.taken_at).all()

        events = []
        for row in rows:
            try:
                status = IntakeStatus(row.status)
            except ValueError:
                logger.warning(f"Ignoring intake {row.id} with unknown status {row.status!r}")
                continue
            events.append(IntakeEvent(
                intake_id=row.id,
                schedule_id=row.schedule_id,
                taken_at=ensure_utc(row.taken_at),
                status=status
            ))
        return events

    def _derive(
        self,
        session: Session,
        user: models.User,
        start: datetime,
        end: datetime,
        now: datetime,
        medication_id: Optional[int] = None,
        schedule_id: Optional[int] = None
    ) -> List[StatusRecord]:
        """Expand, then match, for one user and one UTC range"""
        tz = resolve_timezone(user.timezone)
        definitions = self._load_definitions(session, user.id, medication_id, schedule_id)
        occurrences = recurrence_expander.expand_many(definitions, start, end, tz)
        if not occurrences:
            return []

        schedule_ids = sorted({d.schedule_id for d in definitions})
        intakes = self._load_intakes(session, user.id, schedule_ids, start, end)

        return intake_matcher.match(occurrences, intakes, now, self.tolerance_minutes)

    def derive_statuses(
        self,
        session: Session,
        user_id: int,
        from_date: date,
        to_date: date,
        medication_id: Optional[int] = None,
        schedule_id: Optional[int] = None,
        now: Optional[datetime] = None
    ) -> Tuple[datetime, datetime, List[StatusRecord]]:
        """
        Classified occurrences for local days from_date..to_date.

        Returns:
            (range start UTC, range end UTC, status records)
        """
        user = self._load_user(session, user_id)
        start, end = local_range_to_utc(from_date, to_date, resolve_timezone(user.timezone))
        records = self._derive(
            session, user, start, end, now or utc_now(), medication_id, schedule_id
        )
        return start, end, records

    # ==================== REPORTS ====================

    async def adherence_summary(
        self,
        user_id: int,
        from_date: date,
        to_date: date,
        medication_id: Optional[int] = None,
        schedule_id: Optional[int] = None,
        now: Optional[datetime] = None,
        db: Optional[Session] = None
    ) -> Dict[str, Any]:
        """
        Adherence summary over a local date range

        Args:
            user_id: User ID
            from_date: First local day (inclusive)
            to_date: Last local day (inclusive)
            medication_id: Restrict to one medication
            schedule_id: Restrict to one schedule
            now: Clock override deciding missed versus pending
            db: Database session

        Returns:
            period, summary and, without a medication filter, by_medication
        """
        def _build(session: Session) -> Dict[str, Any]:
            start, end, records = self.derive_statuses(
                session, user_id, from_date, to_date, medication_id, schedule_id, now
            )

            response = {
                "period": {"from": isoformat_utc(start), "to": isoformat_utc(end)},
                "summary": adherence_aggregator.summarize(records).to_dict(),
            }
            if medication_id is None:
                response["by_medication"] = adherence_aggregator.group_by(records, "medication_id")
            return response

        if db:
            return _build(db)

        with get_db_context() as session:
            return _build(session)

    async def medication_breakdown(
        self,
        user_id: int,
        from_date: date,
        to_date: date,
        now: Optional[datetime] = None,
        db: Optional[Session] = None
    ) -> List[Dict[str, Any]]:
        """Per-medication summaries"""
        def _build(session: Session) -> List[Dict[str, Any]]:
            _, _, records = self.derive_statuses(session, user_id, from_date, to_date, now=now)
            return adherence_aggregator.group_by(records, "medication_id")

        if db:
            return _build(db)

        with get_db_context() as session:
            return _build(session)

    async def schedule_breakdown(
        self,
        user_id: int,
        from_date: date,
        to_date: date,
        medication_id: Optional[int] = None,
        now: Optional[datetime] = None,
        db: Optional[Session] = None
    ) -> List[Dict[str, Any]]:
        """Per-schedule summaries"""
        def _build(session: Session) -> List[Dict[str, Any]]:
            _, _, records = self.derive_statuses(
                session, user_id, from_date, to_date, medication_id=medication_id, now=now
            )
            return adherence_aggregator.group_by(records, "schedule_id")

        if db:
            return _build(db)

        with get_db_context() as session:
            return _build(session)

    async def intake_timeline(
        self,
        user_id: int,
        from_date: date,
        to_date: date,
        medication_id: Optional[int] = None,
        schedule_id: Optional[int] = None,
        now: Optional[datetime] = None,
        db: Optional[Session] = None
    ) -> List[Dict[str, Any]]:
        """Every occurrence in the range with its status, in time order"""
        def _build(session: Session) -> List[Dict[str, Any]]:
            _, _, records = self.derive_statuses(
                session, user_id, from_date, to_date, medication_id, schedule_id, now
            )
            return adherence_aggregator.timeline(records)

        if db:
            return _build(db)

        with get_db_context() as session:
            return _build(session)

    @staticmethod
    def period_bounds(period: str, today: date) -> Tuple[date, date]:
        """Local calendar days covered by a named period containing `today`"""
        if period == "daily":
            return today, today
        if period == "weekly":
            monday = today - timedelta(days=today.weekday())
            return monday, monday + timedelta(days=6)
        if period == "monthly":
            last_day = calendar.monthrange(today.year, today.month)[1]
            return today.replace(day=1), today.replace(day=last_day)
        raise ValueError(
            f"Unknown period {period!r}; expected one of {engine_config.REPORT_PERIODS}"
        )

    async def period_report(
        self,
        user_id: int,
        period: str,
        now: Optional[datetime] = None,
        db: Optional[Session] = None
    ) -> Dict[str, Any]:
        """
        Summary for the current day, week (Monday-Sunday) or month in the
        user's timezone
        """
        def _build(session: Session) -> Dict[str, Any]:
            current = now or utc_now()
            user = self._load_user(session, user_id)
            tz = resolve_timezone(user.timezone)

            first, last = self.period_bounds(period, ensure_utc(current).astimezone(tz).date())
            start, end = local_range_to_utc(first, last, tz)
            records = self._derive(session, user, start, end, current)

            return {
                "period": period,
                "period_start": isoformat_utc(start),
                "period_end": isoformat_utc(end),
                "summary": adherence_aggregator.summarize(records).to_dict(),
            }

        if db:
            return _build(db)

        with get_db_context() as session:
            return _build(session)


# Singleton instance
report_service = ReportService()
