"""
Intake Service
Logging and removal of dose actions
"""

import logging
from typing import List, Optional
from datetime import datetime
from sqlalchemy.orm import Session
from sqlalchemy import and_

from database import get_db_context
import models
from models import IntakeStatus
from services.errors import NotFoundError
from tools.time_utils import to_naive_utc, utc_now


logger = logging.getLogger(__name__)


class IntakeService:
    """
    Service for intake events. Intakes are never edited, only created or
    deleted.
    """

    async def create_intake(
        self,
        user_id: int,
        schedule_id: int,
        status: IntakeStatus,
        taken_at: Optional[datetime] = None,
        now: Optional[datetime] = None,
        db: Optional[Session] = None
    ) -> models.Intake:
        """
        Log a dose action against an active schedule

        Args:
            user_id: User logging the dose
            schedule_id: Active schedule owned by the user
            status: taken or skipped
            taken_at: When it happened; defaults to now
            now: Clock override
            db: Database session

        Returns:
            Created Intake object
        """
        def _create(session: Session) -> models.Intake:
            schedule = session.query(models.Schedule).join(models.Medication).filter(
                and_(
                    models.Schedule.id == schedule_id,
                    models.Medication.user_id == user_id
                )
            ).first()

            if not schedule or not schedule.is_active:
                raise NotFoundError("Schedule", schedule_id)

            value = IntakeStatus(status)
            when = taken_at or now or utc_now()

            intake = models.Intake(
                schedule_id=schedule.id,
                medication_id=schedule.medication_id,
                user_id=user_id,
                status=value.value,
                taken_at=to_naive_utc(when)
            )

            session.add(intake)
            session.commit()
            session.refresh(intake)

            logger.info(
                f"Logged intake {intake.id} ({value.value}) for schedule {schedule_id}, "
                f"user {user_id}"
            )
            return intake

        if db:
            return _create(db)

        with get_db_context() as session:
            return _create(session)

    async def list_for_user(
        self,
        user_id: int,
        db: Optional[Session] = None
    ) -> List[models.Intake]:
        """List a user's intakes, newest first"""
        def _list(session: Session) -> List[models.Intake]:
            return session.query(models.Intake).filter(
                models.Intake.user_id == user_id
            ).order_by(models.Intake.id.desc()).all()

        if db:
            return _list(db)

        with get_db_context() as session:
            return _list(session)

    async def delete_intake(
        self,
        user_id: int,
        intake_id: int,
        db: Optional[Session] = None
    ) -> None:
        """Delete one of the user's intakes"""
        def _delete(session: Session) -> None:
            intake = session.query(models.Intake).filter(
                and_(
                    models.Intake.id == intake_id,
                    models.Intake.user_id == user_id
                )
            ).first()

            if not intake:
                raise NotFoundError("Intake", intake_id)

            session.delete(intake)
            session.commit()

            logger.info(f"Deleted intake {intake_id} for user {user_id}")

        if db:
            return _delete(db)

        with get_db_context() as session:
            return _delete(session)


# Singleton instance
intake_service = IntakeService()
