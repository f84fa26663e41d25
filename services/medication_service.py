"""
Medication Service
Business logic for medication management
"""

import logging
from typing import Dict, List, Optional, Any
from sqlalchemy.orm import Session
from sqlalchemy import and_

from database import get_db_context
import models
from services.errors import NotFoundError


logger = logging.getLogger(__name__)


class MedicationService:
    """
    Service for medication CRUD
    """

    async def create_medication(
        self,
        user_id: int,
        name: str,
        dosage: Optional[str] = None,
        notes: Optional[str] = None,
        is_active: bool = True,
        db: Optional[Session] = None
    ) -> models.Medication:
        """Create a medication for a user"""
        def _create(session: Session) -> models.Medication:
            user = session.query(models.User).filter(
                models.User.id == user_id
            ).first()
            if not user:
                raise NotFoundError("User", user_id)

            medication = models.Medication(
                user_id=user_id,
                name=name,
                dosage=dosage,
                notes=notes,
                is_active=is_active
            )

            session.add(medication)
            session.commit()
            session.refresh(medication)

            logger.info(f"Created medication {medication.id} ({name}) for user {user_id}")
            return medication

        if db:
            return _create(db)

        with get_db_context() as session:
            return _create(session)

    async def get_medication(
        self,
        user_id: int,
        medication_id: int,
        db: Optional[Session] = None
    ) -> models.Medication:
        """Get a medication owned by the user"""
        def _get(session: Session) -> models.Medication:
            medication = session.query(models.Medication).filter(
                and_(
                    models.Medication.id == medication_id,
                    models.Medication.user_id == user_id
                )
            ).first()

            if not medication:
                raise NotFoundError("Medication", medication_id)
            return medication

        if db:
            return _get(db)

        with get_db_context() as session:
            return _get(session)

    async def list_for_user(
        self,
        user_id: int,
        active_only: bool = True,
        db: Optional[Session] = None
    ) -> List[models.Medication]:
        """List a user's medications, newest first"""
        def _list(session: Session) -> List[models.Medication]:
            query = session.query(models.Medication).filter(
                models.Medication.user_id == user_id
            )

            if active_only:
                query = query.filter(models.Medication.is_active == True)

            return query.order_by(models.Medication.id.desc()).all()

        if db:
            return _list(db)

        with get_db_context() as session:
            return _list(session)

    async def update_medication(
        self,
        user_id: int,
        medication_id: int,
        updates: Dict[str, Any],
        db: Optional[Session] = None
    ) -> models.Medication:
        """Update a medication"""
        def _update(session: Session) -> models.Medication:
            medication = session.query(models.Medication).filter(
                and_(
                    models.Medication.id == medication_id,
                    models.Medication.user_id == user_id
                )
            ).first()

            if not medication:
                raise NotFoundError("Medication", medication_id)

            allowed_fields = {'name', 'dosage', 'notes', 'is_active'}

            for field, value in updates.items():
                if field in allowed_fields:
                    setattr(medication, field, value)

            session.commit()
            session.refresh(medication)

            logger.info(f"Updated medication {medication_id}")
            return medication

        if db:
            return _update(db)

        with get_db_context() as session:
            return _update(session)

    async def deactivate_medication(
        self,
        user_id: int,
        medication_id: int,
        db: Optional[Session] = None
    ) -> models.Medication:
        """Deactivate a medication and stop its schedules"""
        def _deactivate(session: Session) -> models.Medication:
            medication = session.query(models.Medication).filter(
                and_(
                    models.Medication.id == medication_id,
                    models.Medication.user_id == user_id
                )
            ).first()

            if not medication:
                raise NotFoundError("Medication", medication_id)

            medication.is_active = False
            for schedule in medication.schedules:
                schedule.is_active = False

            session.commit()
            session.refresh(medication)

            logger.info(f"Deactivated medication {medication_id} and its schedules")
            return medication

        if db:
            return _deactivate(db)

        with get_db_context() as session:
            return _deactivate(session)


# Singleton instance
medication_service = MedicationService()
