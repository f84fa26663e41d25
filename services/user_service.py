"""
User Service
Business logic for user profiles
"""

import logging
from typing import Optional
from sqlalchemy.orm import Session

from database import get_db_context
import models
from services.errors import NotFoundError, ProfileValidationError
from tools.time_utils import is_valid_timezone


logger = logging.getLogger(__name__)


class UserService:
    """
    Service for user profile operations
    """

    async def create_user(
        self,
        name: str,
        email: str,
        timezone: Optional[str] = None,
        db: Optional[Session] = None
    ) -> models.User:
        """
        Create a new user

        Args:
            name: Display name
            email: Email (unique)
            timezone: IANA timezone; defaults to UTC
            db: Database session (optional)

        Returns:
            Created User object
        """
        def _create(session: Session) -> models.User:
            existing = session.query(models.User).filter(
                models.User.email == email
            ).first()

            if existing:
                raise ValueError(f"User with email {email} already exists")

            tz = timezone or "UTC"
            if not is_valid_timezone(tz):
                raise ProfileValidationError("timezone", f"Unknown timezone: {tz}")

            user = models.User(name=name, email=email, timezone=tz)

            session.add(user)
            session.commit()
            session.refresh(user)

            logger.info(f"Created user: {user.id} ({tz})")
            return user

        if db:
            return _create(db)

        with get_db_context() as session:
            return _create(session)

    async def get_user(
        self,
        user_id: int,
        db: Optional[Session] = None
    ) -> Optional[models.User]:
        """Get user by ID"""
        def _get(session: Session) -> Optional[models.User]:
            return session.query(models.User).filter(
                models.User.id == user_id
            ).first()

        if db:
            return _get(db)

        with get_db_context() as session:
            return _get(session)

    async def update_profile(
        self,
        user_id: int,
        name: Optional[str] = None,
        timezone: Optional[str] = None,
        db: Optional[Session] = None
    ) -> models.User:
        """Update profile fields; the timezone must be a known IANA name"""
        def _update(session: Session) -> models.User:
            user = session.query(models.User).filter(
                models.User.id == user_id
            ).first()

            if not user:
                raise NotFoundError("User", user_id)

            if timezone is not None:
                if not is_valid_timezone(timezone):
                    raise ProfileValidationError("timezone", f"Unknown timezone: {timezone}")
                user.timezone = timezone

            if name is not None:
                user.name = name

            session.commit()
            session.refresh(user)

            logger.info(f"Updated profile for user {user_id}")
            return user

        if db:
            return _update(db)

        with get_db_context() as session:
            return _update(session)


# Singleton instance
user_service = UserService()
