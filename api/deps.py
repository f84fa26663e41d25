"""
API Dependencies
Common dependencies for FastAPI endpoints
"""

from fastapi import Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from database import get_db
from services.errors import (
    NotFoundError,
    ScheduleValidationError,
    ScheduleConflictError,
    ProfileValidationError,
)


async def get_current_user_id(
    user_id: int = Query(..., description="Acting user"),
    db: Session = Depends(get_db)
) -> int:
    """
    Validate user exists and return user ID
    """
    from models import User

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User {user_id} not found"
        )

    return user_id


def to_http_exception(exc: Exception) -> HTTPException:
    """
    Map a service-layer error to the HTTP error the API returns

    Validation and conflict errors become 422 with a field -> message map,
    unknown or foreign records become 404.
    """
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))

    if isinstance(exc, (ScheduleValidationError, ScheduleConflictError, ProfileValidationError)):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"errors": exc.errors}
        )

    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


class ServiceDependency:
    """
    Dependency injection for services
    """

    @staticmethod
    def get_user_service():
        from services.user_service import user_service
        return user_service

    @staticmethod
    def get_medication_service():
        from services.medication_service import medication_service
        return medication_service

    @staticmethod
    def get_schedule_service():
        from services.schedule_service import schedule_service
        return schedule_service

    @staticmethod
    def get_intake_service():
        from services.intake_service import intake_service
        return intake_service

    @staticmethod
    def get_report_service():
        from services.report_service import report_service
        return report_service


# Service dependency instances
services = ServiceDependency()


__all__ = [
    "get_db",
    "get_current_user_id",
    "to_http_exception",
    "ServiceDependency",
    "services",
]
