"""
Services Module
Business logic layer for the DoseTrack application
"""

from services.errors import (
    NotFoundError,
    ScheduleValidationError,
    ScheduleConflictError,
    ProfileValidationError,
)
from services.user_service import UserService, user_service
from services.medication_service import MedicationService, medication_service
from services.schedule_service import ScheduleService, schedule_service, validate_schedule_fields
from services.intake_service import IntakeService, intake_service
from services.report_service import ReportService, report_service


__all__ = [
    # Errors
    "NotFoundError",
    "ScheduleValidationError",
    "ScheduleConflictError",
    "ProfileValidationError",
    # Service classes
    "UserService",
    "MedicationService",
    "ScheduleService",
    "IntakeService",
    "ReportService",
    # Helpers
    "validate_schedule_fields",
    # Singleton instances
    "user_service",
    "medication_service",
    "schedule_service",
    "intake_service",
    "report_service",
]
