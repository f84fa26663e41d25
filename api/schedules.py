"""
Schedules API Router
Endpoints for medication schedule management
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from api.deps import get_db, get_current_user_id, services, to_http_exception
from api.schemas.schedule import ScheduleCreate, ScheduleUpdate, ScheduleResponse
from services.errors import NotFoundError, ScheduleValidationError, ScheduleConflictError


router = APIRouter(prefix="/schedules", tags=["schedules"])


@router.post("/", response_model=ScheduleResponse, status_code=status.HTTP_201_CREATED)
async def create_schedule(
    schedule_data: ScheduleCreate,
    db: Session = Depends(get_db)
):
    """
    Create a schedule for a medication

    - **daily**: `times` required
    - **weekly**: `times` and `weekdays` required
    - **interval**: `interval_hours` required, no times or weekdays

    Returns 422 with a field -> message map on invalid or overlapping schedules.
    """
    schedule_service = services.get_schedule_service()

    try:
        return await schedule_service.create_schedule(
            user_id=schedule_data.user_id,
            medication_id=schedule_data.medication_id,
            recurrence_type=schedule_data.recurrence_type,
            times=schedule_data.times,
            weekdays=schedule_data.weekdays,
            interval_hours=schedule_data.interval_hours,
            is_active=schedule_data.is_active,
            db=db
        )
    except (NotFoundError, ScheduleValidationError, ScheduleConflictError) as e:
        raise to_http_exception(e)


@router.get("/{schedule_id}", response_model=ScheduleResponse)
async def get_schedule(
    schedule_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get a specific schedule"""
    schedule_service = services.get_schedule_service()

    try:
        return await schedule_service.get_schedule(user_id, schedule_id, db=db)
    except NotFoundError as e:
        raise to_http_exception(e)


@router.put("/{schedule_id}", response_model=ScheduleResponse)
async def update_schedule(
    schedule_id: int,
    update_data: ScheduleUpdate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Update a schedule

    Only the fields sent are changed. Switching `recurrence_type` drops
    stored fields the new type does not use.
    """
    schedule_service = services.get_schedule_service()

    try:
        return await schedule_service.update_schedule(
            user_id,
            schedule_id,
            update_data.model_dump(exclude_unset=True),
            db=db
        )
    except (NotFoundError, ScheduleValidationError, ScheduleConflictError) as e:
        raise to_http_exception(e)


@router.delete("/{schedule_id}", response_model=ScheduleResponse)
async def deactivate_schedule(
    schedule_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Deactivate a schedule; past intakes are kept"""
    schedule_service = services.get_schedule_service()

    try:
        return await schedule_service.deactivate_schedule(user_id, schedule_id, db=db)
    except NotFoundError as e:
        raise to_http_exception(e)
