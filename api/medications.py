"""
Medications API Router
Endpoints for medication management
"""

from typing import List
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session

from api.deps import get_db, get_current_user_id, services, to_http_exception
from api.schemas.medication import (
    MedicationCreate,
    MedicationUpdate,
    MedicationResponse,
    MedicationList,
)
from api.schemas.schedule import ScheduleResponse
from services.errors import NotFoundError


router = APIRouter(prefix="/medications", tags=["medications"])


@router.post("/", response_model=MedicationResponse, status_code=status.HTTP_201_CREATED)
async def create_medication(
    medication_data: MedicationCreate,
    db: Session = Depends(get_db)
):
    """
    Add a new medication for a user

    - **user_id**: Owner
    - **name**: Medication name
    - **dosage**: Dosage (e.g., "500mg")
    """
    medication_service = services.get_medication_service()

    try:
        return await medication_service.create_medication(
            user_id=medication_data.user_id,
            name=medication_data.name,
            dosage=medication_data.dosage,
            notes=medication_data.notes,
            is_active=medication_data.is_active,
            db=db
        )
    except NotFoundError as e:
        raise to_http_exception(e)


@router.get("/", response_model=MedicationList)
async def list_medications(
    user_id: int = Depends(get_current_user_id),
    active_only: bool = Query(True, description="Only return active medications"),
    db: Session = Depends(get_db)
):
    """
    Get all medications for a user
    """
    medication_service = services.get_medication_service()

    medications = await medication_service.list_for_user(
        user_id,
        active_only=active_only,
        db=db
    )

    return MedicationList(
        medications=[MedicationResponse.model_validate(m) for m in medications],
        total=len(medications)
    )


@router.get("/{medication_id}", response_model=MedicationResponse)
async def get_medication(
    medication_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get one medication"""
    medication_service = services.get_medication_service()

    try:
        return await medication_service.get_medication(user_id, medication_id, db=db)
    except NotFoundError as e:
        raise to_http_exception(e)


@router.put("/{medication_id}", response_model=MedicationResponse)
async def update_medication(
    medication_id: int,
    update_data: MedicationUpdate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Update medication details"""
    medication_service = services.get_medication_service()

    try:
        return await medication_service.update_medication(
            user_id,
            medication_id,
            update_data.model_dump(exclude_unset=True),
            db=db
        )
    except NotFoundError as e:
        raise to_http_exception(e)


@router.delete("/{medication_id}", response_model=MedicationResponse)
async def deactivate_medication(
    medication_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Deactivate a medication

    Its schedules stop producing doses; intake history is kept.
    """
    medication_service = services.get_medication_service()

    try:
        return await medication_service.deactivate_medication(user_id, medication_id, db=db)
    except NotFoundError as e:
        raise to_http_exception(e)


@router.get("/{medication_id}/schedules", response_model=List[ScheduleResponse])
async def list_medication_schedules(
    medication_id: int,
    user_id: int = Depends(get_current_user_id),
    include_inactive: bool = Query(False, description="Include deactivated schedules"),
    db: Session = Depends(get_db)
):
    """List the schedules of a medication"""
    schedule_service = services.get_schedule_service()

    try:
        return await schedule_service.list_for_medication(
            user_id,
            medication_id,
            include_inactive=include_inactive,
            db=db
        )
    except NotFoundError as e:
        raise to_http_exception(e)
