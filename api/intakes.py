"""
Intakes API Router
Endpoints for logging taken and skipped doses
"""

from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from api.deps import get_db, get_current_user_id, services, to_http_exception
from api.schemas.intake import IntakeCreate, IntakeResponse
from services.errors import NotFoundError


router = APIRouter(prefix="/intakes", tags=["intakes"])


@router.post("/", response_model=IntakeResponse, status_code=status.HTTP_201_CREATED)
async def log_intake(
    intake_data: IntakeCreate,
    db: Session = Depends(get_db)
):
    """
    Log a dose as taken or skipped

    - **schedule_id**: Active schedule owned by the user
    - **taken_at**: When it happened (defaults to now)
    """
    intake_service = services.get_intake_service()

    try:
        return await intake_service.create_intake(
            user_id=intake_data.user_id,
            schedule_id=intake_data.schedule_id,
            status=intake_data.status,
            taken_at=intake_data.taken_at,
            db=db
        )
    except NotFoundError as e:
        raise to_http_exception(e)


@router.get("/", response_model=List[IntakeResponse])
async def list_intakes(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """List a user's intakes, newest first"""
    intake_service = services.get_intake_service()
    return await intake_service.list_for_user(user_id, db=db)


@router.delete("/{intake_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_intake(
    intake_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Delete a logged intake"""
    intake_service = services.get_intake_service()

    try:
        await intake_service.delete_intake(user_id, intake_id, db=db)
    except NotFoundError as e:
        raise to_http_exception(e)
