"""
Users API Router
Endpoints for user registration and profile
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from api.deps import get_db, services, to_http_exception
from api.schemas.user import UserCreate, ProfileUpdate, UserResponse
from services.errors import NotFoundError, ProfileValidationError


router = APIRouter(prefix="/users", tags=["users"])


@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    db: Session = Depends(get_db)
):
    """
    Register a user

    - **timezone**: IANA name used to interpret schedule times (default UTC)
    """
    user_service = services.get_user_service()

    try:
        return await user_service.create_user(
            name=user_data.name,
            email=user_data.email,
            timezone=user_data.timezone,
            db=db
        )
    except ProfileValidationError as e:
        raise to_http_exception(e)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.get("/{user_id}/profile", response_model=UserResponse)
async def get_profile(
    user_id: int,
    db: Session = Depends(get_db)
):
    """Get a user's profile"""
    user_service = services.get_user_service()

    user = await user_service.get_user(user_id, db=db)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User {user_id} not found"
        )
    return user


@router.put("/{user_id}/profile", response_model=UserResponse)
async def update_profile(
    user_id: int,
    profile: ProfileUpdate,
    db: Session = Depends(get_db)
):
    """Update name or timezone"""
    user_service = services.get_user_service()

    try:
        return await user_service.update_profile(
            user_id,
            name=profile.name,
            timezone=profile.timezone,
            db=db
        )
    except (NotFoundError, ProfileValidationError) as e:
        raise to_http_exception(e)
