"""
Reports API Router
Endpoints for adherence summaries, breakdowns and the intake timeline

Dates are local calendar days in the user's timezone.
"""

from typing import Dict, List, Optional
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from api.deps import get_db, get_current_user_id, services, to_http_exception
from api.schemas.report import (
    AdherenceSummaryResponse,
    MedicationAdherence,
    ScheduleAdherence,
    PeriodReportResponse,
    IntakeTimelineResponse,
    TimelineEntry,
)
from config import engine_config
from services.errors import NotFoundError
from tools.time_utils import MIN_LOCAL_DATE, MAX_LOCAL_DATE, is_reportable_date


router = APIRouter(prefix="/reports", tags=["reports"])


def _check_range(
    from_date: date,
    to_date: date,
    medication_id: Optional[int] = None,
    schedule_id: Optional[int] = None
) -> None:
    """Reject out-of-bounds or inverted ranges and conflicting filters"""
    errors: Dict[str, str] = {}

    for field, value in (("from", from_date), ("to", to_date)):
        if not is_reportable_date(value):
            errors[field] = (
                f"The {field} date must be between {MIN_LOCAL_DATE.isoformat()} "
                f"and {MAX_LOCAL_DATE.isoformat()}."
            )
    if from_date > to_date and "to" not in errors:
        errors["to"] = "The to date must be on or after the from date."
    if medication_id is not None and schedule_id is not None:
        errors["schedule_id"] = "Filter by medication_id or schedule_id, not both."

    if errors:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"errors": errors}
        )


@router.get(
    "/adherence",
    response_model=AdherenceSummaryResponse,
    response_model_exclude_none=True
)
async def get_adherence_summary(
    user_id: int = Depends(get_current_user_id),
    from_date: date = Query(..., alias="from", description="First local day (inclusive)"),
    to_date: date = Query(..., alias="to", description="Last local day (inclusive)"),
    medication_id: Optional[int] = Query(None),
    schedule_id: Optional[int] = Query(None),
    db: Session = Depends(get_db)
):
    """
    Adherence summary for a date range

    - **medication_id**: restrict to one medication
    - **schedule_id**: restrict to one schedule

    Without a medication filter the response also carries `by_medication`.
    """
    _check_range(from_date, to_date, medication_id, schedule_id)
    report_service = services.get_report_service()

    try:
        return await report_service.adherence_summary(
            user_id,
            from_date,
            to_date,
            medication_id=medication_id,
            schedule_id=schedule_id,
            db=db
        )
    except NotFoundError as e:
        raise to_http_exception(e)


@router.get("/adherence/medications", response_model=List[MedicationAdherence])
async def get_medication_breakdown(
    user_id: int = Depends(get_current_user_id),
    from_date: date = Query(..., alias="from"),
    to_date: date = Query(..., alias="to"),
    db: Session = Depends(get_db)
):
    """Adherence per medication"""
    _check_range(from_date, to_date)
    report_service = services.get_report_service()

    try:
        return await report_service.medication_breakdown(user_id, from_date, to_date, db=db)
    except NotFoundError as e:
        raise to_http_exception(e)


@router.get("/adherence/schedules", response_model=List[ScheduleAdherence])
async def get_schedule_breakdown(
    user_id: int = Depends(get_current_user_id),
    from_date: date = Query(..., alias="from"),
    to_date: date = Query(..., alias="to"),
    medication_id: Optional[int] = Query(None),
    db: Session = Depends(get_db)
):
    """Adherence per schedule, optionally for one medication"""
    _check_range(from_date, to_date)
    report_service = services.get_report_service()

    try:
        return await report_service.schedule_breakdown(
            user_id,
            from_date,
            to_date,
            medication_id=medication_id,
            db=db
        )
    except NotFoundError as e:
        raise to_http_exception(e)


@router.get("/adherence/{period}", response_model=PeriodReportResponse)
async def get_period_report(
    period: str,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Adherence for the current day, week (Monday-Sunday) or month

    - **period**: daily, weekly or monthly
    """
    if period not in engine_config.REPORT_PERIODS:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"errors": {
                "period": "Period must be one of " + ", ".join(engine_config.REPORT_PERIODS) + "."
            }}
        )

    report_service = services.get_report_service()

    try:
        return await report_service.period_report(user_id, period, db=db)
    except NotFoundError as e:
        raise to_http_exception(e)


@router.get("/intake-timeline", response_model=IntakeTimelineResponse)
async def get_intake_timeline(
    user_id: int = Depends(get_current_user_id),
    from_date: date = Query(..., alias="from"),
    to_date: date = Query(..., alias="to"),
    medication_id: Optional[int] = Query(None),
    schedule_id: Optional[int] = Query(None),
    db: Session = Depends(get_db)
):
    """Every scheduled dose in the range with its status"""
    _check_range(from_date, to_date, medication_id, schedule_id)
    report_service = services.get_report_service()

    try:
        entries = await report_service.intake_timeline(
            user_id,
            from_date,
            to_date,
            medication_id=medication_id,
            schedule_id=schedule_id,
            db=db
        )
    except NotFoundError as e:
        raise to_http_exception(e)

    return IntakeTimelineResponse(
        entries=[TimelineEntry(**entry) for entry in entries],
        total=len(entries)
    )
