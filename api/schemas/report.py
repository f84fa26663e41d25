"""
Report Schemas
Pydantic models for adherence report responses
"""

from typing import Optional, List
from pydantic import BaseModel, Field


# ==================== SUMMARY SCHEMAS ====================

class AdherenceSummary(BaseModel):
    """Counts and rate for a set of scheduled doses"""
    expected: int
    taken: int
    skipped: int
    missed: int
    adherence_rate: float = Field(..., ge=0.0, le=1.0)


class MedicationAdherence(AdherenceSummary):
    """Adherence for one medication"""
    medication_id: int
    medication_name: Optional[str] = None


class ScheduleAdherence(AdherenceSummary):
    """Adherence for one schedule"""
    schedule_id: int
    medication_id: int


class ReportPeriod(BaseModel):
    """UTC bounds of the requested local date range"""
    from_: str = Field(..., alias="from", serialization_alias="from")
    to: str


# ==================== RESPONSE SCHEMAS ====================

class AdherenceSummaryResponse(BaseModel):
    """Response for the adherence summary report"""
    period: ReportPeriod
    summary: AdherenceSummary
    by_medication: Optional[List[MedicationAdherence]] = None


class PeriodReportResponse(BaseModel):
    """Summary for the current day, week or month"""
    period: str
    period_start: str
    period_end: str
    summary: AdherenceSummary


class TimelineEntry(BaseModel):
    """One scheduled dose and how it was resolved"""
    scheduled_at: str
    status: str
    medication_id: int
    schedule_id: int


class IntakeTimelineResponse(BaseModel):
    """Every scheduled dose in the range, in time order"""
    entries: List[TimelineEntry]
    total: int
