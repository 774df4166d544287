"""Visit domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from ...shared.enums import VisitStatus, Weekday


class VisitCreate(BaseModel):
    """Schema for scheduling a visit"""

    client_id: int
    vendor_id: int
    scheduled_date: date
    notes: Optional[str] = None


class VisitUpdate(BaseModel):
    scheduled_date: Optional[date] = None
    notes: Optional[str] = None


class CheckInRequest(BaseModel):
    """Coordinates are optional but must be sent together"""

    latitude: Optional[float] = None
    longitude: Optional[float] = None


class CheckOutRequest(BaseModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    notes: Optional[str] = None


class VisitClient(BaseModel):
    id: int
    name: str
    city: Optional[str] = None

    class Config:
        from_attributes = True


class VisitResponse(BaseModel):
    id: int
    client_id: int
    vendor_id: int
    scheduled_date: date
    status: VisitStatus
    check_in_at: Optional[datetime] = None
    check_in_latitude: Optional[float] = None
    check_in_longitude: Optional[float] = None
    check_in_address: Optional[str] = None
    check_out_at: Optional[datetime] = None
    check_out_latitude: Optional[float] = None
    check_out_longitude: Optional[float] = None
    check_out_address: Optional[str] = None
    duration_minutes: Optional[int] = None
    notes: Optional[str] = None
    inspection_report_id: Optional[int] = None
    client: Optional[VisitClient] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CheckpointResponse(BaseModel):
    """Check-in/check-out outcome; geocode_degraded is set when the address lookup failed"""

    visit: VisitResponse
    geocode_degraded: bool


# Daily agenda


class AgendaVisit(BaseModel):
    id: int
    client_id: int
    status: VisitStatus
    check_in_at: Optional[datetime] = None
    check_out_at: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    client: Optional[VisitClient] = None


class AgendaStop(BaseModel):
    stop_id: int
    position: int
    client: VisitClient
    visit: Optional[AgendaVisit] = None


class AgendaCounts(BaseModel):
    scheduled: int = 0
    completed: int = 0
    pending: int = 0
    extra: int = 0


class DailyAgendaResponse(BaseModel):
    vendor_id: int
    day: date
    weekday: Optional[Weekday] = None
    route_id: Optional[int] = None
    stops: list[AgendaStop] = Field(default_factory=list)
    extras: list[AgendaVisit] = Field(default_factory=list)
    counts: AgendaCounts


# Monthly summary


class SummaryTotals(BaseModel):
    total: int
    completed: int
    in_progress: int
    scheduled: int
    with_report: int


class VendorSummary(BaseModel):
    vendor_id: int
    vendor_name: str
    total: int
    completed: int
    with_report: int
    average_duration_minutes: Optional[int] = None


class MonthlySummaryResponse(BaseModel):
    year: int
    month: int
    totals: SummaryTotals
    vendors: list[VendorSummary]


# Visit marks


class VisitMarkRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    day: date
    client_id: int


class VisitMarksResponse(BaseModel):
    user_id: str
    day: date
    client_ids: list[int]
