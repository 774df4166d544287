"""Visit router - FastAPI endpoints for the visit lifecycle"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...models_visit import Visit
from ...services.geocoding_service import ReverseGeocoder, get_reverse_geocoder
from ...services.visit_marks import VisitMarks
from ...shared.enums import VisitStatus
from .schemas import (
    AgendaCounts,
    AgendaStop,
    AgendaVisit,
    CheckInRequest,
    CheckOutRequest,
    CheckpointResponse,
    DailyAgendaResponse,
    MonthlySummaryResponse,
    VisitClient,
    VisitCreate,
    VisitMarkRequest,
    VisitMarksResponse,
    VisitResponse,
    VisitUpdate,
)
from .service import CheckpointResult, VisitService, duration_minutes, status_of

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/visits", tags=["Visits"])


def get_visit_service(
    db: Session = Depends(get_db),
    geocoder: Optional[ReverseGeocoder] = Depends(get_reverse_geocoder),
) -> VisitService:
    """Dependency injection for VisitService"""
    return VisitService(db, geocoder=geocoder)


def get_visit_marks() -> VisitMarks:
    return VisitMarks()


def to_visit_response(visit: Visit) -> VisitResponse:
    return VisitResponse(
        id=visit.id,
        client_id=visit.client_id,
        vendor_id=visit.vendor_id,
        scheduled_date=visit.scheduled_date,
        status=status_of(visit),
        check_in_at=visit.check_in_at,
        check_in_latitude=visit.check_in_latitude,
        check_in_longitude=visit.check_in_longitude,
        check_in_address=visit.check_in_address,
        check_out_at=visit.check_out_at,
        check_out_latitude=visit.check_out_latitude,
        check_out_longitude=visit.check_out_longitude,
        check_out_address=visit.check_out_address,
        duration_minutes=duration_minutes(visit.check_in_at, visit.check_out_at),
        notes=visit.notes,
        inspection_report_id=visit.inspection_report_id,
        client=VisitClient.model_validate(visit.client) if visit.client else None,
        created_at=visit.created_at,
        updated_at=visit.updated_at,
    )


def to_agenda_visit(visit: Visit) -> AgendaVisit:
    return AgendaVisit(
        id=visit.id,
        client_id=visit.client_id,
        status=status_of(visit),
        check_in_at=visit.check_in_at,
        check_out_at=visit.check_out_at,
        duration_minutes=duration_minutes(visit.check_in_at, visit.check_out_at),
        client=VisitClient.model_validate(visit.client) if visit.client else None,
    )


def to_checkpoint_response(result: CheckpointResult) -> CheckpointResponse:
    return CheckpointResponse(
        visit=to_visit_response(result.visit), geocode_degraded=result.geocode_degraded
    )


# ============================================================================
# VISITS
# ============================================================================


@router.get("", response_model=list[VisitResponse])
async def list_visits(
    vendor_id: Optional[int] = Query(None),
    client_id: Optional[int] = Query(None),
    day: Optional[date] = Query(None, alias="date"),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    status: Optional[VisitStatus] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    service: VisitService = Depends(get_visit_service),
):
    """List visits, newest scheduled date first"""
    visits = service.list_visits(
        vendor_id=vendor_id,
        client_id=client_id,
        on_date=day,
        date_from=date_from,
        date_to=date_to,
        status=status,
        limit=limit,
        offset=offset,
    )
    return [to_visit_response(v) for v in visits]


@router.post("", response_model=VisitResponse, status_code=201)
async def create_visit(data: VisitCreate, service: VisitService = Depends(get_visit_service)):
    visit = service.create_visit(data.client_id, data.vendor_id, data.scheduled_date, data.notes)
    return to_visit_response(visit)


@router.get("/agenda", response_model=DailyAgendaResponse)
async def daily_agenda(
    vendor_id: int = Query(...),
    day: date = Query(..., alias="date"),
    service: VisitService = Depends(get_visit_service),
):
    """Planned stops for a vendor's day, each with its visit, plus unplanned visits"""
    agenda = service.daily_agenda(vendor_id, day)
    return DailyAgendaResponse(
        vendor_id=agenda.vendor_id,
        day=agenda.day,
        weekday=agenda.weekday,
        route_id=agenda.route_id,
        stops=[
            AgendaStop(
                stop_id=entry.stop.id,
                position=entry.stop.position,
                client=VisitClient.model_validate(entry.stop.client),
                visit=to_agenda_visit(entry.visit) if entry.visit else None,
            )
            for entry in agenda.entries
        ],
        extras=[to_agenda_visit(v) for v in agenda.extras],
        counts=AgendaCounts(
            scheduled=agenda.scheduled,
            completed=agenda.completed,
            pending=agenda.pending,
            extra=agenda.extra,
        ),
    )


@router.get("/summary", response_model=MonthlySummaryResponse)
async def monthly_summary(
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    vendor_id: Optional[int] = Query(None),
    service: VisitService = Depends(get_visit_service),
):
    return service.monthly_summary(year, month, vendor_id)


# ============================================================================
# VISITED-TODAY MARKS
# ============================================================================


@router.get("/marks", response_model=VisitMarksResponse)
async def list_marks(
    user_id: str = Query(..., min_length=1),
    day: date = Query(..., alias="date"),
    marks: VisitMarks = Depends(get_visit_marks),
):
    return VisitMarksResponse(user_id=user_id, day=day, client_ids=marks.list_marks(user_id, day))


@router.post("/marks", response_model=VisitMarksResponse)
async def add_mark(data: VisitMarkRequest, marks: VisitMarks = Depends(get_visit_marks)):
    """Mark a client as visited today; does not touch any visit"""
    marks.mark(data.user_id, data.day, data.client_id)
    return VisitMarksResponse(
        user_id=data.user_id, day=data.day, client_ids=marks.list_marks(data.user_id, data.day)
    )


@router.delete("/marks/{client_id}", response_model=VisitMarksResponse)
async def remove_mark(
    client_id: int,
    user_id: str = Query(..., min_length=1),
    day: date = Query(..., alias="date"),
    marks: VisitMarks = Depends(get_visit_marks),
):
    marks.unmark(user_id, day, client_id)
    return VisitMarksResponse(user_id=user_id, day=day, client_ids=marks.list_marks(user_id, day))


# ============================================================================
# SINGLE VISIT
# ============================================================================


@router.get("/{visit_id}", response_model=VisitResponse)
async def get_visit(visit_id: int, service: VisitService = Depends(get_visit_service)):
    return to_visit_response(service.get_visit(visit_id))


@router.patch("/{visit_id}", response_model=VisitResponse)
async def update_visit(
    visit_id: int, data: VisitUpdate, service: VisitService = Depends(get_visit_service)
):
    """Edit notes, or reschedule a visit that has not started"""
    visit = service.update_visit(visit_id, scheduled_date=data.scheduled_date, notes=data.notes)
    return to_visit_response(visit)


@router.delete("/{visit_id}")
async def delete_visit(visit_id: int, service: VisitService = Depends(get_visit_service)):
    service.delete_visit(visit_id)
    return {"message": "Visit deleted successfully"}


@router.post("/{visit_id}/check-in", response_model=CheckpointResponse)
async def check_in(
    visit_id: int,
    data: Optional[CheckInRequest] = None,
    service: VisitService = Depends(get_visit_service),
):
    data = data or CheckInRequest()
    result = await service.check_in(visit_id, data.latitude, data.longitude)
    return to_checkpoint_response(result)


@router.post("/{visit_id}/check-out", response_model=CheckpointResponse)
async def check_out(
    visit_id: int,
    data: Optional[CheckOutRequest] = None,
    service: VisitService = Depends(get_visit_service),
):
    data = data or CheckOutRequest()
    result = await service.check_out(visit_id, data.latitude, data.longitude, data.notes)
    return to_checkpoint_response(result)
