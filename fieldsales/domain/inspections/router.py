"""Inspection report router - FastAPI endpoints for wear inspection reports"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...shared.enums import ComponentType, ReportStatus
from .schemas import (
    AssessmentResponse,
    DefaultValue,
    MeasurementInput,
    MeasurementResponse,
    MeasurementUpdate,
    PhotoCreate,
    PhotoResponse,
    ReportCreate,
    ReportListItem,
    ReportResponse,
    ReportUpdate,
)
from .service import InspectionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/inspection-reports", tags=["Inspection Reports"])


def get_inspection_service(db: Session = Depends(get_db)) -> InspectionService:
    """Dependency injection for InspectionService"""
    return InspectionService(db)


@router.get("", response_model=list[ReportListItem])
async def list_reports(
    inspector_id: Optional[str] = Query(None),
    status: Optional[ReportStatus] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    service: InspectionService = Depends(get_inspection_service),
):
    return service.list_reports(inspector_id, status, date_from, date_to)


@router.post("", response_model=ReportResponse, status_code=201)
async def create_report(
    data: ReportCreate, service: InspectionService = Depends(get_inspection_service)
):
    """Create a draft report for a visit; measurements default to the standard components"""
    return service.create_report(data)


@router.get("/default-values", response_model=list[DefaultValue])
async def default_values(service: InspectionService = Depends(get_inspection_service)):
    """Default standard and limit dimensions per component type"""
    return service.default_values()


@router.get("/visit/{visit_id}", response_model=ReportResponse)
async def get_report_for_visit(
    visit_id: int, service: InspectionService = Depends(get_inspection_service)
):
    return service.get_report_for_visit(visit_id)


@router.get("/{report_id}", response_model=ReportResponse)
async def get_report(report_id: int, service: InspectionService = Depends(get_inspection_service)):
    return service.get_report(report_id)


@router.get("/{report_id}/assessment", response_model=AssessmentResponse)
async def get_assessment(
    report_id: int, service: InspectionService = Depends(get_inspection_service)
):
    """Components grouped by condition, with a generated technical summary"""
    grouped, text = service.assessment(report_id)
    return AssessmentResponse(
        critical=grouped.critical,
        verify=grouped.verify,
        ok=grouped.ok,
        worst=grouped.worst,
        summary_text=text,
    )


@router.patch("/{report_id}", response_model=ReportResponse)
async def update_report(
    report_id: int,
    data: ReportUpdate,
    service: InspectionService = Depends(get_inspection_service),
):
    return service.update_report(report_id, data)


@router.put("/{report_id}/measurements", response_model=ReportResponse)
async def replace_measurements(
    report_id: int,
    rows: list[MeasurementInput],
    service: InspectionService = Depends(get_inspection_service),
):
    return service.replace_measurements(report_id, rows)


@router.patch("/{report_id}/measurements/{component_type}", response_model=MeasurementResponse)
async def update_measurement(
    report_id: int,
    component_type: ComponentType,
    data: MeasurementUpdate,
    service: InspectionService = Depends(get_inspection_service),
):
    """Update one component row; wear and condition are recomputed"""
    return service.update_measurement(report_id, component_type, data)


@router.post("/{report_id}/photos", response_model=PhotoResponse, status_code=201)
async def add_photo(
    report_id: int,
    data: PhotoCreate,
    service: InspectionService = Depends(get_inspection_service),
):
    return service.add_photo(report_id, data)


@router.delete("/{report_id}/photos/{photo_id}")
async def remove_photo(
    report_id: int, photo_id: int, service: InspectionService = Depends(get_inspection_service)
):
    service.remove_photo(report_id, photo_id)
    return {"message": "Photo removed successfully"}


@router.post("/{report_id}/submit", response_model=ReportResponse)
async def submit_report(
    report_id: int, service: InspectionService = Depends(get_inspection_service)
):
    """Submit a report; it becomes read-only"""
    return service.submit_report(report_id)


@router.delete("/{report_id}")
async def delete_report(
    report_id: int, service: InspectionService = Depends(get_inspection_service)
):
    service.delete_report(report_id)
    return {"message": "Inspection report deleted successfully"}
