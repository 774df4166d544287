"""Route router - FastAPI endpoints for route assignment"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...shared.enums import Weekday
from .schemas import (
    CopyDayRequest,
    CopyDayResponse,
    ReorderRequest,
    RouteCreate,
    RouteDetailResponse,
    RouteResponse,
    RouteUpdate,
    StopCreate,
    StopResponse,
    WeeklyOverviewItem,
)
from .service import RouteService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/routes", tags=["Routes"])


def get_route_service(db: Session = Depends(get_db)) -> RouteService:
    """Dependency injection for RouteService"""
    return RouteService(db)


def _route_detail(route, grouped) -> RouteDetailResponse:
    return RouteDetailResponse(
        id=route.id,
        vendor_id=route.vendor_id,
        name=route.name,
        active=route.active,
        created_at=route.created_at,
        updated_at=route.updated_at,
        stops_by_weekday={
            weekday: [StopResponse.model_validate(stop) for stop in stops]
            for weekday, stops in grouped.items()
        },
        total_stops=sum(len(stops) for stops in grouped.values()),
    )


# ============================================================================
# ROUTES
# ============================================================================


@router.get("", response_model=list[RouteResponse])
async def list_routes(
    vendor_id: Optional[int] = Query(None),
    active: Optional[bool] = Query(None),
    service: RouteService = Depends(get_route_service),
):
    """List routes, optionally filtered by vendor and active flag"""
    return service.list_routes(vendor_id, active)


@router.post("", response_model=RouteResponse, status_code=201)
async def create_route(data: RouteCreate, service: RouteService = Depends(get_route_service)):
    return service.create_route(data.vendor_id, data.name)


@router.get("/weekly-overview", response_model=list[WeeklyOverviewItem])
async def weekly_overview(service: RouteService = Depends(get_route_service)):
    """Stops per weekday for every active route"""
    return service.weekly_overview()


@router.get("/{route_id}", response_model=RouteDetailResponse)
async def get_route(route_id: int, service: RouteService = Depends(get_route_service)):
    """Get a route with its stops grouped by weekday"""
    route = service.get_route(route_id)
    return _route_detail(route, service.list_by_weekday(route_id))


@router.patch("/{route_id}", response_model=RouteResponse)
async def update_route(
    route_id: int, data: RouteUpdate, service: RouteService = Depends(get_route_service)
):
    return service.update_route(route_id, name=data.name, active=data.active)


@router.delete("/{route_id}")
async def delete_route(route_id: int, service: RouteService = Depends(get_route_service)):
    service.delete_route(route_id)
    return {"message": "Route deleted successfully"}


# ============================================================================
# STOPS
# ============================================================================


@router.get("/{route_id}/weekdays", response_model=dict[Weekday, list[StopResponse]])
async def list_by_weekday(route_id: int, service: RouteService = Depends(get_route_service)):
    """Stops for all six weekdays, each ordered by position"""
    grouped = service.list_by_weekday(route_id)
    return {
        weekday: [StopResponse.model_validate(stop) for stop in stops]
        for weekday, stops in grouped.items()
    }


@router.post("/{route_id}/stops", response_model=StopResponse, status_code=201)
async def add_stop(
    route_id: int, data: StopCreate, service: RouteService = Depends(get_route_service)
):
    """Add a client to a route weekday"""
    return service.add_stop(route_id, data.client_id, data.weekday, data.position)


@router.delete("/{route_id}/stops/{stop_id}")
async def remove_stop(
    route_id: int, stop_id: int, service: RouteService = Depends(get_route_service)
):
    service.remove_stop(route_id, stop_id)
    return {"message": "Stop removed successfully"}


@router.put("/{route_id}/reorder", response_model=list[StopResponse])
async def reorder_stops(
    route_id: int, data: ReorderRequest, service: RouteService = Depends(get_route_service)
):
    """Apply absolute positions to stops of one weekday, all or nothing"""
    targets = [(item.stop_id, item.position) for item in data.stops]
    return service.reorder(route_id, data.weekday, targets)


@router.post("/{route_id}/copy-day", response_model=CopyDayResponse)
async def copy_day(
    route_id: int, data: CopyDayRequest, service: RouteService = Depends(get_route_service)
):
    """Copy the clients of one weekday onto another"""
    copied = service.copy_day(route_id, data.from_weekday, data.to_weekday)
    return CopyDayResponse(
        message=f"{copied} client(s) copied from {data.from_weekday.value} to {data.to_weekday.value}",
        copied=copied,
    )
