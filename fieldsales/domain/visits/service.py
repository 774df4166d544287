"""
Visit service - check-in/check-out lifecycle and daily agenda

State machine (status is derived, never stored):

    SCHEDULED --check_in--> IN_PROGRESS --check_out--> COMPLETED

Check-in and check-out persist the timestamp and coordinates first and only
then try to resolve an address. A failed lookup leaves the address empty and
is reported through CheckpointResult.geocode_degraded.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ...models_route import RouteStop
from ...models_visit import Visit
from ...services.geocoding_service import ReverseGeocoder
from ...shared.enums import VisitStatus, Weekday
from ...shared.exceptions import ConflictError, ExternalServiceDegraded, NotFoundError, ValidationError
from ...shared.validators import validate_coordinates, weekday_for_date
from ..directory.repository import DirectoryRepository
from ..routes.repository import RouteRepository
from .repository import VisitRepository

logger = logging.getLogger(__name__)


def visit_status(check_in_at: Optional[datetime], check_out_at: Optional[datetime]) -> VisitStatus:
    if check_out_at is not None:
        return VisitStatus.COMPLETED
    if check_in_at is not None:
        return VisitStatus.IN_PROGRESS
    return VisitStatus.SCHEDULED


def status_of(visit: Visit) -> VisitStatus:
    return visit_status(visit.check_in_at, visit.check_out_at)


def duration_minutes(
    check_in_at: Optional[datetime], check_out_at: Optional[datetime]
) -> Optional[int]:
    """Whole minutes between check-in and check-out, rounded half up"""
    if check_in_at is None or check_out_at is None:
        return None
    return _round_minutes((check_out_at - check_in_at).total_seconds() / 60)


def _round_minutes(minutes: float) -> int:
    return int(Decimal(str(minutes)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass
class CheckpointResult:
    visit: Visit
    geocode_degraded: bool = False


@dataclass
class AgendaEntry:
    stop: RouteStop
    visit: Optional[Visit] = None


@dataclass
class DailyAgenda:
    vendor_id: int
    day: date
    weekday: Optional[Weekday] = None
    route_id: Optional[int] = None
    entries: list[AgendaEntry] = field(default_factory=list)
    extras: list[Visit] = field(default_factory=list)
    scheduled: int = 0
    completed: int = 0
    pending: int = 0

    @property
    def extra(self) -> int:
        return len(self.extras)


class VisitService:
    """Service layer for the visit lifecycle"""

    def __init__(
        self,
        db: Session,
        geocoder: Optional[ReverseGeocoder] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.db = db
        self.repo = VisitRepository()
        self.directory = DirectoryRepository()
        self.routes = RouteRepository()
        self.geocoder = geocoder
        self.clock = clock

    def get_visit(self, visit_id: int) -> Visit:
        visit = self.repo.get_visit(self.db, visit_id)
        if not visit:
            raise NotFoundError(f"Visit {visit_id} not found")
        return visit

    def list_visits(self, **filters) -> list[Visit]:
        date_from, date_to = filters.get("date_from"), filters.get("date_to")
        if date_from and date_to and date_from > date_to:
            raise ValidationError("date_from must not be after date_to")
        return self.repo.list_visits(self.db, **filters)

    def create_visit(
        self, client_id: int, vendor_id: int, scheduled_date: date, notes: Optional[str] = None
    ) -> Visit:
        self.directory.require_client(self.db, client_id)
        self.directory.require_vendor(self.db, vendor_id)

        visit = self.repo.create_visit(self.db, client_id, vendor_id, scheduled_date, notes)
        logger.info(f"Scheduled visit {visit.id}: vendor {vendor_id} -> client {client_id} on {scheduled_date}")
        return visit

    def update_visit(
        self, visit_id: int, scheduled_date: Optional[date] = None, notes: Optional[str] = None
    ) -> Visit:
        """Notes are always editable; the date only while the visit is still scheduled"""
        visit = self.get_visit(visit_id)

        if scheduled_date is not None and scheduled_date != visit.scheduled_date:
            if status_of(visit) != VisitStatus.SCHEDULED:
                raise ConflictError("Only scheduled visits can be rescheduled")
            visit.scheduled_date = scheduled_date
        if notes is not None:
            visit.notes = notes

        return self.repo.save(self.db, visit)

    def delete_visit(self, visit_id: int) -> None:
        visit = self.get_visit(visit_id)
        if visit.check_in_at is not None:
            raise ConflictError("Cannot delete a visit that has already been checked in")
        self.repo.delete_visit(self.db, visit)
        logger.info(f"Deleted visit {visit_id}")

    # ------------------------------------------------------------------
    # Check-in / check-out
    # ------------------------------------------------------------------

    async def check_in(
        self, visit_id: int, latitude: Optional[float] = None, longitude: Optional[float] = None
    ) -> CheckpointResult:
        visit = self.get_visit(visit_id)
        if visit.check_in_at is not None:
            raise ConflictError("Check-in already registered for this visit")
        latitude, longitude = validate_coordinates(latitude, longitude)

        visit.check_in_at = self.clock()
        visit.check_in_latitude = latitude
        visit.check_in_longitude = longitude
        self.repo.save(self.db, visit)
        logger.info(f"Visit {visit_id} checked in at {visit.check_in_at}")

        address, degraded = await self._resolve_address(latitude, longitude)
        if address:
            visit.check_in_address = address
            self.repo.save(self.db, visit)
        return CheckpointResult(visit=visit, geocode_degraded=degraded)

    async def check_out(
        self,
        visit_id: int,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        notes: Optional[str] = None,
    ) -> CheckpointResult:
        visit = self.get_visit(visit_id)
        if visit.check_in_at is None:
            raise ConflictError("Check-in must be registered before check-out")
        if visit.check_out_at is not None:
            raise ConflictError("Check-out already registered for this visit")
        latitude, longitude = validate_coordinates(latitude, longitude)

        # Clock skew must not produce a negative duration
        visit.check_out_at = max(self.clock(), visit.check_in_at)
        visit.check_out_latitude = latitude
        visit.check_out_longitude = longitude
        if notes is not None:
            visit.notes = notes
        self.repo.save(self.db, visit)
        logger.info(
            f"Visit {visit_id} checked out after "
            f"{duration_minutes(visit.check_in_at, visit.check_out_at)} min"
        )

        address, degraded = await self._resolve_address(latitude, longitude)
        if address:
            visit.check_out_address = address
            self.repo.save(self.db, visit)
        return CheckpointResult(visit=visit, geocode_degraded=degraded)

    async def _resolve_address(
        self, latitude: Optional[float], longitude: Optional[float]
    ) -> tuple[Optional[str], bool]:
        if latitude is None or self.geocoder is None:
            return None, False
        try:
            return await self.geocoder.reverse(latitude, longitude), False
        except ExternalServiceDegraded as e:
            logger.warning(f"Reverse geocode unavailable for ({latitude}, {longitude}): {e}")
            return None, True

    # ------------------------------------------------------------------
    # Agenda and reporting
    # ------------------------------------------------------------------

    def daily_agenda(self, vendor_id: int, day: date) -> DailyAgenda:
        """
        Planned stops of the vendor's active route for the day's weekday, each
        with the first visit registered for that client on that date.

        Visits for clients without a stop that day are returned as extras.
        Sundays are never scheduled and yield an empty agenda.
        """
        self.directory.require_vendor(self.db, vendor_id)

        weekday = weekday_for_date(day)
        agenda = DailyAgenda(vendor_id=vendor_id, day=day, weekday=weekday)
        if weekday is None:
            return agenda

        route = self.routes.get_active_route(self.db, vendor_id)
        stops = self.routes.get_stops_for_day(self.db, route.id, weekday) if route else []
        agenda.route_id = route.id if route else None

        visits = self.repo.visits_for_vendor_on(self.db, vendor_id, day)
        first_by_client: dict[int, Visit] = {}
        for visit in visits:
            first_by_client.setdefault(visit.client_id, visit)

        completed_clients = {
            visit.client_id for visit in visits if status_of(visit) == VisitStatus.COMPLETED
        }

        scheduled_clients = {stop.client_id for stop in stops}
        for stop in stops:
            agenda.entries.append(AgendaEntry(stop=stop, visit=first_by_client.get(stop.client_id)))

        # Repeat visits to a scheduled client are not extras
        agenda.extras = [visit for visit in visits if visit.client_id not in scheduled_clients]
        agenda.scheduled = len(stops)
        agenda.completed = sum(1 for visit in visits if status_of(visit) == VisitStatus.COMPLETED)
        agenda.pending = sum(1 for stop in stops if stop.client_id not in completed_clients)
        return agenda

    def monthly_summary(self, year: int, month: int, vendor_id: Optional[int] = None) -> dict:
        """Visit totals for a calendar month, overall and per vendor"""
        if not 1 <= month <= 12:
            raise ValidationError("Month must be between 1 and 12")

        start = date(year, month, 1)
        end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
        visits = self.repo.visits_between(self.db, start, end, vendor_id)

        totals = {"total": 0, "completed": 0, "in_progress": 0, "scheduled": 0, "with_report": 0}
        per_vendor: dict[int, dict] = {}

        for visit in visits:
            status = status_of(visit)
            totals["total"] += 1
            totals[status.value.lower()] += 1
            if visit.inspection_report_id:
                totals["with_report"] += 1

            row = per_vendor.setdefault(
                visit.vendor_id,
                {
                    "vendor_id": visit.vendor_id,
                    "vendor_name": visit.vendor.name,
                    "total": 0,
                    "completed": 0,
                    "with_report": 0,
                    "durations": [],
                },
            )
            row["total"] += 1
            if visit.inspection_report_id:
                row["with_report"] += 1
            if status == VisitStatus.COMPLETED:
                row["completed"] += 1
                elapsed = visit.check_out_at - visit.check_in_at
                row["durations"].append(elapsed.total_seconds() / 60)

        vendors = []
        for row in sorted(per_vendor.values(), key=lambda r: r["vendor_name"]):
            durations = row.pop("durations")
            row["average_duration_minutes"] = (
                _round_minutes(sum(durations) / len(durations)) if durations else None
            )
            vendors.append(row)

        return {"year": year, "month": month, "totals": totals, "vendors": vendors}
