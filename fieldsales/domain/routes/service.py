"""Route service - Business logic for weekly route assignment"""

import logging
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models_route import Route, RouteStop
from ...shared.enums import Weekday
from ...shared.exceptions import ConflictError, NotFoundError, ValidationError
from ...shared.validators import parse_weekday, validate_position
from ..directory.repository import DirectoryRepository
from .repository import RouteRepository

logger = logging.getLogger(__name__)


class RouteService:
    """Service layer for routes and their ordered per-weekday stops"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = RouteRepository()
        self.directory = DirectoryRepository()

    # ------------------------------------------------------------------
    # Routes
    # ------------------------------------------------------------------

    def get_route(self, route_id: int) -> Route:
        route = self.repo.get_route(self.db, route_id)
        if not route:
            raise NotFoundError(f"Route {route_id} not found")
        return route

    def list_routes(
        self, vendor_id: Optional[int] = None, active: Optional[bool] = None
    ) -> list[Route]:
        return self.repo.list_routes(self.db, vendor_id, active)

    def get_active_route(self, vendor_id: int) -> Optional[Route]:
        return self.repo.get_active_route(self.db, vendor_id)

    def create_route(self, vendor_id: int, name: str) -> Route:
        """Create a route; a vendor may hold only one active route"""
        self.directory.require_vendor(self.db, vendor_id)

        existing = self.repo.get_active_route(self.db, vendor_id)
        if existing:
            raise ConflictError(
                f"Vendor {vendor_id} already has an active route (route {existing.id})"
            )

        route = self.repo.create_route(self.db, vendor_id, name.strip())
        logger.info(f"Created route {route.id} for vendor {vendor_id}")
        return route

    def update_route(
        self, route_id: int, name: Optional[str] = None, active: Optional[bool] = None
    ) -> Route:
        route = self.get_route(route_id)

        if active and not route.active:
            other = self.repo.get_active_route(self.db, route.vendor_id, exclude_route_id=route.id)
            if other:
                raise ConflictError(
                    f"Vendor {route.vendor_id} already has an active route (route {other.id})"
                )

        updates = {}
        if name is not None:
            if not name.strip():
                raise ValidationError("Route name cannot be empty")
            updates["name"] = name.strip()
        if active is not None:
            updates["active"] = active

        return self.repo.update_route(self.db, route, **updates)

    def delete_route(self, route_id: int) -> None:
        route = self.get_route(route_id)
        self.repo.delete_route(self.db, route)
        logger.info(f"Deleted route {route_id} and its stops")

    # ------------------------------------------------------------------
    # Stops
    # ------------------------------------------------------------------

    def add_stop(
        self, route_id: int, client_id: int, weekday, position: Optional[int] = None
    ) -> RouteStop:
        """
        Schedule a client on a route weekday.

        Without a position the stop is appended after the day's current maximum.
        """
        weekday = parse_weekday(weekday)
        position = validate_position(position)
        self.get_route(route_id)
        self.directory.require_client(self.db, client_id)

        if self.repo.find_stop_for_client(self.db, route_id, weekday, client_id):
            raise ConflictError(
                f"Client {client_id} is already scheduled on {weekday.value} for this route"
            )

        if position is None:
            position = self.repo.max_position(self.db, route_id, weekday) + 1
        elif self.repo.position_taken(self.db, route_id, weekday, position):
            raise ConflictError(f"Position {position} on {weekday.value} is already taken")

        try:
            stop = self.repo.create_stop(self.db, route_id, client_id, weekday, position)
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(
                f"Client {client_id} is already scheduled on {weekday.value} for this route"
            ) from None

        logger.info(
            f"Added client {client_id} to route {route_id} on {weekday.value} at position {position}"
        )
        return stop

    def remove_stop(self, route_id: int, stop_id: int) -> None:
        """Delete a stop. Remaining positions are left as they are."""
        self.get_route(route_id)
        stop = self.repo.get_stop(self.db, route_id, stop_id)
        if not stop:
            raise NotFoundError(f"Stop {stop_id} not found in route {route_id}")
        self.repo.delete_stop(self.db, stop)

    def reorder(
        self, route_id: int, weekday, targets: Iterable[tuple[int, int]]
    ) -> list[RouteStop]:
        """
        Apply caller-supplied absolute positions to stops of one weekday.

        The full target set is validated before any row is written; the write is
        a single transaction. Stops not named keep their current position and
        take part in the duplicate check.
        """
        weekday = parse_weekday(weekday)
        self.get_route(route_id)
        targets = list(targets)

        day_stops = self.repo.get_stops_for_day(self.db, route_id, weekday)
        stops_by_id = {stop.id: stop for stop in day_stops}

        positions: dict[int, int] = {}
        for stop_id, position in targets:
            validate_position(position)
            if stop_id in positions:
                raise ValidationError(f"Stop {stop_id} appears more than once")
            if stop_id not in stops_by_id:
                other = self.db.get(RouteStop, stop_id)
                if other is None:
                    raise NotFoundError(f"Stop {stop_id} not found")
                raise ValidationError(
                    f"Stop {stop_id} does not belong to route {route_id} on {weekday.value}"
                )
            positions[stop_id] = position

        final_positions = [positions.get(stop.id, stop.position) for stop in day_stops]
        if len(set(final_positions)) != len(final_positions):
            raise ConflictError(f"Reorder would produce duplicate positions on {weekday.value}")

        self.repo.apply_positions(self.db, day_stops, positions)
        logger.info(f"Reordered {len(positions)} stop(s) of route {route_id} on {weekday.value}")
        return self.repo.get_stops_for_day(self.db, route_id, weekday)

    def copy_day(self, route_id: int, from_weekday, to_weekday) -> int:
        """
        Append the source day's clients that the target day lacks, in source order.

        Returns:
            Number of stops copied
        """
        from_weekday = parse_weekday(from_weekday)
        to_weekday = parse_weekday(to_weekday)
        if from_weekday == to_weekday:
            raise ValidationError("Source and target weekday must differ")
        self.get_route(route_id)

        source = self.repo.get_stops_for_day(self.db, route_id, from_weekday)
        if not source:
            raise ConflictError(f"{from_weekday.value} has no clients to copy")

        target = self.repo.get_stops_for_day(self.db, route_id, to_weekday)
        target_clients = {stop.client_id for stop in target}
        to_copy = [stop.client_id for stop in source if stop.client_id not in target_clients]
        if not to_copy:
            raise ConflictError(
                f"All clients of {from_weekday.value} are already scheduled on {to_weekday.value}"
            )

        start = max((stop.position for stop in target), default=0) + 1
        try:
            self.repo.bulk_create_stops(self.db, route_id, to_weekday, to_copy, start)
        except IntegrityError:
            raise ConflictError(
                f"{to_weekday.value} changed while copying; no clients were copied"
            ) from None

        logger.info(
            f"Copied {len(to_copy)} client(s) of route {route_id} "
            f"from {from_weekday.value} to {to_weekday.value}"
        )
        return len(to_copy)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_by_weekday(self, route_id: int) -> dict[Weekday, list[RouteStop]]:
        """Stops grouped by weekday (all six present), each sorted by position"""
        self.get_route(route_id)
        grouped: dict[Weekday, list[RouteStop]] = {weekday: [] for weekday in Weekday}
        for stop in self.repo.get_stops(self.db, route_id):
            grouped[Weekday(stop.weekday)].append(stop)
        return grouped

    def stops_for_day(self, route_id: int, weekday: Weekday) -> list[RouteStop]:
        return self.repo.get_stops_for_day(self.db, route_id, weekday)

    def weekly_overview(self) -> list[dict]:
        """Stop counts per weekday for every active route"""
        overview = []
        for route in self.repo.list_active_routes_with_stops(self.db):
            counts = {weekday: 0 for weekday in Weekday}
            for stop in route.stops:
                counts[Weekday(stop.weekday)] += 1
            overview.append(
                {
                    "vendor_id": route.vendor_id,
                    "vendor_name": route.vendor.name,
                    "route_id": route.id,
                    "route_name": route.name,
                    "stops_per_weekday": counts,
                    "total_stops": len(route.stops),
                }
            )
        return overview
