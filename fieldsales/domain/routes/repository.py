"""Route repository - Database operations for routes and their stops"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ...models_route import Route, RouteStop
from ...shared.enums import Weekday


class RouteRepository:
    """Repository for route database operations"""

    @staticmethod
    def get_route(db: Session, route_id: int) -> Optional[Route]:
        return db.query(Route).filter(Route.id == route_id).first()

    @staticmethod
    def get_active_route(
        db: Session, vendor_id: int, exclude_route_id: Optional[int] = None
    ) -> Optional[Route]:
        """Get the vendor's active route, optionally ignoring one route id"""
        query = db.query(Route).filter(Route.vendor_id == vendor_id, Route.active.is_(True))
        if exclude_route_id is not None:
            query = query.filter(Route.id != exclude_route_id)
        return query.first()

    @staticmethod
    def list_routes(
        db: Session, vendor_id: Optional[int] = None, active: Optional[bool] = None
    ) -> list[Route]:
        query = db.query(Route)
        if vendor_id is not None:
            query = query.filter(Route.vendor_id == vendor_id)
        if active is not None:
            query = query.filter(Route.active.is_(active))
        return query.order_by(Route.created_at.desc(), Route.id.desc()).all()

    @staticmethod
    def list_active_routes_with_stops(db: Session) -> list[Route]:
        return (
            db.query(Route)
            .options(joinedload(Route.vendor), joinedload(Route.stops))
            .filter(Route.active.is_(True))
            .order_by(Route.id)
            .all()
        )

    @staticmethod
    def create_route(db: Session, vendor_id: int, name: str) -> Route:
        route = Route(vendor_id=vendor_id, name=name, active=True)
        db.add(route)
        db.commit()
        db.refresh(route)
        return route

    @staticmethod
    def update_route(db: Session, route: Route, **updates) -> Route:
        for key, value in updates.items():
            if value is not None and hasattr(route, key):
                setattr(route, key, value)

        db.commit()
        db.refresh(route)
        return route

    @staticmethod
    def delete_route(db: Session, route: Route) -> None:
        """Delete a route (stops cascade)"""
        db.delete(route)
        db.commit()

    # Stop Methods
    @staticmethod
    def get_stop(db: Session, route_id: int, stop_id: int) -> Optional[RouteStop]:
        return (
            db.query(RouteStop)
            .filter(RouteStop.id == stop_id, RouteStop.route_id == route_id)
            .first()
        )

    @staticmethod
    def get_stops(db: Session, route_id: int) -> list[RouteStop]:
        return (
            db.query(RouteStop)
            .options(joinedload(RouteStop.client))
            .filter(RouteStop.route_id == route_id)
            .order_by(RouteStop.position, RouteStop.id)
            .all()
        )

    @staticmethod
    def get_stops_for_day(db: Session, route_id: int, weekday: Weekday) -> list[RouteStop]:
        return (
            db.query(RouteStop)
            .options(joinedload(RouteStop.client))
            .filter(RouteStop.route_id == route_id, RouteStop.weekday == weekday.value)
            .order_by(RouteStop.position, RouteStop.id)
            .all()
        )

    @staticmethod
    def find_stop_for_client(
        db: Session, route_id: int, weekday: Weekday, client_id: int
    ) -> Optional[RouteStop]:
        return (
            db.query(RouteStop)
            .filter(
                RouteStop.route_id == route_id,
                RouteStop.weekday == weekday.value,
                RouteStop.client_id == client_id,
            )
            .first()
        )

    @staticmethod
    def position_taken(db: Session, route_id: int, weekday: Weekday, position: int) -> bool:
        return (
            db.query(RouteStop.id)
            .filter(
                RouteStop.route_id == route_id,
                RouteStop.weekday == weekday.value,
                RouteStop.position == position,
            )
            .first()
            is not None
        )

    @staticmethod
    def max_position(db: Session, route_id: int, weekday: Weekday) -> int:
        """Highest position on a weekday, 0 when the day is empty"""
        value = (
            db.query(func.max(RouteStop.position))
            .filter(RouteStop.route_id == route_id, RouteStop.weekday == weekday.value)
            .scalar()
        )
        return value or 0

    @staticmethod
    def create_stop(
        db: Session, route_id: int, client_id: int, weekday: Weekday, position: int
    ) -> RouteStop:
        stop = RouteStop(
            route_id=route_id, client_id=client_id, weekday=weekday.value, position=position
        )
        db.add(stop)
        db.commit()
        db.refresh(stop)
        return stop

    @staticmethod
    def delete_stop(db: Session, stop: RouteStop) -> None:
        db.delete(stop)
        db.commit()

    @staticmethod
    def apply_positions(db: Session, stops: list[RouteStop], positions: dict[int, int]) -> None:
        """
        Write new positions for a batch of stops in a single transaction.

        Either every row is updated or, on any error, none is.
        """
        try:
            for stop in stops:
                if stop.id in positions:
                    stop.position = positions[stop.id]
            db.commit()
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def bulk_create_stops(
        db: Session, route_id: int, weekday: Weekday, client_ids: list[int], start_position: int
    ) -> list[RouteStop]:
        """
        Append clients to a weekday starting at start_position, in one transaction.
        """
        stops = [
            RouteStop(
                route_id=route_id,
                client_id=client_id,
                weekday=weekday.value,
                position=start_position + index,
            )
            for index, client_id in enumerate(client_ids)
        ]
        try:
            db.add_all(stops)
            db.commit()
        except Exception:
            db.rollback()
            raise
        return stops
