"""Visit repository - Database operations for field visits"""

from datetime import date
from typing import Optional

from sqlalchemy import and_, desc
from sqlalchemy.orm import Session, joinedload

from ...models_visit import Visit
from ...shared.enums import VisitStatus


def status_clause(status: VisitStatus):
    """SQL predicate equivalent to visit_status() for filtering"""
    if status == VisitStatus.SCHEDULED:
        return Visit.check_in_at.is_(None)
    if status == VisitStatus.IN_PROGRESS:
        return and_(Visit.check_in_at.isnot(None), Visit.check_out_at.is_(None))
    return Visit.check_out_at.isnot(None)


class VisitRepository:
    """Repository for visit database operations"""

    @staticmethod
    def get_visit(db: Session, visit_id: int) -> Optional[Visit]:
        return db.query(Visit).filter(Visit.id == visit_id).first()

    @staticmethod
    def list_visits(
        db: Session,
        vendor_id: Optional[int] = None,
        client_id: Optional[int] = None,
        on_date: Optional[date] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        status: Optional[VisitStatus] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Visit]:
        query = db.query(Visit).options(joinedload(Visit.client))

        if vendor_id is not None:
            query = query.filter(Visit.vendor_id == vendor_id)
        if client_id is not None:
            query = query.filter(Visit.client_id == client_id)
        if on_date is not None:
            query = query.filter(Visit.scheduled_date == on_date)
        if date_from is not None:
            query = query.filter(Visit.scheduled_date >= date_from)
        if date_to is not None:
            query = query.filter(Visit.scheduled_date <= date_to)
        if status is not None:
            query = query.filter(status_clause(status))

        return (
            query.order_by(desc(Visit.scheduled_date), desc(Visit.id))
            .offset(offset)
            .limit(limit)
            .all()
        )

    @staticmethod
    def visits_for_vendor_on(db: Session, vendor_id: int, day: date) -> list[Visit]:
        """A vendor's visits for one date, by check-in time with unchecked visits last"""
        return (
            db.query(Visit)
            .options(joinedload(Visit.client))
            .filter(Visit.vendor_id == vendor_id, Visit.scheduled_date == day)
            .order_by(Visit.check_in_at.is_(None), Visit.check_in_at, Visit.id)
            .all()
        )

    @staticmethod
    def visits_between(
        db: Session, start: date, end: date, vendor_id: Optional[int] = None
    ) -> list[Visit]:
        """Visits with start <= scheduled_date < end"""
        query = (
            db.query(Visit)
            .options(joinedload(Visit.vendor))
            .filter(Visit.scheduled_date >= start, Visit.scheduled_date < end)
        )
        if vendor_id is not None:
            query = query.filter(Visit.vendor_id == vendor_id)
        return query.all()

    @staticmethod
    def create_visit(
        db: Session, client_id: int, vendor_id: int, scheduled_date: date, notes: Optional[str]
    ) -> Visit:
        visit = Visit(
            client_id=client_id,
            vendor_id=vendor_id,
            scheduled_date=scheduled_date,
            notes=notes,
        )
        db.add(visit)
        db.commit()
        db.refresh(visit)
        return visit

    @staticmethod
    def save(db: Session, visit: Visit) -> Visit:
        """Commit pending changes on a visit"""
        db.commit()
        db.refresh(visit)
        return visit

    @staticmethod
    def delete_visit(db: Session, visit: Visit) -> None:
        db.delete(visit)
        db.commit()
