"""Inspection repository - Database operations for inspection reports"""

from datetime import date
from typing import Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session, selectinload

from ...models_inspection import ComponentPhoto, InspectionReport
from ...models_visit import Visit


class InspectionRepository:
    """Repository for inspection report database operations"""

    @staticmethod
    def get_report(db: Session, report_id: int) -> Optional[InspectionReport]:
        return (
            db.query(InspectionReport)
            .options(selectinload(InspectionReport.measurements), selectinload(InspectionReport.photos))
            .filter(InspectionReport.id == report_id)
            .first()
        )

    @staticmethod
    def get_report_for_visit(db: Session, visit_id: int) -> Optional[InspectionReport]:
        return db.query(InspectionReport).filter(InspectionReport.visit_id == visit_id).first()

    @staticmethod
    def list_reports(
        db: Session,
        inspector_id: Optional[str] = None,
        status: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[InspectionReport]:
        query = db.query(InspectionReport)
        if inspector_id:
            query = query.filter(InspectionReport.inspector_id == inspector_id)
        if status:
            query = query.filter(InspectionReport.status == status)
        if date_from:
            query = query.filter(InspectionReport.inspection_date >= date_from)
        if date_to:
            query = query.filter(InspectionReport.inspection_date <= date_to)
        return query.order_by(desc(InspectionReport.inspection_date), desc(InspectionReport.id)).all()

    @staticmethod
    def numbers_with_prefix(db: Session, prefix: str) -> list[str]:
        rows = db.query(InspectionReport.number).filter(InspectionReport.number.like(f"{prefix}%")).all()
        return [row[0] for row in rows]

    @staticmethod
    def create_report(db: Session, report: InspectionReport, visit: Visit) -> InspectionReport:
        """Insert a report with its rows and link it to the visit, in one transaction"""
        try:
            db.add(report)
            db.flush()
            visit.inspection_report_id = report.id
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(report)
        return report

    @staticmethod
    def save(db: Session, report: InspectionReport) -> InspectionReport:
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(report)
        return report

    @staticmethod
    def delete_photo(db: Session, photo: ComponentPhoto) -> None:
        db.delete(photo)
        db.commit()

    @staticmethod
    def delete_report(db: Session, report: InspectionReport, visit: Optional[Visit]) -> None:
        if visit is not None:
            visit.inspection_report_id = None
        db.delete(report)
        db.commit()
