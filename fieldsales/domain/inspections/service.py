"""Inspection service - Business logic for undercarriage inspection reports"""

import logging
from datetime import date, datetime
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models_inspection import ComponentMeasurement, ComponentPhoto, InspectionReport
from ...models_visit import Visit
from ...services.wear_assessment import (
    COMPONENT_LABELS,
    DEFAULT_LIMITS,
    ComponentAssessment,
    ReportAssessment,
    assess_component,
    default_limits,
    summarize,
    summary_text,
)
from ...shared.enums import ComponentType, ReportStatus
from ...shared.exceptions import ConflictError, NotFoundError, ValidationError
from ...shared.validators import parse_component_type
from .repository import InspectionRepository
from .schemas import MeasurementInput, MeasurementUpdate, PhotoCreate, ReportCreate, ReportUpdate

logger = logging.getLogger(__name__)

MEASUREMENT_FIELDS = ("standard", "limit", "measured_left", "measured_right", "note")
REQUIRED_HEADER_FIELDS = ("equipment", "serial_number", "inspection_date")


def apply_assessment(row: ComponentMeasurement) -> None:
    """Recompute derived wear and condition of a measurement row"""
    assessment = assess_component(
        row.component_type, row.standard, row.limit, row.measured_left, row.measured_right
    )
    row.wear_left = assessment.left.wear_percent if assessment.left else None
    row.condition_left = assessment.left.condition.value if assessment.left else None
    row.wear_right = assessment.right.wear_percent if assessment.right else None
    row.condition_right = assessment.right.condition.value if assessment.right else None


def assessments_for(report: InspectionReport) -> list[ComponentAssessment]:
    return [
        assess_component(m.component_type, m.standard, m.limit, m.measured_left, m.measured_right)
        for m in report.measurements
    ]


def format_report_number(inspection_date: date, sequence: int) -> str:
    """DD/MM/YYYY-NNNN"""
    return f"{inspection_date.strftime('%d/%m/%Y')}-{sequence:04d}"


class InspectionService:
    """Service layer for inspection reports"""

    def __init__(self, db: Session, clock: Callable[[], datetime] = datetime.now):
        self.db = db
        self.repo = InspectionRepository()
        self.clock = clock

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _editable(self, report_id: int) -> InspectionReport:
        report = self.get_report(report_id)
        if report.status == ReportStatus.SUBMITTED.value:
            raise ConflictError(f"Report {report.number} is submitted and can no longer be changed")
        return report

    def _next_number(self, inspection_date: date) -> str:
        prefix = inspection_date.strftime("%d/%m/%Y")
        sequences = [
            int(number.rsplit("-", 1)[1])
            for number in self.repo.numbers_with_prefix(self.db, prefix)
            if number.rsplit("-", 1)[-1].isdigit()
        ]
        return format_report_number(inspection_date, max(sequences, default=0) + 1)

    @staticmethod
    def _build_measurement(row: MeasurementInput, sort_order: int) -> ComponentMeasurement:
        standard_default, limit_default = default_limits(row.component_type)
        provided = row.model_fields_set
        measurement = ComponentMeasurement(
            component_type=row.component_type.value,
            standard=row.standard if "standard" in provided else standard_default,
            limit=row.limit if "limit" in provided else limit_default,
            measured_left=row.measured_left,
            measured_right=row.measured_right,
            note=row.note,
            sort_order=sort_order,
        )
        apply_assessment(measurement)
        return measurement

    def _build_measurements(
        self, rows: Optional[list[MeasurementInput]]
    ) -> list[ComponentMeasurement]:
        if rows is None:
            rows = [MeasurementInput(component_type=component_type) for component_type in ComponentType]

        seen = set()
        for row in rows:
            if row.component_type in seen:
                raise ValidationError(f"Component {row.component_type.value} appears more than once")
            seen.add(row.component_type)

        return [self._build_measurement(row, index) for index, row in enumerate(rows)]

    @staticmethod
    def _build_photo(data: PhotoCreate, sort_order: int) -> ComponentPhoto:
        return ComponentPhoto(
            component_type=data.component_type.value,
            side=data.side.value,
            url=data.url,
            caption=data.caption,
            sort_order=sort_order,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_report(self, report_id: int) -> InspectionReport:
        report = self.repo.get_report(self.db, report_id)
        if not report:
            raise NotFoundError(f"Inspection report {report_id} not found")
        return report

    def get_report_for_visit(self, visit_id: int) -> InspectionReport:
        report = self.repo.get_report_for_visit(self.db, visit_id)
        if not report:
            raise NotFoundError(f"Visit {visit_id} has no inspection report")
        return report

    def list_reports(
        self,
        inspector_id: Optional[str] = None,
        status: Optional[ReportStatus] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[InspectionReport]:
        return self.repo.list_reports(
            self.db, inspector_id, status.value if status else None, date_from, date_to
        )

    @staticmethod
    def default_values() -> list[dict]:
        return [
            {
                "component_type": component_type,
                "label": COMPONENT_LABELS[component_type],
                "standard": standard,
                "limit": limit,
            }
            for component_type, (standard, limit) in DEFAULT_LIMITS.items()
        ]

    def assessment(self, report_id: int) -> tuple[ReportAssessment, str]:
        """Components grouped by condition and the generated summary text"""
        assessments = assessments_for(self.get_report(report_id))
        return summarize(assessments), summary_text(assessments)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_report(self, data: ReportCreate) -> InspectionReport:
        visit = self.db.query(Visit).filter(Visit.id == data.visit_id).first()
        if not visit:
            raise NotFoundError(f"Visit {data.visit_id} not found")
        if visit.inspection_report_id or self.repo.get_report_for_visit(self.db, visit.id):
            raise ConflictError(f"Visit {visit.id} already has an inspection report")

        inspection_date = data.inspection_date or self.clock().date()
        report = InspectionReport(
            number=self._next_number(inspection_date),
            visit_id=visit.id,
            inspector_id=data.inspector_id,
            equipment=data.equipment,
            serial_number=data.serial_number,
            fleet=data.fleet,
            hour_meter_total=data.hour_meter_total,
            hour_meter_track=data.hour_meter_track,
            soil_condition=data.soil_condition.value if data.soil_condition else None,
            inspection_date=inspection_date,
            status=ReportStatus.DRAFT.value,
            summary=data.summary,
        )
        report.measurements = self._build_measurements(data.measurements)
        report.photos = [self._build_photo(p, i) for i, p in enumerate(data.photos or [])]

        try:
            report = self.repo.create_report(self.db, report, visit)
        except IntegrityError:
            raise ConflictError(f"Visit {visit.id} already has an inspection report") from None

        logger.info(f"Created inspection report {report.number} for visit {visit.id}")
        return report

    def update_report(self, report_id: int, data: ReportUpdate) -> InspectionReport:
        report = self._editable(report_id)
        changes = data.model_dump(exclude_unset=True)
        cleared = [key for key in REQUIRED_HEADER_FIELDS if key in changes and changes[key] is None]
        if cleared:
            raise ValidationError(f"Required field(s) cannot be cleared: {', '.join(cleared)}")

        for key, value in changes.items():
            if key == "soil_condition" and value is not None:
                value = value.value
            setattr(report, key, value)
        return self.repo.save(self.db, report)

    def replace_measurements(
        self, report_id: int, rows: list[MeasurementInput]
    ) -> InspectionReport:
        report = self._editable(report_id)
        report.measurements = self._build_measurements(rows)
        return self.repo.save(self.db, report)

    def update_measurement(
        self, report_id: int, component_type, data: MeasurementUpdate
    ) -> ComponentMeasurement:
        report = self._editable(report_id)
        component_type = parse_component_type(component_type)

        row = next(
            (m for m in report.measurements if m.component_type == component_type.value), None
        )
        if row is None:
            raise NotFoundError(
                f"Report {report.number} has no {component_type.value} measurement"
            )

        for key in MEASUREMENT_FIELDS:
            if key in data.model_fields_set:
                setattr(row, key, getattr(data, key))
        apply_assessment(row)

        self.repo.save(self.db, report)
        return row

    def add_photo(self, report_id: int, data: PhotoCreate) -> ComponentPhoto:
        report = self._editable(report_id)
        sort_order = max((p.sort_order for p in report.photos), default=-1) + 1
        photo = self._build_photo(data, sort_order)
        report.photos.append(photo)
        self.repo.save(self.db, report)
        return photo

    def remove_photo(self, report_id: int, photo_id: int) -> None:
        report = self._editable(report_id)
        photo = next((p for p in report.photos if p.id == photo_id), None)
        if photo is None:
            raise NotFoundError(f"Photo {photo_id} not found in report {report.number}")
        self.repo.delete_photo(self.db, photo)

    def submit_report(self, report_id: int) -> InspectionReport:
        """Freeze a report. Irreversible."""
        report = self._editable(report_id)

        measured = any(
            m.measured_left is not None or m.measured_right is not None
            for m in report.measurements
        )
        if not measured:
            raise ValidationError("At least one component must have a measured value")

        if not report.summary:
            report.summary = summary_text(assessments_for(report))
        report.status = ReportStatus.SUBMITTED.value
        report.submitted_at = self.clock()
        report = self.repo.save(self.db, report)

        logger.info(f"Inspection report {report.number} submitted")
        return report

    def delete_report(self, report_id: int) -> None:
        report = self._editable(report_id)
        number = report.number
        visit = self.db.query(Visit).filter(Visit.id == report.visit_id).first()
        self.repo.delete_report(self.db, report, visit)
        logger.info(f"Deleted inspection report {number}")
