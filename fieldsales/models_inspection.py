"""
Inspection report models (undercarriage wear assessment)
"""

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class InspectionReport(Base):
    """Technical inspection report created from a visit.

    Status workflow: DRAFT → SUBMITTED (one-way). A submitted report,
    its measurements and its photos are immutable.
    """

    __tablename__ = "inspection_reports"

    id = Column(Integer, primary_key=True, index=True)
    number = Column(String(20), nullable=False, index=True)  # DD/MM/YYYY-NNNN

    visit_id = Column(Integer, ForeignKey("field_visits.id"), nullable=False, unique=True)
    inspector_id = Column(String(255), nullable=False, index=True)

    # Equipment
    equipment = Column(String(255), nullable=False)
    serial_number = Column(String(255), nullable=False)
    fleet = Column(String(100), nullable=True)
    hour_meter_total = Column(Integer, nullable=True)
    hour_meter_track = Column(Integer, nullable=True)
    soil_condition = Column(String(20), nullable=True)

    inspection_date = Column(Date, nullable=False, index=True)
    status = Column(String(20), default="DRAFT", nullable=False, index=True)
    submitted_at = Column(DateTime, nullable=True)
    summary = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    visit = relationship("Visit")
    measurements = relationship(
        "ComponentMeasurement",
        back_populates="report",
        cascade="all, delete-orphan",
        order_by="ComponentMeasurement.sort_order",
    )
    photos = relationship(
        "ComponentPhoto",
        back_populates="report",
        cascade="all, delete-orphan",
        order_by="ComponentPhoto.sort_order",
    )


class ComponentMeasurement(Base):
    __tablename__ = "component_measurements"

    id = Column(Integer, primary_key=True, index=True)
    report_id = Column(
        Integer, ForeignKey("inspection_reports.id", ondelete="CASCADE"), nullable=False, index=True
    )
    component_type = Column(String(20), nullable=False)

    standard = Column(Float, nullable=True)
    limit = Column(Float, nullable=True)
    measured_left = Column(Float, nullable=True)
    measured_right = Column(Float, nullable=True)

    # Derived, recomputed on every change to standard/limit/measured
    wear_left = Column(Float, nullable=True)
    wear_right = Column(Float, nullable=True)
    condition_left = Column(String(20), nullable=True)
    condition_right = Column(String(20), nullable=True)

    note = Column(Text, nullable=True)
    sort_order = Column(Integer, default=0, nullable=False)

    report = relationship("InspectionReport", back_populates="measurements")


class ComponentPhoto(Base):
    __tablename__ = "component_photos"

    id = Column(Integer, primary_key=True, index=True)
    report_id = Column(
        Integer, ForeignKey("inspection_reports.id", ondelete="CASCADE"), nullable=False, index=True
    )
    component_type = Column(String(20), nullable=False)
    side = Column(String(10), default="BOTH", nullable=False)
    url = Column(Text, nullable=False)  # Durable URL returned by photo storage
    caption = Column(String(500), nullable=True)
    sort_order = Column(Integer, default=0, nullable=False)

    report = relationship("InspectionReport", back_populates="photos")
