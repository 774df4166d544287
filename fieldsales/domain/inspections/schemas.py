"""Inspection report schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.enums import ComponentType, Condition, PhotoSide, ReportStatus, SoilCondition


def _upper(v):
    return v.upper() if isinstance(v, str) else v


class MeasurementInput(BaseModel):
    """One component row; omitted standard/limit fall back to the type defaults"""

    component_type: ComponentType
    standard: Optional[float] = Field(None, ge=0)
    limit: Optional[float] = Field(None, ge=0)
    measured_left: Optional[float] = Field(None, ge=0)
    measured_right: Optional[float] = Field(None, ge=0)
    note: Optional[str] = None

    @field_validator("component_type", mode="before")
    @classmethod
    def normalize_type(cls, v):
        return _upper(v)


class MeasurementUpdate(BaseModel):
    """Partial update; explicitly sending null clears a value"""

    standard: Optional[float] = Field(None, ge=0)
    limit: Optional[float] = Field(None, ge=0)
    measured_left: Optional[float] = Field(None, ge=0)
    measured_right: Optional[float] = Field(None, ge=0)
    note: Optional[str] = None


class PhotoCreate(BaseModel):
    component_type: ComponentType
    side: PhotoSide = PhotoSide.BOTH
    url: str = Field(..., min_length=1)
    caption: Optional[str] = Field(None, max_length=500)

    @field_validator("component_type", "side", mode="before")
    @classmethod
    def normalize_enums(cls, v):
        return _upper(v)


class ReportCreate(BaseModel):
    visit_id: int
    inspector_id: str = Field(..., min_length=1)
    equipment: str = Field(..., min_length=1, max_length=255)
    serial_number: str = Field(..., min_length=1, max_length=255)
    fleet: Optional[str] = Field(None, max_length=100)
    hour_meter_total: Optional[int] = Field(None, ge=0)
    hour_meter_track: Optional[int] = Field(None, ge=0)
    soil_condition: Optional[SoilCondition] = None
    inspection_date: Optional[date] = None
    summary: Optional[str] = None
    measurements: Optional[list[MeasurementInput]] = None
    photos: Optional[list[PhotoCreate]] = None

    @field_validator("soil_condition", mode="before")
    @classmethod
    def normalize_soil(cls, v):
        return _upper(v)


class ReportUpdate(BaseModel):
    equipment: Optional[str] = Field(None, min_length=1, max_length=255)
    serial_number: Optional[str] = Field(None, min_length=1, max_length=255)
    fleet: Optional[str] = Field(None, max_length=100)
    hour_meter_total: Optional[int] = Field(None, ge=0)
    hour_meter_track: Optional[int] = Field(None, ge=0)
    soil_condition: Optional[SoilCondition] = None
    inspection_date: Optional[date] = None
    summary: Optional[str] = None

    @field_validator("soil_condition", mode="before")
    @classmethod
    def normalize_soil(cls, v):
        return _upper(v)


class MeasurementResponse(BaseModel):
    id: int
    component_type: ComponentType
    standard: Optional[float] = None
    limit: Optional[float] = None
    measured_left: Optional[float] = None
    measured_right: Optional[float] = None
    wear_left: Optional[float] = None
    wear_right: Optional[float] = None
    condition_left: Optional[Condition] = None
    condition_right: Optional[Condition] = None
    note: Optional[str] = None
    sort_order: int

    class Config:
        from_attributes = True


class PhotoResponse(BaseModel):
    id: int
    component_type: ComponentType
    side: PhotoSide
    url: str
    caption: Optional[str] = None
    sort_order: int

    class Config:
        from_attributes = True


class AssessmentResponse(BaseModel):
    critical: list[ComponentType]
    verify: list[ComponentType]
    ok: list[ComponentType]
    worst: Optional[Condition] = None
    summary_text: str


class ReportListItem(BaseModel):
    id: int
    number: str
    visit_id: int
    inspector_id: str
    equipment: str
    serial_number: str
    inspection_date: date
    status: ReportStatus
    submitted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReportResponse(ReportListItem):
    fleet: Optional[str] = None
    hour_meter_total: Optional[int] = None
    hour_meter_track: Optional[int] = None
    soil_condition: Optional[SoilCondition] = None
    summary: Optional[str] = None
    updated_at: Optional[datetime] = None
    measurements: list[MeasurementResponse] = Field(default_factory=list)
    photos: list[PhotoResponse] = Field(default_factory=list)


class DefaultValue(BaseModel):
    component_type: ComponentType
    label: str
    standard: float
    limit: float
