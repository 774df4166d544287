"""Route domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.enums import Weekday


class RouteCreate(BaseModel):
    """Schema for creating a new route"""

    vendor_id: int
    name: str = Field(..., min_length=1, max_length=255)


class RouteUpdate(BaseModel):
    """Schema for renaming or (de)activating a route"""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    active: Optional[bool] = None


class StopCreate(BaseModel):
    """Schema for adding a client to a route weekday"""

    client_id: int
    weekday: Weekday
    position: Optional[int] = Field(None, description="Omit to append after the last stop")

    @field_validator("weekday", mode="before")
    @classmethod
    def normalize_weekday(cls, v):
        return v.upper() if isinstance(v, str) else v


class StopPosition(BaseModel):
    stop_id: int
    position: int


class ReorderRequest(BaseModel):
    """Absolute target positions for stops of one weekday"""

    weekday: Weekday
    stops: list[StopPosition]

    @field_validator("weekday", mode="before")
    @classmethod
    def normalize_weekday(cls, v):
        return v.upper() if isinstance(v, str) else v


class CopyDayRequest(BaseModel):
    from_weekday: Weekday
    to_weekday: Weekday

    @field_validator("from_weekday", "to_weekday", mode="before")
    @classmethod
    def normalize_weekday(cls, v):
        return v.upper() if isinstance(v, str) else v


class CopyDayResponse(BaseModel):
    message: str
    copied: int


class StopClient(BaseModel):
    id: int
    name: str
    city: Optional[str] = None

    class Config:
        from_attributes = True


class StopResponse(BaseModel):
    id: int
    route_id: int
    client_id: int
    weekday: Weekday
    position: int
    client: Optional[StopClient] = None

    class Config:
        from_attributes = True


class RouteResponse(BaseModel):
    id: int
    vendor_id: int
    name: str
    active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RouteDetailResponse(RouteResponse):
    stops_by_weekday: dict[Weekday, list[StopResponse]]
    total_stops: int


class WeeklyOverviewItem(BaseModel):
    vendor_id: int
    vendor_name: str
    route_id: int
    route_name: str
    stops_per_weekday: dict[Weekday, int]
    total_stops: int
