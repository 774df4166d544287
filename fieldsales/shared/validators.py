"""Shared validation utilities"""

from datetime import date
from typing import Optional

from .enums import ComponentType, Weekday
from .exceptions import ValidationError


def parse_weekday(value) -> Weekday:
    """
    Normalize a weekday value.

    Args:
        value: Weekday member or its name (case-insensitive)

    Returns:
        The matching Weekday

    Raises:
        ValidationError: If the value is not one of the six schedulable weekdays
    """
    if isinstance(value, Weekday):
        return value
    try:
        return Weekday(str(value).strip().upper())
    except ValueError:
        allowed = ", ".join(w.value for w in Weekday)
        raise ValidationError(f"Unknown weekday '{value}'. Allowed: {allowed}") from None


def parse_component_type(value) -> ComponentType:
    """Normalize a component type given as a member or its name (case-insensitive)"""
    if isinstance(value, ComponentType):
        return value
    try:
        return ComponentType(str(value).strip().upper())
    except ValueError:
        allowed = ", ".join(c.value for c in ComponentType)
        raise ValidationError(f"Unknown component type '{value}'. Allowed: {allowed}") from None


def weekday_for_date(day: date) -> Optional[Weekday]:
    """Weekday of a calendar date, or None for Sunday (never scheduled)"""
    index = day.weekday()
    if index == 6:
        return None
    return list(Weekday)[index]


def validate_position(position: Optional[int]) -> Optional[int]:
    if position is None:
        return None
    if isinstance(position, bool) or not isinstance(position, int) or position < 1:
        raise ValidationError("Position must be a positive integer")
    return position


def validate_coordinates(
    latitude: Optional[float], longitude: Optional[float]
) -> tuple[Optional[float], Optional[float]]:
    """
    Validate an optional coordinate pair.

    Both values must be given together and fall within WGS84 bounds.
    """
    if latitude is None and longitude is None:
        return None, None
    if latitude is None or longitude is None:
        raise ValidationError("Latitude and longitude must be provided together")
    if not -90.0 <= latitude <= 90.0:
        raise ValidationError("Latitude must be between -90 and 90")
    if not -180.0 <= longitude <= 180.0:
        raise ValidationError("Longitude must be between -180 and 180")
    return float(latitude), float(longitude)
