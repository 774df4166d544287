"""Enumerations shared between models, schemas and services"""

import enum


class Weekday(str, enum.Enum):
    # Order matches date.weekday(); Sunday is never scheduled
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"


class VisitStatus(str, enum.Enum):
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class ReportStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"


class ComponentType(str, enum.Enum):
    TRACK = "TRACK"
    PAD = "PAD"
    LOWER_ROLLER = "LOWER_ROLLER"
    UPPER_ROLLER = "UPPER_ROLLER"
    IDLER = "IDLER"
    SPROCKET = "SPROCKET"


class Condition(str, enum.Enum):
    OK = "OK"
    VERIFY = "VERIFY"
    CRITICAL = "CRITICAL"


class PhotoSide(str, enum.Enum):
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    BOTH = "BOTH"


class SoilCondition(str, enum.Enum):
    LOW_IMPACT = "LOW_IMPACT"
    MEDIUM_IMPACT = "MEDIUM_IMPACT"
    HIGH_IMPACT = "HIGH_IMPACT"
