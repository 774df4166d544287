"""
Undercarriage wear assessment.

Wear is the share of a component's allowable dimensional range already consumed,
from the standard (new) dimension down to the repair limit:

    wear % = (standard - measured) / (standard - limit) * 100

and is classified as OK (<= 70%), VERIFY (70-90%) or CRITICAL (> 90%).
Left and right sides are assessed independently.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from ..shared.enums import ComponentType, Condition

OK_THRESHOLD = 70.0
VERIFY_THRESHOLD = 90.0

# Default (standard, repair limit) in millimetres, editable per report
DEFAULT_LIMITS: dict[ComponentType, tuple[float, float]] = {
    ComponentType.TRACK: (175.0, 155.0),
    ComponentType.PAD: (32.0, 22.0),
    ComponentType.LOWER_ROLLER: (185.0, 171.0),
    ComponentType.UPPER_ROLLER: (145.0, 133.0),
    ComponentType.IDLER: (555.0, 525.0),
    ComponentType.SPROCKET: (225.0, 210.0),
}

COMPONENT_LABELS: dict[ComponentType, str] = {
    ComponentType.TRACK: "Track",
    ComponentType.PAD: "Pad",
    ComponentType.LOWER_ROLLER: "Lower roller",
    ComponentType.UPPER_ROLLER: "Upper roller",
    ComponentType.IDLER: "Idler",
    ComponentType.SPROCKET: "Sprocket",
}

CONDITION_LABELS: dict[Condition, str] = {
    Condition.OK: "Within parameters",
    Condition.VERIFY: "Verify",
    Condition.CRITICAL: "Out of parameters",
}

_SEVERITY = {Condition.OK: 0, Condition.VERIFY: 1, Condition.CRITICAL: 2}


@dataclass(frozen=True)
class SideAssessment:
    wear_percent: float
    condition: Condition


@dataclass(frozen=True)
class ComponentAssessment:
    component_type: ComponentType
    left: Optional[SideAssessment]
    right: Optional[SideAssessment]

    @property
    def worst(self) -> Optional[Condition]:
        return worst_condition(
            side.condition for side in (self.left, self.right) if side is not None
        )


@dataclass(frozen=True)
class ReportAssessment:
    critical: list[ComponentType]
    verify: list[ComponentType]
    ok: list[ComponentType]
    worst: Optional[Condition]


def round2(value: float) -> float:
    """Round half away from zero to two decimals"""
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def classify(wear_percent: float) -> Condition:
    if wear_percent <= OK_THRESHOLD:
        return Condition.OK
    if wear_percent <= VERIFY_THRESHOLD:
        return Condition.VERIFY
    return Condition.CRITICAL


def assess_side(
    standard: Optional[float], limit: Optional[float], measured: Optional[float]
) -> Optional[SideAssessment]:
    """Wear and condition for one side; None when any input is absent or the range is empty"""
    if standard is None or limit is None or measured is None:
        return None

    total_range = standard - limit
    if total_range <= 0:
        return None

    worn_amount = standard - measured
    wear_percent = round2((worn_amount / total_range) * 100)
    return SideAssessment(wear_percent=wear_percent, condition=classify(wear_percent))


def assess_component(
    component_type: ComponentType,
    standard: Optional[float],
    limit: Optional[float],
    measured_left: Optional[float],
    measured_right: Optional[float],
) -> ComponentAssessment:
    return ComponentAssessment(
        component_type=ComponentType(component_type),
        left=assess_side(standard, limit, measured_left),
        right=assess_side(standard, limit, measured_right),
    )


def default_limits(component_type: ComponentType) -> tuple[float, float]:
    return DEFAULT_LIMITS[ComponentType(component_type)]


def worst_condition(conditions: Iterable[Condition]) -> Optional[Condition]:
    worst = None
    for condition in conditions:
        condition = Condition(condition)
        if worst is None or _SEVERITY[condition] > _SEVERITY[worst]:
            worst = condition
    return worst


def summarize(assessments: Iterable[ComponentAssessment]) -> ReportAssessment:
    """Group components by their worst side.

    Components with no assessable side are left out of every group.
    """
    critical, verify, ok = [], [], []
    for assessment in assessments:
        worst = assessment.worst
        if worst is Condition.CRITICAL:
            critical.append(assessment.component_type)
        elif worst is Condition.VERIFY:
            verify.append(assessment.component_type)
        elif worst is Condition.OK:
            ok.append(assessment.component_type)

    if critical:
        overall = Condition.CRITICAL
    elif verify:
        overall = Condition.VERIFY
    elif ok:
        overall = Condition.OK
    else:
        overall = None
    return ReportAssessment(critical=critical, verify=verify, ok=ok, worst=overall)


def _format_side(side: Optional[SideAssessment]) -> str:
    if side is None:
        return "N/A"
    return f"{side.wear_percent:.1f}% ({CONDITION_LABELS[side.condition]})"


def summary_text(assessments: Iterable[ComponentAssessment]) -> str:
    """Plain-text technical summary: one line per assessed component plus the attention lists"""
    assessments = [a for a in assessments if a.left is not None or a.right is not None]
    grouped = summarize(assessments)

    lines = [
        f"{COMPONENT_LABELS[a.component_type]}: L {_format_side(a.left)}, R {_format_side(a.right)}"
        for a in assessments
    ]
    if grouped.critical:
        names = ", ".join(COMPONENT_LABELS[c] for c in grouped.critical)
        lines.append(f"Out of parameters: {names}.")
    else:
        lines.append("No component out of parameters.")
    if grouped.verify:
        names = ", ".join(COMPONENT_LABELS[c] for c in grouped.verify)
        lines.append(f"To verify: {names}.")
    return "\n".join(lines)
