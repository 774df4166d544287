import pytest

from fieldsales.services.wear_assessment import (
    DEFAULT_LIMITS,
    assess_component,
    assess_side,
    classify,
    default_limits,
    round2,
    summarize,
    summary_text,
)
from fieldsales.shared.enums import ComponentType, Condition


@pytest.mark.parametrize(
    "measured, wear, condition",
    [
        (25.0, 70.0, Condition.OK),
        (24.0, 80.0, Condition.VERIFY),
        (20.0, 120.0, Condition.CRITICAL),
        (32.0, 0.0, Condition.OK),
        (23.0, 90.0, Condition.VERIFY),
    ],
)
def test_pad_wear_classification(measured: float, wear: float, condition: Condition) -> None:
    result = assess_side(32.0, 22.0, measured)

    assert result is not None
    assert result.wear_percent == wear
    assert result.condition is condition


def test_measured_above_standard_gives_negative_wear() -> None:
    result = assess_side(32.0, 22.0, 33.0)

    assert result.wear_percent == -10.0
    assert result.condition is Condition.OK


def test_zero_measurement_is_a_real_value() -> None:
    result = assess_side(32.0, 22.0, 0.0)

    assert result.wear_percent == 320.0
    assert result.condition is Condition.CRITICAL


@pytest.mark.parametrize(
    "standard, limit, measured",
    [(None, 22.0, 25.0), (32.0, None, 25.0), (32.0, 22.0, None), (22.0, 22.0, 20.0), (20.0, 22.0, 20.0)],
)
def test_missing_input_or_empty_range_has_no_assessment(standard, limit, measured) -> None:
    assert assess_side(standard, limit, measured) is None


def test_thresholds_are_inclusive_upper_bounds() -> None:
    assert classify(70.0) is Condition.OK
    assert classify(70.01) is Condition.VERIFY
    assert classify(90.0) is Condition.VERIFY
    assert classify(90.01) is Condition.CRITICAL


def test_round2_rounds_half_up() -> None:
    assert round2(12.345) == 12.35
    assert round2(0.005) == 0.01


def test_sides_are_assessed_independently() -> None:
    assessment = assess_component(ComponentType.PAD, 32.0, 22.0, 25.0, None)

    assert assessment.left.condition is Condition.OK
    assert assessment.right is None
    assert assessment.worst is Condition.OK


def test_default_limits_table() -> None:
    assert default_limits(ComponentType.TRACK) == (175.0, 155.0)
    assert default_limits("IDLER") == (555.0, 525.0)
    assert set(DEFAULT_LIMITS) == set(ComponentType)


def test_summarize_groups_components_by_worst_side() -> None:
    assessments = [
        assess_component(ComponentType.PAD, 32.0, 22.0, 25.0, 20.0),
        assess_component(ComponentType.TRACK, 175.0, 155.0, 159.0, 170.0),
        assess_component(ComponentType.IDLER, 555.0, 525.0, 550.0, 550.0),
        assess_component(ComponentType.SPROCKET, 225.0, 210.0, None, None),
    ]

    grouped = summarize(assessments)

    assert grouped.critical == [ComponentType.PAD]
    assert grouped.verify == [ComponentType.TRACK]
    assert grouped.ok == [ComponentType.IDLER]
    assert grouped.worst is Condition.CRITICAL


def test_summarize_without_measurements_has_no_overall_condition() -> None:
    grouped = summarize([assess_component(ComponentType.PAD, 32.0, 22.0, None, None)])

    assert grouped.worst is None
    assert grouped.critical == grouped.verify == grouped.ok == []


def test_summary_text_lists_measured_components_and_attention_items() -> None:
    text = summary_text(
        [
            assess_component(ComponentType.PAD, 32.0, 22.0, 20.0, None),
            assess_component(ComponentType.TRACK, 175.0, 155.0, None, None),
        ]
    )

    assert text.splitlines() == [
        "Pad: L 120.0% (Out of parameters), R N/A",
        "Out of parameters: Pad.",
    ]
