import math

import pytest

from bunktrack.engine.attendance import (
    NO_CLASSES_MESSAGE,
    AttendanceCalculator,
    InvalidInputError,
    compute,
    format_percent,
)


@pytest.mark.parametrize("attended", [0, 5, 40])
@pytest.mark.parametrize("required", [1, 75, 100])
def test_no_classes_returns_zeroed_stats(attended, required):
    stats = compute(attended, 0, required)

    assert stats.current_percent == 0
    assert stats.can_bunk == 0
    assert stats.need_to_attend == 0
    assert stats.message == NO_CLASSES_MESSAGE
    assert stats.safe


def test_exactly_at_threshold_is_safe_with_nothing_to_spare():
    stats = compute(75, 100, 75)

    assert stats.current_percent == 75
    assert stats.safe
    assert stats.can_bunk == 0
    assert stats.need_to_attend == 0


def test_above_threshold_counts_bunkable_classes():
    stats = compute(80, 100, 75)

    assert stats.current_percent == 80
    assert stats.can_bunk == 6
    assert stats.need_to_attend == 0
    assert stats.message == "You are safe. You can bunk around 6 classes."
    # one more bunk than allowed drops below target
    assert 80 / (100 + 6) >= 0.75
    assert 80 / (100 + 7) < 0.75


def test_below_threshold_counts_classes_to_attend():
    stats = compute(50, 100, 75)

    assert stats.current_percent == 50
    assert not stats.safe
    assert stats.can_bunk == 0
    assert stats.need_to_attend == 100
    assert stats.message == "You need to attend around 100 more classes to reach 75%."


def test_message_keeps_fractional_target():
    stats = compute(1, 4, 82.5)

    assert stats.message.endswith("to reach 82.5%.")
    assert (1 + stats.need_to_attend) / (4 + stats.need_to_attend) >= 0.825
    assert (stats.need_to_attend) / (3 + stats.need_to_attend) < 0.825


def test_current_percent_is_rounded_for_display():
    assert compute(2, 3, 50).current_percent == 66.67


def test_comparison_uses_unrounded_percentage():
    # 66.666% rounds to 66.67 but is still below a 66.67% target
    stats = compute(2, 3, 66.67)

    assert stats.current_percent == 66.67
    assert not stats.safe
    assert stats.need_to_attend == 1


def test_projection_lands_exactly_on_target():
    stats = compute(4, 10, 70)

    assert stats.need_to_attend == 10
    assert (4 + 10) * 100 == 70 * (10 + 10)


def test_need_to_attend_rounds_up():
    stats = compute(6, 10, 70)

    assert stats.need_to_attend == math.ceil((70 * 10 - 600) / 30)
    assert stats.need_to_attend == 4


def test_full_attendance_target_when_perfect():
    stats = compute(10, 10, 100)

    assert stats.safe
    assert stats.can_bunk == 0
    assert stats.need_to_attend == 0
    assert stats.reachable


def test_full_attendance_target_after_a_miss_is_unreachable():
    stats = compute(9, 10, 100)

    assert not stats.reachable
    assert not stats.safe
    assert stats.need_to_attend is None
    assert stats.can_bunk == 0
    assert stats.message == "100% attendance can no longer be reached."


def test_compute_is_idempotent():
    assert compute(37, 52, 80) == compute(37, 52, 80)


@pytest.mark.parametrize("total,required", [(40, 75), (17, 60), (100, 85.5)])
def test_monotonic_in_attended(total, required):
    results = [compute(attended, total, required) for attended in range(total + 1)]

    for previous, current in zip(results, results[1:]):
        assert current.can_bunk >= previous.can_bunk
        assert current.need_to_attend <= previous.need_to_attend


@pytest.mark.parametrize("total,required", [(40, 75), (33, 90), (12, 50)])
def test_at_most_one_projection_is_positive(total, required):
    for attended in range(total + 1):
        stats = compute(attended, total, required)
        assert not (stats.can_bunk > 0 and stats.need_to_attend > 0)
        if stats.can_bunk == 0 and stats.need_to_attend == 0:
            assert attended * 100 >= required * total


def test_numeric_strings_are_accepted():
    assert compute("80", "100", "75") == compute(80, 100, 75)


@pytest.mark.parametrize(
    "attended,total,required",
    [
        ("abc", 10, 75),
        (5, None, 75),
        (5, 10, float("nan")),
        (float("inf"), 10, 75),
        (True, 10, 75),
        (5, 10, ""),
    ],
)
def test_non_numeric_input_is_rejected(attended, total, required):
    with pytest.raises(InvalidInputError):
        compute(attended, total, required)


@pytest.mark.parametrize("required", [0, -5, 100.5, 250])
def test_required_percent_out_of_range_is_rejected(required):
    with pytest.raises(InvalidInputError):
        compute(5, 10, required)


def test_negative_attended_is_rejected():
    with pytest.raises(InvalidInputError):
        compute(-1, 10, 75)


def test_invalid_input_is_a_value_error():
    assert issubclass(InvalidInputError, ValueError)


@pytest.mark.parametrize(
    "total,required,expected",
    [(100, 75, 75), (10, 75, 8), (0, 75, 0), (3, 100, 3)],
)
def test_threshold_mark(total, required, expected):
    assert AttendanceCalculator.threshold_mark(total, required) == expected


def test_message_prints_target_as_given():
    stats = compute(9, 10, 99.9999999)

    assert stats.reachable
    assert stats.message.endswith("to reach 99.9999999%.")


@pytest.mark.parametrize(
    "value,expected",
    [(75, "75"), (75.0, "75"), (82.5, "82.5"), ("33.3", "33.3"), (99.9999999, "99.9999999")],
)
def test_format_percent(value, expected):
    assert format_percent(value) == expected
