"""Tests for Duration arithmetic and the operator surface."""

import math
from datetime import datetime

import pytest

from calduration import DateTimePoint, Duration, InvalidOperation

# --- Inverse ---


def test_inverse_negates_every_unit():
    """Test that inverse flips the sign of all stored units."""
    d = Duration(days=10).inverse()

    assert d.delta_days == -10
    assert d.is_negative()


def test_inverse_keeps_zero_units_zero():
    """Test that zero units do not turn into negative zero."""
    d = Duration(seconds=0.0, days=3).inverse()

    assert d.delta_seconds == 0
    assert math.copysign(1, d.delta_seconds) == 1


def test_inverse_is_involutive():
    """Test that inverting twice restores the original units."""
    d = Duration(months=3, days=-2, minutes=5, seconds=-1, nanoseconds=-7)

    assert d.inverse().inverse().deltas() == d.deltas()


def test_double_inverse_keeps_zero_units_zero():
    """Test that zero units stay zero (never -0.0) through two inversions."""
    d = Duration(days=3, minutes=0.0, seconds=0.0)
    twice = d.inverse().inverse()

    assert twice.deltas() == d.deltas()
    assert twice.delta_months == 0
    assert twice.delta_nanoseconds == 0
    assert math.copysign(1, twice.delta_minutes) == 1
    assert math.copysign(1, twice.delta_seconds) == 1


def test_inverse_recomputes_default_mode():
    """Test that inverse picks the default mode for the negated months."""
    assert Duration(months=1).inverse().is_preserve_mode()
    assert Duration(months=-1).inverse().is_wrap_mode()
    assert Duration(months=1, end_of_month="limit").inverse().is_preserve_mode()


def test_inverse_mode_override():
    """Test that inverse accepts an explicit end-of-month mode."""
    d = Duration(months=1).inverse(end_of_month="limit")

    assert d.delta_months == -1
    assert d.is_limit_mode()


def test_unary_minus_is_inverse():
    """Test that -d is the same as d.inverse()."""
    d = Duration(months=2, seconds=1, nanoseconds=3)

    assert -d == d.inverse()


# --- Add and subtract ---


def test_add_duration_returns_new_value():
    """Test that add_duration sums units and leaves the receiver untouched."""
    d = Duration(days=1, minutes=30)
    total = d.add_duration(Duration(days=2, hours=1))

    assert total.delta_days == 3
    assert total.delta_minutes == 90
    assert d.delta_days == 1
    assert d.delta_minutes == 30


def test_add_duration_keeps_receiver_mode():
    """Test that the sum carries the left operand's end-of-month mode."""
    d = Duration(months=1, end_of_month="limit")

    assert d.add_duration(Duration(months=-5)).is_limit_mode()


def test_add_carries_nanoseconds():
    """Test that a nanosecond overflow from addition carries into seconds."""
    d = Duration(nanoseconds=600_000_000).add(nanoseconds=600_000_000)

    assert d.delta_seconds == 1
    assert d.delta_nanoseconds == 200_000_000


def test_add_with_keyword_units():
    """Test that add builds a transient duration from keyword units."""
    d = Duration(years=1).add(months=3, weeks=2, hours=1)

    assert d.in_units("years", "months") == (1, 3)
    assert d.delta_days == 14
    assert d.delta_minutes == 60


def test_subtract_crossing_zero_renormalizes():
    """Test that subtracting below a whole second borrows correctly."""
    d = Duration(seconds=1).subtract(nanoseconds=1)

    assert d.delta_seconds == 0
    assert d.delta_nanoseconds == 999_999_999


def test_subtract_duration_is_add_of_inverse():
    """Test that subtract_duration matches adding the inverse."""
    a = Duration(months=5, days=3, seconds=10)
    b = Duration(months=2, days=7, nanoseconds=1)

    assert a.subtract_duration(b) == a.add_duration(b.inverse())


@pytest.mark.parametrize(
    "x",
    [
        Duration(nanoseconds=999_999_999),
        Duration(months=-3, seconds=5, nanoseconds=-2),
        Duration(weeks=1, hours=-1),
    ],
)
def test_add_then_subtract_cancels(x):
    """Test that adding then subtracting the same duration is a no-op."""
    d = Duration(years=1, days=-4, seconds=7, nanoseconds=300_000_000)

    assert d.clone().add_duration(x).subtract_duration(x) == d


def test_methods_chain():
    """Test that arithmetic methods can be chained."""
    d = Duration(days=1).add(hours=2).multiply(2).subtract(minutes=4)

    assert d.delta_days == 2
    assert d.delta_minutes == 236


# --- Multiply ---


def test_multiply_scales_and_carries():
    """Test that multiply scales every unit and renormalizes nanoseconds."""
    d = Duration(days=1, nanoseconds=600_000_000).multiply(3)

    assert d.delta_days == 3
    assert d.delta_seconds == 1
    assert d.delta_nanoseconds == 800_000_000


def test_multiply_by_negative_factor():
    """Test that a negative factor flips every unit."""
    d = Duration(months=2, hours=1, nanoseconds=5).multiply(-2)

    assert d.deltas() == {
        "months": -4,
        "days": 0,
        "minutes": -120,
        "seconds": 0,
        "nanoseconds": -10,
    }


def test_multiply_keeps_mode():
    """Test that scaling keeps the receiver's mode."""
    assert Duration(months=1).multiply(-1).is_wrap_mode()


# --- Operators ---


def test_plus_operator_between_durations():
    """Test that + produces a new duration."""
    a = Duration(days=1)
    b = Duration(hours=3)

    total = a + b
    assert total == Duration(days=1, hours=3)
    assert a == Duration(days=1)


def test_minus_operator_between_durations():
    """Test that - subtracts durations."""
    assert Duration(days=3) - Duration(days=1, seconds=1) == Duration(
        days=2, seconds=-1
    )


def test_times_operator_in_either_order():
    """Test that * scales regardless of operand order."""
    d = Duration(minutes=10)

    assert d * 3 == Duration(minutes=30)
    assert 3 * d == Duration(minutes=30)


def test_unsupported_operands():
    """Test that unrelated operand types are rejected."""
    d = Duration(days=1)

    with pytest.raises(TypeError):
        d + 1  # type: ignore[operator]
    with pytest.raises(TypeError):
        d * d  # type: ignore[operator]
    with pytest.raises(TypeError):
        d * 1.5  # type: ignore[operator]


@pytest.mark.parametrize(
    "compare",
    [
        lambda a, b: a < b,
        lambda a, b: a <= b,
        lambda a, b: a > b,
        lambda a, b: a >= b,
    ],
)
def test_ordering_without_anchor_is_forbidden(compare):
    """Test that direct ordering between durations raises."""
    with pytest.raises(InvalidOperation, match="does not support ordering"):
        compare(Duration(months=1), Duration(days=30))


def test_sorting_durations_is_forbidden():
    """Test that sorting, which needs ordering, raises too."""
    with pytest.raises(InvalidOperation, match="compare\\(a, b, anchor\\)"):
        sorted([Duration(days=2), Duration(days=1)])


def test_invalid_operation_is_a_type_error():
    """Test that InvalidOperation can be caught as TypeError."""
    assert issubclass(InvalidOperation, TypeError)


def test_subtracting_point_from_duration_is_forbidden():
    """Test that duration - point raises for points and datetimes."""
    point = DateTimePoint(datetime(2025, 1, 1))

    with pytest.raises(InvalidOperation, match="Cannot subtract a point in time"):
        Duration(days=1) - point
    with pytest.raises(InvalidOperation, match="Duration - datetime"):
        Duration(days=1) - datetime(2025, 1, 1)
