"""
Growth curve: interpolation, clamping and tolerance checks.
"""

from datetime import date, datetime

import pytest

from gassi.services.growth_curve import GrowthCurve, age_in_months, deviation, is_out_of_bounds

BORN = date(2025, 1, 20)
AT = datetime(2025, 6, 10, 9, 0)


@pytest.fixture
def curve(cfg):
    return GrowthCurve.from_config(cfg)


def test_expected_weight_at_knots_and_between(curve):
    assert curve.expected_weight(2) == 7
    assert curve.expected_weight(12) == 30
    # halfway between 4 (15kg) and 5 (19kg)
    assert curve.expected_weight(4.5) == pytest.approx(17.0)
    # 15 -> 18 is a three month segment
    assert curve.expected_weight(16.5) == pytest.approx(33.5)


def test_expected_weight_clamps_outside_knots(curve):
    assert curve.expected_weight(0.5) == 7
    assert curve.expected_weight(18) == 34
    assert curve.expected_weight(40) == 34


def test_bounds_are_symmetric_around_expected(curve):
    lower, upper = curve.bounds(12, 0.05)
    assert lower == pytest.approx(28.5)
    assert upper == pytest.approx(31.5)


def test_empty_curve_is_rejected():
    with pytest.raises(ValueError):
        GrowthCurve([])


def test_age_in_months_uses_average_month_length():
    born = date(2025, 1, 20)
    assert age_in_months(date(2025, 1, 20), born) == 0
    assert age_in_months(datetime(2025, 1, 20, 12, 0), born) == pytest.approx(0.5 / 30.44)
    # 304.4 days == exactly 10 average months
    assert age_in_months(datetime(2025, 11, 20, 9, 36), born) == pytest.approx(10.0)


def test_tolerance_boundary_is_exclusive():
    flat = GrowthCurve([(2, 40), (18, 40)])

    # Given: weights exactly 5% off the expected 40kg
    # Then: not out of bounds; 5.01% is
    assert not is_out_of_bounds(42.0, AT, BORN, flat)
    assert not is_out_of_bounds(38.0, AT, BORN, flat)
    assert is_out_of_bounds(42.004, AT, BORN, flat)
    assert is_out_of_bounds(37.996, AT, BORN, flat)


def test_model_age_range_suppresses_checks(curve):
    # Given: age outside the modelled range and a weight far off
    # Then: no deviation value and never out of bounds
    assert deviation(50, 20, curve, model_age_range=(2, 18)) is None
    assert not is_out_of_bounds(50, AT, date(2023, 1, 1), curve, model_age_range=(2, 18))

    # Without a range the curve clamps and the weight is flagged
    assert deviation(51, 20, curve) == pytest.approx(0.5)
    assert is_out_of_bounds(51, AT, date(2023, 1, 1), curve)
