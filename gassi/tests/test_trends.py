from datetime import datetime

import pytest

from gassi.models.settings import Settings
from gassi.services.trends import interval_trend, ph_trend, weight_trend


def test_weight_trend_band_and_flags(make_event, cfg):
    events = [
        # 12 months old by this birthday -> expected ~30kg
        make_event("gewicht", datetime(2025, 6, 10, 9, 0), weight_value=36.0),
        make_event("gewicht", datetime(2025, 5, 10, 9, 0), weight_value=29.0),
        make_event("gewicht", datetime(2025, 5, 11, 9, 0)),
    ]

    points = weight_trend(events, Settings(birthday=datetime(2024, 6, 10).date()), cfg)

    # Then: oldest first, entries without a value skipped
    assert [p.weight for p in points] == [29.0, 36.0]
    assert [p.label for p in points] == ["10.5", "10.6"]
    assert points[0].out_of_bounds is False
    assert points[1].out_of_bounds is True
    assert points[1].lower == pytest.approx(points[1].expected * 0.95)
    assert points[1].upper == pytest.approx(points[1].expected * 1.05)


def test_weight_trend_outside_model_range_has_no_band(make_event, cfg):
    # Given: one month old, heavier than any curve value
    events = [make_event("gewicht", datetime(2025, 2, 20, 9, 0), weight_value=50.0)]

    points = weight_trend(events, Settings(), cfg)

    assert points[0].age_months < 2
    assert points[0].expected is None
    assert points[0].out_of_bounds is False


def test_ph_trend_skips_unparseable(make_event, cfg):
    events = [
        make_event("phwert", datetime(2025, 6, 2, 8, 0), ph_value="7,0"),
        make_event("phwert", datetime(2025, 6, 1, 8, 0), ph_value="6,6"),
        make_event("phwert", datetime(2025, 6, 3, 8, 0), ph_value="kaputt"),
    ]

    points = ph_trend(events, cfg)

    assert [(p.label, p.value) for p in points] == [("1.6", 6.6), ("2.6", 7.0)]


def test_interval_trend_average(make_event, cfg):
    events = [
        make_event("pipi", datetime(2025, 6, 10, 6, 0)),
        make_event("pipi", datetime(2025, 6, 10, 9, 0)),
        make_event("pipi", datetime(2025, 6, 10, 13, 0)),
    ]

    series, avg = interval_trend(events, "pipi", cfg)

    assert [p.value for p in series] == [3.0, 4.0]
    assert avg == 3.5
    assert interval_trend([], "pipi", cfg) == ([], None)
