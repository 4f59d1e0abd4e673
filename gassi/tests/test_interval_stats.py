from datetime import datetime, timedelta

import pytest

from gassi.models.event import EventType
from gassi.services.interval_stats import (
    average_interval_hours,
    average_interval_minutes,
    interval_series,
    round1,
)

START = datetime(2025, 6, 10, 6, 0)


def _at(*offsets_min):
    return [START + timedelta(minutes=m) for m in offsets_min]


def test_fewer_than_three_events_gives_no_average(make_event, cfg):
    events = [make_event("pipi", t) for t in _at(0, 60)]
    assert average_interval_minutes(events, EventType.PIPI, cfg) is None


def test_average_of_consecutive_gaps(make_event, cfg):
    # Given: gaps of 60 and 120 minutes, input unordered
    events = [make_event("pipi", t) for t in _at(180, 0, 60)]

    # Then: mean gap is 120
    assert average_interval_minutes(events, "pipi", cfg) == pytest.approx((120 + 60) / 2)


def test_only_events_of_requested_type_count(make_event, cfg):
    events = [make_event("pipi", t) for t in _at(0, 60, 120)]
    events += [make_event("stuhlgang", t) for t in _at(30, 31)]
    assert average_interval_minutes(events, "pipi", cfg) == pytest.approx(60)
    assert average_interval_minutes(events, "stuhlgang", cfg) is None


def test_overnight_gap_boundary(make_event, cfg):
    # Given: one 719 minute gap and one 720 minute gap
    events = [make_event("pipi", t) for t in _at(0, 719, 719 + 720)]

    # Then: 719 is kept, 720 is dropped as an overnight gap
    assert average_interval_minutes(events, "pipi", cfg) == pytest.approx(719)


def test_zero_gaps_and_only_overnight_gaps_give_none(make_event, cfg):
    same_time = [make_event("pipi", START) for _ in range(3)]
    assert average_interval_minutes(same_time, "pipi", cfg) is None

    nights = [make_event("pipi", t) for t in _at(0, 800, 1600)]
    assert average_interval_minutes(nights, "pipi", cfg) is None


def test_min_events_is_configurable(make_event, cfg):
    events = [make_event("pipi", t) for t in _at(0, 90)]
    relaxed = cfg.with_overrides({"interval_stats": {"min_events": 2}})
    assert average_interval_minutes(events, "pipi", relaxed) == pytest.approx(90)


def test_interval_series_hours_and_labels(make_event, cfg):
    events = [make_event("pipi", t) for t in _at(0, 180, 180 + 900)]

    series = interval_series(events, "pipi", cfg)

    # Then: every gap is listed (no overnight filter), labelled by the later event
    assert [p.value for p in series] == [3.0, 15.0]
    assert [p.label for p in series] == ["10.6", "11.6"]
    assert average_interval_hours(series) == 9.0
    assert average_interval_hours([]) is None


def test_round1_is_half_up():
    assert round1(2.25) == 2.3
    assert round1(3.24) == 3.2
