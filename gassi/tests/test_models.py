from datetime import datetime

import pytest
from pydantic import ValidationError

from gassi.models.event import Event, EventType
from gassi.models.settings import Settings
from gassi.schemas.anomaly import Anomaly, AnomalyType, Severity

T = datetime(2025, 6, 10, 8, 0)


def test_event_rejects_blank_id_and_unknown_type():
    with pytest.raises(ValidationError):
        Event(id="  ", type="pipi", time=T)
    with pytest.raises(ValidationError):
        Event(id="e1", type="spaziergang", time=T)


def test_event_ph_parsing():
    def ph(v):
        return Event(id="e", type=EventType.PHWERT, time=T, ph_value=v).ph()

    assert ph("6,8") == 6.8
    assert ph(" 7.1 ") == 7.1
    assert ph(None) is None
    assert ph("abc") is None
    assert ph("inf") is None


def test_event_is_break():
    assert Event(id="a", type="pipi", time=T).is_break
    assert Event(id="b", type="stuhlgang", time=T).is_break
    assert not Event(id="c", type="gewicht", time=T, weight_value=20).is_break


def test_settings_validation():
    with pytest.raises(ValidationError):
        Settings(morning_walk_time="8:00")
    with pytest.raises(ValidationError):
        Settings(walk_interval_hours=0)
    with pytest.raises(ValidationError):
        Settings(sleep_start_hour=22.25)
    with pytest.raises(ValidationError):
        Settings(sleep_end_hour=24)


def test_sleep_window_across_midnight():
    s = Settings(sleep_start_hour=22, sleep_end_hour=7)
    assert s.in_sleep_window(23.0)
    assert s.in_sleep_window(6.9)
    assert not s.in_sleep_window(7.0)
    assert not s.in_sleep_window(21.9)

    day_nap = Settings(sleep_start_hour=13, sleep_end_hour=14.5)
    assert day_nap.in_sleep_window(14.0)
    assert not day_nap.in_sleep_window(14.5)


def test_anomaly_aliases_and_dedup_key():
    a = Anomaly.model_validate(
        {
            "id": "x",
            "type": "ph_deviation",
            "kind": "ph_persistent",
            "severity": "alert",
            "title": "t",
            "description": "d",
            "highlightText": "h",
            "timestamp": T,
            "relatedEventId": "p1",
        }
    )

    assert a.related_event_id == "p1"
    assert a.highlight_text == "h"
    assert a.dedup_key() == ("ph_deviation", "p1")
    assert a.dedup_key(include_kind=True) == ("ph_deviation", "p1", "ph_persistent")
    assert a.model_dump(by_alias=True)["relatedEventId"] == "p1"

    general = a.model_copy(update={"related_event_id": None, "type": AnomalyType.PATTERN_CHANGE})
    assert general.dedup_key() == ("pattern_change", "general")


def test_severity_rank_order():
    assert sorted(Severity, key=lambda s: s.rank) == [Severity.ALERT, Severity.WARNING, Severity.INFO]
