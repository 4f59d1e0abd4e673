from datetime import date, datetime

from gassi.schemas.ical import ICalEvent
from gassi.services.ical import (
    events_for_date,
    events_for_week,
    owner_for_date,
    ownership_match,
)

DAY = date(2025, 6, 10)


def _cal(uid, summary, start, end=None):
    return ICalEvent(uid=uid, summary=summary, dtstart=start, dtend=end)


def test_ownership_match_variants(cfg):
    assert ownership_match("🐶 Jana hat Kalle", cfg).group(1) == "Jana"
    assert ownership_match("Tom hat kalle", cfg).group(1) == "Tom"
    assert ownership_match("Tierarzt mit Kalle", cfg) is None
    assert ownership_match("", cfg) is None


def test_events_for_date_overlap(cfg):
    events = [
        _cal("a", "Morgens", datetime(2025, 6, 10, 8, 0)),
        _cal("b", "Über Nacht", datetime(2025, 6, 9, 22, 0), datetime(2025, 6, 10, 2, 0)),
        _cal("c", "Gestern", datetime(2025, 6, 9, 22, 0), datetime(2025, 6, 10, 0, 0)),
        _cal("d", "Spät", datetime(2025, 6, 10, 23, 30)),
        _cal("e", "Morgen", datetime(2025, 6, 11, 0, 0)),
    ]

    # End is exclusive; a missing end means one hour
    assert [e.uid for e in events_for_date(events, DAY, cfg)] == ["a", "b", "d"]


def test_events_for_week_starts_monday(cfg):
    events = [
        _cal("mon", "x", datetime(2025, 6, 9, 10, 0)),
        _cal("sun", "y", datetime(2025, 6, 15, 10, 0)),
        _cal("next", "z", datetime(2025, 6, 16, 10, 0)),
    ]

    week = events_for_week(events, DAY, cfg)

    assert sorted(week) == list(range(7))
    assert [e.uid for e in week[0]] == ["mon"]
    assert [e.uid for e in week[6]] == ["sun"]
    assert all(e.uid != "next" for day in week.values() for e in day)


def test_owner_for_date(cfg):
    events = [
        _cal("o1", "🐶 Jana hat Kalle", datetime(2025, 6, 9, 0, 0), datetime(2025, 6, 11, 0, 0)),
        _cal("o2", "Tom hat Kalle", datetime(2025, 6, 12, 0, 0)),
        _cal("x", "Tierarzt", datetime(2025, 6, 13, 11, 0), datetime(2025, 6, 13, 13, 0)),
    ]

    owner = owner_for_date(events, DAY, cfg)
    assert owner.person == "Jana"
    assert owner.summary == "🐶 Jana hat Kalle"

    # No end: one day from the start
    assert owner_for_date(events, date(2025, 6, 12), cfg).person == "Tom"
    assert owner_for_date(events, date(2025, 6, 11), cfg) is None
    assert owner_for_date(events, date(2025, 6, 13), cfg) is None
