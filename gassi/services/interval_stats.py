# services/interval_stats.py
from __future__ import annotations

import math
from typing import List, Optional, Sequence

from gassi.config.rule_config import RuleConfig, load_rule_config
from gassi.models.event import Event, EventType
from gassi.schemas.trend import SeriesPoint
from gassi.util.time import localize, minutes_between, to_utc


def round1(x: float) -> float:
    # half-up, one decimal (chart labels)
    return math.floor(x * 10 + 0.5) / 10


def sorted_of_type(events: Sequence[Event], event_type: EventType | str, tz: str) -> List[Event]:
    et = EventType(event_type)
    return sorted((e for e in events if e.type == et), key=lambda e: to_utc(e.time, tz))


def average_interval_minutes(
    events: Sequence[Event],
    event_type: EventType | str,
    cfg: RuleConfig | None = None,
) -> Optional[float]:
    """
    Mean gap in minutes between consecutive events of one type.

    - fewer than interval_stats.min_events (3) events -> None
    - gaps <= 0 and gaps >= overnight_gap_minutes (720) are dropped
    - None if no gap survives
    """
    cfg = cfg or load_rule_config()
    tz = cfg.timezone()

    same = sorted_of_type(events, event_type, tz)
    if len(same) < cfg.interval_min_events():
        return None

    limit = cfg.interval_overnight_gap_minutes()
    gaps = []
    for prev, cur in zip(same, same[1:]):
        gap = minutes_between(cur.time, prev.time, tz)
        if 0 < gap < limit:
            gaps.append(gap)

    if not gaps:
        return None
    return sum(gaps) / len(gaps)


def interval_series(
    events: Sequence[Event],
    event_type: EventType | str,
    cfg: RuleConfig | None = None,
) -> List[SeriesPoint]:
    """Every consecutive gap in hours (1 decimal), labelled by the later event."""
    cfg = cfg or load_rule_config()
    tz = cfg.timezone()

    same = sorted_of_type(events, event_type, tz)
    out: List[SeriesPoint] = []
    for prev, cur in zip(same, same[1:]):
        local = localize(cur.time, tz)
        hours = minutes_between(cur.time, prev.time, tz) / 60.0
        out.append(
            SeriesPoint(time=cur.time, label=f"{local.day}.{local.month}", value=round1(hours))
        )
    return out


def average_interval_hours(series: Sequence[SeriesPoint]) -> Optional[float]:
    if not series:
        return None
    return round1(sum(p.value for p in series) / len(series))
