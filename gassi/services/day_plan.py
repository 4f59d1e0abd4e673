# services/day_plan.py
"""
Week plan ("Wochenplan") slot synthesis.

Per day, three sources are blended into an ordered list of display slots:

1. estimates: historical break hours of the same bucket (weekday vs weekend),
   chained into clusters
2. real breaks logged on that day, which replace nearby estimates
3. calendar entries, attached to the nearest slot

Everything here is rebuilt from scratch on every call; the same inputs always
give the same slots.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence

from gassi.config.rule_config import RuleConfig, load_rule_config
from gassi.models.event import Event, EventType
from gassi.schemas.ical import ICalEvent
from gassi.schemas.schedule import HistoricalBreak, ScheduleSlot, SlotCalendarEntry
from gassi.services.ical import events_for_date, ownership_match
from gassi.services.log import get_logger, log_event
from gassi.util.time import clock_str, hour_of_day, local_date, localize, require_now, to_utc

logger = get_logger("day_plan")

EMPTY_DAY = "–"


@dataclass
class _Slot:
    avg_hour: float
    has_poop: bool = False
    is_walk: bool = True
    is_estimate: bool = False
    is_future_estimate: bool = False
    exact_time: Optional[str] = None
    ical_events: List[SlotCalendarEntry] = field(default_factory=list)

    def freeze(self) -> ScheduleSlot:
        return ScheduleSlot(
            avg_hour=self.avg_hour,
            has_poop=self.has_poop,
            is_walk=self.is_walk,
            ical_events=list(self.ical_events),
            is_estimate=self.is_estimate,
            is_future_estimate=self.is_future_estimate,
            exact_time=self.exact_time,
        )


def _is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def collect_history(
    events: Sequence[Event],
    day: date,
    today: date | None = None,
    cfg: RuleConfig | None = None,
) -> List[HistoricalBreak]:
    """
    Historical breaks for `day`'s bucket (weekday Mon-Fri / weekend Sat-Sun).

    Window: [end - lookback, end) where end = min(day, today); lookback is
    14 days for weekdays and 60 days for weekends. Output keeps the
    chronological order of the events.
    """
    cfg = cfg or load_rule_config()
    tz = cfg.timezone()

    weekend = _is_weekend(day)
    end = day if today is None else min(day, today)
    start = end - timedelta(days=cfg.lookback_days(weekend))

    breaks = sorted((e for e in events if e.is_break), key=lambda e: to_utc(e.time, tz))
    out: List[HistoricalBreak] = []
    for e in breaks:
        d = local_date(e.time, tz)
        if start <= d < end and _is_weekend(d) == weekend:
            out.append(HistoricalBreak(hour=hour_of_day(e.time, tz), is_poop=e.type == EventType.STUHLGANG))
    return out


def cluster_history(history: Sequence[HistoricalBreak], gap_hours: float) -> List[_Slot]:
    """
    Greedy chaining: sorted by hour (stable), a point joins the current
    cluster when it is within gap_hours of the previous point.
    """
    ordered = sorted(history, key=lambda b: b.hour)

    clusters: List[List[HistoricalBreak]] = []
    for b in ordered:
        if clusters and b.hour - clusters[-1][-1].hour <= gap_hours:
            clusters[-1].append(b)
        else:
            clusters.append([b])

    return [
        _Slot(
            avg_hour=sum(b.hour for b in c) / len(c),
            has_poop=any(b.is_poop for b in c),
            is_estimate=True,
        )
        for c in clusters
    ]


def _real_slots(real_events: Sequence[Event], day: date, tz: str) -> List[_Slot]:
    breaks = sorted(
        (e for e in real_events if e.is_break and local_date(e.time, tz) == day),
        key=lambda e: to_utc(e.time, tz),
    )
    return [
        _Slot(
            avg_hour=hour_of_day(e.time, tz),
            has_poop=e.type == EventType.STUHLGANG,
            exact_time=clock_str(e.time, tz),
        )
        for e in breaks
    ]


def _unmatched_estimates(estimates: List[_Slot], reals: List[_Slot], window_hours: float) -> List[_Slot]:
    """
    Each estimate (ascending) takes the nearest still-unused real slot within
    the window; distance ties go to the earlier real slot. Returns estimates
    that found no partner.
    """
    used: set[int] = set()
    unmatched: List[_Slot] = []
    for est in estimates:
        best_i: Optional[int] = None
        best_d = 0.0
        for i, real in enumerate(reals):
            if i in used:
                continue
            d = abs(real.avg_hour - est.avg_hour)
            if d <= window_hours and (best_i is None or d < best_d):
                best_i, best_d = i, d
        if best_i is None:
            unmatched.append(est)
        else:
            used.add(best_i)
    return unmatched


def _attach_calendar(
    slots: List[_Slot], ical_events: Sequence[ICalEvent], day: date, cfg: RuleConfig
) -> None:
    tz = cfg.timezone()
    ordered = sorted(ical_events, key=lambda e: to_utc(e.dtstart, tz))
    for ev in ordered:
        # Ownership handovers are shown elsewhere
        if ownership_match(ev.summary, cfg):
            continue

        start = localize(ev.dtstart, tz)
        # Carried over from the previous day -> top of the day
        hour = 0.0 if start.date() < day else hour_of_day(start, tz)
        entry = SlotCalendarEntry(summary=ev.summary, time_str=clock_str(start, tz))

        if not slots:
            slots.append(_Slot(avg_hour=hour, is_walk=False, ical_events=[entry]))
            continue

        # min() keeps the first of equal distances: slots are ascending
        nearest = min(slots, key=lambda s: abs(s.avg_hour - hour))
        nearest.ical_events.append(entry)


def build_day_slots(
    day: date,
    history: Sequence[HistoricalBreak],
    real_events: Sequence[Event],
    ical_events: Sequence[ICalEvent],
    *,
    is_today: bool = False,
    now: datetime | None = None,
    cfg: RuleConfig | None = None,
) -> List[ScheduleSlot]:
    """
    Ordered display slots for one day.

    - today: unmatched estimates after the current hour are kept as
      is_future_estimate, earlier ones are dropped
    - other days: unmatched estimates are kept as plain estimates
    - real_events / ical_events may contain other days; they are filtered
    """
    cfg = cfg or load_rule_config()
    tz = cfg.timezone()

    current_hour: Optional[float] = None
    if is_today:
        current_hour = hour_of_day(require_now(now, "now"), tz)

    estimates = cluster_history(history, cfg.cluster_gap_hours())
    reals = _real_slots(real_events, day, tz)

    if reals:
        estimates = _unmatched_estimates(estimates, reals, cfg.match_window_hours())

    if current_hour is not None:
        kept = []
        for est in estimates:
            if est.avg_hour > current_hour:
                est.is_future_estimate = True
                kept.append(est)
        estimates = kept

    slots = sorted(reals + estimates, key=lambda s: s.avg_hour)
    _attach_calendar(slots, events_for_date(ical_events, day, cfg), day, cfg)
    slots.sort(key=lambda s: s.avg_hour)

    log_event(
        logger,
        level="DEBUG",
        event="build_day_slots",
        msg="day slots built",
        day=day.isoformat(),
        is_today=is_today,
        history_points=len(history),
        real_slots=len(reals),
        estimate_slots=len(estimates),
        slots=len(slots),
    )
    return [s.freeze() for s in slots]


def build_week_slots(
    start: date,
    events: Sequence[Event],
    ical_events: Sequence[ICalEvent],
    now: datetime,
    days: int = 7,
    cfg: RuleConfig | None = None,
) -> Dict[date, List[ScheduleSlot]]:
    """Slots for `days` consecutive days from `start`, keyed by date."""
    cfg = cfg or load_rule_config()
    today = local_date(now, cfg.timezone())

    out: Dict[date, List[ScheduleSlot]] = {}
    for i in range(days):
        day = start + timedelta(days=i)
        history = collect_history(events, day, today=today, cfg=cfg)
        out[day] = build_day_slots(
            day,
            history,
            events,
            ical_events,
            is_today=day == today,
            now=now,
            cfg=cfg,
        )
    return out


def describe_day(slots: Sequence[ScheduleSlot]) -> str:
    """Compact text for one day; "–" when there is nothing to show."""
    if not slots:
        return EMPTY_DAY

    parts = []
    for s in slots:
        if s.exact_time:
            label = s.exact_time
        else:
            h = int(s.avg_hour)
            m = int(round((s.avg_hour - h) * 60))
            if m == 60:
                h, m = h + 1, 0
            label = f"~{h}:{m:02d}"
        if s.has_poop:
            label += " 💩"
        if s.ical_events:
            label += " (" + ", ".join(e.summary for e in s.ical_events) + ")"
        parts.append(label)
    return " · ".join(parts)
