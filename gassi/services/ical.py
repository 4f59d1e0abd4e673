# services/ical.py
from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional, Sequence

from gassi.config.rule_config import RuleConfig, load_rule_config
from gassi.schemas.ical import CareOwnership, ICalEvent
from gassi.util.time import day_bounds, localize

DEFAULT_DURATION = timedelta(hours=1)
OWNERSHIP_DEFAULT_DURATION = timedelta(days=1)


def _end(ev: ICalEvent, tz: str, default: timedelta) -> datetime:
    if ev.dtend is not None:
        return localize(ev.dtend, tz)
    return localize(ev.dtstart, tz) + default


def ownership_match(summary: str, cfg: RuleConfig | None = None) -> Optional[re.Match]:
    cfg = cfg or load_rule_config()
    return re.search(cfg.ownership_pattern(), summary or "", flags=re.IGNORECASE)


def events_for_date(
    events: Sequence[ICalEvent], day: date, cfg: RuleConfig | None = None
) -> List[ICalEvent]:
    """Entries overlapping the local day [00:00, 24:00). Missing dtend means one hour."""
    cfg = cfg or load_rule_config()
    tz = cfg.timezone()
    day_start, day_end = day_bounds(day, tz)

    return [
        e
        for e in events
        if localize(e.dtstart, tz) < day_end and _end(e, tz, DEFAULT_DURATION) > day_start
    ]


def events_for_range(
    events: Sequence[ICalEvent], start: date, num_days: int, cfg: RuleConfig | None = None
) -> Dict[int, List[ICalEvent]]:
    return {i: events_for_date(events, start + timedelta(days=i), cfg) for i in range(num_days)}


def events_for_week(
    events: Sequence[ICalEvent], reference: date, cfg: RuleConfig | None = None
) -> Dict[int, List[ICalEvent]]:
    # Week starts on Monday
    monday = reference - timedelta(days=reference.weekday())
    return events_for_range(events, monday, 7, cfg)


def owner_for_date(
    events: Sequence[ICalEvent], day: date, cfg: RuleConfig | None = None
) -> Optional[CareOwnership]:
    """
    Who has the dog on `day`, from entries like "🐶 Jana hat Kalle".
    Checked at local noon; a missing dtend means one day.
    """
    cfg = cfg or load_rule_config()
    tz = cfg.timezone()
    noon = localize(datetime.combine(day, time(12, 0)), tz)

    for ev in events:
        m = ownership_match(ev.summary, cfg)
        if not m:
            continue
        start = localize(ev.dtstart, tz)
        end = _end(ev, tz, OWNERSHIP_DEFAULT_DURATION)
        if start <= noon < end:
            return CareOwnership(person=m.group(1), summary=ev.summary, start=start, end=end)
    return None
