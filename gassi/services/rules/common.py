from __future__ import annotations

from typing import List, Optional, Sequence

from gassi.models.event import Event, EventType
from gassi.util.time import to_utc


def newest_first(events: Sequence[Event], tz: str) -> List[Event]:
    return sorted(events, key=lambda e: to_utc(e.time, tz), reverse=True)


def latest_break(events: Sequence[Event], tz: str) -> Optional[Event]:
    breaks = [e for e in events if e.is_break]
    if not breaks:
        return None
    return newest_first(breaks, tz)[0]


def of_type(events: Sequence[Event], event_type: EventType | str) -> List[Event]:
    et = EventType(event_type)
    return [e for e in events if e.type == et]


def de_num(x: float, digits: int = 1) -> str:
    # German decimal comma: 6.8 -> "6,8"
    return f"{x:.{digits}f}".replace(".", ",")


def de_duration(minutes: float) -> str:
    total = int(minutes)
    h, m = divmod(total, 60)
    if h == 0:
        return f"{m}min"
    return f"{h}h {m:02d}min"
