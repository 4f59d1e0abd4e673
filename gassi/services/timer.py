from __future__ import annotations

import math
from datetime import datetime
from typing import Sequence

from gassi.config.rule_config import RuleConfig, load_rule_config
from gassi.models.event import Event
from gassi.models.settings import CountdownMode, Settings
from gassi.schemas.timer import TimerStatus
from gassi.services.rules.common import de_duration, latest_break
from gassi.util.time import minutes_between

NO_DATA = "00min"
DUE_NOW = "Jetzt!"


def timer_status(
    events: Sequence[Event],
    settings: Settings,
    now: datetime,
    cfg: RuleConfig | None = None,
) -> TimerStatus:
    """
    Walk timer shown on the home screen and widgets.

    count_up:   time since the last break ("2h 05min", "0min" right after one)
    count_down: time left until last break + walk_interval_hours,
                "Jetzt!" once it is due
    Only pipi/stuhlgang count; weight and pH entries are ignored.
    """
    cfg = cfg or load_rule_config()
    tz = cfg.timezone()

    base = dict(
        countdown_mode=settings.countdown_mode,
        walk_interval_hours=settings.walk_interval_hours,
    )

    last = latest_break(events, tz)
    if last is None:
        return TimerStatus(**base, display_text=NO_DATA)

    elapsed = max(0, math.floor(minutes_between(now, last.time, tz)))
    remaining = max(0, math.floor(settings.walk_interval_hours * 60) - elapsed)

    if settings.countdown_mode == CountdownMode.COUNT_UP:
        display = de_duration(elapsed)
    elif remaining <= 0:
        display = DUE_NOW
    else:
        display = de_duration(remaining)

    return TimerStatus(
        **base,
        last_walk_time=last.time,
        elapsed_minutes=elapsed,
        remaining_minutes=remaining,
        display_text=display,
        is_overdue=remaining <= 0,
    )
