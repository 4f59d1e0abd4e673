from datetime import datetime, timedelta
from typing import List, Sequence

from gassi.config.rule_config import RuleConfig
from gassi.models.event import Event
from gassi.models.settings import Settings
from gassi.schemas.anomaly import Anomaly, AnomalyType, Severity
from gassi.services.rules.common import latest_break
from gassi.util.time import epoch_ms, hour_of_day, localize, minutes_between, to_utc

RULE_ID = "upcoming_break"


def eval_upcoming_break(
    events: Sequence[Event], now: datetime, settings: Settings, cfg: RuleConfig
) -> List[Anomaly]:
    """
    Walk reminder from remind_after_hours (4h) on. Suggested next walk is
    next_break_after_hours (5h) after the last break; once that time has
    passed the reminder turns into an alert.

    Opt-in gates: hand_over_after_hours caps the reminder window and
    quiet_in_sleep_window mutes it during the settings' sleep hours.
    """
    tz = cfg.timezone()
    params = cfg.rule_params(RULE_ID)

    last = latest_break(events, tz)
    if last is None:
        return []

    elapsed_h = minutes_between(now, last.time, tz) / 60.0
    remind_after = float(params.get("remind_after_hours", 4))
    if elapsed_h < remind_after:
        return []

    hand_over = params.get("hand_over_after_hours")
    if hand_over is not None and elapsed_h >= float(hand_over):
        return []

    if params.get("quiet_in_sleep_window", False) and settings.in_sleep_window(hour_of_day(now, tz)):
        return []

    next_break = to_utc(last.time, tz) + timedelta(hours=float(params.get("next_break_after_hours", 5)))
    time_str = f"{localize(next_break, tz):%H:%M} Uhr"
    overdue = to_utc(now, tz) >= next_break

    return [
        Anomaly(
            id=f"upcoming_break_{epoch_ms(now, tz)}",
            type=AnomalyType.UPCOMING_BREAK,
            kind="upcoming_break",
            severity=Severity.ALERT if overdue else Severity.INFO,
            title="Bald Gassi-Zeit",
            description=f"Nächster Spaziergang um ca. {time_str}",
            highlight_text=time_str if overdue else None,
            timestamp=now,
        )
    ]
