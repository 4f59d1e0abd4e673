from datetime import datetime, timedelta
from typing import List, Sequence

from gassi.config.rule_config import RuleConfig
from gassi.models.event import Event
from gassi.models.settings import Settings
from gassi.schemas.anomaly import Anomaly, AnomalyType, Severity
from gassi.services.rules.common import of_type
from gassi.util.time import epoch_ms, to_utc

RULE_ID = "pattern_change"


def eval_pattern_change(
    events: Sequence[Event], now: datetime, settings: Settings, cfg: RuleConfig
) -> List[Anomaly]:
    """
    Week-over-week walk frequency.

    current window:  (now - 7d, now]
    previous window: (now - 14d, now - 7d]
    Both must be non-zero.
    """
    tz = cfg.timezone()
    params = cfg.rule_params(RULE_ID)
    window = timedelta(days=int(params.get("window_days", 7)))
    threshold = float(params.get("change_fraction", 0.5))

    now_utc = to_utc(now, tz)
    cur_start = now_utc - window
    prev_start = cur_start - window

    current = previous = 0
    for e in of_type(events, params.get("event_type", "pipi")):
        t = to_utc(e.time, tz)
        if cur_start < t <= now_utc:
            current += 1
        elif prev_start < t <= cur_start:
            previous += 1

    if current == 0 or previous == 0:
        return []

    change = (current - previous) / previous
    pct = f"{abs(change) * 100:.0f}%"
    common = dict(
        id=f"pattern_change_{epoch_ms(now, tz)}",
        type=AnomalyType.PATTERN_CHANGE,
        timestamp=now,
    )

    if change > threshold:
        return [
            Anomaly(
                **common,
                kind="more_walks",
                severity=Severity.INFO,
                title="Mehr Gassi-Runden",
                description=f"{current} Pipi-Pausen diese Woche, {previous} in der Vorwoche (+{pct})",
            )
        ]
    if change < -threshold:
        return [
            Anomaly(
                **common,
                kind="fewer_walks",
                severity=Severity.WARNING,
                title="Weniger Gassi-Runden",
                description=f"{current} Pipi-Pausen diese Woche, {previous} in der Vorwoche (-{pct})",
            )
        ]
    return []
