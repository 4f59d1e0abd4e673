from datetime import datetime
from typing import List, Sequence

from gassi.config.rule_config import RuleConfig
from gassi.models.event import Event
from gassi.models.settings import Settings
from gassi.schemas.anomaly import Anomaly, AnomalyType, Severity
from gassi.services.interval_stats import average_interval_minutes
from gassi.services.rules.common import de_duration, latest_break
from gassi.util.time import localize, minutes_between

RULE_ID = "missed_break"


def _in_waking_window(hour: int, params: dict) -> bool:
    w = params.get("waking_window", {}) if isinstance(params, dict) else {}
    start = int(w.get("start_hour", 8))
    end = int(w.get("end_hour", 22))
    # both ends inclusive
    return start <= hour <= end


def eval_missed_break(
    events: Sequence[Event], now: datetime, settings: Settings, cfg: RuleConfig
) -> List[Anomaly]:
    """
    Two independent questions about the time since the last break:

    - overdue in absolute terms (missed_break, waking hours only)
    - unusual relative to this dog's own rhythm (pattern_change/info)

    Both may fire for the same gap.
    """
    tz = cfg.timezone()
    params = cfg.rule_params(RULE_ID)

    last = latest_break(events, tz)
    if last is None:
        return []

    elapsed_min = minutes_between(now, last.time, tz)
    elapsed_h = elapsed_min / 60.0
    now_local = localize(now, tz)

    out: List[Anomaly] = []

    warning_after = float(params.get("warning_after_hours", 6))
    alert_after = float(params.get("alert_after_hours", 8))
    if _in_waking_window(now_local.hour, params) and elapsed_h >= warning_after:
        out.append(
            Anomaly(
                id=f"missed_break_{last.id}",
                type=AnomalyType.MISSED_BREAK,
                kind="missed_break",
                severity=Severity.ALERT if elapsed_h >= alert_after else Severity.WARNING,
                title="Gassi überfällig",
                description=f"Letzte Pause vor {de_duration(elapsed_min)}",
                timestamp=now,
                related_event_id=last.id,
            )
        )

    avg = average_interval_minutes(events, params.get("interval_event_type", "pipi"), cfg=cfg)
    factor = float(params.get("unusual_gap_factor", 2.0))
    min_hours = float(params.get("unusual_gap_min_hours", 4))
    if avg is not None and elapsed_min > factor * avg and elapsed_h >= min_hours:
        out.append(
            Anomaly(
                id=f"unusual_gap_{last.id}",
                type=AnomalyType.PATTERN_CHANGE,
                kind="unusual_gap",
                severity=Severity.INFO,
                title="Ungewöhnlich lange Pause",
                description=(
                    f"Seit {de_duration(elapsed_min)} keine Pause, "
                    f"sonst im Schnitt alle {de_duration(avg)}"
                ),
                timestamp=now,
                related_event_id=last.id,
            )
        )

    return out
