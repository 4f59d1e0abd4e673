from datetime import datetime
from typing import List, Sequence

from gassi.config.rule_config import RuleConfig
from gassi.models.event import Event, EventType
from gassi.models.settings import Settings
from gassi.schemas.anomaly import Anomaly, AnomalyType, Severity
from gassi.services.rules.common import de_num, newest_first, of_type

RULE_ID = "ph_deviation"


def _band(params: dict, key: str, low: float, high: float) -> tuple[float, float]:
    b = params.get(key, {}) if isinstance(params, dict) else {}
    return float(b.get("low", low)), float(b.get("high", high))


def eval_ph_deviation(
    events: Sequence[Event], now: datetime, settings: Settings, cfg: RuleConfig
) -> List[Anomaly]:
    params = cfg.rule_params(RULE_ID)
    normal_low, normal_high = _band(params, "normal_band", 6.5, 7.2)
    alert_low, alert_high = _band(params, "alert_band", 6.0, 7.5)

    def outside(v: float) -> bool:
        return v < normal_low or v > normal_high

    readings = newest_first(
        [e for e in of_type(events, EventType.PHWERT) if e.ph_value],
        cfg.timezone(),
    )
    if not readings:
        return []

    out: List[Anomaly] = []

    # Latest reading; unparseable values are skipped, not reported.
    latest = readings[0]
    value = latest.ph()
    if value is not None and outside(value):
        is_low = value < normal_low
        out.append(
            Anomaly(
                id=f"ph_deviation_{latest.id}",
                type=AnomalyType.PH_DEVIATION,
                kind="ph_deviation",
                severity=Severity.ALERT if value < alert_low or value > alert_high else Severity.WARNING,
                title="pH-Wert zu niedrig" if is_low else "pH-Wert zu hoch",
                description=(
                    f"Letzter Wert: {de_num(value)} "
                    f"(Normal: {de_num(normal_low)}-{de_num(normal_high)})"
                ),
                timestamp=latest.time,
                related_event_id=latest.id,
            )
        )

    n = int(params.get("persistent_readings", 3))
    parsed = [(e, e.ph()) for e in readings if e.ph() is not None][:n]
    if n > 0 and len(parsed) == n and all(outside(v) for _, v in parsed):
        first_event = parsed[0][0]
        out.append(
            Anomaly(
                id=f"ph_persistent_{first_event.id}",
                type=AnomalyType.PH_DEVIATION,
                kind="ph_persistent",
                severity=Severity.ALERT,
                title="pH-Wert dauerhaft auffällig",
                description=f"Die letzten {n} Messungen liegen außerhalb von {de_num(normal_low)}-{de_num(normal_high)}",
                timestamp=first_event.time,
                related_event_id=first_event.id,
            )
        )

    return out
