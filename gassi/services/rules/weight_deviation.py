from datetime import datetime
from typing import List, Sequence

from gassi.config.rule_config import RuleConfig
from gassi.models.event import Event, EventType
from gassi.models.settings import Settings
from gassi.schemas.anomaly import Anomaly, AnomalyType, Severity
from gassi.services.growth_curve import GrowthCurve, age_in_months, deviation
from gassi.services.rules.common import de_num, newest_first, of_type
from gassi.util.time import localize, minutes_between

RULE_ID = "weight_deviation"


def _growth_deviation(latest: Event, settings: Settings, cfg: RuleConfig, params: dict) -> List[Anomaly]:
    tz = cfg.timezone()
    curve = GrowthCurve.from_config(cfg)
    birthday = settings.birthday or cfg.default_birthday()

    weight = float(latest.weight_value)
    age = age_in_months(localize(latest.time, tz), birthday, cfg.days_per_month())
    dev = deviation(weight, age, curve, model_age_range=cfg.rule_age_range(RULE_ID))
    if dev is None:
        return []

    warning_fraction = float(params.get("warning_fraction", 0.05))
    alert_fraction = float(params.get("alert_fraction", 0.10))
    if abs(dev) <= warning_fraction:
        return []

    expected = curve.expected_weight(age)
    is_under = weight < expected
    return [
        Anomaly(
            id=f"weight_deviation_{latest.id}",
            type=AnomalyType.WEIGHT_DEVIATION,
            kind="weight_deviation",
            severity=Severity.ALERT if abs(dev) > alert_fraction else Severity.WARNING,
            title="Untergewicht" if is_under else "Übergewicht",
            description=(
                f"Aktuell {de_num(weight)}kg (Ideal: {de_num(expected)}kg, "
                f"{'-' if is_under else '+'}{abs(dev) * 100:.0f}%)"
            ),
            timestamp=latest.time,
            related_event_id=latest.id,
        )
    ]


def _rapid_change(latest: Event, previous: Event, cfg: RuleConfig, params: dict) -> List[Anomaly]:
    days = minutes_between(latest.time, previous.time, cfg.timezone()) / (60.0 * 24.0)
    window_days = float(params.get("rate_window_days", 14))
    if not (0 < days <= window_days):
        return []

    change = float(latest.weight_value) - float(previous.weight_value)
    per_week = abs(change) / (days / 7.0)
    days_label = int(days + 0.5)

    if change < 0 and per_week > float(params.get("max_loss_kg_per_week", 0.5)):
        return [
            Anomaly(
                id=f"weight_loss_{latest.id}",
                type=AnomalyType.WEIGHT_DEVIATION,
                kind="weight_loss",
                severity=Severity.ALERT,
                title="Schneller Gewichtsverlust",
                description=f"{de_num(abs(change))}kg weniger in {days_label} Tagen",
                timestamp=latest.time,
                related_event_id=latest.id,
            )
        ]

    if change > 0 and per_week > float(params.get("max_gain_kg_per_week", 1.5)):
        return [
            Anomaly(
                id=f"weight_gain_{latest.id}",
                type=AnomalyType.WEIGHT_DEVIATION,
                kind="weight_gain",
                severity=Severity.WARNING,
                title="Schnelle Gewichtszunahme",
                description=f"{de_num(change)}kg mehr in {days_label} Tagen",
                timestamp=latest.time,
                related_event_id=latest.id,
            )
        ]

    return []


def eval_weight_deviation(
    events: Sequence[Event], now: datetime, settings: Settings, cfg: RuleConfig
) -> List[Anomaly]:
    params = cfg.rule_params(RULE_ID)
    weights = newest_first(
        [e for e in of_type(events, EventType.GEWICHT) if e.weight_value],
        cfg.timezone(),
    )
    if not weights:
        return []

    out = _growth_deviation(weights[0], settings, cfg, params)
    if len(weights) >= 2:
        out.extend(_rapid_change(weights[0], weights[1], cfg, params))
    return out
