# services/trends.py
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from gassi.config.rule_config import RuleConfig, load_rule_config
from gassi.models.event import Event, EventType
from gassi.models.settings import Settings
from gassi.schemas.trend import SeriesPoint, WeightPoint
from gassi.services.growth_curve import GrowthCurve, age_in_months, is_out_of_bounds
from gassi.services.interval_stats import average_interval_hours, interval_series
from gassi.util.time import localize, to_utc


def _label(ev: Event, tz: str) -> str:
    local = localize(ev.time, tz)
    return f"{local.day}.{local.month}"


def weight_trend(
    events: Sequence[Event],
    settings: Settings,
    cfg: RuleConfig | None = None,
) -> List[WeightPoint]:
    """
    Weight readings (oldest first) with the expected band from the growth
    curve. Ages outside growth_curve.model_age_range get no band and are
    never flagged.
    """
    cfg = cfg or load_rule_config()
    tz = cfg.timezone()
    curve = GrowthCurve.from_config(cfg)
    birthday = settings.birthday or cfg.default_birthday()
    tolerance = cfg.growth_tolerance()
    age_range = cfg.growth_model_age_range()

    readings = sorted(
        (e for e in events if e.type == EventType.GEWICHT and e.weight_value),
        key=lambda e: to_utc(e.time, tz),
    )

    out: List[WeightPoint] = []
    for e in readings:
        weight = float(e.weight_value)
        at = localize(e.time, tz)
        age = age_in_months(at, birthday, cfg.days_per_month())
        in_model = age_range is None or age_range[0] <= age <= age_range[1]

        expected = lower = upper = None
        if in_model:
            expected = curve.expected_weight(age)
            lower, upper = curve.bounds(age, tolerance)

        out.append(
            WeightPoint(
                time=e.time,
                label=_label(e, tz),
                weight=weight,
                age_months=age,
                expected=expected,
                lower=lower,
                upper=upper,
                out_of_bounds=is_out_of_bounds(
                    weight,
                    at,
                    birthday,
                    curve,
                    tolerance=tolerance,
                    model_age_range=age_range,
                    days_per_month=cfg.days_per_month(),
                ),
            )
        )
    return out


def ph_trend(events: Sequence[Event], cfg: RuleConfig | None = None) -> List[SeriesPoint]:
    cfg = cfg or load_rule_config()
    tz = cfg.timezone()

    readings = sorted(
        (e for e in events if e.type == EventType.PHWERT and e.ph() is not None),
        key=lambda e: to_utc(e.time, tz),
    )
    return [SeriesPoint(time=e.time, label=_label(e, tz), value=e.ph()) for e in readings]


def interval_trend(
    events: Sequence[Event],
    event_type: EventType | str,
    cfg: RuleConfig | None = None,
) -> Tuple[List[SeriesPoint], Optional[float]]:
    """Gap series in hours plus its average ("Ø 3,2 h" in the chart header)."""
    series = interval_series(events, event_type, cfg=cfg)
    return series, average_interval_hours(series)
