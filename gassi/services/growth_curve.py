# services/growth_curve.py
from __future__ import annotations

from bisect import bisect_right
from datetime import date, datetime, time
from typing import Iterable, Optional, Sequence, Tuple

from gassi.config.rule_config import RuleConfig, load_rule_config

DAYS_PER_MONTH = 30.44


class GrowthCurve:
    """
    Piecewise-linear expected weight by age.

    - below the first knot: first weight
    - at/above the last knot: last weight
    - between knots: linear interpolation by age fraction
    """

    def __init__(self, knots: Iterable[Tuple[float, float]]):
        pts = sorted((float(m), float(w)) for m, w in knots)
        if not pts:
            raise ValueError("growth curve needs at least one knot")
        self._months = [m for m, _ in pts]
        self._weights = [w for _, w in pts]

    @classmethod
    def from_config(cls, cfg: RuleConfig | None = None) -> "GrowthCurve":
        cfg = cfg or load_rule_config()
        return cls(cfg.growth_knots())

    @property
    def age_range(self) -> Tuple[float, float]:
        return self._months[0], self._months[-1]

    def expected_weight(self, age_months: float) -> float:
        months, weights = self._months, self._weights
        if age_months <= months[0]:
            return weights[0]
        if age_months >= months[-1]:
            return weights[-1]

        i = bisect_right(months, age_months)
        m0, m1 = months[i - 1], months[i]
        w0, w1 = weights[i - 1], weights[i]
        progress = (age_months - m0) / (m1 - m0)
        return w0 + progress * (w1 - w0)

    def bounds(self, age_months: float, tolerance: float) -> Tuple[float, float]:
        expected = self.expected_weight(age_months)
        return expected * (1 - tolerance), expected * (1 + tolerance)


def age_in_months(
    at: datetime | date,
    birthday: date,
    days_per_month: float = DAYS_PER_MONTH,
) -> float:
    """
    Canonical age definition: elapsed days since birth / average month length.

    `at` is read as local wall time; callers localize aware values first.
    """
    if isinstance(at, datetime):
        at_dt = at.replace(tzinfo=None)
    else:
        at_dt = datetime.combine(at, time.min)
    born = datetime.combine(birthday, time.min)
    return (at_dt - born).total_seconds() / 86400.0 / days_per_month


def _in_range(age: float, model_age_range: Optional[Sequence[float]]) -> bool:
    if model_age_range is None:
        return True
    lo, hi = model_age_range
    return lo <= age <= hi


def deviation(
    weight: float,
    age_months: float,
    curve: GrowthCurve,
    model_age_range: Optional[Sequence[float]] = None,
) -> Optional[float]:
    """
    Signed deviation fraction (weight - expected) / expected.

    Returns None when a model range is given and the age falls outside it.
    """
    if not _in_range(age_months, model_age_range):
        return None
    expected = curve.expected_weight(age_months)
    return (weight - expected) / expected


def is_out_of_bounds(
    weight: float,
    at: datetime | date,
    birthday: date,
    curve: GrowthCurve,
    tolerance: float = 0.05,
    model_age_range: Optional[Sequence[float]] = None,
    days_per_month: float = DAYS_PER_MONTH,
) -> bool:
    """True iff the weight is more than `tolerance` off the curve at that date."""
    age = age_in_months(at, birthday, days_per_month)
    dev = deviation(weight, age, curve, model_age_range=model_age_range)
    if dev is None:
        return False
    return abs(dev) > tolerance
