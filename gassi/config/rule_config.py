from __future__ import annotations

import copy
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml


DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "rules.yaml"


def _deep_merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base)
    for k, v in overrides.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = copy.deepcopy(v)
    return out


def _age_range(value: Any) -> Optional[Tuple[float, float]]:
    if value is None:
        return None
    lo, hi = value
    return float(lo), float(hi)


@dataclass(frozen=True)
class RuleConfig:
    raw: Dict[str, Any]

    def with_overrides(self, overrides: Dict[str, Any]) -> "RuleConfig":
        return RuleConfig(raw=_deep_merge(self.raw, overrides))

    def _section(self, key: str) -> Dict[str, Any]:
        section = self.raw.get(key, {}) if isinstance(self.raw, dict) else {}
        return section if isinstance(section, dict) else {}

    # -- time -----------------------------------------------------------

    def timezone(self) -> str:
        return str(self._section("time").get("timezone", "Europe/Berlin"))

    # -- growth curve ---------------------------------------------------

    def growth_knots(self) -> List[Tuple[float, float]]:
        knots = self._section("growth_curve").get("knots", {})
        return sorted((float(m), float(w)) for m, w in knots.items())

    def default_birthday(self) -> date:
        v = self._section("growth_curve").get("default_birthday", "2025-01-20")
        if isinstance(v, date):
            return v
        return date.fromisoformat(str(v))

    def days_per_month(self) -> float:
        return float(self._section("growth_curve").get("days_per_month", 30.44))

    def growth_tolerance(self) -> float:
        return float(self._section("growth_curve").get("tolerance", 0.05))

    def growth_model_age_range(self) -> Optional[Tuple[float, float]]:
        # Semantics: key missing -> [2, 18]; explicit null -> no range (clamp).
        gc = self._section("growth_curve")
        if "model_age_range" not in gc:
            return (2.0, 18.0)
        return _age_range(gc["model_age_range"])

    # -- interval statistics --------------------------------------------

    def interval_min_events(self) -> int:
        return int(self._section("interval_stats").get("min_events", 3))

    def interval_overnight_gap_minutes(self) -> float:
        return float(self._section("interval_stats").get("overnight_gap_minutes", 720))

    # -- rules ----------------------------------------------------------

    def dedup_include_kind(self) -> bool:
        return bool(self._section("dedup").get("include_kind", False))

    def rule(self, rule_id: str) -> Dict[str, Any]:
        return dict(self._section("rules").get(rule_id, {}) or {})

    def rule_enabled(self, rule_id: str) -> bool:
        # Semantics: default True, a rule is on unless switched off explicitly.
        return bool(self.rule(rule_id).get("enabled", True))

    def rule_params(self, rule_id: str) -> Dict[str, Any]:
        return dict(self.rule(rule_id).get("params", {}) or {})

    def rule_age_range(self, rule_id: str) -> Optional[Tuple[float, float]]:
        return _age_range(self.rule_params(rule_id).get("model_age_range"))

    # -- day plan -------------------------------------------------------

    def day_plan(self) -> Dict[str, Any]:
        return dict(self._section("day_plan"))

    def cluster_gap_hours(self) -> float:
        return float(self.day_plan().get("cluster_gap_hours", 1.5))

    def match_window_hours(self) -> float:
        return float(self.day_plan().get("match_window_hours", 2.0))

    def lookback_days(self, weekend: bool) -> int:
        lb = self.day_plan().get("lookback_days", {}) or {}
        if weekend:
            return int(lb.get("weekend", 60))
        return int(lb.get("weekday", 14))

    def ownership_pattern(self) -> str:
        return str(
            self.day_plan().get("ownership_pattern", r"(?:🐶\s*)?(\w+)\s+hat\s+Kalle")
        )


_cached: Optional[RuleConfig] = None


def load_rule_config(path: Path | None = None) -> RuleConfig:
    """
    Load rules.yaml.

    The packaged default is read once and cached; an explicit path is always
    read fresh and never replaces the cached default.
    """
    global _cached
    if path is None and _cached is not None:
        return _cached

    p = path or DEFAULT_CONFIG_PATH
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    cfg = RuleConfig(raw=data)
    if path is None:
        _cached = cfg
    return cfg
