from __future__ import annotations

from datetime import datetime

from gassi.services.log import get_logger, log_event

logger = get_logger("rule_engine")


# ---------------------------------------------------------------------------
# Rule engine (registry) - single source of truth for anomaly detection
# ---------------------------------------------------------------------------

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from gassi.config.rule_config import RuleConfig, load_rule_config
from gassi.models.event import Event
from gassi.models.settings import Settings
from gassi.schemas.anomaly import Anomaly
from gassi.util.time import to_utc

from gassi.services.rules.missed_break import eval_missed_break
from gassi.services.rules.upcoming_break import eval_upcoming_break
from gassi.services.rules.weight_deviation import eval_weight_deviation
from gassi.services.rules.ph_deviation import eval_ph_deviation
from gassi.services.rules.pattern_change import eval_pattern_change


@dataclass(frozen=True)
class RuleSpec:
    """
    Registry entry for one rule family.

    - rule_id: "missed_break", "weight_deviation", ...
    - eval_fn: pure function (events, now, settings, cfg) -> list of candidate Anomaly
    - description: short human description (docs/debugging)
    """
    rule_id: str
    eval_fn: Callable[[Sequence[Event], datetime, Settings, RuleConfig], List[Anomaly]]
    description: str


# Registry principle:
# - New rules are added here (once) and picked up by detect_anomalies.
RULE_REGISTRY: Dict[str, RuleSpec] = {
    "missed_break": RuleSpec(
        rule_id="missed_break",
        eval_fn=eval_missed_break,
        description="Keine Pause seit Stunden / ungewöhnlich lange Pause",
    ),
    "upcoming_break": RuleSpec(
        rule_id="upcoming_break",
        eval_fn=eval_upcoming_break,
        description="Erinnerung an den nächsten Spaziergang",
    ),
    "weight_deviation": RuleSpec(
        rule_id="weight_deviation",
        eval_fn=eval_weight_deviation,
        description="Gewicht weicht von der Wachstumskurve ab oder ändert sich schnell",
    ),
    "ph_deviation": RuleSpec(
        rule_id="ph_deviation",
        eval_fn=eval_ph_deviation,
        description="pH-Wert außerhalb des Normalbereichs",
    ),
    "pattern_change": RuleSpec(
        rule_id="pattern_change",
        eval_fn=eval_pattern_change,
        description="Pipi-Häufigkeit ändert sich gegenüber der Vorwoche",
    ),
}


def evaluate_rules(
    events: Sequence[Event],
    now: datetime,
    settings: Settings | None = None,
    cfg: RuleConfig | None = None,
    rule_ids: list[str] | None = None,
) -> list[Anomaly]:
    """
    Evaluates rules via the registry and returns unranked candidates.

    - rule_ids: if set, evaluate exactly these (enabled flag is ignored);
      otherwise every rule with rules.<id>.enabled != false
    - candidates are concatenated in registry order (rule_ids order if given)
    """
    settings = settings or Settings()
    cfg = cfg or load_rule_config()

    if rule_ids is None:
        selected = active_rule_ids(cfg)
    else:
        selected = list(rule_ids)

    candidates: list[Anomaly] = []
    for rid in selected:
        spec = RULE_REGISTRY.get(rid)
        if spec is None:
            # Unknown rule id; ignore
            log_event(logger, level="WARN", event="rule_unknown", msg="unknown rule id ignored", rule_id=rid)
            continue
        candidates.extend(spec.eval_fn(events, now, settings, cfg))

    return candidates


def rank_anomalies(anomalies: Sequence[Anomaly], tz: str) -> list[Anomaly]:
    """Severity first (alert, warning, info), then newest first. Stable."""
    by_time = sorted(anomalies, key=lambda a: to_utc(a.timestamp, tz), reverse=True)
    return sorted(by_time, key=lambda a: a.severity.rank)


def deduplicate(anomalies: Sequence[Anomaly], include_kind: bool = False) -> list[Anomaly]:
    """
    Keep the first anomaly per dedup key; input is expected ranked, so the
    survivor is the highest-ranked one.
    """
    seen: set[tuple[str, ...]] = set()
    out: list[Anomaly] = []
    for a in anomalies:
        key = a.dedup_key(include_kind)
        if key in seen:
            continue
        seen.add(key)
        out.append(a)
    return out


def detect_anomalies(
    events: Sequence[Event],
    now: datetime,
    settings: Settings | None = None,
    cfg: RuleConfig | None = None,
    rule_ids: list[str] | None = None,
) -> list[Anomaly]:
    """
    Full detection pass: evaluate -> rank -> deduplicate.

    Pure with respect to its inputs; safe to call on every refresh.
    An empty event list yields an empty result.
    """
    cfg = cfg or load_rule_config()

    candidates = evaluate_rules(events, now, settings=settings, cfg=cfg, rule_ids=rule_ids)
    ranked = rank_anomalies(candidates, cfg.timezone())
    result = deduplicate(ranked, include_kind=cfg.dedup_include_kind())

    log_event(
        logger,
        level="DEBUG",
        event="detect_anomalies",
        msg="detection pass done",
        event_count=len(events),
        candidates=len(candidates),
        kept=len(result),
        dropped=len(ranked) - len(result),
    )
    return result


def active_rule_ids(cfg: Optional[RuleConfig] = None) -> list[str]:
    cfg = cfg or load_rule_config()
    return [rid for rid in RULE_REGISTRY if cfg.rule_enabled(rid)]
