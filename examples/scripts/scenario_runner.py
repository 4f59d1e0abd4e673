#!/usr/bin/env python3
"""
Offline scenario runner for the anomaly detector.

A scenario file fixes `now`, the event list and optionally settings and
config overrides, then lists the anomalies it expects:

    expect:
      pass_condition: contains | exact | ordered
      anomalies:
        - type: missed_break
          severity: warning
          description_contains: "7h"

usage: scenario_runner.py examples/scenarios/*.yaml [--show]
"""
from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from gassi.config.rule_config import load_rule_config
from gassi.models.event import Event
from gassi.models.settings import Settings
from gassi.services.rule_engine import detect_anomalies

REQUIRED_KEYS = ("id", "now", "events", "expect")
PASS_CONDITIONS = ("contains", "exact", "ordered")
# Expectation keys compared verbatim against the serialized anomaly
EXACT_KEYS = ("type", "severity", "kind", "title", "related_event_id")


@dataclass
class Scenario:
    id: str
    now: datetime
    events: List[Event]
    expect: Dict[str, Any]
    path: Path
    description: str = ""
    settings: Settings = field(default_factory=Settings)
    config: Dict[str, Any] = field(default_factory=dict)


def _read(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return yaml.safe_load(text) or {}
    if suffix == ".json":
        return json.loads(text)
    raise ValueError(f"{path}: scenario files must be .yaml, .yml or .json")


def _load_scenario(path: Path) -> Scenario:
    data = _read(path)
    missing = [k for k in REQUIRED_KEYS if k not in data]
    if missing:
        raise ValueError(f"{path}: missing {', '.join(missing)}")

    now = data["now"]
    if not isinstance(now, datetime):
        now = datetime.fromisoformat(str(now))

    return Scenario(
        id=str(data["id"]),
        now=now,
        events=[Event.model_validate(ev) for ev in data["events"]],
        expect=dict(data["expect"]),
        path=path,
        description=str(data.get("description") or "").strip(),
        settings=Settings.model_validate(data.get("settings") or {}),
        config=dict(data.get("config") or {}),
    )


def _detect(scenario: Scenario) -> List[Dict[str, Any]]:
    cfg = load_rule_config()
    if scenario.config:
        cfg = cfg.with_overrides(scenario.config)
    found = detect_anomalies(scenario.events, scenario.now, settings=scenario.settings, cfg=cfg)
    return [a.model_dump(mode="json") for a in found]


def _mismatch(exp: Dict[str, Any], act: Dict[str, Any]) -> Optional[str]:
    """First difference between an expected entry and an anomaly, or None."""
    for key in EXACT_KEYS:
        if key in exp and str(exp[key]) != str(act.get(key)):
            return f"{key}: expected {exp[key]!r}, got {act.get(key)!r}"

    needle = exp.get("description_contains")
    if needle is not None and str(needle) not in str(act.get("description") or ""):
        return f"description does not contain {needle!r}"
    return None


def _check_ordered(expected: List[Dict[str, Any]], actual: List[Dict[str, Any]]) -> List[str]:
    errors = []
    if len(expected) != len(actual):
        errors.append(f"expected {len(expected)} anomalies in order, got {len(actual)}")
    for pos, (exp, act) in enumerate(zip(expected, actual)):
        reason = _mismatch(exp, act)
        if reason:
            errors.append(f"position {pos}: {reason}")
    return errors


def _check_unordered(
    expected: List[Dict[str, Any]], actual: List[Dict[str, Any]], exact: bool
) -> List[str]:
    # Each expected entry claims the first still-free anomaly it matches
    free = list(range(len(actual)))
    errors = []
    for n, exp in enumerate(expected):
        hit = next((i for i in free if _mismatch(exp, actual[i]) is None), None)
        if hit is None:
            errors.append(f"expected anomaly {n} not found: {json.dumps(exp, ensure_ascii=False)}")
        else:
            free.remove(hit)

    if exact and not errors and free:
        leftover = [actual[i]["id"] for i in free]
        errors.append(f"unexpected anomalies: {', '.join(leftover)}")
    return errors


def _evaluate_expectations(scenario: Scenario, actual: List[Dict[str, Any]]) -> List[str]:
    condition = scenario.expect.get("pass_condition", "contains")
    expected = scenario.expect.get("anomalies") or []

    if condition not in PASS_CONDITIONS:
        return [f"unknown pass_condition {condition!r} (one of {', '.join(PASS_CONDITIONS)})"]
    if condition == "ordered":
        return _check_ordered(expected, actual)
    return _check_unordered(expected, actual, exact=condition == "exact")


def run_scenario(path: Path) -> Tuple[bool, List[str], List[Dict[str, Any]]]:
    scenario = _load_scenario(path)
    actual = _detect(scenario)
    errors = _evaluate_expectations(scenario, actual)
    return not errors, errors, actual


def _fail_report(path: Path, errors: List[str], actual: List[Dict[str, Any]]) -> str:
    out = [f"FAIL {path}"]
    out += [f"  - {e}" for e in errors]
    out.append("  anomalies returned:")
    out += ["    " + line for line in json.dumps(actual, indent=2, ensure_ascii=False).splitlines()]
    return "\n".join(out) + "\n"


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Run anomaly scenarios and check their expectations")
    ap.add_argument("scenarios", nargs="+", type=Path, help="scenario files (.yaml/.yml/.json)")
    ap.add_argument("--show", action="store_true", help="print the anomalies of passing scenarios too")
    args = ap.parse_args(argv)

    failed = 0
    for path in args.scenarios:
        ok, errors, actual = run_scenario(path)
        if not ok:
            failed += 1
            print(_fail_report(path, errors, actual), file=sys.stderr)
            continue
        print(f"PASS {path.stem}")
        if args.show:
            print(json.dumps(actual, indent=2, ensure_ascii=False))

    print(f"{len(args.scenarios) - failed}/{len(args.scenarios)} scenarios passed")
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
