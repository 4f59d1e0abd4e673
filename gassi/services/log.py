from __future__ import annotations

import json
import logging
import os
import sys
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any


LOG_LEVEL_ENV = "GASSI_LOG_LEVEL"

MAX_STR = 300
MAX_ITEMS = 20
MAX_DEPTH = 2

# Health readings and calendar text stay out of the logs.
REDACTED_KEYS = frozenset(
    {
        "events",
        "ph_value",
        "weight_value",
        "description",
        "summary",
        "location",
    }
)

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def get_logger(name: str) -> logging.Logger:
    """
    Named logger writing bare messages (one JSON object per line) to stdout.
    Level comes from GASSI_LOG_LEVEL, default INFO.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        h = logging.StreamHandler(sys.stdout)
        h.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(h)
        level = os.getenv(LOG_LEVEL_ENV, "INFO").upper()
        logger.setLevel(_LEVELS.get(level, logging.INFO))
        logger.propagate = False
    return logger


def _clean(v: Any, depth: int = 0) -> Any:
    if v is None or isinstance(v, (bool, int, float)):
        return v
    if isinstance(v, Enum):
        return v.value
    if isinstance(v, (datetime, date)):
        return v.isoformat()
    if depth >= MAX_DEPTH:
        return "<nested>"
    if isinstance(v, dict):
        return {
            str(k): "<redacted>" if str(k).lower() in REDACTED_KEYS else _clean(x, depth + 1)
            for k, x in v.items()
        }
    if isinstance(v, (list, tuple, set, frozenset)):
        return [_clean(x, depth + 1) for x in list(v)[:MAX_ITEMS]]

    s = str(v)
    return s if len(s) <= MAX_STR else s[:MAX_STR] + "..."


def log_event(
    logger: logging.Logger,
    *,
    level: str,
    event: str,
    msg: str,
    **fields: Any,
) -> None:
    """
    Emit one structured line: ts, level, component, event, msg + fields.
    Redacted keys are dropped at the top level and masked when nested.
    """
    lvl = _LEVELS.get((level or "").upper(), logging.INFO)
    if not logger.isEnabledFor(lvl):
        return

    payload: dict[str, Any] = {
        "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "level": logging.getLevelName(lvl),
        "component": logger.name,
        "event": event,
        "msg": msg,
    }
    payload.update(
        {k: _clean(v) for k, v in fields.items() if k.lower() not in REDACTED_KEYS}
    )

    logger.log(lvl, json.dumps(payload, ensure_ascii=False, separators=(",", ":")))
