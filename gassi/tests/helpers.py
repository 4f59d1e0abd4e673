import copy
from datetime import datetime, timedelta

from gassi.config.rule_config import RuleConfig

# Naive datetimes are local wall time (Europe/Berlin). June keeps every
# test well away from DST switches.
NOW = datetime(2025, 6, 10, 15, 0)  # Tuesday


def hours_ago(h, ref=NOW):
    return ref - timedelta(hours=h)


def days_ago(d, ref=NOW):
    return ref - timedelta(days=d)


def flat_curve(cfg, kg):
    """Config copy whose growth curve is a constant `kg` for every age."""
    raw = copy.deepcopy(cfg.raw)
    raw["growth_curve"]["knots"] = {2: kg, 18: kg}
    return RuleConfig(raw=raw)
