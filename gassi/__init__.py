"""
gassi - break, weight and pH tracking core.

Pure computation over an in-memory event list: anomaly alerts, walk timer,
trend series and the weekly walk plan.
"""

from gassi.services.rule_engine import detect_anomalies
from gassi.services.day_plan import build_day_slots, build_week_slots, collect_history
from gassi.services.timer import timer_status

__all__ = [
    "detect_anomalies",
    "build_day_slots",
    "build_week_slots",
    "collect_history",
    "timer_status",
]
