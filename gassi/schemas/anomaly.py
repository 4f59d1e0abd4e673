import enum
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AnomalyType(str, enum.Enum):
    MISSED_BREAK = "missed_break"
    UPCOMING_BREAK = "upcoming_break"
    WEIGHT_DEVIATION = "weight_deviation"
    PH_DEVIATION = "ph_deviation"
    PATTERN_CHANGE = "pattern_change"


class Severity(str, enum.Enum):
    INFO = "info"
    WARNING = "warning"
    ALERT = "alert"

    @property
    def rank(self) -> int:
        # Sort precedence: alert first
        return SEVERITY_RANK[self]


SEVERITY_RANK = {Severity.ALERT: 0, Severity.WARNING: 1, Severity.INFO: 2}


class Anomaly(BaseModel):
    """
    One alert for the UI. Built fresh on every detection run, never persisted.

    `kind` tells rules apart that share a type (e.g. `weight_loss` vs
    `weight_deviation`); it only takes part in dedup when configured.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    type: AnomalyType
    kind: str
    severity: Severity
    title: str
    description: str
    highlight_text: Optional[str] = Field(default=None, alias="highlightText")
    timestamp: datetime
    related_event_id: Optional[str] = Field(default=None, alias="relatedEventId")

    def dedup_key(self, include_kind: bool = False) -> tuple[str, ...]:
        key = (self.type.value, self.related_event_id or "general")
        if include_kind:
            return key + (self.kind,)
        return key
