# models/event.py
import enum
import math
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class EventType(str, enum.Enum):
    PIPI = "pipi"
    STUHLGANG = "stuhlgang"
    PHWERT = "phwert"
    GEWICHT = "gewicht"


BREAK_TYPES = frozenset({EventType.PIPI, EventType.STUHLGANG})


class Event(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    type: EventType
    time: datetime
    ph_value: Optional[str] = None
    weight_value: Optional[float] = None

    @field_validator("id")
    @classmethod
    def _id_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("id must not be blank")
        return v

    @property
    def is_break(self) -> bool:
        return self.type in BREAK_TYPES

    def ph(self) -> Optional[float]:
        """
        pH as float, parsed from the comma-decimal string ("6,8").
        Returns None when missing or unparseable.
        """
        if not self.ph_value:
            return None
        try:
            value = float(self.ph_value.strip().replace(",", "."))
        except ValueError:
            return None
        if math.isnan(value) or math.isinf(value):
            return None
        return value
