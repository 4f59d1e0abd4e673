# models/settings.py
import enum
import re
from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_HHMM = re.compile(r"^(\d{2}):(\d{2})$")


class CountdownMode(str, enum.Enum):
    COUNT_UP = "count_up"
    COUNT_DOWN = "count_down"


class Settings(BaseModel):
    """
    Settings snapshot, owned by the caller.

    Passed explicitly into every function that needs it; the core never
    caches or mutates it.
    """

    model_config = ConfigDict(frozen=True)

    morning_walk_time: str = "08:00"
    walk_interval_hours: float = Field(default=4, gt=0)
    sleep_start_hour: float = 22
    sleep_end_hour: float = 7
    countdown_mode: CountdownMode = CountdownMode.COUNT_UP
    birthday: Optional[date] = None

    @field_validator("morning_walk_time")
    @classmethod
    def _valid_clock(cls, v: str) -> str:
        m = _HHMM.match(v)
        if not m or int(m.group(1)) > 23 or int(m.group(2)) > 59:
            raise ValueError(f"morning_walk_time must be HH:MM, got {v!r}")
        return v

    @field_validator("sleep_start_hour", "sleep_end_hour")
    @classmethod
    def _half_hour_grid(cls, v: float) -> float:
        if v < 0 or v > 23.5 or not float(v * 2).is_integer():
            raise ValueError(f"sleep hours must be 0-23.5 in half-hour steps, got {v}")
        return v

    def in_sleep_window(self, hour: float) -> bool:
        start, end = self.sleep_start_hour, self.sleep_end_hour

        # Window crosses midnight (e.g. 22:00 -> 07:00)
        if start > end:
            return hour >= start or hour < end

        return start <= hour < end
