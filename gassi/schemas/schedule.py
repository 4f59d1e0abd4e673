from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class HistoricalBreak(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    hour: float = Field(ge=0, lt=24)
    is_poop: bool = Field(default=False, alias="isPoop")


class SlotCalendarEntry(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    summary: str
    time_str: str = Field(alias="timeStr")


class ScheduleSlot(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    avg_hour: float = Field(alias="avgHour")
    has_poop: bool = Field(default=False, alias="hasPoop")
    is_walk: bool = Field(default=True, alias="isWalk")
    ical_events: List[SlotCalendarEntry] = Field(default_factory=list, alias="icalEvents")
    is_estimate: bool = Field(default=False, alias="isEstimate")
    is_future_estimate: bool = Field(default=False, alias="isFutureEstimate")
    exact_time: Optional[str] = Field(default=None, alias="exactTime")
