from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from gassi.models.settings import CountdownMode


class TimerStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    countdown_mode: CountdownMode
    walk_interval_hours: float
    last_walk_time: Optional[datetime] = None
    elapsed_minutes: int = 0
    remaining_minutes: int = 0
    display_text: str
    is_overdue: bool = False
