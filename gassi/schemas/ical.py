from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ICalEvent(BaseModel):
    # Resolved calendar entry; recurrence is expanded by the feed collaborator.
    model_config = ConfigDict(frozen=True)

    uid: str
    summary: str = ""
    dtstart: datetime
    dtend: Optional[datetime] = None
    location: Optional[str] = None
    description: Optional[str] = None
    rrule: Optional[str] = None


class CareOwnership(BaseModel):
    """Who has the dog on a given day, from an "X hat Kalle" entry."""

    model_config = ConfigDict(frozen=True)

    person: str
    summary: str
    start: datetime
    end: datetime
