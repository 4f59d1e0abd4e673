from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class SeriesPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    time: datetime
    label: str  # "d.M"
    value: float


class WeightPoint(BaseModel):
    """Weight reading with the growth-curve band; band fields are None outside the modelled ages."""

    model_config = ConfigDict(frozen=True)

    time: datetime
    label: str
    weight: float
    age_months: float
    expected: Optional[float] = None
    lower: Optional[float] = None
    upper: Optional[float] = None
    out_of_bounds: bool = False
