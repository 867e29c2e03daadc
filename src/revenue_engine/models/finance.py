from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FinanceBaseline(BaseModel):
    model_config = ConfigDict(frozen=True)

    current_arr: float
    target_arr: float
    timeframe_weeks: float = Field(52.0, description="Weeks available to reach target_arr")
    as_of: Optional[date] = Field(default=None, description="Anchors forecast horizons to calendar dates")
