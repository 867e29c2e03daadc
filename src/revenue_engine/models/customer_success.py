from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CsActuals(BaseModel):
    model_config = ConfigDict(frozen=True)

    monthly_churn_rate: float = Field(..., description="% of ARR lost per month")
    expansion_rate: float = Field(0.0, description="% of starting ARR added per year")
    nrr: float = Field(100.0, description="Net revenue retention %, informational")
    gross_margin: float = Field(..., description="Gross margin %")


class CsBenchmarks(BaseModel):
    model_config = ConfigDict(frozen=True)

    monthly_churn_rate: float = 1.0
    expansion_rate: float = 20.0
    nrr: float = 120.0
    gross_margin: float = 75.0
