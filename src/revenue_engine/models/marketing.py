from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class MarketingActuals(BaseModel):
    model_config = ConfigDict(frozen=True)

    traffic: float = Field(0.0, description="Monthly sessions, informational")
    leads: float = Field(..., description="Leads per month")
    mql_rate: float = Field(..., description="% lead -> MQL")
    sql_rate: float = Field(..., description="% MQL -> SQL")
    opp_rate: float = Field(..., description="% SQL -> opportunity")
    blended_cac: float = Field(..., description="Acquisition cost per new customer")


class MarketingBenchmarks(BaseModel):
    model_config = ConfigDict(frozen=True)

    mql_rate: float = 25.0
    sql_rate: float = 40.0
    opp_rate: float = 35.0
    blended_cac: float = 25000.0
