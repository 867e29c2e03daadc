from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SalesActuals(BaseModel):
    model_config = ConfigDict(frozen=True)

    opp_to_proposal: float = Field(..., description="% opportunity -> proposal")
    proposal_to_win: float = Field(..., description="% proposal -> won")
    asp: float = Field(..., description="Annual contract value per new customer")
    sales_cycle_days: int = 90
    pipeline_coverage_target: float = Field(3.0, description="Required pipeline multiple, e.g. 3x")
    open_pipeline_value: float = Field(0.0, description="Value of open opportunities")


class SalesBenchmarks(BaseModel):
    model_config = ConfigDict(frozen=True)

    opp_to_proposal: float = 50.0
    proposal_to_win: float = 25.0
    asp: float = 50000.0
