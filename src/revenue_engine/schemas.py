from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, Field

from .models.results import CalculatorResult
from .models.scenario import RevenueEngineInput, ScenarioAdjustments


class CalculateRequest(BaseModel):
    input: RevenueEngineInput
    strict: bool = Field(default=False, description="Reject out-of-domain inputs instead of computing with them")


class CalculateResponse(BaseModel):
    result: CalculatorResult


class ValidationResponse(BaseModel):
    valid: bool
    issues: List[str]


class ScenarioCompareRequest(BaseModel):
    input: RevenueEngineInput
    scenarios: Dict[str, ScenarioAdjustments] = Field(..., description="Scenario adjustments keyed by label")


class ScenarioOutcome(BaseModel):
    label: str
    scenario: ScenarioAdjustments
    new_arr_annual: float
    projected_arr_12m: float
    uplift_vs_baseline: float


class ScenarioCompareResponse(BaseModel):
    outcomes: List[ScenarioOutcome]
