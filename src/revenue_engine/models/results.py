from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from .common import CoverageBasis, CoverageStatus, DisplayMode, Severity


class FunnelResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    mqls: float
    sqls: float
    opportunities: float
    proposals: float
    wins: float
    monthly_new_arr: float
    new_arr_annual: float


class RetentionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    annual_churn_rate: float
    churned_arr_year: float
    expansion_arr_year: float


class ForecastPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    months: int
    projected_arr: float
    period_end: Optional[date] = None


class ForecastResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    projected_arr_3m: float
    projected_arr_6m: float
    projected_arr_12m: float
    churned_arr_year: float
    expansion_arr_year: float
    monthly_new_arr: float
    monthly_net_new_arr: float
    points: List[ForecastPoint]


class UnitEconomics(BaseModel):
    model_config = ConfigDict(frozen=True)

    monthly_gross_profit_per_customer: Optional[float]
    cac_payback_months: Optional[float]
    ltv: Optional[float]
    ltv_to_cac: Optional[float]


class PipelineCoverage(BaseModel):
    model_config = ConfigDict(frozen=True)

    basis: CoverageBasis
    required_pipeline: Optional[float]
    actual: Optional[float]
    status: CoverageStatus


class EfficiencyResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    cac_payback_months: Optional[float]
    ltv: Optional[float]
    ltv_to_cac: Optional[float]
    pipeline_coverage_actual: Optional[float]
    pipeline_coverage_status: CoverageStatus


class TargetProgress(BaseModel):
    model_config = ConfigDict(frozen=True)

    timeframe_months: float
    projected_arr_in_timeframe: float
    arr_gap: float
    arr_run_rate: float
    on_track: bool
    target_date: Optional[date] = None


class BenchmarkGap(BaseModel):
    model_config = ConfigDict(frozen=True)

    metric: str
    label: str
    mode: DisplayMode
    actual: Optional[float]
    benchmark: Optional[float]
    delta: Optional[float]
    delta_label: str
    lower_is_better: bool = False
    severity: Optional[Severity] = None


class Recommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    area: str
    severity: Severity
    message: str
    impact_arr: float = 0.0
    score: float = 0.0
    metric: Optional[str] = None
    actual: Optional[float] = None
    benchmark: Optional[float] = None


class DashboardSlice(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    data: Dict[str, float | str | list | dict | None]


class CalculatorResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    funnel: FunnelResult
    retention: RetentionResult
    forecast: ForecastResult
    efficiency: EfficiencyResult
    target: TargetProgress
    benchmark_gaps: List[BenchmarkGap]
    recommendations: List[Recommendation]
    priorities: List[Recommendation]
    other_findings: List[Recommendation]
    dashboards: List[DashboardSlice]
