from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .common import CurrencySettings, EngineSettings
from .customer_success import CsActuals, CsBenchmarks
from .finance import FinanceBaseline
from .marketing import MarketingActuals, MarketingBenchmarks
from .sales import SalesActuals, SalesBenchmarks


class ScenarioAdjustments(BaseModel):
    model_config = ConfigDict(frozen=True)

    conv_lift_pct: float = Field(0.0, description="% lift applied to every conversion rate")
    churn_improvement_pct: float = Field(0.0, description="% reduction of the monthly churn rate")
    asp_increase_pct: float = Field(0.0, description="% increase of ASP")


class RevenueEngineInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    marketing: MarketingActuals
    sales: SalesActuals
    cs: CsActuals
    finance: FinanceBaseline
    scenarios: ScenarioAdjustments = Field(default_factory=ScenarioAdjustments)
    marketing_benchmarks: MarketingBenchmarks = Field(default_factory=MarketingBenchmarks)
    sales_benchmarks: SalesBenchmarks = Field(default_factory=SalesBenchmarks)
    cs_benchmarks: CsBenchmarks = Field(default_factory=CsBenchmarks)
    currency: CurrencySettings = Field(default_factory=CurrencySettings)
    settings: EngineSettings = Field(default_factory=EngineSettings)
