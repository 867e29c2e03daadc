from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Union

from dateutil.relativedelta import relativedelta

from ..models.common import CurrencySettings, EngineSettings
from ..models.customer_success import CsActuals, CsBenchmarks
from ..models.finance import FinanceBaseline
from ..models.marketing import MarketingActuals, MarketingBenchmarks
from ..models.results import (
    CalculatorResult,
    DashboardSlice,
    EfficiencyResult,
    ForecastResult,
    FunnelResult,
    PipelineCoverage,
    TargetProgress,
    UnitEconomics,
)
from ..models.sales import SalesActuals, SalesBenchmarks
from ..models.scenario import RevenueEngineInput, ScenarioAdjustments
from .arr import compute_retention, project_arr, starting_arr
from .benchmarks import collect_benchmark_gaps
from .efficiency import compute_unit_economics, coverage_basis_value, evaluate_pipeline_coverage
from .funnel import funnel_from_rates
from .rates import finite_or_zero, normalize_rates
from .recommendations import ImpactContext, ScoringStrategy, SeverityWeightedScoring, rank_recommendations, synthesize_recommendations

logger = logging.getLogger(__name__)

WEEKS_PER_MONTH = 4.345


class RevenueCalculator:
    def __init__(self, scoring: Optional[ScoringStrategy] = None) -> None:
        self.scoring: ScoringStrategy = scoring or SeverityWeightedScoring()

    def run(self, engine_input: RevenueEngineInput) -> CalculatorResult:
        marketing = engine_input.marketing
        sales = engine_input.sales
        cs = engine_input.cs
        finance = engine_input.finance
        settings = engine_input.settings

        rates = normalize_rates(marketing, sales, cs, engine_input.scenarios)
        funnel = funnel_from_rates(marketing.leads, rates)
        retention = compute_retention(rates.monthly_churn_rate, cs.expansion_rate, finance.current_arr)
        forecast = project_arr(
            finance.current_arr,
            funnel.monthly_new_arr,
            retention.churned_arr_year,
            retention.expansion_arr_year,
            as_of=finance.as_of,
        )

        unit_economics = compute_unit_economics(rates.asp, cs.gross_margin, marketing.blended_cac, rates.monthly_churn_rate)
        basis_value = coverage_basis_value(
            settings.coverage_basis,
            finite_or_zero(finance.current_arr),
            finite_or_zero(finance.target_arr),
            funnel.monthly_new_arr,
        )
        coverage = evaluate_pipeline_coverage(
            sales.open_pipeline_value,
            sales.pipeline_coverage_target,
            basis_value,
            settings,
        )
        efficiency = EfficiencyResult(
            cac_payback_months=unit_economics.cac_payback_months,
            ltv=unit_economics.ltv,
            ltv_to_cac=unit_economics.ltv_to_cac,
            pipeline_coverage_actual=coverage.actual,
            pipeline_coverage_status=coverage.status,
        )
        target = self._build_target_progress(finance, forecast)

        gaps = collect_benchmark_gaps(engine_input, rates, settings, symbol=engine_input.currency.symbol)
        context = ImpactContext(
            leads=marketing.leads,
            current_arr=finance.current_arr,
            expansion_rate=cs.expansion_rate,
            rates=rates,
            scenarios=engine_input.scenarios,
            funnel=funnel,
            retention=retention,
        )
        recommendations = synthesize_recommendations(
            gaps,
            coverage,
            unit_economics,
            sales.open_pipeline_value,
            context,
            settings,
            symbol=engine_input.currency.symbol,
        )
        ranked, priorities, other_findings = rank_recommendations(recommendations, self.scoring)
        logger.debug(
            "Revenue engine run: new_arr_annual=%.2f projected_arr_12m=%.2f coverage=%s findings=%d",
            funnel.new_arr_annual,
            forecast.projected_arr_12m,
            coverage.status.value,
            len(ranked),
        )

        return CalculatorResult(
            funnel=funnel,
            retention=retention,
            forecast=forecast,
            efficiency=efficiency,
            target=target,
            benchmark_gaps=gaps,
            recommendations=ranked,
            priorities=priorities,
            other_findings=other_findings,
            dashboards=self._build_dashboards(funnel, forecast, unit_economics, coverage),
        )

    def _build_target_progress(self, finance: FinanceBaseline, forecast: ForecastResult) -> TargetProgress:
        base = starting_arr(finance.current_arr)
        weeks = max(0.0, finite_or_zero(finance.timeframe_weeks))
        timeframe_months = weeks / WEEKS_PER_MONTH
        projected = base + forecast.monthly_net_new_arr * timeframe_months
        arr_gap = finite_or_zero(finance.target_arr) - projected
        target_date = None
        if finance.as_of is not None:
            target_date = finance.as_of + relativedelta(weeks=int(round(weeks)))
        return TargetProgress(
            timeframe_months=timeframe_months,
            projected_arr_in_timeframe=projected,
            arr_gap=arr_gap,
            arr_run_rate=base + forecast.monthly_net_new_arr * 12,
            on_track=arr_gap <= 0,
            target_date=target_date,
        )

    def _build_dashboards(
        self,
        funnel: FunnelResult,
        forecast: ForecastResult,
        unit_economics: UnitEconomics,
        coverage: PipelineCoverage,
    ) -> List[DashboardSlice]:
        funnel_slice = {
            "stages": ["MQLs", "SQLs", "Opportunities", "Proposals", "Wins"],
            "counts": [funnel.mqls, funnel.sqls, funnel.opportunities, funnel.proposals, funnel.wins],
            "new_arr_annual": funnel.new_arr_annual,
        }
        arr_slice = {
            "months": [point.months for point in forecast.points],
            "projected_arr": [point.projected_arr for point in forecast.points],
            "period_end": [point.period_end.isoformat() if point.period_end else None for point in forecast.points],
            "monthly_net_new_arr": forecast.monthly_net_new_arr,
        }
        unit_economics_slice = {
            "cac_payback_months": unit_economics.cac_payback_months,
            "ltv": unit_economics.ltv,
            "ltv_to_cac": unit_economics.ltv_to_cac,
            "pipeline_coverage": coverage.actual,
            "pipeline_coverage_status": coverage.status.value,
        }
        return [
            DashboardSlice(name="funnel", data=funnel_slice),
            DashboardSlice(name="arr_forecast", data=arr_slice),
            DashboardSlice(name="unit_economics", data=unit_economics_slice),
        ]


Record = Mapping[str, Any]


def calculate_all(
    marketing: Union[MarketingActuals, Record],
    sales: Union[SalesActuals, Record],
    cs: Union[CsActuals, Record],
    finance: Union[FinanceBaseline, Record],
    scenarios: Optional[Union[ScenarioAdjustments, Record]] = None,
    marketing_benchmarks: Optional[Union[MarketingBenchmarks, Record]] = None,
    sales_benchmarks: Optional[Union[SalesBenchmarks, Record]] = None,
    cs_benchmarks: Optional[Union[CsBenchmarks, Record]] = None,
    *,
    currency: Optional[Union[CurrencySettings, Record]] = None,
    settings: Optional[Union[EngineSettings, Record]] = None,
    scoring: Optional[ScoringStrategy] = None,
) -> CalculatorResult:
    """Run the whole engine on one snapshot of inputs.

    Records may be model instances or plain mappings; anything that does not validate
    raises a single ``pydantic.ValidationError`` before any calculation starts. Omitted
    scenarios, benchmarks and settings fall back to their defaults.
    """
    payload = {
        "marketing": marketing,
        "sales": sales,
        "cs": cs,
        "finance": finance,
        "scenarios": scenarios,
        "marketing_benchmarks": marketing_benchmarks,
        "sales_benchmarks": sales_benchmarks,
        "cs_benchmarks": cs_benchmarks,
        "currency": currency,
        "settings": settings,
    }
    engine_input = RevenueEngineInput.model_validate({key: value for key, value in payload.items() if value is not None})
    return RevenueCalculator(scoring).run(engine_input)
