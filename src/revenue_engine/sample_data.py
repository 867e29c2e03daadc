from __future__ import annotations

from .models.customer_success import CsActuals, CsBenchmarks
from .models.finance import FinanceBaseline
from .models.marketing import MarketingActuals, MarketingBenchmarks
from .models.sales import SalesActuals, SalesBenchmarks
from .models.scenario import RevenueEngineInput, ScenarioAdjustments


def build_sample_input() -> RevenueEngineInput:
    marketing = MarketingActuals(
        traffic=50000,
        leads=1500,
        mql_rate=25,
        sql_rate=40,
        opp_rate=35,
        blended_cac=25000,
    )

    sales = SalesActuals(
        opp_to_proposal=50,
        proposal_to_win=25,
        asp=50000,
        sales_cycle_days=90,
        pipeline_coverage_target=3,
        open_pipeline_value=1500000,
    )

    cs = CsActuals(
        monthly_churn_rate=1,
        expansion_rate=20,
        nrr=120,
        gross_margin=75,
    )

    finance = FinanceBaseline(current_arr=1500000, target_arr=2500000, timeframe_weeks=52)

    return RevenueEngineInput(
        marketing=marketing,
        sales=sales,
        cs=cs,
        finance=finance,
        scenarios=ScenarioAdjustments(),
        marketing_benchmarks=MarketingBenchmarks(mql_rate=25, sql_rate=40, opp_rate=35, blended_cac=25000),
        sales_benchmarks=SalesBenchmarks(opp_to_proposal=50, proposal_to_win=25, asp=50000),
        cs_benchmarks=CsBenchmarks(monthly_churn_rate=1, expansion_rate=20, nrr=120, gross_margin=75),
    )
