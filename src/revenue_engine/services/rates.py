from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass
from typing import Optional

from ..models.customer_success import CsActuals
from ..models.marketing import MarketingActuals
from ..models.sales import SalesActuals
from ..models.scenario import ScenarioAdjustments

CONVERSION_FIELDS = ("mql_rate", "sql_rate", "opp_rate", "opp_to_proposal", "proposal_to_win")


@dataclass(frozen=True)
class EffectiveRates:
    """Scenario-adjusted rates, all in percent except ``asp``."""

    mql_rate: float
    sql_rate: float
    opp_rate: float
    opp_to_proposal: float
    proposal_to_win: float
    asp: float
    monthly_churn_rate: float

    def replace(self, **changes: float) -> "EffectiveRates":
        return dataclasses.replace(self, **changes)


def finite_or_none(value: Optional[float]) -> Optional[float]:
    if value is None or not math.isfinite(value):
        return None
    return value


def finite_or_zero(value: float) -> float:
    return value if math.isfinite(value) else 0.0


def pct_to_decimal(pct: float) -> float:
    return finite_or_zero(pct) / 100


def adjust_conversion_rate(rate: float, scenarios: ScenarioAdjustments) -> float:
    # floored so a negative input or a lift below -100% cannot produce negative counts
    lifted = finite_or_zero(rate) * (1 + pct_to_decimal(scenarios.conv_lift_pct))
    return max(0.0, lifted)


def adjust_asp(asp: float, scenarios: ScenarioAdjustments) -> float:
    return finite_or_zero(asp) * (1 + pct_to_decimal(scenarios.asp_increase_pct))


def adjust_churn(monthly_churn_rate: float, scenarios: ScenarioAdjustments) -> float:
    reduced = finite_or_zero(monthly_churn_rate) * (1 - pct_to_decimal(scenarios.churn_improvement_pct))
    return max(0.0, reduced)


def normalize_rates(
    marketing: MarketingActuals,
    sales: SalesActuals,
    cs: CsActuals,
    scenarios: ScenarioAdjustments,
) -> EffectiveRates:
    return EffectiveRates(
        mql_rate=adjust_conversion_rate(marketing.mql_rate, scenarios),
        sql_rate=adjust_conversion_rate(marketing.sql_rate, scenarios),
        opp_rate=adjust_conversion_rate(marketing.opp_rate, scenarios),
        opp_to_proposal=adjust_conversion_rate(sales.opp_to_proposal, scenarios),
        proposal_to_win=adjust_conversion_rate(sales.proposal_to_win, scenarios),
        asp=adjust_asp(sales.asp, scenarios),
        monthly_churn_rate=adjust_churn(cs.monthly_churn_rate, scenarios),
    )
