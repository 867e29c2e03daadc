from __future__ import annotations

from datetime import date
from typing import List, Optional

from dateutil.relativedelta import relativedelta

from ..models.results import ForecastPoint, ForecastResult, RetentionResult
from .rates import finite_or_zero, pct_to_decimal

FORECAST_HORIZONS = (3, 6, 12)


def starting_arr(current_arr: float) -> float:
    return max(0.0, finite_or_zero(current_arr))


def annualize_churn(monthly_churn_rate: float) -> float:
    """Compound a monthly churn percentage into an annual churn fraction."""
    monthly = min(1.0, max(0.0, pct_to_decimal(monthly_churn_rate)))
    return 1 - (1 - monthly) ** 12


def compute_retention(monthly_churn_rate: float, expansion_rate: float, current_arr: float) -> RetentionResult:
    # churn and expansion both scale off the starting ARR, not a moving base
    base = starting_arr(current_arr)
    annual_churn_rate = annualize_churn(monthly_churn_rate)
    return RetentionResult(
        annual_churn_rate=annual_churn_rate,
        churned_arr_year=base * annual_churn_rate,
        expansion_arr_year=base * pct_to_decimal(expansion_rate),
    )


def project_arr(
    current_arr: float,
    monthly_new_arr: float,
    churned_arr_year: float,
    expansion_arr_year: float,
    as_of: Optional[date] = None,
) -> ForecastResult:
    """Linear projection: new business accrues monthly, the net churn/expansion effect pro rata."""
    base = starting_arr(current_arr)
    net_retention_year = expansion_arr_year - churned_arr_year

    points: List[ForecastPoint] = []
    for months in FORECAST_HORIZONS:
        projected = base + monthly_new_arr * months + net_retention_year * (months / 12)
        period_end = as_of + relativedelta(months=months) if as_of is not None else None
        points.append(ForecastPoint(months=months, projected_arr=projected, period_end=period_end))

    by_horizon = {point.months: point.projected_arr for point in points}
    return ForecastResult(
        projected_arr_3m=by_horizon[3],
        projected_arr_6m=by_horizon[6],
        projected_arr_12m=by_horizon[12],
        churned_arr_year=churned_arr_year,
        expansion_arr_year=expansion_arr_year,
        monthly_new_arr=monthly_new_arr,
        monthly_net_new_arr=monthly_new_arr + net_retention_year / 12,
        points=points,
    )
