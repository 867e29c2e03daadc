from __future__ import annotations

from typing import Optional

from ..models.common import CoverageBasis, CoverageStatus, EngineSettings
from ..models.results import PipelineCoverage, UnitEconomics
from .rates import finite_or_none, pct_to_decimal


def compute_unit_economics(
    asp: float,
    gross_margin: float,
    blended_cac: float,
    monthly_churn_rate: float,
) -> UnitEconomics:
    """CAC payback, LTV and LTV:CAC from the scenario-adjusted ASP and churn.

    Any figure whose denominator is zero, negative or non-finite comes back as ``None``;
    a zero churn rate means an undefined lifetime, not an infinite LTV.
    """
    monthly_gross_profit = finite_or_none((asp / 12) * pct_to_decimal(gross_margin))
    cac = finite_or_none(blended_cac)
    churn = pct_to_decimal(monthly_churn_rate)

    cac_payback_months: Optional[float] = None
    if cac is not None and cac > 0 and monthly_gross_profit is not None and monthly_gross_profit > 0:
        cac_payback_months = finite_or_none(cac / monthly_gross_profit)

    ltv: Optional[float] = None
    if churn > 0 and monthly_gross_profit is not None and monthly_gross_profit > 0:
        ltv = finite_or_none(monthly_gross_profit * (1 / churn))

    ltv_to_cac: Optional[float] = None
    if ltv is not None and cac is not None and cac > 0:
        ltv_to_cac = finite_or_none(ltv / cac)

    return UnitEconomics(
        monthly_gross_profit_per_customer=monthly_gross_profit,
        cac_payback_months=cac_payback_months,
        ltv=ltv,
        ltv_to_cac=ltv_to_cac,
    )


def coverage_basis_value(
    basis: CoverageBasis,
    current_arr: float,
    target_arr: float,
    monthly_new_arr: float,
) -> float:
    if basis == CoverageBasis.MONTHLY_NEW_ARR:
        return monthly_new_arr
    return target_arr - current_arr


def classify_coverage(actual: Optional[float], settings: EngineSettings) -> CoverageStatus:
    # not assessable is reported as ok rather than as a shortfall
    if actual is None:
        return CoverageStatus.OK
    if actual >= settings.coverage_strong_threshold:
        return CoverageStatus.STRONG
    if actual >= settings.coverage_ok_threshold:
        return CoverageStatus.OK
    return CoverageStatus.UNDER


def evaluate_pipeline_coverage(
    open_pipeline_value: float,
    coverage_target: float,
    basis_value: float,
    settings: EngineSettings,
) -> PipelineCoverage:
    required = finite_or_none(basis_value * coverage_target)
    actual: Optional[float] = None
    if required is not None and required > 0 and coverage_target > 0:
        actual = finite_or_none(open_pipeline_value / required)
    return PipelineCoverage(
        basis=settings.coverage_basis,
        required_pipeline=required,
        actual=actual,
        status=classify_coverage(actual, settings),
    )
