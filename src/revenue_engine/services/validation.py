from __future__ import annotations

import math
from typing import List

from pydantic import BaseModel

from ..errors import InputValidationError
from ..models.scenario import RevenueEngineInput
from .rates import CONVERSION_FIELDS, normalize_rates

PERCENT_FIELDS = {
    "marketing": ("mql_rate", "sql_rate", "opp_rate"),
    "sales": ("opp_to_proposal", "proposal_to_win"),
    "cs": ("monthly_churn_rate", "gross_margin"),
}

NON_NEGATIVE_FIELDS = {
    "marketing": ("traffic", "leads", "blended_cac"),
    "sales": ("asp", "sales_cycle_days", "pipeline_coverage_target", "open_pipeline_value"),
    "cs": ("expansion_rate", "nrr"),
    "finance": ("current_arr", "target_arr", "timeframe_weeks"),
}

CHECKED_RECORDS = (
    "marketing",
    "sales",
    "cs",
    "finance",
    "scenarios",
    "marketing_benchmarks",
    "sales_benchmarks",
    "cs_benchmarks",
)


def _non_finite_fields(name: str, record: BaseModel) -> List[str]:
    issues = []
    for field_name in type(record).model_fields:
        value = getattr(record, field_name)
        if isinstance(value, float) and not math.isfinite(value):
            issues.append(f"{name}.{field_name} must be a finite number")
    return issues


def find_input_issues(engine_input: RevenueEngineInput) -> List[str]:
    """List every out-of-domain value the engine would otherwise compute with as given."""
    issues: List[str] = []
    for name in CHECKED_RECORDS:
        issues.extend(_non_finite_fields(name, getattr(engine_input, name)))

    for name, fields in NON_NEGATIVE_FIELDS.items():
        record = getattr(engine_input, name)
        for field_name in fields:
            value = getattr(record, field_name)
            if math.isfinite(value) and value < 0:
                issues.append(f"{name}.{field_name} must not be negative (got {value:g})")

    for name, fields in PERCENT_FIELDS.items():
        record = getattr(engine_input, name)
        for field_name in fields:
            value = getattr(record, field_name)
            if math.isfinite(value) and not 0 <= value <= 100:
                issues.append(f"{name}.{field_name} must be between 0 and 100 (got {value:g})")

    rates = normalize_rates(engine_input.marketing, engine_input.sales, engine_input.cs, engine_input.scenarios)
    for field_name in CONVERSION_FIELDS:
        value = getattr(rates, field_name)
        if value > 100:
            issues.append(f"{field_name} exceeds 100% after the conversion lift ({value:.1f}%)")
    return issues


def ensure_valid_input(engine_input: RevenueEngineInput) -> RevenueEngineInput:
    issues = find_input_issues(engine_input)
    if issues:
        raise InputValidationError(issues)
    return engine_input
