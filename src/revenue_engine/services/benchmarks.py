from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..formatting import format_delta
from ..models.common import DisplayMode, EngineSettings, Severity
from ..models.results import BenchmarkGap
from ..models.scenario import RevenueEngineInput
from .rates import EffectiveRates, finite_or_none


@dataclass(frozen=True)
class MetricDefinition:
    key: str
    label: str
    mode: DisplayMode
    lower_is_better: bool = False


METRICS: Tuple[MetricDefinition, ...] = (
    MetricDefinition("mql_rate", "Lead → MQL", DisplayMode.PERCENT),
    MetricDefinition("sql_rate", "MQL → SQL", DisplayMode.PERCENT),
    MetricDefinition("opp_rate", "SQL → Opportunity", DisplayMode.PERCENT),
    MetricDefinition("opp_to_proposal", "Opportunity → Proposal", DisplayMode.PERCENT),
    MetricDefinition("proposal_to_win", "Proposal → Win", DisplayMode.PERCENT),
    MetricDefinition("asp", "ACV", DisplayMode.CURRENCY),
    MetricDefinition("blended_cac", "Blended CAC", DisplayMode.CURRENCY, lower_is_better=True),
    MetricDefinition("monthly_churn_rate", "Monthly churn", DisplayMode.PERCENT, lower_is_better=True),
    MetricDefinition("expansion_rate", "Expansion", DisplayMode.PERCENT),
    MetricDefinition("gross_margin", "Gross margin", DisplayMode.PERCENT),
    MetricDefinition("nrr", "NRR", DisplayMode.PERCENT),
)


def classify_gap(
    actual: Optional[float],
    benchmark: Optional[float],
    inverted: bool = False,
    warning_ratio: float = 0.9,
    critical_ratio: float = 0.7,
) -> Optional[Severity]:
    """Severity of a metric's shortfall against its benchmark, or None when on target.

    ``inverted`` flips the ratio for lower-is-better metrics such as churn and CAC.
    """
    if actual is None or benchmark is None:
        return None
    if not (math.isfinite(actual) and math.isfinite(benchmark)) or benchmark <= 0:
        return None
    if inverted:
        if actual <= 0:
            return None
        ratio = benchmark / actual
    else:
        ratio = actual / benchmark
    if ratio >= warning_ratio:
        return None
    if ratio >= critical_ratio:
        return Severity.WARNING
    return Severity.CRITICAL


def _metric_values(engine_input: RevenueEngineInput, rates: EffectiveRates) -> dict:
    marketing_bench = engine_input.marketing_benchmarks
    sales_bench = engine_input.sales_benchmarks
    cs_bench = engine_input.cs_benchmarks
    cs = engine_input.cs
    return {
        "mql_rate": (rates.mql_rate, marketing_bench.mql_rate),
        "sql_rate": (rates.sql_rate, marketing_bench.sql_rate),
        "opp_rate": (rates.opp_rate, marketing_bench.opp_rate),
        "opp_to_proposal": (rates.opp_to_proposal, sales_bench.opp_to_proposal),
        "proposal_to_win": (rates.proposal_to_win, sales_bench.proposal_to_win),
        "asp": (rates.asp, sales_bench.asp),
        "blended_cac": (engine_input.marketing.blended_cac, marketing_bench.blended_cac),
        "monthly_churn_rate": (rates.monthly_churn_rate, cs_bench.monthly_churn_rate),
        "expansion_rate": (cs.expansion_rate, cs_bench.expansion_rate),
        "gross_margin": (cs.gross_margin, cs_bench.gross_margin),
        "nrr": (cs.nrr, cs_bench.nrr),
    }


def collect_benchmark_gaps(
    engine_input: RevenueEngineInput,
    rates: EffectiveRates,
    settings: EngineSettings,
    symbol: str = "€",
) -> List[BenchmarkGap]:
    values = _metric_values(engine_input, rates)
    gaps: List[BenchmarkGap] = []
    for metric in METRICS:
        raw_actual, raw_benchmark = values[metric.key]
        actual = finite_or_none(raw_actual)
        benchmark = finite_or_none(raw_benchmark)
        delta = finite_or_none(actual - benchmark) if actual is not None and benchmark is not None else None
        severity = classify_gap(
            actual,
            benchmark,
            inverted=metric.lower_is_better,
            warning_ratio=settings.warning_ratio,
            critical_ratio=settings.critical_ratio,
        )
        gaps.append(
            BenchmarkGap(
                metric=metric.key,
                label=metric.label,
                mode=metric.mode,
                actual=actual,
                benchmark=benchmark,
                delta=delta,
                delta_label=format_delta(delta, metric.mode, symbol),
                lower_is_better=metric.lower_is_better,
                severity=severity,
            )
        )
    return gaps
