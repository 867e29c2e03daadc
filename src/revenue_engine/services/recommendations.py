from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Protocol, Tuple

from ..formatting import format_value
from ..models.common import CoverageStatus, DisplayMode, EngineSettings, Severity
from ..models.results import (
    BenchmarkGap,
    FunnelResult,
    PipelineCoverage,
    Recommendation,
    RetentionResult,
    UnitEconomics,
)
from ..models.scenario import ScenarioAdjustments
from .arr import compute_retention
from .funnel import funnel_from_rates
from .rates import CONVERSION_FIELDS, EffectiveRates, adjust_churn, adjust_conversion_rate, finite_or_zero

PRIORITY_COUNT = 2

RECOMMENDED_METRICS = CONVERSION_FIELDS + ("monthly_churn_rate", "blended_cac")

ADVICE: Dict[str, str] = {
    "mql_rate": "Revisit lead quality, ICP fit and early qualification to improve downstream throughput.",
    "sql_rate": "Tighten qualification criteria and the handover between marketing and sales.",
    "opp_rate": "Improve discovery and follow-up so more sales-qualified leads turn into real opportunities.",
    "opp_to_proposal": "Sharpen solution fit and champion building so more opportunities reach a proposal.",
    "proposal_to_win": "Review pricing, negotiation and competitive positioning on late-stage deals.",
    "monthly_churn_rate": "Prioritise reducing churn and increasing expansion before you scale top-of-funnel.",
    "blended_cac": "Either reduce CAC or increase pricing and upsell to reach a more sustainable payback period.",
    "pipeline_coverage": "Build more qualified pipeline or adjust your coverage target.",
    "churn_vs_new_arr": "Prioritise reducing monthly churn and increasing expansion before you scale top-of-funnel.",
    "cac_payback": "Either reduce CAC or increase pricing and upsell to reach a more sustainable payback period.",
    "ltv_to_cac": "Improve retention, expansion or acquisition efficiency to strengthen unit economics.",
}

HEALTHY_MESSAGE = (
    "Funnel and economics look broadly healthy. Use scenarios to test where modest improvements "
    "in conversion, churn or ASP create the biggest uplift in ARR."
)

DEFAULT_SEVERITY_WEIGHTS: Dict[Severity, float] = {
    Severity.INFO: 1.0,
    Severity.WARNING: 2.0,
    Severity.CRITICAL: 3.0,
}

DEFAULT_NO_IMPACT_SCORES: Dict[Severity, float] = {
    Severity.INFO: 10_000.0,
    Severity.WARNING: 100_000.0,
    Severity.CRITICAL: 1_000_000.0,
}


class ScoringStrategy(Protocol):
    def score(self, recommendation: Recommendation) -> float:
        ...


@dataclass(frozen=True)
class SeverityWeightedScoring:
    """ARR impact weighted by severity, or a fixed per-tier score when no impact is known."""

    weights: Mapping[Severity, float] = field(default_factory=lambda: dict(DEFAULT_SEVERITY_WEIGHTS))
    no_impact_scores: Mapping[Severity, float] = field(default_factory=lambda: dict(DEFAULT_NO_IMPACT_SCORES))

    def score(self, recommendation: Recommendation) -> float:
        if recommendation.impact_arr > 0:
            return recommendation.impact_arr * self.weights[recommendation.severity]
        return self.no_impact_scores[recommendation.severity]


@dataclass(frozen=True)
class ImpactContext:
    leads: float
    current_arr: float
    expansion_rate: float
    rates: EffectiveRates
    scenarios: ScenarioAdjustments
    funnel: FunnelResult
    retention: RetentionResult


def substituted_benchmark(gap: BenchmarkGap, context: ImpactContext) -> Optional[float]:
    """The benchmark as it enters the recomputation, i.e. under the same scenario as the actual."""
    if gap.benchmark is None:
        return None
    if gap.metric in CONVERSION_FIELDS:
        return adjust_conversion_rate(gap.benchmark, context.scenarios)
    if gap.metric == "monthly_churn_rate":
        return adjust_churn(gap.benchmark, context.scenarios)
    return gap.benchmark


def estimate_impact(gap: BenchmarkGap, context: ImpactContext) -> float:
    """ARR gained per year by moving this one metric to its benchmark, everything else fixed."""
    benchmark = substituted_benchmark(gap, context)
    if benchmark is None:
        return 0.0
    if gap.metric in CONVERSION_FIELDS:
        substituted = context.rates.replace(**{gap.metric: benchmark})
        uplift = funnel_from_rates(context.leads, substituted).new_arr_annual - context.funnel.new_arr_annual
    elif gap.metric == "monthly_churn_rate":
        improved = compute_retention(benchmark, context.expansion_rate, context.current_arr)
        uplift = context.retention.churned_arr_year - improved.churned_arr_year
    else:
        return 0.0
    return max(0.0, finite_or_zero(uplift))


def _gap_message(gap: BenchmarkGap, benchmark_used: Optional[float], impact_arr: float, symbol: str) -> str:
    actual = format_value(gap.actual, gap.mode, symbol)
    benchmark = format_value(benchmark_used, gap.mode, symbol)
    if benchmark_used != gap.benchmark:
        benchmark += " scenario-adjusted"
    impact = format_value(impact_arr, DisplayMode.CURRENCY, symbol)
    advice = ADVICE[gap.metric]
    if gap.metric in CONVERSION_FIELDS:
        return (
            f"{gap.label} converts at {actual} against a {benchmark} benchmark. "
            f"Closing the gap is worth about {impact} of new ARR per year. {advice}"
        )
    if gap.metric == "monthly_churn_rate":
        return (
            f"Monthly churn is {actual} against a {benchmark} benchmark. "
            f"Matching it would retain about {impact} of ARR per year. {advice}"
        )
    return f"{gap.label} is {actual} against a {benchmark} benchmark. {advice}"


def _coverage_recommendation(
    coverage: PipelineCoverage,
    open_pipeline_value: float,
    settings: EngineSettings,
    symbol: str,
) -> Optional[Recommendation]:
    # follows the reported status so the finding and the status never disagree
    if coverage.status != CoverageStatus.UNDER or coverage.actual is None:
        return None
    severity = Severity.CRITICAL if coverage.actual < settings.critical_ratio else Severity.WARNING
    message = (
        f"Open pipeline of {format_value(open_pipeline_value, DisplayMode.CURRENCY, symbol)} covers "
        f"{coverage.actual:.2f}x of the {format_value(coverage.required_pipeline, DisplayMode.CURRENCY, symbol)} "
        f"required. {ADVICE['pipeline_coverage']}"
    )
    return Recommendation(
        area="Pipeline Coverage",
        severity=severity,
        message=message,
        metric="pipeline_coverage",
        actual=coverage.actual,
        benchmark=settings.coverage_ok_threshold,
    )


def _unit_economics_findings(
    funnel: FunnelResult,
    retention: RetentionResult,
    unit_economics: UnitEconomics,
    settings: EngineSettings,
    symbol: str,
) -> List[Recommendation]:
    findings: List[Recommendation] = []
    if retention.churned_arr_year > funnel.new_arr_annual:
        churned = format_value(retention.churned_arr_year, DisplayMode.CURRENCY, symbol)
        added = format_value(funnel.new_arr_annual, DisplayMode.CURRENCY, symbol)
        findings.append(
            Recommendation(
                area="Churn & Retention",
                severity=Severity.CRITICAL,
                message=f"Churn removes {churned} of ARR a year while new customers add {added}. {ADVICE['churn_vs_new_arr']}",
                metric="churn_vs_new_arr",
                actual=retention.churned_arr_year,
                benchmark=funnel.new_arr_annual,
            )
        )

    payback = unit_economics.cac_payback_months
    if payback is not None and payback > settings.max_cac_payback_months:
        findings.append(
            Recommendation(
                area="CAC Payback",
                severity=Severity.CRITICAL,
                message=(
                    f"CAC payback is {payback:.1f} months, longer than {settings.max_cac_payback_months:g}. "
                    f"{ADVICE['cac_payback']}"
                ),
                metric="cac_payback",
                actual=payback,
                benchmark=settings.max_cac_payback_months,
            )
        )

    ratio = unit_economics.ltv_to_cac
    if ratio is not None and ratio < settings.min_ltv_to_cac:
        findings.append(
            Recommendation(
                area="Unit Economics",
                severity=Severity.WARNING,
                message=f"LTV:CAC is {ratio:.1f}x, below {settings.min_ltv_to_cac:g}x. {ADVICE['ltv_to_cac']}",
                metric="ltv_to_cac",
                actual=ratio,
                benchmark=settings.min_ltv_to_cac,
            )
        )
    return findings


def synthesize_recommendations(
    gaps: List[BenchmarkGap],
    coverage: PipelineCoverage,
    unit_economics: UnitEconomics,
    open_pipeline_value: float,
    context: ImpactContext,
    settings: EngineSettings,
    symbol: str = "€",
) -> List[Recommendation]:
    recommendations: List[Recommendation] = []
    for gap in gaps:
        if gap.metric not in RECOMMENDED_METRICS or gap.severity is None:
            continue
        impact_arr = estimate_impact(gap, context)
        recommendations.append(
            Recommendation(
                area=gap.label,
                severity=gap.severity,
                message=_gap_message(gap, substituted_benchmark(gap, context), impact_arr, symbol),
                impact_arr=impact_arr,
                metric=gap.metric,
                actual=gap.actual,
                benchmark=gap.benchmark,
            )
        )

    coverage_recommendation = _coverage_recommendation(coverage, open_pipeline_value, settings, symbol)
    if coverage_recommendation is not None:
        recommendations.append(coverage_recommendation)

    recommendations.extend(_unit_economics_findings(context.funnel, context.retention, unit_economics, settings, symbol))

    if not recommendations:
        recommendations.append(Recommendation(area="Overview", severity=Severity.INFO, message=HEALTHY_MESSAGE))
    return recommendations


def rank_recommendations(
    recommendations: List[Recommendation],
    strategy: ScoringStrategy,
) -> Tuple[List[Recommendation], List[Recommendation], List[Recommendation]]:
    """Score, sort descending and split into priorities and the remaining findings."""
    scored = [rec.model_copy(update={"score": strategy.score(rec)}) for rec in recommendations]
    ranked = sorted(scored, key=lambda rec: rec.score, reverse=True)
    return ranked, ranked[:PRIORITY_COUNT], ranked[PRIORITY_COUNT:]
