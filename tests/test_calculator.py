from __future__ import annotations

import math
from datetime import date

import pytest
from pydantic import ValidationError

from revenue_engine.models.common import CoverageStatus, Severity
from revenue_engine.models.scenario import ScenarioAdjustments
from revenue_engine.sample_data import build_sample_input
from revenue_engine.services.calculator import RevenueCalculator, calculate_all


def _sample_records():
    sample = build_sample_input()
    return sample.marketing, sample.sales, sample.cs, sample.finance


def test_sample_input_generates_results():
    result = RevenueCalculator().run(build_sample_input())

    funnel = result.funnel
    assert funnel.mqls == pytest.approx(375)
    assert funnel.sqls == pytest.approx(150)
    assert funnel.opportunities == pytest.approx(52.5)
    assert funnel.proposals == pytest.approx(26.25)
    assert funnel.wins == pytest.approx(6.5625)
    assert funnel.monthly_new_arr == pytest.approx(328125)
    assert funnel.new_arr_annual == pytest.approx(3937500)

    assert result.retention.annual_churn_rate == pytest.approx(0.1136, abs=1e-4)
    assert result.forecast.churned_arr_year == pytest.approx(1500000 * (1 - 0.99 ** 12))
    assert result.forecast.expansion_arr_year == pytest.approx(300000)

    assert result.efficiency.cac_payback_months == pytest.approx(8)
    assert result.efficiency.ltv == pytest.approx(312500)
    assert result.efficiency.ltv_to_cac == pytest.approx(12.5)
    assert result.efficiency.pipeline_coverage_actual == pytest.approx(0.5)
    assert result.efficiency.pipeline_coverage_status == CoverageStatus.UNDER


def test_forecast_is_linear_in_the_horizon():
    result = RevenueCalculator().run(build_sample_input())
    forecast = result.forecast
    net_retention = forecast.expansion_arr_year - forecast.churned_arr_year

    assert forecast.projected_arr_3m == pytest.approx(1500000 + 328125 * 3 + net_retention / 4)
    assert forecast.projected_arr_6m == pytest.approx(1500000 + 328125 * 6 + net_retention / 2)
    assert forecast.projected_arr_12m == pytest.approx(1500000 + 328125 * 12 + net_retention)
    assert forecast.monthly_net_new_arr == pytest.approx(328125 + net_retention / 12)
    assert [point.months for point in forecast.points] == [3, 6, 12]


def test_on_benchmark_funnel_only_flags_pipeline_coverage():
    result = RevenueCalculator().run(build_sample_input())

    assert len(result.recommendations) == 1
    coverage = result.recommendations[0]
    assert coverage.area == "Pipeline Coverage"
    assert coverage.severity == Severity.CRITICAL
    assert coverage.impact_arr == 0
    assert coverage.score == 1_000_000
    assert result.priorities == [coverage]
    assert result.other_findings == []


def test_scenario_with_zero_lift_matches_omitted_scenarios():
    marketing, sales, cs, finance = _sample_records()
    omitted = calculate_all(marketing, sales, cs, finance)
    zero = calculate_all(marketing, sales, cs, finance, ScenarioAdjustments(conv_lift_pct=0))

    assert zero.funnel == omitted.funnel
    assert zero.forecast == omitted.forecast


def test_conversion_lift_compounds_through_every_stage():
    marketing, sales, cs, finance = _sample_records()
    base = calculate_all(marketing, sales, cs, finance)
    lifted = calculate_all(marketing, sales, cs, finance, ScenarioAdjustments(conv_lift_pct=10))

    assert lifted.funnel.wins == pytest.approx(base.funnel.wins * 1.1 ** 5)


def test_asp_increase_and_churn_improvement():
    marketing, sales, cs, finance = _sample_records()
    result = calculate_all(
        marketing,
        sales,
        cs,
        finance,
        ScenarioAdjustments(asp_increase_pct=20, churn_improvement_pct=50),
    )

    assert result.funnel.monthly_new_arr == pytest.approx(6.5625 * 60000)
    assert result.retention.annual_churn_rate == pytest.approx(1 - 0.995 ** 12)


def test_churn_improvement_beyond_hundred_percent_floors_churn_at_zero():
    marketing, sales, cs, finance = _sample_records()
    result = calculate_all(marketing, sales, cs, finance, {"churn_improvement_pct": 150})

    assert result.retention.annual_churn_rate == 0
    assert result.forecast.churned_arr_year == 0
    assert result.efficiency.ltv is None
    assert result.efficiency.ltv_to_cac is None


def test_zero_cac_yields_null_payback_and_ratio():
    marketing, sales, cs, finance = _sample_records()
    result = calculate_all(marketing.model_copy(update={"blended_cac": 0}), sales, cs, finance)

    assert result.efficiency.cac_payback_months is None
    assert result.efficiency.ltv_to_cac is None
    assert result.efficiency.ltv == pytest.approx(312500)


def test_recommendations_are_ranked_and_partitioned():
    marketing, sales, cs, finance = _sample_records()
    result = calculate_all(
        marketing.model_copy(update={"blended_cac": 40000}),
        sales,
        cs.model_copy(update={"monthly_churn_rate": 2}),
        finance,
        sales_benchmarks={"opp_to_proposal": 50, "proposal_to_win": 30, "asp": 50000},
    )

    scores = [rec.score for rec in result.recommendations]
    assert scores == sorted(scores, reverse=True)
    assert len(result.priorities) == 2
    assert result.priorities + result.other_findings == result.recommendations
    assert [rec.area for rec in result.recommendations] == [
        "Proposal → Win",
        "Blended CAC",
        "Pipeline Coverage",
        "Monthly churn",
    ]


def test_as_of_anchors_forecast_and_target_dates():
    sample = build_sample_input()
    engine_input = sample.model_copy(update={"finance": sample.finance.model_copy(update={"as_of": date(2024, 1, 1)})})
    result = RevenueCalculator().run(engine_input)

    assert [point.period_end for point in result.forecast.points] == [
        date(2024, 4, 1),
        date(2024, 7, 1),
        date(2025, 1, 1),
    ]
    assert result.target.target_date == date(2024, 12, 30)


def test_target_progress_uses_net_new_arr_over_the_timeframe():
    result = RevenueCalculator().run(build_sample_input())
    target = result.target
    months = 52 / 4.345

    assert target.timeframe_months == pytest.approx(months)
    assert target.projected_arr_in_timeframe == pytest.approx(1500000 + result.forecast.monthly_net_new_arr * months)
    assert target.arr_gap == pytest.approx(2500000 - target.projected_arr_in_timeframe)
    assert target.on_track is True
    assert target.arr_run_rate == pytest.approx(1500000 + result.forecast.monthly_net_new_arr * 12)


def test_dashboards_cover_funnel_forecast_and_unit_economics():
    result = RevenueCalculator().run(build_sample_input())
    slices = {dashboard.name: dashboard.data for dashboard in result.dashboards}

    assert set(slices) == {"funnel", "arr_forecast", "unit_economics"}
    assert slices["funnel"]["counts"][-1] == pytest.approx(6.5625)
    assert slices["unit_economics"]["pipeline_coverage_status"] == "under"


def test_non_numeric_input_fails_with_a_single_validation_error():
    _, sales, cs, finance = _sample_records()
    with pytest.raises(ValidationError):
        calculate_all({"leads": "lots", "mql_rate": 25, "sql_rate": 40, "opp_rate": 35, "blended_cac": 1}, sales, cs, finance)


def test_repeated_runs_are_identical():
    engine_input = build_sample_input()
    calculator = RevenueCalculator()
    assert calculator.run(engine_input) == calculator.run(engine_input)


def _numbers(value):
    if isinstance(value, dict):
        for item in value.values():
            yield from _numbers(item)
    elif isinstance(value, list):
        for item in value:
            yield from _numbers(item)
    elif isinstance(value, float):
        yield value


def test_non_finite_inputs_never_reach_the_result():
    marketing, sales, cs, finance = _sample_records()
    result = calculate_all(
        marketing.model_copy(update={"blended_cac": math.inf}),
        sales.model_copy(update={"open_pipeline_value": math.nan}),
        cs.model_copy(update={"nrr": math.nan, "expansion_rate": math.inf}),
        finance.model_copy(update={"target_arr": math.inf}),
    )

    assert all(math.isfinite(number) for number in _numbers(result.model_dump()))
    gaps = {gap.metric: gap for gap in result.benchmark_gaps}
    assert gaps["blended_cac"].actual is None
    assert gaps["blended_cac"].delta is None
    assert gaps["blended_cac"].delta_label == "-"
    assert gaps["nrr"].severity is None
    assert result.efficiency.cac_payback_months is None
