from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict

from fastapi import FastAPI, HTTPException

from .errors import InputValidationError
from .logging_config import setup_logging
from .models.scenario import RevenueEngineInput
from .sample_data import build_sample_input
from .schemas import (
    CalculateRequest,
    CalculateResponse,
    ScenarioCompareRequest,
    ScenarioCompareResponse,
    ScenarioOutcome,
    ValidationResponse,
)
from .services.calculator import RevenueCalculator
from .services.validation import ensure_valid_input, find_input_issues

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    setup_logging()
    yield


app = FastAPI(title="SaaS Revenue Engine", version="0.1.0", lifespan=lifespan)

calculator = RevenueCalculator()

BASELINE_LABEL = "baseline"


@app.post("/calculate", response_model=CalculateResponse)
def calculate(payload: CalculateRequest) -> CalculateResponse:
    engine_input = payload.input
    if payload.strict:
        try:
            ensure_valid_input(engine_input)
        except InputValidationError as exc:
            logger.info("Rejected input with %d issue(s)", len(exc.issues))
            raise HTTPException(status_code=422, detail=exc.issues) from exc
    result = calculator.run(engine_input)
    return CalculateResponse(result=result)


@app.post("/validate", response_model=ValidationResponse)
def validate(engine_input: RevenueEngineInput) -> ValidationResponse:
    issues = find_input_issues(engine_input)
    return ValidationResponse(valid=not issues, issues=issues)


@app.post("/scenarios/compare", response_model=ScenarioCompareResponse)
def compare_scenarios(payload: ScenarioCompareRequest) -> ScenarioCompareResponse:
    if BASELINE_LABEL in payload.scenarios:
        raise HTTPException(status_code=400, detail=f"'{BASELINE_LABEL}' is a reserved scenario label")
    baseline_input = payload.input
    baseline = calculator.run(baseline_input)
    outcomes = [
        ScenarioOutcome(
            label=BASELINE_LABEL,
            scenario=baseline_input.scenarios,
            new_arr_annual=baseline.funnel.new_arr_annual,
            projected_arr_12m=baseline.forecast.projected_arr_12m,
            uplift_vs_baseline=0.0,
        )
    ]
    for label, scenario in payload.scenarios.items():
        result = calculator.run(baseline_input.model_copy(update={"scenarios": scenario}))
        outcomes.append(
            ScenarioOutcome(
                label=label,
                scenario=scenario,
                new_arr_annual=result.funnel.new_arr_annual,
                projected_arr_12m=result.forecast.projected_arr_12m,
                uplift_vs_baseline=result.forecast.projected_arr_12m - baseline.forecast.projected_arr_12m,
            )
        )
    logger.info("Compared %d scenario(s) against baseline", len(payload.scenarios))
    return ScenarioCompareResponse(outcomes=outcomes)


@app.get("/sample", response_model=RevenueEngineInput)
def sample_input() -> RevenueEngineInput:
    return build_sample_input()


@app.get("/health")
def healthcheck() -> Dict[str, str]:
    return {"status": "ok"}
