from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from revenue_engine import main
from revenue_engine.main import app
from revenue_engine.sample_data import build_sample_input

client = TestClient(app)


def _sample_payload() -> dict:
    return build_sample_input().model_dump(mode="json")


def test_healthcheck():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_sample_round_trips_through_calculate():
    sample = client.get("/sample").json()
    response = client.post("/calculate", json={"input": sample})

    assert response.status_code == 200
    result = response.json()["result"]
    assert result["funnel"]["new_arr_annual"] == 3937500
    assert result["efficiency"]["pipeline_coverage_status"] == "under"
    assert len(result["priorities"]) == 1


def test_strict_calculation_rejects_out_of_domain_input():
    payload = _sample_payload()
    payload["marketing"]["leads"] = -5

    lenient = client.post("/calculate", json={"input": payload})
    strict = client.post("/calculate", json={"input": payload, "strict": True})

    assert lenient.status_code == 200
    assert strict.status_code == 422
    assert strict.json()["detail"] == ["marketing.leads must not be negative (got -5)"]


def test_non_numeric_input_is_rejected():
    payload = _sample_payload()
    payload["sales"]["asp"] = "a lot"
    response = client.post("/calculate", json={"input": payload})
    assert response.status_code == 422


def test_validate_endpoint():
    payload = _sample_payload()
    payload["cs"]["monthly_churn_rate"] = 140
    response = client.post("/validate", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert body["valid"] is False
    assert body["issues"] == ["cs.monthly_churn_rate must be between 0 and 100 (got 140)"]


def test_compare_scenarios_against_baseline():
    response = client.post(
        "/scenarios/compare",
        json={
            "input": _sample_payload(),
            "scenarios": {
                "lift": {"conv_lift_pct": 10},
                "pricing": {"asp_increase_pct": 20},
            },
        },
    )

    assert response.status_code == 200
    outcomes = {outcome["label"]: outcome for outcome in response.json()["outcomes"]}
    assert list(outcomes) == ["baseline", "lift", "pricing"]
    assert outcomes["baseline"]["uplift_vs_baseline"] == 0
    assert outcomes["lift"]["uplift_vs_baseline"] > 0
    assert outcomes["pricing"]["new_arr_annual"] == pytest.approx(3937500 * 1.2)


def test_compare_rejects_reserved_label():
    response = client.post(
        "/scenarios/compare",
        json={"input": _sample_payload(), "scenarios": {"baseline": {}}},
    )
    assert response.status_code == 400


def test_logging_is_configured_when_the_app_starts(monkeypatch):
    calls = []
    monkeypatch.setattr(main, "setup_logging", lambda: calls.append("configured"))

    assert calls == []
    with TestClient(app) as started:
        assert started.get("/health").status_code == 200
    assert calls == ["configured"]
