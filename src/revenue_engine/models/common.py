from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, confloat


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class CoverageStatus(str, Enum):
    STRONG = "strong"
    OK = "ok"
    UNDER = "under"


class CoverageBasis(str, Enum):
    ARR_GAP = "arr_gap"
    MONTHLY_NEW_ARR = "monthly_new_arr"


class DisplayMode(str, Enum):
    PERCENT = "percent"
    CURRENCY = "currency"
    NUMBER = "number"


class CurrencySettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    symbol: str = Field("€", description="Display symbol only, no conversion is applied")


class EngineSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    coverage_basis: CoverageBasis = Field(
        CoverageBasis.ARR_GAP,
        description="What the pipeline coverage multiple is applied to",
    )
    coverage_strong_threshold: confloat(gt=0) = 1.2
    coverage_ok_threshold: confloat(gt=0) = 0.9
    warning_ratio: confloat(gt=0) = Field(0.9, description="actual/benchmark ratio below which a metric is flagged")
    critical_ratio: confloat(gt=0) = Field(0.7, description="actual/benchmark ratio below which a flag is critical")
    max_cac_payback_months: confloat(gt=0) = 18.0
    min_ltv_to_cac: confloat(gt=0) = 3.0
