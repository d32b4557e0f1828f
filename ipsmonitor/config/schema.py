"""Pydantic models for config.yaml validation."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from ipsmonitor.config.defaults import (
    DEFAULT_BETA,
    DEFAULT_DATABASE_PATH,
    DURATION_TABLE,
    IPS_LIMITS,
    LIQUIDITY_BANDS,
    RISK_ASSESSMENT_THRESHOLDS,
    RISK_ASSESSMENT_WEIGHTS,
    RISK_FREE_RATE,
    STORAGE_KEY,
    TACTICAL_DEVIATION_LIMIT,
    TOP_N_CONCENTRATION,
)

# ---------------------------------------------------------------------------
# IPS Limits
# ---------------------------------------------------------------------------

class IPSLimitsConfig(BaseModel):
    single_security: float = IPS_LIMITS["single_security"]
    single_sector: float = IPS_LIMITS["single_sector"]
    regional: float = IPS_LIMITS["regional"]
    duration_years: float = IPS_LIMITS["duration_years"]
    volatility_band: list[float] = Field(
        default_factory=lambda: list(IPS_LIMITS["volatility_band"])
    )
    drawdown: float = IPS_LIMITS["drawdown"]
    tactical_deviation: float = TACTICAL_DEVIATION_LIMIT

    @field_validator("volatility_band")
    @classmethod
    def band_is_ordered_pair(cls, v: list[float]) -> list[float]:
        if len(v) != 2 or v[0] > v[1]:
            raise ValueError(f"volatility_band must be [low, high] with low <= high, got {v}")
        return v


# ---------------------------------------------------------------------------
# Liquidity
# ---------------------------------------------------------------------------

class LiquidityConfig(BaseModel):
    cash_min: float = LIQUIDITY_BANDS["cash_min"]
    cash_max: float = LIQUIDITY_BANDS["cash_max"]
    max_days_to_liquidate: float = LIQUIDITY_BANDS["max_days_to_liquidate"]

    @model_validator(mode="after")
    def cash_band_ordered(self) -> "LiquidityConfig":
        if self.cash_min > self.cash_max:
            raise ValueError(
                f"cash_min ({self.cash_min}) must not exceed cash_max ({self.cash_max})"
            )
        return self


# ---------------------------------------------------------------------------
# Risk Statistics
# ---------------------------------------------------------------------------

class RiskConfig(BaseModel):
    risk_free_rate: float = RISK_FREE_RATE
    duration_table: dict[str, float] = Field(
        default_factory=lambda: dict(DURATION_TABLE)
    )
    default_beta: float = DEFAULT_BETA
    betas: dict[str, float] = Field(default_factory=dict)
    """ticker → beta overrides."""
    top_n: int = TOP_N_CONCENTRATION
    assessment_weights: dict[str, float] = Field(
        default_factory=lambda: dict(RISK_ASSESSMENT_WEIGHTS)
    )
    assessment_thresholds: dict[str, float] = Field(
        default_factory=lambda: dict(RISK_ASSESSMENT_THRESHOLDS)
    )

    @field_validator("duration_table")
    @classmethod
    def duration_has_default(cls, v: dict[str, float]) -> dict[str, float]:
        if "default" not in v:
            v = {**v, "default": DURATION_TABLE["default"]}
        return v

    @field_validator("assessment_weights")
    @classmethod
    def fill_missing_weights(cls, v: dict[str, float]) -> dict[str, float]:
        return {**RISK_ASSESSMENT_WEIGHTS, **v}

    @field_validator("assessment_thresholds")
    @classmethod
    def fill_missing_thresholds(cls, v: dict[str, float]) -> dict[str, float]:
        return {**RISK_ASSESSMENT_THRESHOLDS, **v}

    @model_validator(mode="after")
    def thresholds_ordered(self) -> "RiskConfig":
        low = self.assessment_thresholds["low"]
        medium = self.assessment_thresholds["medium"]
        if low > medium:
            raise ValueError(f"Risk thresholds must satisfy low <= medium, got {low} > {medium}")
        total = sum(self.assessment_weights.values())
        if abs(total - 1.0) > 0.001:
            raise ValueError(f"Risk assessment weights must sum to 1.0, got {total}")
        return self


# ---------------------------------------------------------------------------
# Database Config
# ---------------------------------------------------------------------------

class DatabaseConfig(BaseModel):
    path: str = DEFAULT_DATABASE_PATH
    storage_key: str = STORAGE_KEY


# ---------------------------------------------------------------------------
# Top-Level Config
# ---------------------------------------------------------------------------

class IPSMonitorConfig(BaseModel):
    """Root configuration model for the IPS monitor."""

    version: int = 1
    ips: IPSLimitsConfig = Field(default_factory=IPSLimitsConfig)
    liquidity: LiquidityConfig = Field(default_factory=LiquidityConfig)
    risk: RiskConfig = Field(default_factory=RiskConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    @model_validator(mode="before")
    @classmethod
    def coerce_none_to_defaults(cls, data: Any) -> Any:
        """YAML parses empty keys as None. Drop them so defaults apply."""
        if isinstance(data, dict):
            for key in ("ips", "liquidity", "risk", "database"):
                if key in data and data[key] is None:
                    del data[key]
        return data
