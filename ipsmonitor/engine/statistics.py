"""Risk statistics over a return series and a list of securities.

Computes:
  - volatility (population standard deviation)
  - Sharpe and Sortino ratios against a fixed risk-free rate
  - maximum drawdown of a value series
  - weighted fixed-income duration from an instrument-label table
  - weight-normalized portfolio beta
  - a Low/Medium/High risk assessment

Two formulas deliberately depart from the textbook definitions and are
kept as the reporting policy defines them:

  * Sortino downside deviation divides by the full series length, not by
    the number of below-target observations.
  * ``calculate_drawdown`` expects a cumulative value series (it divides by
    the running peak level). Feeding it signed period returns gives numbers
    with no financial meaning; use ``cumulative_values`` first.

The risk assessment is a heuristic scoring policy, not a calibrated model.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Union

import numpy as np
import pandas as pd

from ipsmonitor.config.defaults import (
    DEFAULT_BETA,
    DURATION_TABLE,
    RISK_ASSESSMENT_THRESHOLDS,
    RISK_ASSESSMENT_WEIGHTS,
    RISK_FREE_RATE,
)
from ipsmonitor.config.schema import IPSMonitorConfig
from ipsmonitor.portfolio.models import AssetClass, RiskLevel, Security

ReturnSeries = Union[Sequence[float], np.ndarray, pd.Series]


@dataclass
class RiskStatistics:
    """All return-series and holdings-based risk figures for one snapshot."""

    volatility: float = 0.0
    sharpe_ratio: float = 0.0
    sortino_ratio: float = 0.0
    max_drawdown: float = 0.0
    """Percent."""
    weighted_duration: float = 0.0
    """Years."""
    beta: float = DEFAULT_BETA
    risk_level: RiskLevel = RiskLevel.LOW
    n_observations: int = 0


def _as_array(returns: ReturnSeries | None) -> np.ndarray:
    """Flatten to a float array with NaNs removed."""
    if returns is None:
        return np.array([], dtype=float)
    arr = np.asarray(returns, dtype=float).ravel()
    return arr[~np.isnan(arr)]


# ---------------------------------------------------------------------------
# Return-series statistics
# ---------------------------------------------------------------------------

def calculate_portfolio_volatility(returns: ReturnSeries | None) -> float:
    """Population standard deviation; 0 for fewer than two observations."""
    arr = _as_array(returns)
    if len(arr) < 2:
        return 0.0
    return float(np.std(arr))


def calculate_sharpe_ratio(
    returns: ReturnSeries | None, risk_free_rate: float = RISK_FREE_RATE,
) -> float:
    """(mean - rf) / volatility; 0 when the series is empty or flat."""
    arr = _as_array(returns)
    if len(arr) == 0:
        return 0.0

    volatility = calculate_portfolio_volatility(arr)
    if volatility == 0:
        return 0.0

    return float((arr.mean() - risk_free_rate) / volatility)


def calculate_sortino_ratio(
    returns: ReturnSeries | None, risk_free_rate: float = RISK_FREE_RATE,
) -> float:
    """(mean - rf) / downside deviation.

    Downside deviation = sqrt(Σ (r - rf)² over r < rf, divided by the FULL
    series length).
    """
    arr = _as_array(returns)
    n = len(arr)
    if n < 2:
        return 0.0

    shortfall = arr[arr < risk_free_rate] - risk_free_rate
    downside_dev = float(np.sqrt(np.sum(shortfall ** 2) / n))
    if downside_dev == 0:
        return 0.0

    return float((arr.mean() - risk_free_rate) / downside_dev)


def calculate_drawdown(values: ReturnSeries | None) -> float:
    """Maximum peak-to-trough decline of a value series, in percent.

    Points where the running peak is not positive, zero included, contribute
    no drawdown.
    """
    arr = _as_array(values)
    if len(arr) == 0:
        return 0.0

    running_max = np.maximum.accumulate(arr)
    with np.errstate(divide="ignore", invalid="ignore"):
        drawdowns = np.where(running_max > 0, (running_max - arr) / running_max, 0.0)

    return float(max(drawdowns.max(), 0.0) * 100.0)


def cumulative_values(returns: ReturnSeries | None, start: float = 1.0) -> np.ndarray:
    """Wealth series from period returns, starting at ``start``."""
    arr = _as_array(returns)
    return np.concatenate([[start], start * np.cumprod(1.0 + arr)])


# ---------------------------------------------------------------------------
# Holdings-based statistics
# ---------------------------------------------------------------------------

def _duration_for(security: Security, table: dict[str, float]) -> float:
    for label in (security.instrument_type, security.ticker):
        if label and label in table:
            return table[label]
    return table.get("default", DURATION_TABLE["default"])


def calculate_weighted_duration(
    securities: list[Security],
    duration_table: dict[str, float] | None = None,
) -> float:
    """Weight-normalized duration (years) of the fixed-income holdings."""
    table = duration_table or DURATION_TABLE
    fixed_income = [s for s in securities if s.asset_class == AssetClass.FIXED_INCOME]
    if not fixed_income:
        return 0.0

    total_weighted = 0.0
    total_weight = 0.0
    for sec in fixed_income:
        weight = sec.current_weight / 100.0
        total_weighted += weight * _duration_for(sec, table)
        total_weight += weight

    return total_weighted / total_weight if total_weight > 0 else 0.0


def calculate_portfolio_beta(
    securities: list[Security],
    betas: dict[str, float] | None = None,
    default_beta: float = DEFAULT_BETA,
) -> float:
    """Weight-normalized average beta.

    Beta per security: explicit ``betas[ticker]``, else ``Security.beta``,
    else ``default_beta``.
    """
    if not securities:
        return default_beta

    overrides = betas or {}
    total_weight = 0.0
    weighted_beta = 0.0
    for sec in securities:
        if sec.ticker in overrides:
            beta = overrides[sec.ticker]
        elif sec.beta is not None:
            beta = sec.beta
        else:
            beta = default_beta
        weighted_beta += sec.current_weight * beta
        total_weight += sec.current_weight

    if total_weight == 0:
        return default_beta
    return weighted_beta / total_weight


# ---------------------------------------------------------------------------
# Risk assessment
# ---------------------------------------------------------------------------

def risk_score(
    volatility: float,
    drawdown: float,
    concentration: float,
    beta: float,
    weights: dict[str, float] | None = None,
) -> float:
    """Heuristic blend: (0.4·vol + 0.3·dd + 0.2·conc + 0.1·(β-1)·100) / 100."""
    w = weights or RISK_ASSESSMENT_WEIGHTS
    return (
        volatility * w["volatility"]
        + drawdown * w["drawdown"]
        + concentration * w["concentration"]
        + (beta - 1.0) * 100.0 * w["beta"]
    ) / 100.0


def generate_risk_assessment(
    volatility: float,
    drawdown: float,
    concentration: float,
    beta: float,
    weights: dict[str, float] | None = None,
    thresholds: dict[str, float] | None = None,
) -> RiskLevel:
    """Classify the heuristic risk score: <0.05 Low, <0.08 Medium, else High."""
    t = thresholds or RISK_ASSESSMENT_THRESHOLDS
    score = risk_score(volatility, drawdown, concentration, beta, weights)

    if score < t["low"]:
        return RiskLevel.LOW
    if score < t["medium"]:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH


def compute_risk_statistics(
    securities: list[Security],
    returns: ReturnSeries | None = None,
    config: IPSMonitorConfig | None = None,
    drawdown_series: ReturnSeries | None = None,
) -> RiskStatistics:
    """Compute every risk statistic for one snapshot.

    Parameters:
        securities: Current holdings.
        returns: Period return series (fractions).
        config: IPSMonitorConfig for the risk-free rate, duration table and
            beta overrides.
        drawdown_series: Value series for the drawdown. Defaults to
            ``returns`` itself, matching how the dashboard has always
            reported drawdown.

    Returns:
        RiskStatistics. The risk level is scored with volatility expressed
        in percent, alongside drawdown and max single-position weight.
    """
    if config is None:
        config = IPSMonitorConfig()
    risk = config.risk

    arr = _as_array(returns)
    volatility = calculate_portfolio_volatility(arr)
    max_dd = calculate_drawdown(arr if drawdown_series is None else drawdown_series)
    beta = calculate_portfolio_beta(securities, risk.betas, risk.default_beta)
    max_position = max((s.current_weight for s in securities), default=0.0)

    return RiskStatistics(
        volatility=volatility,
        sharpe_ratio=calculate_sharpe_ratio(arr, risk.risk_free_rate),
        sortino_ratio=calculate_sortino_ratio(arr, risk.risk_free_rate),
        max_drawdown=max_dd,
        weighted_duration=calculate_weighted_duration(securities, risk.duration_table),
        beta=beta,
        risk_level=generate_risk_assessment(
            volatility * 100.0,
            max_dd,
            max_position,
            beta,
            risk.assessment_weights,
            risk.assessment_thresholds,
        ),
        n_observations=len(arr),
    )
