"""IPS compliance evaluation.

Two views of the same limits:

  - ``check_security_compliance`` tests the exposure rules (single security,
    single sector, single region) independently and reports every breach.
  - ``calculate_all_risk_metrics`` / ``build_compliance_checks`` classify
    each metric for the risk table and the compliance checklist.

The "Single Sector Exposure" row is measured against the largest sector
total. Earlier dashboard versions reused the largest single-position
weight for this row.
"""

from __future__ import annotations

import logging

from ipsmonitor.config.schema import IPSLimitsConfig, IPSMonitorConfig
from ipsmonitor.engine.exposure import (
    calculate_concentration,
    calculate_geographic_exposures,
    calculate_sector_exposures,
    max_exposure,
)
from ipsmonitor.engine.statistics import (
    ReturnSeries,
    calculate_drawdown,
    calculate_portfolio_volatility,
    calculate_weighted_duration,
)
from ipsmonitor.output.formatting import format_percentage, format_years
from ipsmonitor.portfolio.models import (
    ComplianceCheck,
    ComplianceReport,
    MetricStatus,
    RiskMetric,
    Security,
)

logger = logging.getLogger(__name__)


def _limits(config: IPSMonitorConfig | None) -> IPSLimitsConfig:
    return (config or IPSMonitorConfig()).ips


# ---------------------------------------------------------------------------
# Breach report
# ---------------------------------------------------------------------------

def _over_limit(exposures: dict[str, float], limit: float) -> list[str]:
    return [
        f"{label} ({format_percentage(weight)})"
        for label, weight in exposures.items()
        if weight > limit
    ]


def check_security_compliance(
    securities: list[Security],
    config: IPSMonitorConfig | None = None,
    strict: bool = False,
) -> ComplianceReport:
    """Test the IPS exposure rules; each rule adds at most one message.

    Rules run independently so simultaneous breaches are all reported, in
    order: single security, sector, region.
    ``strict`` groups sectors and regions the same way as the exposure
    tables.
    """
    limits = _limits(config)
    breaches: list[str] = []

    oversized = [
        f"{s.ticker} ({format_percentage(s.current_weight)})"
        for s in securities
        if s.current_weight > limits.single_security
    ]
    if oversized:
        breaches.append(f"Single security limit breached: {', '.join(oversized)}")

    sectors = _over_limit(calculate_sector_exposures(securities, strict), limits.single_sector)
    if sectors:
        breaches.append(f"Sector limit breached: {', '.join(sectors)}")

    regions = _over_limit(calculate_geographic_exposures(securities, strict), limits.regional)
    if regions:
        breaches.append(f"Regional limit breached: {', '.join(regions)}")

    if breaches:
        logger.debug("IPS breaches: %s", breaches)

    return ComplianceReport(is_compliant=not breaches, breaches=breaches)


# ---------------------------------------------------------------------------
# Per-metric classification
# ---------------------------------------------------------------------------

def classify_single_security(weight: float, limit: float = 10.0) -> MetricStatus:
    return MetricStatus.COMPLIANT if weight <= limit else MetricStatus.BREACH


def classify_single_sector(weight: float, limit: float = 25.0) -> MetricStatus:
    return MetricStatus.COMPLIANT if weight <= limit else MetricStatus.BREACH


def classify_regional(weight: float, limit: float = 10.0) -> MetricStatus:
    return MetricStatus.COMPLIANT if weight <= limit else MetricStatus.BREACH


def classify_duration(years: float, limit: float = 2.0) -> MetricStatus:
    return MetricStatus.COMPLIANT if years <= limit else MetricStatus.WARNING


def classify_volatility(
    volatility: float, band: tuple[float, float] | list[float] = (0.05, 0.07),
) -> MetricStatus:
    """Compliant only inside the target band, inclusive at both ends."""
    low, high = band
    return MetricStatus.COMPLIANT if low <= volatility <= high else MetricStatus.WARNING


def classify_drawdown(drawdown: float, limit: float = 5.0) -> MetricStatus:
    return MetricStatus.COMPLIANT if drawdown <= limit else MetricStatus.BREACH


# ---------------------------------------------------------------------------
# Risk metric table
# ---------------------------------------------------------------------------

def calculate_all_risk_metrics(
    securities: list[Security],
    returns: ReturnSeries | None = None,
    config: IPSMonitorConfig | None = None,
    strict: bool = False,
) -> list[RiskMetric]:
    """Build the seven-row risk metric table from holdings and returns.

    Drawdown is measured on ``returns`` as given; pass a value series if a
    financially meaningful drawdown is needed.
    """
    if config is None:
        config = IPSMonitorConfig()
    limits = config.ips

    concentration = calculate_concentration(securities)
    max_position = concentration["max_single_security"]
    sector_label, max_sector = max_exposure(calculate_sector_exposures(securities, strict))
    region_label, max_region = max_exposure(calculate_geographic_exposures(securities, strict))
    duration = calculate_weighted_duration(securities, config.risk.duration_table)
    volatility = calculate_portfolio_volatility(returns)
    drawdown = calculate_drawdown(returns)
    vol_low, vol_high = limits.volatility_band

    position_status = classify_single_security(max_position, limits.single_security)
    sector_status = classify_single_sector(max_sector, limits.single_sector)
    region_status = classify_regional(max_region, limits.regional)
    duration_status = classify_duration(duration, limits.duration_years)
    vol_status = classify_volatility(volatility, limits.volatility_band)
    drawdown_status = classify_drawdown(drawdown, limits.drawdown)

    if volatility > vol_high:
        vol_action = "Review portfolio risk allocation"
    elif volatility < vol_low:
        vol_action = "Volatility below target band"
    else:
        vol_action = "None"

    return [
        RiskMetric(
            metric="Single Security Exposure",
            ips_limit=f"≤{limits.single_security:g}%",
            current_value=format_percentage(max_position),
            status=position_status,
            action_required=(
                f"Reduce largest position to below {limits.single_security:g}% "
                f"(currently {format_percentage(max_position)})"
                if position_status is MetricStatus.BREACH else "None"
            ),
        ),
        RiskMetric(
            metric="Single Sector Exposure",
            ips_limit=f"≤{limits.single_sector:g}%",
            current_value=format_percentage(max_sector),
            status=sector_status,
            action_required=(
                f"Review sector concentrations ({sector_label})"
                if sector_status is MetricStatus.BREACH else "None"
            ),
        ),
        RiskMetric(
            metric="Regional Allocation",
            ips_limit=f"≤{limits.regional:g}%",
            current_value=format_percentage(max_region),
            status=region_status,
            action_required=(
                f"Reduce exposure to {region_label}"
                if region_status is MetricStatus.BREACH else "None"
            ),
        ),
        RiskMetric(
            metric="Weighted Portfolio Duration",
            ips_limit=f"≤{limits.duration_years:g} yrs",
            current_value=format_years(duration),
            status=duration_status,
            action_required=(
                "Reduce fixed income duration"
                if duration_status is MetricStatus.WARNING else "None"
            ),
        ),
        RiskMetric(
            metric="Portfolio Volatility",
            ips_limit=f"{vol_low * 100:g}-{vol_high * 100:g}% ann.",
            current_value=format_percentage(volatility * 100),
            status=vol_status,
            action_required=vol_action,
        ),
        RiskMetric(
            metric="Drawdown Limit",
            ips_limit=f"≤{limits.drawdown:g}%",
            current_value=format_percentage(drawdown),
            status=drawdown_status,
            action_required=(
                "Rebalance to reduce downside risk"
                if drawdown_status is MetricStatus.BREACH else "None"
            ),
        ),
        RiskMetric(
            metric="Credit Rating Compliance",
            ips_limit="≥Investment Grade",
            current_value="Check credit ratings",
            status=MetricStatus.COMPLIANT,
            action_required="None",
        ),
    ]


def build_compliance_checks(
    securities: list[Security],
    returns: ReturnSeries | None = None,
    config: IPSMonitorConfig | None = None,
    strict: bool = False,
) -> list[ComplianceCheck]:
    """Compliance checklist rows derived from the risk metric table.

    Prohibited instruments and credit ratings carry no data in the snapshot
    and are reported as compliant placeholders.
    """
    metrics = {m.metric: m for m in calculate_all_risk_metrics(securities, returns, config, strict)}
    areas = [
        ("Single Security Limit", "Single Security Exposure"),
        ("Single Sector Limit", "Single Sector Exposure"),
        ("Regional Allocation Limit", "Regional Allocation"),
        ("Drawdown Limit", "Drawdown Limit"),
    ]

    checks = []
    for area, metric_name in areas:
        metric = metrics[metric_name]
        checks.append(ComplianceCheck(
            area=area,
            ips_limit=metric.ips_limit,
            current_status=metric.status,
            breach=metric.status == MetricStatus.BREACH,
            action_required=metric.action_required,
        ))

    checks.append(ComplianceCheck(area="Prohibited Instruments", ips_limit="None"))
    checks.append(ComplianceCheck(area="Credit Rating Compliance", ips_limit="≥Investment Grade"))
    return checks
