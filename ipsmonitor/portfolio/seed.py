"""First-run portfolio built from the IPS seed rows in config.defaults."""

from __future__ import annotations

from datetime import date

from ipsmonitor.config.defaults import (
    COMPLIANCE_CHECK_ROWS,
    INITIAL_TOTAL_VALUE,
    LIQUIDITY_ROWS,
    PERFORMANCE_ROWS,
    RISK_METRIC_ROWS,
    STRATEGIC_ALLOCATIONS,
)
from ipsmonitor.portfolio.models import (
    Allocation,
    ComplianceCheck,
    LiquidityItem,
    PerformanceMetric,
    PortfolioSnapshot,
    RiskMetric,
)


def initial_snapshot(as_of: str | None = None) -> PortfolioSnapshot:
    """Seed snapshot: strategic targets, placeholder metric rows, no securities.

    Current allocations start at zero, so every asset class initially shows
    a deviation of ``-target``.
    """
    return PortfolioSnapshot(
        date=as_of or date.today().isoformat(),
        total_value=float(INITIAL_TOTAL_VALUE),
        allocations=[Allocation.from_dict(row) for row in STRATEGIC_ALLOCATIONS],
        securities=[],
        risk_metrics=[RiskMetric(metric=name, ips_limit=limit) for name, limit in RISK_METRIC_ROWS],
        liquidity=[LiquidityItem.from_dict(row) for row in LIQUIDITY_ROWS],
        tactical_adjustments=[],
        performance_metrics=[
            PerformanceMetric(metric=name, target=target, notes=notes)
            for name, target, notes in PERFORMANCE_ROWS
        ],
        compliance_checks=[
            ComplianceCheck(area=area, ips_limit=limit) for area, limit in COMPLIANCE_CHECK_ROWS
        ],
    )
