"""Portfolio domain model: snapshot records, seed data, tactical log.

Public API::

    from ipsmonitor.portfolio import (
        PortfolioSnapshot,
        Security,
        Allocation,
        initial_snapshot,
        summarize_tactical_adjustments,
    )
"""

from ipsmonitor.portfolio.models import (
    Allocation,
    AssetClass,
    ComplianceCheck,
    ComplianceReport,
    LiquidityItem,
    LiquidityStatus,
    MetricStatus,
    PerformanceMetric,
    PortfolioSnapshot,
    Region,
    RiskLevel,
    RiskMetric,
    Sector,
    Security,
    TacticalAdjustment,
    TacticalStatus,
)
from ipsmonitor.portfolio.seed import initial_snapshot
from ipsmonitor.portfolio.tactical import TacticalSummary, summarize_tactical_adjustments

__all__ = [
    "Allocation",
    "AssetClass",
    "ComplianceCheck",
    "ComplianceReport",
    "LiquidityItem",
    "LiquidityStatus",
    "MetricStatus",
    "PerformanceMetric",
    "PortfolioSnapshot",
    "Region",
    "RiskLevel",
    "RiskMetric",
    "Sector",
    "Security",
    "TacticalAdjustment",
    "TacticalStatus",
    "TacticalSummary",
    "initial_snapshot",
    "summarize_tactical_adjustments",
]
