"""Portfolio analytics and IPS compliance engine.

Public API:
  compute_exposure_report   -- asset-class / sector / region rollups + concentration
  compute_risk_statistics   -- volatility, Sharpe, Sortino, drawdown, duration, beta
  check_security_compliance -- IPS breach report
  calculate_all_risk_metrics -- risk metric table rows
  check_allocation_compliance -- strategic allocation tolerance check
  build_portfolio_report    -- everything above for one snapshot
"""

from ipsmonitor.engine.compliance import calculate_all_risk_metrics, check_security_compliance
from ipsmonitor.engine.exposure import ExposureReport, compute_exposure_report
from ipsmonitor.engine.reconciler import check_allocation_compliance, needs_rebalancing
from ipsmonitor.engine.report import PortfolioReport, build_portfolio_report
from ipsmonitor.engine.statistics import RiskStatistics, compute_risk_statistics

__all__ = [
    "ExposureReport",
    "PortfolioReport",
    "RiskStatistics",
    "build_portfolio_report",
    "calculate_all_risk_metrics",
    "check_allocation_compliance",
    "check_security_compliance",
    "compute_exposure_report",
    "compute_risk_statistics",
    "needs_rebalancing",
]
