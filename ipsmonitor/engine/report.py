"""One-call analytics over a portfolio snapshot.

Runs the exposure aggregator and risk statistics over the snapshot, then
feeds their outputs to the compliance evaluator, the allocation reconciler,
liquidity evaluation and the tactical log summary.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ipsmonitor.config.schema import IPSMonitorConfig
from ipsmonitor.engine.compliance import (
    build_compliance_checks,
    calculate_all_risk_metrics,
    check_security_compliance,
)
from ipsmonitor.engine.exposure import ExposureReport, compute_exposure_report
from ipsmonitor.engine.liquidity import evaluate_liquidity, liquidity_alerts
from ipsmonitor.engine.reconciler import check_allocation_compliance, rebalancing_candidates
from ipsmonitor.engine.statistics import ReturnSeries, RiskStatistics, compute_risk_statistics
from ipsmonitor.portfolio.models import (
    Allocation,
    ComplianceCheck,
    ComplianceReport,
    LiquidityItem,
    PortfolioSnapshot,
    RiskMetric,
)
from ipsmonitor.portfolio.tactical import TacticalSummary, summarize_tactical_adjustments


@dataclass
class PortfolioReport:
    """Everything the presentation layer displays for one snapshot."""

    as_of: str = ""
    exposures: ExposureReport = field(default_factory=ExposureReport)
    statistics: RiskStatistics = field(default_factory=RiskStatistics)
    risk_metrics: list[RiskMetric] = field(default_factory=list)
    security_compliance: ComplianceReport = field(default_factory=ComplianceReport)
    compliance_checks: list[ComplianceCheck] = field(default_factory=list)
    allocations_compliant: bool = True
    rebalancing: list[Allocation] = field(default_factory=list)
    liquidity: list[LiquidityItem] = field(default_factory=list)
    liquidity_alerts: dict[str, list[LiquidityItem]] = field(default_factory=dict)
    tactical: TacticalSummary = field(default_factory=TacticalSummary)

    @property
    def is_compliant(self) -> bool:
        """IPS exposure rules pass and no allocation needs rebalancing."""
        return self.security_compliance.is_compliant and self.allocations_compliant


def build_portfolio_report(
    snapshot: PortfolioSnapshot,
    returns: ReturnSeries | None = None,
    config: IPSMonitorConfig | None = None,
    strict: bool = False,
) -> PortfolioReport:
    """Compute the full analytics report for ``snapshot``.

    The snapshot is read, never modified.
    """
    if config is None:
        config = IPSMonitorConfig()

    securities = snapshot.securities
    liquidity = evaluate_liquidity(snapshot.liquidity, config)

    return PortfolioReport(
        as_of=snapshot.date,
        exposures=compute_exposure_report(securities, strict, config.risk.top_n),
        statistics=compute_risk_statistics(securities, returns, config),
        risk_metrics=calculate_all_risk_metrics(securities, returns, config, strict),
        security_compliance=check_security_compliance(securities, config, strict),
        compliance_checks=build_compliance_checks(securities, returns, config, strict),
        allocations_compliant=check_allocation_compliance(snapshot.allocations),
        rebalancing=rebalancing_candidates(snapshot.allocations),
        liquidity=liquidity,
        liquidity_alerts=liquidity_alerts(liquidity),
        tactical=summarize_tactical_adjustments(
            snapshot.tactical_adjustments, config.ips.tactical_deviation,
        ),
    )
