"""Integration tests: full analytics report over a snapshot."""

from __future__ import annotations

import copy

import pytest

from ipsmonitor.engine.report import build_portfolio_report
from ipsmonitor.portfolio.models import LiquidityStatus, PortfolioSnapshot


class TestBuildPortfolioReport:
    def test_empty_snapshot(self):
        report = build_portfolio_report(PortfolioSnapshot.empty("2025-01-01"))
        assert report.as_of == "2025-01-01"
        assert report.security_compliance.is_compliant
        assert report.allocations_compliant
        assert report.is_compliant
        assert report.exposures.total_weight == 0.0
        assert len(report.risk_metrics) == 7

    def test_populated_snapshot(self, populated_snapshot, monthly_returns):
        report = build_portfolio_report(populated_snapshot, monthly_returns)
        assert report.security_compliance.is_compliant
        assert not report.allocations_compliant
        assert not report.is_compliant
        assert [a.asset_class for a in report.rebalancing] == [
            "Fixed Income", "Domestic Equities",
        ]
        assert report.statistics.n_observations == 36
        assert report.tactical.count == 1
        assert report.tactical.within_limit

    def test_liquidity_is_rederived(self, populated_snapshot):
        report = build_portfolio_report(populated_snapshot)
        cash = report.liquidity[0]
        assert cash.status is LiquidityStatus.CRITICAL
        assert report.liquidity_alerts["critical"] == [cash]

    def test_snapshot_not_modified(self, populated_snapshot, monthly_returns):
        before = copy.deepcopy(populated_snapshot)
        build_portfolio_report(populated_snapshot, monthly_returns)
        assert populated_snapshot == before

    def test_strict_mode(self, populated_snapshot, make_security):
        populated_snapshot.securities.append(make_security("ODD", 1.0, sector="Mining"))
        report = build_portfolio_report(populated_snapshot, strict=True)
        assert "Mining" not in report.exposures.sector_exposures
        assert report.exposures.sector_exposures["Other"] == pytest.approx(1.0)

    def test_strict_mode_applies_to_compliance(self, make_security):
        snapshot = PortfolioSnapshot.empty("2025-01-01")
        snapshot.securities = [
            make_security("GLD", 9.0, sector="Mining", geographic_exposure="Kenya"),
            make_security("FARM", 9.0, sector="Agriculture", geographic_exposure="Uganda"),
            make_security("REIT", 9.0, sector="Real Estate", geographic_exposure="South Africa"),
        ]
        report = build_portfolio_report(snapshot, strict=True)
        assert report.exposures.sector_exposures == {"Other": pytest.approx(27.0)}
        assert not report.security_compliance.is_compliant
        sector_row = report.risk_metrics[1]
        assert sector_row.status == "Breach"
        assert "Other" in sector_row.action_required

    def test_breaches_flow_through(self, breaching_securities):
        snapshot = PortfolioSnapshot.empty("2025-01-01")
        snapshot.securities = breaching_securities
        report = build_portfolio_report(snapshot)
        assert len(report.security_compliance.breaches) == 3
        assert sum(c.breach for c in report.compliance_checks) == 3
