"""Shared test fixtures for IPS Monitor.

Provides reusable fixtures for database, config, holdings, and return
series across all test modules.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from ipsmonitor.config.schema import IPSMonitorConfig
from ipsmonitor.portfolio.models import (
    Allocation,
    LiquidityItem,
    PortfolioSnapshot,
    Security,
    TacticalAdjustment,
)
from ipsmonitor.portfolio.seed import initial_snapshot
from ipsmonitor.storage.database import Database
from ipsmonitor.storage.migrations import MIGRATION_DIR, ensure_schema

# ---------------------------------------------------------------------------
# Core infrastructure
# ---------------------------------------------------------------------------

@pytest.fixture
def test_config(tmp_path: Path) -> IPSMonitorConfig:
    """Default limits with a temp database path."""
    return IPSMonitorConfig(database={"path": str(tmp_path / "test.db")})


@pytest.fixture
def test_db(tmp_path: Path) -> Database:
    """Database with schema applied, using temp file."""
    db = Database(tmp_path / "test.db")
    ensure_schema(db)
    yield db
    db.close()


@pytest.fixture
def memory_db() -> Database:
    """In-memory database for fast unit tests."""
    db = Database(":memory:")
    db.executescript((MIGRATION_DIR / "001_initial.sql").read_text())
    yield db
    db.close()


# ---------------------------------------------------------------------------
# Holdings
# ---------------------------------------------------------------------------

def _make_security(ticker: str, weight: float, **kwargs) -> Security:
    """Security with sensible defaults; id derived from the ticker."""
    kwargs.setdefault("id", ticker.lower())
    kwargs.setdefault("name", ticker)
    return Security(ticker=ticker, current_weight=weight, **kwargs)


@pytest.fixture
def make_security():
    """Factory for Security records: make_security("CRDB", 8.0, sector="Banking")."""
    return _make_security


@pytest.fixture
def balanced_securities() -> list[Security]:
    """A compliant book: no single name, sector or region over its limit."""
    return [
        _make_security("TB91", 9.0, asset_class="Fixed Income", sector="Government",
                      instrument_type="T-Bill"),
        _make_security("KCB", 8.0, asset_class="Regional (EAC/SADC) Equities",
                      sector="Banking", geographic_exposure="Kenya"),
        _make_security("MTNU", 9.0, asset_class="Regional (EAC/SADC) Equities",
                      sector="Telecommunications", geographic_exposure="Uganda"),
        _make_security("NPN", 7.0, asset_class="Regional (EAC/SADC) Equities",
                      sector="Technology", geographic_exposure="South Africa"),
        _make_security("EABL", 6.0, asset_class="Regional (EAC/SADC) Equities",
                      sector="Consumer Goods", geographic_exposure="Regional"),
    ]


@pytest.fixture
def breaching_securities() -> list[Security]:
    """Breaches the single-security, sector and regional limits at once."""
    return [
        _make_security("CRDB", 15.0, sector="Banking"),
        _make_security("NMB", 9.0, sector="Banking"),
        _make_security("DCB", 4.0, sector="Banking"),
        _make_security("KCB", 12.0, sector="Technology", geographic_exposure="Kenya"),
    ]


# ---------------------------------------------------------------------------
# Return series (deterministic)
# ---------------------------------------------------------------------------

@pytest.fixture
def monthly_returns() -> np.ndarray:
    """36 monthly returns (seed=42)."""
    rng = np.random.default_rng(42)
    return rng.normal(0.006, 0.02, 36)


# ---------------------------------------------------------------------------
# Snapshots
# ---------------------------------------------------------------------------

@pytest.fixture
def seeded_snapshot() -> PortfolioSnapshot:
    """First-run snapshot with a fixed date."""
    return initial_snapshot(as_of="2025-01-31")


@pytest.fixture
def populated_snapshot(balanced_securities) -> PortfolioSnapshot:
    """Seeded snapshot with holdings, liquidity figures and a tactical move."""
    snapshot = initial_snapshot(as_of="2025-03-31")
    snapshot.securities = balanced_securities
    snapshot.allocations = [
        Allocation(asset_class="Fixed Income", target=50, current=18),
        Allocation(asset_class="Domestic Equities", target=35, current=52),
        Allocation(asset_class="Regional (EAC/SADC) Equities", target=5, current=8),
        Allocation(asset_class="Cash & Cash Equivalents", target=10, current=9),
    ]
    snapshot.liquidity = [
        LiquidityItem(item="Cash & Cash Equivalents", minimum=10, maximum=15, current=9),
        LiquidityItem(item="Time to Liquidate 80% Portfolio", maximum=30, current=12),
    ]
    snapshot.tactical_adjustments = [
        TacticalAdjustment(
            id="1", date="2025-03-01", tactical_move="Overweight banks",
            deviation_percent=2.5, market_signal="Rate cuts", duration="3 months",
            approved_by="IC",
        ),
    ]
    return snapshot
