"""Investment Policy Statement limits and first-run portfolio defaults.

The IPS limits below are policy, not calibrated parameters. They mirror the
signed Investment Policy Statement; changing them changes what the
portfolio is measured against.
"""

# ---------------------------------------------------------------------------
# IPS Exposure Limits (percent of portfolio)
# ---------------------------------------------------------------------------
IPS_LIMITS = {
    "single_security": 10.0,   # max weight of any one holding
    "single_sector": 25.0,     # max summed weight of any one sector
    "regional": 10.0,          # max summed weight of any one region
    "duration_years": 2.0,     # max weighted fixed-income duration
    "volatility_band": [0.05, 0.07],  # target annualised volatility range
    "drawdown": 5.0,           # max peak-to-trough decline, percent
}

# Strategic allocation tolerance: |current - target| above this triggers rebalancing
REBALANCE_TOLERANCE = 3.0

# Sum of |tactical deviation| allowed before the log is flagged
TACTICAL_DEVIATION_LIMIT = 5.0

# ---------------------------------------------------------------------------
# Liquidity Bands
# ---------------------------------------------------------------------------
CASH_ITEM = "Cash & Cash Equivalents"
TIME_TO_LIQUIDATE_ITEM = "Time to Liquidate 80% Portfolio"

LIQUIDITY_BANDS = {
    "cash_min": 10.0,               # percent of portfolio
    "cash_max": 15.0,
    "max_days_to_liquidate": 30.0,  # days to liquidate 80% of the portfolio
}

# ---------------------------------------------------------------------------
# Risk Statistics
# ---------------------------------------------------------------------------
RISK_FREE_RATE = 0.05

# Fixed-income duration estimates (years) keyed by instrument label
DURATION_TABLE = {
    "T-Bill": 0.25,
    "Bond": 2.5,
    "Government Bond": 3.0,
    "Corporate Bond": 2.5,
    "default": 1.5,
}

DEFAULT_BETA = 1.0

# Heuristic risk score: weighted blend of vol, drawdown, concentration, beta
RISK_ASSESSMENT_WEIGHTS = {
    "volatility": 0.4,
    "drawdown": 0.3,
    "concentration": 0.2,
    "beta": 0.1,
}

RISK_ASSESSMENT_THRESHOLDS = {
    "low": 0.05,     # score below -> Low
    "medium": 0.08,  # score below -> Medium, else High
}

TOP_N_CONCENTRATION = 10

# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------
STORAGE_KEY = "vertex_portfolio_state"
DEFAULT_DATABASE_PATH = "~/.ipsmonitor/ipsmonitor.db"
INITIAL_TOTAL_VALUE = 100_000_000  # TZS 100 million

# ---------------------------------------------------------------------------
# First-run Seed Rows
# ---------------------------------------------------------------------------
STRATEGIC_ALLOCATIONS = [
    {"assetClass": "Fixed Income", "target": 50,
     "notes": "Government and investment-grade corporate bonds"},
    {"assetClass": "Domestic Equities", "target": 35,
     "notes": "DSE-listed securities"},
    {"assetClass": "Regional (EAC/SADC) Equities", "target": 5,
     "notes": "EAC and SADC market exposure"},
    {"assetClass": "Cash & Cash Equivalents", "target": 10,
     "notes": "Treasury bills and bank deposits"},
]

RISK_METRIC_ROWS = [
    ("Single Security Exposure", "≤10%"),
    ("Single Sector Exposure", "≤25%"),
    ("Regional Allocation", "≤10%"),
    ("Weighted Portfolio Duration", "≤2 yrs"),
    ("Portfolio Volatility", "5-7% ann."),
    ("Drawdown Limit", "≤5%"),
    ("Credit Rating Compliance", "≥Investment Grade"),
]

LIQUIDITY_ROWS = [
    {"item": CASH_ITEM, "minimum": 10, "maximum": 15, "actionNeeded": "Monitor"},
    {"item": TIME_TO_LIQUIDATE_ITEM, "maximum": 30, "actionNeeded": "Track daily volume"},
    {"item": "Bid-Ask Spread / Daily Volume", "actionNeeded": "Monitor spreads"},
]

PERFORMANCE_ROWS = [
    ("Total Portfolio Return", "2-3%", "Quarterly target"),
    ("Asset Class Returns", "TBD", "Track individually"),
    ("Benchmark-relative Return", "Positive", "vs composite index"),
    ("Risk-adjusted Metrics (Sharpe, Sortino, etc.)", "Positive", "Monitor post-period"),
]

COMPLIANCE_CHECK_ROWS = [
    ("Single Security Limit", "≤10%"),
    ("Single Sector Limit", "≤25%"),
    ("Regional Allocation Limit", "≤10%"),
    ("Drawdown Limit", "≤5%"),
    ("Prohibited Instruments", "None"),
    ("Credit Rating Compliance", "≥Investment Grade"),
]
