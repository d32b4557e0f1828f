"""Display formatting shared by the risk-metric table and the CLI report."""

from __future__ import annotations


def format_percentage(value: float, decimals: int = 2) -> str:
    """12.345 -> '12.35%'."""
    return f"{value:.{decimals}f}%"


def format_currency(amount: float, currency: str = "TZS") -> str:
    """Whole-unit amount with thousands separators: 'TZS 100,000,000'."""
    return f"{currency} {amount:,.0f}"


def format_years(value: float, decimals: int = 2) -> str:
    return f"{value:.{decimals}f} yrs"
