"""Output formatting for reports."""

from ipsmonitor.output.formatting import format_currency, format_percentage, format_years

__all__ = ["format_currency", "format_percentage", "format_years"]
