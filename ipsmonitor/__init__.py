"""ipsmonitor -- Investment Policy Statement portfolio monitor."""

__version__ = "0.1.0"
