"""Configuration loading, validation, and IPS defaults."""

from ipsmonitor.config.loader import load_config
from ipsmonitor.config.schema import IPSMonitorConfig

__all__ = ["load_config", "IPSMonitorConfig"]
