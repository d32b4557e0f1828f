"""Configuration loading: YAML file, ${ENV} expansion, pydantic validation."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

from ipsmonitor.config.schema import IPSMonitorConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATHS = [
    Path("ipsmonitor.yaml"),
    Path("~/.ipsmonitor/config.yaml"),
]

_ENV_PATTERN = re.compile(r"\$\{(\w+)\}")


def _expand_env_vars(value: Any) -> Any:
    """Recursively expand ${ENV_VAR} references; unset variables become ''."""
    if isinstance(value, str):
        return _ENV_PATTERN.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _expand_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env_vars(item) for item in value]
    return value


def _find_config_file(explicit_path: str | Path | None = None) -> Path | None:
    if explicit_path is not None:
        path = Path(explicit_path).expanduser()
        if path.is_file():
            return path
        logger.warning("Config file not found: %s (using IPS defaults)", path)
        return None

    for candidate in DEFAULT_CONFIG_PATHS:
        path = candidate.expanduser()
        if path.is_file():
            return path
    return None


def _read_yaml(path: Path) -> dict[str, Any]:
    with open(path) as f:
        raw = yaml.safe_load(f)
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"{path}: top level must be a mapping, got {type(raw).__name__}")
    return _expand_env_vars(raw)


def load_config(path: str | Path | None = None) -> IPSMonitorConfig:
    """Load and validate configuration.

    Resolution order:
    1. Explicit path argument
    2. ipsmonitor.yaml in current directory
    3. ~/.ipsmonitor/config.yaml
    4. The IPS defaults (no file needed)

    Raises pydantic.ValidationError when a value breaks a limit rule.
    """
    config_path = _find_config_file(path)
    if config_path is None:
        logger.info("No config file found, using IPS defaults")
        return IPSMonitorConfig()

    logger.info("Loading config from %s", config_path)
    config = IPSMonitorConfig.model_validate(_read_yaml(config_path))
    logger.debug(
        "Config loaded: version=%d security<=%g%% sector<=%g%% region<=%g%%",
        config.version, config.ips.single_security,
        config.ips.single_sector, config.ips.regional,
    )
    return config


def dump_config(config: IPSMonitorConfig) -> str:
    """YAML text that ``load_config`` reads back to an equal config."""
    return yaml.safe_dump(config.model_dump(), sort_keys=False, allow_unicode=True)


def resolve_path(path_str: str | Path) -> Path:
    """Expand ~ and make absolute; ':memory:' passes through unchanged."""
    if str(path_str) == ":memory:":
        return Path(":memory:")
    return Path(path_str).expanduser().resolve()
