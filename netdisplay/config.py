#!/usr/bin/env python3
"""
Monitor Configuration Module

Holds the settings for the display agent:
- Interface names used by the selection policy
- I2C bus and panel geometry
- Public address lookup endpoint and timeout
- Loop timing (sampling window, error backoff, cache reset period)

Values come from the dataclass defaults, then NETDISPLAY_* environment
variables, then command-line arguments.
"""

import os
import logging
from dataclasses import dataclass, fields, replace
from typing import Dict, Mapping, Optional, Any

from rich.logging import RichHandler

from netdisplay.errors import ConfigError

ENV_PREFIX = "NETDISPLAY_"

# 1 TiB/s, anything above this is a counter discontinuity
MAX_PLAUSIBLE_RATE = 1024 ** 4


@dataclass
class MonitorConfig:
    """Configuration for the network display agent"""
    wireless_interface: str = "wlan0"
    wired_interface: str = "eth0"
    i2c_port: int = 1
    i2c_address: int = 0x3C
    width: int = 128
    height: int = 64
    public_ip_url: str = "https://ifconfig.me/ip"
    public_ip_timeout: float = 5.0
    sample_window: float = 1.0
    error_backoff: float = 5.0
    cache_reset_cycles: int = 60
    max_plausible_rate: float = float(MAX_PLAUSIBLE_RATE)
    debug: bool = False

    def with_overrides(self, **overrides: Any) -> "MonitorConfig":
        """
        Return a copy with the given fields replaced

        Args:
            overrides: Field values to apply, None values are ignored

        Returns:
            New MonitorConfig instance
        """
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)


def _parse_value(name: str, raw: str, target_type: type) -> Any:
    """Convert a raw environment string to the field's type"""
    try:
        if target_type is bool:
            lowered = raw.strip().lower()
            if lowered in ("1", "true", "yes", "on"):
                return True
            if lowered in ("0", "false", "no", "off", ""):
                return False
            raise ValueError(f"not a boolean: {raw!r}")
        if target_type is int:
            # Accept hex for bus addresses (e.g. 0x3C)
            return int(raw, 0)
        if target_type is float:
            return float(raw)
        return raw
    except ValueError as e:
        raise ConfigError(f"Invalid value for {ENV_PREFIX}{name.upper()}: {e}") from e


def load_config(environ: Optional[Mapping[str, str]] = None) -> MonitorConfig:
    """
    Build a MonitorConfig from defaults and NETDISPLAY_* environment variables

    Args:
        environ: Environment mapping, defaults to os.environ

    Returns:
        Populated MonitorConfig

    Raises:
        ConfigError: If a variable cannot be converted or is out of range
    """
    if environ is None:
        environ = os.environ

    defaults = MonitorConfig()
    values: Dict[str, Any] = {}
    for field in fields(MonitorConfig):
        key = f"{ENV_PREFIX}{field.name.upper()}"
        if key in environ:
            target_type = field.type
            values[field.name] = _parse_value(field.name, environ[key], target_type)

    config = replace(defaults, **values)
    validate_config(config)
    return config


def validate_config(config: MonitorConfig) -> None:
    """Reject values the loop cannot run with"""
    if config.sample_window <= 0:
        raise ConfigError("sample_window must be positive")
    if config.public_ip_timeout <= 0:
        raise ConfigError("public_ip_timeout must be positive")
    if config.error_backoff < 0:
        raise ConfigError("error_backoff must not be negative")
    if config.cache_reset_cycles < 1:
        raise ConfigError("cache_reset_cycles must be at least 1")
    if not 0 <= config.i2c_address <= 0x7F:
        raise ConfigError(f"i2c_address out of range: {config.i2c_address:#x}")


def setup_logging(debug: bool = False) -> None:
    """Configure rich logging for the whole process"""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
