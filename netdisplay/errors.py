#!/usr/bin/env python3
"""
Exception types shared across NetDisplay modules
"""


class NetDisplayError(Exception):
    """Base class for NetDisplay errors"""


class ConfigError(NetDisplayError):
    """Raised when configuration values cannot be parsed"""


class DisplayUnavailableError(NetDisplayError):
    """Raised when the display cannot be opened at startup"""
