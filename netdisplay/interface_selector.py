#!/usr/bin/env python3
"""
Interface Selector Module

Decides which network interface represents the connection for a cycle:
wireless first, then wired, then the wireless name as a best-effort default.
"""

import logging

from netdisplay.system_info import AddressQuery

logger = logging.getLogger(__name__)


class InterfaceSelector:
    """Pick the active interface each cycle"""

    def __init__(self, query: AddressQuery, wireless: str = "wlan0", wired: str = "eth0"):
        self.query = query
        self.wireless = wireless
        self.wired = wired

    def _has_address(self, name: str) -> bool:
        try:
            return bool(self.query.interface_has_address(name))
        except Exception as e:
            logger.debug(f"Interface check for {name} failed: {e}")
            return False

    def select(self) -> str:
        """
        Select the interface to report on

        Returns:
            The wireless interface if it has an address, else the wired one if
            it has an address, else the wireless name. Never raises.
        """
        for name in (self.wireless, self.wired):
            if self._has_address(name):
                return name

        logger.debug(f"No interface has an address, defaulting to {self.wireless}")
        return self.wireless
