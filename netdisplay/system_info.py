#!/usr/bin/env python3
"""
System Information Collaborators

Thin wrappers over the host facilities the display loop reads from:
- Per-interface byte counters (psutil)
- Interface address assignment and the primary local address
- Plain-text HTTP fetches for the public address echo service
"""

import socket
import logging
import subprocess
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import psutil
import requests

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LookupResult:
    """Outcome of a query that may not produce a value"""
    value: Optional[str] = None
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.value is not None

    @classmethod
    def found(cls, value: str) -> "LookupResult":
        return cls(value=value)

    @classmethod
    def missing(cls, reason: str) -> "LookupResult":
        return cls(value=None, reason=reason)

    def or_placeholder(self, placeholder: str) -> str:
        """Return the value, or the placeholder when the lookup failed"""
        return self.value if self.value is not None else placeholder


class SystemCounters:
    """Per-interface cumulative byte counters backed by psutil"""

    def counters(self) -> Dict[str, Tuple[int, int]]:
        """
        Get cumulative counters for every interface

        Returns:
            Mapping of interface name to (bytes_sent, bytes_recv)
        """
        stats = psutil.net_io_counters(pernic=True)
        return {
            name: (counters.bytes_sent, counters.bytes_recv)
            for name, counters in stats.items()
        }

    def invalidate_cache(self) -> None:
        """Drop psutil's cached counter state so the next read starts fresh"""
        psutil.net_io_counters.cache_clear()
        logger.debug("Network counter cache cleared")


class AddressQuery:
    """Address and interface queries against the local OS"""

    def __init__(self, timeout: float = 5.0):
        self.timeout = timeout

    def _run_command(self, command: List[str]) -> Tuple[bool, str]:
        """
        Run a command and return its output

        Args:
            command: List of command components

        Returns:
            Tuple of (success, output)
        """
        try:
            result = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                check=False,
                timeout=self.timeout,
            )
        except (subprocess.SubprocessError, OSError) as e:
            return False, f"Exception: {e}"

        if result.returncode == 0:
            return True, result.stdout
        return False, f"Error ({result.returncode}): {result.stderr.strip()}"

    def primary_local_address(self) -> LookupResult:
        """Get the host's primary address (first entry of `hostname -I`)"""
        success, output = self._run_command(["hostname", "-I"])
        if not success:
            return LookupResult.missing(output)

        addresses = output.split()
        if not addresses:
            return LookupResult.missing("no address assigned")
        return LookupResult.found(addresses[0])

    def interface_has_address(self, name: str) -> bool:
        """Check whether an interface currently holds an IPv4 address"""
        try:
            addrs = psutil.net_if_addrs().get(name, [])
        except (OSError, psutil.Error) as e:
            logger.debug(f"Address query for {name} failed: {e}")
            return False
        return any(addr.family == socket.AF_INET and addr.address for addr in addrs)


class HttpClient:
    """Plain-text HTTP GET with a bounded timeout"""

    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session or requests.Session()

    def get_text(self, url: str, timeout: float) -> str:
        """
        Fetch a URL and return the stripped body

        Raises:
            requests.RequestException: On connection errors, timeouts and non-2xx replies
        """
        response = self.session.get(url, timeout=timeout)
        response.raise_for_status()
        return response.text.strip()
