#!/usr/bin/env python3
"""
Address Resolver Module

Looks up the two addresses shown on the display:
- Local: the host's primary address, "Not connected" when absent
- Public: the address reported by an echo service, "Unable to get" on failure
"""

import ipaddress
import logging
from typing import Tuple

import requests

from netdisplay.system_info import AddressQuery, HttpClient, LookupResult

logger = logging.getLogger(__name__)

NOT_CONNECTED = "Not connected"
UNABLE_TO_GET = "Unable to get"


class AddressResolver:
    """Resolve local and public addresses for display"""

    def __init__(self, query: AddressQuery, http: HttpClient,
                 public_ip_url: str = "https://ifconfig.me/ip", timeout: float = 5.0):
        self.query = query
        self.http = http
        self.public_ip_url = public_ip_url
        self.timeout = timeout

    def local_address(self) -> LookupResult:
        try:
            return self.query.primary_local_address()
        except Exception as e:
            return LookupResult.missing(str(e))

    def public_address(self) -> LookupResult:
        """Ask the echo service for our public address"""
        try:
            body = self.http.get_text(self.public_ip_url, self.timeout)
        except requests.RequestException as e:
            return LookupResult.missing(f"request failed: {e}")
        except Exception as e:
            return LookupResult.missing(str(e))

        try:
            # Reject captive portal pages and other non-address bodies
            address = ipaddress.ip_address(body)
        except ValueError:
            return LookupResult.missing(f"malformed body: {body[:40]!r}")
        return LookupResult.found(str(address))

    def resolve(self, interface: str) -> Tuple[str, str]:
        """
        Resolve both addresses, substituting placeholders for failures

        Args:
            interface: Interface selected for this cycle (used for logging)

        Returns:
            Tuple of (local, public)
        """
        local = self.local_address()
        if not local.ok:
            logger.debug(f"Local address unavailable on {interface}: {local.reason}")

        public = self.public_address()
        if not public.ok:
            logger.debug(f"Public address unavailable: {public.reason}")

        return local.or_placeholder(NOT_CONNECTED), public.or_placeholder(UNABLE_TO_GET)
