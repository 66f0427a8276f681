#!/usr/bin/env python3
"""
Network Throughput Module

Measures upload/download rates for a single interface:
- Two counter samples taken one window apart
- Deltas divided by the window
- Out-of-range results clamped to zero
"""

import time
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from netdisplay.config import MAX_PLAUSIBLE_RATE
from netdisplay.system_info import SystemCounters

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CounterSample:
    """Cumulative byte counters of one interface at one moment"""
    interface: str
    bytes_sent: int
    bytes_recv: int
    taken_at: float


def clamp_rate(rate: float, maximum: float = MAX_PLAUSIBLE_RATE) -> float:
    """
    Coerce a measured rate into [0, maximum]

    Negative rates (counter rollover, interface reset) and rates above the
    maximum (counter discontinuity) are measurement artifacts and become 0.
    """
    if rate < 0 or rate > maximum:
        return 0.0
    return rate


def compute_rates(first: CounterSample, second: CounterSample, window: float,
                  maximum: float = MAX_PLAUSIBLE_RATE) -> Tuple[float, float]:
    """
    Calculate upload and download rates from a sample pair

    Args:
        first: Sample taken before the window
        second: Sample taken after the window
        window: Window length in seconds
        maximum: Largest rate accepted as real throughput

    Returns:
        Tuple of (upload_rate, download_rate) in bytes/second
    """
    if first.interface != second.interface or window <= 0:
        return 0.0, 0.0
    if second.taken_at <= first.taken_at:
        return 0.0, 0.0

    upload = (second.bytes_sent - first.bytes_sent) / window
    download = (second.bytes_recv - first.bytes_recv) / window
    return clamp_rate(upload, maximum), clamp_rate(download, maximum)


def format_speed(speed_kbps: float) -> str:
    """
    Format a KB/s value with the largest fitting unit

    Args:
        speed_kbps: Speed in KB/s

    Returns:
        Human-readable string (e.g., "2.0 MB/s")
    """
    if speed_kbps >= 1024 * 1024:
        return f"{speed_kbps / (1024 * 1024):.1f} GB/s"
    if speed_kbps >= 1024:
        return f"{speed_kbps / 1024:.1f} MB/s"
    return f"{speed_kbps:.1f} KB/s"


class ThroughputSampler:
    """Counter-delta throughput measurement for one interface at a time"""

    def __init__(self, counters: SystemCounters, window: float = 1.0,
                 max_rate: float = MAX_PLAUSIBLE_RATE,
                 sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], float] = time.monotonic):
        """
        Initialize the sampler

        Args:
            counters: Source of per-interface byte counters
            window: Time between the two counter reads in seconds
            max_rate: Largest rate in bytes/second accepted as real
            sleep: Sleep function, replaceable in tests
            clock: Monotonic clock used to timestamp samples
        """
        self.counters = counters
        self.window = window
        self.max_rate = max_rate
        self._sleep = sleep
        self._clock = clock

    def _sample(self, interface: str) -> Optional[CounterSample]:
        """Read the counters of one interface, None if it is not present"""
        current = self.counters.counters()
        if interface not in current:
            return None
        bytes_sent, bytes_recv = current[interface]
        return CounterSample(interface, bytes_sent, bytes_recv, self._clock())

    def measure(self, interface: str) -> Tuple[float, float]:
        """
        Measure upload and download rates over one window

        Args:
            interface: Network interface name

        Returns:
            Tuple of (upload_rate, download_rate) in bytes/second, (0, 0) when
            the interface is missing or the counters cannot be read
        """
        try:
            first = self._sample(interface)
            if first is None:
                logger.debug(f"Interface {interface} not in counters")
                return 0.0, 0.0

            self._sleep(self.window)

            second = self._sample(interface)
            if second is None:
                logger.debug(f"Interface {interface} disappeared during sampling")
                return 0.0, 0.0
        except Exception as e:
            logger.warning(f"Error getting network speed: {e}")
            return 0.0, 0.0

        return compute_rates(first, second, self.window, self.max_rate)
