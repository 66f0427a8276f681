#!/usr/bin/env python3
"""
Monitor Loop Module

Runs the sample -> resolve -> render cycle until interrupted. All loop state
lives on a MonitorContext passed into each cycle.
"""

import time
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from netdisplay.address_resolver import AddressResolver
from netdisplay.config import MonitorConfig
from netdisplay.display import DisplayRenderer, DisplaySnapshot
from netdisplay.interface_selector import InterfaceSelector
from netdisplay.network_stats import ThroughputSampler
from netdisplay.system_info import AddressQuery, HttpClient, SystemCounters

logger = logging.getLogger(__name__)


@dataclass
class MonitorContext:
    """Handles and mutable state owned by the loop thread"""
    config: MonitorConfig
    selector: InterfaceSelector
    sampler: ThroughputSampler
    resolver: AddressResolver
    renderer: DisplayRenderer
    counters: SystemCounters
    sleep: Callable[[float], None] = time.sleep
    cycle_counter: int = 0
    running: bool = True

    def stop(self) -> None:
        self.running = False


def build_context(config: MonitorConfig, display,
                  counters: Optional[SystemCounters] = None,
                  query: Optional[AddressQuery] = None,
                  http: Optional[HttpClient] = None,
                  sleep: Callable[[float], None] = time.sleep) -> MonitorContext:
    """
    Wire the loop components together

    Args:
        config: Monitor configuration
        display: Object providing open_surface()
        counters: Counter source, psutil-backed by default
        query: Address query collaborator
        http: HTTP client for the public address lookup
        sleep: Sleep function shared by the sampler and the error backoff

    Returns:
        Ready to run MonitorContext
    """
    counters = counters or SystemCounters()
    query = query or AddressQuery()
    http = http or HttpClient()

    return MonitorContext(
        config=config,
        selector=InterfaceSelector(query, config.wireless_interface, config.wired_interface),
        sampler=ThroughputSampler(counters, config.sample_window, config.max_plausible_rate, sleep=sleep),
        resolver=AddressResolver(query, http, config.public_ip_url, config.public_ip_timeout),
        renderer=DisplayRenderer(display),
        counters=counters,
        sleep=sleep,
    )


def run_cycle(ctx: MonitorContext) -> DisplaySnapshot:
    """
    Run one full cycle and draw its result

    Raises:
        Exception: Anything not recovered by the components themselves
    """
    interface = ctx.selector.select()
    local_address, public_address = ctx.resolver.resolve(interface)
    upload_rate, download_rate = ctx.sampler.measure(interface)

    snapshot = DisplaySnapshot(
        public_address=public_address,
        local_address=local_address,
        upload_rate=upload_rate,
        download_rate=download_rate,
    )
    ctx.renderer.render(snapshot)

    ctx.cycle_counter += 1
    if ctx.cycle_counter >= ctx.config.cache_reset_cycles:
        ctx.counters.invalidate_cache()
        ctx.cycle_counter = 0

    return snapshot


def handle_cycle_error(ctx: MonitorContext, error: Exception) -> None:
    """Show the error screen, back off, then clear the counter cache"""
    message = str(error) or type(error).__name__
    logger.error(f"Error in main loop: {message}")

    try:
        ctx.renderer.render_error(message)
    except Exception as e:
        logger.error(f"Could not draw error screen: {e}")

    ctx.sleep(ctx.config.error_backoff)

    try:
        ctx.counters.invalidate_cache()
    except Exception as e:
        logger.warning(f"Could not clear counter cache: {e}")


def run(ctx: MonitorContext, max_cycles: Optional[int] = None) -> int:
    """
    Run cycles until stopped

    Args:
        ctx: Loop context
        max_cycles: Stop after this many cycles, None runs until interrupted

    Returns:
        Number of cycles started
    """
    cycles = 0
    while ctx.running and (max_cycles is None or cycles < max_cycles):
        cycles += 1
        try:
            snapshot = run_cycle(ctx)
            logger.debug(f"Cycle {cycles}: {snapshot}")
        except KeyboardInterrupt:
            logger.info("Interrupted, stopping")
            break
        except Exception as e:
            handle_cycle_error(ctx, e)

    return cycles
