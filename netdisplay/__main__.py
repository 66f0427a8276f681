#!/usr/bin/env python3
"""
NetDisplay - Main Entry Point

Shows the active connection's addresses and throughput on a small
I2C OLED panel, refreshed roughly once per second
"""

import sys
import signal
import logging
import argparse
from typing import List, Optional

from rich.console import Console

from netdisplay.config import load_config, setup_logging, validate_config
from netdisplay.display import open_display
from netdisplay.errors import ConfigError, DisplayUnavailableError
from netdisplay.monitor import build_context, run
from netdisplay.service_unit import render_service_unit

logger = logging.getLogger("netdisplay")


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command-line arguments"""
    parser = argparse.ArgumentParser(
        description="NetDisplay - Network status on an OLED panel"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help="Enable debug logging"
    )

    parser.add_argument(
        "--console",
        action="store_true",
        help="Render frames to the terminal instead of the OLED panel"
    )

    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single cycle and exit"
    )

    parser.add_argument(
        "--i2c-port",
        type=int,
        help="I2C bus number (default 1)"
    )

    parser.add_argument(
        "--i2c-address",
        type=lambda value: int(value, 0),
        help="I2C address of the panel (default 0x3C)"
    )

    parser.add_argument(
        "--wireless",
        dest="wireless_interface",
        help="Wireless interface name (default wlan0)"
    )

    parser.add_argument(
        "--wired",
        dest="wired_interface",
        help="Wired interface name (default eth0)"
    )

    parser.add_argument(
        "--public-ip-url",
        help="URL of the public address echo service"
    )

    parser.add_argument(
        "--print-service-unit",
        action="store_true",
        help="Print a systemd unit for this agent and exit"
    )

    parser.add_argument(
        "--service-user",
        default="root",
        help="Account the generated unit runs as (default root)"
    )

    parser.add_argument(
        "--service-workdir",
        help="Working directory of the generated unit (default /root)"
    )

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application"""
    console = Console()
    args = parse_arguments(argv)

    if args.print_service_unit:
        unit = render_service_unit(user=args.service_user, working_directory=args.service_workdir)
        console.print(unit, markup=False, highlight=False, soft_wrap=True, end="")
        return 0

    try:
        config = load_config().with_overrides(
            debug=args.debug,
            i2c_port=args.i2c_port,
            i2c_address=args.i2c_address,
            wireless_interface=args.wireless_interface,
            wired_interface=args.wired_interface,
            public_ip_url=args.public_ip_url,
        )
        validate_config(config)
    except ConfigError as e:
        console.print(f"[bold red]Configuration error: {e}[/bold red]")
        return 2

    setup_logging(config.debug)

    try:
        display = open_display(config, use_console=args.console)
    except DisplayUnavailableError as e:
        logger.critical(str(e))
        return 1

    ctx = build_context(config, display)
    signal.signal(signal.SIGTERM, lambda signum, frame: ctx.stop())

    logger.info(f"Starting network display ({config.wireless_interface}/{config.wired_interface})")
    try:
        run(ctx, max_cycles=1 if args.once else None)
    except KeyboardInterrupt:
        pass
    logger.info("Exiting...")
    return 0


if __name__ == "__main__":
    sys.exit(main())
