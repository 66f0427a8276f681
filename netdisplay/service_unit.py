#!/usr/bin/env python3
"""
Generate the systemd unit that keeps the display agent running
"""

import sys
from typing import Optional

UNIT_TEMPLATE = """\
[Unit]
Description=Network Monitor OLED Display
After=network.target

[Service]
Type=simple
User={user}
Group={group}
WorkingDirectory={working_directory}
ExecStart={python} -m netdisplay
Restart=always
RestartSec=10
Environment=PYTHONUNBUFFERED=1

[Install]
WantedBy=multi-user.target
"""


def render_service_unit(user: str = "root", group: Optional[str] = None,
                        working_directory: Optional[str] = None,
                        python: Optional[str] = None) -> str:
    """
    Build the unit file text

    Args:
        user: Account the service runs as (needs access to the i2c group)
        group: Group, defaults to the user name
        working_directory: Service working directory, defaults to /root
        python: Interpreter path, defaults to the current interpreter

    Returns:
        Unit file contents
    """
    return UNIT_TEMPLATE.format(
        user=user,
        group=group or user,
        working_directory=working_directory or "/root",
        python=python or sys.executable,
    )
