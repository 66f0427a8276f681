#!/usr/bin/env python3
"""
Display Module

Draws the network summary onto a 128x64 SSD1306 panel (or the terminal):
- Scoped drawing surfaces committed once per frame
- Four fixed text lines for the normal snapshot
- A two line error screen
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from rich import box
from rich.console import Console
from rich.panel import Panel
from luma.core.interface.serial import i2c
from luma.core.render import canvas
from luma.oled.device import ssd1306

from netdisplay.config import MonitorConfig
from netdisplay.errors import DisplayUnavailableError
from netdisplay.network_stats import format_speed

logger = logging.getLogger(__name__)

# Pixel rows of the four text lines on a 64 pixel high panel
LINE_OFFSETS = (0, 16, 32, 48)
ERROR_MESSAGE_LENGTH = 20


@dataclass(frozen=True)
class DisplaySnapshot:
    """Everything shown on screen for one cycle"""
    public_address: str
    local_address: str
    upload_rate: float
    download_rate: float


class OledSurface:
    """Drawing handle handed out by a display for the duration of one frame"""

    def __init__(self, draw):
        self._draw = draw

    def draw_text(self, x: int, y: int, text: str, color: str = "white") -> None:
        self._draw.text((x, y), text, fill=color)


class OledDisplay:
    """SSD1306 panel on the I2C bus"""

    def __init__(self, port: int = 1, address: int = 0x3C, width: int = 128, height: int = 64):
        """
        Open the I2C bus and initialize the panel

        Raises:
            DisplayUnavailableError: If the bus or the panel cannot be opened
        """
        self.width = width
        self.height = height
        try:
            serial = i2c(port=port, address=address)
            self.device = ssd1306(serial, width=width, height=height)
        except Exception as e:
            raise DisplayUnavailableError(
                f"Cannot open display at I2C port {port} address {address:#04x}: {e}"
            ) from e

    @contextmanager
    def open_surface(self) -> Iterator[OledSurface]:
        """Yield a surface; the frame is pushed to the panel only if the block completes"""
        with canvas(self.device) as draw:
            yield OledSurface(draw)


class ConsoleSurface:
    """Collects text lines in place of pixels"""

    def __init__(self):
        self.lines: List[Tuple[int, int, str]] = []

    def draw_text(self, x: int, y: int, text: str, color: str = "white") -> None:
        self.lines.append((y, x, text))


class ConsoleDisplay:
    """Terminal stand-in for the panel, one rich panel per frame"""

    def __init__(self, console: Optional[Console] = None, width: int = 128, height: int = 64):
        self.console = console or Console()
        self.width = width
        self.height = height

    @contextmanager
    def open_surface(self) -> Iterator[ConsoleSurface]:
        surface = ConsoleSurface()
        yield surface
        text = "\n".join(line for _, _, line in sorted(surface.lines))
        self.console.print(Panel(text, title="NetDisplay", box=box.ROUNDED, width=40))


def open_display(config: MonitorConfig, use_console: bool = False):
    """
    Create the display the loop draws on

    Args:
        config: Monitor configuration
        use_console: Render to the terminal instead of the panel

    Returns:
        OledDisplay or ConsoleDisplay
    """
    if use_console:
        return ConsoleDisplay(width=config.width, height=config.height)
    return OledDisplay(
        port=config.i2c_port,
        address=config.i2c_address,
        width=config.width,
        height=config.height,
    )


class DisplayRenderer:
    """Turns snapshots and errors into frames"""

    def __init__(self, display):
        self.display = display

    def render(self, snapshot: DisplaySnapshot) -> None:
        """
        Draw the four line network summary

        Args:
            snapshot: Addresses and rates (bytes/second) for this cycle
        """
        lines = (
            f"Ext: {snapshot.public_address}",
            f"Int: {snapshot.local_address}",
            f"Up: {format_speed(snapshot.upload_rate / 1024)}",
            f"Down: {format_speed(snapshot.download_rate / 1024)}",
        )
        with self.display.open_surface() as surface:
            for y, text in zip(LINE_OFFSETS, lines):
                surface.draw_text(0, y, text, "white")

    def render_error(self, message: str) -> None:
        """Draw the error screen with the first characters of the message"""
        with self.display.open_surface() as surface:
            surface.draw_text(0, LINE_OFFSETS[0], "Error:", "white")
            surface.draw_text(0, LINE_OFFSETS[1], message[:ERROR_MESSAGE_LENGTH], "white")
