"""Popup window placement and opening."""

from __future__ import annotations

import logging
import webbrowser
from dataclasses import dataclass
from typing import Protocol, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PopupGeometry:
    width: int = 600
    height: int = 800

    def features(self, screen_width: int, screen_height: int) -> str:
        """Window features for a fixed-size popup centered on the screen."""
        left = screen_width // 2 - self.width // 2
        top = screen_height // 2 - self.height // 2
        return (
            "toolbar=no, location=no, directories=no, status=no, menubar=no, "
            "resizable=no, copyhistory=no, "
            f"width={self.width}, height={self.height}, top={top}, left={left}"
        )


class WindowOpener(Protocol):
    screen_size: Tuple[int, int]

    def open(self, url: str, *, name: str, features: str) -> None:
        ...


class BrowserWindowOpener:
    """Open the authorization URL in a new browser window.

    Desktop browsers launched this way ignore window features; they are
    logged for parity with embedded openers that honor them.
    """

    def __init__(self, screen_size: Tuple[int, int] = (1920, 1080)) -> None:
        self.screen_size = screen_size

    def open(self, url: str, *, name: str, features: str) -> None:
        logger.info("Opening authorization window %s (%s)", name, features)
        webbrowser.open_new(url)


__all__ = ["BrowserWindowOpener", "PopupGeometry", "WindowOpener"]
