"""
Browser driver interface consumed by the session registry and diagnostics.

A driver translates harness requests into calls on a concrete automation
client. Handles it returns are opaque to the rest of the harness.
"""

from abc import ABC, abstractmethod
from typing import Any

from .models import BrowserKind, SessionOptions


class BrowserDriver(ABC):
    """Abstract browser automation client."""

    @abstractmethod
    def open_session(self, kind: BrowserKind, options: SessionOptions) -> Any:
        """Launch a browser (locally or on a grid) and return its handle."""

    @abstractmethod
    def apply_timeouts(
        self, handle: Any, implicit_wait: int, page_load_timeout: int
    ) -> None:
        """Apply implicit-wait and page-load timeouts in seconds."""

    @abstractmethod
    def maximize_window(self, handle: Any) -> None:
        """Maximize the browser viewport."""

    @abstractmethod
    def navigate(self, handle: Any, url: str) -> None:
        """Open a URL in the session."""

    @abstractmethod
    def close_session(self, handle: Any) -> None:
        """Terminate the browser session."""

    @abstractmethod
    def snapshot(self, handle: Any) -> bytes:
        """Capture a PNG screenshot of the current page."""
