"""
Browser session management for UI Harness.

Session models, the browser driver interface with its Selenium implementation,
and the worker-scoped session registry.
"""

from .driver import BrowserDriver
from .models import (
    BrowserKind,
    Locality,
    Session,
    SessionOptions,
    SessionState,
)
from .registry import SessionRegistry

__all__ = [
    "BrowserDriver",
    "BrowserKind",
    "Locality",
    "Session",
    "SessionOptions",
    "SessionState",
    "SessionRegistry",
]
