"""Core components for UI Harness."""

from .config import Config
from .config_manager import ConfigManager, get_config_manager
from .exceptions import (
    HarnessError,
    UnsupportedBrowserError,
    SessionSetupError,
    EndpointUnreachableError,
    TestAssertionFailure,
    TestSkipped,
    DiagnosticsCaptureError,
    TeardownError,
    ValidationError,
)
from .logging_config import setup_logging, get_logger
from .workflow import RunManager, RunContext

__all__ = [
    "Config",
    "ConfigManager",
    "get_config_manager",
    "HarnessError",
    "UnsupportedBrowserError",
    "SessionSetupError",
    "EndpointUnreachableError",
    "TestAssertionFailure",
    "TestSkipped",
    "DiagnosticsCaptureError",
    "TeardownError",
    "ValidationError",
    "setup_logging",
    "get_logger",
    "RunManager",
    "RunContext",
]
