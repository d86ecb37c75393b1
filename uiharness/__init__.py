"""
UI Harness - Browser Test Execution Orchestrator

Runs browser acceptance tests on worker-scoped sessions with retries,
screenshot diagnostics and a persisted execution report.
"""

__version__ = "0.1.0"
__author__ = "UI Harness Team"

from .core.config import Config
from .core.exceptions import HarnessError
from .core.logging_config import setup_logging
from .execution import TestExecutor, TestCase
from .reporting import ReportDocument

__all__ = [
    "Config",
    "HarnessError",
    "setup_logging",
    "TestExecutor",
    "TestCase",
    "ReportDocument",
]
