"""
Pytest configuration and shared fixtures for UI Harness tests.

Provides a temporary configuration, an in-memory browser driver and a
session registry built on top of it.
"""

import os
import threading
from typing import Any, List

import pytest

from uiharness.core.config import Config
from uiharness.session.driver import BrowserDriver
from uiharness.session.models import BrowserKind, SessionOptions
from uiharness.session.registry import SessionRegistry

FAKE_PNG = b"\x89PNG\r\n\x1a\nfake-screenshot"


class FakeHandle:
    """Stand-in for a WebDriver instance."""

    def __init__(self, kind: BrowserKind, options: SessionOptions):
        self.kind = kind
        self.options = options
        self.url = None
        self.implicit_wait = None
        self.page_load_timeout = None
        self.maximized = False
        self.closed = False


class FakeBrowserDriver(BrowserDriver):
    """In-memory driver; failure switches are plain attributes."""

    def __init__(self):
        self.fail_open = False
        self.fail_timeouts = False
        self.fail_close = False
        self.fail_snapshot = False
        self.opened: List[FakeHandle] = []
        self.snapshots: List[FakeHandle] = []
        self._lock = threading.Lock()

    def open_session(self, kind: BrowserKind, options: SessionOptions) -> Any:
        if self.fail_open:
            raise RuntimeError("browser binary not found")
        handle = FakeHandle(kind, options)
        with self._lock:
            self.opened.append(handle)
        return handle

    def apply_timeouts(self, handle, implicit_wait, page_load_timeout) -> None:
        if self.fail_timeouts:
            raise RuntimeError("session died during setup")
        handle.implicit_wait = implicit_wait
        handle.page_load_timeout = page_load_timeout

    def maximize_window(self, handle) -> None:
        handle.maximized = True

    def navigate(self, handle, url: str) -> None:
        handle.url = url

    def close_session(self, handle) -> None:
        if self.fail_close:
            raise RuntimeError("session already gone")
        handle.closed = True

    def snapshot(self, handle) -> bytes:
        if self.fail_snapshot:
            raise RuntimeError("no such window")
        with self._lock:
            self.snapshots.append(handle)
        return FAKE_PNG

    @property
    def closed_count(self) -> int:
        return sum(1 for handle in self.opened if handle.closed)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep HARNESS_* and CI variables of the host out of every test."""
    for name in list(os.environ):
        if name.startswith("HARNESS_") or name == "CI":
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def temp_config(tmp_path):
    """Create a temporary configuration for testing."""
    return Config(
        headless=True,
        output_dir=tmp_path / "test-output",
        report_formats=["json", "junit"],
        parallel_threads=2,
    )


@pytest.fixture
def fake_driver():
    return FakeBrowserDriver()


@pytest.fixture
def session_options():
    return SessionOptions(browser="chrome", headless=True, implicit_wait=5, page_load_timeout=15)


@pytest.fixture
def registry(fake_driver):
    return SessionRegistry(fake_driver)
