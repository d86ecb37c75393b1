"""
Unit tests for session models and the SessionRegistry.

Tests browser resolution, lifecycle transitions, acquire/release scoping
and per-worker isolation.
"""

import logging
import threading

import pytest

from uiharness.core.exceptions import (
    EndpointUnreachableError,
    SessionSetupError,
    SessionStateError,
    UnsupportedBrowserError,
)
from uiharness.session.models import (
    BrowserKind,
    Locality,
    Session,
    SessionOptions,
    SessionState,
)


class TestBrowserKind:
    """Test cases for BrowserKind resolution."""

    @pytest.mark.parametrize(
        "name, kind",
        [("chrome", BrowserKind.CHROME), ("Firefox", BrowserKind.FIREFOX), (" edge ", BrowserKind.EDGE)],
    )
    def test_parse_supported(self, name, kind):
        assert BrowserKind.parse(name) is kind

    def test_parse_unsupported(self):
        with pytest.raises(UnsupportedBrowserError) as exc_info:
            BrowserKind.parse("safari")

        assert exc_info.value.browser == "safari"
        assert exc_info.value.supported == ["chrome", "firefox", "edge"]


class TestSessionModel:
    """Test cases for Session state transitions."""

    def make_session(self):
        return Session(worker_id="w1", browser=BrowserKind.CHROME, locality=Locality.LOCAL)

    def test_lifecycle(self):
        session = self.make_session()

        assert session.state is SessionState.CREATED
        assert not session.is_active

        session.transition_to(SessionState.READY)
        session.transition_to(SessionState.IN_USE)
        assert session.is_active

        session.transition_to(SessionState.READY)
        session.transition_to(SessionState.CLOSED)
        assert not session.is_active

    def test_invalid_transition(self):
        session = self.make_session()

        with pytest.raises(SessionStateError):
            session.transition_to(SessionState.IN_USE)

    def test_closed_is_terminal(self):
        session = self.make_session()
        session.transition_to(SessionState.READY)
        session.transition_to(SessionState.CLOSED)

        with pytest.raises(SessionStateError):
            session.transition_to(SessionState.READY)

    def test_options_from_config(self, temp_config):
        temp_config.execution_mode = "remote"

        options = SessionOptions.from_config(temp_config)

        assert options.remote is True
        assert options.locality is Locality.REMOTE
        assert options.grid_url == temp_config.grid_url
        assert options.headless is True


class TestSessionRegistryAcquire:
    """Test cases for SessionRegistry.acquire."""

    def test_acquire_registers_ready_session(self, registry, fake_driver, session_options):
        session = registry.acquire("w1", session_options)

        assert session.state is SessionState.READY
        assert session.worker_id == "w1"
        assert session.browser is BrowserKind.CHROME
        assert registry.current("w1") is session
        assert registry.active_workers() == ["w1"]

        handle = fake_driver.opened[0]
        assert session.handle is handle
        assert handle.implicit_wait == 5
        assert handle.page_load_timeout == 15
        assert handle.maximized is False

    def test_headed_session_is_maximized(self, registry, fake_driver):
        registry.acquire("w1", SessionOptions(browser="firefox", headless=False))

        assert fake_driver.opened[0].maximized is True

    def test_acquire_reuses_live_session(self, registry, fake_driver, session_options):
        first = registry.acquire("w1", session_options)
        second = registry.acquire("w1", session_options)

        assert first is second
        assert len(fake_driver.opened) == 1

    def test_unsupported_browser_registers_nothing(self, registry, fake_driver):
        with pytest.raises(UnsupportedBrowserError):
            registry.acquire("w1", SessionOptions(browser="safari"))

        assert registry.current("w1") is None
        assert fake_driver.opened == []

    def test_local_open_failure(self, registry, fake_driver, session_options):
        fake_driver.fail_open = True

        with pytest.raises(SessionSetupError) as exc_info:
            registry.acquire("w1", session_options)

        assert exc_info.value.browser == "chrome"
        assert registry.current("w1") is None

    def test_remote_open_failure(self, registry, fake_driver):
        fake_driver.fail_open = True
        options = SessionOptions(browser="chrome", remote=True, grid_url="http://grid:4444")

        with pytest.raises(EndpointUnreachableError) as exc_info:
            registry.acquire("w1", options)

        assert exc_info.value.endpoint == "http://grid:4444"
        assert registry.current("w1") is None

    def test_failure_after_open_closes_handle(self, registry, fake_driver, session_options):
        """Test a half-initialized session is torn down and not registered."""
        fake_driver.fail_timeouts = True

        with pytest.raises(SessionSetupError):
            registry.acquire("w1", session_options)

        assert fake_driver.opened[0].closed is True
        assert registry.current("w1") is None


class TestSessionRegistryRelease:
    """Test cases for SessionRegistry.release and friends."""

    def test_release_closes_and_unregisters(self, registry, fake_driver, session_options):
        session = registry.acquire("w1", session_options)

        registry.release("w1")

        assert session.state is SessionState.CLOSED
        assert fake_driver.opened[0].closed is True
        assert registry.current("w1") is None

    def test_double_release_is_noop(self, registry, fake_driver, session_options):
        registry.acquire("w1", session_options)

        registry.release("w1")
        registry.release("w1")

        assert fake_driver.closed_count == 1

    def test_release_unknown_worker(self, registry):
        registry.release("nobody")

        assert len(registry) == 0

    def test_teardown_error_is_swallowed(self, registry, fake_driver, session_options, caplog):
        """Test close failures are logged and the entry still removed."""
        session = registry.acquire("w1", session_options)
        fake_driver.fail_close = True

        with caplog.at_level(logging.WARNING):
            registry.release("w1")

        assert registry.current("w1") is None
        assert session.state is SessionState.FAILED
        warning = [r for r in caplog.records if r.levelno == logging.WARNING][-1]
        assert warning.metadata["error_code"] == "TEARDOWN_FAILED"

    def test_session_context_manager(self, registry, fake_driver, session_options):
        with registry.session("w1", session_options) as session:
            assert registry.current("w1") is session

        assert registry.current("w1") is None
        assert fake_driver.opened[0].closed is True

    def test_session_context_manager_releases_on_error(self, registry, session_options):
        with pytest.raises(RuntimeError):
            with registry.session("w1", session_options):
                raise RuntimeError("body failed")

        assert registry.current("w1") is None

    def test_release_all(self, registry, fake_driver, session_options):
        for worker in ("w1", "w2", "w3"):
            registry.acquire(worker, session_options)

        assert registry.release_all() == 3
        assert registry.active_workers() == []
        assert fake_driver.closed_count == 3

    def test_mark_in_use_and_ready(self, registry, session_options):
        session = registry.acquire("w1", session_options)

        registry.mark_in_use("w1")
        assert session.state is SessionState.IN_USE

        registry.mark_ready("w1")
        assert session.state is SessionState.READY

    def test_mark_without_session_is_noop(self, registry):
        registry.mark_in_use("w1")
        registry.mark_ready("w1")

        assert registry.current("w1") is None


class TestSessionRegistryConcurrency:
    """Test cases for per-worker isolation."""

    def test_workers_get_distinct_sessions(self, registry, fake_driver, session_options):
        sessions = {}
        barrier = threading.Barrier(5, timeout=5)

        def worker(worker_id):
            session = registry.acquire(worker_id, session_options)
            barrier.wait()
            sessions[worker_id] = (session, registry.current(worker_id))
            barrier.wait()
            registry.release(worker_id)

        threads = [threading.Thread(target=worker, args=(f"w{i}",)) for i in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        assert len(sessions) == 5
        for worker_id, (acquired, current) in sessions.items():
            assert acquired is current
            assert acquired.worker_id == worker_id
        assert len({id(s) for s, _ in sessions.values()}) == 5
        assert len(registry) == 0
        assert fake_driver.closed_count == 5
