"""
Worker-scoped registry of browser automation sessions.

Each worker owns at most one live session. The registry creates it, applies
timeouts and window settings, hands it to the worker and tears it down again.
Teardown never raises to the caller.
"""

import logging
import threading
import time
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from ..core.exceptions import (
    HarnessError,
    EndpointUnreachableError,
    SessionSetupError,
    TeardownError,
)
from ..core.logging_config import log_performance
from .driver import BrowserDriver
from .models import BrowserKind, Session, SessionOptions, SessionState


class SessionRegistry:
    """
    Creates, stores and releases sessions keyed by worker identity.

    Only the dictionary of sessions is shared between workers and guarded by a
    lock. A session object itself is only ever touched by its owning worker.
    """

    def __init__(self, driver: BrowserDriver, logger: Optional[logging.Logger] = None):
        """
        Initialize the registry.

        Args:
            driver: Browser driver used to open and close sessions
            logger: Optional logger instance
        """
        self.driver = driver
        self.logger = logger or logging.getLogger(__name__)
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    def acquire(self, worker_id: str, options: SessionOptions) -> Session:
        """
        Create (or reuse) the session bound to a worker.

        Args:
            worker_id: Identity of the requesting worker
            options: Browser, locality and timeout options

        Returns:
            A READY session registered under worker_id

        Raises:
            UnsupportedBrowserError: If the browser kind is not supported
            EndpointUnreachableError: If the remote grid session cannot be set up
            SessionSetupError: If the local browser cannot be launched
        """
        existing = self.current(worker_id)
        if existing is not None and existing.is_active:
            self.logger.debug(f"Reusing session {existing.session_id} for worker {worker_id}")
            return existing

        kind = BrowserKind.parse(options.browser)
        session = Session(
            worker_id=worker_id,
            browser=kind,
            locality=options.locality,
            endpoint=options.grid_url if options.remote else None,
        )

        start_time = time.time()
        try:
            session.handle = self.driver.open_session(kind, options)
        except HarnessError:
            session.transition_to(SessionState.FAILED)
            raise
        except Exception as e:
            session.transition_to(SessionState.FAILED)
            raise self._setup_error(session, options, e) from e

        try:
            self.driver.apply_timeouts(
                session.handle, options.implicit_wait, options.page_load_timeout
            )
            if not options.headless:
                self.driver.maximize_window(session.handle)
        except Exception as e:
            session.transition_to(SessionState.FAILED)
            self._close_quietly(session)
            raise self._setup_error(session, options, e) from e

        session.transition_to(SessionState.READY)
        with self._lock:
            self._sessions[worker_id] = session

        log_performance(
            self.logger,
            "session_acquire",
            time.time() - start_time,
            worker_id=worker_id,
            browser=kind.value,
            locality=session.locality.value,
        )
        self.logger.info(
            f"Browser initialized: {kind.value} | Headless: {options.headless} | Worker: {worker_id}",
            extra={"metadata": session.describe()},
        )
        return session

    def current(self, worker_id: str) -> Optional[Session]:
        """Return the worker's registered session without creating one."""
        with self._lock:
            return self._sessions.get(worker_id)

    def release(self, worker_id: str) -> None:
        """
        Tear down and unregister the worker's session.

        Releasing a worker without a session is a no-op. Teardown errors are
        logged as warnings and never propagate; the registry entry is removed
        in every case.
        """
        session = self.current(worker_id)
        if session is None:
            self.logger.debug(f"No session registered for worker {worker_id}")
            return

        try:
            self.driver.close_session(session.handle)
            session.transition_to(SessionState.CLOSED)
            self.logger.info(f"Browser closed successfully | Worker: {worker_id}")
        except Exception as e:
            session.state = SessionState.FAILED
            error = TeardownError(
                f"Failed to close session {session.session_id}: {e}",
                session_id=session.session_id,
                worker_id=worker_id,
            )
            self.logger.warning(error.message, extra={"metadata": error.to_dict()})
        finally:
            with self._lock:
                if self._sessions.get(worker_id) is session:
                    del self._sessions[worker_id]

    @contextmanager
    def session(self, worker_id: str, options: SessionOptions) -> Iterator[Session]:
        """Acquire a session for the duration of a with-block."""
        session = self.acquire(worker_id, options)
        try:
            yield session
        finally:
            self.release(worker_id)

    def release_all(self) -> int:
        """
        Release every registered session.

        Returns:
            Number of sessions that were released
        """
        workers = self.active_workers()
        for worker_id in workers:
            self.release(worker_id)
        if workers:
            self.logger.info(f"Released {len(workers)} remaining session(s)")
        return len(workers)

    def mark_in_use(self, worker_id: str) -> None:
        session = self.current(worker_id)
        if session is not None:
            session.transition_to(SessionState.IN_USE)

    def mark_ready(self, worker_id: str) -> None:
        session = self.current(worker_id)
        if session is not None and session.state is SessionState.IN_USE:
            session.transition_to(SessionState.READY)

    def active_workers(self) -> List[str]:
        with self._lock:
            return list(self._sessions.keys())

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _setup_error(
        self, session: Session, options: SessionOptions, error: Exception
    ) -> HarnessError:
        if options.remote:
            return EndpointUnreachableError(
                f"Could not create remote session on {options.grid_url}: {error}",
                endpoint=options.grid_url,
                worker_id=session.worker_id,
            )
        return SessionSetupError(
            f"Could not launch {session.browser.value}: {error}",
            browser=session.browser.value,
            worker_id=session.worker_id,
        )

    def _close_quietly(self, session: Session) -> None:
        try:
            self.driver.close_session(session.handle)
        except Exception as e:
            self.logger.warning(
                f"Failed to close half-initialized session {session.session_id}: {e}"
            )
