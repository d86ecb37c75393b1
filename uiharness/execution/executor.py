"""
Test executor wiring sessions, retries, diagnostics and reporting.

Every test runs as a strictly sequential loop on one worker: acquire a
session, open the environment URL, run the body, classify the outcome, ask
the retry policy, publish the outcome and release the session. The loop
repeats while the policy grants a retry.
"""

import threading
import time
import traceback
import unittest
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from ..core.config import Config
from ..core.exceptions import (
    SessionSetupError,
    TestAssertionFailure,
    TestSkipped,
    UnsupportedBrowserError,
)
from ..core.logging_config import get_logger, log_performance
from ..core.workflow import RunManager
from ..reporting.aggregator import ReportAggregator, collect_system_info
from ..reporting.models import ReportDocument
from ..reporting.writer import ReportWriter
from ..session.driver import BrowserDriver
from ..session.models import Session, SessionOptions
from ..session.registry import SessionRegistry
from .artifacts import ArtifactManager
from .diagnostics import DiagnosticsCapturer
from .events import ExecutionEventBus, SuiteFinished, SuiteStarted, TestOutcome, TestStarted
from .listeners import LoggingListener
from .models import ErrorInfo, ExecutionRecord, TestStatus
from .retry import RetryPolicy

TestBody = Callable[[Session], Any]

# Errors that end the test immediately and propagate to the caller
FATAL_ERRORS = (UnsupportedBrowserError, SessionSetupError)
SKIP_ERRORS = (TestSkipped, unittest.SkipTest)
FAILURE_ERRORS = (AssertionError, TestAssertionFailure)


def current_worker_id() -> str:
    """Identity of the calling worker (its thread name)."""
    return threading.current_thread().name


@dataclass
class TestCase:
    """A test body plus the identity it is reported under."""

    __test__ = False

    name: str
    body: TestBody
    parameters: Dict[str, Any] = field(default_factory=dict)
    tags: List[str] = field(default_factory=list)
    description: Optional[str] = None


class TestExecutor:
    """
    Runs test bodies inside managed browser sessions.

    Configuration is read once at construction. One executor drives one
    suite run and produces one ReportDocument.
    """

    __test__ = False

    def __init__(
        self,
        config: Config,
        driver: BrowserDriver,
        registry: Optional[SessionRegistry] = None,
        run_id: Optional[str] = None,
    ):
        """
        Initialize the test executor.

        Args:
            config: UI Harness configuration
            driver: Browser driver used for sessions and screenshots
            registry: Optional session registry instance
            run_id: Unique run identifier
        """
        self.config = config
        self.driver = driver
        self.run_manager = RunManager(config)
        self.run_id = run_id or RunManager.generate_run_id()
        self.logger = get_logger(__name__, run_id=self.run_id)

        config.ensure_directories()

        self.session_options = SessionOptions.from_config(config)
        self.url = config.url
        self.registry = registry or SessionRegistry(driver)
        self.retry_policy = RetryPolicy.from_config(config)
        self.artifact_manager = ArtifactManager(config, self.run_id)

        self.bus = ExecutionEventBus()
        self.diagnostics = DiagnosticsCapturer(
            driver,
            self.artifact_manager,
            screenshot_on_fail=config.screenshot_on_fail,
            screenshot_on_pass=config.screenshot_on_pass,
        )
        self.aggregator = ReportAggregator(
            ReportWriter(config),
            self.run_id,
            name=config.report_name,
            system_info=collect_system_info(config),
        )
        self.bus.add_stage(self.diagnostics)
        self.bus.subscribe(self.aggregator)
        self.bus.subscribe(LoggingListener())

        self._suite_lock = threading.Lock()
        self._suite_started = False
        self._suite_finalized = False

    @property
    def document(self) -> ReportDocument:
        return self.aggregator.document

    def start_suite(self) -> None:
        """Announce the suite once; later calls do nothing."""
        with self._suite_lock:
            if self._suite_started:
                return
            self._suite_started = True

        self.run_manager.start_run(name=self.config.report_name, run_id=self.run_id)
        self.bus.publish(SuiteStarted(run_id=self.run_id, name=self.config.report_name))

    def run_test(
        self,
        name: str,
        body: TestBody,
        *,
        parameters: Optional[Dict[str, Any]] = None,
        tags: Optional[List[str]] = None,
        description: Optional[str] = None,
        worker_id: Optional[str] = None,
    ) -> ExecutionRecord:
        """
        Execute one test with retries.

        Args:
            name: Test name
            body: Callable receiving the worker's Session
            parameters: Data-driven parameters identifying this row
            tags: Category tags
            description: Human-readable description
            worker_id: Worker identity, defaults to the current thread name

        Returns:
            The finalized execution record

        Raises:
            UnsupportedBrowserError: If the configured browser is not supported
            SessionSetupError: If a local browser cannot be launched
        """
        self.start_suite()
        worker_id = worker_id or current_worker_id()
        record = ExecutionRecord(
            name=name,
            parameters=dict(parameters or {}),
            tags=list(tags or []),
            description=description,
            max_retries=self.retry_policy.max_retries,
            worker_id=worker_id,
        )
        logger = get_logger(
            __name__, test_name=record.key, worker_id=worker_id, browser=self.config.browser
        )

        fatal = None
        retry = True
        while retry:
            self.bus.publish(TestStarted(record=record, worker_id=worker_id, attempt=record.attempt_count))
            try:
                retry, fatal = self._run_attempt(record, body, worker_id, logger)
            finally:
                self.registry.release(worker_id)

        record.finalize()
        if fatal is not None:
            raise fatal
        return record

    def _run_attempt(
        self,
        record: ExecutionRecord,
        body: TestBody,
        worker_id: str,
        logger,
    ) -> Tuple[bool, Optional[Exception]]:
        attempt = record.attempt_count
        start_time = time.time()
        fatal = None
        error: Optional[ErrorInfo] = None

        try:
            session = self.registry.acquire(worker_id, self.session_options)
            self.driver.navigate(session.handle, self.url)
            self.registry.mark_in_use(worker_id)
            body(session)
            status = TestStatus.PASSED
        except FATAL_ERRORS as e:
            fatal = e
            status = TestStatus.FAILED
            error = record.record_error(type(e).__name__, str(e), traceback.format_exc())
        except SKIP_ERRORS as e:
            status = TestStatus.SKIPPED
            error = record.record_error("TestSkipped", str(e) or "Test was skipped")
        except FAILURE_ERRORS as e:
            status = TestStatus.FAILED
            error = record.record_error("TestAssertionFailure", str(e), traceback.format_exc())
        except Exception as e:
            status = TestStatus.FAILED
            error = record.record_error(type(e).__name__, str(e), traceback.format_exc())

        self.registry.mark_ready(worker_id)
        record.set_status(status)

        retry = fatal is None and self.retry_policy.should_retry(record)
        self.bus.publish(
            TestOutcome(
                record=record,
                worker_id=worker_id,
                status=status,
                attempt=attempt,
                error=error,
                final=not retry,
                session=self.registry.current(worker_id),
            )
        )

        log_performance(
            logger,
            "test_attempt",
            time.time() - start_time,
            attempt=attempt,
            status=status.value,
        )
        return retry, fatal

    def _run_case(self, case: TestCase) -> ExecutionRecord:
        return self.run_test(
            case.name,
            case.body,
            parameters=case.parameters,
            tags=case.tags,
            description=case.description,
        )

    def run_tests(self, cases: Iterable[TestCase]) -> List[ExecutionRecord]:
        """
        Run test cases concurrently on the configured number of workers.

        A fatal setup error or an interrupt cancels the tests that have not
        started yet and is re-raised once running workers have finished.

        Args:
            cases: Test cases to run

        Returns:
            Execution records in the order of the given cases
        """
        cases = list(cases)
        self.start_suite()
        results: List[Optional[ExecutionRecord]] = [None] * len(cases)

        pool = ThreadPoolExecutor(
            max_workers=max(self.config.parallel_threads, 1), thread_name_prefix="worker"
        )
        futures = {}
        try:
            futures = {pool.submit(self._run_case, case): i for i, case in enumerate(cases)}
            for future in as_completed(futures):
                results[futures[future]] = future.result()
        except (KeyboardInterrupt,) + FATAL_ERRORS as e:
            self.logger.error(f"Suite aborted: {type(e).__name__}: {e}")
            for future in futures:
                future.cancel()
            raise
        finally:
            pool.shutdown(wait=True, cancel_futures=True)

        return [r for r in results if r is not None]

    def run_suite(self, cases: Iterable[TestCase]) -> ReportDocument:
        """
        Run all cases and always finalize the report.

        Returns:
            The sealed report document
        """
        try:
            self.run_tests(cases)
        finally:
            self.registry.release_all()
            self.finalize_suite()
        return self.document

    def finalize_suite(self) -> ReportDocument:
        """
        Publish suite completion, flush the report and end the run.

        Calling it again returns the same document.

        Raises:
            FileOperationError: If the report cannot be written; the document
                stays unsealed and ``aggregator.flush()`` may be retried
        """
        with self._suite_lock:
            if self._suite_finalized:
                return self.document
            self._suite_finalized = True

        try:
            self.aggregator.flush()
        finally:
            self.bus.publish(SuiteFinished(counters=self.document.counters))
            if self.run_manager.current_run is not None:
                self.run_manager.end_run(
                    success=self.document.sealed and not self.document.has_failures
                )
        return self.document
