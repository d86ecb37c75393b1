"""
Consumer that writes the execution lifecycle to the log.
"""

import logging
from typing import Optional

from ..core.logging_config import (
    log_test_fail,
    log_test_pass,
    log_test_skip,
    log_test_start,
)
from .events import EventConsumer, SuiteFinished, SuiteStarted, TestOutcome, TestStarted
from .models import TestStatus

BANNER = "=" * 46


class LoggingListener(EventConsumer):
    """Logs suite banners and one line per test state change."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("uiharness.listener")
        self._suite_name = "suite"

    def on_suite_started(self, event: SuiteStarted) -> None:
        self._suite_name = event.name
        self.logger.info(BANNER)
        self.logger.info(f"Test Suite Started: {event.name}")
        self.logger.info(BANNER)

    def on_test_started(self, event: TestStarted) -> None:
        if event.attempt == 1:
            log_test_start(self.logger, event.record.key)
        else:
            self.logger.info(
                f"Attempt {event.attempt} started: {event.record.key} | Worker: {event.worker_id}"
            )

    def on_test_outcome(self, event: TestOutcome) -> None:
        name = event.record.key
        reason = event.error.message if event.error else None

        if not event.final:
            self.logger.warning(f"Attempt {event.attempt} failed: {name} | Reason: {reason}")
        elif event.status is TestStatus.PASSED:
            log_test_pass(self.logger, name)
        elif event.status is TestStatus.SKIPPED:
            log_test_skip(self.logger, name, reason)
        else:
            log_test_fail(self.logger, name, reason)

    def on_suite_finished(self, event: SuiteFinished) -> None:
        counters = event.counters
        self.logger.info(BANNER)
        self.logger.info(f"Test Suite Finished: {self._suite_name}")
        self.logger.info(f"Total Tests: {counters.total}")
        self.logger.info(f"Passed: {counters.passed}")
        self.logger.info(f"Failed: {counters.failed}")
        self.logger.info(f"Skipped: {counters.skipped}")
        self.logger.info(BANNER)
