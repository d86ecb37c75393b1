"""
Screenshot capture for finalized test outcomes.

Runs as a bus stage so the screenshot is attached to the record before any
consumer sees the outcome. Capture problems are logged and never change the
test's status.
"""

import logging
from typing import Optional

from ..core.exceptions import DiagnosticsCaptureError
from ..session.driver import BrowserDriver
from .artifacts import ArtifactManager
from .events import EventConsumer, TestOutcome
from .models import ArtifactMetadata, TestStatus


class DiagnosticsCapturer(EventConsumer):
    """Captures a screenshot from the worker's session on final outcomes."""

    def __init__(
        self,
        driver: BrowserDriver,
        artifacts: ArtifactManager,
        screenshot_on_fail: bool = True,
        screenshot_on_pass: bool = False,
        logger: Optional[logging.Logger] = None,
    ):
        self.driver = driver
        self.artifacts = artifacts
        self.screenshot_on_fail = screenshot_on_fail
        self.screenshot_on_pass = screenshot_on_pass
        self.logger = logger or logging.getLogger(__name__)

    def wants_capture(self, event: TestOutcome) -> bool:
        if not event.final:
            return False
        if event.status is TestStatus.FAILED:
            return self.screenshot_on_fail
        if event.status is TestStatus.PASSED:
            return self.screenshot_on_pass
        return False

    def on_test_outcome(self, event: TestOutcome) -> None:
        if not self.wants_capture(event):
            return
        self.capture(event)

    def capture(self, event: TestOutcome) -> Optional[ArtifactMetadata]:
        """
        Take, store and attach a screenshot for the outcome.

        Returns:
            Stored artifact metadata, or None when nothing was captured
        """
        name = event.record.key
        session = event.session
        if session is None or session.handle is None:
            self.logger.info(f"No active session for {name}; screenshot skipped")
            return None

        try:
            data = self.driver.snapshot(session.handle)
            artifact = self.artifacts.store_snapshot(
                data, name, event.status, attempt=event.attempt
            )
            event.record.add_artifact(artifact)
        except Exception as e:
            error = DiagnosticsCaptureError(
                f"Failed to capture screenshot: {e}",
                test_name=name,
                worker_id=event.worker_id,
            )
            self.logger.warning(error.message, extra={"metadata": error.to_dict()})
            return None

        self.logger.info(f"Screenshot captured: {artifact.file_path}")
        return artifact
