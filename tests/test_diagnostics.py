"""
Unit tests for DiagnosticsCapturer.
"""

import logging

import pytest

from uiharness.execution.artifacts import ArtifactManager
from uiharness.execution.diagnostics import DiagnosticsCapturer
from uiharness.execution.events import TestOutcome
from uiharness.execution.models import ExecutionRecord, TestStatus


@pytest.fixture
def artifact_manager(temp_config):
    return ArtifactManager(temp_config, "run-1")


@pytest.fixture
def session(registry, session_options):
    return registry.acquire("w1", session_options)


def make_outcome(status, session, final=True):
    record = ExecutionRecord(name="test_checkout", worker_id="w1")
    return TestOutcome(
        record=record, worker_id="w1", status=status, attempt=1, final=final, session=session
    )


class TestDiagnosticsCapturer:
    """Test cases for DiagnosticsCapturer."""

    def test_captures_final_failure(self, fake_driver, artifact_manager, session):
        capturer = DiagnosticsCapturer(fake_driver, artifact_manager)
        event = make_outcome(TestStatus.FAILED, session)

        capturer(event)

        assert len(event.record.artifacts) == 1
        assert "_FAILED_" in event.record.artifacts[0].file_name
        assert fake_driver.snapshots == [session.handle]

    def test_skips_non_final_failure(self, fake_driver, artifact_manager, session):
        capturer = DiagnosticsCapturer(fake_driver, artifact_manager)
        event = make_outcome(TestStatus.FAILED, session, final=False)

        capturer(event)

        assert event.record.artifacts == []
        assert fake_driver.snapshots == []

    def test_pass_capture_is_opt_in(self, fake_driver, artifact_manager, session):
        default = DiagnosticsCapturer(fake_driver, artifact_manager)
        enabled = DiagnosticsCapturer(fake_driver, artifact_manager, screenshot_on_pass=True)

        skipped_event = make_outcome(TestStatus.PASSED, session)
        default(skipped_event)
        captured_event = make_outcome(TestStatus.PASSED, session)
        enabled(captured_event)

        assert skipped_event.record.artifacts == []
        assert len(captured_event.record.artifacts) == 1

    def test_failure_capture_can_be_disabled(self, fake_driver, artifact_manager, session):
        capturer = DiagnosticsCapturer(fake_driver, artifact_manager, screenshot_on_fail=False)
        event = make_outcome(TestStatus.FAILED, session)

        capturer(event)

        assert event.record.artifacts == []

    def test_skipped_outcome_is_not_captured(self, fake_driver, artifact_manager, session):
        capturer = DiagnosticsCapturer(fake_driver, artifact_manager, screenshot_on_pass=True)
        event = make_outcome(TestStatus.SKIPPED, session)

        capturer(event)

        assert event.record.artifacts == []

    def test_missing_session_is_skipped(self, fake_driver, artifact_manager, caplog):
        capturer = DiagnosticsCapturer(fake_driver, artifact_manager)
        event = make_outcome(TestStatus.FAILED, None)

        with caplog.at_level(logging.INFO):
            assert capturer.capture(event) is None

        assert "screenshot skipped" in caplog.text
        assert fake_driver.snapshots == []

    def test_snapshot_error_never_escalates(self, fake_driver, artifact_manager, session, caplog):
        """Test capture errors are logged and the status is untouched."""
        fake_driver.fail_snapshot = True
        capturer = DiagnosticsCapturer(fake_driver, artifact_manager)
        event = make_outcome(TestStatus.FAILED, session)
        event.record.set_status(TestStatus.FAILED)

        with caplog.at_level(logging.WARNING):
            capturer(event)

        assert event.record.artifacts == []
        assert event.record.status is TestStatus.FAILED
        warning = caplog.records[-1]
        assert warning.metadata["error_code"] == "DIAGNOSTICS_CAPTURE_FAILED"
