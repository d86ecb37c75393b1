"""
Exception hierarchy for UI Harness.

Separates fatal setup errors, recoverable test failures and the
diagnostics/teardown errors that are always handled locally.
"""

from typing import Optional, Dict, Any


class HarnessError(Exception):
    """Base exception class for all UI Harness errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "context": self.context,
        }


class UnsupportedBrowserError(HarnessError):
    """Raised when the requested browser kind is not supported."""

    def __init__(
        self,
        message: str,
        browser: Optional[str] = None,
        supported: Optional[list] = None,
    ):
        super().__init__(message, "UNSUPPORTED_BROWSER")
        self.browser = browser
        self.supported = supported or []
        self.context.update(
            {
                "browser": browser,
                "supported": self.supported,
            }
        )


class SessionSetupError(HarnessError):
    """Raised when a local browser session cannot be created."""

    def __init__(
        self,
        message: str,
        browser: Optional[str] = None,
        worker_id: Optional[str] = None,
    ):
        super().__init__(message, "SESSION_SETUP_FAILED")
        self.browser = browser
        self.worker_id = worker_id
        self.context.update(
            {
                "browser": browser,
                "worker_id": worker_id,
            }
        )


class EndpointUnreachableError(HarnessError):
    """Raised when a remote grid session cannot be established."""

    def __init__(
        self,
        message: str,
        endpoint: Optional[str] = None,
        worker_id: Optional[str] = None,
    ):
        super().__init__(message, "ENDPOINT_UNREACHABLE")
        self.endpoint = endpoint
        self.worker_id = worker_id
        self.context.update(
            {
                "endpoint": endpoint,
                "worker_id": worker_id,
            }
        )


class SessionStateError(HarnessError):
    """Raised on an illegal session lifecycle transition."""

    def __init__(
        self,
        message: str,
        current_state: Optional[str] = None,
        target_state: Optional[str] = None,
    ):
        super().__init__(message, "INVALID_SESSION_STATE")
        self.current_state = current_state
        self.target_state = target_state
        self.context.update(
            {
                "current_state": current_state,
                "target_state": target_state,
            }
        )


class TestAssertionFailure(HarnessError):
    """Raised by test bodies when an expectation does not hold."""

    __test__ = False

    def __init__(self, message: str, test_name: Optional[str] = None):
        super().__init__(message, "TEST_ASSERTION_FAILED")
        self.test_name = test_name
        self.context.update({"test_name": test_name})


class TestSkipped(HarnessError):
    """Raised by test bodies to mark the test as skipped."""

    __test__ = False

    def __init__(self, message: str = "Test was skipped"):
        super().__init__(message, "TEST_SKIPPED")


class DiagnosticsCaptureError(HarnessError):
    """Raised when a diagnostic snapshot cannot be captured or stored."""

    def __init__(
        self,
        message: str,
        test_name: Optional[str] = None,
        worker_id: Optional[str] = None,
    ):
        super().__init__(message, "DIAGNOSTICS_CAPTURE_FAILED")
        self.test_name = test_name
        self.worker_id = worker_id
        self.context.update(
            {
                "test_name": test_name,
                "worker_id": worker_id,
            }
        )


class TeardownError(HarnessError):
    """Raised when a browser session fails to shut down cleanly."""

    def __init__(
        self,
        message: str,
        session_id: Optional[str] = None,
        worker_id: Optional[str] = None,
    ):
        super().__init__(message, "TEARDOWN_FAILED")
        self.session_id = session_id
        self.worker_id = worker_id
        self.context.update(
            {
                "session_id": session_id,
                "worker_id": worker_id,
            }
        )


class RecordFinalizedError(HarnessError):
    """Raised when a finalized execution record is mutated."""

    def __init__(self, message: str, record_key: Optional[str] = None):
        super().__init__(message, "RECORD_FINALIZED")
        self.record_key = record_key
        self.context.update({"record_key": record_key})


class ReportSealedError(HarnessError):
    """Raised when an entry is appended to a sealed report document."""

    def __init__(self, message: str, run_id: Optional[str] = None):
        super().__init__(message, "REPORT_SEALED")
        self.run_id = run_id
        self.context.update({"run_id": run_id})


class FileOperationError(HarnessError):
    """Raised when file system operations fail."""

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
    ):
        super().__init__(message, "FILE_OPERATION_FAILED")
        self.file_path = file_path
        self.operation = operation
        self.context.update(
            {
                "file_path": file_path,
                "operation": operation,
            }
        )


class ValidationError(HarnessError):
    """Raised when validation fails."""

    def __init__(
        self,
        message: str,
        validation_type: Optional[str] = None,
        violations: Optional[list] = None,
    ):
        super().__init__(message, "VALIDATION_FAILED")
        self.validation_type = validation_type
        self.violations = violations or []
        self.context.update(
            {
                "validation_type": validation_type,
                "violations": violations,
            }
        )
