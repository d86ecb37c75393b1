"""
Data models for test execution and artifact management.

Defines Pydantic models for execution records, error history and
artifact metadata.
"""

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..core.exceptions import RecordFinalizedError


class TestStatus(Enum):
    """Test execution status."""

    __test__ = False

    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


TERMINAL_STATUSES = (TestStatus.PASSED, TestStatus.FAILED, TestStatus.SKIPPED)


class ArtifactType(Enum):
    """Types of test artifacts."""

    SCREENSHOT = "screenshot"


class ErrorInfo(BaseModel):
    """One failure or skip reason observed during an attempt."""

    model_config = ConfigDict(extra="forbid")

    attempt: int = Field(..., ge=1, description="Attempt that produced the error")
    kind: str = Field(..., description="Error classification (exception class name)")
    message: str = Field("", description="Error message")
    stack_trace: Optional[str] = Field(None, description="Formatted traceback")
    occurred_at: datetime = Field(default_factory=datetime.utcnow)


class ArtifactMetadata(BaseModel):
    """Metadata for test artifacts."""

    model_config = ConfigDict(extra="forbid")

    artifact_type: ArtifactType = Field(..., description="Type of artifact")
    file_path: str = Field(..., description="Path to artifact file")
    file_size: int = Field(..., ge=0, description="File size in bytes")
    created_at: datetime = Field(
        default_factory=datetime.utcnow, description="Creation timestamp"
    )
    test_name: str = Field(..., description="Associated test name")
    run_id: str = Field(..., description="Run ID for correlation")
    attempt: Optional[int] = Field(None, description="Attempt the artifact belongs to")

    # Optional metadata
    description: Optional[str] = Field(None, description="Artifact description")
    mime_type: Optional[str] = Field(None, description="MIME type of the file")
    checksum: Optional[str] = Field(None, description="File checksum for integrity")

    @property
    def file_name(self) -> str:
        """Get the file name from path."""
        return Path(self.file_path).name


class ExecutionRecord(BaseModel):
    """
    State of one test execution across all of its attempts.

    A record is identified by its name plus optional data-driven parameters.
    Once finalized its status and history can no longer change.
    """

    model_config = ConfigDict(extra="forbid")

    # Test identification
    name: str = Field(..., description="Test name")
    parameters: Dict[str, Any] = Field(
        default_factory=dict, description="Data-driven parameters of this row"
    )
    tags: List[str] = Field(default_factory=list, description="Category tags")
    description: Optional[str] = Field(None, description="Test description")

    # Execution state
    status: TestStatus = Field(TestStatus.RUNNING, description="Current status")
    attempt_count: int = Field(1, ge=1, description="Current attempt number")
    max_retries: int = Field(0, ge=0, description="Retry budget for this record")
    errors: List[ErrorInfo] = Field(
        default_factory=list, description="Error history across attempts"
    )
    artifacts: List[ArtifactMetadata] = Field(
        default_factory=list, description="Collected artifacts"
    )

    worker_id: Optional[str] = Field(None, description="Worker that executed the test")
    started_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = Field(None)
    finalized: bool = Field(False, description="Whether the outcome is terminal")

    @property
    def signature(self) -> str:
        """Stable parameter signature, empty for plain tests."""
        if not self.parameters:
            return ""
        return ", ".join(f"{k}={self.parameters[k]}" for k in sorted(self.parameters))

    @property
    def key(self) -> str:
        """Identity of the record within a run."""
        if not self.parameters:
            return self.name
        return f"{self.name}[{self.signature}]"

    @property
    def error(self) -> Optional[ErrorInfo]:
        """Terminal error, only present when the record did not pass."""
        if self.status in (TestStatus.FAILED, TestStatus.SKIPPED) and self.errors:
            return self.errors[-1]
        return None

    @property
    def duration(self) -> float:
        end = self.completed_at or datetime.utcnow()
        return (end - self.started_at).total_seconds()

    @property
    def retries_used(self) -> int:
        return self.attempt_count - 1

    def _check_open(self) -> None:
        if self.finalized:
            raise RecordFinalizedError(
                f"Execution record {self.key} is already finalized", record_key=self.key
            )

    def set_status(self, status: TestStatus) -> None:
        self._check_open()
        self.status = status

    def record_error(
        self, kind: str, message: str, stack_trace: Optional[str] = None
    ) -> ErrorInfo:
        """Append an error for the current attempt to the history."""
        self._check_open()
        info = ErrorInfo(
            attempt=self.attempt_count,
            kind=kind,
            message=message,
            stack_trace=stack_trace,
        )
        self.errors.append(info)
        return info

    def add_artifact(self, artifact: ArtifactMetadata) -> None:
        self._check_open()
        self.artifacts.append(artifact)

    def next_attempt(self) -> None:
        """Start another attempt, keeping the error history."""
        self._check_open()
        if self.attempt_count > self.max_retries:
            raise RecordFinalizedError(
                f"Execution record {self.key} has no retries left", record_key=self.key
            )
        self.attempt_count += 1
        self.status = TestStatus.RUNNING

    def finalize(self, status: Optional[TestStatus] = None) -> None:
        """
        Make the current (or given) status terminal.

        Finalizing twice is a no-op. A record still RUNNING is finalized as
        FAILED.
        """
        if self.finalized:
            return
        if status is not None:
            self.status = status
        if self.status not in TERMINAL_STATUSES:
            self.status = TestStatus.FAILED
        self.completed_at = datetime.utcnow()
        self.finalized = True

    def to_summary(self) -> Dict[str, Any]:
        """Create a summary dictionary for logging."""
        return {
            "test_name": self.key,
            "status": self.status.value,
            "attempt": self.attempt_count,
            "duration": self.duration,
            "artifacts_count": len(self.artifacts),
            "has_error": self.error is not None,
            "worker_id": self.worker_id,
        }
