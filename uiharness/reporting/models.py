"""
Pydantic models for the suite execution report.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from ..core.exceptions import ReportSealedError
from ..execution.models import ArtifactMetadata, ErrorInfo, ExecutionRecord, TestStatus


class SuiteCounters(BaseModel):
    """Outcome counts of finalized records."""

    model_config = ConfigDict(extra="ignore")

    passed: int = Field(0, ge=0, description="Number of passed tests")
    failed: int = Field(0, ge=0, description="Number of failed tests")
    skipped: int = Field(0, ge=0, description="Number of skipped tests")

    @computed_field
    @property
    def total(self) -> int:
        return self.passed + self.failed + self.skipped

    def count(self, status: TestStatus) -> None:
        if status is TestStatus.PASSED:
            self.passed += 1
        elif status is TestStatus.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1


class ReportEntry(BaseModel):
    """Immutable snapshot of a finalized execution record."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    key: str = Field(..., description="Test identity within the run")
    name: str = Field(..., description="Test name")
    parameters: Dict[str, Any] = Field(default_factory=dict)
    tags: List[str] = Field(default_factory=list)
    description: Optional[str] = Field(None)
    status: TestStatus = Field(..., description="Terminal status")
    attempt_count: int = Field(..., ge=1)
    duration: float = Field(..., ge=0, description="Duration in seconds")
    worker_id: Optional[str] = Field(None)
    started_at: datetime
    completed_at: Optional[datetime] = None
    error: Optional[ErrorInfo] = Field(None, description="Terminal error")
    errors: List[ErrorInfo] = Field(default_factory=list, description="Error history")
    artifacts: List[ArtifactMetadata] = Field(default_factory=list)

    @classmethod
    def from_record(cls, record: ExecutionRecord) -> "ReportEntry":
        return cls(
            key=record.key,
            name=record.name,
            parameters=dict(record.parameters),
            tags=list(record.tags),
            description=record.description,
            status=record.status,
            attempt_count=record.attempt_count,
            duration=max(record.duration, 0.0),
            worker_id=record.worker_id,
            started_at=record.started_at,
            completed_at=record.completed_at,
            error=record.error.model_copy() if record.error else None,
            errors=[e.model_copy() for e in record.errors],
            artifacts=[a.model_copy() for a in record.artifacts],
        )


class ReportDocument(BaseModel):
    """
    Durable result of a suite run.

    Entries are appended while the document is open. Once sealed it is
    never mutated again.
    """

    model_config = ConfigDict(extra="forbid")

    run_id: str = Field(..., description="Run ID for correlation")
    name: str = Field("Test Execution Results", description="Report name")
    started_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None
    entries: List[ReportEntry] = Field(default_factory=list)
    counters: SuiteCounters = Field(default_factory=SuiteCounters)
    system_info: Dict[str, str] = Field(default_factory=dict)
    sealed: bool = False
    output_paths: List[str] = Field(default_factory=list)

    def append(self, entry: ReportEntry) -> None:
        """
        Add a finalized entry and count its status.

        Raises:
            ReportSealedError: If the document is already sealed
        """
        if self.sealed:
            raise ReportSealedError(
                f"Report {self.run_id} is sealed; cannot add {entry.key}",
                run_id=self.run_id,
            )
        self.entries.append(entry)
        self.counters.count(entry.status)

    def seal(self, completed_at: Optional[datetime] = None) -> None:
        if self.sealed:
            return
        self.completed_at = completed_at or datetime.utcnow()
        self.sealed = True

    @property
    def duration(self) -> float:
        end = self.completed_at or datetime.utcnow()
        return (end - self.started_at).total_seconds()

    @property
    def has_failures(self) -> bool:
        return self.counters.failed > 0

    def get_entries_by_status(self, status: TestStatus) -> List[ReportEntry]:
        return [e for e in self.entries if e.status is status]

    def get_entry(self, key: str) -> Optional[ReportEntry]:
        for entry in self.entries:
            if entry.key == key:
                return entry
        return None
