"""
Aggregation of execution events into the suite report.
"""

import os
import platform
import threading
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from ..core.config import Config
from ..core.exceptions import FileOperationError
from ..core.logging_config import get_logger
from ..execution.events import EventConsumer, SuiteFinished, SuiteStarted, TestOutcome, TestStarted
from ..execution.models import ExecutionRecord
from .models import ReportDocument, ReportEntry
from .writer import ReportWriter


def collect_system_info(config: Config) -> Dict[str, str]:
    """System details shown in the report, extended by configured values."""
    info = {
        "OS": platform.platform(),
        "Python Version": platform.python_version(),
        "User": os.getenv("USER") or os.getenv("USERNAME") or "unknown",
        "Environment": config.environment,
        "Browser": config.browser,
    }
    info.update({str(k): str(v) for k, v in config.system_info.items()})
    return info


class ReportAggregator(EventConsumer):
    """
    Builds the ReportDocument from lifecycle events.

    Records are tracked by key while open. Entry appends and counter updates
    happen under a single lock so that concurrent workers never interleave.
    """

    def __init__(
        self,
        writer: ReportWriter,
        run_id: str,
        name: str = "Test Execution Results",
        system_info: Optional[Dict[str, str]] = None,
    ):
        self.writer = writer
        self.logger = get_logger(__name__, run_id=run_id)
        self._document = ReportDocument(
            run_id=run_id, name=name, system_info=system_info or {}
        )
        self._open: Dict[str, ExecutionRecord] = {}
        self._lock = threading.Lock()

    @property
    def document(self) -> ReportDocument:
        return self._document

    def open_records(self) -> List[ExecutionRecord]:
        with self._lock:
            return list(self._open.values())

    def on_suite_started(self, event: SuiteStarted) -> None:
        self.logger.debug(f"Aggregating suite {event.name} ({event.run_id})")

    def on_test_started(self, event: TestStarted) -> None:
        key = event.record.key
        with self._lock:
            if key in self._open:
                self.logger.debug(f"Resuming open record {key} at attempt {event.attempt}")
                return
            self._open[key] = event.record

    def on_test_outcome(self, event: TestOutcome) -> None:
        if not event.final:
            return

        record = event.record
        with self._lock:
            if record.finalized and self._open.get(record.key) is not record:
                self.logger.warning(f"Ignoring duplicate final outcome for {record.key}")
                return

            record.finalize(event.status)
            self._document.append(ReportEntry.from_record(record))
            if self._open.get(record.key) is record:
                del self._open[record.key]

    def on_suite_finished(self, event: SuiteFinished) -> None:
        self.flush()

    def flush(self) -> List[Path]:
        """
        Write the document and seal it.

        The document is sealed only after every report file was written, so
        a failed write leaves it open for another flush. Calling flush again
        after a successful write returns the paths of that write.

        Returns:
            Paths of the written report files

        Raises:
            FileOperationError: If a report file cannot be written
        """
        with self._lock:
            if self._document.sealed:
                return [Path(p) for p in self._document.output_paths]

            for key in self._open:
                self.logger.warning(f"Test never completed and is left out of the report: {key}")

            completed_at = datetime.utcnow()
            snapshot = self._document.model_copy(
                update={"sealed": True, "completed_at": completed_at}
            )
            try:
                paths = self.writer.write(snapshot)
            except FileOperationError as e:
                self.logger.error(
                    f"Failed to write report: {e}",
                    extra={"metadata": e.to_dict()},
                )
                raise

            self._document.seal(completed_at)
            self._document.output_paths = [str(p) for p in paths]

        counters = self._document.counters
        self.logger.info(
            f"Report flushed: {counters.passed} passed, {counters.failed} failed, {counters.skipped} skipped",
            extra={"metadata": {"report_paths": self._document.output_paths}},
        )
        return paths
