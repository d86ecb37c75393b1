"""
Run management for UI Harness.

Handles run ID generation and correlation of logs, screenshots and reports
belonging to one suite execution.
"""

import uuid
import time
from datetime import datetime
from typing import Dict, Any, Optional
from dataclasses import dataclass, field

from .config import Config
from .logging_config import get_logger


@dataclass
class RunContext:
    """Context information for a suite run."""

    run_id: str
    name: str = "suite"
    start_time: float = field(default_factory=time.time)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def duration(self) -> float:
        """Get current run duration in seconds."""
        return time.time() - self.start_time

    @property
    def started_at(self) -> datetime:
        return datetime.fromtimestamp(self.start_time)

    def to_dict(self) -> Dict[str, Any]:
        """Convert run context to dictionary."""
        return {
            "run_id": self.run_id,
            "name": self.name,
            "start_time": self.started_at.isoformat(),
            "duration": self.duration,
            "metadata": self.metadata,
        }


class RunManager:
    """Manages the active suite run and its identifier."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config.from_env()
        self.logger = get_logger("uiharness.run")
        self._current_run: Optional[RunContext] = None

    @staticmethod
    def generate_run_id() -> str:
        """
        Generate a unique run ID.

        Returns:
            Date-prefixed identifier, sortable chronologically
        """
        suffix = uuid.uuid4().hex[:16]
        timestamp = datetime.utcnow().strftime("%Y%m%d")
        return f"{timestamp}-{suffix}"

    def start_run(
        self,
        name: str = "suite",
        metadata: Optional[Dict[str, Any]] = None,
        run_id: Optional[str] = None,
    ) -> RunContext:
        """
        Start a new suite run.

        Args:
            name: Human-readable suite name
            metadata: Optional metadata to associate with the run
            run_id: Use this identifier instead of generating one

        Returns:
            Run context object
        """
        context = RunContext(
            run_id=run_id or self.generate_run_id(), name=name, metadata=metadata or {}
        )
        self._current_run = context

        self.logger.info(
            f"Run started: {context.run_id}",
            extra={
                "metadata": {
                    "run_id": context.run_id,
                    "suite": name,
                    "config": self.config.to_dict(),
                    **context.metadata,
                }
            },
        )
        return context

    def end_run(self, success: bool = True, error: Optional[Exception] = None) -> None:
        """
        End the current suite run.

        Args:
            success: Whether the run completed without failures
            error: Optional error that aborted the run
        """
        if not self._current_run:
            self.logger.warning("Attempted to end run but no run is active")
            return

        context = self._current_run
        metadata = {"run_id": context.run_id, "duration": context.duration, "success": success}
        if error:
            metadata["error"] = str(error)
            metadata["error_type"] = error.__class__.__name__

        if success:
            self.logger.info(
                f"Run completed: {context.run_id} ({context.duration:.2f}s)",
                extra={"metadata": metadata},
            )
        else:
            self.logger.error(
                f"Run failed: {context.run_id} ({context.duration:.2f}s)",
                extra={"metadata": metadata},
            )

        self._current_run = None

    @property
    def current_run(self) -> Optional[RunContext]:
        """Get the current active run context."""
        return self._current_run

    @property
    def current_run_id(self) -> Optional[str]:
        return self._current_run.run_id if self._current_run else None
