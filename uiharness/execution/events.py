"""
Execution lifecycle events and the bus that delivers them.

Events are published synchronously on the worker thread that produced them,
first to the registered stages (diagnostics) and then to consumers (report
aggregation, logging). A failing handler is logged and skipped; it never
stops delivery to the remaining handlers.
"""

import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Union

from ..session.models import Session
from .models import ErrorInfo, ExecutionRecord, TestStatus

if TYPE_CHECKING:
    from ..reporting.models import SuiteCounters


@dataclass(frozen=True)
class SuiteStarted:
    run_id: str
    name: str


@dataclass(frozen=True)
class TestStarted:
    __test__ = False

    record: ExecutionRecord
    worker_id: str
    attempt: int


@dataclass(frozen=True)
class TestOutcome:
    """
    Result of a single attempt.

    `final` is False when a retry follows. `session` is the worker's session
    at the time of the outcome, if it still has one.
    """

    __test__ = False

    record: ExecutionRecord
    worker_id: str
    status: TestStatus
    attempt: int
    error: Optional[ErrorInfo] = None
    final: bool = True
    session: Optional[Session] = None


@dataclass(frozen=True)
class SuiteFinished:
    counters: "SuiteCounters"


ExecutionEvent = Union[SuiteStarted, TestStarted, TestOutcome, SuiteFinished]
EventHandler = Callable[[Any], None]


class EventConsumer:
    """Base class for event consumers; override the hooks you need."""

    def __call__(self, event: ExecutionEvent) -> None:
        if isinstance(event, TestOutcome):
            self.on_test_outcome(event)
        elif isinstance(event, TestStarted):
            self.on_test_started(event)
        elif isinstance(event, SuiteStarted):
            self.on_suite_started(event)
        elif isinstance(event, SuiteFinished):
            self.on_suite_finished(event)

    def on_suite_started(self, event: SuiteStarted) -> None:
        pass

    def on_test_started(self, event: TestStarted) -> None:
        pass

    def on_test_outcome(self, event: TestOutcome) -> None:
        pass

    def on_suite_finished(self, event: SuiteFinished) -> None:
        pass


class ExecutionEventBus:
    """
    Fan-out of execution events to stages and consumers.

    Stages always see an event before any consumer does. Events published by
    one worker are delivered in publish order.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._stages: List[EventHandler] = []
        self._consumers: List[EventHandler] = []
        self._lock = threading.Lock()

    def add_stage(self, stage: EventHandler) -> None:
        """Register a handler that runs ahead of all consumers."""
        with self._lock:
            self._stages.append(stage)

    def subscribe(self, consumer: EventHandler) -> None:
        with self._lock:
            if consumer not in self._consumers:
                self._consumers.append(consumer)

    def unsubscribe(self, consumer: EventHandler) -> None:
        with self._lock:
            if consumer in self._consumers:
                self._consumers.remove(consumer)

    @property
    def handlers(self) -> List[EventHandler]:
        with self._lock:
            return self._stages + self._consumers

    def publish(self, event: ExecutionEvent) -> None:
        """
        Deliver an event to every stage, then every consumer.

        Args:
            event: Lifecycle event to deliver
        """
        for handler in self.handlers:
            try:
                handler(event)
            except Exception as e:
                self.logger.exception(
                    f"Event handler {self._describe(handler)} failed on {type(event).__name__}: {e}",
                    extra={
                        "metadata": {
                            "event": type(event).__name__,
                            "handler": self._describe(handler),
                        }
                    },
                )

    @staticmethod
    def _describe(handler: EventHandler) -> str:
        return getattr(handler, "__name__", type(handler).__name__)
