"""
Test execution components for UI Harness.

This module provides the test executor, retry policy, lifecycle event bus,
diagnostics capture and artifact storage.
"""

from .executor import TestExecutor, TestCase, current_worker_id
from .artifacts import ArtifactManager
from .diagnostics import DiagnosticsCapturer
from .events import (
    EventConsumer,
    ExecutionEventBus,
    SuiteFinished,
    SuiteStarted,
    TestOutcome,
    TestStarted,
)
from .listeners import LoggingListener
from .models import ArtifactMetadata, ErrorInfo, ExecutionRecord, TestStatus
from .retry import RetryPolicy

__all__ = [
    "TestExecutor",
    "TestCase",
    "current_worker_id",
    "ArtifactManager",
    "DiagnosticsCapturer",
    "EventConsumer",
    "ExecutionEventBus",
    "SuiteFinished",
    "SuiteStarted",
    "TestOutcome",
    "TestStarted",
    "LoggingListener",
    "ArtifactMetadata",
    "ErrorInfo",
    "ExecutionRecord",
    "TestStatus",
    "RetryPolicy",
]
