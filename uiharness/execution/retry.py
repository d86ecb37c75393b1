"""
Retry decisions for failed test executions.
"""

import logging
from typing import Optional

from ..core.config import Config
from .models import ExecutionRecord, TestStatus


class RetryPolicy:
    """
    Decides whether a failed execution gets another attempt.

    The retry budget is resolved once when the policy is created. Retries run
    synchronously on the same worker.
    """

    def __init__(self, max_retries: int = 0, logger: Optional[logging.Logger] = None):
        self.max_retries = max(max_retries, 0)
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_config(cls, config: Config, logger: Optional[logging.Logger] = None) -> "RetryPolicy":
        """Build a policy from configuration; disabled retry means a zero budget."""
        return cls(max_retries=config.max_retries, logger=logger)

    def should_retry(self, record: ExecutionRecord) -> bool:
        """
        Decide whether the record gets another attempt.

        On a granted retry the record's attempt count is incremented and its
        status reset to RUNNING. Error history is kept.

        Args:
            record: Record whose latest attempt just completed

        Returns:
            True if the test should be executed again
        """
        if record.status is not TestStatus.FAILED:
            return False

        if record.attempt_count <= self.max_retries:
            self.logger.warning(
                f"Retrying test: {record.key} | Attempt: {record.attempt_count + 1}/{self.max_retries + 1}",
                extra={"metadata": {"test_name": record.key, "attempt": record.attempt_count}},
            )
            record.next_attempt()
            return True

        if self.max_retries > 0:
            self.logger.error(
                f"Max retries reached for test: {record.key}",
                extra={"metadata": {"test_name": record.key, "attempt": record.attempt_count}},
            )
        return False
