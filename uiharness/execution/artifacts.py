"""
Artifact storage for diagnostic captures.

Screenshots are written under the configured screenshots directory with the
test name, terminal status and a timestamp in the file name. Every stored
file is registered with its size, checksum and MIME type.
"""

import hashlib
import re
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..core.config import Config
from ..core.exceptions import FileOperationError
from ..core.logging_config import get_logger
from .models import ArtifactMetadata, ArtifactType, TestStatus

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class ArtifactManager:
    """
    Manages test artifact storage.

    Safe to share between workers: the artifact index is guarded by a lock
    and file names carry microsecond timestamps.
    """

    def __init__(self, config: Config, run_id: str):
        """
        Initialize the artifact manager.

        Args:
            config: UI Harness configuration
            run_id: Unique run identifier
        """
        self.config = config
        self.run_id = run_id
        self.logger = get_logger(__name__, run_id=run_id)

        self.screenshots_root = config.screenshots_dir
        self._artifacts: List[ArtifactMetadata] = []
        self._lock = threading.Lock()

    @staticmethod
    def safe_file_stem(name: str) -> str:
        """Turn a test key such as ``login[user=a, pw=b]`` into a file-safe stem."""
        stem = _UNSAFE_CHARS.sub("_", name).strip("_")
        return stem or "test"

    def build_snapshot_path(self, test_name: str, status: TestStatus) -> Path:
        timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S-%f")
        file_name = f"{self.safe_file_stem(test_name)}_{status.name}_{timestamp}.png"
        return self.screenshots_root / file_name

    def store_snapshot(
        self,
        data: Union[bytes, Path],
        test_name: str,
        status: TestStatus,
        attempt: Optional[int] = None,
    ) -> ArtifactMetadata:
        """
        Persist a screenshot and register its metadata.

        Args:
            data: PNG bytes, or a path to an existing PNG to copy
            test_name: Test the screenshot belongs to
            status: Status the test ended with
            attempt: Attempt number that produced the screenshot

        Returns:
            Metadata of the stored artifact

        Raises:
            FileOperationError: If the screenshot cannot be written
        """
        target = self.build_snapshot_path(test_name, status)

        try:
            content = data.read_bytes() if isinstance(data, Path) else data
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as e:
            raise FileOperationError(
                f"Failed to store screenshot for {test_name}: {e}",
                file_path=str(target),
                operation="write",
            ) from e

        metadata = ArtifactMetadata(
            artifact_type=ArtifactType.SCREENSHOT,
            file_path=str(target),
            file_size=len(content),
            test_name=test_name,
            run_id=self.run_id,
            attempt=attempt,
            description=f"Screenshot on {status.value}",
            mime_type="image/png",
            checksum=hashlib.sha256(content).hexdigest(),
        )
        self.register_artifact(metadata)
        return metadata

    def register_artifact(self, metadata: ArtifactMetadata) -> None:
        with self._lock:
            self._artifacts.append(metadata)

        self.logger.debug(
            f"Registered artifact: {metadata.file_name}",
            extra={
                "metadata": {
                    "type": metadata.artifact_type.value,
                    "test_name": metadata.test_name,
                    "file_size": metadata.file_size,
                }
            },
        )

    def get_artifacts_by_test(self, test_name: str) -> List[ArtifactMetadata]:
        """
        Get all artifacts for a specific test.

        Args:
            test_name: Name of the test

        Returns:
            List of artifact metadata for the test
        """
        with self._lock:
            return [a for a in self._artifacts if a.test_name == test_name]

    def get_storage_stats(self) -> Dict[str, Any]:
        """Summarize what this run has stored so far."""
        with self._lock:
            artifacts = list(self._artifacts)

        by_type: Dict[str, int] = {}
        for artifact in artifacts:
            key = artifact.artifact_type.value
            by_type[key] = by_type.get(key, 0) + 1

        return {
            "total_artifacts": len(artifacts),
            "total_size": sum(a.file_size for a in artifacts),
            "by_type": by_type,
            "screenshots_dir": str(self.screenshots_root),
        }
