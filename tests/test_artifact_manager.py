"""
Unit tests for screenshot artifact storage.
"""

import hashlib
import re
from unittest.mock import patch

import pytest

from uiharness.core.exceptions import FileOperationError
from uiharness.execution.artifacts import ArtifactManager
from uiharness.execution.models import ArtifactType, TestStatus

PNG = b"\x89PNG\r\n\x1a\nartifact"


@pytest.fixture
def artifact_manager(temp_config):
    """Create an artifact manager instance for testing."""
    return ArtifactManager(temp_config, "20250101-abc")


class TestArtifactManager:
    """Test cases for ArtifactManager."""

    def test_initialization(self, artifact_manager, temp_config):
        assert artifact_manager.run_id == "20250101-abc"
        assert artifact_manager.screenshots_root == temp_config.screenshots_dir

    def test_store_snapshot_bytes(self, artifact_manager, temp_config):
        """Test a screenshot is written and described."""
        metadata = artifact_manager.store_snapshot(PNG, "test_login", TestStatus.FAILED, attempt=2)

        path = temp_config.screenshots_dir / metadata.file_name
        assert path.read_bytes() == PNG
        assert re.match(r"test_login_FAILED_\d{4}-\d{2}-\d{2}_[\d-]+\.png$", metadata.file_name)
        assert metadata.artifact_type is ArtifactType.SCREENSHOT
        assert metadata.file_size == len(PNG)
        assert metadata.mime_type == "image/png"
        assert metadata.checksum == hashlib.sha256(PNG).hexdigest()
        assert metadata.attempt == 2
        assert metadata.run_id == "20250101-abc"

    def test_store_snapshot_from_path(self, artifact_manager, tmp_path):
        source = tmp_path / "capture.png"
        source.write_bytes(PNG)

        metadata = artifact_manager.store_snapshot(source, "test_login", TestStatus.PASSED)

        assert "_PASSED_" in metadata.file_name
        assert metadata.file_size == len(PNG)

    def test_parameterized_name_is_file_safe(self, artifact_manager):
        metadata = artifact_manager.store_snapshot(
            PNG, "test_login[locale=de, user=bob]", TestStatus.FAILED
        )

        assert metadata.file_name.startswith("test_login_locale_de_user_bob_FAILED_")
        assert metadata.test_name == "test_login[locale=de, user=bob]"

    def test_write_failure_raises(self, artifact_manager):
        with patch("pathlib.Path.write_bytes", side_effect=OSError("disk full")):
            with pytest.raises(FileOperationError) as exc_info:
                artifact_manager.store_snapshot(PNG, "test_login", TestStatus.FAILED)

        assert exc_info.value.operation == "write"

    def test_lookup_and_stats(self, artifact_manager):
        artifact_manager.store_snapshot(PNG, "test_a", TestStatus.FAILED)
        artifact_manager.store_snapshot(PNG, "test_a", TestStatus.FAILED)
        artifact_manager.store_snapshot(PNG, "test_b", TestStatus.PASSED)

        assert len(artifact_manager.get_artifacts_by_test("test_a")) == 2

        stats = artifact_manager.get_storage_stats()
        assert stats["total_artifacts"] == 3
        assert stats["total_size"] == 3 * len(PNG)
        assert stats["by_type"] == {"screenshot": 3}
