"""
Unit tests for main CLI interface.

Tests configuration inspection, validation and report summaries.
"""

import json

import pytest

from uiharness.cli import create_main_parser, main
from uiharness.execution.models import ExecutionRecord, TestStatus
from uiharness.reporting.models import ReportDocument, ReportEntry
from uiharness.reporting.writer import ReportWriter


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "harness.yaml"
    path.write_text(f"browser: firefox\nretry_count: 2\noutput_dir: {tmp_path / 'out'}\n")
    return path


def write_report(temp_config, failed=0):
    document = ReportDocument(run_id="run-9", name="Nightly")
    for index in range(2):
        record = ExecutionRecord(name=f"test_ok_{index}")
        record.finalize(TestStatus.PASSED)
        document.append(ReportEntry.from_record(record))
    for index in range(failed):
        record = ExecutionRecord(name=f"test_bad_{index}")
        record.record_error("TestAssertionFailure", "cart total wrong")
        record.finalize(TestStatus.FAILED)
        document.append(ReportEntry.from_record(record))
    document.seal()
    temp_config.report_formats = ["json"]
    return ReportWriter(temp_config).write(document)[0]


class TestConfigCommands:
    """Test cases for the config sub-commands."""

    def test_show_json(self, config_file, capsys):
        assert main(["config", "show", "--config", str(config_file), "--format", "json"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["browser"] == "firefox"
        assert data["max_retries"] == 2

    def test_show_text(self, config_file, capsys):
        assert main(["config", "show", "--config", str(config_file)]) == 0

        out = capsys.readouterr().out
        assert "Browser: firefox" in out
        assert "Max Retries: 2" in out

    def test_validate_valid(self, config_file, capsys):
        assert main(["config", "validate", "--config", str(config_file)]) == 0
        assert "valid" in capsys.readouterr().out

    def test_validate_invalid(self, tmp_path, capsys):
        path = tmp_path / "harness.yaml"
        path.write_text("browser: safari\n")

        assert main(["config", "validate", "--config", str(path)]) == 1
        assert "safari" in capsys.readouterr().out

    def test_validate_numeric_browser(self, tmp_path, capsys):
        path = tmp_path / "harness.yaml"
        path.write_text("browser: 123\n")

        assert main(["config", "validate", "--config", str(path)]) == 1
        assert "Unsupported browser: 123" in capsys.readouterr().out

    def test_unreadable_config(self, tmp_path, capsys):
        path = tmp_path / "harness.yaml"
        path.write_text("browser: [chrome\n")

        assert main(["config", "show", "--config", str(path)]) == 1
        assert "Failed to show configuration" in capsys.readouterr().out


class TestReportCommands:
    """Test cases for the report sub-commands."""

    def test_summary_all_passed(self, temp_config, capsys):
        path = write_report(temp_config)

        assert main(["report", "summary", str(path)]) == 0

        out = capsys.readouterr().out
        assert "Nightly (run-9)" in out
        assert "Passed: 2" in out

    def test_summary_with_failures(self, temp_config, capsys):
        path = write_report(temp_config, failed=1)

        assert main(["report", "summary", str(path)]) == 1

        out = capsys.readouterr().out
        assert "Failed: 1" in out
        assert "test_bad_0 (attempts: 1) | cart total wrong" in out

    def test_summary_missing_file(self, tmp_path, capsys):
        assert main(["report", "summary", str(tmp_path / "nope.json")]) == 1


class TestParser:
    """Test cases for argument parsing."""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage: uiharness" in capsys.readouterr().out

    def test_parser_structure(self):
        parser = create_main_parser()

        args = parser.parse_args(["report", "summary", "report.json"])

        assert args.path == "report.json"

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert "uiharness 0.1.0" in capsys.readouterr().out
