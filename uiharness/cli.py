"""
Main CLI interface for UI Harness.

Provides configuration inspection and validation plus a summary view of
persisted execution reports.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .core.config_manager import get_config_manager
from .core.exceptions import HarnessError
from .execution.models import TestStatus
from .reporting.writer import ReportWriter


def cmd_config_show(args: argparse.Namespace) -> int:
    """Show current configuration command."""
    try:
        config = get_config_manager(args.config).get_config()

        if args.format == "json":
            print(json.dumps(config.to_dict(), indent=2, default=str))
            return 0

        print("📋 Current UI Harness Configuration:")
        print()
        print("🌐 Browser:")
        print(f"   Browser: {config.browser}")
        print(f"   Headless: {config.effective_headless}")
        print(f"   Execution Mode: {config.execution_mode}")
        if config.is_remote:
            print(f"   Grid URL: {config.grid_url}")
        print()
        print("🎯 Target:")
        print(f"   Environment: {config.environment}")
        print(f"   URL: {config.url}")
        print()
        print("🔁 Execution:")
        print(f"   Parallel Threads: {config.parallel_threads}")
        print(f"   Max Retries: {config.max_retries}")
        print(f"   Screenshot on Fail: {config.screenshot_on_fail}")
        print(f"   Screenshot on Pass: {config.screenshot_on_pass}")
        print()
        print("📁 Output:")
        print(f"   Screenshots: {config.screenshots_dir}")
        print(f"   Reports: {config.reports_dir}")
        print(f"   Logs: {config.logs_dir}")
        print(f"   Report Formats: {', '.join(config.report_formats)}")
        return 0

    except HarnessError as e:
        print(f"❌ Failed to show configuration: {e}")
        return 1


def cmd_config_validate(args: argparse.Namespace) -> int:
    """Validate configuration command."""
    try:
        manager = get_config_manager(args.config)
        violations = manager.validate_config()
    except HarnessError as e:
        print(f"❌ Configuration validation failed: {e}")
        return 1

    if violations:
        print("❌ Configuration is invalid:")
        for violation in violations:
            print(f"   - {violation}")
        return 1

    print("✅ Configuration is valid")
    return 0


def cmd_report_summary(args: argparse.Namespace) -> int:
    """Print counters and failed tests of a persisted JSON report."""
    try:
        document = ReportWriter.load(Path(args.path))
    except HarnessError as e:
        print(f"❌ {e}")
        return 1

    counters = document.counters
    print(f"📊 {document.name} ({document.run_id})")
    print(f"   Total: {counters.total}")
    print(f"   Passed: {counters.passed}")
    print(f"   Failed: {counters.failed}")
    print(f"   Skipped: {counters.skipped}")

    failed = document.get_entries_by_status(TestStatus.FAILED)
    if failed:
        print()
        print("❌ Failed tests:")
        for entry in failed:
            reason = entry.error.message if entry.error else "unknown"
            print(f"   - {entry.key} (attempts: {entry.attempt_count}) | {reason}")

    return 1 if document.has_failures else 0


def create_main_parser() -> argparse.ArgumentParser:
    """Create main CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="uiharness",
        description="UI Harness - browser test execution orchestrator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  uiharness config show --format json
  uiharness config validate --config harness.yaml
  uiharness report summary test-output/reports/ExecutionReport_01-01-2025_10-00-00.json
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Config commands
    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_subparsers = config_parser.add_subparsers(dest="config_command")

    show_parser = config_subparsers.add_parser("show", help="Show current configuration")
    show_parser.add_argument("--config", type=Path, help="Configuration file (YAML or JSON)")
    show_parser.add_argument(
        "--format", choices=["text", "json"], default="text", help="Output format"
    )
    show_parser.set_defaults(func=cmd_config_show)

    validate_parser = config_subparsers.add_parser("validate", help="Validate configuration")
    validate_parser.add_argument("--config", type=Path, help="Configuration file (YAML or JSON)")
    validate_parser.set_defaults(func=cmd_config_validate)

    # Report commands
    report_parser = subparsers.add_parser("report", help="Execution report utilities")
    report_subparsers = report_parser.add_subparsers(dest="report_command")

    summary_parser = report_subparsers.add_parser("summary", help="Summarize a JSON report")
    summary_parser.add_argument("path", help="Path to an ExecutionReport JSON file")
    summary_parser.set_defaults(func=cmd_report_summary)

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_main_parser()

    if args is None:
        args = sys.argv[1:]

    parsed_args = parser.parse_args(args)

    if not hasattr(parsed_args, "func"):
        parser.print_help()
        return 1

    return parsed_args.func(parsed_args)


if __name__ == "__main__":
    sys.exit(main())
