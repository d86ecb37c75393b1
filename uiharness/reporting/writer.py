"""
Report persistence.

Writes a sealed ReportDocument as JSON and, when configured, as JUnit XML
rendered with Jinja2.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from jinja2 import Template

from ..core.config import Config
from ..core.exceptions import FileOperationError
from ..core.logging_config import get_logger
from .models import ReportDocument

JUNIT_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<testsuites name="{{ report.name | e }}"
            tests="{{ report.counters.total }}"
            failures="{{ report.counters.failed }}"
            errors="0"
            skipped="{{ report.counters.skipped }}"
            time="{{ '%.3f' | format(report.duration) }}">
    <testsuite name="{{ report.run_id | e }}"
               tests="{{ report.counters.total }}"
               failures="{{ report.counters.failed }}"
               errors="0"
               skipped="{{ report.counters.skipped }}"
               time="{{ '%.3f' | format(report.duration) }}">
        <properties>
            {% for key, value in report.system_info.items() %}
            <property name="{{ key | e }}" value="{{ value | e }}" />
            {% endfor %}
        </properties>
        {% for entry in report.entries %}
        <testcase name="{{ entry.key | e }}"
                  classname="{{ entry.name | e }}"
                  time="{{ '%.3f' | format(entry.duration) }}">
            {% if entry.status.value == "failed" %}
            <failure message="{{ (entry.error.message if entry.error else 'Test failed') | e }}" type="{{ (entry.error.kind if entry.error else 'Failure') | e }}">{{ ((entry.error.stack_trace or entry.error.message) if entry.error else 'No details available') | e }}</failure>
            {% elif entry.status.value == "skipped" %}
            <skipped message="{{ (entry.error.message if entry.error else 'Test was skipped') | e }}" />
            {% endif %}
            {% if entry.artifacts %}
            <system-out>{% for artifact in entry.artifacts %}[[ATTACHMENT|{{ artifact.file_path | e }}]]
{% endfor %}</system-out>
            {% endif %}
        </testcase>
        {% endfor %}
    </testsuite>
</testsuites>
"""


class ReportWriter:
    """Writes report documents into the configured reports directory."""

    def __init__(self, config: Config):
        self.config = config
        self.logger = get_logger(__name__)

    def _timestamp(self) -> str:
        return datetime.now().strftime(self.config.report_timestamp_format)

    def write(self, document: ReportDocument, output_dir: Optional[Path] = None) -> List[Path]:
        """
        Write the document in every configured format.

        Args:
            document: Report to persist
            output_dir: Override of the configured reports directory

        Returns:
            Paths of the written files

        Raises:
            FileOperationError: If a report file cannot be written
        """
        target_dir = output_dir or self.config.reports_dir
        timestamp = self._timestamp()
        paths = []

        for report_format in self.config.report_formats:
            if report_format == "json":
                path = target_dir / f"ExecutionReport_{timestamp}.json"
                self._save(path, self.render_json(document))
            elif report_format == "junit":
                path = target_dir / f"junit_{timestamp}.xml"
                self._save(path, self.render_junit(document))
            else:
                self.logger.warning(f"Unsupported report format skipped: {report_format}")
                continue
            paths.append(path)
            self.logger.info(f"Saved {report_format} report to: {path}")

        return paths

    def render_json(self, document: ReportDocument) -> str:
        return json.dumps(document.model_dump(mode="json"), indent=2, ensure_ascii=False)

    def render_junit(self, document: ReportDocument) -> str:
        return Template(JUNIT_TEMPLATE).render(report=document)

    def _save(self, path: Path, content: str) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(content)
        except OSError as e:
            raise FileOperationError(
                f"Failed to save report: {e}", file_path=str(path), operation="write"
            ) from e

    @staticmethod
    def load(path: Path) -> ReportDocument:
        """
        Read a JSON report back into a document.

        Raises:
            FileOperationError: If the file cannot be read or parsed
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return ReportDocument.model_validate(data)
        except (OSError, ValueError) as e:
            raise FileOperationError(
                f"Failed to load report: {e}", file_path=str(path), operation="read"
            ) from e
