"""Suite report model, aggregation and persistence."""

from .aggregator import ReportAggregator, collect_system_info
from .models import ReportDocument, ReportEntry, SuiteCounters
from .writer import ReportWriter

__all__ = [
    "ReportAggregator",
    "collect_system_info",
    "ReportDocument",
    "ReportEntry",
    "SuiteCounters",
    "ReportWriter",
]
