"""
Test reporting module for BDD Reporter.

This module provides:
- Outcome and coverage data structures
- Report colors and message templates
- Console rendering of results and coverage
"""

from bdd_reporter.reporting.models import (
    ResultKind,
    TestOutcome,
    CoverageReport,
    MissedCommand,
    load_coverage_report,
)
from bdd_reporter.reporting.theme import Theme, Strings, format_message
from bdd_reporter.reporting.sink import StyledLine, Segment, MemorySink, ConsoleSink
from bdd_reporter.reporting.coverage import CoverageSummarizer
from bdd_reporter.reporting.renderer import ReportRenderer, humanize_duration

__all__ = [
    "ResultKind",
    "TestOutcome",
    "CoverageReport",
    "MissedCommand",
    "load_coverage_report",
    "Theme",
    "Strings",
    "format_message",
    "StyledLine",
    "Segment",
    "MemorySink",
    "ConsoleSink",
    "CoverageSummarizer",
    "ReportRenderer",
    "humanize_duration",
]
