"""
Code coverage summary.
"""

import os
from typing import List, Optional, Sequence

from bdd_reporter.reporting.models import CoverageReport, MissedCommand
from bdd_reporter.reporting.sink import OutputSink, StyledLine
from bdd_reporter.reporting.theme import Strings, Theme

TABLE_COLUMNS = ("File", "Function", "Line", "Command")


def common_parent_path(paths: Sequence[str]) -> str:
    """Deepest directory containing every path, or "" if there is none."""
    if not paths:
        return ""
    try:
        return os.path.commonpath([os.path.dirname(os.path.normpath(p)) for p in paths])
    except ValueError:
        # absolute and relative paths mixed, or different drives
        return ""


def relative_path(path: str, parent: str) -> str:
    if not parent:
        return path
    normalized = os.path.normpath(path)
    try:
        if os.path.commonpath([normalized, parent]) != parent:
            return path
    except ValueError:
        return path
    return os.path.relpath(normalized, parent)


def format_table(rows: List[Sequence[str]], headers: Sequence[str] = TABLE_COLUMNS) -> List[str]:
    """Autosized plain-text table: header, dash rule, one line per row."""
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    def fmt(cells: Sequence[str]) -> str:
        return " ".join(cell.ljust(width) for cell, width in zip(cells, widths)).rstrip()

    lines = [fmt(headers), fmt(["-" * w for w in widths])]
    lines.extend(fmt(row) for row in rows)
    return lines


class CoverageSummarizer:
    """Render a CoverageReport as a percentage line plus a table of misses."""

    def __init__(
        self,
        sink: OutputSink,
        theme: Optional[Theme] = None,
        strings: Optional[Strings] = None,
        quiet: bool = False,
    ):
        self.sink = sink
        self.theme = theme if theme is not None else Theme()
        self.strings = strings if strings is not None else Strings()
        self.quiet = quiet

    def _rows(self, report: CoverageReport) -> List[List[str]]:
        parent = common_parent_path(report.analyzed_files)
        return [
            [relative_path(m.file, parent), m.function, str(m.line), m.command]
            for m in report.missed_commands
        ]

    def summary_message(self, report: CoverageReport) -> str:
        strings = self.strings
        command = strings["CommandPlural"] if report.commands_analyzed > 1 else strings["CommandSingular"]
        file = strings["FilePlural"] if report.files_analyzed > 1 else strings["FileSingular"]
        percent = f"{report.executed_fraction * 100:.2f}%"
        return strings.format(
            "CoverageMessage", command, file, percent,
            report.commands_analyzed, report.files_analyzed,
        )

    def summarize(self, report: Optional[CoverageReport]) -> List[StyledLine]:
        if report is None or report.commands_analyzed == 0:
            return []

        theme = self.theme
        lines = [
            StyledLine.of(),
            StyledLine.of(self.strings["CoverageTitle"], theme["Foreground"]),
        ]
        message = self.summary_message(report)
        missed: List[MissedCommand] = report.missed_commands

        if not missed:
            lines.append(StyledLine.of(message, theme["Coverage"]))
        else:
            warn = theme["CoverageWarn"]
            label = self.strings["MissedSingular"] if len(missed) == 1 else self.strings["MissedPlural"]
            lines.append(StyledLine.of(message, warn))
            lines.append(StyledLine.of(label, warn))
            lines.extend(StyledLine.of(text, warn) for text in format_table(self._rows(report)))

        if not self.quiet:
            for line in lines:
                self.sink.write(line)
        return lines
