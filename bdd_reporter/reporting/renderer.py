"""
Console report rendering.

The renderer turns recorded outcomes into styled lines and hands them to
an output sink. It can be driven live (one writer call per runner event)
or replay a finished run through render().
"""

import math
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence

from bdd_reporter.reporting.coverage import CoverageSummarizer
from bdd_reporter.reporting.models import CoverageReport, ResultKind, TestOutcome
from bdd_reporter.reporting.sink import OutputSink, Segment, StyledLine
from bdd_reporter.reporting.theme import Strings, Theme

if TYPE_CHECKING:
    from bdd_reporter.core.run_state import RunState

# Unit thresholds in seconds, smallest first.
_MINUTE = 60.0
_HOUR = 3600.0

_GLYPHS = {
    ResultKind.PASSED: "[+]",
    ResultKind.FAILED: "[-]",
    ResultKind.SKIPPED: "[!]",
    ResultKind.PENDING: "[?]",
}

# (name color, time color) per result kind
_RESULT_COLORS = {
    ResultKind.PASSED: ("Pass", "PassTime"),
    ResultKind.FAILED: ("Fail", "FailTime"),
    ResultKind.SKIPPED: ("Skipped", "IncompleteTime"),
    ResultKind.PENDING: ("Pending", "IncompleteTime"),
}


def _fixed(value: float, digits: int = 2) -> str:
    text = f"{value:.{digits}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def humanize_duration(seconds: float) -> str:
    """
    Format a duration for the report.

    Under a second shows whole milliseconds, then seconds, minutes and
    hours with at most two decimals. Always fixed-point. The unit is
    picked after rounding, so 59.999s shows as 1m rather than 60s.
    """
    if seconds < 0:
        raise ValueError(f"duration must be non-negative, got {seconds}")
    millis = math.floor(round(seconds * 1000, 6))
    if millis < 1000:
        return f"{millis}ms"
    value = round(seconds, 2)
    if value < _MINUTE:
        return f"{_fixed(value)}s"
    value = round(seconds / _MINUTE, 2)
    if value < _MINUTE:
        return f"{_fixed(value)}m"
    return f"{_fixed(seconds / _HOUR)}h"


def result_depth(outcome: TestOutcome) -> int:
    if outcome.context is not None:
        return 4
    if outcome.describe is not None:
        return 1
    return 0


def _indent_block(text: str, margin: str) -> List[str]:
    return [margin + line for line in text.splitlines()]


class ReportRenderer:
    """Render a test run as styled console lines."""

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

    def _emit(self, lines: List[StyledLine]) -> List[StyledLine]:
        if not self.quiet:
            for line in lines:
                self.sink.write(line)
        return lines

    def _line(self, text: str, label: str) -> StyledLine:
        return StyledLine.of(text, self.theme[label])

    def write_start(
        self,
        paths: Sequence[str],
        name_filter: Sequence[str] = (),
        tag_filter: Sequence[str] = (),
    ) -> List[StyledLine]:
        """Banner naming what is about to run and which filters apply."""
        ofs = self.strings["MessageOfs"]
        message = self.strings.format("StartMessage", ofs.join(paths))
        if name_filter:
            message += self.strings.format("FilterMessage", ofs.join(name_filter))
        if tag_filter:
            message += self.strings.format("TagMessage", ofs.join(tag_filter))
        return self._emit([self._line(message, "Foreground")])

    def write_describe(self, name: str, description: Optional[str] = None) -> List[StyledLine]:
        lines = [StyledLine.of(), self._line(self.strings.format("Describe", name), "Describe")]
        if description:
            margin = self.strings["Margin"] * 2
            lines.extend(
                self._line(line, "DescribeDetail")
                for line in _indent_block(description, margin)
            )
        return self._emit(lines)

    def write_context(self, name: str, description: Optional[str] = None) -> List[StyledLine]:
        text = self.strings["Margin"] + self.strings.format("Context", name)
        lines = [StyledLine.of(), self._line(text, "Context")]
        if description:
            # continuation lines line up under the end of the header text
            margin = " " * len(text)
            lines.extend(
                self._line(line, "ContextDetail")
                for line in _indent_block(description, margin)
            )
        return self._emit(lines)

    def write_result(self, outcome: TestOutcome) -> List[StyledLine]:
        margin = " " * result_depth(outcome)
        name_label, time_label = _RESULT_COLORS[outcome.result]
        lines = [
            StyledLine((
                Segment(f"{margin}{_GLYPHS[outcome.result]} {outcome.name}", self.theme[name_label]),
                Segment(f" {humanize_duration(outcome.duration)}", self.theme[time_label]),
            ))
        ]
        if outcome.result == ResultKind.FAILED:
            error_margin = margin + "  "
            for block in (outcome.failure_message, outcome.stack_trace):
                if block:
                    lines.extend(self._line(line, "Fail") for line in _indent_block(block, error_margin))
        return self._emit(lines)

    def write_summary(self, state: "RunState") -> List[StyledLine]:
        """Timing line followed by the pass/fail counts."""
        theme = self.theme
        lines = [self._line(
            self.strings.format("Timing", humanize_duration(state.elapsed())), "Foreground"
        )]

        if state.failed_count > 0:
            success, failure = theme["Foreground"], theme["Fail"]
        else:
            success, failure = theme["Pass"], theme["Information"]
        skipped = theme["Skipped"] if state.skipped_count > 0 else theme["Information"]
        pending = theme["Pending"] if state.pending_count > 0 else theme["Information"]

        if self.strings["ContextsPassed"]:
            lines.append(StyledLine((
                Segment(self.strings.format("ContextsPassed", state.passed_contexts), success),
                Segment(self.strings.format("ContextsFailed", state.failed_contexts), failure),
            )))

        lines.append(StyledLine((
            Segment(self.strings.format("TestsPassed", state.passed_count), success),
            Segment(self.strings.format("TestsFailed", state.failed_count), failure),
            Segment(self.strings.format("TestsSkipped", state.skipped_count), skipped),
            Segment(self.strings.format("TestsPending", state.pending_count), pending),
        )))
        return self._emit(lines)

    def write_coverage(self, coverage: Optional[CoverageReport]) -> List[StyledLine]:
        summarizer = CoverageSummarizer(self.sink, self.theme, self.strings, quiet=self.quiet)
        return summarizer.summarize(coverage)

    def write_outcomes(self, state: "RunState", outcomes: Iterable[TestOutcome]) -> List[StyledLine]:
        """Describe/Context headers whenever the owning block changes, then each result."""
        lines: List[StyledLine] = []
        describe_key = context_key = (None, None)
        first = True
        for outcome in outcomes:
            key = (outcome.describe_block, outcome.describe)
            if first or key != describe_key:
                describe_key, context_key = key, (None, None)
                if outcome.describe is not None:
                    lines += self.write_describe(
                        outcome.describe, state.descriptions.get(outcome.describe_block)
                    )
            key = (outcome.context_block, outcome.context)
            if key != context_key:
                context_key = key
                if outcome.context is not None:
                    lines += self.write_context(
                        outcome.context, state.descriptions.get(outcome.context_block)
                    )
            first = False
            lines += self.write_result(outcome)
        return lines

    def render(self, state: "RunState", coverage: Optional[CoverageReport] = None) -> List[StyledLine]:
        """Render the whole report for a finished run."""
        lines = self.write_start(state.paths, state.name_filter, state.tag_filter)
        lines += self.write_outcomes(state, state.outcomes)
        lines += self.write_summary(state)
        lines += self.write_coverage(coverage)
        return lines
