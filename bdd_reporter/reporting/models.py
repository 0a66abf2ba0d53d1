"""
Data models for test reporting.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from bdd_reporter.core.errors import ConfigurationError, UnknownResultKind


class ResultKind(Enum):
    """Outcome of a single It block."""
    PASSED = "Passed"
    FAILED = "Failed"
    SKIPPED = "Skipped"
    PENDING = "Pending"

    @classmethod
    def parse(cls, value: Union["ResultKind", str]) -> "ResultKind":
        """Accept a ResultKind or its name in any letter case."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for kind in cls:
                if kind.value.lower() == value.strip().lower():
                    return kind
        raise UnknownResultKind(
            f"Unknown result kind {value!r}; expected one of "
            f"{', '.join(kind.value for kind in cls)}"
        )


@dataclass(frozen=True)
class TestOutcome:
    """Individual test result, immutable once recorded."""
    __test__ = False  # keep pytest from collecting this class

    name: str
    describe: Optional[str]
    context: Optional[str]
    result: ResultKind
    passed: bool
    duration: float  # seconds
    failure_message: Optional[str] = None
    stack_trace: Optional[str] = None
    parameterized_suite_name: Optional[str] = None
    parameters: Optional[Dict[str, Any]] = None
    # numbers of the Describe/Context blocks that were open, in entry order
    describe_block: Optional[int] = None
    context_block: Optional[int] = None


@dataclass(frozen=True)
class MissedCommand:
    """A command the coverage instrumentation never saw executed."""
    file: str
    function: str
    line: int
    command: str


@dataclass(frozen=True)
class CoverageReport:
    """Coverage data produced by external instrumentation."""
    analyzed_files: List[str] = field(default_factory=list)
    commands_analyzed: int = 0
    commands_executed: int = 0
    missed_commands: List[MissedCommand] = field(default_factory=list)

    @property
    def files_analyzed(self) -> int:
        return len(self.analyzed_files)

    @property
    def executed_fraction(self) -> float:
        if self.commands_analyzed == 0:
            return 0.0
        return self.commands_executed / self.commands_analyzed

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CoverageReport":
        """Create a coverage report from a plain mapping."""
        if not isinstance(data, dict):
            raise ConfigurationError("Coverage report must be a mapping")
        try:
            missed = [
                MissedCommand(
                    file=str(item["file"]),
                    function=str(item.get("function") or ""),
                    line=int(item["line"]),
                    command=str(item.get("command") or ""),
                )
                for item in data.get("missed_commands") or []
            ]
            return cls(
                analyzed_files=[str(p) for p in data.get("analyzed_files") or []],
                commands_analyzed=int(data.get("commands_analyzed", 0)),
                commands_executed=int(data.get("commands_executed", 0)),
                missed_commands=missed,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid coverage report: {e}") from e


def load_coverage_report(path: Path) -> CoverageReport:
    """Load a coverage report from a YAML (or JSON) file."""
    path = Path(path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to read coverage report: {path}: {e}") from e
    return CoverageReport.from_dict(data)
