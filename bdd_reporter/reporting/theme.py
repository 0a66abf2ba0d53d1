"""
Report colors and message templates.

Both maps ship with complete defaults; an embedding application can
replace individual entries from code or from a YAML file.
"""

from pathlib import Path
from collections.abc import Mapping
from typing import Any, Dict, Iterator, Optional

import yaml

from bdd_reporter.core.errors import ConfigurationError


DEFAULT_THEME: Dict[str, str] = {
    "Describe": "Green",
    "DescribeDetail": "DarkYellow",
    "Context": "Cyan",
    "ContextDetail": "DarkCyan",
    "Pass": "DarkGreen",
    "PassTime": "DarkGray",
    "Fail": "Red",
    "FailTime": "DarkGray",
    "Skipped": "Yellow",
    "Pending": "Gray",
    "Incomplete": "Yellow",
    "IncompleteTime": "DarkGray",
    "Foreground": "White",
    "Information": "DarkGray",
    "Coverage": "White",
    "CoverageWarn": "DarkRed",
}

DEFAULT_STRINGS: Dict[str, str] = {
    "StartMessage": "Executing all tests in '{0}'",
    "FilterMessage": " matching test name '{0}'",
    "TagMessage": " with tags '{0}'",
    "MessageOfs": "', '",
    "CoverageTitle": "Code coverage report:",
    "CoverageMessage": "Covered {2} of {3} analyzed {0} in {4} {1}.",
    "MissedSingular": "Missed command:",
    "MissedPlural": "Missed commands:",
    "CommandSingular": "Command",
    "CommandPlural": "Commands",
    "FileSingular": "File",
    "FilePlural": "Files",
    "Describe": "Describing {0}",
    "Context": "Context {0}",
    "Margin": "  ",
    "Timing": "Tests completed in {0}",
    # An empty template suppresses the contexts line.
    "ContextsPassed": "",
    "ContextsFailed": "",
    "TestsPassed": "Tests Passed: {0}, ",
    "TestsFailed": "Failed: {0}, ",
    "TestsSkipped": "Skipped: {0}, ",
    "TestsPending": "Pending: {0}",
}


def format_message(template: str, *args: Any) -> str:
    """Substitute positional arguments into a message template."""
    try:
        return template.format(*args)
    except (IndexError, KeyError, ValueError) as e:
        raise ConfigurationError(f"Invalid message template {template!r}: {e}") from e


class _LabelMap(Mapping):
    """Defaults plus validated overrides."""

    defaults: Dict[str, str] = {}
    kind = "label"

    def __init__(self, overrides: Optional[Mapping[str, Any]] = None):
        self._values = dict(self.defaults)
        for key, value in (overrides or {}).items():
            if key not in self.defaults:
                raise ConfigurationError(f"Unknown {self.kind} key: {key}")
            if value is None:
                value = ""
            if not isinstance(value, str):
                raise ConfigurationError(f"{self.kind} '{key}' must be a string, got {value!r}")
            self._values[key] = value

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def to_dict(self) -> Dict[str, str]:
        return dict(self._values)

    @classmethod
    def from_yaml(cls, path: Path):
        """Load overrides from a YAML mapping."""
        path = Path(path)
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to read {cls.kind} file: {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"{cls.kind} file must contain a mapping: {path}")
        return cls(data)


class Theme(_LabelMap):
    """Semantic label to display color."""
    defaults = DEFAULT_THEME
    kind = "theme"


class Strings(_LabelMap):
    """Message key to format template."""
    defaults = DEFAULT_STRINGS
    kind = "strings"

    def format(self, key: str, *args: Any) -> str:
        return format_message(self[key], *args)
