"""
Core modules for BDD Reporter.
"""

from bdd_reporter.core.config import Config
from bdd_reporter.core.scope import ScopeStateMachine
from bdd_reporter.core.errors import (
    BddReporterError,
    ProtocolViolation,
    UnknownResultKind,
    ConfigurationError,
    TranscriptError,
)

__all__ = [
    "Config",
    "ScopeStateMachine",
    "BddReporterError",
    "ProtocolViolation",
    "UnknownResultKind",
    "ConfigurationError",
    "TranscriptError",
]
