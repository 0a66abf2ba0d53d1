"""
BDD Reporter Package

Scope tracking, result recording and console reporting for
behavior-driven test runners.
"""

__version__ = "0.1.0"

from bdd_reporter.core.run_state import RunState
from bdd_reporter.core.config import Config
from bdd_reporter.reporting.renderer import ReportRenderer

__all__ = [
    "Config",
    "RunState",
    "ReportRenderer",
]
