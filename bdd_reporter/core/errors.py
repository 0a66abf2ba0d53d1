"""
Custom exceptions for BDD Reporter.
"""


class BddReporterError(Exception):
    """Base exception for all BDD Reporter errors."""
    pass


class ProtocolViolation(BddReporterError):
    """Raised when a scope transition happens out of order.

    This always points at a bug in the driving runner, never at a failing
    test, so it is not meant to be caught and recovered from.
    """
    pass


class UnknownResultKind(BddReporterError, ValueError):
    """Raised when a test result is not one of the recognized kinds."""
    pass


class ConfigurationError(BddReporterError):
    """Raised when configuration is invalid."""
    pass


class TranscriptError(ConfigurationError):
    """Raised when a replay transcript is malformed."""
    pass
