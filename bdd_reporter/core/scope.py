"""
Scope state machine for Describe / Context / It nesting.
"""

from typing import Optional

from bdd_reporter.core.errors import ProtocolViolation
from bdd_reporter.core.logging import get_logger

DESCRIBE = "Describe"
CONTEXT = "Context"
IT = "It"

logger = get_logger(__name__)


class ScopeStateMachine:
    """
    Track which Describe, Context and It are currently open.

    Only one of each may be open at a time. A Context needs an open
    Describe; an It needs an open Describe but not necessarily a Context.
    Any transition out of that order raises ProtocolViolation.
    """

    def __init__(self):
        self.current_describe: Optional[str] = None
        self.current_context: Optional[str] = None
        self.current_test: Optional[str] = None

    def enter_describe(self, name: str) -> None:
        if self.current_describe is not None:
            raise ProtocolViolation(
                f"Cannot enter Describe '{name}': already in Describe '{self.current_describe}'"
            )
        logger.debug("Entering Describe %s", name)
        self.current_describe = name

    def leave_describe(self) -> None:
        if self.current_context is not None:
            raise ProtocolViolation(
                f"Cannot leave Describe before leaving Context '{self.current_context}'"
            )
        logger.debug("Leaving Describe %s", self.current_describe)
        self.current_describe = None

    def enter_context(self, name: str) -> None:
        if self.current_describe is None:
            raise ProtocolViolation(f"Cannot enter Context '{name}' before entering Describe")
        if self.current_context is not None:
            raise ProtocolViolation(
                f"Cannot enter Context '{name}': already in Context '{self.current_context}'"
            )
        if self.current_test is not None:
            raise ProtocolViolation(
                f"Cannot enter Context '{name}' inside It '{self.current_test}'"
            )
        logger.debug("Entering Context %s", name)
        self.current_context = name

    def leave_context(self) -> None:
        if self.current_test is not None:
            raise ProtocolViolation(
                f"Cannot leave Context before leaving It '{self.current_test}'"
            )
        logger.debug("Leaving Context %s", self.current_context)
        self.current_context = None

    def enter_test(self, name: str) -> None:
        if self.current_describe is None:
            raise ProtocolViolation(f"Cannot enter It '{name}' before entering Describe")
        if self.current_test is not None:
            raise ProtocolViolation(
                f"Cannot enter It '{name}': already in It '{self.current_test}'"
            )
        logger.debug("Entering It %s", name)
        self.current_test = name

    def leave_test(self) -> None:
        logger.debug("Leaving It %s", self.current_test)
        self.current_test = None

    @property
    def scope(self) -> Optional[str]:
        """Innermost open scope, or None when idle."""
        if self.current_test is not None:
            return IT
        if self.current_context is not None:
            return CONTEXT
        if self.current_describe is not None:
            return DESCRIBE
        return None

    @property
    def parent_scope(self) -> Optional[str]:
        """Scope directly enclosing `scope`."""
        scope = self.scope
        if scope == IT:
            return CONTEXT if self.current_context is not None else DESCRIBE
        if scope == CONTEXT:
            return DESCRIBE
        return None

    @property
    def is_idle(self) -> bool:
        return self.scope is None
