"""
Per-run state: scope tracking, result recording and aggregates.
"""

import time
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from bdd_reporter.core.errors import ProtocolViolation
from bdd_reporter.core.logging import get_logger
from bdd_reporter.core.scope import ScopeStateMachine
from bdd_reporter.reporting.models import ResultKind, TestOutcome

STRICT_FAILURE_MESSAGE = (
    "The test failed because the test was executed in Strict mode "
    "and the result '{0}' was translated to Failed."
)


def _as_list(value: Union[None, str, Iterable[str]]) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value else []
    return [str(v) for v in value]


class RunState:
    """
    Everything one test run knows about itself.

    Create one at run start and drop it at run end. The runner drives the
    scope transitions and calls add_result once per finished test; the
    renderer only reads from it.
    """

    def __init__(
        self,
        paths: Union[str, Sequence[str]] = ".",
        name_filter: Union[None, str, Iterable[str]] = None,
        tag_filter: Union[None, str, Iterable[str]] = None,
        strict: bool = False,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.paths = _as_list(paths)
        self.name_filter = _as_list(name_filter)
        self.tag_filter = _as_list(tag_filter)
        self.strict = strict
        self.scopes = ScopeStateMachine()
        # description per Describe/Context block, keyed by block number
        self.descriptions: Dict[int, str] = {}
        self._blocks = 0
        self._describe_block: Optional[int] = None
        self._context_block: Optional[int] = None
        self._finished_at: Optional[float] = None
        self._clock = clock
        self._start = clock()
        self._last_sampled = 0.0
        self._outcomes: List[TestOutcome] = []
        self.logger = get_logger(__name__)

    # Scope transitions

    def enter_describe(self, name: str, description: Optional[str] = None) -> None:
        self.scopes.enter_describe(name)
        self._describe_block = self._new_block(description)

    def leave_describe(self) -> None:
        self.scopes.leave_describe()
        self._describe_block = None

    def enter_context(self, name: str, description: Optional[str] = None) -> None:
        self.scopes.enter_context(name)
        self._context_block = self._new_block(description)

    def leave_context(self) -> None:
        self.scopes.leave_context()
        self._context_block = None

    def enter_test(self, name: str) -> None:
        self.scopes.enter_test(name)

    def leave_test(self) -> None:
        self.scopes.leave_test()

    def _new_block(self, description: Optional[str]) -> int:
        self._blocks += 1
        if description:
            self.descriptions[self._blocks] = description
        return self._blocks

    def finish(self) -> None:
        """Mark the end of the run; every scope must be closed by now."""
        if not self.scopes.is_idle:
            raise ProtocolViolation(
                f"Run finished while {self.scopes.scope} is still open"
            )
        self._finished_at = self.elapsed()

    # Recording

    @property
    def finished(self) -> bool:
        return self._finished_at is not None

    def elapsed(self) -> float:
        """Seconds since the run started, frozen once the run is finished."""
        if self._finished_at is not None:
            return self._finished_at
        return self._clock() - self._start

    def mark_sampled(self) -> None:
        """Move the last-sampled mark to now.

        Call this after moving the clock forward by an explicit duration so
        the next derived duration does not count that time again.
        """
        self._last_sampled = self.elapsed()

    def add_result(
        self,
        name: str,
        result: Union[ResultKind, str],
        duration: Optional[float] = None,
        failure_message: Optional[str] = None,
        stack_trace: Optional[str] = None,
        parameterized_suite_name: Optional[str] = None,
        parameters: Optional[Dict[str, Any]] = None,
    ) -> TestOutcome:
        """
        Record the outcome of one test.

        Args:
            name: Test name
            result: ResultKind or its name
            duration: Seconds; derived from the run clock when omitted
            failure_message: Message shown under a failed test
            stack_trace: Trace shown under the failure message
            parameterized_suite_name: Name of the test-case template, if any
            parameters: Parameter values of a parameterized test

        Returns:
            The stored TestOutcome

        Raises:
            UnknownResultKind: If result is not a recognized kind
        """
        kind = ResultKind.parse(result)
        if duration is not None and duration < 0:
            raise ValueError(f"duration must be non-negative, got {duration}")

        if duration is None:
            now = self.elapsed()
            duration = max(now - self._last_sampled, 0.0)
            self._last_sampled = now

        if self.strict:
            if kind in (ResultKind.SKIPPED, ResultKind.PENDING):
                self.logger.info("Strict mode: '%s' %s translated to Failed", name, kind.value)
                failure_message = STRICT_FAILURE_MESSAGE.format(kind.value)
                kind = ResultKind.FAILED
            passed = kind == ResultKind.PASSED
        else:
            passed = kind != ResultKind.FAILED

        outcome = TestOutcome(
            name=name,
            describe=self.scopes.current_describe,
            context=self.scopes.current_context,
            describe_block=self._describe_block,
            context_block=self._context_block,
            result=kind,
            passed=passed,
            duration=duration,
            failure_message=failure_message,
            stack_trace=stack_trace,
            parameterized_suite_name=parameterized_suite_name,
            parameters=dict(parameters) if parameters is not None else None,
        )
        self._outcomes.append(outcome)
        self.logger.debug("Recorded %s: %s (%.3fs)", name, kind.value, duration)
        return outcome

    # Aggregates

    @property
    def outcomes(self) -> Tuple[TestOutcome, ...]:
        return tuple(self._outcomes)

    @property
    def total_count(self) -> int:
        return len(self._outcomes)

    def count(self, kind: Union[ResultKind, str]) -> int:
        kind = ResultKind.parse(kind)
        return sum(1 for o in self._outcomes if o.result == kind)

    @property
    def passed_count(self) -> int:
        return self.count(ResultKind.PASSED)

    @property
    def failed_count(self) -> int:
        return self.count(ResultKind.FAILED)

    @property
    def skipped_count(self) -> int:
        return self.count(ResultKind.SKIPPED)

    @property
    def pending_count(self) -> int:
        return self.count(ResultKind.PENDING)

    @property
    def total_duration(self) -> float:
        return sum(o.duration for o in self._outcomes)

    def get_status_counts(self) -> Dict[str, int]:
        """Get count of tests by result kind."""
        return {kind.value: self.count(kind) for kind in ResultKind}

    def _context_results(self) -> Dict[Tuple[Optional[str], str], bool]:
        contexts: Dict[Tuple[Optional[str], str], bool] = {}
        for o in self._outcomes:
            if o.context is None:
                continue
            key = (o.describe, o.context)
            contexts[key] = contexts.get(key, True) and o.result != ResultKind.FAILED
        return contexts

    @property
    def passed_contexts(self) -> int:
        return sum(1 for ok in self._context_results().values() if ok)

    @property
    def failed_contexts(self) -> int:
        return sum(1 for ok in self._context_results().values() if not ok)

    @property
    def scope(self) -> Optional[str]:
        return self.scopes.scope

    @property
    def parent_scope(self) -> Optional[str]:
        return self.scopes.parent_scope
