"""
Replay of recorded runner events.

A transcript is a YAML document listing the scope transitions and results
a runner produced, in order. Replaying it drives a fresh RunState exactly
as the live runner would have.

    path: tests/Calculator.Tests.ps1
    strict: false
    events:
      - enter_describe: {name: Calculator, description: "Adds numbers"}
      - enter_context: {name: add}
      - enter_test: {name: adds two numbers}
      - result: {name: adds two numbers, result: Passed, duration: 0.012}
      - leave_test: {}
      - leave_context: {}
      - leave_describe: {}
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from bdd_reporter.core.errors import TranscriptError
from bdd_reporter.core.logging import get_logger
from bdd_reporter.core.run_state import RunState

logger = get_logger(__name__)

ENTER_EVENTS = frozenset({"enter_describe", "enter_context", "enter_test"})
LEAVE_EVENTS = frozenset({"leave_describe", "leave_context", "leave_test"})
RESULT_EVENT = "result"
RESULT_KEYS = frozenset({
    "name", "result", "duration", "failure_message", "stack_trace",
    "parameterized_suite_name", "parameters",
})


@dataclass
class Transcript:
    """Parsed transcript."""
    paths: List[str] = field(default_factory=lambda: ["."])
    strict: bool = False
    name_filter: List[str] = field(default_factory=list)
    tag_filter: List[str] = field(default_factory=list)
    events: List[Tuple[str, Dict[str, Any]]] = field(default_factory=list)


def _str_list(value: Any, key: str) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(v) for v in value]
    raise TranscriptError(f"'{key}' must be a string or a list of strings")


def _parse_event(index: int, raw: Any) -> Tuple[str, Dict[str, Any]]:
    if not isinstance(raw, dict) or len(raw) != 1:
        raise TranscriptError(f"Event #{index} must be a mapping with exactly one key")
    (kind, args), = raw.items()
    args = args or {}
    if not isinstance(args, dict):
        raise TranscriptError(f"Event #{index} ({kind}) arguments must be a mapping")

    if kind in ENTER_EVENTS:
        if "name" not in args:
            raise TranscriptError(f"Event #{index} ({kind}) needs a name")
        allowed = {"name"} if kind == "enter_test" else {"name", "description"}
    elif kind in LEAVE_EVENTS:
        allowed = set()
    elif kind == RESULT_EVENT:
        if "name" not in args or "result" not in args:
            raise TranscriptError(f"Event #{index} (result) needs name and result")
        allowed = RESULT_KEYS
        duration = args.get("duration")
        if duration is not None and (
            isinstance(duration, bool) or not isinstance(duration, (int, float))
        ):
            raise TranscriptError(
                f"Event #{index} (result) duration must be a number, got {duration!r}"
            )
        if args.get("parameters") is not None and not isinstance(args["parameters"], dict):
            raise TranscriptError(f"Event #{index} (result) parameters must be a mapping")
    else:
        raise TranscriptError(f"Event #{index}: unknown event '{kind}'")

    extra = set(args) - allowed
    if extra:
        raise TranscriptError(
            f"Event #{index} ({kind}) has unexpected keys: {', '.join(sorted(extra))}"
        )
    return kind, args


def parse_transcript(data: Any) -> Transcript:
    """Validate a transcript mapping."""
    if not isinstance(data, dict):
        raise TranscriptError("Transcript must be a mapping")
    events = data.get("events") or []
    if not isinstance(events, list):
        raise TranscriptError("'events' must be a list")
    return Transcript(
        paths=_str_list(data.get("path", "."), "path") or ["."],
        strict=bool(data.get("strict", False)),
        name_filter=_str_list(data.get("name_filter"), "name_filter"),
        tag_filter=_str_list(data.get("tag_filter"), "tag_filter"),
        events=[_parse_event(i, raw) for i, raw in enumerate(events, start=1)],
    )


def load_transcript(path: Path) -> Transcript:
    """Load and validate a transcript file."""
    path = Path(path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise TranscriptError(f"Failed to read transcript: {path}: {e}") from e
    return parse_transcript(data)


class ReplayClock:
    """Clock that only moves when told to, so replayed timings are exact."""

    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def replay(
    transcript: Transcript,
    strict: Optional[bool] = None,
    name_filter: Optional[List[str]] = None,
    tag_filter: Optional[List[str]] = None,
) -> RunState:
    """
    Create a RunState and drive it through every event of the transcript.

    The run clock advances by each explicit result duration, so the
    summary timing equals the recorded test time. A result without a
    duration is charged the time since the last sample, which is zero
    right after an explicit one.

    Args:
        transcript: Parsed transcript
        strict: Overrides the transcript's strict flag when not None
        name_filter: Overrides the transcript's name filter when not empty
        tag_filter: Overrides the transcript's tag filter when not empty

    Returns:
        The finished RunState

    Raises:
        ProtocolViolation: If the events are out of order
        UnknownResultKind: If a result event names an unknown kind
    """
    clock = ReplayClock()
    state = RunState(
        paths=transcript.paths,
        name_filter=name_filter or transcript.name_filter,
        tag_filter=tag_filter or transcript.tag_filter,
        strict=transcript.strict if strict is None else strict,
        clock=clock,
    )
    for kind, args in transcript.events:
        logger.debug("Replaying %s %s", kind, args)
        if kind == RESULT_EVENT:
            outcome = state.add_result(**args)
            if args.get("duration") is not None:
                clock.advance(outcome.duration)
                state.mark_sampled()
        else:
            getattr(state, kind)(**args)
    state.finish()
    logger.info("Replayed %d events, %d results", len(transcript.events), state.total_count)
    return state
