import pytest

from bdd_reporter.core.run_state import RunState
from bdd_reporter.reporting.models import CoverageReport, ResultKind, TestOutcome
from bdd_reporter.reporting.renderer import ReportRenderer, humanize_duration
from bdd_reporter.reporting.sink import MemorySink
from bdd_reporter.reporting.theme import Strings, Theme


def _outcome(result: ResultKind = ResultKind.PASSED, context="ctx", describe="desc", **kwargs) -> TestOutcome:
    values = dict(
        name="does a thing", describe=describe, context=context, result=result,
        passed=result != ResultKind.FAILED, duration=0.05,
    )
    values.update(kwargs)
    return TestOutcome(**values)


def _renderer(**kwargs):
    sink = MemorySink()
    return sink, ReportRenderer(sink, **kwargs)


@pytest.mark.parametrize("seconds, expected", [
    (0, "0ms"),
    (0.5, "500ms"),
    (0.29, "290ms"),
    (0.999, "999ms"),
    (1, "1s"),
    (1.2, "1.2s"),
    (12.346, "12.35s"),
    (59.99, "59.99s"),
    (59.999, "1m"),
    (60, "1m"),
    (90, "1.5m"),
    (3599, "59.98m"),
    (3599.999, "1h"),
    (3600, "1h"),
    (5400, "1.5h"),
    (10 ** 9, "277777.78h"),
])
def test_humanize_duration_thresholds(seconds, expected):
    assert humanize_duration(seconds) == expected


def test_humanize_duration_never_uses_scientific_notation():
    assert "e" not in humanize_duration(1e-7)
    assert "e" not in humanize_duration(1e12)


def test_humanize_duration_rejects_negative():
    with pytest.raises(ValueError):
        humanize_duration(-0.1)


def test_start_banner_without_filters():
    sink, renderer = _renderer()
    renderer.write_start(["tests"])
    assert sink.texts == ["Executing all tests in 'tests'"]
    assert sink.lines[0].color == "White"


def test_start_banner_joins_filters():
    sink, renderer = _renderer()
    renderer.write_start(["a", "b"], name_filter=["x", "y"], tag_filter=["fast"])
    assert sink.texts == [
        "Executing all tests in 'a', 'b' matching test name 'x', 'y' with tags 'fast'"
    ]


def test_describe_header_with_description():
    sink, renderer = _renderer()
    renderer.write_describe("Calculator", "line one\nline two")
    assert sink.texts == ["", "Describing Calculator", "    line one", "    line two"]
    assert [line.color for line in sink.lines[1:]] == ["Green", "DarkYellow", "DarkYellow"]


def test_context_description_aligns_with_header():
    sink, renderer = _renderer()
    renderer.write_context("add", "first\nsecond")
    header = "  Context add"
    assert sink.texts[1] == header
    assert sink.texts[2] == " " * len(header) + "first"
    assert sink.lines[1].color == "Cyan"
    assert sink.lines[2].color == "DarkCyan"


@pytest.mark.parametrize("context, describe, margin", [
    ("ctx", "desc", "    "),
    (None, "desc", " "),
    (None, None, ""),
])
def test_result_margin_depends_on_scope(context, describe, margin):
    sink, renderer = _renderer()
    renderer.write_result(_outcome(context=context, describe=describe))
    assert sink.texts == [f"{margin}[+] does a thing 50ms"]


@pytest.mark.parametrize("kind, glyph, color", [
    (ResultKind.PASSED, "[+]", "DarkGreen"),
    (ResultKind.SKIPPED, "[!]", "Yellow"),
    (ResultKind.PENDING, "[?]", "Gray"),
])
def test_result_glyphs(kind, glyph, color):
    sink, renderer = _renderer()
    renderer.write_result(_outcome(kind))
    assert sink.texts[0].startswith(f"    {glyph} ")
    assert sink.lines[0].color == color
    assert sink.lines[0].segments[1].color == Theme()[
        "PassTime" if kind == ResultKind.PASSED else "IncompleteTime"
    ]


def test_failed_result_reproduces_message_and_trace():
    sink, renderer = _renderer()
    renderer.write_result(_outcome(
        ResultKind.FAILED, duration=1.2,
        failure_message="Expected 3\nbut got 4", stack_trace="at <ScriptBlock>, calc.ps1: line 7",
    ))
    assert sink.texts == [
        "    [-] does a thing 1.2s",
        "      Expected 3",
        "      but got 4",
        "      at <ScriptBlock>, calc.ps1: line 7",
    ]
    assert all(line.color == "Red" for line in sink.lines)


def _finished_state(*results: str) -> RunState:
    state = RunState(paths="tests", clock=lambda: 0.0)
    state.enter_describe("Calculator")
    state.enter_context("add")
    for i, result in enumerate(results):
        state.add_result(f"test {i}", result, duration=0.5)
    state.leave_context()
    state.leave_describe()
    state.finish()
    return state


def test_summary_without_failures_uses_pass_colors():
    sink, renderer = _renderer()
    renderer.write_summary(_finished_state("Passed", "Passed"))
    assert sink.texts == [
        "Tests completed in 0ms",
        "Tests Passed: 2, Failed: 0, Skipped: 0, Pending: 0",
    ]
    colors = [s.color for s in sink.lines[1].segments]
    assert colors == ["DarkGreen", "DarkGray", "DarkGray", "DarkGray"]


def test_summary_highlights_failures():
    sink, renderer = _renderer()
    renderer.write_summary(_finished_state("Passed", "Failed", "Skipped", "Pending"))
    colors = [s.color for s in sink.lines[-1].segments]
    assert colors == ["White", "Red", "Yellow", "Gray"]


def test_contexts_line_only_when_template_is_set():
    state = _finished_state("Passed")
    sink, renderer = _renderer()
    renderer.write_summary(state)
    assert len(sink.lines) == 2

    strings = Strings({"ContextsPassed": "Contexts Passed: {0}, ", "ContextsFailed": "Failed: {0}"})
    sink, renderer = _renderer(strings=strings)
    renderer.write_summary(state)
    assert sink.texts[1] == "Contexts Passed: 1, Failed: 0"


def test_render_full_report():
    state = RunState(paths="tests", clock=lambda: 0.0)
    state.enter_describe("Calculator", "Adds numbers")
    state.enter_test("top")
    state.add_result("top", "Passed", duration=0.01)
    state.leave_test()
    state.enter_context("add")
    state.add_result("adds", "Failed", duration=0.02, failure_message="nope")
    state.leave_context()
    state.leave_describe()
    state.enter_describe("Parser")
    state.add_result("parses", "Skipped", duration=0)
    state.leave_describe()
    state.finish()

    sink, renderer = _renderer()
    lines = renderer.render(state)

    assert [line.text for line in lines] == sink.texts
    assert sink.texts == [
        "Executing all tests in 'tests'",
        "",
        "Describing Calculator",
        "    Adds numbers",
        " [+] top 10ms",
        "",
        "  Context add",
        "    [-] adds 20ms",
        "      nope",
        "",
        "Describing Parser",
        " [!] parses 0ms",
        "Tests completed in 0ms",
        "Tests Passed: 1, Failed: 1, Skipped: 1, Pending: 0",
    ]


def test_render_appends_coverage():
    state = _finished_state("Passed")
    coverage = CoverageReport(analyzed_files=["/src/a.ps1"], commands_analyzed=4, commands_executed=4)
    sink, renderer = _renderer()
    renderer.render(state, coverage)
    assert sink.texts[-1] == "Covered 100.00% of 4 analyzed Commands in 1 File."


def test_quiet_renderer_writes_nothing():
    sink, renderer = _renderer(quiet=True)
    lines = renderer.render(_finished_state("Passed"))
    assert lines
    assert sink.lines == []


def test_repeated_describe_keeps_each_description():
    state = RunState(paths="tests", clock=lambda: 0.0)
    state.enter_describe("A", "first")
    state.add_result("one", "Passed", duration=0)
    state.leave_describe()
    state.enter_describe("A", "second")
    state.add_result("two", "Passed", duration=0)
    state.leave_describe()
    state.finish()

    sink, renderer = _renderer()
    renderer.write_outcomes(state, state.outcomes)
    assert sink.texts == [
        "",
        "Describing A",
        "    first",
        " [+] one 0ms",
        "",
        "Describing A",
        "    second",
        " [+] two 0ms",
    ]


def test_repeated_context_gets_a_new_header():
    state = RunState(paths="tests", clock=lambda: 0.0)
    state.enter_describe("A")
    state.enter_context("c", "first")
    state.add_result("one", "Passed", duration=0)
    state.leave_context()
    state.enter_context("c")
    state.add_result("two", "Passed", duration=0)
    state.leave_context()
    state.leave_describe()

    sink, renderer = _renderer()
    renderer.write_outcomes(state, state.outcomes)
    assert sink.texts == [
        "",
        "Describing A",
        "",
        "  Context c",
        " " * len("  Context c") + "first",
        "    [+] one 0ms",
        "",
        "  Context c",
        "    [+] two 0ms",
    ]
