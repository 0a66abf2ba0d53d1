from pathlib import Path

import pytest
from typer.testing import CliRunner

from bdd_reporter.cli import app, exit_code_for
from bdd_reporter.core.config import CONFIG_ENV_VAR

runner = CliRunner()

TRANSCRIPT = """\
path: tests
events:
  - enter_describe: {name: Calculator}
  - enter_test: {name: adds}
  - result: {name: adds, result: Passed, duration: 0.25}
  - leave_test: {}
  - enter_test: {name: divides}
  - result: {name: divides, result: Failed, duration: 1.5, failure_message: division by zero}
  - leave_test: {}
  - enter_test: {name: rounds}
  - result: {name: rounds, result: Skipped, duration: 0}
  - leave_test: {}
  - leave_describe: {}
"""

COVERAGE = """\
analyzed_files: [/repo/src/a/Calc.ps1, /repo/src/b/Round.ps1]
commands_analyzed: 10
commands_executed: 7
missed_commands:
  - {file: /repo/src/a/Calc.ps1, function: Divide, line: 4, command: '$a / $b'}
  - {file: /repo/src/a/Calc.ps1, function: Divide, line: 5, command: 'throw'}
  - {file: /repo/src/b/Round.ps1, function: Round, line: 2, command: '[math]::Round($x)'}
"""


@pytest.fixture(autouse=True)
def _isolated(tmp_path: Path, monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.chdir(tmp_path)


def _write(tmp_path: Path, name: str, text: str) -> Path:
    path = tmp_path / name
    path.write_text(text)
    return path


def test_replay_prints_report(tmp_path: Path) -> None:
    transcript = _write(tmp_path, "run.yaml", TRANSCRIPT)
    result = runner.invoke(app, ["replay", str(transcript)])
    assert result.exit_code == 0, result.output
    assert "Executing all tests in 'tests'" in result.output
    assert "Describing Calculator" in result.output
    assert " [+] adds 250ms" in result.output
    assert " [-] divides 1.5s" in result.output
    assert "   division by zero" in result.output
    assert "Tests completed in 1.75s" in result.output
    assert "Tests Passed: 1, Failed: 1, Skipped: 1, Pending: 0" in result.output


def test_replay_with_coverage(tmp_path: Path) -> None:
    transcript = _write(tmp_path, "run.yaml", TRANSCRIPT)
    coverage = _write(tmp_path, "coverage.yaml", COVERAGE)
    result = runner.invoke(app, ["replay", str(transcript), "--coverage", str(coverage)])
    assert result.exit_code == 0, result.output
    assert "Covered 70.00% of 10 analyzed Commands in 2 Files." in result.output
    assert "Missed commands:" in result.output
    assert "a/Calc.ps1" in result.output
    assert "/repo/src" not in result.output


def test_enable_exit_returns_failed_count(tmp_path: Path) -> None:
    transcript = _write(tmp_path, "run.yaml", TRANSCRIPT)
    result = runner.invoke(app, ["replay", str(transcript), "--enable-exit"])
    assert result.exit_code == 1

    result = runner.invoke(app, ["replay", str(transcript), "--enable-exit", "--strict"])
    assert result.exit_code == 2
    assert "Strict mode" in result.output


def test_filters_and_quiet(tmp_path: Path) -> None:
    transcript = _write(tmp_path, "run.yaml", TRANSCRIPT)
    result = runner.invoke(app, ["replay", str(transcript), "--name", "adds", "--tag", "fast"])
    assert "matching test name 'adds' with tags 'fast'" in result.output

    result = runner.invoke(app, ["replay", str(transcript), "--quiet"])
    assert result.exit_code == 0
    assert "Describing" not in result.output


def test_custom_strings(tmp_path: Path) -> None:
    transcript = _write(tmp_path, "run.yaml", TRANSCRIPT)
    strings = _write(tmp_path, "strings.yaml", "Describe: 'Feature: {0}'\n")
    result = runner.invoke(app, ["replay", str(transcript), "--strings", str(strings)])
    assert "Feature: Calculator" in result.output


def test_protocol_violation_exits_with_error(tmp_path: Path) -> None:
    transcript = _write(tmp_path, "run.yaml", "events:\n  - enter_context: {name: orphan}\n")
    result = runner.invoke(app, ["replay", str(transcript)])
    assert result.exit_code == 2


def test_config_file_is_applied(tmp_path: Path) -> None:
    transcript = _write(tmp_path, "run.yaml", TRANSCRIPT)
    _write(tmp_path, "bdd_reporter.toml", "[bdd_reporter]\nenable_exit = true\n")
    result = runner.invoke(app, ["replay", str(transcript)])
    assert result.exit_code == 1


def test_theme_command_lists_labels() -> None:
    result = runner.invoke(app, ["theme"])
    assert result.exit_code == 0
    assert "CoverageWarn" in result.output
    assert "DarkRed" in result.output


def test_exit_code_is_capped():
    assert exit_code_for(3, enable_exit=False) == 0
    assert exit_code_for(3, enable_exit=True) == 3
    assert exit_code_for(1000, enable_exit=True) == 255


def test_non_numeric_duration_exits_with_error(tmp_path: Path) -> None:
    transcript = _write(
        tmp_path, "run.yaml",
        "events:\n  - result: {name: t, result: Passed, duration: fast}\n",
    )
    result = runner.invoke(app, ["replay", str(transcript)])
    assert result.exit_code == 2
    assert "duration must be a number" in result.output


def test_log_file_receives_records(tmp_path: Path) -> None:
    transcript = _write(tmp_path, "run.yaml", TRANSCRIPT)
    log_file = tmp_path / "replay.log"
    result = runner.invoke(app, ["replay", str(transcript), "-v", "1", "--log-file", str(log_file)])
    assert result.exit_code == 0, result.output
    assert "Replayed 11 events, 3 results" in log_file.read_text()


def test_log_file_records_errors(tmp_path: Path) -> None:
    transcript = _write(tmp_path, "run.yaml", "events:\n  - enter_context: {name: orphan}\n")
    log_file = tmp_path / "replay.log"
    result = runner.invoke(app, ["replay", str(transcript), "--log-file", str(log_file)])
    assert result.exit_code == 2
    assert "Runner protocol violation" in log_file.read_text()
