"""
Command-line interface for BDD Reporter.

This module provides a subcommand-based CLI using Typer.
"""

import sys
from pathlib import Path
from typing import List, Optional

import typer

from bdd_reporter.core.config import Config
from bdd_reporter.core.errors import ConfigurationError, ProtocolViolation, UnknownResultKind
from bdd_reporter.core.logging import setup_logger
from bdd_reporter.core.transcript import load_transcript, replay as replay_transcript
from bdd_reporter.reporting.models import load_coverage_report
from bdd_reporter.reporting.renderer import ReportRenderer
from bdd_reporter.reporting.sink import ConsoleSink, StyledLine
from bdd_reporter.reporting.theme import Strings, Theme

# Exit code used for driver bugs and bad input, distinct from test failures.
EXIT_ERROR = 2
MAX_EXIT_CODE = 255

app = typer.Typer(
    name="bdd_reporter",
    help="Scope tracking and console reporting for behavior-driven test runs",
    add_completion=False,
)


def get_config(
    verbosity: Optional[int] = None,
    config_file: Optional[Path] = None,
    **kwargs
) -> Config:
    """Create and configure Config object."""
    init_kwargs = {
        key: value for key, value in kwargs.items()
        if key in Config.__dataclass_fields__
    }
    config = Config.load(config_file=config_file, verbosity=verbosity, **init_kwargs)
    return config


def load_theme(config: Config) -> Theme:
    return Theme.from_yaml(config.theme_file) if config.theme_file else Theme()


def load_strings(config: Config) -> Strings:
    return Strings.from_yaml(config.strings_file) if config.strings_file else Strings()


def exit_code_for(failed_count: int, enable_exit: bool) -> int:
    """Process exit code: failed test count (capped) when enabled, else 0."""
    if not enable_exit:
        return 0
    return min(failed_count, MAX_EXIT_CODE)


@app.command()
def replay(
    transcript: Path = typer.Argument(..., help="YAML transcript of runner events"),
    coverage: Optional[Path] = typer.Option(None, "--coverage", help="Coverage report (YAML/JSON)"),
    strict: Optional[bool] = typer.Option(None, "--strict/--no-strict", help="Treat skipped and pending tests as failed"),
    name: List[str] = typer.Option([], "--name", help="Test name filter to show in the banner"),
    tag: List[str] = typer.Option([], "--tag", help="Tag filter to show in the banner"),
    theme: Optional[Path] = typer.Option(None, "--theme", help="YAML file overriding report colors"),
    strings: Optional[Path] = typer.Option(None, "--strings", help="YAML file overriding report messages"),
    quiet: Optional[bool] = typer.Option(None, "--quiet/--no-quiet", help="Suppress report output"),
    enable_exit: Optional[bool] = typer.Option(None, "--enable-exit/--no-enable-exit", help="Exit with the number of failed tests"),
    verbosity: Optional[int] = typer.Option(None, "--verbosity", "-v", help="Verbosity level (0-3)"),
    config_file: Optional[Path] = typer.Option(None, "--config", help="Config file (TOML)"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also write log records to this file"),
):
    """Replay a recorded run and print its report."""
    logger = setup_logger(log_file=log_file)
    try:
        config = get_config(
            verbosity=verbosity, config_file=config_file,
            strict=strict, name_filter=name, tag_filter=tag,
            theme_file=theme, strings_file=strings, coverage_file=coverage,
            quiet=quiet, enable_exit=enable_exit,
        )
        logger = setup_logger(verbosity=config.verbosity, log_file=log_file)
        renderer = ReportRenderer(
            ConsoleSink(), load_theme(config), load_strings(config), quiet=config.quiet,
        )
        coverage_report = load_coverage_report(config.coverage_file) if config.coverage_file else None

        state = replay_transcript(
            load_transcript(transcript),
            strict=strict if strict is not None else (config.strict or None),
            name_filter=config.name_filter,
            tag_filter=config.tag_filter,
        )
        renderer.render(state, coverage_report)
    except ProtocolViolation as e:
        logger.error(f"Runner protocol violation: {e}")
        typer.echo(f"✗ {e}", err=True)
        sys.exit(EXIT_ERROR)
    except (ConfigurationError, UnknownResultKind, ValueError) as e:
        logger.error(f"Invalid input: {e}")
        typer.echo(f"✗ {e}", err=True)
        sys.exit(EXIT_ERROR)

    logger.info(f"{state.total_count} tests, {state.failed_count} failed")
    sys.exit(exit_code_for(state.failed_count, config.enable_exit))


@app.command(name="theme")
def show_theme(
    theme: Optional[Path] = typer.Option(None, "--theme", help="YAML file overriding report colors"),
    config_file: Optional[Path] = typer.Option(None, "--config", help="Config file (TOML)"),
):
    """Print every theme label in its color."""
    try:
        config = get_config(config_file=config_file, theme_file=theme)
        effective = load_theme(config)
    except (ConfigurationError, ValueError) as e:
        typer.echo(f"✗ {e}", err=True)
        sys.exit(EXIT_ERROR)

    sink = ConsoleSink()
    width = max(len(label) for label in effective)
    for label, color in effective.items():
        sink.write(StyledLine.of(f"{label.ljust(width)}  {color}", color))


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
