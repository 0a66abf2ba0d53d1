"""
Output sinks that receive styled report lines.
"""

from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple

import typer


@dataclass(frozen=True)
class Segment:
    text: str
    color: Optional[str] = None


@dataclass(frozen=True)
class StyledLine:
    """One line of report output, made of colored segments."""
    segments: Tuple[Segment, ...] = ()

    @classmethod
    def of(cls, text: str = "", color: Optional[str] = None) -> "StyledLine":
        return cls((Segment(text, color),))

    @property
    def text(self) -> str:
        return "".join(s.text for s in self.segments)

    @property
    def color(self) -> Optional[str]:
        """Color of the first segment."""
        return self.segments[0].color if self.segments else None


class OutputSink(Protocol):
    def write(self, line: StyledLine) -> None:
        ...


class MemorySink:
    """Collects lines in memory."""

    def __init__(self):
        self.lines: List[StyledLine] = []

    def write(self, line: StyledLine) -> None:
        self.lines.append(line)

    @property
    def texts(self) -> List[str]:
        return [line.text for line in self.lines]


# Theme color names to terminal colors.
CONSOLE_COLORS = {
    "black": "black",
    "darkblue": "blue",
    "darkgreen": "green",
    "darkcyan": "cyan",
    "darkred": "red",
    "darkmagenta": "magenta",
    "darkyellow": "yellow",
    "gray": "white",
    "darkgray": "bright_black",
    "blue": "bright_blue",
    "green": "bright_green",
    "cyan": "bright_cyan",
    "red": "bright_red",
    "magenta": "bright_magenta",
    "yellow": "bright_yellow",
    "white": "bright_white",
}


_TERMINAL_COLORS = frozenset(CONSOLE_COLORS.values())


def console_color(color: Optional[str]) -> Optional[str]:
    """Translate a theme color name; unknown names render uncolored."""
    if not color:
        return None
    key = color.lower()
    if key in CONSOLE_COLORS:
        return CONSOLE_COLORS[key]
    return key if key in _TERMINAL_COLORS else None


class ConsoleSink:
    """Writes lines to the terminal with typer's styling."""

    def __init__(self, err: bool = False, color: Optional[bool] = None):
        self.err = err
        self.color = color

    def write(self, line: StyledLine) -> None:
        for segment in line.segments:
            typer.secho(
                segment.text,
                fg=console_color(segment.color),
                nl=False,
                err=self.err,
                color=self.color,
            )
        typer.echo(err=self.err)
