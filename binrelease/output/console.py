"""Console output abstraction.

Release steps report progress through ConsoleProtocol so that services can
print styled text without depending on Rich, and tests can capture output
with MockConsole.

Inside GitHub Actions, RichConsole also emits workflow commands: errors and
warnings become annotations, and `group()` folds a step's log lines.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

from rich.markup import escape

__all__ = [
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "MockConsole",
]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()  # echoed commands
    BOLD = auto()
    HEADER = auto()

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Interface for release step output."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None: ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def header(self, message: str) -> None: ...

    def group(self, title: str) -> None:
        """Start a collapsible section (a header outside CI)."""
        ...

    def endgroup(self) -> None: ...

    def newline(self) -> None: ...


def _escape_workflow_data(message: str) -> str:
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class RichConsole:
    """Production console backed by Rich.

    Writes to stderr so that stdout stays free for machine-readable results
    (e.g. `binrelease version next` is captured by CI into a step output).
    """

    def __init__(self, *, github_actions: bool = False) -> None:
        from rich.console import Console

        self._console = Console(stderr=True, highlight=False)
        self._github_actions = github_actions
        self._style_map = {
            Style.DEFAULT: "",
            Style.SUCCESS: "green",
            Style.ERROR: "red bold",
            Style.WARNING: "yellow",
            Style.INFO: "cyan",
            Style.DIM: "dim",
            Style.BOLD: "bold",
            Style.HEADER: "blue bold",
        }

    def _workflow_command(self, command: str, message: str) -> None:
        # Bypass Rich markup/wrapping: the runner parses these lines verbatim.
        self._console.out(f"::{command}::{_escape_workflow_data(message)}", highlight=False)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        rich_style = self._style_map.get(style, "")
        if rich_style:
            self._console.print(message, style=rich_style, markup=False)
        else:
            self._console.print(message, markup=False)

    def success(self, message: str) -> None:
        self._console.print(f"[green]OK[/green] {escape(message)}")

    def error(self, message: str) -> None:
        if self._github_actions:
            self._workflow_command("error", message)
            return
        self._console.print(f"[red bold]error:[/red bold] {escape(message)}")

    def warning(self, message: str) -> None:
        if self._github_actions:
            self._workflow_command("warning", message)
            return
        self._console.print(f"[yellow]warning:[/yellow] {escape(message)}")

    def info(self, message: str) -> None:
        self._console.print(f"[cyan]info:[/cyan] {escape(message)}")

    def header(self, message: str) -> None:
        self._console.print(f"\n[blue bold]{escape(message)}[/blue bold]")

    def group(self, title: str) -> None:
        if self._github_actions:
            self._workflow_command("group", title)
            return
        self.header(title)

    def endgroup(self) -> None:
        if self._github_actions:
            self._console.out("::endgroup::", highlight=False)

    def newline(self) -> None:
        self._console.print()


@dataclass
class OutputRecord:
    """A single output record for MockConsole."""

    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Console implementation that captures output for testing."""

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def success(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"OK {message}", Style.SUCCESS))

    def error(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"error: {message}", Style.ERROR))

    def warning(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"warning: {message}", Style.WARNING))

    def info(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"info: {message}", Style.INFO))

    def header(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.HEADER))

    def group(self, title: str) -> None:
        self.outputs.append(OutputRecord(title, Style.HEADER))

    def endgroup(self) -> None:
        pass

    def newline(self) -> None:
        self.outputs.append(OutputRecord("", Style.DEFAULT))

    # Test helpers

    def clear(self) -> None:
        self.outputs.clear()

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def has_warning(self) -> bool:
        return any(o.style == Style.WARNING for o in self.outputs)

    def has_success(self) -> bool:
        return any(o.style == Style.SUCCESS for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        return [o for o in self.outputs if substring in o.message]

    def count(self, style: Style) -> int:
        return sum(1 for o in self.outputs if o.style == style)
