"""Console output abstraction.

Services report progress through ConsoleProtocol rather than printing, so the
same pipeline can write styled output with Rich in the CLI and be captured by
MockConsole in tests.

The success lines emitted by the publisher and the packager (branch, tag and
image names) are read by scripts and tests, so RichConsole never wraps or
re-highlights them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "MockConsole",
    "OutputRecord",
]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    DIM = auto()  # command echo, request traces

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Interface for styled console output."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None: ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...


class RichConsole:
    """Production console backed by Rich.

    Args:
        verbose: When False, DIM lines (git commands, HTTP requests) are dropped.
    """

    def __init__(self, *, verbose: bool = True) -> None:
        # Import Rich lazily to avoid import-time dependency
        from rich.console import Console

        self._console = Console(highlight=False, soft_wrap=True)
        self._verbose = verbose
        self._style_map = {
            Style.DEFAULT: "",
            Style.SUCCESS: "green",
            Style.ERROR: "red bold",
            Style.WARNING: "yellow",
            Style.DIM: "dim",
        }

    def _emit(self, prefix: str, message: str) -> None:
        from rich.markup import escape

        self._console.print(f"{prefix}{escape(message)}")

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        if style == Style.DIM and not self._verbose:
            return
        rich_style = self._style_map.get(style, "")
        if rich_style:
            self._console.print(message, style=rich_style, markup=False)
        else:
            self._console.print(message, markup=False)

    def success(self, message: str) -> None:
        self._emit("[green]OK[/green] ", message)

    def error(self, message: str) -> None:
        self._emit("[red bold]error:[/red bold] ", message)

    def warning(self, message: str) -> None:
        self._emit("[yellow]warning:[/yellow] ", message)


@dataclass
class OutputRecord:
    """A single output record for MockConsole."""

    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Console that captures output for assertions in tests."""

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def success(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"OK {message}", Style.SUCCESS))

    def error(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"error: {message}", Style.ERROR))

    def warning(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"warning: {message}", Style.WARNING))

    # Test helpers

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        """All output as a single newline-separated string."""
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def has_warning(self) -> bool:
        return any(o.style == Style.WARNING for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        """Find all outputs containing a substring."""
        return [o for o in self.outputs if substring in o.message]
