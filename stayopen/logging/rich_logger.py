"""Rich-based reporter implementation."""
from __future__ import annotations

import logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

# Prefix for lines passed through from the child's stdout
OUTPUT_MARKER = "->"


class RichReporter:
    """Reporter using Rich for terminal output.

    Child output and the final outcome go to stdout; everything else goes
    to stderr so it can be separated from the command output.
    """

    def __init__(
        self,
        verbose: bool = False,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
    ):
        """Initialize the reporter.

        Args:
            verbose: Enable verbose output.
            console: Console for command output (default: stdout).
            err_console: Console for diagnostics (default: stderr).
        """
        self._console = console or Console()
        self._err_console = err_console or Console(stderr=True)
        self._verbose = verbose

    # --- Command output ---

    def output(self, line: str) -> None:
        """Pass a line of child output through unchanged."""
        self._console.print(Text(f"{OUTPUT_MARKER}{line}"), highlight=False, soft_wrap=True)

    def success(self, message: str) -> None:
        self._console.print(f"[green]✓[/green] {escape(message)}")

    def failure(self, message: str) -> None:
        self._console.print(f"[red]✗[/red] {escape(message)}")

    # --- Logging Methods ---

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self._err_console.print(f"[yellow]⚠[/yellow] {escape(message)}")

    def error(self, message: str) -> None:
        """Log an error message."""
        self._err_console.print(f"[red]✗[/red] {escape(message)}", style="red")

    def debug(self, message: str) -> None:
        """Log a debug message (only in verbose mode)."""
        if self._verbose:
            self._err_console.print(f"[dim]  {escape(message)}[/dim]")

    # --- Specialized Output ---

    def print_header(self, title: str) -> None:
        """Print a styled header."""
        text = Text(title, style="bold cyan")
        self._err_console.print(Panel(text, border_style="cyan"))

    def print_config(self, config_items: dict) -> None:
        """Print configuration as a table."""
        table = Table(title="Configuration", show_header=True, header_style="bold")
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="white")

        for key, value in config_items.items():
            table.add_row(key, str(value))

        self._err_console.print(table)

    def __enter__(self) -> "RichReporter":
        return self

    def __exit__(self, *args) -> None:
        pass


class QuietReporter:
    """Minimal reporter: command output, the outcome, warnings and errors."""

    def output(self, line: str) -> None:
        print(f"{OUTPUT_MARKER}{line}", flush=True)

    def success(self, message: str) -> None:
        print(message, flush=True)

    def failure(self, message: str) -> None:
        print(message, flush=True)

    def warning(self, message: str) -> None:
        print(f"WARNING: {message}", file=sys.stderr)

    def error(self, message: str) -> None:
        print(f"ERROR: {message}", file=sys.stderr)

    def debug(self, message: str) -> None:
        pass

    def print_header(self, title: str) -> None:
        pass

    def print_config(self, config_items: dict) -> None:
        pass

    def __enter__(self) -> "QuietReporter":
        return self

    def __exit__(self, *args) -> None:
        pass


def configure_logging(verbose: bool = False) -> None:
    """Route library logging through Rich on stderr."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=verbose,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
