"""Rich consoles shared by the dicomira command line."""

from __future__ import annotations

import sys

from rich.console import Console

# Rich spinners print Unicode; Windows consoles default to a charmap codec.
for _stream in (sys.stdout, sys.stderr):
    try:
        _stream.reconfigure(encoding="utf-8", errors="replace")
    except (AttributeError, OSError):
        pass

console = Console()
err_console = Console(stderr=True)


def print_error(message: str) -> None:
    err_console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    err_console.print(f"[yellow]Warning: {message}[/yellow]")
