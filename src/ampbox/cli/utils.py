"""CLI utilities for ampbox.

Shared console and error reporting.
"""

from __future__ import annotations

from datetime import datetime

from rich.console import Console
from rich.markup import escape

from ..errors import AmpboxError

console = Console(force_terminal=True, legacy_windows=False)


def timestamp() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def print_error(error: AmpboxError) -> None:
    """Print a timestamped error and its remediation hint (no traceback)."""
    message = escape(str(error))
    console.print(f"[dim]{timestamp()}[/dim] [red]Error: {message}[/red]", highlight=False)
    if error.hint:
        console.print(f"[dim]Hint: {escape(error.hint)}[/dim]", highlight=False)


def print_warning(message: str) -> None:
    console.print(
        f"[dim]{timestamp()}[/dim] [yellow]Warning: {escape(message)}[/yellow]", highlight=False
    )
