"""Rich terminal output for dispatcher messages."""
from __future__ import annotations

from rich.console import Console
from rich.markup import escape

console = Console(stderr=True)


def print_error(message: str) -> None:
    """Print a user-facing error to stderr."""
    console.print(f"[bold red]Error:[/bold red] {escape(message)}")
