"""User-facing status lines for the CLI.

Runner output goes through structlog; these are the few lines a person
reads at the end of a run. Rich drops the colors when stderr is not a TTY.

Usage::

    from overalls.core.progress import pluralize, status

    status(f"Wrote overalls.coverprofile from {pluralize(3, 'package')}", style="success")
    # ✓ Wrote overalls.coverprofile from 3 packages
"""

from __future__ import annotations

from rich.console import Console

from overalls.core.logging import get_logger

_console = Console(stderr=True)

_STYLES = {
    "success": "[green]✓[/green] ",
    "error": "[red]✗[/red] ",
    "warning": "[yellow]![/yellow] ",
    "info": "  ",
    "none": "",
}


def status(message: str, *, style: str = "info", indent: int = 0) -> None:
    """Print a styled status line to stderr and mirror it to the log."""
    prefix = _STYLES.get(style, "")
    padding = " " * indent
    _console.print(f"{padding}{prefix}{message}", highlight=False)

    get_logger("progress").debug("status", message=message, style=style)


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """Return "1 package" or "3 packages"."""
    if plural is None:
        plural = singular + "s"
    word = singular if count == 1 else plural
    return f"{count} {word}"
