"""User-facing progress markers for the reload loop.

The developer watches the same terminal the supervised program writes
to, so markers are single short lines on stderr and never live displays.

Usage::

    from reloader.core.progress import status

    status(">>> build...")
    status(">>> command failed!", style="error")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

# Console for output
_console = Console(stderr=True)

# Style prefixes
_STYLES = {
    "success": "[green]✓[/green] ",
    "error": "[red]✗[/red] ",
    "warning": "[yellow]![/yellow] ",
    "info": "",
}


def _get_logger() -> BoundLogger:
    """Get logger lazily to respect runtime config."""
    from reloader.core.logging import get_logger

    return get_logger("progress")


def get_console() -> Console:
    """Get the shared Rich console instance."""
    return _console


def status(message: str, *, style: str = "info") -> None:
    """Print a styled status message to stderr."""
    prefix = _STYLES.get(style, "")
    text_style = "bold cyan" if style == "info" else None
    _console.print(f"{prefix}{escape(message)}", highlight=False, style=text_style)

    # Log at DEBUG for observability (lazy to respect runtime config)
    _get_logger().debug("status", message=message, style=style)


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """Return "1 file" or "3 files"."""
    word = singular if count == 1 else (plural or f"{singular}s")
    return f"{count} {word}"
