"""Rich Console factory and theme for contentctl output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract. In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

CONTENT_THEME = Theme(
    {
        "content.ok": "bold green",
        "content.error": "bold red",
        "content.warning": "bold yellow",
        "content.op": "bold cyan",
        "content.key": "dim",
        "content.slug": "bold blue",
        "content.path": "dim",
        "content.title": "bold",
        "content.score": "magenta",
        "content.status.draft": "yellow",
        "content.status.published": "green",
        "content.status.scheduled": "cyan",
        "content.status.archived": "dim",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=CONTENT_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_status(status: str) -> str:
    """Return the Rich style name for a publication status."""
    style = f"content.status.{status}"
    return style if style in CONTENT_THEME.styles else ""
