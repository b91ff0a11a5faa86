"""Rich Console factory and theme for lazyfrag output.

Consoles render to a StringIO buffer so formatters can return plain
strings. In non-TTY environments (tests, pipes) Rich disables colors.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

LAZYFRAG_THEME = Theme(
    {
        "lf.ok": "bold green",
        "lf.error": "bold red",
        "lf.warning": "bold yellow",
        "lf.op": "bold cyan",
        "lf.key": "dim",
        "lf.token": "magenta",
        "lf.ref": "bold blue",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width.
    """
    return Console(
        file=StringIO(),
        theme=LAZYFRAG_THEME,
        no_color=no_color,
        highlight=False,
        soft_wrap=True,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_key(key: str) -> str:
    """Return the Rich style for a result field."""
    if key in {"signed_params", "sgid", "signed_controller", "secret_key"}:
        return "lf.token"
    if key in {"entity", "reference"}:
        return "lf.ref"
    return ""
