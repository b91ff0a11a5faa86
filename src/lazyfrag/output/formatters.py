"""Rich/JSON output helpers.

The CLI renders a ServiceResult either for humans (Rich text) or for
machines (``--json``).
"""

from __future__ import annotations

import json as _json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from rich.text import Text

from lazyfrag.output.console import create_console, get_output, style_for_key

if TYPE_CHECKING:
    from rich.console import Console

    from lazyfrag.services.result import ServiceResult


@dataclass(frozen=True)
class OutputSettings:
    json_output: bool = False
    verbose: bool = False


def _field(console: Console, key: str, value: Any, *, indent: int = 2) -> None:
    """Print a single indented key-value field."""
    if isinstance(value, (dict, list)):
        value = _json.dumps(value, separators=(",", ":"))
    k = Text(f"{' ' * indent}{key}: ", style="lf.key")
    console.print(Text.assemble(k, Text(str(value), style=style_for_key(key))))


def _render_ok(result: ServiceResult, console: Console, *, verbose: bool) -> None:
    console.print(Text("OK", style="lf.ok"), Text(f"  {result.op}", style="lf.op"))
    for key, value in result.data.items():
        if key == "payload" and not verbose:
            continue
        _field(console, key, value)
    if verbose and result.meta:
        console.print(Text("  meta:", style="dim"))
        for key, value in result.meta.items():
            _field(console, key, value, indent=4)


def _render_error(result: ServiceResult, console: Console, *, verbose: bool) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    code = f" [{err.code}]" if err else ""
    console.print(
        Text("ERROR", style="lf.error"),
        Text(f"  {result.op}{code}", style="lf.op"),
        Text(f" - {msg}"),
    )
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for key, value in err.detail.items():
            _field(console, key, value, indent=4)


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format a ServiceResult for display."""
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)
    console = create_console()
    if result.ok:
        _render_ok(result, console, verbose=settings.verbose)
    else:
        _render_error(result, console, verbose=settings.verbose)
    return get_output(console).rstrip("\n")
