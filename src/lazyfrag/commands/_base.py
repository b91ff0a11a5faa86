"""Click building blocks shared by the token commands.

- :class:`LazyfragCommand` / :class:`LazyfragGroup` take an ``examples``
  string shown by ``--examples``, keeping ``--help`` concise. A group's
  ``--examples`` also lists the examples of each of its subcommands, so
  ``lazyfrag sign --examples`` covers every token kind.
- :data:`SIGNED_TOKEN` accepts a token pasted straight from page markup
  (``data-sgid="..."``, quoted, or bare).
- :data:`KEY_VALUE` parses ``key=value`` pairs for repeated options.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any

import click

from lazyfrag.infrastructure.signing import SEPARATOR

_ATTRIBUTE = re.compile(r"""^(?:data-[\w-]+\s*=\s*)?(["']?)(?P<value>.*)\1$""", re.DOTALL)


def _add_examples_option(cmd: click.Command, text: Callable[[click.Context], str]) -> None:
    """Attach an eager ``--examples`` flag; *text* is called with the context."""

    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(text(ctx))
        ctx.exit(0)

    cmd.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=show_examples,
            help="Show usage examples.",
        )
    )


class LazyfragCommand(click.Command):
    """Click Command with an ``--examples`` flag."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, lambda _ctx: examples)


class LazyfragGroup(click.Group):
    """Click Group whose ``--examples`` gathers its subcommands' examples too.

    Subcommands default to :class:`LazyfragCommand`, so they accept
    ``examples=`` without an explicit ``cls=``.
    """

    command_class = LazyfragCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        _add_examples_option(self, self.collect_examples)

    def collect_examples(self, ctx: click.Context) -> str:
        """Own examples followed by every subcommand's, in listing order."""
        blocks = [self.examples] if self.examples else []
        for name in self.list_commands(ctx):
            command = self.get_command(ctx, name)
            examples = getattr(command, "examples", None)
            if examples and examples not in blocks:
                blocks.append(examples)
        return "\n".join(blocks) if blocks else "  (no examples)"


class SignedTokenType(click.ParamType):
    """A signed token, unwrapped from attribute markup and quotes."""

    name = "token"

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None) -> str:
        text = str(value).strip()
        match = _ATTRIBUTE.match(text)
        token = match["value"].strip() if match else text
        data, sep, digest = token.rpartition(SEPARATOR)
        if not sep or not data or not digest:
            self.fail(f"expected a token shaped like <base64>{SEPARATOR}<digest>", param, ctx)
        return token


class KeyValueType(click.ParamType):
    """``key=value`` pair; the value may be empty, the key may not."""

    name = "key=value"

    def convert(
        self, value: Any, param: click.Parameter | None, ctx: click.Context | None
    ) -> tuple[str, str]:
        if isinstance(value, tuple):
            return value
        key, sep, rest = str(value).partition("=")
        if not sep or not key:
            self.fail(f"expected key=value, got {value!r}", param, ctx)
        return key, rest


SIGNED_TOKEN = SignedTokenType()
KEY_VALUE = KeyValueType()
