"""Subcommand modules for lazyfrag.

Provides register_commands(), which imports command modules lazily so
``lazyfrag --help`` stays fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the ``sign`` group and the standalone commands on the root group."""
    from lazyfrag.commands.tokens import inspect, secret, sign

    cli.add_command(sign)
    cli.add_command(inspect)
    cli.add_command(secret)
