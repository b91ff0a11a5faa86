"""Token commands: inspect, sign (partial, entity, controller) and secret."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from lazyfrag.commands._base import KEY_VALUE, SIGNED_TOKEN, LazyfragCommand, LazyfragGroup
from lazyfrag.infrastructure.signing import PURPOSES

if TYPE_CHECKING:
    from lazyfrag.commands._context import AppContext


@click.command(
    cls=LazyfragCommand,
    examples="""\
  lazyfrag inspect 'eyJtZXNzYWdlIjoi...--3f9a...'
  lazyfrag inspect --purpose sgid 'eyJtZXNzYWdlIjoi...--3f9a...'
  lazyfrag --json inspect 'eyJtZXNzYWdlIjoi...--3f9a...'""",
)
@click.argument("token", type=SIGNED_TOKEN)
@click.option(
    "--purpose",
    type=click.Choice(PURPOSES),
    default=None,
    help="Expected token purpose (default: any).",
)
@click.pass_obj
def inspect(app: AppContext, token: str, purpose: str | None) -> None:
    """Verify a token and show what it carries."""
    from lazyfrag.services.tokens import TokenService

    app.emit(TokenService(app.kit).inspect(token, purpose=purpose))


@click.group(cls=LazyfragGroup)
def sign() -> None:
    """Sign descriptors, entity references and controllers."""


@sign.command(
    examples="""\
  lazyfrag sign partial posts/card -l post=gid://blog/Post/1 -l title=Hello""",
)
@click.argument("partial")
@click.option(
    "-l",
    "--local",
    "locals_",
    multiple=True,
    type=KEY_VALUE,
    help="Partial local as key=value (repeatable).",
)
@click.pass_obj
def partial(app: AppContext, partial: str, locals_: tuple[tuple[str, str], ...]) -> None:
    """Sign a partial descriptor as signed_params."""
    from lazyfrag.services.tokens import TokenService

    app.emit(TokenService(app.kit).sign_partial(partial, dict(locals_)))


@sign.command(examples="  lazyfrag sign entity gid://blog/Post/1")
@click.argument("uri")
@click.pass_obj
def entity(app: AppContext, uri: str) -> None:
    """Sign an entity reference as sgid and signed_params."""
    from lazyfrag.services.tokens import TokenService

    app.emit(TokenService(app.kit).sign_entity(uri))


@sign.command(examples="  lazyfrag sign controller posts")
@click.argument("name")
@click.pass_obj
def controller(app: AppContext, name: str) -> None:
    """Sign a controller name as signed_controller."""
    from lazyfrag.services.tokens import TokenService

    app.emit(TokenService(app.kit).sign_controller(name))


@click.command(cls=LazyfragCommand, examples="  lazyfrag secret --bytes 32")
@click.option("--bytes", "nbytes", type=int, default=64, show_default=True, help="Random bytes.")
@click.pass_obj
def secret(app: AppContext, nbytes: int) -> None:
    """Generate a signing secret for [signing] secret_key."""
    from lazyfrag.services.tokens import TokenService

    app.emit(TokenService.generate_secret(nbytes))
