"""Jinja2 rendering collaborator for partials and entities.

Partial names follow the ``folder/name`` convention and map to
underscore-prefixed template files::

    "posts/card"  ->  posts/_card.html
    Post(id=1)    ->  posts/_post.html   (with ``post`` in the context)

The renderer is used for the eager (bypass) path and for rendering a
resolved placeholder; hosts may supply any :class:`FragmentRenderer`.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Protocol

from jinja2 import BaseLoader, ChoiceLoader, Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from lazyfrag.domain.identity import default_partial_for, item_name


class FragmentRenderer(Protocol):
    """Renders a partial or an entity to markup."""

    def render_partial(self, partial: str, locals: Mapping[str, Any]) -> str: ...

    def render_entity(self, entity: Any) -> str: ...


def build_template_environment(
    template_dirs: Sequence[Path | str] = (),
    *,
    loaders: Sequence[BaseLoader] = (),
) -> Environment:
    """Build a Jinja2 environment searching *loaders* first, then *template_dirs*.

    Autoescaping is on for ``.html`` and ``.j2`` templates.
    """
    chain: list[BaseLoader] = list(loaders)
    if template_dirs:
        chain.append(FileSystemLoader([str(path) for path in template_dirs]))
    return Environment(
        loader=ChoiceLoader(chain),
        autoescape=select_autoescape(["html", "htm", "xml", "j2"]),
        keep_trailing_newline=False,
    )


class JinjaRenderer:
    """:class:`FragmentRenderer` backed by a Jinja2 environment."""

    def __init__(
        self,
        env: Environment,
        *,
        partial_prefix: str = "_",
        template_suffix: str = ".html",
    ) -> None:
        self.env = env
        self._prefix = partial_prefix
        self._suffix = template_suffix

    def template_name(self, partial: str) -> str:
        """Template file for a partial name: ``posts/card`` -> ``posts/_card.html``."""
        folder, sep, name = partial.rpartition("/")
        return f"{folder}{sep}{self._prefix}{name}{self._suffix}"

    def render_partial(self, partial: str, locals: Mapping[str, Any]) -> Markup:
        template = self.env.get_template(self.template_name(partial))
        return Markup(template.render(**dict(locals)))

    def render_entity(self, entity: Any) -> Markup:
        return self.render_partial(default_partial_for(entity), {item_name(entity): entity})
