"""RenderKit — the single dependency injected into every service.

The kit is built once at startup from :class:`LazyfragSettings` and owns
the collaborators every service shares:

- **verifier**: :class:`MessageVerifier` keyed by the process secret.
- **locator** / **codec**: entity finders and the reference codec.
- **renderer**: the rendering collaborator (lazily built from
  ``[rendering] template_dirs`` when the host does not supply one).

INVARIANT: The secret is read exactly once, here. Nothing else looks it
up, and it never changes for the lifetime of the kit.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from lazyfrag.infrastructure.locator import EntityCodec, Locator
from lazyfrag.infrastructure.signing import MessageVerifier, generate_secret

if TYPE_CHECKING:
    from lazyfrag.config.settings import LazyfragSettings
    from lazyfrag.infrastructure.templates import FragmentRenderer

logger = logging.getLogger(__name__)


class RenderKit:
    """Shared signing, lookup and rendering collaborators."""

    def __init__(
        self,
        settings: LazyfragSettings | None = None,
        *,
        locator: Locator | None = None,
        renderer: FragmentRenderer | None = None,
    ) -> None:
        if settings is None:
            from lazyfrag.config.settings import LazyfragSettings

            settings = LazyfragSettings.load()
        self.settings = settings
        self.locator = locator or Locator()
        self._renderer = renderer

        secret = settings.signing.secret_key
        if secret is None or not secret.get_secret_value():
            logger.warning(
                "No signing secret configured; using an ephemeral one. "
                "Placeholders will not verify after a restart."
            )
            secret_value = generate_secret()
            self.ephemeral_secret = True
        else:
            secret_value = secret.get_secret_value()
            self.ephemeral_secret = False

        self.verifier = MessageVerifier(secret_value, digest=settings.signing.digest)
        self.codec = EntityCodec(
            app=settings.entities.app,
            locator=self.locator,
            verifier=self.verifier,
        )

    @property
    def renderer(self) -> FragmentRenderer:
        """The rendering collaborator (created lazily on first access)."""
        if self._renderer is None:
            from lazyfrag.infrastructure.templates import JinjaRenderer, build_template_environment

            rendering = self.settings.rendering
            env = build_template_environment(rendering.template_dirs)
            self._renderer = JinjaRenderer(
                env,
                partial_prefix=rendering.partial_prefix,
                template_suffix=rendering.template_suffix,
            )
        return self._renderer
