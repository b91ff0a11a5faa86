"""BaseService — abstract foundation for all lazyfrag services.

Every service receives a :class:`RenderKit` at construction time. The kit
provides the message verifier, the entity codec and the renderer.
Services hold no per-call state, so one instance can serve concurrent
requests.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lazyfrag.infrastructure.kit import RenderKit


class BaseService:
    """Abstract base for all service-layer classes.

    Usage::

        class PlaceholderEmitter(BaseService):
            def emit(self, target, options) -> list[Node]:
                token = self._kit.verifier.sign_descriptor(...)
                ...
    """

    def __init__(self, kit: RenderKit) -> None:
        self._kit = kit

    @property
    def kit(self) -> RenderKit:
        return self._kit
