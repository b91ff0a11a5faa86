"""PlaceholderResolver — the receiving side of a deferred placeholder.

When the client reports a placeholder, it sends back the reserved
attributes verbatim. The resolver verifies them, locates every embedded
reference and hands the result to the renderer::

    resolution = resolver.resolve(signed_params=token)
    if not resolution:           # LookupNotFound: a record is gone
        ...
    html = resolver.render(resolution)

A tampered token raises :class:`InvalidSignatureError`. A record deleted
since the page was rendered returns :class:`LookupNotFound`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Literal

from markupsafe import Markup

from lazyfrag.domain.descriptors import EntityDescriptor
from lazyfrag.domain.errors import DescriptorBuildError
from lazyfrag.domain.references import LookupNotFound, is_reference_uri, is_unsaved_marker
from lazyfrag.infrastructure.signing import PURPOSE_CONTROLLER
from lazyfrag.services.base import BaseService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    """A verified placeholder with every reference located."""

    kind: Literal["entity", "partial"]
    entity: Any = None
    partial: str | None = None
    locals: dict[str, Any] = field(default_factory=dict)
    data: dict[str, Any] = field(default_factory=dict)
    controller: str | None = None


class _Missing(Exception):
    def __init__(self, not_found: LookupNotFound) -> None:
        super().__init__(not_found.reason)
        self.not_found = not_found


class PlaceholderResolver(BaseService):
    """Verify placeholder tokens and locate what they describe."""

    def resolve(
        self,
        *,
        signed_params: str | None = None,
        sgid: str | None = None,
        signed_controller: str | None = None,
    ) -> Resolution | LookupNotFound:
        """Resolve the reserved attributes of one placeholder.

        ``signed_params`` wins when both tokens are present.

        Raises:
            InvalidSignatureError: Any supplied token fails verification.
            DescriptorBuildError: Neither ``signed_params`` nor ``sgid`` given.
        """
        controller = None
        if signed_controller:
            controller = str(self._kit.verifier.verify(signed_controller, purpose=PURPOSE_CONTROLLER))

        if signed_params:
            descriptor = self._kit.verifier.verify_descriptor(signed_params)
            if isinstance(descriptor, EntityDescriptor):
                return self._entity(descriptor.entity, controller, data=descriptor.data)
            try:
                locals = self._resolve_value(descriptor.locals)
            except _Missing as missing:
                logger.info("Placeholder for %s is stale: %s", descriptor.partial, missing)
                return missing.not_found
            return Resolution(
                kind="partial",
                partial=descriptor.partial,
                locals=locals,
                data=dict(descriptor.data or {}),
                controller=controller,
            )

        if sgid:
            ref = self._kit.codec.verify_signed(sgid)
            return self._entity(ref.to_uri(), controller)

        raise DescriptorBuildError("Nothing to resolve: pass signed_params= or sgid=")

    def render(self, resolution: Resolution) -> Markup:
        """Render a resolution through the kit's renderer."""
        renderer = self._kit.renderer
        if resolution.kind == "entity":
            return Markup(renderer.render_entity(resolution.entity))
        return Markup(renderer.render_partial(resolution.partial, resolution.locals))

    def _entity(
        self,
        uri: str,
        controller: str | None,
        *,
        data: dict[str, Any] | None = None,
    ) -> Resolution | LookupNotFound:
        found = self._kit.codec.decode(uri)
        if isinstance(found, LookupNotFound):
            logger.info("Placeholder entity %s is stale: %s", uri, found.reason)
            return found
        return Resolution(
            kind="entity", entity=found, data=dict(data or {}), controller=controller
        )

    def _resolve_value(self, value: Any) -> Any:
        if is_reference_uri(value):
            found = self._kit.codec.decode(value)
            if isinstance(found, LookupNotFound):
                raise _Missing(found)
            return found
        if is_unsaved_marker(value):
            attributes = self._resolve_value(value["attributes"])
            built = self._kit.codec.decode_unsaved({**value, "attributes": attributes})
            if isinstance(built, LookupNotFound):
                raise _Missing(built)
            return built
        if isinstance(value, dict):
            return {key: self._resolve_value(item) for key, item in value.items()}
        if isinstance(value, list):
            return [self._resolve_value(item) for item in value]
        return value
