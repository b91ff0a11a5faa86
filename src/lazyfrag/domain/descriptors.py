"""Render descriptors and the render-target union.

A descriptor is the deferred-render instruction that gets signed into a
placeholder. It is either a single entity reference or a partial name
plus locals. Locals hold JSON values only: identifiable objects have
already been replaced by their reference URIs by the builder.

Render targets describe caller intent before any descriptor exists::

    SingleObject(post)
    ExplicitPartial("posts/card", {"post": post})
    Relation([post_a, post_b])
    Collection([post_a, post_b], as_name="post")
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from lazyfrag.domain.errors import DescriptorBuildError

# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------


class EntityDescriptor(BaseModel):
    """Shorthand descriptor: render one entity with its default partial.

    ``data`` carries the caller's sanitized ``data`` namespace, if any.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    entity: str
    data: dict[str, Any] | None = None

    def payload(self) -> dict[str, Any]:
        result: dict[str, Any] = {"entity": self.entity}
        if self.data:
            result["data"] = copy.deepcopy(self.data)
        return result


class PartialDescriptor(BaseModel):
    """Explicit descriptor: a partial name plus JSON-ready locals."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    partial: str
    locals: dict[str, Any] = Field(default_factory=dict)
    data: dict[str, Any] | None = None

    @field_validator("partial")
    @classmethod
    def _check_partial(cls, value: str) -> str:
        if not value or value.startswith("/") or ".." in value.split("/"):
            msg = f"Invalid partial name {value!r}"
            raise ValueError(msg)
        return value

    def payload(self) -> dict[str, Any]:
        """Serializable mapping; a deep copy so callers cannot mutate the descriptor."""
        result: dict[str, Any] = {"partial": self.partial, "locals": copy.deepcopy(self.locals)}
        if self.data:
            result["data"] = copy.deepcopy(self.data)
        return result


RenderDescriptor = EntityDescriptor | PartialDescriptor


def descriptor_from_payload(payload: Any) -> RenderDescriptor:
    """Rebuild a descriptor from a verified payload.

    Raises:
        DescriptorBuildError: The payload matches neither descriptor shape.
    """
    if not isinstance(payload, Mapping):
        raise DescriptorBuildError("Descriptor payload must be a mapping")
    try:
        if "entity" in payload:
            return EntityDescriptor.model_validate(payload)
        return PartialDescriptor.model_validate(payload)
    except ValidationError as exc:
        raise DescriptorBuildError(f"Malformed descriptor payload: {exc}") from exc


# ---------------------------------------------------------------------------
# Render targets
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SingleObject:
    """One identifiable object rendered through its default partial."""

    obj: Any


@dataclass(frozen=True)
class ExplicitPartial:
    """A named partial with caller locals (objects not yet encoded).

    ``subject`` is the object a partial was requested for, when the caller
    passed one; it is also present in ``locals`` and is what a content
    block receives.
    """

    partial: str
    locals: Mapping[str, Any] = field(default_factory=dict)
    subject: Any = None


@dataclass(frozen=True)
class Relation:
    """A query result rendered as one entity placeholder per record."""

    items: Iterable[Any]


@dataclass(frozen=True)
class Collection:
    """Items rendered through one partial, each with its own counter.

    ``as_name`` overrides the local name inferred from the first item's
    type; ``partial`` overrides the inferred ``{plural}/{singular}`` path.
    ``locals`` are shared by every item; the item and counter keys win.
    """

    items: Iterable[Any]
    as_name: str | None = None
    partial: str | None = None
    locals: Mapping[str, Any] = field(default_factory=dict)


RenderTarget = SingleObject | ExplicitPartial | Relation | Collection
