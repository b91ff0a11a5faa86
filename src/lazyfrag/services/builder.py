"""DescriptorBuilder — turn caller intent into render descriptors.

The loose call forms accepted by :meth:`PlaceholderEmitter.defer` are
resolved into a :data:`RenderTarget` once, by :func:`resolve_target`;
everything downstream works on the tagged union only.

Locals are made JSON-ready here: identifiable objects (at any depth)
become ``gid://`` URIs, unsaved ones become unsaved markers, and other
values go through pydantic's JSON conversion.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic_core import PydanticSerializationError, to_jsonable_python

from lazyfrag.domain.descriptors import (
    Collection,
    EntityDescriptor,
    ExplicitPartial,
    PartialDescriptor,
    Relation,
    RenderDescriptor,
    RenderTarget,
    SingleObject,
)
from lazyfrag.domain.errors import DescriptorBuildError, UnidentifiableObjectError
from lazyfrag.domain.identity import default_partial_for, is_identifiable, item_name
from lazyfrag.domain.inflection import pluralize
from lazyfrag.services.base import BaseService

logger = logging.getLogger(__name__)

_PRIMITIVES = (str, int, bool, type(None))


@dataclass(frozen=True)
class BuiltItem:
    """One descriptor built for one emitted node."""

    index: int
    item: Any
    descriptor: RenderDescriptor


def _is_multiple(value: Any) -> bool:
    return isinstance(value, Iterable) and not isinstance(value, (str, bytes, Mapping))


def collection_layout(target: Collection, first: Any) -> tuple[str, str]:
    """Item local name and partial for a collection, inferred from its first item.

    Raises:
        UnidentifiableObjectError: No ``as_name`` and *first* is not identifiable.
    """
    name = target.as_name
    if name is None:
        if not is_identifiable(first):
            raise UnidentifiableObjectError(first)
        name = item_name(first)
    return name, target.partial or f"{pluralize(name)}/{name}"


def resolve_target(
    target: Any = None,
    *,
    partial: str | None = None,
    locals: Mapping[str, Any] | None = None,
    collection: Iterable[Any] | None = None,
    as_name: str | None = None,
    **named_locals: Any,
) -> RenderTarget:
    """Resolve a loose call into a render target.

    Forms::

        resolve_target(post)                              # SingleObject
        resolve_target("posts/card", post=post)           # ExplicitPartial
        resolve_target(partial="posts/card", locals={...})
        resolve_target(post, partial="posts/card")        # post goes into locals
        resolve_target(Post.all())                        # Relation
        resolve_target(collection=posts, as_name="entry") # Collection

    Raises:
        DescriptorBuildError: Conflicting or incomplete arguments.
        UnidentifiableObjectError: *target* is an object without an id.
    """
    shared = {**(locals or {}), **named_locals}

    if collection is not None:
        if target is not None:
            raise DescriptorBuildError("Pass either a target or collection=, not both")
        if not _is_multiple(collection):
            raise DescriptorBuildError("collection= must be an iterable of entities")
        return Collection(collection, as_name=as_name, partial=partial, locals=shared)

    if isinstance(target, str):
        if partial is not None:
            raise DescriptorBuildError("Partial given twice (positional and partial=)")
        return ExplicitPartial(target, shared)

    if target is None:
        if partial is None:
            raise DescriptorBuildError("Nothing to render: pass a target, partial= or collection=")
        return ExplicitPartial(partial, shared)

    if is_identifiable(target):
        if partial is None and not shared:
            return SingleObject(target)
        key = item_name(target)
        if key in shared:
            msg = f"Local {key!r} conflicts with the {type(target).__name__} target"
            raise DescriptorBuildError(msg)
        return ExplicitPartial(
            partial or default_partial_for(target), {key: target, **shared}, subject=target
        )

    if _is_multiple(target):
        if partial is not None or shared or as_name is not None:
            return Collection(target, as_name=as_name, partial=partial, locals=shared)
        return Relation(target)

    raise UnidentifiableObjectError(target)


class DescriptorBuilder(BaseService):
    """Build render descriptors from render targets."""

    def build(
        self,
        target: RenderTarget,
        *,
        data: Mapping[str, Any] | None = None,
    ) -> RenderDescriptor:
        """Build the descriptor for a single-node target.

        Args:
            target: A :class:`SingleObject` or :class:`ExplicitPartial`.
            data: Sanitized caller ``data`` namespace, signed into the
                descriptor.

        Raises:
            UnidentifiableObjectError: The single object has no id.
            DescriptorBuildError: Malformed partial or locals, or a
                multi-node target.
        """
        if isinstance(target, SingleObject):
            return EntityDescriptor(
                entity=self._kit.codec.encode(target.obj).to_uri(), data=self._encode_data(data)
            )
        if isinstance(target, ExplicitPartial):
            return self._partial(
                target.partial, self.encode_locals(target.locals), self._encode_data(data)
            )
        msg = f"{type(target).__name__} targets emit one descriptor per item; use build_each()"
        raise DescriptorBuildError(msg)

    def build_each(
        self,
        target: Relation | Collection,
        *,
        data: Mapping[str, Any] | None = None,
    ) -> Iterator[BuiltItem]:
        """Yield one descriptor per item, in iteration order.

        Items are built lazily: a failing item raises
        :class:`DescriptorBuildError` (with ``index`` set) only when it is
        reached, after earlier items were yielded.
        """
        if isinstance(target, Relation):
            encoded_data = self._encode_data(data)
            for index, item in enumerate(target.items):
                try:
                    ref = self._kit.codec.encode(item)
                except UnidentifiableObjectError as exc:
                    raise DescriptorBuildError(f"Item {index}: {exc}", index=index) from exc
                yield BuiltItem(index, item, EntityDescriptor(entity=ref.to_uri(), data=encoded_data))
            return

        if not isinstance(target, Collection):
            msg = f"{type(target).__name__} is a single-node target; use build()"
            raise DescriptorBuildError(msg)

        shared = self.encode_locals(target.locals)
        encoded_data = self._encode_data(data)
        layout: tuple[str, str] | None = None
        for index, item in enumerate(target.items):
            try:
                if layout is None:
                    layout = collection_layout(target, item)
                ref = self._kit.codec.encode(item)
            except UnidentifiableObjectError as exc:
                raise DescriptorBuildError(f"Item {index}: {exc}", index=index) from exc
            name, partial = layout
            item_locals = {**shared, name: ref.to_uri(), f"{name}_counter": index}
            yield BuiltItem(index, item, self._partial(partial, item_locals, encoded_data))

    def encode_locals(self, values: Mapping[str, Any]) -> dict[str, Any]:
        """Return a JSON-ready copy of *values*, key order preserved.

        Raises:
            DescriptorBuildError: A key is not a string or a value cannot be
                represented as JSON.
        """
        return self._encode_mapping(values, path="locals")

    def _encode_data(self, data: Mapping[str, Any] | None) -> dict[str, Any] | None:
        return self._encode_mapping(data, path="data") if data else None

    def _encode_mapping(self, values: Mapping[str, Any], *, path: str) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key, value in values.items():
            if not isinstance(key, str):
                raise DescriptorBuildError(f"{path}: keys must be strings, got {key!r}")
            result[key] = self._encode_value(value, path=f"{path}.{key}")
        return result

    def _encode_value(self, value: Any, *, path: str) -> Any:
        if isinstance(value, _PRIMITIVES):
            return value
        if isinstance(value, float):
            if not math.isfinite(value):
                raise DescriptorBuildError(f"{path}: {value!r} is not representable")
            return value
        if is_identifiable(value):
            attributes_path = f"{path}.attributes"
            return self._kit.codec.encode_local(
                value,
                encode_attributes=lambda attrs: self._encode_mapping(attrs, path=attributes_path),
            )
        if isinstance(value, Mapping):
            return self._encode_mapping(value, path=path)
        if isinstance(value, (list, tuple)):
            return [self._encode_value(item, path=f"{path}[{i}]") for i, item in enumerate(value)]
        try:
            converted = to_jsonable_python(value)
        except PydanticSerializationError as exc:
            msg = f"{path}: {type(value).__name__} values cannot be signed"
            raise DescriptorBuildError(msg) from exc
        logger.debug("Converted %s local at %s to JSON", type(value).__name__, path)
        return self._encode_value(converted, path=path)

    @staticmethod
    def _partial(
        partial: str,
        locals: dict[str, Any],
        data: dict[str, Any] | None,
    ) -> PartialDescriptor:
        try:
            return PartialDescriptor(partial=partial, locals=locals, data=data)
        except ValueError as exc:
            raise DescriptorBuildError(str(exc)) from exc
