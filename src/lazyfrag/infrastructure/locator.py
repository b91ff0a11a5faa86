"""Entity reference codec — encode objects to references and locate them back.

Finders are registered per type name by the host application::

    locator = Locator()
    locator.register(Post)                       # uses Post.find(id)
    locator.register(Comment, comments_repo.get)
    codec = EntityCodec(app="blog", locator=locator, verifier=verifier)

    uri = codec.encode(post).to_uri()            # "gid://blog/Post/1"
    codec.decode(uri)                            # post, or LookupNotFound

A finder returning ``None`` or :class:`LookupNotFound`, or raising
:class:`LookupError` (``KeyError``, ``IndexError`` ...), means the object
is gone. Any other exception propagates.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from lazyfrag.domain.errors import InvalidSignatureError, UnidentifiableObjectError
from lazyfrag.domain.identity import entity_type_name, is_identifiable
from lazyfrag.domain.references import (
    UNSAVED_KEY,
    EntityReference,
    LookupNotFound,
    is_unsaved_marker,
    unsaved_marker,
)
from lazyfrag.infrastructure.signing import PURPOSE_SGID, MessageVerifier

logger = logging.getLogger(__name__)

Finder = Callable[[str], Any]
Factory = Callable[..., Any]


@dataclass(frozen=True)
class _Registration:
    name: str
    finder: Finder
    factory: Factory


class Locator:
    """Registry of finders keyed by entity type name."""

    def __init__(self) -> None:
        self._registry: dict[str, _Registration] = {}

    def register(
        self,
        cls: type,
        finder: Finder | None = None,
        *,
        name: str | None = None,
        factory: Factory | None = None,
    ) -> None:
        """Register how to find (and rebuild unsaved) instances of *cls*.

        Args:
            cls: The entity class.
            finder: ``finder(id) -> object | None``; defaults to ``cls.find``.
            name: Type name override; defaults to the class's entity name.
            factory: ``factory(**attributes)`` for unsaved entities;
                defaults to ``cls`` itself.

        Raises:
            TypeError: No finder given and *cls* has no ``find`` classmethod.
        """
        lookup = finder or getattr(cls, "find", None)
        if not callable(lookup):
            msg = f"{cls.__name__} has no 'find' method; pass a finder explicitly"
            raise TypeError(msg)
        type_name = name or entity_type_name(cls)
        self._registry[type_name] = _Registration(type_name, lookup, factory or cls)
        logger.debug("Registered entity finder for %s", type_name)

    def is_registered(self, type_name: str) -> bool:
        return type_name in self._registry

    def find(self, type_name: str, model_id: str) -> Any:
        """Look *model_id* up, returning the object or :class:`LookupNotFound`."""
        registration = self._registry.get(type_name)
        if registration is None:
            return LookupNotFound(reason=f"no finder registered for {type_name}")
        try:
            found = registration.finder(model_id)
        except LookupError:
            found = None
        if found is None or isinstance(found, LookupNotFound):
            return LookupNotFound(reason=f"{type_name} {model_id} not found")
        if not _matches(found, registration, model_id):
            logger.warning(
                "Finder for %s returned a different object (%s)", type_name, type(found).__name__
            )
            return LookupNotFound(reason=f"finder for {type_name} returned a different object")
        return found

    def build(self, type_name: str, attributes: Mapping[str, Any]) -> Any:
        """Instantiate an unsaved entity from its serialized attributes."""
        registration = self._registry.get(type_name)
        if registration is None:
            return LookupNotFound(reason=f"no factory registered for {type_name}")
        return registration.factory(**attributes)


def _matches(found: Any, registration: _Registration, model_id: str) -> bool:
    """Whether a finder result is the object the reference names."""
    factory = registration.factory
    same_type = entity_type_name(found) == registration.name or (
        isinstance(factory, type) and isinstance(found, factory)
    )
    found_id = getattr(found, "id", None)
    return same_type and found_id is not None and str(found_id) == model_id


def entity_attributes(obj: Any) -> dict[str, Any]:
    """Attributes of an unsaved entity, values left as they are."""
    if isinstance(obj, BaseModel):
        return {name: getattr(obj, name) for name in type(obj).model_fields}
    return {key: value for key, value in vars(obj).items() if not key.startswith("_")}


class EntityCodec:
    """Entity reference encoder/decoder bound to one app and locator."""

    def __init__(self, *, app: str, locator: Locator, verifier: MessageVerifier) -> None:
        self.app = app
        self.locator = locator
        self._verifier = verifier

    def encode(self, obj: Any) -> EntityReference:
        """Return the reference for *obj*.

        Raises:
            UnidentifiableObjectError: *obj* has no ``id`` or it is unset.
        """
        return EntityReference.for_object(obj, app=self.app)

    def encode_local(
        self,
        obj: Any,
        *,
        encode_attributes: Callable[[dict[str, Any]], dict[str, Any]] | None = None,
    ) -> str | dict[str, Any]:
        """Encode an identifiable local: a URI, or an unsaved marker when no id yet.

        *encode_attributes* makes an unsaved entity's attributes JSON-ready;
        without it they are taken as they are.
        """
        if not is_identifiable(obj):
            raise UnidentifiableObjectError(obj)
        if obj.id is None:
            attributes = entity_attributes(obj)
            if encode_attributes is not None:
                attributes = encode_attributes(attributes)
            return unsaved_marker(entity_type_name(obj), attributes)
        return self.encode(obj).to_uri()

    def decode(self, reference: EntityReference | str) -> Any:
        """Locate the object behind *reference*, or return :class:`LookupNotFound`."""
        ref = reference if isinstance(reference, EntityReference) else EntityReference.parse(reference)
        if ref is None:
            return LookupNotFound(reason="not an entity reference")
        if ref.app != self.app:
            return LookupNotFound(ref, reason=f"reference belongs to app {ref.app!r}")
        found = self.locator.find(ref.model_name, ref.model_id)
        if isinstance(found, LookupNotFound):
            return LookupNotFound(ref, reason=found.reason)
        return found

    def decode_unsaved(self, marker: Mapping[str, Any]) -> Any:
        """Rebuild an unsaved entity from its locals marker."""
        if not is_unsaved_marker(marker):
            return LookupNotFound(reason="not an unsaved entity marker")
        return self.locator.build(marker[UNSAVED_KEY], marker["attributes"])

    def sign(self, obj: Any) -> str:
        """Signed entity reference (``sgid``) for *obj*."""
        return self._verifier.generate(self.encode(obj).to_uri(), purpose=PURPOSE_SGID)

    def verify_signed(self, token: str) -> EntityReference:
        """Verify an ``sgid`` token and return its reference.

        Raises:
            InvalidSignatureError: The token fails verification or does not
                carry an entity reference.
        """
        uri = self._verifier.verify(token, purpose=PURPOSE_SGID)
        ref = EntityReference.parse(uri)
        if ref is None:
            raise InvalidSignatureError("Invalid signature: payload is not an entity reference")
        return ref

    def locate_signed(self, token: str) -> Any:
        """Verify an ``sgid`` token and locate its object (or LookupNotFound)."""
        return self.decode(self.verify_signed(token))
