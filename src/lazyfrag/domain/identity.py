"""The identifiable capability shared by every entity that can be referenced."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from lazyfrag.domain.errors import UnidentifiableObjectError
from lazyfrag.domain.inflection import demodulize, pluralize, underscore


@runtime_checkable
class Identifiable(Protocol):
    """Anything exposing a stable ``id``.

    The type discriminator is the class ``__name__`` unless the class
    defines ``__entity_name__``.
    """

    id: Any


def is_identifiable(obj: Any) -> bool:
    """Whether *obj* can be turned into an entity reference (saved or not)."""
    if isinstance(obj, (str, bytes, int, float, bool, dict, list, tuple)) or obj is None:
        return False
    return isinstance(obj, Identifiable)


def entity_type_name(obj: Any) -> str:
    """Return the type discriminator used in references to *obj*."""
    cls = obj if isinstance(obj, type) else type(obj)
    return str(getattr(cls, "__entity_name__", None) or cls.__name__)


def entity_id(obj: Any) -> str:
    """Return the stable identifier of *obj* as a string.

    Raises:
        UnidentifiableObjectError: *obj* has no ``id`` or it is unset.
    """
    if not is_identifiable(obj):
        raise UnidentifiableObjectError(obj)
    value = obj.id
    if value is None or value == "":
        raise UnidentifiableObjectError(obj, "has no stable identifier yet")
    return str(value)


def item_name(obj_or_type: Any) -> str:
    """Local-variable name for an entity: ``ActionItem`` -> ``action_item``."""
    return underscore(demodulize(entity_type_name(obj_or_type)))


def default_partial_for(obj_or_type: Any) -> str:
    """Default partial path of an entity: ``ActionItem`` -> ``action_items/action_item``."""
    name = item_name(obj_or_type)
    return f"{pluralize(name)}/{name}"
