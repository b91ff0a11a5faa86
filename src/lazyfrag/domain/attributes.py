"""Attribute composition — caller markup attributes vs protocol attributes.

Protocol attributes are emitted as ``data-*`` attributes (``sgid`` becomes
``data-sgid``), except ``is`` which selects a customized built-in element.
Caller attributes arrive as a mapping that may nest a ``data`` namespace::

    {"class": "card", "data": {"controller": "feed", "sgid": "forged"}}

INVARIANT: Reserved keys always win. A caller key whose serialized name
collides with a protocol attribute is dropped whole, wherever the caller
placed it, and reserved keys are always emitted before caller keys.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

# Protocol order of emission.
RESERVED_DATA_KEYS: tuple[str, ...] = (
    "signed_params",
    "sgid",
    "eager",
    "broadcast_each",
    "signed_controller",
)
RESERVED_KEYS: tuple[str, ...] = (*RESERVED_DATA_KEYS, "is")

DATA_NAMESPACE = "data"


def _normalize(key: Any) -> str:
    return str(key).replace("-", "_").lower()


def reserved_attribute_name(key: str) -> str:
    """Serialized markup name of a protocol attribute."""
    if key == "is":
        return "is"
    return f"data-{key.replace('_', '-')}"


def is_reserved_data_key(key: Any) -> bool:
    """Whether a ``data`` namespace entry collides with a protocol attribute."""
    return _normalize(key) in RESERVED_DATA_KEYS


def is_reserved_key(key: Any) -> bool:
    """Whether a top-level caller attribute collides with a protocol attribute."""
    normalized = _normalize(key)
    if normalized in RESERVED_KEYS:
        return True
    prefix = f"{DATA_NAMESPACE}_"
    return normalized.startswith(prefix) and normalized[len(prefix) :] in RESERVED_DATA_KEYS


def strip_reserved_data(data: Mapping[str, Any] | None) -> dict[str, Any]:
    """Return the caller's ``data`` namespace without protocol keys, order kept."""
    if not data:
        return {}
    return {key: value for key, value in data.items() if not is_reserved_data_key(key)}


def compose_attributes(
    reserved: Mapping[str, Any],
    caller: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Merge protocol attributes with caller attributes.

    Args:
        reserved: Protocol attributes applicable to the current mode. Keys
            must be members of :data:`RESERVED_KEYS`; ``None`` and ``False``
            values are left out.
        caller: Arbitrary caller attributes, possibly with a nested
            ``data`` namespace.

    Returns:
        A new mapping: reserved keys first (protocol order), then every
        non-colliding caller key in caller order.

    Raises:
        KeyError: *reserved* contains a key the protocol does not own.
    """
    unknown = [key for key in reserved if key not in RESERVED_KEYS]
    if unknown:
        raise KeyError(f"Not a protocol attribute: {', '.join(map(str, unknown))}")

    result: dict[str, Any] = {}
    for key in RESERVED_KEYS:
        value = reserved.get(key)
        if value is None or value is False:
            continue
        result[key] = value

    for key, value in (caller or {}).items():
        if key == DATA_NAMESPACE and isinstance(value, Mapping):
            data = strip_reserved_data(value)
            if data:
                result[DATA_NAMESPACE] = data
            continue
        if is_reserved_key(key):
            continue
        result[key] = value
    return result
