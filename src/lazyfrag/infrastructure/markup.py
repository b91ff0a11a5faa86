"""Markup for placeholder nodes — attribute serialization and escaping.

Composed attributes (see :mod:`lazyfrag.domain.attributes`) are turned
into HTML attribute pairs here. Escaping is delegated to markupsafe, so
nodes and fragments compose with Jinja2 templates through ``__html__``.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from markupsafe import Markup, escape

from lazyfrag.domain.attributes import DATA_NAMESPACE, RESERVED_KEYS, reserved_attribute_name

# ---------------------------------------------------------------------------
# Attribute serialization
# ---------------------------------------------------------------------------


def _dasherize(key: Any) -> str:
    return str(key).replace("_", "-")


def _data_value(value: Any) -> str:
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def attribute_pairs(attributes: Mapping[str, Any]) -> list[tuple[str, str | None]]:
    """Flatten composed attributes to ``(name, value)`` pairs in order.

    A ``None`` value denotes a bare boolean attribute (``hidden``).
    """
    pairs: list[tuple[str, str | None]] = []
    for key, value in attributes.items():
        if key in RESERVED_KEYS:
            pairs.append((reserved_attribute_name(key), _data_value(value)))
        elif key == DATA_NAMESPACE and isinstance(value, Mapping):
            for sub_key, sub_value in value.items():
                if sub_value is not None:
                    pairs.append((f"data-{_dasherize(sub_key)}", _data_value(sub_value)))
        elif value is True:
            pairs.append((_dasherize(key), None))
        elif value is None or value is False:
            continue
        elif isinstance(value, Mapping):
            for sub_key, sub_value in value.items():
                if sub_value is not None:
                    pairs.append((f"{_dasherize(key)}-{_dasherize(sub_key)}", _data_value(sub_value)))
        elif isinstance(value, (list, tuple)):
            pairs.append((_dasherize(key), " ".join(str(item) for item in value)))
        else:
            pairs.append((_dasherize(key), str(value)))
    return pairs


def serialize_attributes(attributes: Mapping[str, Any]) -> Markup:
    """Render attributes as an escaped HTML attribute string (leading space included)."""
    parts: list[str] = []
    for name, value in attribute_pairs(attributes):
        if value is None:
            parts.append(f" {escape(name)}")
        else:
            parts.append(f' {escape(name)}="{escape(value)}"')
    return Markup("".join(parts))


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PlaceholderNode:
    """One emitted placeholder element.

    ``attributes`` is the composed mapping (read-only); ``content`` is the
    pre-populated body shown until the deferred fragment arrives.
    """

    tag: str
    attributes: Mapping[str, Any] = field(default_factory=dict)
    content: Markup = field(default_factory=Markup)

    def __post_init__(self) -> None:
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))
        object.__setattr__(self, "content", escape(self.content))

    @property
    def deferred(self) -> bool:
        return True

    def markup_attributes(self) -> dict[str, str | None]:
        """Serialized attributes by markup name (``data-sgid`` ...)."""
        return dict(attribute_pairs(self.attributes))

    def __html__(self) -> Markup:
        return Markup(f"<{self.tag}{serialize_attributes(self.attributes)}>{self.content}</{self.tag}>")

    def __str__(self) -> str:
        return str(self.__html__())


@dataclass(frozen=True)
class RenderedFragment:
    """Markup rendered eagerly instead of a placeholder (deferral bypassed)."""

    content: Markup = field(default_factory=Markup)

    def __post_init__(self) -> None:
        object.__setattr__(self, "content", escape(self.content))

    @property
    def deferred(self) -> bool:
        return False

    @property
    def attributes(self) -> Mapping[str, Any]:
        return MappingProxyType({})

    def __html__(self) -> Markup:
        return Markup(self.content)

    def __str__(self) -> str:
        return str(self.content)


def join_markup(nodes: Iterable[PlaceholderNode | RenderedFragment]) -> Markup:
    """Concatenate emitted nodes into one safe markup string."""
    return Markup("").join(node.__html__() for node in nodes)
