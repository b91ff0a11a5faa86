"""Entity references — reversible ``gid://`` URIs for domain objects.

A reference names an application, a type discriminator and an id::

    gid://blog/Post/1

INVARIANT: Decoding a reference yields an object of the named type with
the named id, or an explicit :class:`LookupNotFound`. It never resolves
to a different object.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, unquote

from pydantic import BaseModel, ConfigDict, field_validator

from lazyfrag.domain.identity import entity_id, entity_type_name

GID_SCHEME = "gid"
UNSAVED_KEY = "_unsaved"

_APP_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_-]*$")
_MODEL_NAME_PATTERN = re.compile(r"^[A-Za-z_][\w.:]*$")
_GID_PATTERN = re.compile(r"^gid://(?P<app>[^/]+)/(?P<model_name>[^/]+)/(?P<model_id>[^/]+)$")


class EntityReference(BaseModel):
    """Type discriminator + identifier for one domain object."""

    model_config = ConfigDict(frozen=True)

    app: str
    model_name: str
    model_id: str

    @field_validator("app")
    @classmethod
    def _check_app(cls, value: str) -> str:
        if not _APP_PATTERN.match(value):
            msg = f"Invalid app name {value!r}: use lowercase letters, digits, '-' or '_'"
            raise ValueError(msg)
        return value

    @field_validator("model_name")
    @classmethod
    def _check_model_name(cls, value: str) -> str:
        if not _MODEL_NAME_PATTERN.match(value):
            msg = f"Invalid model name {value!r}"
            raise ValueError(msg)
        return value

    @field_validator("model_id")
    @classmethod
    def _check_model_id(cls, value: str) -> str:
        if not value:
            raise ValueError("model_id must not be empty")
        return value

    @classmethod
    def for_object(cls, obj: Any, *, app: str) -> EntityReference:
        """Build the reference for *obj*.

        Raises:
            UnidentifiableObjectError: *obj* is not identifiable or unsaved.
        """
        return cls(app=app, model_name=entity_type_name(obj), model_id=entity_id(obj))

    @classmethod
    def parse(cls, uri: str) -> EntityReference | None:
        """Parse a ``gid://`` URI, or return None when *uri* is not one."""
        if not isinstance(uri, str):
            return None
        match = _GID_PATTERN.match(uri)
        if match is None:
            return None
        try:
            return cls(
                app=match["app"],
                model_name=match["model_name"],
                model_id=unquote(match["model_id"]),
            )
        except ValueError:
            return None

    def to_uri(self) -> str:
        """Render as ``gid://app/ModelName/id`` (id percent-encoded)."""
        return f"{GID_SCHEME}://{self.app}/{self.model_name}/{quote(self.model_id, safe='')}"

    def __str__(self) -> str:
        return self.to_uri()


def is_reference_uri(value: Any) -> bool:
    """Whether *value* is a string shaped like a ``gid://`` reference."""
    return isinstance(value, str) and value.startswith(f"{GID_SCHEME}://")


def unsaved_marker(type_name: str, attributes: dict[str, Any]) -> dict[str, Any]:
    """Locals payload for an identifiable object that has no id yet."""
    return {UNSAVED_KEY: type_name, "attributes": attributes}


def is_unsaved_marker(value: Any) -> bool:
    return (
        isinstance(value, dict)
        and set(value) == {UNSAVED_KEY, "attributes"}
        and isinstance(value[UNSAVED_KEY], str)
        and isinstance(value["attributes"], dict)
    )


@dataclass(frozen=True)
class LookupNotFound:
    """A legitimate reference whose object no longer exists.

    Returned, never raised: it is an expected outcome for stale
    placeholders, distinct from a signature failure.
    """

    reference: EntityReference | None = None
    reason: str = "not found"

    def __bool__(self) -> bool:
        return False
