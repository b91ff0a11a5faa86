"""Error taxonomy for descriptor construction and verification.

INVARIANT: A stale reference is not an error. Lookups that no longer
resolve return :class:`~lazyfrag.domain.references.LookupNotFound` so
callers can tell a tampered token from a deleted record.
"""

from __future__ import annotations

from typing import Any


class LazyfragError(Exception):
    """Base class for every error raised by lazyfrag."""


class ConfigurationError(LazyfragError):
    """Settings could not be loaded or are inconsistent."""


class UnidentifiableObjectError(LazyfragError, TypeError):
    """An object lacks the identifiable capability (type name + stable id)."""

    def __init__(self, obj: Any, reason: str | None = None) -> None:
        self.obj = obj
        detail = reason or "does not expose an 'id' attribute"
        super().__init__(f"{type(obj).__name__} object {detail}")


class DescriptorBuildError(LazyfragError, ValueError):
    """A render descriptor could not be built.

    Raised for malformed partial/locals combinations and for collection
    items that cannot be identified.

    Attributes:
        index: Position of the failing collection item, if any.
        emitted: Nodes already emitted for earlier items of the same call.
    """

    def __init__(
        self,
        message: str,
        *,
        index: int | None = None,
        emitted: list[Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.index = index
        self.emitted = list(emitted or [])


class InvalidSignatureError(LazyfragError):
    """A token was forged, corrupted, or signed under another secret.

    The message never includes the token body.
    """
