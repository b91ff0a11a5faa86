"""ServiceResult and ServiceError — the contract of CLI-facing services.

INVARIANT: Every :class:`~lazyfrag.services.tokens.TokenService` method
returns a ServiceResult. The CLI formats it and picks the exit code.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult.

    Codes: ``INVALID_SIGNATURE``, ``INVALID_ARGUMENT``, ``NOT_FOUND``.
    """

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Return type for token operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"inspect_token"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None
