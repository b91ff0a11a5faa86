"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, lazyfrag.toml only contains
overrides. Production deployments need only ``[signing] secret_key``.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, SecretStr, field_validator

from lazyfrag.infrastructure.signing import SUPPORTED_DIGESTS

# --- lazyfrag.toml sections ---


class SigningConfig(BaseModel):
    """[signing] section."""

    model_config = {"frozen": True}

    secret_key: SecretStr | None = None
    digest: str = "sha256"

    @field_validator("digest")
    @classmethod
    def _check_digest(cls, value: str) -> str:
        if value not in SUPPORTED_DIGESTS:
            msg = f"digest must be one of {', '.join(SUPPORTED_DIGESTS)}"
            raise ValueError(msg)
        return value


class EntitiesConfig(BaseModel):
    """[entities] section."""

    model_config = {"frozen": True}

    app: str = "app"


class RenderingConfig(BaseModel):
    """[rendering] section."""

    model_config = {"frozen": True}

    skip_deferral: bool = False
    element_tag: str = "lazyfrag-element"
    extends_elements: dict[str, str] = Field(
        default_factory=lambda: {"li": "lazyfrag-li", "tr": "lazyfrag-table-row"}
    )
    template_dirs: list[Path] = Field(default_factory=list)
    partial_prefix: str = "_"
    template_suffix: str = ".html"
