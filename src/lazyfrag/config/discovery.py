"""Config file discovery and loading.

Walk-up finder locates lazyfrag.toml, similar to how git finds .git/.
Supports LAZYFRAG_CONFIG env var and --config CLI flag overrides.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from lazyfrag.domain.errors import ConfigurationError

CONFIG_FILENAME = "lazyfrag.toml"
CONFIG_ENV_VAR = "LAZYFRAG_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for lazyfrag.toml.

    Returns the path to the config file, or None if not found.
    Checks LAZYFRAG_CONFIG env var first.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        if p.is_file():
            return p
        return None

    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


def read_toml(path: Path) -> dict[str, Any]:
    """Parse a TOML file, raising ConfigurationError on invalid syntax."""
    raw = path.read_text(encoding="utf-8")
    try:
        return tomllib.loads(raw)
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise ConfigurationError(msg) from exc
