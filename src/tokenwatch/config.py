"""Inspector policy configuration from environment variables or YAML."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_EXPIRING_SOON_SECONDS = 600

_TRUTHY = {"1", "true", "yes", "on"}


class InspectorConfig(BaseModel):
    """Policy knobs for expiry evaluation."""

    expiring_soon_seconds: int = Field(default=DEFAULT_EXPIRING_SOON_SECONDS, ge=0)
    # Tokens without an exp claim are treated as expired unless this is set
    allow_missing_exp: bool = False

    @classmethod
    def from_env(cls) -> InspectorConfig:
        """Load from TOKENWATCH_* environment variables, falling back to defaults."""
        return cls(
            expiring_soon_seconds=int(
                os.environ.get(
                    "TOKENWATCH_EXPIRING_SOON_SECONDS", str(DEFAULT_EXPIRING_SOON_SECONDS)
                )
            ),
            allow_missing_exp=(
                os.environ.get("TOKENWATCH_ALLOW_MISSING_EXP", "false").strip().lower()
                in _TRUTHY
            ),
        )


def load_config(path: Path | str | None = None) -> InspectorConfig:
    """Load the inspector config.

    Resolution order:
    1. Explicit path parameter
    2. TOKENWATCH_CONFIG environment variable
    3. TOKENWATCH_* environment variables (see ``InspectorConfig.from_env``)

    A config file is YAML with an ``inspector:`` mapping.
    """
    config_path = path or os.environ.get("TOKENWATCH_CONFIG")
    if not config_path:
        return InspectorConfig.from_env()

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Inspector config not found: {config_path}")

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Inspector config must be a mapping: {config_path}")

    logger.debug("Loaded inspector config from %s", config_path)
    return InspectorConfig.model_validate(data.get("inspector") or {})
