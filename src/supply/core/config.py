"""Configuration management.

Loads from a TOML config file + environment variables.
Uses pydantic-settings for validation and env var overriding.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: str = "json"  # "json" or "console"
    metrics_enabled: bool = True

    @field_validator("log_format")
    @classmethod
    def _known_format(cls, value: str) -> str:
        if value not in ("json", "console"):
            raise ValueError(f"log_format must be 'json' or 'console', got {value!r}")
        return value


class MixinConfig(BaseModel):
    """Default method names used by ``supply.mixin.install``."""

    run: str = "each"
    add: str = "before"
    remove: str = "remove"
    attribute: str = "_supply"


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class SupplySettings(BaseSettings):
    """Top-level pipeline settings.

    Loaded from a TOML config file, overridden by environment variables
    (``SUPPLY_OBSERVABILITY__LOG_LEVEL=DEBUG`` and so on).
    """

    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)
    mixin: MixinConfig = Field(default_factory=MixinConfig)

    model_config = {"env_prefix": "SUPPLY_", "env_nested_delimiter": "__"}


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> SupplySettings:
    """Load settings from TOML file + env vars.

    Args:
        config_path: Path to TOML config file (optional).
        overrides: Dict of overrides to apply on top.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            import tomli

            with open(path, "rb") as f:
                data = tomli.load(f)

    if overrides:
        data.update(overrides)

    return SupplySettings(**data)
