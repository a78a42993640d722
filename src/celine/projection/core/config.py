# celine/projection/core/config.py
"""
Central configuration for the projection runtime.

Environment variables override defaults.
"""
from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven settings with sensible defaults."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"
    log_json: bool = True

    # Declaration file paths (glob patterns)
    declarations_config_paths: list[str] = Field(
        default_factory=lambda: ["config/views.yaml"]
    )

    default_projection: Literal["public_fields", "none"] = Field(
        default="public_fields",
        description="Fallback for entities without a view: every public field, or nothing",
    )
    default_root: bool = Field(
        default=True,
        description="Wrap projections under the entity type's conventional key",
    )
    max_depth: int = Field(default=8, ge=0, description="Relationship nesting limit")

    # Never emitted by the public-fields fallback
    filtered_fields: list[str] = Field(
        default_factory=lambda: ["password", "ssn"]
    )


settings = Settings()
