"""Configuration models for taskdeck.

The configuration selects the key-value backend that holds task data and
the theme preference, plus a handful of UI defaults.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from .task import TaskPriority

Theme = Literal["light", "dark"]
StorageBackend = Literal["json", "sqlite", "memory"]


class StorageConfig(BaseModel):
    """Storage configuration."""

    backend: StorageBackend = Field(default="json")
    path: str | None = Field(
        default=None,
        description="Directory (json) or database file (sqlite); platform default if unset",
    )

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v or None


class UIConfig(BaseModel):
    """UI configuration."""

    default_theme: Theme = Field(default="light")
    default_priority: TaskPriority = Field(default="medium")


class OutputConfig(BaseModel):
    """Output configuration."""

    format: Literal["pretty", "json", "yaml"] = Field(default="pretty")
    color: bool = Field(default=True)


class AppConfig(BaseModel):
    """Main taskdeck configuration."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    ui: UIConfig = Field(default_factory=UIConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
