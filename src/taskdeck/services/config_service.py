"""Configuration service for managing taskdeck configuration.

This module provides the ConfigService class, which handles:

- Loading and saving config.json under the platform config directory
- Falling back to defaults when the file is missing or corrupt
- Dot-separated key access (``storage.backend``, ``ui.default_theme``)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir, user_data_dir
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from taskdeck.models import AppConfig, ValidationError

logger = logging.getLogger(__name__)


class ConfigService:
    """Service for managing application configuration.

    The service loads ``config.json`` lazily, hands out the validated
    ``AppConfig`` and writes changes back. A missing or unreadable file
    yields the default configuration.
    """

    def __init__(self, config_dir: str | Path | None = None):
        """Initialize the config service.

        Args:
            config_dir: Directory holding config.json. If None, uses the
                platform config directory.
        """
        self.config_dir = Path(config_dir or user_config_dir("taskdeck"))
        self.config_path = self.config_dir / "config.json"
        self.data_dir = Path(user_data_dir("taskdeck"))

        self._config: AppConfig | None = None

    @property
    def config(self) -> AppConfig:
        """Get or load the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self) -> AppConfig:
        """Load configuration from storage."""
        if self._config is not None:
            return self._config

        try:
            with open(self.config_path, encoding="utf-8") as f:
                self._config = AppConfig.model_validate_json(f.read())
        except FileNotFoundError:
            # First run - nothing saved yet
            self._config = AppConfig()
        except (OSError, PydanticValidationError) as e:
            logger.warning("config at %s is unreadable (%s); using defaults", self.config_path, e)
            self._config = AppConfig()

        return self._config

    def save_config(self) -> None:
        """Save the current configuration to storage."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            f.write(self.config.model_dump_json(indent=4))
        self.config_path.chmod(0o600)

    def get(self, key: str) -> Any:
        """Get a configuration value by dot-separated key.

        Raises:
            KeyError: If *key* does not name a setting
        """
        value: Any = self.config
        for part in key.split("."):
            if not isinstance(value, BaseModel) or part not in type(value).model_fields:
                raise KeyError(key)
            value = getattr(value, part)
        return value

    def set(self, key: str, value: Any) -> AppConfig:
        """Set a configuration value by dot-separated key and save.

        Raises:
            KeyError: If *key* does not name a setting
            ValidationError: If *value* is not valid for the setting
        """
        self.get(key)  # raises KeyError for unknown keys
        parts = key.split(".")
        config_dict = self.config.model_dump()

        current = config_dict
        for part in parts[:-1]:
            current = current[part]
        current[parts[-1]] = value

        try:
            self._config = AppConfig.model_validate(config_dict)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid value for {key}: {value!r}") from e
        self.save_config()
        return self._config

    def reset(self, key: str | None = None) -> AppConfig:
        """Reset the whole configuration, or one key, to defaults."""
        if key is None:
            self._config = AppConfig()
            self.save_config()
            return self._config

        default_config = AppConfig()
        value: Any = default_config
        for part in key.split("."):
            if not isinstance(value, BaseModel) or part not in type(value).model_fields:
                raise KeyError(key)
            value = getattr(value, part)
        if isinstance(value, BaseModel):
            value = value.model_dump()
        return self.set(key, value)

    def storage_location(self) -> Path:
        """Directory (json backend) or database file (sqlite backend) in use."""
        storage = self.config.storage
        if storage.path:
            return Path(storage.path).expanduser()
        if storage.backend == "sqlite":
            return self.data_dir / "taskdeck.db"
        return self.data_dir
