"""Theme preference service.

The light/dark preference is stored under its own key, next to (but never
colliding with) the task collection.
"""

from __future__ import annotations

import logging
from typing import get_args

from taskdeck.models import PersistenceError, Theme, ValidationError
from taskdeck.repositories import KeyValueStore

logger = logging.getLogger(__name__)

THEME_STORAGE_KEY = "task_manager_theme"
THEMES: tuple[Theme, ...] = get_args(Theme)


class ThemeService:
    """Reads and writes the UI theme preference."""

    def __init__(self, store: KeyValueStore, default: Theme = "light"):
        self.store = store
        self.default = default
        self._theme: Theme = self._load()

    def _load(self) -> Theme:
        try:
            stored = self.store.get(THEME_STORAGE_KEY)
        except PersistenceError:
            logger.warning("cannot read theme preference; using %s", self.default)
            return self.default
        if stored in THEMES:
            return stored  # type: ignore[return-value]
        return self.default

    @property
    def theme(self) -> Theme:
        return self._theme

    @property
    def is_dark(self) -> bool:
        return self._theme == "dark"

    def set_theme(self, theme: str) -> Theme:
        """Set and persist the theme.

        Raises:
            ValidationError: If *theme* is not "light" or "dark"
            PersistenceError: If the preference cannot be saved
        """
        if theme not in THEMES:
            raise ValidationError(f"Unknown theme {theme!r}; choose from {', '.join(THEMES)}")
        self._theme = theme  # type: ignore[assignment]
        self.store.set(THEME_STORAGE_KEY, theme)
        return self._theme

    def toggle_theme(self) -> Theme:
        return self.set_theme("light" if self.is_dark else "dark")
