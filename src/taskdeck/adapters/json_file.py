"""File-per-key storage under a data directory."""

from __future__ import annotations

import logging
import os
import re
import tempfile
from pathlib import Path

from platformdirs import user_data_dir

from taskdeck.models import PersistenceError
from taskdeck.repositories import KeyValueStore

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class JsonFileKeyValueStore(KeyValueStore):
    """Key-value store keeping each key in ``<directory>/<key>.json``.

    Writes go to a temporary file in the same directory which is then
    renamed over the target, so a crash never leaves a half-written value.
    """

    def __init__(self, directory: str | Path | None = None):
        """Initialize the store.

        Args:
            directory: Storage directory. If None, uses the platform data dir.
        """
        if directory is None:
            directory = user_data_dir("taskdeck")
        self.directory = Path(directory)

    def _path_for(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceError(f"Cannot read {path}: {e}") from e

    def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.directory, prefix=f".{key}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise PersistenceError(f"Cannot write {path}: {e}") from e
        logger.debug("wrote %d bytes to %s", len(value), path)

    def delete(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(f"Cannot delete {path}: {e}") from e
