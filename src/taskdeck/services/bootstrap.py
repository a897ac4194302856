"""Service wiring for taskdeck.

``create_services`` is called once per process (the CLI does it in its root
callback) and the resulting ``AppServices`` is passed by reference to every
consumer. There are no module-level service singletons.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from taskdeck.adapters import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    SqliteKeyValueStore,
    TaskStorageAdapter,
)
from taskdeck.repositories import KeyValueStore
from taskdeck.services.config_service import ConfigService
from taskdeck.services.task_store import TaskStore
from taskdeck.services.theme_service import ThemeService

logger = logging.getLogger(__name__)


@dataclass
class AppServices:
    """Long-lived service instances shared by every consumer."""

    config_service: ConfigService
    kv_store: KeyValueStore
    task_store: TaskStore
    theme_service: ThemeService


def create_kv_store(config_service: ConfigService) -> KeyValueStore:
    """Build the key-value backend selected by ``storage.backend``."""
    backend = config_service.config.storage.backend
    if backend == "memory":
        return InMemoryKeyValueStore()
    location = config_service.storage_location()
    if backend == "sqlite":
        return SqliteKeyValueStore(location)
    return JsonFileKeyValueStore(location)


def create_services(config_service: ConfigService) -> AppServices:
    """Construct the task store, theme service and their shared backend."""
    kv_store = create_kv_store(config_service)
    logger.debug(
        "using %s storage at %s",
        config_service.config.storage.backend,
        config_service.storage_location(),
    )
    task_store = TaskStore(TaskStorageAdapter(kv_store))
    theme_service = ThemeService(kv_store, default=config_service.config.ui.default_theme)
    return AppServices(
        config_service=config_service,
        kv_store=kv_store,
        task_store=task_store,
        theme_service=theme_service,
    )
