"""Services module for taskdeck - Business logic layer."""

from . import task_views
from .bootstrap import AppServices, create_services
from .config_service import ConfigService
from .task_store import TaskStore
from .theme_service import ThemeService

__all__ = [
    "TaskStore",
    "ThemeService",
    "ConfigService",
    "AppServices",
    "create_services",
    "task_views",
]
