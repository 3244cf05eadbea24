"""Application configuration."""

from .settings import EnvironmentOption, Settings, StorageBackendOption, get_settings, settings

__all__ = ["EnvironmentOption", "Settings", "StorageBackendOption", "get_settings", "settings"]
