"""Configuration core of the Courier mail delivery engine."""

from .config import ManagementInterface, SettingKey, SettingsManager, get_settings
from .exceptions import ConfigurationError

__all__ = [
    "ConfigurationError",
    "ManagementInterface",
    "SettingKey",
    "SettingsManager",
    "get_settings",
]
