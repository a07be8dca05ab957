"""Delivery configuration with runtime settings broker.

Responsibilities:
- Singleton settings manager for global configuration access
- Resolution of settings from properties, process overrides and defaults
- Runtime configuration updates with listener notifications
- Mail session derived from the transport settings
- Thread-safe configuration management
"""

from .listeners import ChangeNotifier, ConfigurationChangeListener
from .management import ManagementInterface
from .resolution import coerce, load_properties, parse_address, resolve, resolve_all
from .session import MailSession, SessionSynthesizer
from .settings import SETTINGS, Setting, SettingKey, SettingType, get_setting
from .settings_manager import SettingsManager, get_settings

__all__ = [
    "SettingsManager",
    "get_settings",
    "ManagementInterface",
    "ChangeNotifier",
    "ConfigurationChangeListener",
    "MailSession",
    "SessionSynthesizer",
    "SETTINGS",
    "Setting",
    "SettingKey",
    "SettingType",
    "get_setting",
    "coerce",
    "resolve",
    "resolve_all",
    "load_properties",
    "parse_address",
]
