"""Generic management access to delivery settings by canonical key.

Remote management layers enumerate the settings table and drive every
setting through the same typed setters used by application code.
"""

from typing import Any, Dict, List, Optional

from loguru import logger

from .resolution import coerce
from .settings import SETTINGS, SettingKey, SettingType, get_setting
from .settings_manager import SettingsManager

_ACCESSORS: Dict[SettingKey, tuple] = {
    SettingKey.DELIVERY_ATTEMPT_DELAY: ("get_delivery_attempt_delay", "set_delivery_attempt_delay"),
    SettingKey.DELIVERY_ATTEMPT_COUNT: ("get_delivery_attempt_count", "set_delivery_attempt_count"),
    SettingKey.DELIVERY_BOUNCE_ON_FAILURE: (
        "is_delivery_bounce_on_failure",
        "set_delivery_bounce_on_failure",
    ),
    SettingKey.DELIVERY_DEBUG: ("is_delivery_debug", "set_delivery_debug"),
    SettingKey.DELIVERY_EXPIRY: ("get_expiry", "set_expiry"),
    SettingKey.DELIVERY_THREADS_ACTIVE_MAX: (
        "get_delivery_threads_active_max",
        "set_delivery_threads_active_max",
    ),
    SettingKey.DELIVERY_THREADS_IDLE_MAX: (
        "get_delivery_threads_idle_max",
        "set_delivery_threads_idle_max",
    ),
    SettingKey.DELIVERY_TIMEOUT: ("get_delivery_timeout", "set_delivery_timeout"),
    SettingKey.ENCODING: ("get_encoding", "set_encoding"),
    SettingKey.HOSTNAME: ("get_hostname", "set_hostname"),
    SettingKey.LOGGER_NAME: ("get_logger_name", "set_logger_name"),
    SettingKey.LOGGER_PREFIX: ("get_logger_prefix", "set_logger_prefix"),
    SettingKey.POSTMASTER_EMAIL: ("get_postmaster_email", "set_postmaster_email"),
    SettingKey.MAILSTORE_CLASS: ("get_mail_store_class_name", "set_mail_store_class_name"),
    SettingKey.QUEUESTORE_CLASS: ("get_queue_store_class_name", "set_queue_store_class_name"),
}


class ManagementInterface:
    """Key-based read/write access to a SettingsManager.

    Usage:
        management = ManagementInterface()
        management.set("delivery.attempt.count", "5")
        management.get("delivery.attempt.count")  # 5
    """

    def __init__(self, settings: Optional[SettingsManager] = None):
        self.settings = settings or SettingsManager.get_instance()

    def keys(self) -> List[str]:
        """Canonical keys of all settings, in table order."""
        return [s.name for s in SETTINGS]

    def describe(self, key: str) -> Dict[str, Any]:
        """Describe a setting's type, default and behaviour on change.

        Raises:
            UnknownSettingError: If the key is not in the table
        """
        setting = get_setting(key)
        return {
            "key": setting.name,
            "type": setting.type.value,
            "default": setting.default,
            "default_from": setting.default_from.value if setting.default_from else None,
            "legacy_keys": list(setting.legacy_keys),
            "description": setting.description,
            "live": setting.live,
            "session": setting.session,
        }

    def get(self, key: str) -> Any:
        """Get the current value of a setting.

        Raises:
            UnknownSettingError: If the key is not in the table
        """
        setting = get_setting(key)
        getter, _ = _ACCESSORS[setting.key]
        return getattr(self.settings, getter)()

    def set(self, key: str, value: Any) -> bool:
        """Set a setting, converting text to the setting's type.

        Returns:
            False if a postmaster address was rejected, True otherwise

        Raises:
            UnknownSettingError: If the key is not in the table
            InvalidSettingValueError: If the value cannot be converted
        """
        setting = get_setting(key)
        _, setter = _ACCESSORS[setting.key]
        logger.info(f"Management update of '{setting.name}'")
        if setting.type == SettingType.ADDRESS:
            return getattr(self.settings, setter)(value)
        getattr(self.settings, setter)(coerce(setting, value, source="management"))
        return True

    def export_settings(self) -> Dict[str, Any]:
        """Export all current values keyed by canonical key."""
        return {name: self.get(name) for name in self.keys()}
