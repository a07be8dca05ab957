"""Delivery settings manager with runtime configuration support.

This module provides the settings store of the delivery engine. It can:
- Resolve settings from explicit properties, process overrides and defaults
- Be modified at runtime, notifying registered listeners of every change
- Keep the derived mail session in step with the settings it depends on
- Create the configured mail and queue stores on first use
"""

from email.headerregistry import Address
from pathlib import Path
from threading import Lock, RLock
from typing import Any, Callable, Dict, List, Mapping, Optional

from loguru import logger

from ..exceptions import InvalidAddressError, InvalidSettingValueError
from ..logging_setup import get_logger
from ..stores import (
    MailStore,
    QueueStore,
    SimpleMailStore,
    SimpleQueueStore,
    StoreRegistry,
    StoreSlot,
    mail_store_registry,
    queue_store_registry,
)
from .listeners import ChangeNotifier, Listener
from .resolution import load_properties, parse_address, resolve_all
from .session import MailSession, SessionSynthesizer
from .settings import INTEGER_BOUNDS, SETTINGS_BY_KEY, SettingKey, SettingType

_MISSING = object()


def _check_type(key: SettingKey, value: Any) -> None:
    setting = SETTINGS_BY_KEY[key]
    if setting.type in INTEGER_BOUNDS:
        valid = isinstance(value, int) and not isinstance(value, bool)
    elif setting.type == SettingType.BOOL:
        valid = isinstance(value, bool)
    else:
        valid = isinstance(value, str)
    if not valid:
        raise TypeError(
            f"Setting '{key}' expects {setting.type.value}, got {type(value).__name__}"
        )
    if setting.type in INTEGER_BOUNDS:
        low, high = INTEGER_BOUNDS[setting.type]
        if not low <= value <= high:
            raise InvalidSettingValueError(
                key.value, value, "setter", f"an integer between {low} and {high}"
            )


class SettingsManager:
    """Centralized delivery settings with runtime configuration support.

    Features:
    - Singleton access through get_instance(), or explicit construction
    - Thread-safe reads and updates
    - Change notifications to registered listeners
    - Mail session rebuilt whenever hostname, encoding, timeout or debug change
    - Lazily created mail and queue stores

    Usage:
        # Get instance
        settings = SettingsManager.get_instance()

        # Read settings
        attempts = settings.get_delivery_attempt_count()

        # Update at runtime
        settings.add_listener(lambda key: print(f"{key} changed"))
        settings.set_hostname("mail.example.com")
    """

    _instance: Optional["SettingsManager"] = None
    _lock: Lock = Lock()

    def __init__(
        self,
        properties: Optional[Mapping[str, Any]] = None,
        overrides: Optional[Mapping[str, Any]] = None,
        debug_enabled: Optional[Callable[[], bool]] = None,
        mail_stores: StoreRegistry[MailStore] = mail_store_registry,
        queue_stores: StoreRegistry[QueueStore] = queue_store_registry,
    ):
        """Initialize settings manager.

        Args:
            properties: Explicit initialization properties keyed by canonical key
            overrides: Process-wide overrides, os.environ when omitted
            debug_enabled: Callable telling whether the logger accepts DEBUG records
            mail_stores: Registry used to build the mail store
            queue_stores: Registry used to build the queue store

        Raises:
            InvalidSettingValueError: If a source holds a malformed value
        """
        self._values: Dict[SettingKey, Any] = {}
        self._postmaster: Optional[Address] = None
        self._session: Optional[MailSession] = None
        self._change_lock = RLock()
        self._notifier = ChangeNotifier()
        self._synthesizer = SessionSynthesizer(debug_enabled)
        self._mail_store: StoreSlot[MailStore] = StoreSlot(
            mail_stores, self.get_mail_store_class_name, SimpleMailStore
        )
        self._queue_store: StoreSlot[QueueStore] = StoreSlot(
            queue_stores, self.get_queue_store_class_name, SimpleQueueStore
        )
        self.init(properties, overrides)

    @classmethod
    def get_instance(cls) -> "SettingsManager":
        """Get or create the process-wide instance using double-checked locking.

        The first call resolves settings from os.environ and defaults.

        Returns:
            SettingsManager instance
        """
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance (mainly for testing)."""
        with cls._lock:
            cls._instance = None

    @classmethod
    def from_properties_file(
        cls,
        path: "str | Path",
        overrides: Optional[Mapping[str, Any]] = None,
        **kwargs: Any,
    ) -> "SettingsManager":
        """Create a settings manager from a KEY=VALUE properties file."""
        return cls(properties=load_properties(path), overrides=overrides, **kwargs)

    def init(
        self,
        properties: Optional[Mapping[str, Any]] = None,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> List[SettingKey]:
        """Resolve every setting and apply the results in one step.

        Nothing changes when any value is malformed. An unparseable postmaster
        address is logged and the current address kept. Listeners are notified
        once for each setting whose value changed.

        Args:
            properties: Explicit initialization properties keyed by canonical key
            overrides: Process-wide overrides, os.environ when omitted

        Returns:
            Keys of the settings that changed

        Raises:
            InvalidSettingValueError: If a source holds a malformed value
        """
        resolved = resolve_all(properties, overrides)
        postmaster_text = resolved.pop(SettingKey.POSTMASTER_EMAIL)

        with self._change_lock:
            postmaster = None
            if postmaster_text is not None:
                try:
                    postmaster = parse_address(postmaster_text)
                except InvalidAddressError as e:
                    logger.error(f"Postmaster address is unparseable, keeping current one: {e}")
                    postmaster = self._postmaster

            changed = [
                key for key, value in resolved.items()
                if self._values.get(key, _MISSING) != value
            ]
            if postmaster != self._postmaster:
                changed.append(SettingKey.POSTMASTER_EMAIL)

            self._values.update(resolved)
            self._postmaster = postmaster
            self._rebuild_session()

        logger.info(f"Delivery settings initialized ({len(changed)} values changed)")
        for key in changed:
            self._notifier.notify(key.value)
        return changed

    def _get(self, key: SettingKey) -> Any:
        with self._change_lock:
            return self._values[key]

    def _set(self, key: SettingKey, value: Any) -> None:
        _check_type(key, value)
        with self._change_lock:
            self._values[key] = value
            if SETTINGS_BY_KEY[key].session:
                self._rebuild_session()
        self._notifier.notify(key.value)

    def _rebuild_session(self) -> None:
        with self._change_lock:
            self._session = self._synthesizer.build(
                hostname=self._values[SettingKey.HOSTNAME],
                encoding=self._values[SettingKey.ENCODING],
                timeout=self._values[SettingKey.DELIVERY_TIMEOUT],
                debug=self._values[SettingKey.DELIVERY_DEBUG],
            )

    # Listeners

    def add_listener(self, listener: Listener) -> None:
        """Register a listener called with the key of every changed setting."""
        self._notifier.add_listener(listener)

    def remove_listener(self, listener: Listener) -> None:
        """Unregister a listener."""
        self._notifier.remove_listener(listener)

    @property
    def notifier(self) -> ChangeNotifier:
        return self._notifier

    # Delivery

    def get_delivery_attempt_delay(self) -> int:
        return self._get(SettingKey.DELIVERY_ATTEMPT_DELAY)

    def set_delivery_attempt_delay(self, delay: int) -> None:
        self._set(SettingKey.DELIVERY_ATTEMPT_DELAY, delay)

    def get_delivery_attempt_count(self) -> int:
        return self._get(SettingKey.DELIVERY_ATTEMPT_COUNT)

    def set_delivery_attempt_count(self, attempt_count: int) -> None:
        self._set(SettingKey.DELIVERY_ATTEMPT_COUNT, attempt_count)

    def is_delivery_bounce_on_failure(self) -> bool:
        return self._get(SettingKey.DELIVERY_BOUNCE_ON_FAILURE)

    def set_delivery_bounce_on_failure(self, bounce: bool) -> None:
        self._set(SettingKey.DELIVERY_BOUNCE_ON_FAILURE, bounce)

    def is_delivery_debug(self) -> bool:
        return self._get(SettingKey.DELIVERY_DEBUG)

    def set_delivery_debug(self, debug: bool) -> None:
        self._set(SettingKey.DELIVERY_DEBUG, debug)

    def get_expiry(self) -> int:
        """Delivery expiry in milliseconds, -1 when messages never expire."""
        return self._get(SettingKey.DELIVERY_EXPIRY)

    def set_expiry(self, expiry: int) -> None:
        self._set(SettingKey.DELIVERY_EXPIRY, expiry)

    def get_delivery_threads_active_max(self) -> int:
        return self._get(SettingKey.DELIVERY_THREADS_ACTIVE_MAX)

    def set_delivery_threads_active_max(self, active_threads_max: int) -> None:
        self._set(SettingKey.DELIVERY_THREADS_ACTIVE_MAX, active_threads_max)

    def get_delivery_threads_idle_max(self) -> int:
        return self._get(SettingKey.DELIVERY_THREADS_IDLE_MAX)

    def set_delivery_threads_idle_max(self, idle_threads_max: int) -> None:
        self._set(SettingKey.DELIVERY_THREADS_IDLE_MAX, idle_threads_max)

    def get_delivery_timeout(self) -> int:
        return self._get(SettingKey.DELIVERY_TIMEOUT)

    def set_delivery_timeout(self, timeout: int) -> None:
        self._set(SettingKey.DELIVERY_TIMEOUT, timeout)

    # Transport

    def get_encoding(self) -> str:
        return self._get(SettingKey.ENCODING)

    def set_encoding(self, encoding: str) -> None:
        self._set(SettingKey.ENCODING, encoding)

    def get_hostname(self) -> str:
        return self._get(SettingKey.HOSTNAME)

    def set_hostname(self, hostname: str) -> None:
        self._set(SettingKey.HOSTNAME, hostname)

    def get_mail_session(self) -> MailSession:
        """Get the mail session built from the current settings.

        The returned object is never modified; later changes produce a new one.
        """
        with self._change_lock:
            return self._session

    # Logging

    def get_logger_name(self) -> str:
        return self._get(SettingKey.LOGGER_NAME)

    def set_logger_name(self, logger_name: str) -> None:
        self._set(SettingKey.LOGGER_NAME, logger_name)

    def get_logger_prefix(self) -> str:
        return self._get(SettingKey.LOGGER_PREFIX)

    def set_logger_prefix(self, logger_prefix: str) -> None:
        self._set(SettingKey.LOGGER_PREFIX, logger_prefix)

    def get_logger(self):
        """Get a logger bound with the configured logger name and prefix."""
        with self._change_lock:
            return get_logger(
                self._values[SettingKey.LOGGER_NAME],
                self._values[SettingKey.LOGGER_PREFIX],
            )

    # Postmaster

    def get_postmaster(self) -> Optional[Address]:
        with self._change_lock:
            return self._postmaster

    def get_postmaster_email(self) -> Optional[str]:
        postmaster = self.get_postmaster()
        return str(postmaster) if postmaster is not None else None

    def set_postmaster_email(self, email_address: Optional[str]) -> bool:
        """Set the postmaster address from text.

        Unparseable text is logged and leaves the current address in place.
        None clears the address.

        Returns:
            True if the address was accepted
        """
        if email_address is None:
            with self._change_lock:
                had_address = self._postmaster is not None
                self._postmaster = None
            if had_address:
                self._notifier.notify(SettingKey.POSTMASTER_EMAIL.value)
            return True

        try:
            address = parse_address(email_address)
        except InvalidAddressError as e:
            logger.error(f"The postmaster email address is unparseable: {e}")
            return False

        with self._change_lock:
            self._postmaster = address
        self._notifier.notify(SettingKey.POSTMASTER_EMAIL.value)
        return True

    # Stores

    def get_mail_store_class_name(self) -> str:
        return self._get(SettingKey.MAILSTORE_CLASS)

    def set_mail_store_class_name(self, class_name: str) -> None:
        """Set the mail store type name. Has no effect once the store exists."""
        self._set(SettingKey.MAILSTORE_CLASS, class_name)

    def get_queue_store_class_name(self) -> str:
        return self._get(SettingKey.QUEUESTORE_CLASS)

    def set_queue_store_class_name(self, class_name: str) -> None:
        """Set the queue store type name. Has no effect once the store exists."""
        self._set(SettingKey.QUEUESTORE_CLASS, class_name)

    def get_mail_store(self) -> MailStore:
        """Get the mail store, creating it from the configured type on first use."""
        return self._mail_store.get()

    def set_mail_store(self, mail_store: MailStore) -> None:
        """Replace the mail store, bypassing the configured type name."""
        self._mail_store.set(mail_store)

    def get_queue_store(self) -> QueueStore:
        """Get the queue store, creating it from the configured type on first use."""
        return self._queue_store.get()

    def set_queue_store(self, queue_store: QueueStore) -> None:
        """Replace the queue store, bypassing the configured type name."""
        self._queue_store.set(queue_store)

    def reset_stores(self) -> None:
        """Drop cached stores so the next access uses the current type names."""
        self._mail_store.reset()
        self._queue_store.reset()


# Convenience function for global access
def get_settings() -> SettingsManager:
    """Get the global settings manager instance.

    Returns:
        SettingsManager singleton instance
    """
    return SettingsManager.get_instance()
