"""Table of delivery settings.

Each setting has a canonical key, optional legacy keys consulted when the
canonical key is absent from the explicit properties, a declared type, and a
compiled-in default.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ..exceptions import UnknownSettingError


class SettingKey(str, Enum):
    """Canonical setting keys."""

    DELIVERY_ATTEMPT_DELAY = "delivery.attempt.delay"
    DELIVERY_ATTEMPT_COUNT = "delivery.attempt.count"
    DELIVERY_BOUNCE_ON_FAILURE = "delivery.bounce-on-failure"
    DELIVERY_DEBUG = "delivery.debug"
    DELIVERY_EXPIRY = "delivery.expiry"
    DELIVERY_THREADS_ACTIVE_MAX = "delivery.threads.active.max"
    DELIVERY_THREADS_IDLE_MAX = "delivery.threads.idle.max"
    DELIVERY_TIMEOUT = "delivery.timeout"
    ENCODING = "encoding"
    HOSTNAME = "hostname"
    LOGGER_NAME = "logger.name"
    LOGGER_PREFIX = "logger.prefix"
    POSTMASTER_EMAIL = "postmaster.email"
    MAILSTORE_CLASS = "mailstore.class"
    QUEUESTORE_CLASS = "queuestore.class"

    def __str__(self) -> str:
        return self.value


class SettingType(str, Enum):
    """Declared value types."""

    INT = "int"
    LONG = "long"
    BOOL = "bool"
    STRING = "string"
    ADDRESS = "address"
    TYPE_NAME = "type-name"


DEFAULT_STORE_TYPE = "simple"
NO_EXPIRY = -1

# Accepted range of integer settings
INTEGER_BOUNDS: Dict[SettingType, Tuple[int, int]] = {
    SettingType.INT: (-2**31, 2**31 - 1),
    SettingType.LONG: (-2**63, 2**63 - 1),
}


@dataclass(frozen=True)
class Setting:
    """Definition of one configuration value."""

    key: SettingKey
    type: SettingType
    default: Any = None
    legacy_keys: Tuple[str, ...] = ()
    description: str = ""
    # Takes effect without restarting delivery
    live: bool = True
    # Requires the mail session to be rebuilt
    session: bool = False
    # Default taken from another setting's resolved value
    default_from: Optional[SettingKey] = field(default=None)

    @property
    def name(self) -> str:
        return self.key.value


SETTINGS: Tuple[Setting, ...] = (
    Setting(
        key=SettingKey.DELIVERY_ATTEMPT_DELAY,
        type=SettingType.LONG,
        default=300000,
        legacy_keys=("aspirinRetryInterval",),
        description="Delay before the next delivery attempt in milliseconds.",
    ),
    Setting(
        key=SettingKey.DELIVERY_ATTEMPT_COUNT,
        type=SettingType.INT,
        default=3,
        legacy_keys=("aspirinMaxAttempts",),
        description="Maximum number of delivery attempts for a message.",
    ),
    Setting(
        key=SettingKey.DELIVERY_BOUNCE_ON_FAILURE,
        type=SettingType.BOOL,
        default=True,
        description="Send a bounce to the postmaster when delivery fails.",
    ),
    Setting(
        key=SettingKey.DELIVERY_DEBUG,
        type=SettingType.BOOL,
        default=False,
        description="Log the full SMTP conversation.",
        session=True,
    ),
    Setting(
        key=SettingKey.DELIVERY_EXPIRY,
        type=SettingType.LONG,
        default=NO_EXPIRY,
        description="Milliseconds after queueing when delivery gives up; -1 never expires.",
    ),
    Setting(
        key=SettingKey.DELIVERY_THREADS_ACTIVE_MAX,
        type=SettingType.INT,
        default=3,
        legacy_keys=("aspirinDeliverThreads",),
        description="Maximum number of active delivery threads.",
    ),
    Setting(
        key=SettingKey.DELIVERY_THREADS_IDLE_MAX,
        type=SettingType.INT,
        legacy_keys=("aspirinDeliverThreads",),
        description="Maximum number of idle delivery threads kept in the pool.",
        default_from=SettingKey.DELIVERY_THREADS_ACTIVE_MAX,
    ),
    Setting(
        key=SettingKey.DELIVERY_TIMEOUT,
        type=SettingType.INT,
        default=30000,
        description="Socket connection and I/O timeout in milliseconds.",
        session=True,
    ),
    Setting(
        key=SettingKey.ENCODING,
        type=SettingType.STRING,
        default="UTF-8",
        description="Default MIME charset.",
        session=True,
    ),
    Setting(
        key=SettingKey.HOSTNAME,
        type=SettingType.STRING,
        default="localhost",
        legacy_keys=("aspirinHostname", "mail.smtp.host"),
        description="Hostname announced to remote servers.",
        session=True,
    ),
    Setting(
        key=SettingKey.LOGGER_NAME,
        type=SettingType.STRING,
        default="Courier",
        description="Name bound to the delivery logger.",
    ),
    Setting(
        key=SettingKey.LOGGER_PREFIX,
        type=SettingType.STRING,
        default="Courier ",
        description="Prefix put at the start of delivery log messages.",
    ),
    Setting(
        key=SettingKey.POSTMASTER_EMAIL,
        type=SettingType.ADDRESS,
        default=None,
        legacy_keys=("aspirinPostmaster",),
        description="Email address of the postmaster.",
    ),
    Setting(
        key=SettingKey.MAILSTORE_CLASS,
        type=SettingType.TYPE_NAME,
        default=DEFAULT_STORE_TYPE,
        description="Registered type name of the mail store.",
        live=False,
    ),
    Setting(
        key=SettingKey.QUEUESTORE_CLASS,
        type=SettingType.TYPE_NAME,
        default=DEFAULT_STORE_TYPE,
        description="Registered type name of the queue store.",
        live=False,
    ),
)

SETTINGS_BY_KEY: Dict[SettingKey, Setting] = {s.key: s for s in SETTINGS}


def get_setting(key: "SettingKey | str") -> Setting:
    """Look up a setting definition by enum member or canonical key.

    Raises:
        UnknownSettingError: If the key is not in the table
    """
    try:
        return SETTINGS_BY_KEY[SettingKey(key)]
    except ValueError:
        raise UnknownSettingError(str(key)) from None
