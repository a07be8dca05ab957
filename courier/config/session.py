"""Derivation of the SMTP session configuration from delivery settings."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional

from loguru import logger

from ..logging_setup import is_debug_enabled

MAIL_SMTP_HOST = "smtp.host"
MAIL_SMTP_LOCALHOST = "smtp.localhost"
MAIL_MIME_CHARSET = "mime.charset"
MAIL_SMTP_CONNECTIONTIMEOUT = "smtp.connectiontimeout"
MAIL_SMTP_TIMEOUT = "smtp.timeout"
MAIL_DEBUG = "debug"


@dataclass(frozen=True)
class MailSession:
    """Immutable set of transport properties handed to the SMTP sender."""

    properties: Mapping[str, Any] = field(default_factory=dict)
    debug: bool = False

    def __post_init__(self):
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

    def get(self, key: str, default: Any = None) -> Any:
        """Get a session property."""
        if key == MAIL_DEBUG:
            return self.debug
        return self.properties.get(key, default)

    def __getitem__(self, key: str) -> Any:
        if key == MAIL_DEBUG:
            return self.debug
        return self.properties[key]

    def to_dict(self) -> dict:
        """Convert session to dictionary."""
        data = dict(self.properties)
        data[MAIL_DEBUG] = self.debug
        return data


class SessionSynthesizer:
    """Builds a new MailSession from the session-affecting settings.

    Wire-level debugging is only switched on when the debug setting is set
    and the logging setup reports DEBUG as enabled.
    """

    def __init__(self, debug_enabled: Optional[Callable[[], bool]] = None):
        self._debug_enabled = debug_enabled or is_debug_enabled

    def build(self, hostname: str, encoding: str, timeout: int, debug: bool) -> MailSession:
        """Create a session for the given settings."""
        properties = {
            MAIL_SMTP_HOST: hostname,
            MAIL_SMTP_LOCALHOST: hostname,
            MAIL_MIME_CHARSET: encoding,
            MAIL_SMTP_CONNECTIONTIMEOUT: timeout,
            MAIL_SMTP_TIMEOUT: timeout,
        }
        session = MailSession(properties=properties, debug=bool(debug and self._debug_enabled()))
        logger.debug(f"Built mail session for host {hostname} (debug={session.debug})")
        return session
