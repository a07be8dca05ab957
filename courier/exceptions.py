"""Error types raised by the configuration core."""

from typing import Any


class ConfigurationError(Exception):
    """Base class for configuration errors."""


class InvalidSettingValueError(ConfigurationError, ValueError):
    """A setting source supplied a value that cannot be coerced to its type."""

    def __init__(self, key: str, value: Any, source: str, expected: str):
        self.key = key
        self.value = value
        self.source = source
        self.expected = expected
        super().__init__(
            f"Invalid value {value!r} for setting '{key}' from {source}: expected {expected}"
        )


class UnknownSettingError(ConfigurationError, KeyError):
    """The requested key is not part of the settings table."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(key)

    def __str__(self) -> str:
        return f"Unknown setting: {self.key!r}"


class InvalidAddressError(ConfigurationError, ValueError):
    """Text could not be parsed as an email address."""


class StoreError(ConfigurationError):
    """A pluggable store could not be provided."""


class UnknownStoreTypeError(StoreError, LookupError):
    """No factory is registered under the requested store type name."""


class StoreTypeMismatchError(StoreError, TypeError):
    """The factory produced an object lacking the expected store capability."""


class StoreConstructionError(StoreError):
    """The factory raised while constructing a store."""
