"""Resolution of setting values from prioritized sources.

Sources, first match wins:
1. Explicit properties, canonical key
2. Process-wide overrides, each legacy key in declared order
3. Process-wide overrides, canonical key
4. Compiled-in default
"""

import os
import re
from email.errors import HeaderParseError
from email.headerregistry import Address
from email.utils import getaddresses
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import dotenv
from loguru import logger

from ..exceptions import InvalidAddressError, InvalidSettingValueError
from .settings import INTEGER_BOUNDS, SETTINGS, Setting, SettingKey, SettingType

_INTEGER = re.compile(r"^[+-]?\d+$")
_TRUE = frozenset(["true", "1", "yes", "on"])
_FALSE = frozenset(["false", "0", "no", "off"])

_MISSING = object()


def coerce(setting: Setting, value: Any, source: str = "value") -> Any:
    """Convert a raw value to the setting's declared type.

    Text is parsed; values already of the declared type pass through.

    Raises:
        InvalidSettingValueError: If the value cannot be converted
    """
    if value is None:
        if setting.type == SettingType.ADDRESS:
            return None
        raise InvalidSettingValueError(setting.name, value, source, "a value")

    if setting.type in INTEGER_BOUNDS:
        number = None
        if isinstance(value, int) and not isinstance(value, bool):
            number = value
        elif isinstance(value, str) and _INTEGER.match(value.strip()):
            number = int(value.strip())
        low, high = INTEGER_BOUNDS[setting.type]
        if number is None or not low <= number <= high:
            raise InvalidSettingValueError(
                setting.name, value, source, f"an integer between {low} and {high}"
            )
        return number

    if setting.type == SettingType.BOOL:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE:
                return True
            if lowered in _FALSE:
                return False
        raise InvalidSettingValueError(setting.name, value, source, "a boolean")

    # STRING, ADDRESS and TYPE_NAME are kept as text
    if not isinstance(value, str):
        raise InvalidSettingValueError(setting.name, value, source, "a string")
    return value


def lookup(
    setting: Setting,
    properties: Mapping[str, Any],
    overrides: Mapping[str, Any],
) -> Tuple[Any, Optional[str]]:
    """Find the raw value for a setting and the name of the source that had it.

    A key mapped to None counts as absent.

    Returns:
        (raw value, source description), or (None, None) when no source defines it
    """
    if properties.get(setting.name) is not None:
        return properties[setting.name], f"properties '{setting.name}'"
    for legacy_key in setting.legacy_keys:
        if overrides.get(legacy_key) is not None:
            return overrides[legacy_key], f"override '{legacy_key}'"
    if overrides.get(setting.name) is not None:
        return overrides[setting.name], f"override '{setting.name}'"
    return None, None


def resolve(
    setting: Setting,
    properties: Optional[Mapping[str, Any]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
    default: Any = _MISSING,
) -> Any:
    """Resolve the effective value of one setting.

    Args:
        setting: Setting definition
        properties: Explicit initialization properties
        overrides: Process-wide overrides, os.environ when omitted
        default: Replaces the compiled-in default when given

    Raises:
        InvalidSettingValueError: If the winning source holds a malformed value
    """
    properties = properties if properties is not None else {}
    overrides = overrides if overrides is not None else os.environ

    raw, source = lookup(setting, properties, overrides)
    if source is None:
        return setting.default if default is _MISSING else default
    logger.debug(f"Setting '{setting.name}' resolved from {source}")
    return coerce(setting, raw, source)


def resolve_all(
    properties: Optional[Mapping[str, Any]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> Dict[SettingKey, Any]:
    """Resolve every setting in table order.

    Settings declaring `default_from` default to the resolved value of the
    referenced setting.
    """
    resolved: Dict[SettingKey, Any] = {}
    for setting in SETTINGS:
        if setting.default_from is not None:
            resolved[setting.key] = resolve(
                setting, properties, overrides, default=resolved[setting.default_from]
            )
        else:
            resolved[setting.key] = resolve(setting, properties, overrides)
    return resolved


def load_properties(path: "str | Path") -> Dict[str, Optional[str]]:
    """Read a KEY=VALUE properties file without touching os.environ.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Properties file not found: {path}")
    values = dotenv.dotenv_values(path)
    logger.info(f"Loaded {len(values)} properties from {path}")
    # Keys without '=' come back as None; treat them as absent
    return {k: v for k, v in values.items() if v is not None}


def parse_address(text: str) -> Address:
    """Parse an email address, optionally with a display name.

    Raises:
        InvalidAddressError: If the text is not a single valid address
    """
    if not isinstance(text, str) or not text.strip():
        raise InvalidAddressError(f"Not an email address: {text!r}")

    addresses = getaddresses([text.strip()])
    if len(addresses) != 1:
        raise InvalidAddressError(f"Expected a single email address: {text!r}")
    display_name, addr_spec = addresses[0]
    if "@" not in addr_spec:
        raise InvalidAddressError(f"Not an email address: {text!r}")
    try:
        address = Address(display_name=display_name, addr_spec=addr_spec)
    except (ValueError, IndexError, HeaderParseError) as e:
        raise InvalidAddressError(f"Not an email address: {text!r}") from e
    if not address.username or not address.domain:
        raise InvalidAddressError(f"Not an email address: {text!r}")
    return address
