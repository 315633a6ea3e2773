"""
Settings value parsing.

Settings arrive as strings (shared repository tables, request bodies) or
as native TOML scalars; these helpers turn them into typed values.
"""

from typing import Any

from ...exceptions import InvalidSettingError

TRUE_STRINGS = {"1", "t", "T", "TRUE", "true", "True"}
FALSE_STRINGS = {"0", "f", "F", "FALSE", "false", "False"}


def parse_bool(value: Any, name: str = "value") -> bool:
    """
    Parse a boolean setting.

    Args:
        value: bool, or one of 1 t T TRUE true True 0 f F FALSE false False
        name: Setting name for error messages

    Returns:
        Parsed boolean

    Raises:
        InvalidSettingError: If the value is not a recognised boolean

    Examples:
        >>> parse_bool("T")
        True
        >>> parse_bool(False)
        False
    """
    if isinstance(value, bool):
        return value
    text = str(value)
    if text in TRUE_STRINGS:
        return True
    if text in FALSE_STRINGS:
        return False
    raise InvalidSettingError(f"Invalid boolean for '{name}': {value!r}")


def stringify(value: Any) -> str:
    """Render a TOML scalar as a settings string (booleans as true/false)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


__all__ = ["parse_bool", "stringify"]
