"""Environment-backed readers for the ``MONGO_*`` settings."""

from __future__ import annotations

import os
from typing import Any, Callable, TypeVar

from .errors import ConfigurationError

_TRUE_VALUES = {"1", "true", "t", "yes", "y", "on"}
_FALSE_VALUES = {"0", "false", "f", "no", "n", "off"}

_T = TypeVar("_T")


def parse_bool(name: str, value: Any) -> bool:
    """
    Interpret a flag given either as a real ``bool`` or as a boolean word.

    Strings are matched case-insensitively against ``1/true/yes/on`` and
    ``0/false/no/off``. Anything else, including other truthy objects, is
    rejected rather than guessed at.

    Raises:
        ConfigurationError: If ``value`` is neither a bool nor a boolean word
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
    raise ConfigurationError.invalid_value(
        name, value, f"Expected a boolean (allowed: {sorted(_TRUE_VALUES | _FALSE_VALUES)})"
    )


def env_str(name: str, or_value: str | None = None) -> str | None:
    """Fetch a stripped environment variable; unset or blank yields ``or_value``."""
    value = os.getenv(name)
    if value is None or not value.strip():
        return or_value
    return value.strip()


def _env_converted(name: str, or_value: _T | None, convert: Callable[[str], _T], expected: str) -> _T | None:
    raw = env_str(name)
    if raw is None:
        return or_value
    try:
        return convert(raw)
    except ValueError as exc:
        raise ConfigurationError.invalid_format(name, raw, expected) from exc


def env_int(name: str, or_value: int | None = None) -> int | None:
    """Fetch an environment variable and coerce it to ``int``."""
    return _env_converted(name, or_value, int, "an integer")


def env_float(name: str, or_value: float | None = None) -> float | None:
    """Fetch an environment variable and coerce it to ``float``."""
    return _env_converted(name, or_value, float, "a number")


def env_bool(name: str, or_value: bool | None = None) -> bool | None:
    raw = env_str(name)
    if raw is None:
        return or_value
    return parse_bool(name, raw)


__all__ = [
    "ConfigurationError",
    "env_bool",
    "env_float",
    "env_int",
    "env_str",
    "parse_bool",
]
