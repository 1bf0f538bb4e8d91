"""Shared configuration helpers."""

from .errors import ConfigurationError
from .runtime import env_bool, env_float, env_int, env_str, parse_bool

__all__ = [
    "ConfigurationError",
    "env_bool",
    "env_float",
    "env_int",
    "env_str",
    "parse_bool",
]
