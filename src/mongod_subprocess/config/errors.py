"""Exception types for subprocess configuration."""

from __future__ import annotations

from typing import Any, Iterable


class ConfigurationError(RuntimeError):
    """Raised when a subprocess option or ``MONGO_*`` variable is malformed."""

    @classmethod
    def invalid_format(cls, name: str, raw: str, expected: str) -> "ConfigurationError":
        """Text that could not be parsed, e.g. ``MONGO_PORT=abc``."""
        return cls(f"{name} has invalid format (received {raw!r}). Expected {expected}")

    @classmethod
    def invalid_value(cls, name: str, value: Any, reason: str) -> "ConfigurationError":
        """A parsed value outside the accepted range or type."""
        return cls(f"Invalid value for {name}: {value!r}. {reason}")

    @classmethod
    def unknown_options(cls, names: Iterable[str]) -> "ConfigurationError":
        return cls(f"Unknown subprocess option(s): {', '.join(sorted(names))}")


__all__ = ["ConfigurationError"]
