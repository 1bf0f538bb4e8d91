"""Resolve mongod subprocess settings into an immutable configuration."""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from .config import ConfigurationError, env_bool, env_float, env_int, env_str, parse_bool

LOOPBACK_HOST = "127.0.0.1"
DEFAULT_MONGOD_BINARY = "mongod"
DEFAULT_PORT = 27017
DEFAULT_DATA_DIRNAME = ".mongodb-data"
DEFAULT_LOG_RELATIVE_PATH = Path("logs") / "mongodb.log"
DEFAULT_STARTUP_TIMEOUT_SECONDS = 30.0
DEFAULT_SHUTDOWN_GRACE_SECONDS = 5.0
DEFAULT_FORCE_KILL_TIMEOUT_SECONDS = 5.0

_MAX_PORT = 65535

_ENV_VARIABLES = {
    "enabled": "MONGO_SUBPROCESS_ENABLED",
    "mongod_path": "MONGOD_PATH",
    "db_path": "MONGO_DB_PATH",
    "port": "MONGO_PORT",
    "log_path": "MONGO_LOG_PATH",
    "wired_tiger_cache_size_gb": "MONGO_WIREDTIGER_CACHE_SIZE_GB",
    "startup_timeout_seconds": "MONGO_STARTUP_TIMEOUT_SECONDS",
    "shutdown_grace_seconds": "MONGO_SHUTDOWN_GRACE_SECONDS",
    "force_kill_timeout_seconds": "MONGO_FORCE_KILL_TIMEOUT_SECONDS",
}


@dataclass(frozen=True)
class SubprocessConfig:
    """Fully populated settings for one supervised mongod process."""

    enabled: bool
    mongod_path: str
    db_path: Path
    port: int
    log_path: Path
    wired_tiger_cache_size_gb: Optional[float] = None
    startup_timeout_seconds: float = DEFAULT_STARTUP_TIMEOUT_SECONDS
    shutdown_grace_seconds: float = DEFAULT_SHUTDOWN_GRACE_SECONDS
    force_kill_timeout_seconds: float = DEFAULT_FORCE_KILL_TIMEOUT_SECONDS

    @property
    def connection_uri(self) -> str:
        return f"mongodb://{LOOPBACK_HOST}:{self.port}"


_OPTION_NAMES = frozenset(SubprocessConfig.__dataclass_fields__)


def resolve_config(partial: Optional[Mapping[str, Any]] = None, **overrides: Any) -> SubprocessConfig:
    """
    Merge caller-supplied settings with defaults.

    Options left out or set to ``None`` fall back to their defaults. The
    binary name is looked up on ``PATH``; when the lookup fails the bare name
    is kept so the spawn step reports the failure.

    Args:
        partial: Mapping of option name to value
        **overrides: Option values taking precedence over ``partial``

    Returns:
        Immutable SubprocessConfig

    Raises:
        ConfigurationError: If an option is unknown or structurally invalid
    """
    options: dict[str, Any] = dict(partial or {})
    options.update(overrides)

    unknown = set(options) - _OPTION_NAMES
    if unknown:
        raise ConfigurationError.unknown_options(unknown)

    cwd = Path.cwd()
    mongod_path = options.get("mongod_path") or DEFAULT_MONGOD_BINARY
    db_path = options.get("db_path") or cwd / DEFAULT_DATA_DIRNAME
    log_path = options.get("log_path") or cwd / DEFAULT_LOG_RELATIVE_PATH

    return SubprocessConfig(
        enabled=_coerce_enabled(options.get("enabled")),
        mongod_path=_resolve_binary(_reject_nul("mongod_path", str(mongod_path))),
        db_path=Path(_reject_nul("db_path", str(db_path))).expanduser(),
        port=_coerce_port(options.get("port")),
        log_path=Path(_reject_nul("log_path", str(log_path))).expanduser(),
        wired_tiger_cache_size_gb=_coerce_positive_float(
            "wired_tiger_cache_size_gb", options.get("wired_tiger_cache_size_gb"), None
        ),
        startup_timeout_seconds=_coerce_positive_float(
            "startup_timeout_seconds", options.get("startup_timeout_seconds"), DEFAULT_STARTUP_TIMEOUT_SECONDS
        ),
        shutdown_grace_seconds=_coerce_positive_float(
            "shutdown_grace_seconds", options.get("shutdown_grace_seconds"), DEFAULT_SHUTDOWN_GRACE_SECONDS
        ),
        force_kill_timeout_seconds=_coerce_positive_float(
            "force_kill_timeout_seconds", options.get("force_kill_timeout_seconds"), DEFAULT_FORCE_KILL_TIMEOUT_SECONDS
        ),
    )


def config_from_env(**overrides: Any) -> SubprocessConfig:
    """Build a SubprocessConfig from ``MONGO_*`` environment variables."""
    options: dict[str, Any] = {
        "enabled": env_bool(_ENV_VARIABLES["enabled"], or_value=False),
        "mongod_path": env_str(_ENV_VARIABLES["mongod_path"]),
        "db_path": env_str(_ENV_VARIABLES["db_path"]),
        "port": env_int(_ENV_VARIABLES["port"]),
        "log_path": env_str(_ENV_VARIABLES["log_path"]),
        "wired_tiger_cache_size_gb": env_float(_ENV_VARIABLES["wired_tiger_cache_size_gb"]),
        "startup_timeout_seconds": env_float(_ENV_VARIABLES["startup_timeout_seconds"]),
        "shutdown_grace_seconds": env_float(_ENV_VARIABLES["shutdown_grace_seconds"]),
        "force_kill_timeout_seconds": env_float(_ENV_VARIABLES["force_kill_timeout_seconds"]),
    }
    options.update(overrides)
    return resolve_config(options)


def _resolve_binary(name: str) -> str:
    located = shutil.which(name)
    return located if located else name


def _coerce_enabled(value: Any) -> bool:
    if value is None:
        return False
    return parse_bool("enabled", value)


def _reject_nul(name: str, value: str) -> str:
    # exec and path syscalls refuse NUL bytes
    if "\x00" in value:
        raise ConfigurationError.invalid_value(name, value, "Paths must not contain NUL bytes")
    return value


def _coerce_port(value: Any) -> int:
    if value is None:
        return DEFAULT_PORT
    if isinstance(value, bool):
        raise ConfigurationError.invalid_value("port", value, "Port must be an integer")
    try:
        port = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError.invalid_format("port", str(value), "an integer between 1 and 65535") from exc
    if isinstance(value, float) and value != port:
        raise ConfigurationError.invalid_value("port", value, "Port must be an integer")
    if not 0 < port <= _MAX_PORT:
        raise ConfigurationError.invalid_value("port", value, f"Port must be between 1 and {_MAX_PORT}")
    return port


def _coerce_positive_float(name: str, value: Any, default: Optional[float]) -> Optional[float]:
    if value is None:
        return default
    if isinstance(value, bool):
        raise ConfigurationError.invalid_value(name, value, "Expected a number")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError.invalid_format(name, str(value), "a positive number") from exc
    if number <= 0:
        raise ConfigurationError.invalid_value(name, value, "Must be greater than zero")
    return number


__all__ = [
    "DEFAULT_PORT",
    "LOOPBACK_HOST",
    "SubprocessConfig",
    "config_from_env",
    "resolve_config",
]
