"""Root pytest configuration and shared fixtures."""

from __future__ import annotations

import socket
from pathlib import Path
from typing import Callable

import pytest

from mongod_subprocess import SubprocessConfig, resolve_config
from tests.helpers.fake_mongod import FakeMongod, write_fake_mongod

_MONGO_ENV_VARIABLES = (
    "MONGO_SUBPROCESS_ENABLED",
    "MONGOD_PATH",
    "MONGO_DB_PATH",
    "MONGO_PORT",
    "MONGO_LOG_PATH",
    "MONGO_WIREDTIGER_CACHE_SIZE_GB",
    "MONGO_STARTUP_TIMEOUT_SECONDS",
    "MONGO_SHUTDOWN_GRACE_SECONDS",
    "MONGO_FORCE_KILL_TIMEOUT_SECONDS",
)


@pytest.fixture(autouse=True)
def _clean_mongo_env(monkeypatch):
    """Keep the developer's MONGO_* settings out of the tests."""
    for name in _MONGO_ENV_VARIABLES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def free_port() -> int:
    """Return a loopback port that was free a moment ago."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def fake_mongod(tmp_path: Path) -> Callable[[str], FakeMongod]:
    """Provide a factory writing fake mongod scripts into tmp_path."""

    def factory(behavior: str) -> FakeMongod:
        return write_fake_mongod(tmp_path / "bin", behavior)

    return factory


@pytest.fixture
def make_config(tmp_path: Path, free_port: int) -> Callable[..., SubprocessConfig]:
    """Build an enabled config pointing at a fake binary with short timeouts."""

    def factory(fake: FakeMongod, **overrides) -> SubprocessConfig:
        options = {
            "enabled": True,
            "mongod_path": str(fake.path),
            "db_path": tmp_path / "data" / "db",
            "log_path": tmp_path / "logs" / "mongodb.log",
            "port": free_port,
            "startup_timeout_seconds": 10.0,
            "shutdown_grace_seconds": 2.0,
            "force_kill_timeout_seconds": 2.0,
        }
        options.update(overrides)
        return resolve_config(options)

    return factory
