from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

from mongod_subprocess import SubprocessConfig, config_from_env, resolve_config
from mongod_subprocess.config import ConfigurationError
from mongod_subprocess import subprocess_config


@pytest.fixture
def no_mongod_on_path(monkeypatch):
    monkeypatch.setattr(subprocess_config.shutil, "which", lambda name: None)


def test_defaults_are_fully_populated(monkeypatch, tmp_path, no_mongod_on_path):
    monkeypatch.chdir(tmp_path)

    config = resolve_config({"enabled": True})

    assert config.enabled is True
    assert config.mongod_path == "mongod"
    assert config.db_path == tmp_path / ".mongodb-data"
    assert config.port == 27017
    assert config.log_path == tmp_path / "logs" / "mongodb.log"
    assert config.wired_tiger_cache_size_gb is None
    assert config.startup_timeout_seconds == 30.0
    assert config.shutdown_grace_seconds == 5.0


def test_enabled_defaults_to_false(no_mongod_on_path):
    assert resolve_config().enabled is False


def test_binary_is_resolved_through_path(monkeypatch):
    monkeypatch.setattr(subprocess_config.shutil, "which", lambda name: f"/opt/mongo/bin/{name}")

    config = resolve_config(mongod_path="mongod-7.0")

    assert config.mongod_path == "/opt/mongo/bin/mongod-7.0"


def test_overrides_take_precedence_over_partial(no_mongod_on_path, tmp_path):
    config = resolve_config(
        {"port": 27018, "db_path": str(tmp_path / "a")},
        port="27019",
        wired_tiger_cache_size_gb=0.25,
    )

    assert config.port == 27019
    assert config.db_path == tmp_path / "a"
    assert config.wired_tiger_cache_size_gb == 0.25


def test_none_values_fall_back_to_defaults(no_mongod_on_path):
    config = resolve_config({"port": None, "mongod_path": None})

    assert config.port == 27017
    assert config.mongod_path == "mongod"


def test_config_is_immutable(no_mongod_on_path):
    config = resolve_config()

    with pytest.raises(FrozenInstanceError):
        config.port = 1  # type: ignore[misc]


@pytest.mark.parametrize("port", ["mongo", 0, 70000, -1, 27017.5, True])
def test_invalid_port_rejected(no_mongod_on_path, port):
    with pytest.raises(ConfigurationError):
        resolve_config(port=port)


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("wired_tiger_cache_size_gb", 0),
        ("wired_tiger_cache_size_gb", "lots"),
        ("startup_timeout_seconds", -5),
        ("shutdown_grace_seconds", 0),
    ],
)
def test_invalid_numbers_rejected(no_mongod_on_path, name, value):
    with pytest.raises(ConfigurationError):
        resolve_config({name: value})


def test_unknown_option_rejected(no_mongod_on_path):
    with pytest.raises(ConfigurationError, match="prot"):
        resolve_config({"prot": 1234})


def test_connection_uri_uses_loopback_and_port(no_mongod_on_path):
    config = resolve_config(port=28000)

    assert config.connection_uri == "mongodb://127.0.0.1:28000"


def test_config_from_env(monkeypatch, tmp_path, no_mongod_on_path):
    monkeypatch.setenv("MONGO_SUBPROCESS_ENABLED", "yes")
    monkeypatch.setenv("MONGO_PORT", "27100")
    monkeypatch.setenv("MONGO_DB_PATH", str(tmp_path / "db"))
    monkeypatch.setenv("MONGO_WIREDTIGER_CACHE_SIZE_GB", "1.5")
    monkeypatch.setenv("MONGO_STARTUP_TIMEOUT_SECONDS", "12")

    config = config_from_env()

    assert isinstance(config, SubprocessConfig)
    assert config.enabled is True
    assert config.port == 27100
    assert config.db_path == Path(tmp_path / "db")
    assert config.wired_tiger_cache_size_gb == 1.5
    assert config.startup_timeout_seconds == 12.0


def test_config_from_env_overrides_and_errors(monkeypatch, no_mongod_on_path):
    monkeypatch.setenv("MONGO_PORT", "not-a-port")
    with pytest.raises(ConfigurationError):
        config_from_env()

    monkeypatch.setenv("MONGO_PORT", "27101")
    config = config_from_env(enabled=True, port=27102)
    assert config.enabled is True
    assert config.port == 27102


@pytest.mark.parametrize(("value", "expected"), [("false", False), ("no", False), ("true", True), (False, False)])
def test_enabled_accepts_boolean_words(no_mongod_on_path, value, expected):
    assert resolve_config(enabled=value).enabled is expected


@pytest.mark.parametrize("value", ["disabled", 1, "", [False]])
def test_enabled_rejects_non_boolean_values(no_mongod_on_path, value):
    with pytest.raises(ConfigurationError, match="Invalid value for enabled"):
        resolve_config(enabled=value)


@pytest.mark.parametrize("name", ["mongod_path", "db_path", "log_path"])
def test_paths_with_nul_bytes_rejected(no_mongod_on_path, name):
    with pytest.raises(ConfigurationError, match=name):
        resolve_config({name: "bad\x00path"})


def test_force_kill_timeout_from_env(monkeypatch, no_mongod_on_path):
    monkeypatch.setenv("MONGO_FORCE_KILL_TIMEOUT_SECONDS", "7.5")
    monkeypatch.setenv("MONGO_SHUTDOWN_GRACE_SECONDS", "3")

    config = config_from_env()

    assert config.force_kill_timeout_seconds == 7.5
    assert config.shutdown_grace_seconds == 3.0
    assert resolve_config().force_kill_timeout_seconds == 5.0
