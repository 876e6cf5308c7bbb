"""Tests for environment settings."""

import pytest

from sshrun.config import Settings

SSHRUN_VARS = [
    "SSHRUN_HOST",
    "SSHRUN_PORT",
    "SSHRUN_USERNAME",
    "SSHRUN_PASSWORD",
    "SSHRUN_PRIVATE_KEY",
    "SSHRUN_KNOWN_HOSTS",
    "SSHRUN_STRICT_HOST_KEY_CHECKING",
    "SSHRUN_MAX_CHANNELS",
    "SSHRUN_LOG_LEVEL",
    "SSHRUN_LOG_COLORS",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in SSHRUN_VARS:
        monkeypatch.delenv(var, raising=False)


def test_defaults() -> None:
    settings = Settings.from_env()
    assert settings.host is None
    assert settings.port == 22
    assert settings.known_hosts is None
    assert settings.strict_host_key_checking is True
    assert settings.max_channels == 10
    assert settings.log_level == "INFO"
    assert settings.log_colors is True


def test_reads_connection_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SSHRUN_HOST", "db1")
    monkeypatch.setenv("SSHRUN_PORT", "2222")
    monkeypatch.setenv("SSHRUN_USERNAME", "admin")
    monkeypatch.setenv("SSHRUN_PASSWORD", "pw")
    monkeypatch.setenv("SSHRUN_PRIVATE_KEY", "~/.ssh/id_rsa")

    settings = Settings.from_env()

    assert settings.host == "db1"
    assert settings.port == 2222
    assert settings.username == "admin"
    assert settings.password == "pw"
    assert settings.private_key == "~/.ssh/id_rsa"
    assert "pw" not in repr(settings)


def test_invalid_int_falls_back(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SSHRUN_PORT", "ssh")
    assert Settings.from_env().port == 22


@pytest.mark.parametrize("value", ["0", "-3", "many"])
def test_max_channels_must_be_positive(monkeypatch: pytest.MonkeyPatch, value: str) -> None:
    monkeypatch.setenv("SSHRUN_MAX_CHANNELS", value)
    assert Settings.from_env().max_channels == 10


def test_bools_and_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SSHRUN_STRICT_HOST_KEY_CHECKING", "false")
    monkeypatch.setenv("SSHRUN_LOG_COLORS", "0")
    monkeypatch.setenv("SSHRUN_LOG_LEVEL", "debug")
    monkeypatch.setenv("SSHRUN_KNOWN_HOSTS", " none ")

    settings = Settings.from_env()

    assert settings.strict_host_key_checking is False
    assert settings.log_colors is False
    assert settings.log_level == "DEBUG"
    assert settings.known_hosts == "none"
