"""Unit tests for core.config."""

import pytest

from dbkit.core.config import Settings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "DBKIT_DEFAULT_MAX_POOL_SIZE",
        "DBKIT_POOL_TIMEOUT",
        "DBKIT_POOL_RECYCLE",
        "DBKIT_POOL_PRE_PING",
        "DBKIT_CONNECT_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)
    s = Settings(_env_file=None)
    assert s.DEFAULT_MAX_POOL_SIZE == 10
    assert s.POOL_TIMEOUT == 30.0
    assert s.POOL_RECYCLE == -1
    assert s.POOL_PRE_PING is False
    assert s.CONNECT_TIMEOUT == 10


def test_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    """DBKIT_-prefixed environment variables override defaults."""
    monkeypatch.setenv("DBKIT_DEFAULT_MAX_POOL_SIZE", "3")
    monkeypatch.setenv("DBKIT_POOL_PRE_PING", "true")
    s = Settings(_env_file=None)
    assert s.DEFAULT_MAX_POOL_SIZE == 3
    assert s.POOL_PRE_PING is True


def test_empty_env_ignored(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DBKIT_CONNECT_TIMEOUT", "")
    s = Settings(_env_file=None)
    assert s.CONNECT_TIMEOUT == 10
