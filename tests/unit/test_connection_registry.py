from __future__ import annotations

from contextlib import AbstractContextManager
from pathlib import Path

import pytest
from sqlalchemy import inspect, text
from sqlalchemy.exc import OperationalError

from rowcache.infrastructure.connection import ConnectionRegistry, verify_engine

FAILURES_BEFORE_SUCCESS = 2
RETRY_ATTEMPTS = 3


class _FakeConnection(AbstractContextManager["_FakeConnection"]):
    def execute(self, statement) -> None:
        del statement

    def __exit__(self, *exc_info) -> None:
        return None


class _FlakyEngine:
    """Engine stand-in whose first connects fail like a locked database."""

    def __init__(self, failures: int) -> None:
        self.failures = failures
        self.connect_calls = 0

    def connect(self) -> _FakeConnection:
        self.connect_calls += 1
        if self.connect_calls <= self.failures:
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))
        return _FakeConnection()


def test_bind_memory_database_is_transient() -> None:
    registry = ConnectionRegistry()

    bound = registry.bind("app.Planet", ":memory:")

    assert bound.transient
    assert bound.database_name == ":memory:"
    assert registry.get("app.Planet") is bound
    assert registry.config("app.Planet") == {"driver": "sqlite", "database": ":memory:"}
    assert "app.Planet" in registry
    registry.reset()


def test_memory_database_keeps_state_across_connections() -> None:
    registry = ConnectionRegistry()
    engine = registry.bind("app.Planet", ":memory:").engine

    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE planets (id INTEGER PRIMARY KEY)"))

    assert inspect(engine).has_table("planets")
    registry.reset()


def test_bind_file_database(tmp_path: Path) -> None:
    registry = ConnectionRegistry()
    path = tmp_path / "rowcache-planet.sqlite"

    bound = registry.bind("app.Planet", str(path))

    assert not bound.transient
    assert bound.database_name == str(path)
    assert path.exists()
    registry.reset()


def test_rebinding_replaces_previous_connection() -> None:
    registry = ConnectionRegistry()
    first = registry.bind("app.Planet", ":memory:")

    second = registry.bind("app.Planet", ":memory:")

    assert registry.get("app.Planet") is second
    assert second is not first
    assert len(registry) == 1
    registry.reset()


def test_forget_and_reset_clear_bindings() -> None:
    registry = ConnectionRegistry()
    registry.bind("app.Planet", ":memory:")
    registry.bind("app.Moon", ":memory:")

    registry.forget("app.Planet")
    assert list(registry) == ["app.Moon"]
    assert registry.config("app.Planet") is None

    registry.reset()
    assert len(registry) == 0
    assert registry.keys() == []


def test_unreachable_database_is_not_registered(tmp_path: Path) -> None:
    registry = ConnectionRegistry()
    path = tmp_path / "missing-dir" / "rowcache-planet.sqlite"

    with pytest.raises(OperationalError):
        registry.bind("app.Planet", str(path))

    assert "app.Planet" not in registry


def test_verify_engine_retries_transient_lock() -> None:
    engine = _FlakyEngine(failures=FAILURES_BEFORE_SUCCESS)

    verify_engine(engine)

    assert engine.connect_calls == FAILURES_BEFORE_SUCCESS + 1


def test_verify_engine_gives_up_after_attempts() -> None:
    engine = _FlakyEngine(failures=RETRY_ATTEMPTS + 1)

    with pytest.raises(OperationalError):
        verify_engine(engine)

    assert engine.connect_calls == RETRY_ATTEMPTS
