"""
SQLite connection provisioning for rowcache.

`ConnectionRegistry` binds each entity identity to one SQLAlchemy engine,
either on a cache file or on a private in-memory database. The registry is
populated on first bind and emptied by `reset()`; the connection
configuration is registered under the same key so lookups (validation rules,
the CLI) can resolve an entity's database by name.

Opening a cache file is retried with tenacity: another process may briefly
hold the write lock while it materializes the same artifact.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import StaticPool
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from rowcache.cache.freshness import MEMORY_DATABASE
from rowcache.utils.logging import get_logger

log = get_logger(__name__)

SQLITE_DRIVER = "sqlite"


@dataclass
class BoundConnection:
    """An entity's provisioned database."""

    key: str
    database: str
    engine: Engine
    config: Dict[str, str] = field(default_factory=dict)

    @property
    def transient(self) -> bool:
        return self.database == MEMORY_DATABASE

    @property
    def database_name(self) -> str:
        return self.database

    def dispose(self) -> None:
        self.engine.dispose()


def connection_config(database: str) -> Dict[str, str]:
    return {"driver": SQLITE_DRIVER, "database": database}


def create_sqlite_engine(database: str) -> Engine:
    """
    Engine for a cache file path or for `:memory:`.

    In-memory databases are per-connection in SQLite, so the transient store
    pins a single shared connection with StaticPool.
    """
    if database == MEMORY_DATABASE:
        return create_engine(
            "sqlite://",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    return create_engine(f"sqlite:///{database}")


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
    retry=retry_if_exception_type(OperationalError),
    reraise=True,
)
def verify_engine(engine: Engine) -> None:
    """
    Open a connection and run a trivial query, retrying transient failures.

    Raises
    ------
    sqlalchemy.exc.OperationalError
        If the database stays unreachable after all retry attempts.
    """
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))


class ConnectionRegistry:
    """
    Mapping from entity identity to its bound connection.

    One binding per entity per registry; `bind()` on an existing key replaces
    (and disposes) the previous engine.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._connections: Dict[str, BoundConnection] = {}
        self._configs: Dict[str, Dict[str, str]] = {}

    def bind(self, key: str, database: str) -> BoundConnection:
        """
        Bind `key` to a SQLite database (file path or `:memory:`).

        Raises
        ------
        sqlalchemy.exc.OperationalError
            If the database cannot be opened after retries. The engine is
            disposed and nothing is registered.
        """
        engine = create_sqlite_engine(database)
        try:
            verify_engine(engine)
        except OperationalError:
            engine.dispose()
            raise

        config = connection_config(database)
        bound = BoundConnection(key=key, database=database, engine=engine, config=config)
        with self._lock:
            previous = self._connections.get(key)
            self._connections[key] = bound
            self._configs[key] = config
        if previous is not None:
            previous.dispose()
        log.debug("Bound connection", extra={"key": key, "database": database})
        return bound

    def get(self, key: str) -> Optional[BoundConnection]:
        with self._lock:
            return self._connections.get(key)

    def config(self, key: str) -> Optional[Dict[str, str]]:
        with self._lock:
            config = self._configs.get(key)
            return dict(config) if config is not None else None

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._connections)

    def forget(self, key: str) -> None:
        with self._lock:
            bound = self._connections.pop(key, None)
            self._configs.pop(key, None)
        if bound is not None:
            bound.dispose()

    def reset(self) -> None:
        """Dispose every engine and clear the registry."""
        with self._lock:
            bindings = list(self._connections.values())
            self._connections.clear()
            self._configs.clear()
        for bound in bindings:
            bound.dispose()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._connections

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)


__all__ = [
    "BoundConnection",
    "ConnectionRegistry",
    "SQLITE_DRIVER",
    "connection_config",
    "create_sqlite_engine",
    "verify_engine",
]
