"""
Connection pooling on top of SQLAlchemy's ``QueuePool``.

``ConnectionPool`` accumulates the pool configuration (backing source or URL,
optional credentials, max size) and builds a ``PooledSource``. Each ``with_*``
call returns a new builder, so a partially configured builder can be shared
between threads without surprises.

    pooled = (
        ConnectionPool()
        .with_url("mysql://host/db")
        .with_credentials("app", "secret")
        .with_max_pool_size(5)
        .build()
    )
    conn = pooled.get_connection()
    ...
    conn.close()  # back to the pool
    shutdown(pooled)
"""

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.pool import QueuePool

from dbkit.core.config import settings
from dbkit.core.dialects import Dialect
from dbkit.core.errors import ConfigurationError, DatabaseConnectionError

from .connect import connect_url, parse_url

_log = logging.getLogger(__name__)


@runtime_checkable
class ConnectionSource(Protocol):
    """Anything that can hand out DB-API connections (a "data source")."""

    def get_connection(
        self, user: str | None = None, password: str | None = None
    ) -> Any:
        """Return a DB-API connection, optionally authenticating as *user*."""


class PooledSource:
    """Connection source backed by a bounded pool of physical connections."""

    def __init__(self, pool: QueuePool, description: str) -> None:
        self._pool = pool
        self._description = description

    def get_connection(
        self, user: str | None = None, password: str | None = None
    ) -> Any:
        """
        Check a connection out of the pool. ``close()`` on it returns it to the pool.

        Credentials are fixed when the pool is built; passing different ones is an error.
        """
        if user is not None or password is not None:
            raise ConfigurationError(
                "Pooled sources use the credentials they were built with"
            )
        try:
            return self._pool.connect()
        except PoolTimeoutError as e:
            raise DatabaseConnectionError(
                f"Timed out waiting for a pooled connection to {self._description}: {e}"
            ) from e
        except DatabaseConnectionError:
            raise
        except Exception as e:
            raise DatabaseConnectionError(
                f"Pool could not open a connection to {self._description}: {e}"
            ) from e

    def close(self) -> None:
        """Close all pooled connections."""
        self._pool.dispose()
        _log.info("Connection pool for %s shut down", self._description)

    def stats(self) -> dict[str, int]:
        """Return pool statistics for monitoring."""
        return {
            "size": self._pool.size(),
            "checked_in": self._pool.checkedin(),
            "checked_out": self._pool.checkedout(),
            "overflow": self._pool.overflow(),
        }

    def __repr__(self) -> str:
        return f"PooledSource({self._description})"


@dataclass(frozen=True)
class ConnectionPool:
    """Pool configuration; ``build()`` turns it into a PooledSource."""

    source: ConnectionSource | None = None
    url: str | None = None
    dialect: Dialect | None = None
    user: str | None = None
    password: str | None = None
    max_pool_size: int | None = None

    def with_source(self, source: ConnectionSource) -> "ConnectionPool":
        """Pool connections from an already configured *source*."""
        return dataclasses.replace(self, source=source, url=None)

    def with_url(self, url: str) -> "ConnectionPool":
        """Pool connections opened directly from *url*."""
        return dataclasses.replace(self, url=url, source=None)

    def with_dialect(self, dialect: Dialect) -> "ConnectionPool":
        """Driver to use for URL mode. Inferred from the URL scheme when not set."""
        return dataclasses.replace(self, dialect=dialect)

    def with_credentials(self, user: str, password: str | None) -> "ConnectionPool":
        """
        Username/password used for every physical connection.

        Unnecessary if the source or URL already carries them.
        """
        return dataclasses.replace(self, user=user, password=password)

    def with_max_pool_size(self, max_pool_size: int) -> "ConnectionPool":
        return dataclasses.replace(self, max_pool_size=max_pool_size)

    @property
    def has_credentials(self) -> bool:
        return self.user is not None

    def build(self) -> PooledSource:
        """Build the pooled source. Raises ConfigurationError if neither source nor URL is set."""
        if self.source is None and self.url is None:
            raise ConfigurationError(
                "Either a source or a connection URL must be set to use a connection pool"
            )
        size = (
            self.max_pool_size
            if self.max_pool_size is not None
            else settings.DEFAULT_MAX_POOL_SIZE
        )
        if size < 1:
            raise ConfigurationError(f"max_pool_size must be positive, got {size}")

        if self.source is not None:
            creator, description = self._source_creator(self.source)
        else:
            creator, description = self._url_creator(self.url)  # type: ignore[arg-type]

        pool = QueuePool(
            creator,
            pool_size=size,
            max_overflow=0,
            timeout=settings.POOL_TIMEOUT,
            recycle=settings.POOL_RECYCLE,
            pre_ping=settings.POOL_PRE_PING,
        )
        _log.info("Connection pool for %s built (max_pool_size=%d)", description, size)
        return PooledSource(pool, description)

    def _source_creator(self, source: ConnectionSource) -> tuple[Any, str]:
        user, password = self.user, self.password

        if self.has_credentials:

            def creator() -> Any:
                return source.get_connection(user, password)

        else:

            def creator() -> Any:
                return source.get_connection()

        return creator, repr(source)

    def _url_creator(self, url: str) -> tuple[Any, str]:
        dialect = self.dialect or Dialect.from_url(url)
        user, password = self.user, self.password

        if self.has_credentials:

            def creator() -> Any:
                return connect_url(dialect, url, user, password)

        else:

            def creator() -> Any:
                return connect_url(dialect, url)

        safe_url = parse_url(url).render_as_string(hide_password=True)
        return creator, f"{dialect.display_name} ({safe_url})"

    @staticmethod
    def shutdown(pooled: PooledSource) -> None:
        """Shut down a pool built by ``build()``. Call once per pool."""
        pooled.close()


def shutdown(pooled: PooledSource) -> None:
    """Shut down a pool built by ``ConnectionPool.build()``."""
    ConnectionPool.shutdown(pooled)
