"""
SqlDatabase: one logical database target, pooled or unpooled.

    db = SqlDatabase(Dialect.MYSQL, "mysql://host/db", "app", "secret")
    db.start_connection_pool(5)
    with db.connection() as conn:
        ...
    db.shutdown()

Configure the handle (including start_connection_pool) before sharing it
between threads; get_connection() and the release helpers are then safe to
call concurrently because the pool and driver do their own locking.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from dbkit.core.dialects import Dialect, register_driver
from dbkit.core.errors import DatabaseConnectionError, DriverInitializationError
from dbkit.core.pool import ConnectionPool, ConnectionSource, PooledSource, connect_url

_log = logging.getLogger(__name__)


def close_quietly(resource: Any) -> None:
    """Close *resource* (connection, cursor, ...) ignoring ``None`` and any error."""
    if resource is None:
        return
    try:
        resource.close()
    except Exception as e:
        _log.debug("Ignoring error while closing %r: %s", resource, e)


class SqlDatabase:
    """Represents a SQL database. Connections can be pooled if necessary."""

    def __init__(
        self,
        dialect: Dialect,
        target: ConnectionSource | str,
        user: str | None = None,
        password: str | None = None,
    ) -> None:
        """
        - target: a configured connection source (preferred) or a connection URL.
        - user / password: applied on every acquisition when *user* is given.

        URL mode registers the dialect's driver immediately. A failure is
        logged and kept; it resurfaces as DatabaseConnectionError on the first
        get_connection() that still cannot load the driver.
        """
        self._dialect = dialect
        self._user = user
        self._password = password
        self._pooled = False
        self._driver_error: DriverInitializationError | None = None
        if isinstance(target, str):
            self._source: ConnectionSource | None = None
            self._url: str | None = target
            self._driver_error = register_driver(dialect)
        else:
            self._source = target
            self._url = None

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    @property
    def url(self) -> str | None:
        return self._url

    @property
    def driver_error(self) -> DriverInitializationError | None:
        """Driver registration failure recorded at construction, if any."""
        return self._driver_error

    @property
    def is_connection_pooled(self) -> bool:
        return self._pooled

    @property
    def _has_credentials(self) -> bool:
        return self._user is not None

    def get_connection(self) -> Any:
        """
        Get a connection to this database.

        Raises DatabaseConnectionError if no connection can be supplied.
        """
        if self._pooled:
            # credentials are baked into the pool
            return self._source.get_connection()  # type: ignore[union-attr]
        if self._source is not None:
            try:
                if self._has_credentials:
                    return self._source.get_connection(self._user, self._password)
                return self._source.get_connection()
            except DatabaseConnectionError:
                raise
            except Exception as e:
                raise DatabaseConnectionError(
                    f"Cannot get a connection to {self._dialect.display_name}: {e}"
                ) from e
        if self._has_credentials:
            return connect_url(self._dialect, self._url, self._user, self._password)  # type: ignore[arg-type]
        return connect_url(self._dialect, self._url)  # type: ignore[arg-type]

    @contextmanager
    def connection(self) -> Iterator[Any]:
        """
        Scoped acquisition:

            with db.connection() as conn:
                ...

        Rolls back on error (best-effort) and always releases the connection.
        """
        conn = self.get_connection()
        try:
            yield conn
        except BaseException:
            try:
                conn.rollback()
            except Exception as e:
                _log.debug("Rollback failed while releasing connection: %s", e)
            raise
        finally:
            self.return_connection(conn)

    def start_connection_pool(self, max_pool_size: int | None = None) -> None:
        """
        Start a connection pool for this database.

        Call at most once, before the handle is used concurrently; a second
        call builds a new pool and leaves the first one open.
        """
        builder = ConnectionPool(dialect=self._dialect)
        if self._source is not None:
            builder = builder.with_source(self._source)
        else:
            builder = builder.with_url(self._url)  # type: ignore[arg-type]
        if self._has_credentials:
            builder = builder.with_credentials(self._user, self._password)  # type: ignore[arg-type]
        if max_pool_size is not None:
            builder = builder.with_max_pool_size(max_pool_size)
        self._source = builder.build()
        self._pooled = True

    def shutdown(self) -> None:
        """Shut down the connection pool. No-op if no pool was started."""
        if self._pooled and isinstance(self._source, PooledSource):
            ConnectionPool.shutdown(self._source)

    def pool_stats(self) -> dict[str, int] | None:
        """Pool statistics, or None when not pooled."""
        if self._pooled and isinstance(self._source, PooledSource):
            return self._source.stats()
        return None

    # ------------------------------------------------------------------
    # Release helpers (never raise)
    # ------------------------------------------------------------------

    @staticmethod
    def return_connection(connection: Any) -> None:
        """Return *connection* to its pool (or close it when unpooled)."""
        close_quietly(connection)

    @staticmethod
    def close_statement(statement: Any) -> None:
        """Close a cursor used to execute a statement, squelching any errors."""
        close_quietly(statement)

    @staticmethod
    def close_result_set(result_set: Any) -> None:
        """Close a cursor holding a result set, squelching any errors."""
        close_quietly(result_set)

    @staticmethod
    def release(
        connection: Any = None, statement: Any = None, result_set: Any = None
    ) -> None:
        """Close the result set, then the statement, then return the connection. Any may be None."""
        close_quietly(result_set)
        close_quietly(statement)
        close_quietly(connection)

    def __repr__(self) -> str:
        mode = "url" if self._url is not None else "source"
        if self._pooled:
            mode = f"pooled({mode})"
        return f"SqlDatabase({self._dialect.value}, {mode})"
