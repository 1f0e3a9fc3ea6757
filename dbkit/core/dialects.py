"""
Supported database dialects and their DB-API drivers.

The set of dialects is closed. Each member carries a display name, the
importable DB-API module that acts as its driver, and the SQLAlchemy
``drivername`` describing the equivalent data source.

Importing the driver module is the driver "registration": it has to succeed
before a URL-mode connection can be opened.
"""

import importlib
import logging
from enum import Enum
from types import ModuleType
from typing import NamedTuple

from dbkit.core.errors import ConfigurationError, DriverInitializationError

_log = logging.getLogger(__name__)


class DialectInfo(NamedTuple):
    display_name: str
    driver: str  # DB-API module to import
    data_source: str  # SQLAlchemy drivername, informational


class Dialect(str, Enum):
    """Supported database product types."""

    MSSQL = "mssql"
    MYSQL = "mysql"
    POSTGRES = "postgres"
    TRINO = "trino"

    @property
    def info(self) -> DialectInfo:
        return _DIALECTS[self]

    @property
    def display_name(self) -> str:
        return self.info.display_name

    @property
    def driver(self) -> str:
        return self.info.driver

    @property
    def data_source(self) -> str:
        return self.info.data_source

    @classmethod
    def from_url(cls, url: str) -> "Dialect":
        """Infer the dialect from a connection URL scheme (``jdbc:`` prefix allowed)."""
        scheme = strip_jdbc_prefix(url).split("://", 1)[0]
        # "mysql+pymysql" -> "mysql"
        backend = scheme.split("+", 1)[0].lower()
        try:
            return _SCHEMES[backend]
        except KeyError:
            raise ConfigurationError(
                f"Cannot infer dialect from URL scheme {scheme!r}"
            ) from None


_DIALECTS: dict[Dialect, DialectInfo] = {
    Dialect.MSSQL: DialectInfo("Microsoft SQL Server", "pymssql", "mssql+pymssql"),
    Dialect.MYSQL: DialectInfo("MySQL", "pymysql", "mysql+pymysql"),
    Dialect.POSTGRES: DialectInfo("PostgreSQL", "psycopg", "postgresql+psycopg"),
    Dialect.TRINO: DialectInfo("Trino", "trino.dbapi", "trino"),
}

_SCHEMES: dict[str, Dialect] = {
    "mssql": Dialect.MSSQL,
    "sqlserver": Dialect.MSSQL,
    "mysql": Dialect.MYSQL,
    "postgres": Dialect.POSTGRES,
    "postgresql": Dialect.POSTGRES,
    "trino": Dialect.TRINO,
}


def strip_jdbc_prefix(url: str) -> str:
    return url[len("jdbc:"):] if url.lower().startswith("jdbc:") else url


def load_driver(dialect: Dialect) -> ModuleType:
    """Import and return the DB-API module for *dialect*.

    Raises DriverInitializationError if the module cannot be imported.
    """
    try:
        return importlib.import_module(dialect.driver)
    except ImportError as e:
        raise DriverInitializationError(
            f"Unable to initialize driver {dialect.driver!r} for {dialect.display_name}: {e}"
        ) from e


def register_driver(dialect: Dialect) -> DriverInitializationError | None:
    """
    Register (import) the driver for *dialect*.

    Never raises: the failure is logged and returned so the caller can defer it
    to the first connection attempt.
    """
    try:
        load_driver(dialect)
    except DriverInitializationError as e:
        _log.error("%s", e, exc_info=e.__cause__)
        return e
    _log.debug("Driver %s registered for %s", dialect.driver, dialect.display_name)
    return None
