"""Typed errors raised by dbkit."""


class DbkitError(Exception):
    """Base class for all dbkit errors."""


class ConfigurationError(DbkitError, ValueError):
    """Raised when a pool or handle is configured inconsistently (e.g. no source and no URL)."""


class DatabaseConnectionError(DbkitError, ConnectionError):
    """Raised when the driver layer or the pool cannot supply a connection."""


class DriverInitializationError(DbkitError, ImportError):
    """A dialect's DB-API driver module could not be imported."""
