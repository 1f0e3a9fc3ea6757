"""
dbkit: pooled connection sources, dialect-aware database handles and
underscore-tolerant row mapping.
"""

from dbkit.core.database import SqlDatabase, close_quietly
from dbkit.core.dialects import Dialect, load_driver, register_driver
from dbkit.core.errors import (
    ConfigurationError,
    DatabaseConnectionError,
    DbkitError,
    DriverInitializationError,
)
from dbkit.core.pool import ConnectionPool, ConnectionSource, PooledSource, shutdown
from dbkit.core.row_mapper import (
    PROPERTY_NOT_FOUND,
    CursorMetadata,
    field_names,
    map_columns_to_fields,
    to_objects,
)

__all__ = [
    "SqlDatabase",
    "close_quietly",
    "Dialect",
    "load_driver",
    "register_driver",
    "ConfigurationError",
    "DatabaseConnectionError",
    "DbkitError",
    "DriverInitializationError",
    "ConnectionPool",
    "ConnectionSource",
    "PooledSource",
    "shutdown",
    "PROPERTY_NOT_FOUND",
    "CursorMetadata",
    "field_names",
    "map_columns_to_fields",
    "to_objects",
]
