"""
Direct connections and connection pools for the supported dialects.

connect_url opens an unpooled DB-API connection; ConnectionPool builds a
QueuePool-backed PooledSource from a backing source or a URL.
"""

from .connect import connect_url, parse_url
from .manager import ConnectionPool, ConnectionSource, PooledSource, shutdown

__all__ = [
    "connect_url",
    "parse_url",
    "ConnectionPool",
    "ConnectionSource",
    "PooledSource",
    "shutdown",
]
