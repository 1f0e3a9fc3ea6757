"""
Settings for the pooling engine and driver layer.

Only tuning knobs live here. Connectivity (URL, backing source, credentials)
is always passed explicitly by the caller.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="DBKIT_",
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Pool size used when start_connection_pool() / ConnectionPool get no size
    DEFAULT_MAX_POOL_SIZE: int = 10
    # Seconds to wait for a free pooled connection before giving up
    POOL_TIMEOUT: float = 30.0
    # Recycle pooled connections older than this many seconds (-1 = never)
    POOL_RECYCLE: int = -1
    POOL_PRE_PING: bool = False
    # Seconds passed to the driver's connect/login timeout
    CONNECT_TIMEOUT: int = 10


settings = Settings()
