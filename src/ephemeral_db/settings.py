from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .identity import DEFAULT_NAME_PREFIX
from .urls import DEFAULT_DRIVER, DEFAULT_SCHEME


class EphemeralDBSettings(BaseSettings):
    """
    Server coordinates and pool tuning for ephemeral test databases.

    Env support:
      - EPHEMERAL_DB_HOST, EPHEMERAL_DB_PORT, EPHEMERAL_DB_USER, EPHEMERAL_DB_PASSWORD
      - EPHEMERAL_DB_MAINTENANCE_DATABASE when the server endpoint has no
        database named after the user (e.g. "postgres")
      - EPHEMERAL_DB_POOL_SIZE, EPHEMERAL_DB_MAX_OVERFLOW, EPHEMERAL_DB_POOL_TIMEOUT, ...
    """

    host: str = Field(default="localhost")
    port: int = Field(default=5432, ge=1, le=65535)
    user: str = Field(default="postgres")
    password: str = Field(default="")

    scheme: str = Field(default=DEFAULT_SCHEME)
    driver: str = Field(default=DEFAULT_DRIVER)
    maintenance_database: Optional[str] = Field(default=None)
    name_prefix: str = Field(default=DEFAULT_NAME_PREFIX)
    connect_timeout: float = Field(default=10.0, gt=0)  # seconds

    pool_size: int = Field(default=5, ge=1)
    max_overflow: int = Field(default=10, ge=0)
    pool_timeout: float = Field(default=30.0, gt=0)  # bounded wait on exhaustion
    pool_recycle: Optional[int] = Field(default=None)  # seconds; None -> 1800
    statement_cache_size: int = Field(default=100, ge=0)
    echo: bool = Field(default=False)

    # used by setup_logging()
    log_level: str = Field(default="INFO")
    log_format: Literal["plain", "json"] = Field(default="plain")

    model_config = SettingsConfigDict(
        env_prefix="EPHEMERAL_DB_",
        env_file=".env",
        extra="ignore",
    )


@lru_cache
def get_ephemeral_db_settings(**kwargs) -> EphemeralDBSettings:
    # Only include kwargs that are not None, so defaults in EphemeralDBSettings are used
    filtered = {k: v for k, v in kwargs.items() if v is not None}
    return EphemeralDBSettings(**filtered)
