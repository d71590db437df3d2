# Public ephemeral database API exports
from .settings import EphemeralDBSettings, get_ephemeral_db_settings
from .exceptions import (
    EphemeralDBError,
    DatabaseConnectionError,
    DatabaseCreationError,
    MigrationError,
    TeardownError,
    PoolConfigurationError,
    DatabaseDisposedError,
)
from .identity import generate_database_name, quote_ident
from .urls import build_server_url, build_database_url, to_driver_url, with_database
from .bridge import block_on
from .connection import aconnect
from .admin import database_exists, count_backends
from .migrations import MigrationSet, default_migrations, arun_migrations
from .pool import ConnectionPool
from .lifecycle import DatabaseState, EphemeralDatabase, ephemeral_database
from .base import Base, TimestampMixin
from .logging import setup_logging

__all__ = [
    "EphemeralDBSettings",
    "get_ephemeral_db_settings",
    "EphemeralDBError",
    "DatabaseConnectionError",
    "DatabaseCreationError",
    "MigrationError",
    "TeardownError",
    "PoolConfigurationError",
    "DatabaseDisposedError",
    "generate_database_name",
    "quote_ident",
    "build_server_url",
    "build_database_url",
    "to_driver_url",
    "with_database",
    "block_on",
    "aconnect",
    "database_exists",
    "count_backends",
    "MigrationSet",
    "default_migrations",
    "arun_migrations",
    "ConnectionPool",
    "DatabaseState",
    "EphemeralDatabase",
    "ephemeral_database",
    "Base",
    "TimestampMixin",
    "setup_logging",
]
