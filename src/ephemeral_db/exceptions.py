from __future__ import annotations


class EphemeralDBError(Exception):
    """Base class for every provisioning and teardown failure."""


class DatabaseConnectionError(EphemeralDBError):
    """The server could not be reached or refused the credentials."""

    def __init__(self, url: str, reason: str | None = None):
        msg = f"Error connecting to {url}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)
        self.url = url


class DatabaseCreationError(EphemeralDBError):
    """CREATE DATABASE failed (name collision, missing privilege, ...)."""

    def __init__(self, name: str):
        super().__init__(f"Failed to create test database {name!r}")
        self.name = name


class MigrationError(EphemeralDBError):
    """Reverting or applying the migration set failed."""


class TeardownError(EphemeralDBError):
    """Terminating backends or dropping the database failed; the database leaked."""

    def __init__(self, name: str, step: str):
        super().__init__(f"Error while dropping database {name!r} ({step})")
        self.name = name
        self.step = step


class PoolConfigurationError(EphemeralDBError):
    pass


class DatabaseDisposedError(EphemeralDBError):
    """The instance was already torn down; disposal runs exactly once."""


__all__ = [
    "EphemeralDBError",
    "DatabaseConnectionError",
    "DatabaseCreationError",
    "MigrationError",
    "TeardownError",
    "PoolConfigurationError",
    "DatabaseDisposedError",
]
