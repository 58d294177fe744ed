"""Database dialects: one class per engine (SQLite, MySQL, PostgreSQL, SQL Server)."""

from typing import Any

from ..errors import ConfigurationError
from .base import Dialect
from .sqlite import SqliteDialect
from .mysql import MysqlDialect
from .postgres import PostgresDialect
from .sqlserver import SqlserverDialect

_DIALECT_CLASSES: tuple[type[Dialect], ...] = (
    SqliteDialect,
    MysqlDialect,
    PostgresDialect,
    SqlserverDialect,
)

DEFAULT_QUOTE_CHARACTER = "`"


def get_dialect_for_scheme(scheme: str) -> Dialect:
    """Return a Dialect instance for the given URL scheme (e.g. 'sqlite', 'mysql')."""
    normalized = (scheme or "").split("+")[0].lower()
    for dialect_cls in _DIALECT_CLASSES:
        if normalized in dialect_cls.SUPPORTED_SCHEMA:
            return dialect_cls()
    raise ConfigurationError(f"Unsupported database scheme: {scheme}")


def get_dialect_for_connection(connection: Any) -> Dialect:
    """Return a Dialect instance for a raw DB-API connection, based on its driver module."""
    module = type(connection).__module__.split(".")[0]
    for dialect_cls in _DIALECT_CLASSES:
        if module in dialect_cls.DRIVER_MODULES:
            return dialect_cls()
    raise ConfigurationError(f"Unsupported database driver module: {module}")


def get_quote_character(driver_name: str) -> str:
    """Return the identifier quote character for a driver name (backtick when unknown)."""
    for dialect_cls in _DIALECT_CLASSES:
        if driver_name in dialect_cls.DRIVER_NAMES:
            return dialect_cls.QUOTE_CHARACTER
    return DEFAULT_QUOTE_CHARACTER


__all__ = [
    "Dialect",
    "SqliteDialect",
    "MysqlDialect",
    "PostgresDialect",
    "SqlserverDialect",
    "get_dialect_for_scheme",
    "get_dialect_for_connection",
    "get_quote_character",
]
