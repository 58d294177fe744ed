"""ormlet: a fluent SQL query builder and a minimal active-record ORM."""

from .query import Query, JoinKind
from .session import Session
from .row import Row
from .config import Settings
from .connection import Database, DatabaseHandle, open_database
from .context import Context, connect, get_context, table
from .model import Model, ModelSession
from .errors import (
    OrmletError,
    BuildError,
    ConfigurationError,
    PersistenceError,
    PreparationError,
    ExecutionError,
)

__all__ = [
    "Query",
    "JoinKind",
    "Session",
    "Row",
    "Settings",
    "Database",
    "DatabaseHandle",
    "open_database",
    "Context",
    "connect",
    "get_context",
    "table",
    "Model",
    "ModelSession",
    "OrmletError",
    "BuildError",
    "ConfigurationError",
    "PersistenceError",
    "PreparationError",
    "ExecutionError",
]
