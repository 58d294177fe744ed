"""Database collaborator: adapts a DB-API connection to prepare/execute/fetch."""

import importlib
import urllib.parse
from typing import Any, Optional, Protocol, runtime_checkable

from pydantic import BaseModel

from .dialects import Dialect, get_dialect_for_connection, get_dialect_for_scheme
from .errors import BuildError, ConfigurationError, ExecutionError, PreparationError


@runtime_checkable
class DatabaseHandle(Protocol):
    """What a Context needs from a database. ``Database`` is the DB-API implementation."""

    def prepare(self, sql: str) -> Any: ...

    def execute(self, statement: Any, parameters: tuple[Any, ...]) -> Any: ...

    def fetch_row(self, result: Any) -> Optional[dict[str, Any]]: ...

    def last_insert_id(self) -> Any: ...

    def driver_name(self) -> str: ...


class Statement(BaseModel):
    """A prepared statement: the SQL text in both placeholder forms, and its cursor."""

    model_config = {"arbitrary_types_allowed": True}

    sql: str
    """Text with ``?`` placeholders, as compiled by the builder."""
    driver_sql: str
    """Text with placeholders translated to the driver's paramstyle."""
    cursor: Any


class Database:
    """DatabaseHandle over a DB-API 2.0 connection (sqlite3, pymysql, psycopg2, pyodbc)."""

    def __init__(self, connection: Any, dialect: Optional[Dialect] = None):
        self.connection = connection
        self.dialect = dialect or get_dialect_for_connection(connection)
        self._error_class = self._resolve_error_class(connection)
        self._last_cursor = None

    @staticmethod
    def _resolve_error_class(connection: Any) -> type[BaseException]:
        """Return the driver's DB-API ``Error`` base class."""
        error_class = getattr(connection, "Error", None)
        if isinstance(error_class, type) and issubclass(error_class, BaseException):
            return error_class
        module = importlib.import_module(type(connection).__module__.split(".")[0])
        return getattr(module, "Error", Exception)

    def driver_name(self) -> str:
        return self.dialect.driver_name

    def prepare(self, sql: str) -> Statement:
        """Translate placeholders and open a cursor for ``sql``."""
        try:
            driver_sql = self.dialect.translate_placeholders(sql)
        except BuildError as error:
            raise PreparationError(str(error)) from error
        try:
            cursor = self.connection.cursor()
        except self._error_class as error:
            raise PreparationError(f"Cannot prepare statement: {error}") from error
        return Statement(sql=sql, driver_sql=driver_sql, cursor=cursor)

    def execute(self, statement: Statement, parameters: tuple[Any, ...] = ()) -> Any:
        """Run a prepared statement and return its cursor."""
        try:
            if parameters:
                statement.cursor.execute(statement.driver_sql, tuple(parameters))
            else:
                statement.cursor.execute(statement.sql)
        except self._error_class as error:
            raise ExecutionError(f"{error} (while running: {statement.sql})") from error
        self._last_cursor = statement.cursor
        return statement.cursor

    def fetch_row(self, result: Any) -> Optional[dict[str, Any]]:
        """Return the next row as a column -> value dict, or None once exhausted."""
        if result.description is None:
            return None
        try:
            row = result.fetchone()
        except self._error_class as error:
            raise ExecutionError(f"Cannot fetch row: {error}") from error
        if row is None:
            return None
        columns = [description[0] for description in result.description]
        return dict(zip(columns, row))

    def last_insert_id(self) -> Any:
        if self._last_cursor is None:
            return None
        try:
            return self.dialect.last_insert_id(self.connection, self._last_cursor)
        except self._error_class as error:
            raise ExecutionError(f"Cannot read last insert id: {error}") from error

    def close(self) -> None:
        self.connection.close()


def open_database(
    database_url: str,
    username: Optional[str] = None,
    password: Optional[str] = None,
    options: Optional[dict[str, Any]] = None,
) -> Database:
    """Open a connection for ``database_url`` and wrap it in a Database.

    Raises:
        ConfigurationError: unsupported scheme, missing driver, or connection failure.
    """
    if not isinstance(database_url, str):
        raise ConfigurationError(f"database_url must be a str, got {type(database_url)}")
    parsed_url = urllib.parse.urlparse(database_url)
    dialect = get_dialect_for_scheme(parsed_url.scheme)
    try:
        connection = dialect.connect(database_url, username=username, password=password, options=options)
    except ImportError as error:
        raise ConfigurationError(f"Driver for {parsed_url.scheme} is not installed: {error}") from error
    except Exception as error:
        raise ConfigurationError(f"Cannot connect to {parsed_url.scheme} database: {error}") from error
    return Database(connection, dialect=dialect)
