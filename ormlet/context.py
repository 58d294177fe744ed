"""Context: configuration, database handle, quote character, query log and cache.

Everything a Session or Row needs beyond its own state lives on a Context,
passed to them explicitly. A small registry of named contexts backs the
module-level ``connect()`` / ``table()`` helpers.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, Optional

from pydantic import ValidationError

from .config import Settings
from .connection import Database, DatabaseHandle, open_database
from .dialects import get_quote_character
from .errors import ConfigurationError
from .utils.make_hashable import make_hashable
from .utils.sql import bind_parameters

if TYPE_CHECKING:
    from .session import Session

logger = logging.getLogger("ormlet")


class Context:
    """Holds the process-wide state of one database: settings, handle, log and cache.

    The connection is opened lazily, on the first statement. Use ``close()``
    (or ``with Context(...) as context:``) to release it.
    """

    def __init__(self, settings: Optional[Settings | dict[str, Any] | str] = None,
                 db: Optional[Any] = None):
        if isinstance(settings, str):
            settings = {"dsn": settings}
        if isinstance(settings, dict):
            try:
                settings = Settings(**settings)
            except ValidationError as error:
                raise ConfigurationError(f"Invalid settings: {error}") from error
        self.settings: Settings = settings or Settings()
        self._db: Optional[DatabaseHandle] = None
        self._lock = threading.RLock()
        self.last_query: Optional[str] = None
        self.query_log: list[str] = []
        self._query_cache: dict[tuple, list[dict[str, Any]]] = {}
        if db is not None:
            self.set_db(db)

    def __enter__(self) -> Context:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # configuration

    def configure(self, key: str | dict[str, Any], value: Any = None) -> Context:
        """Change settings; ``configure("sqlite:///x.db")`` sets the DSN."""
        self.settings.update(key, value)
        return self

    # database handle

    @property
    def db(self) -> DatabaseHandle:
        """The database handle, opened from the settings on first access."""
        with self._lock:
            if self._db is None:
                self.set_db(open_database(
                    self.settings.dsn,
                    username=self.settings.username,
                    password=self.settings.password,
                    options=self.settings.driver_options,
                ))
            return self._db

    def set_db(self, db: Any) -> None:
        """Use ``db`` as database: a DatabaseHandle, or a raw DB-API connection."""
        if not isinstance(db, DatabaseHandle):
            db = Database(db)
        with self._lock:
            self._db = db
            self._resolve_quote_character()

    def close(self) -> None:
        """Close the underlying connection, if one was opened."""
        with self._lock:
            db, self._db = self._db, None
        if db is not None and hasattr(db, "close"):
            db.close()

    def _resolve_quote_character(self) -> None:
        if self.settings.quote_character is None:
            self.settings.quote_character = get_quote_character(self._db.driver_name())

    @property
    def quote_character(self) -> str:
        """Identifier quote character, detected from the driver unless configured."""
        if self.settings.quote_character is None:
            # opening the handle resolves it
            _ = self.db
        return self.settings.quote_character

    def id_column_for(self, table: str) -> str:
        return self.settings.id_column_for(table)

    # query log

    def log_query(self, sql: str, parameters: tuple[Any, ...]) -> bool:
        """Record ``sql`` with its parameters bound, when logging is enabled."""
        if not self.settings.logging:
            return False
        bound_query = bind_parameters(sql, parameters)
        with self._lock:
            self.last_query = bound_query
            self.query_log.append(bound_query)
        logger.debug("%s", bound_query)
        return True

    # query cache

    @staticmethod
    def _cache_key(sql: str, parameters: tuple[Any, ...]) -> tuple:
        return (sql, make_hashable(parameters))

    def clear_cache(self) -> None:
        """Forget every cached SELECT result."""
        with self._lock:
            self._query_cache.clear()

    # execution

    def execute(self, sql: str, parameters: tuple[Any, ...] = ()) -> Any:
        """Log, prepare and execute one statement; return the driver result."""
        parameters = tuple(parameters)
        db = self.db
        self.log_query(sql, parameters)
        statement = db.prepare(sql)
        return db.execute(statement, parameters)

    def run_select(self, sql: str, parameters: tuple[Any, ...] = ()) -> list[dict[str, Any]]:
        """Execute a SELECT and return every row as a dict, using the cache if enabled."""
        parameters = tuple(parameters)
        caching = self.settings.caching
        if caching:
            cache_key = self._cache_key(sql, parameters)
            with self._lock:
                cached = self._query_cache.get(cache_key)
            if cached is not None:
                return [dict(row) for row in cached]
        result = self.execute(sql, parameters)
        rows = []
        row = self.db.fetch_row(result)
        while row is not None:
            rows.append(row)
            row = self.db.fetch_row(result)
        if caching:
            with self._lock:
                self._query_cache[cache_key] = [dict(row) for row in rows]
        return rows

    def last_insert_id(self) -> Any:
        return self.db.last_insert_id()

    # entry point

    def table(self, table: str) -> Session:
        """Start a query chain on ``table``."""
        from .session import Session
        return Session(table=table, context=self, quote_character=self.quote_character)


_contexts: dict[str, Context] = {}


def connect(database_url: Optional[str] = None, name: str = "default", **settings: Any) -> Context:
    """Register a Context under ``name`` (replacing any previous one) and return it."""
    if database_url is not None:
        settings["dsn"] = database_url
    previous = _contexts.get(name)
    if previous is not None:
        previous.close()
    context = Context(settings)
    _contexts[name] = context
    return context


def get_context(name: str = "default") -> Context:
    """Return the Context registered under ``name``."""
    try:
        return _contexts[name]
    except KeyError as error:
        raise ConfigurationError(f"No connection configured with name=`{name}`") from error


def table(table_name: str, name: str = "default") -> Session:
    """Start a query chain on ``table_name`` using the Context registered as ``name``."""
    return get_context(name).table(table_name)
