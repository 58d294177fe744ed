"""PostgreSQL dialect."""

import logging
import urllib.parse
from typing import Any, ClassVar, Optional

from .base import Dialect

logger = logging.getLogger(__name__)


class PostgresDialect(Dialect):
    """Dialect for PostgreSQL (scheme postgresql)."""

    SUPPORTED_SCHEMA: ClassVar[tuple[str, ...]] = ("postgresql", "postgres", "pgsql")
    DRIVER_NAMES: ClassVar[tuple[str, ...]] = ("pgsql",)
    DRIVER_MODULES: ClassVar[tuple[str, ...]] = ("psycopg2",)
    QUOTE_CHARACTER: ClassVar[str] = '"'
    PARAMSTYLE: ClassVar[str] = "format"

    def connect(
        self,
        url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        options: Optional[dict[str, Any]] = None,
    ):
        import psycopg2  # pylint: disable=import-outside-toplevel,import-error
        parsed = urllib.parse.urlparse(url)
        logger.info("Connecting to PostgreSQL database %s on %s", parsed.path[1:], parsed.hostname)
        conn = psycopg2.connect(
            host=parsed.hostname,
            user=username or parsed.username,
            password=password or parsed.password,
            database=(parsed.path or "")[1:] or None,
            port=parsed.port,
            **(options or {}),
        )
        conn.autocommit = True
        return conn

    def last_insert_id(self, connection: Any, cursor: Any) -> Any:
        """psycopg2's lastrowid is an OID; ask the session for the last sequence value."""
        id_cursor = connection.cursor()
        try:
            id_cursor.execute("SELECT LASTVAL()")
            return id_cursor.fetchone()[0]
        finally:
            id_cursor.close()
