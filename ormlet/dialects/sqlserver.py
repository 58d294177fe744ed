"""SQL Server dialect."""

import logging
import urllib.parse
from typing import Any, ClassVar, Optional

from .base import Dialect

logger = logging.getLogger(__name__)


class SqlserverDialect(Dialect):
    """Dialect for SQL Server (schemes mssql, sqlserver)."""

    SUPPORTED_SCHEMA: ClassVar[tuple[str, ...]] = ("mssql", "sqlserver")
    DRIVER_NAMES: ClassVar[tuple[str, ...]] = ("sqlsrv", "dblib", "mssql", "sybase")
    DRIVER_MODULES: ClassVar[tuple[str, ...]] = ("pyodbc",)
    QUOTE_CHARACTER: ClassVar[str] = '"'

    def connect(
        self,
        url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        options: Optional[dict[str, Any]] = None,
    ):
        import pyodbc  # pylint: disable=import-outside-toplevel,import-error
        parsed = urllib.parse.urlparse(url)
        database = (parsed.path or "").lstrip("/") or None
        port = parsed.port or 1433
        server = parsed.hostname or "localhost"
        if port and port != 1433:
            server = f"{server},{port}"
        logger.info("Connecting to SQL Server database %s on %s", database, server)
        conn_str = (
            f"DRIVER={{ODBC Driver 17 for SQL Server}};"
            f"SERVER={server};"
            f"DATABASE={database or ''};"
            f"UID={username or parsed.username or ''};"
            f"PWD={password or parsed.password or ''}"
        )
        return pyodbc.connect(conn_str, autocommit=True, **(options or {}))

    def last_insert_id(self, connection: Any, cursor: Any) -> Any:
        """pyodbc does not expose lastrowid; read @@IDENTITY on the same cursor."""
        cursor.execute("SELECT @@IDENTITY")
        return cursor.fetchone()[0]
