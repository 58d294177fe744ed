"""SQLite dialect."""

import logging
import urllib.parse
from typing import Any, ClassVar, Optional

from .base import Dialect

logger = logging.getLogger(__name__)


class SqliteDialect(Dialect):
    """Dialect for SQLite (scheme sqlite)."""

    SUPPORTED_SCHEMA: ClassVar[tuple[str, ...]] = ("sqlite",)
    DRIVER_NAMES: ClassVar[tuple[str, ...]] = ("sqlite", "sqlite2")
    DRIVER_MODULES: ClassVar[tuple[str, ...]] = ("sqlite3",)

    def connect(
        self,
        url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        options: Optional[dict[str, Any]] = None,
    ):
        import sqlite3
        parsed = urllib.parse.urlparse(url)
        path = (parsed.path or "")[1:] or parsed.hostname or ":memory:"
        logger.info("Connecting to SQLite database %s", path)
        conn = sqlite3.connect(path, isolation_level=None, **(options or {}))
        conn.execute("PRAGMA foreign_keys = ON")
        return conn
