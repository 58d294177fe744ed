"""MySQL dialect."""

import logging
import urllib.parse
from typing import Any, ClassVar, Optional

from .base import Dialect

logger = logging.getLogger(__name__)


class MysqlDialect(Dialect):
    """Dialect for MySQL (scheme mysql)."""

    SUPPORTED_SCHEMA: ClassVar[tuple[str, ...]] = ("mysql",)
    DRIVER_NAMES: ClassVar[tuple[str, ...]] = ("mysql",)
    DRIVER_MODULES: ClassVar[tuple[str, ...]] = ("pymysql",)
    PARAMSTYLE: ClassVar[str] = "format"

    def connect(
        self,
        url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        options: Optional[dict[str, Any]] = None,
    ):
        import pymysql  # pylint: disable=import-outside-toplevel,import-error
        parsed = urllib.parse.urlparse(url)
        logger.info("Connecting to MySQL database %s on %s", parsed.path[1:], parsed.hostname)
        return pymysql.connect(
            host=parsed.hostname,
            user=username or parsed.username,
            password=password or parsed.password,
            database=(parsed.path or "")[1:] or None,
            port=parsed.port,
            autocommit=True,
            **(options or {}),
        )
