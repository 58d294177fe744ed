"""Base Dialect type: subclasses implement connect() for each engine."""

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Optional

from pydantic import BaseModel

from ..utils.sql import replace_outside_quotes


class Dialect(BaseModel, ABC):
    """Base for database dialects; subclasses implement connect() for a given URL."""

    model_config = {"arbitrary_types_allowed": True}

    SUPPORTED_SCHEMA: ClassVar[tuple[str, ...]] = ()
    """URL schemes this dialect handles (e.g. ('sqlite',), ('mssql', 'sqlserver'))."""

    DRIVER_NAMES: ClassVar[tuple[str, ...]] = ()
    """Driver names reported by driver_name(); the first one is canonical."""

    DRIVER_MODULES: ClassVar[tuple[str, ...]] = ()
    """Top-level DB-API modules whose connections belong to this dialect."""

    QUOTE_CHARACTER: ClassVar[str] = "`"
    """Character used to quote identifiers."""

    PARAMSTYLE: ClassVar[str] = "qmark"
    """DB-API paramstyle of the driver: 'qmark' (``?``) or 'format' (``%s``)."""

    @property
    def driver_name(self) -> str:
        """Canonical driver name (e.g. 'sqlite', 'pgsql')."""
        return self.DRIVER_NAMES[0]

    @abstractmethod
    def connect(
        self,
        url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        options: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Return a new raw driver connection for the given URL, in autocommit mode.

        The return value is engine-specific (e.g. sqlite3.Connection, pymysql.Connection).
        Explicit username/password take precedence over the ones in the URL.
        """
        ...  # pylint: disable=unnecessary-ellipsis

    def translate_placeholders(self, sql: str) -> str:
        """Rewrite ``?`` placeholders (outside literals) into the driver's paramstyle."""
        if self.PARAMSTYLE == "qmark":
            return sql
        # format-style drivers interpolate the whole text, literals included
        sql = sql.replace("%", "%%")
        return replace_outside_quotes(sql, "?", "%s")

    def last_insert_id(self, connection: Any, cursor: Any) -> Any:
        """Return the identifier generated by the last INSERT run on ``cursor``."""
        return cursor.lastrowid
