"""Shared test helpers."""

from typing import Any, Optional

from ormlet.context import Context


class RecordingDatabase:
    """DatabaseHandle that records statements instead of running them.

    Every SELECT-like execute returns the canned ``rows``; set ``error`` to make
    the next execute raise it.
    """

    def __init__(self, rows: Optional[list[dict[str, Any]]] = None, driver: str = "sqlite", insert_id: Any = 1):
        self.rows = list(rows or [])
        self.driver = driver
        self.insert_id = insert_id
        self.error: Optional[BaseException] = None
        self.statements: list[tuple[str, tuple[Any, ...]]] = []

    def prepare(self, sql: str) -> str:
        return sql

    def execute(self, statement: str, parameters: tuple[Any, ...]):
        if self.error is not None:
            error, self.error = self.error, None
            raise error
        self.statements.append((statement, tuple(parameters)))
        return iter([dict(row) for row in self.rows])

    def fetch_row(self, result) -> Optional[dict[str, Any]]:
        return next(result, None)

    def last_insert_id(self) -> Any:
        return self.insert_id

    def driver_name(self) -> str:
        return self.driver


def insert_widgets(context: Context, *widgets: dict[str, Any]) -> list[int]:
    """Insert rows into `widget` and return their ids, leaving the query log empty."""
    ids = []
    for widget in widgets:
        row = context.table("widget").create(widget)
        row.save()
        ids.append(row.id)
    context.query_log.clear()
    context.last_query = None
    return ids
