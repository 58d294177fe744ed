"""Session: a Query bound to a Context, which runs it and hydrates Rows."""

from typing import Any, Optional

from .context import Context
from .query import Query
from .row import Row


class Session(Query):
    """Query on one table that can execute itself.

    Builder methods (``where``, ``join``, ``order_by``, ...) are inherited
    from Query and return the session, so a chain ends with one of the
    executing methods: ``find_one``, ``find_many``, ``rows``, an aggregate,
    or ``delete_many``. ``create`` starts a new Row instead.

    Example:
        context.table("widget").where("name", "Fred").find_one()
    """

    context: Context
    id_column: Optional[str] = None
    """Primary key column for this session and its rows; None means the configured one."""

    def use_id_column(self, id_column: Optional[str]) -> "Session":
        """Use ``id_column`` as primary key, overriding the configured defaults."""
        self.id_column = id_column
        return self

    def get_id_column_name(self) -> str:
        if self.id_column is not None:
            return self.id_column
        return self.context.id_column_for(self.table)

    def where_id_is(self, id: Any) -> "Session":
        """Filter on the primary key."""
        return self.where(self.get_id_column_name(), id)

    # --- rows ---

    def _create_instance_from_row(self, data: dict[str, Any]) -> Row:
        return Row(
            table=self.table,
            context=self.context,
            data=data,
            id_column_override=self.id_column,
        )

    def create(self, data: Optional[dict[str, Any]] = None) -> Row:
        """Return a new Row; fields in ``data`` are all marked dirty."""
        row = Row(table=self.table, context=self.context, is_new=True, id_column_override=self.id_column)
        if data is not None:
            row.hydrate(data).force_all_dirty()
        return row

    # --- execution ---

    def rows(self) -> list[dict[str, Any]]:
        """Run the SELECT and return raw rows as dicts."""
        sql, values = self.compile_select()
        return self.context.run_select(sql, values)

    def find_one(self, id: Any = None) -> Optional[Row]:
        """Run the SELECT with LIMIT 1; return the Row, or None if nothing matched.

        Args:
            id: Optional primary key to filter on.
        """
        if id is not None:
            self.where_id_is(id)
        self.limit(1)
        rows = self.rows()
        if not rows:
            return None
        return self._create_instance_from_row(rows[0])

    def find_many(self) -> list[Row]:
        """Run the SELECT and return every matching Row (possibly none)."""
        return [self._create_instance_from_row(row) for row in self.rows()]

    def aggregate(self, function: str, column: str = "*") -> int:
        """Run ``SELECT FUNCTION(column) AS function`` and return the value as int (0 if none)."""
        function = function.upper()
        alias = function.lower()
        if column != "*":
            column = self.quote_identifier(column)
        self.select_expr(f"{function}({column})", alias)
        row = self.find_one()
        if row is None:
            return 0
        return _to_int(row.get(alias))

    def count(self, column: str = "*") -> int:
        return self.aggregate("COUNT", column)

    def max(self, column: str) -> int:
        return self.aggregate("MAX", column)

    def min(self, column: str) -> int:
        return self.aggregate("MIN", column)

    def sum(self, column: str) -> int:
        return self.aggregate("SUM", column)

    def avg(self, column: str) -> int:
        return self.aggregate("AVG", column)

    def delete_many(self) -> bool:
        """Delete every row matched by the WHERE conditions."""
        sql, values = self.compile_delete()
        self.context.execute(sql, values)
        return True


def _to_int(value: Any) -> int:
    """Coerce an aggregate result (int, float, Decimal or numeric string) to int."""
    if value is None:
        return 0
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return int(float(value))
    return int(value)
