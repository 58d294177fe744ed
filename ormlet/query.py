"""Fluent SQL statement builder.

A Query accumulates result columns, JOINs, WHERE conditions, GROUP BY,
ORDER BY, LIMIT and OFFSET through chained calls, and compiles them into one
SQL string with ``?`` placeholders plus the tuple of values bound to them.
It never touches a database; see ``ormlet.session`` for execution.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any, Optional, Sequence

from pydantic import BaseModel, Field

from .errors import BuildError
from .utils.sql import (
    WILDCARD,
    create_placeholders,
    join_if_not_empty,
    quote_identifier,
)


class JoinKind(str, Enum):
    """Join operators; the value is what precedes ``JOIN`` in the SQL."""

    PLAIN = ""
    INNER = "INNER"
    LEFT_OUTER = "LEFT OUTER"
    RIGHT_OUTER = "RIGHT OUTER"
    FULL_OUTER = "FULL OUTER"


_DIRECTIONS = ("ASC", "DESC")


class Condition(BaseModel):
    """One WHERE predicate and the values bound to its placeholders, in order."""

    fragment: str
    values: tuple[Any, ...] = ()


class Query(BaseModel):
    """Chainable builder for one statement against one table.

    Each builder method mutates the query in place and returns it, so calls
    can be chained. WHERE conditions are ANDed in the order they were added,
    and ``values`` follows the same order.
    """

    model_config = {"arbitrary_types_allowed": True}

    table: str
    """Target table name (unquoted)."""
    table_alias: Optional[str] = None
    """Optional alias for the target table in SELECT statements."""
    quote_character: str = "`"
    """Character used to quote identifiers."""
    result_columns: list[str] = Field(default_factory=lambda: [WILDCARD])
    """Rendered SELECT list entries."""
    using_default_columns: bool = True
    """True until the first explicit select(); the ``*`` default is then dropped."""
    joins: list[str] = Field(default_factory=list)
    """Rendered JOIN sources."""
    conditions: list[Condition] = Field(default_factory=list)
    """WHERE predicates, ANDed in order."""
    group_by_clauses: list[str] = Field(default_factory=list)
    order_by_clauses: list[str] = Field(default_factory=list)
    limit_value: Optional[int] = None
    """Optional LIMIT (stored to avoid shadowing the limit() method)."""
    offset_value: Optional[int] = None
    """Optional OFFSET (stored to avoid shadowing the offset() method)."""
    is_distinct: bool = False
    raw_sql: Optional[str] = None
    """When set, compile_select() returns this text verbatim."""
    raw_parameters: tuple[Any, ...] = ()

    # --- quoting ---

    def quote_identifier(self, identifier: str) -> str:
        """Quote a possibly dotted identifier with this query's quote character."""
        return quote_identifier(identifier, self.quote_character)

    # --- result columns ---

    def _add_result_column(self, expr: str, alias: Optional[str] = None) -> Query:
        if alias is not None:
            expr += " AS " + self.quote_identifier(alias)
        if self.using_default_columns:
            self.result_columns = [expr]
            self.using_default_columns = False
        else:
            self.result_columns.append(expr)
        return self

    def select(self, column: str, alias: Optional[str] = None) -> Query:
        """Add a quoted column to the SELECT list (replaces the ``*`` default)."""
        return self._add_result_column(self.quote_identifier(column), alias)

    def select_expr(self, expr: str, alias: Optional[str] = None) -> Query:
        """Add a raw SQL expression to the SELECT list."""
        return self._add_result_column(expr, alias)

    @staticmethod
    def _normalize_many_columns(columns: Iterable[Any]) -> list[tuple[Optional[str], str]]:
        """Flatten ``('a', {'alias': 'b'}, ['c'])`` into ``[(None, 'a'), ('alias', 'b'), (None, 'c')]``."""
        result = []
        for column in columns:
            if isinstance(column, Mapping):
                result.extend(column.items())
            elif isinstance(column, (list, tuple)):
                result.extend(Query._normalize_many_columns(column))
            else:
                result.append((None, column))
        return result

    def select_many(self, *columns: str | Mapping[str, str] | Sequence[Any]) -> Query:
        """Add several columns; mappings are ``{alias: column}``."""
        for alias, column in self._normalize_many_columns(columns):
            self.select(column, alias)
        return self

    def select_many_expr(self, *exprs: str | Mapping[str, str] | Sequence[Any]) -> Query:
        """Add several raw expressions; mappings are ``{alias: expression}``."""
        for alias, expr in self._normalize_many_columns(exprs):
            self.select_expr(expr, alias)
        return self

    def distinct(self) -> Query:
        """Prefix the SELECT list with DISTINCT."""
        self.is_distinct = True
        return self

    def alias(self, alias: str) -> Query:
        """Alias the target table in SELECT statements."""
        self.table_alias = alias
        return self

    # --- joins ---

    def add_join(
        self,
        kind: JoinKind | str,
        table: str,
        constraint: str | Sequence[str],
        alias: Optional[str] = None,
    ) -> Query:
        """Add a JOIN source.

        ``constraint`` is either a raw string, used as-is, or a
        ``(first_column, operator, second_column)`` triple whose columns get
        quoted, e.g. ``("user.id", "=", "profile.user_id")``.
        """
        try:
            kind = JoinKind(kind.upper() if isinstance(kind, str) else kind)
        except ValueError as error:
            raise BuildError(f"Unknown join kind: {kind!r}") from error
        join_operator = f"{kind.value} JOIN".strip()
        source = self.quote_identifier(table)
        if alias is not None:
            source += " " + self.quote_identifier(alias)
        if not isinstance(constraint, str):
            if len(constraint) != 3:
                raise BuildError(
                    f"Join constraint must be a string or a (column, operator, column) triple; got {constraint!r}"
                )
            first_column, operator, second_column = constraint
            constraint = (
                f"{self.quote_identifier(first_column)} {operator} "
                f"{self.quote_identifier(second_column)}"
            )
        self.joins.append(f"{join_operator} {source} ON {constraint}")
        return self

    def join(self, table: str, constraint: str | Sequence[str], alias: Optional[str] = None) -> Query:
        return self.add_join(JoinKind.PLAIN, table, constraint, alias)

    def inner_join(self, table: str, constraint: str | Sequence[str], alias: Optional[str] = None) -> Query:
        return self.add_join(JoinKind.INNER, table, constraint, alias)

    def left_join(self, table: str, constraint: str | Sequence[str], alias: Optional[str] = None) -> Query:
        return self.add_join(JoinKind.LEFT_OUTER, table, constraint, alias)

    def right_join(self, table: str, constraint: str | Sequence[str], alias: Optional[str] = None) -> Query:
        return self.add_join(JoinKind.RIGHT_OUTER, table, constraint, alias)

    def full_join(self, table: str, constraint: str | Sequence[str], alias: Optional[str] = None) -> Query:
        return self.add_join(JoinKind.FULL_OUTER, table, constraint, alias)

    # --- where ---

    def add_condition(self, fragment: str, values: Any = ()) -> Query:
        """Append one AND-chained predicate; a non-sequence ``values`` is one value."""
        if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
            values = (values,)
        self.conditions.append(Condition(fragment=fragment, values=tuple(values)))
        return self

    def _qualified_column(self, column: str) -> str:
        """Quote ``column``, prefixing the table name when joins make it ambiguous."""
        if self.joins and "." not in column:
            column = f"{self.table}.{column}"
        return self.quote_identifier(column)

    def _add_simple_condition(self, column: str, operator: str, value: Any) -> Query:
        return self.add_condition(f"{self._qualified_column(column)} {operator} ?", (value,))

    def where(self, column: str, value: Any) -> Query:
        """Add ``column = ?``. Shorthand for where_equal()."""
        return self.where_equal(column, value)

    def where_equal(self, column: str, value: Any) -> Query:
        return self._add_simple_condition(column, "=", value)

    def where_not_equal(self, column: str, value: Any) -> Query:
        return self._add_simple_condition(column, "!=", value)

    def where_like(self, column: str, value: Any) -> Query:
        return self._add_simple_condition(column, "LIKE", value)

    def where_not_like(self, column: str, value: Any) -> Query:
        return self._add_simple_condition(column, "NOT LIKE", value)

    def where_gt(self, column: str, value: Any) -> Query:
        return self._add_simple_condition(column, ">", value)

    def where_lt(self, column: str, value: Any) -> Query:
        return self._add_simple_condition(column, "<", value)

    def where_gte(self, column: str, value: Any) -> Query:
        return self._add_simple_condition(column, ">=", value)

    def where_lte(self, column: str, value: Any) -> Query:
        return self._add_simple_condition(column, "<=", value)

    def where_in(self, column: str, values: Iterable[Any]) -> Query:
        """Add ``column IN (?, ...)``; an empty list matches no row."""
        values = tuple(values)
        if not values:
            return self.add_condition("0 = 1")
        return self.add_condition(
            f"{self._qualified_column(column)} IN ({create_placeholders(values)})", values
        )

    def where_not_in(self, column: str, values: Iterable[Any]) -> Query:
        """Add ``column NOT IN (?, ...)``; an empty list matches every row."""
        values = tuple(values)
        if not values:
            return self.add_condition("1 = 1")
        return self.add_condition(
            f"{self._qualified_column(column)} NOT IN ({create_placeholders(values)})", values
        )

    def where_null(self, column: str) -> Query:
        return self.add_condition(f"{self._qualified_column(column)} IS NULL")

    def where_not_null(self, column: str) -> Query:
        return self.add_condition(f"{self._qualified_column(column)} IS NOT NULL")

    def where_raw(self, clause: Optional[str], parameters: Any = ()) -> Query:
        """Add a raw predicate with ``?`` placeholders; ignored when ``clause`` is empty."""
        if not clause:
            return self
        return self.add_condition(clause, parameters)

    # --- grouping, ordering, paging ---

    def order_by(self, column: str, direction: str = "ASC") -> Query:
        """Add ``column ASC`` or ``column DESC`` to ORDER BY."""
        direction = direction.upper()
        if direction not in _DIRECTIONS:
            raise BuildError(f"Order direction must be ASC or DESC; got {direction!r}")
        self.order_by_clauses.append(f"{self.quote_identifier(column)} {direction}")
        return self

    def order_by_asc(self, column: str) -> Query:
        return self.order_by(column, "ASC")

    def order_by_desc(self, column: str) -> Query:
        return self.order_by(column, "DESC")

    def order_by_expr(self, expr: str) -> Query:
        """Add a raw expression to ORDER BY."""
        self.order_by_clauses.append(expr)
        return self

    def group_by(self, column: str) -> Query:
        self.group_by_clauses.append(self.quote_identifier(column))
        return self

    def group_by_expr(self, expr: str) -> Query:
        """Add a raw expression to GROUP BY."""
        self.group_by_clauses.append(expr)
        return self

    @staticmethod
    def _check_count(name: str, value: int) -> int:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise BuildError(f"{name} must be a non-negative integer; got {value!r}")
        return value

    def limit(self, limit: int) -> Query:
        self.limit_value = self._check_count("LIMIT", limit)
        return self

    def offset(self, offset: int) -> Query:
        self.offset_value = self._check_count("OFFSET", offset)
        return self

    def raw_query(self, sql: str, parameters: Iterable[Any] = ()) -> Query:
        """Replace the whole SELECT with ``sql``; every other clause is then ignored."""
        self.raw_sql = sql
        self.raw_parameters = tuple(parameters)
        return self

    # --- SQL-generating methods ---

    def sql_select_start(self) -> str:
        """``SELECT [DISTINCT] <columns> FROM <table> [<alias>]``."""
        columns = ", ".join(self.result_columns)
        if self.is_distinct:
            columns = "DISTINCT " + columns
        fragment = f"SELECT {columns} FROM {self.quote_identifier(self.table)}"
        if self.table_alias is not None:
            fragment += " " + self.quote_identifier(self.table_alias)
        return fragment

    def sql_join(self) -> str:
        return " ".join(self.joins)

    def sql_where(self) -> str:
        """``WHERE c1 AND c2 ...`` or empty string if no conditions."""
        if not self.conditions:
            return ""
        return "WHERE " + " AND ".join(condition.fragment for condition in self.conditions)

    def sql_group_by(self) -> str:
        if not self.group_by_clauses:
            return ""
        return "GROUP BY " + ", ".join(self.group_by_clauses)

    def sql_order_by(self) -> str:
        if not self.order_by_clauses:
            return ""
        return "ORDER BY " + ", ".join(self.order_by_clauses)

    def sql_limit(self) -> str:
        return "" if self.limit_value is None else f"LIMIT {self.limit_value}"

    def sql_offset(self) -> str:
        return "" if self.offset_value is None else f"OFFSET {self.offset_value}"

    def where_values(self) -> tuple[Any, ...]:
        """Values of every condition, concatenated in insertion order."""
        return sum((condition.values for condition in self.conditions), ())

    def compile_select(self) -> tuple[str, tuple[Any, ...]]:
        """Return the SELECT statement and its bound values."""
        if self.raw_sql is not None:
            return self.raw_sql, self.raw_parameters
        sql = join_if_not_empty(" ", (
            self.sql_select_start(),
            self.sql_join(),
            self.sql_where(),
            self.sql_group_by(),
            self.sql_order_by(),
            self.sql_limit(),
            self.sql_offset(),
        ))
        return sql, self.where_values()

    def compile_delete(self) -> tuple[str, tuple[Any, ...]]:
        """Return ``DELETE FROM <table> [WHERE ...]`` and its bound values."""
        sql = join_if_not_empty(" ", (
            "DELETE FROM",
            self.quote_identifier(self.table),
            self.sql_where(),
        ))
        return sql, self.where_values()

    @property
    def sql(self) -> str:
        """Compiled SELECT text."""
        return self.compile_select()[0]

    @property
    def values(self) -> tuple[Any, ...]:
        """Bound values for the placeholders of ``sql``, in order."""
        return self.compile_select()[1]


__all__ = ["Query", "Condition", "JoinKind"]
