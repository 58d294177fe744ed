"""Row: one record's field map, dirty-field tracking, and INSERT/UPDATE/DELETE."""

from collections.abc import Mapping
from typing import Any, Optional

from pydantic import BaseModel, Field

from .context import Context
from .utils.sql import join_if_not_empty, quote_identifier, render_values


class Row(BaseModel):
    """A loaded or new record of one table.

    Field values are read with ``get()`` and changed with ``set()`` or
    ``set_expr()``. Changed fields are tracked as dirty until ``save()``
    writes them; expression fields are written as raw SQL instead of bound
    parameters.
    """

    model_config = {"arbitrary_types_allowed": True}

    table: str
    context: Context
    data: dict[str, Any] = Field(default_factory=dict)
    """Current column -> value map."""
    dirty_fields: dict[str, Any] = Field(default_factory=dict)
    """Columns changed since load/creation -> pending value, in change order."""
    expr_fields: set[str] = Field(default_factory=set)
    """Dirty columns whose pending value is raw SQL."""
    is_new: bool = False
    """True between creation and the first successful INSERT."""
    id_column_override: Optional[str] = None
    """Primary key column for this row only."""

    # --- identity ---

    def use_id_column(self, id_column: Optional[str]) -> "Row":
        """Use ``id_column`` as primary key for this row, over configured defaults."""
        self.id_column_override = id_column
        return self

    @property
    def id_column(self) -> str:
        """Effective primary key column: row override, then table override, then default."""
        if self.id_column_override is not None:
            return self.id_column_override
        return self.context.id_column_for(self.table)

    @property
    def id(self) -> Any:
        """Primary key value, or None if not known yet."""
        return self.get(self.id_column)

    # --- field access ---

    def get(self, name: str, default: Any = None) -> Any:
        return self.data.get(name, default)

    def __contains__(self, name: str) -> bool:
        return name in self.data

    def to_dict(self, *names: str) -> dict[str, Any]:
        """Return the field map, restricted to ``names`` when given."""
        if not names:
            return dict(self.data)
        return {name: value for name, value in self.data.items() if name in names}

    def _set_property(self, name: str | Mapping[str, Any], value: Any, expr: bool) -> "Row":
        fields = name if isinstance(name, Mapping) else {name: value}
        for field, field_value in fields.items():
            self.data[field] = field_value
            self.dirty_fields[field] = field_value
            if expr:
                self.expr_fields.add(field)
            else:
                self.expr_fields.discard(field)
        return self

    def set(self, name: str | Mapping[str, Any], value: Any = None) -> "Row":
        """Set one field, or several from a mapping, and mark them dirty."""
        return self._set_property(name, value, expr=False)

    def set_expr(self, name: str | Mapping[str, Any], value: Optional[str] = None) -> "Row":
        """Set fields to raw SQL expressions (e.g. ``NOW()``), written verbatim on save."""
        return self._set_property(name, value, expr=True)

    def unset(self, name: str) -> "Row":
        """Forget a field entirely, including any pending change."""
        self.data.pop(name, None)
        self.dirty_fields.pop(name, None)
        self.expr_fields.discard(name)
        return self

    def has_changed(self, name: str) -> bool:
        """True if ``name`` has a pending change."""
        return name in self.dirty_fields

    @property
    def is_dirty(self) -> bool:
        return bool(self.dirty_fields)

    def hydrate(self, data: Mapping[str, Any]) -> "Row":
        """Replace the field map with ``data`` (pending changes are kept)."""
        self.data = dict(data)
        return self

    def force_all_dirty(self) -> "Row":
        """Mark every field as changed, so save() writes all of them."""
        self.dirty_fields = dict(self.data)
        self.expr_fields = {name for name in self.expr_fields if name in self.dirty_fields}
        return self

    # --- SQL-generating methods ---

    def quote_identifier(self, identifier: str) -> str:
        return quote_identifier(identifier, self.context.quote_character)

    def _bound_values(self) -> list[Any]:
        """Pending values that are bound as parameters (expression fields are inlined)."""
        return [
            value for name, value in self.dirty_fields.items()
            if name not in self.expr_fields
        ]

    def build_insert(self) -> tuple[str, tuple[Any, ...]]:
        """``INSERT INTO <table> (<dirty columns>) VALUES (...)`` and its values."""
        if not self.dirty_fields:
            return f"INSERT INTO {self.quote_identifier(self.table)} DEFAULT VALUES", ()
        columns = ", ".join(map(self.quote_identifier, self.dirty_fields))
        sql = join_if_not_empty(" ", (
            "INSERT INTO",
            self.quote_identifier(self.table),
            f"({columns})",
            "VALUES",
            f"({render_values(self.dirty_fields, self.expr_fields)})",
        ))
        return sql, tuple(self._bound_values())

    def build_update(self) -> tuple[str, tuple[Any, ...]]:
        """``UPDATE <table> SET ... WHERE <id> = ?`` and its values, id last."""
        assignments = ", ".join(
            f"{self.quote_identifier(name)} = "
            + (str(value) if name in self.expr_fields else "?")
            for name, value in self.dirty_fields.items()
        )
        sql = join_if_not_empty(" ", (
            "UPDATE",
            self.quote_identifier(self.table),
            "SET",
            assignments,
            "WHERE",
            self.quote_identifier(self.id_column),
            "= ?",
        ))
        return sql, tuple(self._bound_values()) + (self.id,)

    def build_delete(self) -> tuple[str, tuple[Any, ...]]:
        """``DELETE FROM <table> WHERE <id> = ?`` and the id."""
        sql = join_if_not_empty(" ", (
            "DELETE FROM",
            self.quote_identifier(self.table),
            "WHERE",
            self.quote_identifier(self.id_column),
            "= ?",
        ))
        return sql, (self.id,)

    # --- persistence ---

    def save(self) -> bool:
        """Write pending changes: INSERT for a new row, UPDATE otherwise.

        An existing row without changes is left alone. After an INSERT, the
        database-assigned id is adopted unless the id column was supplied.
        If the database rejects the statement, the pending changes are kept.
        """
        if self.is_new:
            sql, values = self.build_insert()
        else:
            if not self.dirty_fields:
                return True
            sql, values = self.build_update()
        self.context.execute(sql, values)
        if self.is_new:
            new_id = self.id
            if new_id is None:
                new_id = self.context.last_insert_id()
            self.data[self.id_column] = new_id
            self.is_new = False
        self.dirty_fields = {}
        self.expr_fields.clear()
        return True

    def delete(self) -> bool:
        """Delete this row by primary key. The instance keeps its data afterwards."""
        sql, values = self.build_delete()
        self.context.execute(sql, values)
        return True
