"""Active-record style models on top of Session and Row.

A Model subclass names a table (explicitly with ``__table__``, or derived
from the class name) and wraps one Row per instance. ``Model.factory()``
starts a query chain whose results come back as instances of the class.

Example:
    class Widget(Model):
        pass

    widget = Widget.factory(context).where("name", "Fred").find_one()
    widget.set("age", 10)
    widget.save()
"""

from typing import Any, ClassVar, Optional

from .context import Context, get_context
from .row import Row
from .session import Session
from .utils.naming import build_foreign_key, class_name_to_table

DEFAULT_ID_COLUMN = "id"


class ModelSession(Session):
    """Session returning instances of ``instance_class`` instead of bare Rows."""

    instance_class: type["Model"]

    def _wrap(self, row: Optional[Row]) -> Optional["Model"]:
        if row is None:
            return None
        return self.instance_class(row)

    def create(self, data: Optional[dict[str, Any]] = None) -> "Model":
        return self._wrap(super().create(data))

    def find_one(self, id: Any = None) -> Optional["Model"]:
        return self._wrap(super().find_one(id))

    def find_many(self) -> list["Model"]:
        return [self._wrap(row) for row in super().find_many()]

    def filter(self, name: str, *args: Any, **kwargs: Any) -> Any:
        """Apply the named filter defined on the model class.

        The filter is a classmethod or staticmethod taking the session first
        and returning it, e.g. ``def adults(cls, session): return session.where_gte("age", 18)``.
        """
        method = getattr(self.instance_class, name, None)
        if not callable(method):
            raise AttributeError(f"{self.instance_class.__name__} has no filter named {name!r}")
        return method(self, *args, **kwargs)


class Model:
    """Base class for models; each instance wraps one Row."""

    __table__: ClassVar[Optional[str]] = None
    """Table name; derived from the class name (CarTyre -> car_tyre) when None."""
    __id_column__: ClassVar[str] = DEFAULT_ID_COLUMN
    """Primary key column."""
    __context__: ClassVar[Optional[Context]] = None
    """Context used by factory() when none is passed; the default registered one otherwise."""

    def __init__(self, row: Row):
        self.row = row

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.row.data!r})"

    @classmethod
    def get_table_name(cls) -> str:
        if cls.__table__ is not None:
            return cls.__table__
        return class_name_to_table(cls.__name__)

    @classmethod
    def get_id_column_name(cls) -> str:
        return cls.__id_column__

    @classmethod
    def factory(cls, context: Optional[Context] = None) -> ModelSession:
        """Start a query chain on this model's table."""
        context = context or cls.__context__ or get_context()
        return ModelSession(
            table=cls.get_table_name(),
            context=context,
            quote_character=context.quote_character,
            id_column=cls.get_id_column_name(),
            instance_class=cls,
        )

    # --- field access, delegated to the row ---

    @property
    def id(self) -> Any:
        return self.row.id

    def get(self, name: str, default: Any = None) -> Any:
        return self.row.get(name, default)

    def set(self, name: str | dict[str, Any], value: Any = None) -> "Model":
        self.row.set(name, value)
        return self

    def set_expr(self, name: str | dict[str, Any], value: Optional[str] = None) -> "Model":
        self.row.set_expr(name, value)
        return self

    def has_changed(self, name: str) -> bool:
        return self.row.has_changed(name)

    def to_dict(self, *names: str) -> dict[str, Any]:
        return self.row.to_dict(*names)

    def hydrate(self, data: dict[str, Any]) -> "Model":
        """Replace the data and mark every field dirty (keys must be table columns)."""
        self.row.hydrate(data).force_all_dirty()
        return self

    def save(self) -> bool:
        return self.row.save()

    def delete(self) -> bool:
        return self.row.delete()

    # --- relationships ---

    def _has_one_or_many(self, associated: type["Model"], foreign_key: Optional[str]) -> ModelSession:
        foreign_key = build_foreign_key(foreign_key, self.get_table_name())
        return associated.factory(self.row.context).where(foreign_key, self.id)

    def has_one(self, associated: type["Model"], foreign_key: Optional[str] = None) -> ModelSession:
        """One-to-one, foreign key on the associated table. Finish with find_one()."""
        return self._has_one_or_many(associated, foreign_key)

    def has_many(self, associated: type["Model"], foreign_key: Optional[str] = None) -> ModelSession:
        """One-to-many, foreign key on the associated table. Finish with find_many()."""
        return self._has_one_or_many(associated, foreign_key)

    def belongs_to(self, associated: type["Model"], foreign_key: Optional[str] = None) -> ModelSession:
        """Inverse of has_one/has_many: the foreign key is on this table."""
        foreign_key = build_foreign_key(foreign_key, associated.get_table_name())
        return associated.factory(self.row.context).where_id_is(self.get(foreign_key))

    def has_many_through(
        self,
        associated: type["Model"],
        join_model: Optional[type["Model"]] = None,
        key_to_base_table: Optional[str] = None,
        key_to_associated_table: Optional[str] = None,
    ) -> ModelSession:
        """Many-to-many through a join table.

        Without ``join_model``, the join table is named after both class names
        concatenated in alphabetical order (e.g. ``Author`` and ``Book`` give
        ``author_book``).
        """
        base_table = self.get_table_name()
        associated_table = associated.get_table_name()
        if join_model is None:
            join_table = class_name_to_table("".join(sorted((type(self).__name__, associated.__name__))))
        else:
            join_table = join_model.get_table_name()
        associated_id_column = associated.get_id_column_name()
        key_to_base_table = build_foreign_key(key_to_base_table, base_table)
        key_to_associated_table = build_foreign_key(key_to_associated_table, associated_table)
        return (
            associated.factory(self.row.context)
            .select(f"{associated_table}.*")
            .join(join_table, (
                f"{associated_table}.{associated_id_column}",
                "=",
                f"{join_table}.{key_to_associated_table}",
            ))
            .where(f"{join_table}.{key_to_base_table}", self.id)
        )


ModelSession.model_rebuild()
