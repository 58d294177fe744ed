"""Tests for ormlet.session against SQLite: finders, aggregates, bulk delete, id columns."""

import pytest

from ormlet.row import Row
from ormlet.session import Session, _to_int

from tests.helpers import insert_widgets


@pytest.fixture
def widgets(context):
    return insert_widgets(
        context,
        {"name": "Fred", "age": 10},
        {"name": "Joe", "age": 20},
        {"name": "Ann", "age": 30},
    )


class TestFind:
    """find_one, find_many and rows."""

    def test_table_returns_session(self, context):
        session = context.table("widget")
        assert isinstance(session, Session)
        assert session.context is context

    def test_find_one_by_condition(self, context, widgets):
        row = context.table("widget").where("name", "Fred").find_one()
        assert isinstance(row, Row)
        assert row.to_dict() == {"id": widgets[0], "name": "Fred", "age": 10, "added": None}
        assert context.last_query == "SELECT * FROM `widget` WHERE `name` = 'Fred' LIMIT 1"

    def test_find_one_by_id(self, context, widgets):
        row = context.table("widget").find_one(widgets[1])
        assert row.get("name") == "Joe"
        assert context.last_query == f"SELECT * FROM `widget` WHERE `id` = '{widgets[1]}' LIMIT 1"

    def test_find_one_returns_none_when_nothing_matches(self, context, widgets):
        assert context.table("widget").where("name", "Nobody").find_one() is None

    def test_loaded_row_is_clean(self, context, widgets):
        row = context.table("widget").find_one(widgets[0])
        assert not row.is_new
        assert not row.is_dirty
        for name in ("id", "name", "age", "added"):
            assert not row.has_changed(name)

    def test_find_many(self, context, widgets):
        rows = context.table("widget").where_gte("age", 20).order_by_desc("age").find_many()
        assert [row.get("name") for row in rows] == ["Ann", "Joe"]
        assert context.last_query == "SELECT * FROM `widget` WHERE `age` >= '20' ORDER BY `age` DESC"

    def test_find_many_empty(self, context, widgets):
        assert context.table("widget").where_in("name", []).find_many() == []

    def test_find_many_has_no_implicit_limit(self, context, widgets):
        assert len(context.table("widget").find_many()) == 3
        assert context.last_query == "SELECT * FROM `widget`"

    def test_rows_returns_dicts(self, context, widgets):
        rows = context.table("widget").select("name").order_by_asc("name").rows()
        assert rows == [{"name": "Ann"}, {"name": "Fred"}, {"name": "Joe"}]

    def test_raw_query(self, context, widgets):
        rows = (
            context.table("widget")
            .raw_query("SELECT `name` FROM `widget` WHERE `age` < ?", [15])
            .find_many()
        )
        assert [row.get("name") for row in rows] == ["Fred"]


class TestAggregates:
    """count, max, min, sum, avg."""

    def test_count(self, context, widgets):
        assert context.table("widget").count() == 3
        assert context.last_query == "SELECT COUNT(*) AS `count` FROM `widget` LIMIT 1"

    def test_count_with_condition(self, context, widgets):
        assert context.table("widget").where_gt("age", 15).count() == 2

    def test_count_empty_table(self, context):
        assert context.table("widget").count() == 0

    def test_max_min_sum_avg(self, context, widgets):
        assert context.table("widget").max("age") == 30
        assert context.last_query == "SELECT MAX(`age`) AS `max` FROM `widget` LIMIT 1"
        assert context.table("widget").min("age") == 10
        assert context.table("widget").sum("age") == 60
        assert context.table("widget").avg("age") == 20

    def test_aggregate_of_nothing_is_zero(self, context):
        assert context.table("widget").max("age") == 0
        assert context.table("widget").sum("age") == 0

    @pytest.mark.parametrize(
        "value, expected",
        [(None, 0), (3, 3), (2.9, 2), ("7", 7), ("7.5", 7)],
    )
    def test_to_int(self, value, expected):
        assert _to_int(value) == expected


class TestDeleteMany:

    def test_delete_many_with_conditions(self, context, widgets):
        assert context.table("widget").where_lt("age", 25).delete_many() is True
        assert context.last_query == "DELETE FROM `widget` WHERE `age` < '25'"
        assert [row.get("name") for row in context.table("widget").find_many()] == ["Ann"]

    def test_delete_many_without_conditions(self, context, widgets):
        context.table("widget").delete_many()
        assert context.table("widget").count() == 0


class TestIdColumn:
    """Primary key resolution: session override, then table override, then default."""

    def test_default_id_column(self, context):
        assert context.table("widget").get_id_column_name() == "id"

    def test_configured_default_id_column(self, context):
        context.configure("id_column", "primary_key")
        assert context.table("widget").get_id_column_name() == "primary_key"

    def test_id_overrides_take_precedence(self, context):
        context.configure({"id_column": "primary_key", "id_overrides": {"widget": "widget_id"}})
        assert context.table("widget").get_id_column_name() == "widget_id"
        assert context.table("other").get_id_column_name() == "primary_key"

    def test_use_id_column_takes_precedence(self, context):
        context.configure("id_overrides", {"widget": "widget_id"})
        session = context.table("widget").use_id_column("custom_id")
        assert session.get_id_column_name() == "custom_id"
        assert session.where_id_is(5).sql == "SELECT * FROM `widget` WHERE `custom_id` = ?"

    def test_rows_inherit_session_id_column(self, context):
        context.execute("CREATE TABLE gadget (gadget_id INTEGER PRIMARY KEY, name TEXT)")
        row = context.table("gadget").use_id_column("gadget_id").create({"name": "lever"})
        row.save()
        assert row.id_column == "gadget_id"
        found = context.table("gadget").use_id_column("gadget_id").find_one(row.id)
        assert found.get("name") == "lever"
        assert found.id_column == "gadget_id"
