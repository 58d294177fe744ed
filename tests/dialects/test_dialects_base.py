"""Tests for ormlet.dialects.base: Dialect class attributes and placeholder translation."""

import pytest

from ormlet.dialects import Dialect, MysqlDialect, PostgresDialect, SqliteDialect, SqlserverDialect
from ormlet.errors import BuildError


def test_dialect_is_abstract():
    with pytest.raises(TypeError):
        Dialect()


@pytest.mark.parametrize(
    "dialect_cls, driver_name, quote, paramstyle",
    [
        (SqliteDialect, "sqlite", "`", "qmark"),
        (MysqlDialect, "mysql", "`", "format"),
        (PostgresDialect, "pgsql", '"', "format"),
        (SqlserverDialect, "sqlsrv", '"', "qmark"),
    ],
)
def test_dialect_class_attributes(dialect_cls, driver_name, quote, paramstyle):
    dialect = dialect_cls()
    assert dialect.driver_name == driver_name
    assert dialect.QUOTE_CHARACTER == quote
    assert dialect.PARAMSTYLE == paramstyle


def test_qmark_translation_is_identity():
    sql = "SELECT * FROM `w` WHERE `a` = ? AND `b` LIKE '10%'"
    assert SqliteDialect().translate_placeholders(sql) == sql
    assert SqlserverDialect().translate_placeholders(sql) == sql


def test_format_translation():
    sql = "SELECT * FROM `w` WHERE `a` = ? AND `b` IN (?, ?)"
    assert MysqlDialect().translate_placeholders(sql) == "SELECT * FROM `w` WHERE `a` = %s AND `b` IN (%s, %s)"


def test_format_translation_skips_literals_and_escapes_percent():
    sql = "SELECT \"?\", '?', '50%' FROM t WHERE a = ?"
    assert PostgresDialect().translate_placeholders(sql) == "SELECT \"?\", '?', '50%%' FROM t WHERE a = %s"


def test_format_translation_handles_escaped_quotes():
    sql = "SELECT 'it\\'s ?' FROM t WHERE a = ?"
    assert MysqlDialect().translate_placeholders(sql) == "SELECT 'it\\'s ?' FROM t WHERE a = %s"


def test_format_translation_rejects_unbalanced_quotes():
    with pytest.raises(BuildError):
        MysqlDialect().translate_placeholders("SELECT 'unterminated WHERE a = ?")


def test_last_insert_id_defaults_to_lastrowid():
    class Cursor:
        lastrowid = 5

    assert SqliteDialect().last_insert_id(None, Cursor()) == 5
