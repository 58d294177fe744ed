import pytest

import ormlet.context as context_module
from ormlet.context import Context

from tests.helpers import RecordingDatabase


WIDGET_TABLE = """
CREATE TABLE widget (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT,
    age INTEGER,
    added TEXT
)
"""


@pytest.fixture(scope="function")
def context():
    """In-memory SQLite context with query logging and an empty `widget` table."""
    ctx = Context({"dsn": "sqlite:///:memory:", "logging": True})
    ctx.execute(WIDGET_TABLE)
    ctx.query_log.clear()
    yield ctx
    ctx.close()


@pytest.fixture(scope="function")
def recording_db():
    """Fake database handle recording every statement (sqlite driver name)."""
    return RecordingDatabase()


@pytest.fixture(scope="function")
def recording_context(recording_db):
    """Context backed by recording_db, with query logging on."""
    return Context({"logging": True}, db=recording_db)


@pytest.fixture(autouse=True)
def isolated_registry(monkeypatch):
    """Each test starts with no named connection registered."""
    monkeypatch.setattr(context_module, "_contexts", {})
