"""Shared fixtures for lightorm tests."""

import itertools
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import pytest

from lightorm.connections import SqliteConnection
from lightorm.grammar import SqliteGrammar
from lightorm.manager import DatabaseManager
from lightorm.query import QueryBuilder


class FakeCache:
    """In-memory QueryCache recording every lookup."""

    def __init__(self):
        self.store: Dict[str, Any] = {}
        self.calls: List[Tuple[str, Optional[int]]] = []

    def remember(self, key: str, callback: Callable[[], Any], ttl: Optional[int] = None) -> Any:
        self.calls.append((key, ttl))
        if key not in self.store:
            self.store[key] = callback()
        return self.store[key]


class FakeProfiler:
    """QueryProfiler recording start and end events."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.started: List[Tuple[str, List[Any]]] = []
        self.ended: List[Tuple[str, Optional[int]]] = []
        self._ids = itertools.count(1)

    def is_enabled(self) -> bool:
        return self.enabled

    def start_query(self, sql: str, bindings: Sequence[Any] = ()) -> str:
        self.started.append((sql, list(bindings)))
        return f"q{next(self._ids)}"

    def end_query(self, query_id: str, affected_rows: Optional[int] = None) -> None:
        self.ended.append((query_id, affected_rows))


USERS_TABLE = (
    "create table users ("
    "id integer primary key autoincrement, "
    "name text, "
    "email text, "
    "age integer, "
    "role text)"
)


@pytest.fixture
def sqlite_connection():
    """Open in-memory SQLite connection with a ``users`` table."""
    connection = SqliteConnection({"driver": "sqlite", "database": ":memory:"})
    connection.query(USERS_TABLE)
    yield connection
    connection.disconnect()


@pytest.fixture
def users(sqlite_connection):
    """QueryBuilder for the ``users`` table."""
    return QueryBuilder(sqlite_connection, SqliteGrammar(), "users")


@pytest.fixture
def fake_cache():
    return FakeCache()


@pytest.fixture
def fake_profiler():
    return FakeProfiler()


@pytest.fixture
def manager():
    """DatabaseManager with one in-memory SQLite connection."""
    db = DatabaseManager({"default": {"driver": "sqlite", "database": ":memory:"}})
    yield db
    db.disconnect_all()
