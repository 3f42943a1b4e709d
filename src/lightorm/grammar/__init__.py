"""Grammar module for SQL generation across dialects.

Grammars translate a dialect-agnostic query description into SQL text with
``?`` placeholders. They do NOT execute statements - that is handled by
connections.

Architecture:
    - base.py: the Grammar compiler shared by every dialect
    - strategies.py: identifier quoting, LIMIT/OFFSET and empty-insert
      strategies injected into a Grammar
    - mysql.py, sqlite.py, postgres.py: the configured dialect variants
    - factory.py: driver name to grammar resolution

Dialect Differences:
    MySQL:
        - Backtick identifiers
        - ``limit N`` and ``offset M`` as separate clauses
        - ``insert into T () values ()``
    SQLite:
        - Double-quoted identifiers
        - One ``limit N offset M`` clause, ``limit -1 offset M`` without a limit
        - ``insert into T default values``
    PostgreSQL:
        - Double-quoted identifiers
        - Separate LIMIT and OFFSET clauses
        - ``insert into T default values``

Example:
    >>> from lightorm.grammar import get_grammar
    >>> from lightorm.types import QueryComponents
    >>> grammar = get_grammar("sqlite")
    >>> grammar.compile_select(QueryComponents(table="users", offset=5))
    'select * from "users" limit -1 offset 5'
"""

from lightorm.grammar.base import Grammar
from lightorm.grammar.factory import GrammarFactory, get_grammar
from lightorm.grammar.mysql import MySqlGrammar
from lightorm.grammar.postgres import PostgresGrammar
from lightorm.grammar.sqlite import SqliteGrammar
from lightorm.grammar.strategies import (
    CombinedLimitOffset,
    IdentifierQuoting,
    LimitOffsetStrategy,
    SeparateLimitOffset,
)

__all__ = [
    "Grammar",
    "GrammarFactory",
    "get_grammar",
    "MySqlGrammar",
    "PostgresGrammar",
    "SqliteGrammar",
    "CombinedLimitOffset",
    "IdentifierQuoting",
    "LimitOffsetStrategy",
    "SeparateLimitOffset",
]
