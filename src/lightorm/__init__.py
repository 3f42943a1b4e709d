from lightorm.__version__ import __version__

from lightorm.manager import DatabaseManager
from lightorm.query import QueryBuilder
from lightorm.connections import (
    Connection,
    ConnectionFactory,
    MySqlConnection,
    PostgresConnection,
    SqliteConnection,
)
from lightorm.grammar import (
    Grammar,
    GrammarFactory,
    MySqlGrammar,
    PostgresGrammar,
    SqliteGrammar,
    get_grammar,
)
from lightorm.settings import ConnectionConfig, DatabaseSettings
from lightorm.protocols import QueryCache, QueryProfiler
from lightorm.types import CompiledQuery, QueryComponents, StatementResult

from lightorm.common.exceptions import LightORMError, ErrorCode


__all__ = [
    "__version__",

    "DatabaseManager",
    "QueryBuilder",

    "Connection",
    "ConnectionFactory",
    "MySqlConnection",
    "PostgresConnection",
    "SqliteConnection",

    "Grammar",
    "GrammarFactory",
    "MySqlGrammar",
    "PostgresGrammar",
    "SqliteGrammar",
    "get_grammar",

    "ConnectionConfig",
    "DatabaseSettings",

    "QueryCache",
    "QueryProfiler",

    "CompiledQuery",
    "QueryComponents",
    "StatementResult",

    # Exceptions (public API)
    "LightORMError",
    "ErrorCode",
]
