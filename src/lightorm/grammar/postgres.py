"""PostgreSQL grammar implementation."""

from lightorm.grammar.base import Grammar
from lightorm.grammar.strategies import (
    DEFAULT_VALUES_INSERT,
    DOUBLE_QUOTE_QUOTING,
    SeparateLimitOffset,
)


class PostgresGrammar(Grammar):
    """Grammar for PostgreSQL.

    Double-quoted identifiers, independent LIMIT and OFFSET clauses and
    ``default values`` for column-less inserts.
    """

    dialect_name = "pgsql"

    def __init__(self, table_prefix: str = ""):
        super().__init__(
            quoting=DOUBLE_QUOTE_QUOTING,
            limit_offset=SeparateLimitOffset(),
            empty_insert=DEFAULT_VALUES_INSERT,
            table_prefix=table_prefix,
        )
