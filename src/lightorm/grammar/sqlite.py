"""SQLite grammar implementation."""

from lightorm.grammar.base import Grammar
from lightorm.grammar.strategies import (
    DEFAULT_VALUES_INSERT,
    DOUBLE_QUOTE_QUOTING,
    CombinedLimitOffset,
)


class SqliteGrammar(Grammar):
    """Grammar for SQLite.

    SQLite only understands OFFSET inside a LIMIT clause, so pagination is
    rendered as one ``limit N offset M`` clause, with ``limit -1`` standing
    in when only an offset was requested.
    """

    dialect_name = "sqlite"

    def __init__(self, table_prefix: str = ""):
        super().__init__(
            quoting=DOUBLE_QUOTE_QUOTING,
            limit_offset=CombinedLimitOffset(),
            empty_insert=DEFAULT_VALUES_INSERT,
            table_prefix=table_prefix,
        )
