"""MySQL grammar implementation."""

from lightorm.grammar.base import Grammar
from lightorm.grammar.strategies import (
    BACKTICK_QUOTING,
    EMPTY_VALUES_INSERT,
    SeparateLimitOffset,
)


class MySqlGrammar(Grammar):
    """Grammar for MySQL and MariaDB.

    Key Features:
        - Backtick identifier quoting
        - Independent ``limit N`` and ``offset M`` clauses
        - ``insert into T () values ()`` for column-less inserts
    """

    dialect_name = "mysql"

    def __init__(self, table_prefix: str = ""):
        super().__init__(
            quoting=BACKTICK_QUOTING,
            limit_offset=SeparateLimitOffset(),
            empty_insert=EMPTY_VALUES_INSERT,
            table_prefix=table_prefix,
        )
