"""SQL and driver-related constants.

This module contains the fundamental enums shared by the grammar, the
query builder and the connection layer. They live in their own module so
that every layer can import them without creating circular dependencies.
"""

from enum import Enum
from typing import Dict, Optional


class Driver(str, Enum):
    """Supported database drivers.

    The value is the canonical driver name used in connection
    configuration. ``postgresql`` is accepted as an alias of ``pgsql``
    through :func:`normalize_driver`.
    """

    MYSQL = "mysql"
    PGSQL = "pgsql"
    SQLITE = "sqlite"


DRIVER_ALIASES: Dict[str, Driver] = {
    "mysql": Driver.MYSQL,
    "pgsql": Driver.PGSQL,
    "postgresql": Driver.PGSQL,
    "sqlite": Driver.SQLITE,
}

DEFAULT_PORTS: Dict[Driver, int] = {
    Driver.MYSQL: 3306,
    Driver.PGSQL: 5432,
    Driver.SQLITE: 0,
}


def normalize_driver(name: str) -> Optional[Driver]:
    """Resolve a configured driver name to a :class:`Driver`.

    Args:
        name: Driver name as found in configuration (case-insensitive)

    Returns:
        The matching Driver, or None when the name is not supported
    """
    return DRIVER_ALIASES.get((name or "").strip().lower())


class WhereType(str, Enum):
    """Kinds of WHERE predicates the grammar knows how to render."""

    BASIC = "basic"
    IN = "in"
    NULL = "null"
    NOT_NULL = "not_null"


class BooleanConnector(str, Enum):
    AND = "and"
    OR = "or"


class JoinType(str, Enum):
    INNER = "inner"
    LEFT = "left"


class Direction(str, Enum):
    ASC = "asc"
    DESC = "desc"


class QueryType(str, Enum):
    """Statement kinds compiled by the grammar."""

    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


# Savepoint N is created when moving from transaction depth N to N + 1
SAVEPOINT_PREFIX = "sp"

COUNT_ALIAS = "count"
COUNT_EXPRESSION = f"COUNT(*) as {COUNT_ALIAS}"

# One year, used by QueryBuilder.cache_forever()
CACHE_FOREVER_TTL = 31536000
