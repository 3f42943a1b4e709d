"""Constants shared across the lightorm layers."""

from lightorm.constants.sql import (
    CACHE_FOREVER_TTL,
    COUNT_ALIAS,
    COUNT_EXPRESSION,
    DEFAULT_PORTS,
    DRIVER_ALIASES,
    SAVEPOINT_PREFIX,
    BooleanConnector,
    Direction,
    Driver,
    JoinType,
    QueryType,
    WhereType,
    normalize_driver,
)

__all__ = [
    "CACHE_FOREVER_TTL",
    "COUNT_ALIAS",
    "COUNT_EXPRESSION",
    "DEFAULT_PORTS",
    "DRIVER_ALIASES",
    "SAVEPOINT_PREFIX",
    "BooleanConnector",
    "Direction",
    "Driver",
    "JoinType",
    "QueryType",
    "WhereType",
    "normalize_driver",
]
