from lightorm.types.base import LightORMBaseModel
from lightorm.types.query import (
    CompiledQuery,
    JoinClause,
    OrderByClause,
    QueryComponents,
    StatementResult,
    WhereClause,
)

__all__ = [
    "LightORMBaseModel",
    "CompiledQuery",
    "JoinClause",
    "OrderByClause",
    "QueryComponents",
    "StatementResult",
    "WhereClause",
]
