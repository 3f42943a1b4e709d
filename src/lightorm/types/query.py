"""Query Component Set and compiled statement types.

These models are the dialect-agnostic description a QueryBuilder hands to a
Grammar, and the ``(sql, bindings)`` pair that crosses the Grammar to
Connection boundary. They describe WHAT to run, not how a dialect spells it.
"""

from typing import Any, Dict, List, Optional

from pydantic import Field

from lightorm.constants.sql import BooleanConnector, Direction, JoinType, WhereType
from lightorm.types.base import LightORMBaseModel


class WhereClause(LightORMBaseModel):
    """A single WHERE predicate.

    Attributes:
        type: Predicate kind (basic, in, null, not_null)
        column: Column the predicate applies to
        operator: Comparison operator, only meaningful for basic predicates
        values: Binding values owned by this predicate, in placeholder order
        boolean: Connector joining this predicate to the previous one
    """
    type: WhereType
    column: str
    operator: Optional[str] = None
    values: List[Any] = Field(default_factory=list)
    boolean: BooleanConnector = BooleanConnector.AND


class JoinClause(LightORMBaseModel):
    type: JoinType = JoinType.INNER
    table: str
    first: str
    operator: str = "="
    second: str


class OrderByClause(LightORMBaseModel):
    column: str
    direction: Direction = Direction.ASC


class QueryComponents(LightORMBaseModel):
    """Normalized description of a SELECT handed to a grammar."""
    table: str
    selects: List[str] = Field(default_factory=lambda: ["*"])
    wheres: List[WhereClause] = Field(default_factory=list)
    joins: List[JoinClause] = Field(default_factory=list)
    order_bys: List[OrderByClause] = Field(default_factory=list)
    limit: Optional[int] = Field(default=None, ge=0)
    offset: Optional[int] = Field(default=None, ge=0)


class CompiledQuery(LightORMBaseModel):
    """SQL text plus the bindings for its ``?`` placeholders, in order."""
    sql: str
    bindings: List[Any] = Field(default_factory=list)

    @property
    def placeholder_count(self) -> int:
        return self.sql.count("?")


class StatementResult(LightORMBaseModel):
    """Materialized outcome of one executed statement.

    Attributes:
        rows: Result rows as column-name to value mappings (empty for writes)
        rowcount: Affected rows reported by the driver (-1 when unknown)
        lastrowid: Last inserted row id when the driver reports one
    """
    rows: List[Dict[str, Any]] = Field(default_factory=list)
    rowcount: int = -1
    lastrowid: Optional[int] = None

    @property
    def affected_rows(self) -> int:
        return max(self.rowcount, 0)
