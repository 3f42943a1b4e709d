import copy
import hashlib
import json
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from lightorm.connections.base import Connection
from lightorm.constants.sql import (
    CACHE_FOREVER_TTL,
    COUNT_ALIAS,
    COUNT_EXPRESSION,
    BooleanConnector,
    Direction,
    JoinType,
    WhereType,
)
from lightorm.grammar.base import Grammar
from lightorm.protocols.collaborators import QueryCache
from lightorm.types.query import CompiledQuery, JoinClause, OrderByClause, QueryComponents, WhereClause

Row = Dict[str, Any]

_MISSING = object()


class QueryBuilder:
    """Fluent builder accumulating one statement against a single table.

    Clause methods mutate the builder and return it, so calls chain. Each
    predicate and the values it binds are recorded together, which keeps
    the binding list in the exact order of the ``?`` placeholders the
    grammar emits. Terminal methods (:meth:`get`, :meth:`first`,
    :meth:`count`, :meth:`insert`, :meth:`update`, :meth:`delete`) compile
    through the grammar and execute on the connection.

    A builder is a single mutable object: call :meth:`reset` before reusing
    it for an unrelated statement, or :meth:`clone` to branch off a copy.

    Example:
        >>> users = QueryBuilder(connection, get_grammar("sqlite"), "users")
        >>> users.where("active", 1).where_in("role", ["admin", "editor"]).order_by("name").get()
        >>> users.reset().where("id", 7).update({"name": "Ada"})
    """

    def __init__(
        self,
        connection: Connection,
        grammar: Grammar,
        table: str,
        query_cache: Optional[QueryCache] = None,
    ):
        self.connection = connection
        self.grammar = grammar
        self.query_cache = query_cache
        self._table = table

        self._selects: List[str] = ["*"]
        self._wheres: List[WhereClause] = []
        self._bindings: List[Any] = []
        self._joins: List[JoinClause] = []
        self._order_bys: List[OrderByClause] = []
        self._limit: Optional[int] = None
        self._offset: Optional[int] = None
        self._use_cache = False
        self._cache_ttl: Optional[int] = None

    def __repr__(self) -> str:
        return f"QueryBuilder(table={self._table!r}, sql={self.to_sql()!r})"

    @property
    def table(self) -> str:
        return self._table

    def set_table(self, table: str) -> "QueryBuilder":
        self._table = table
        return self

    def select(self, *columns: Union[str, Sequence[str]]) -> "QueryBuilder":
        """Replace the select list.

        Accepts columns as separate arguments or as one list. Calling with
        no columns restores ``*``.
        """
        if len(columns) == 1 and not isinstance(columns[0], str):
            columns = tuple(columns[0])

        self._selects = list(columns) or ["*"]
        return self

    def _add_where(self, clause: WhereClause) -> "QueryBuilder":
        self._wheres.append(clause)
        self._bindings.extend(clause.values)
        return self

    def where(self, column: str, operator: Any, value: Any = _MISSING) -> "QueryBuilder":
        """Add an ``and`` comparison; ``where(column, value)`` means ``=``."""
        if value is _MISSING:
            operator, value = "=", operator

        return self._add_where(
            WhereClause(type=WhereType.BASIC, column=column, operator=operator, values=[value])
        )

    def or_where(self, column: str, operator: Any, value: Any = _MISSING) -> "QueryBuilder":
        """Add an ``or`` comparison; ``or_where(column, value)`` means ``=``."""
        if value is _MISSING:
            operator, value = "=", operator

        return self._add_where(
            WhereClause(
                type=WhereType.BASIC,
                column=column,
                operator=operator,
                values=[value],
                boolean=BooleanConnector.OR,
            )
        )

    def where_in(self, column: str, values: Iterable[Any]) -> "QueryBuilder":
        return self._add_where(WhereClause(type=WhereType.IN, column=column, values=list(values)))

    def where_null(self, column: str) -> "QueryBuilder":
        return self._add_where(WhereClause(type=WhereType.NULL, column=column))

    def where_not_null(self, column: str) -> "QueryBuilder":
        return self._add_where(WhereClause(type=WhereType.NOT_NULL, column=column))

    def _add_join(
        self, join_type: JoinType, table: str, first: str, operator: str, second: Any
    ) -> "QueryBuilder":
        if second is _MISSING:
            operator, second = "=", operator

        self._joins.append(
            JoinClause(type=join_type, table=table, first=first, operator=operator, second=second)
        )
        return self

    def join(self, table: str, first: str, operator: str, second: Any = _MISSING) -> "QueryBuilder":
        """Add an INNER JOIN; ``join(table, first, second)`` means ``=``."""
        return self._add_join(JoinType.INNER, table, first, operator, second)

    def left_join(self, table: str, first: str, operator: str, second: Any = _MISSING) -> "QueryBuilder":
        """Add a LEFT JOIN; ``left_join(table, first, second)`` means ``=``."""
        return self._add_join(JoinType.LEFT, table, first, operator, second)

    def order_by(self, column: str, direction: str = "asc") -> "QueryBuilder":
        """Add an ordering; any direction other than ``desc`` sorts ascending."""
        normalized = Direction.DESC if str(direction).lower() == Direction.DESC.value else Direction.ASC
        self._order_bys.append(OrderByClause(column=column, direction=normalized))
        return self

    @staticmethod
    def _check_count(name: str, value: int) -> int:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValueError(f"{name} must be a non-negative integer, got {value!r}")
        return value

    def limit(self, value: int) -> "QueryBuilder":
        self._limit = self._check_count("limit", value)
        return self

    def offset(self, value: int) -> "QueryBuilder":
        self._offset = self._check_count("offset", value)
        return self

    def cache(self, ttl: Optional[int] = None) -> "QueryBuilder":
        """Serve :meth:`get` through the attached query cache.

        Args:
            ttl: Seconds to keep the result, None for the cache's default
        """
        self._use_cache = True
        self._cache_ttl = ttl
        return self

    def cache_forever(self) -> "QueryBuilder":
        return self.cache(CACHE_FOREVER_TTL)

    def no_cache(self) -> "QueryBuilder":
        self._use_cache = False
        self._cache_ttl = None
        return self

    def to_components(self) -> QueryComponents:
        """Snapshot the accumulated state as a QueryComponents model."""
        return QueryComponents(
            table=self._table,
            selects=list(self._selects),
            wheres=[where.model_copy(deep=True) for where in self._wheres],
            joins=[join.model_copy() for join in self._joins],
            order_bys=[order.model_copy() for order in self._order_bys],
            limit=self._limit,
            offset=self._offset,
        )

    def to_sql(self) -> str:
        return self.grammar.compile_select(self.to_components())

    def get_bindings(self) -> List[Any]:
        return list(self._bindings)

    def compile(self) -> CompiledQuery:
        return CompiledQuery(sql=self.to_sql(), bindings=self.get_bindings())

    def cache_key(self, sql: str, bindings: Sequence[Any]) -> str:
        """Deterministic cache key for a statement and its bindings."""
        payload = sql + json.dumps(list(bindings), default=str, sort_keys=True)
        digest = hashlib.md5(payload.encode("utf-8")).hexdigest()
        return f"query:{self._table}:{digest}"

    def get(self) -> List[Row]:
        """Execute the SELECT and return every row.

        Returns:
            Rows as column-name to value dicts
        """
        sql = self.to_sql()
        bindings = self.get_bindings()

        def _execute() -> List[Row]:
            return self.connection.query(sql, bindings).rows

        if self.query_cache is not None and self._use_cache:
            return self.query_cache.remember(self.cache_key(sql, bindings), _execute, self._cache_ttl)

        return _execute()

    def first(self) -> Optional[Row]:
        """Limit to one row and return it, or None when nothing matches."""
        rows = self.limit(1).get()
        return rows[0] if rows else None

    def count(self) -> int:
        """Count matching rows.

        The select list and limit are swapped out for the duration of the
        query and restored afterwards, also when the query fails.
        """
        selects, limit = self._selects, self._limit
        self._selects = [COUNT_EXPRESSION]
        self._limit = None

        try:
            rows = self.get()
        finally:
            self._selects = selects
            self._limit = limit

        if not rows:
            return 0
        return int(rows[0][COUNT_ALIAS])

    def insert(self, values: Union[Mapping[str, Any], Sequence[Mapping[str, Any]]]) -> bool:
        """Insert one row or many rows.

        Column names come from the first row and every row must carry the
        same columns. A sequence of rows that are all empty is inserted
        with the dialect's default-values form, one statement per row.

        Args:
            values: One mapping or a sequence of mappings

        Returns:
            False for an empty payload (nothing executed), True otherwise

        Raises:
            ValueError: If the rows do not share the same columns
        """
        if not values:
            return False

        rows = [values] if isinstance(values, Mapping) else list(values)
        if not rows:
            return False

        columns = list(rows[0].keys())
        for row in rows:
            if set(row.keys()) != set(columns):
                raise ValueError("Every inserted row must have the same columns")

        if not columns:
            sql = self.grammar.compile_insert(self._table, {})
            for _ in rows:
                self.connection.query(sql)
            return True

        bindings = [row[column] for row in rows for column in columns]
        self.connection.query(self.grammar.compile_insert(self._table, rows), bindings)
        return True

    def update(self, values: Mapping[str, Any]) -> int:
        """Update rows matching the current WHERE predicates.

        Returns:
            Affected rows; 0 without executing anything for an empty payload
        """
        if not values:
            return 0

        sql = self.grammar.compile_update(self._table, values, self._wheres)
        bindings = list(values.values()) + self.get_bindings()
        return self.connection.query(sql, bindings).affected_rows

    def delete(self) -> int:
        """Delete rows matching the current WHERE predicates; returns affected rows."""
        sql = self.grammar.compile_delete(self._table, self._wheres)
        return self.connection.query(sql, self.get_bindings()).affected_rows

    def reset(self) -> "QueryBuilder":
        """Clear all accumulated state; the table and collaborators are kept."""
        self._selects = ["*"]
        self._wheres = []
        self._bindings = []
        self._joins = []
        self._order_bys = []
        self._limit = None
        self._offset = None
        self._use_cache = False
        self._cache_ttl = None
        return self

    def clone(self) -> "QueryBuilder":
        """Independent copy of the accumulated state.

        The copy shares the connection, grammar and cache with this builder.
        """
        builder = QueryBuilder(self.connection, self.grammar, self._table, self.query_cache)
        builder._selects = list(self._selects)
        builder._wheres = [where.model_copy(deep=True) for where in self._wheres]
        builder._bindings = copy.deepcopy(self._bindings)
        builder._joins = [join.model_copy() for join in self._joins]
        builder._order_bys = [order.model_copy() for order in self._order_bys]
        builder._limit = self._limit
        builder._offset = self._offset
        builder._use_cache = self._use_cache
        builder._cache_ttl = self._cache_ttl
        return builder
