import re
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from lightorm.constants.sql import BooleanConnector, Direction, JoinType, QueryType, WhereType
from lightorm.grammar.strategies import IdentifierQuoting, LimitOffsetStrategy
from lightorm.types.query import JoinClause, OrderByClause, QueryComponents, WhereClause


# Expressions matching this pattern are passed through unwrapped in SELECT lists
SELECT_FUNCTION_PATTERN = re.compile(r"\b(COUNT|SUM|AVG|MIN|MAX|UPPER|LOWER)\s*\(", re.IGNORECASE)
ALIAS_MARKER = " as "

Row = Mapping[str, Any]


class Grammar:
    """SQL compiler shared by every dialect.

    A Grammar turns a :class:`QueryComponents` description (or, for writes,
    a table plus values and WHERE predicates) into SQL text with ``?``
    placeholders. It does NOT execute anything and never validates its
    input: the QueryBuilder is responsible for handing over consistent
    state, so compilation itself is not a failure path.

    Dialects are not subclasses with overridden compile methods. Instead
    the few points where they diverge are injected as strategies:

        - ``quoting``: identifier quote characters
        - ``limit_offset``: how LIMIT/OFFSET are rendered
        - ``empty_insert``: INSERT template used when no columns are given

    Placeholder order produced here always matches the order in which the
    QueryBuilder accumulates bindings: WHERE predicates left to right, and
    for UPDATE the SET columns before the WHERE predicates.
    """

    dialect_name = "generic"

    def __init__(
        self,
        quoting: IdentifierQuoting,
        limit_offset: LimitOffsetStrategy,
        empty_insert: str,
        table_prefix: str = "",
    ):
        self.quoting = quoting
        self.limit_offset = limit_offset
        self.empty_insert = empty_insert
        self.table_prefix = table_prefix

        self._where_compilers: Dict[WhereType, Callable[[WhereClause], str]] = {
            WhereType.BASIC: self._compile_basic_where,
            WhereType.IN: self._compile_in_where,
            WhereType.NULL: self._compile_null_where,
            WhereType.NOT_NULL: self._compile_not_null_where,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(table_prefix={self.table_prefix!r})"

    def wrap(self, value: str) -> str:
        """Quote an identifier, segment by segment for dotted names.

        Args:
            value: Identifier such as ``name`` or ``users.name``

        Returns:
            Quoted identifier, e.g. ```users`.`name``` for backtick dialects.
            ``*`` is never quoted.
        """
        return ".".join(self.quoting.wrap_segment(segment) for segment in value.split("."))

    def wrap_table(self, table: str) -> str:
        """Quote the statement's target table with the table prefix applied."""
        return self.wrap(f"{self.table_prefix}{table}")

    def is_raw_expression(self, expression: str) -> bool:
        """Check whether a SELECT expression must be passed through as-is.

        Function calls (COUNT, SUM, AVG, MIN, MAX, UPPER, LOWER) and
        expressions carrying an `` as `` alias are left unwrapped.
        """
        return bool(SELECT_FUNCTION_PATTERN.search(expression)) or ALIAS_MARKER in expression

    def compile(self, query_type: QueryType, *args: Any) -> str:
        """Compile a statement by type.

        Args:
            query_type: Statement kind
            *args: Arguments of the matching ``compile_*`` method

        Returns:
            Compiled SQL

        Raises:
            NotImplementedError: If the statement type is not supported
        """
        compilers = {
            QueryType.SELECT: self.compile_select,
            QueryType.INSERT: self.compile_insert,
            QueryType.UPDATE: self.compile_update,
            QueryType.DELETE: self.compile_delete,
        }

        compiler = compilers.get(QueryType(query_type))
        if compiler:
            return compiler(*args)

        raise NotImplementedError(
            f"Statement type {query_type} not supported by {self.__class__.__name__}"
        )

    def compile_select(self, components: QueryComponents) -> str:
        """Build a SELECT statement.

        Args:
            components: Normalized query description

        Returns:
            ``select ... from ... [joins] [where] [order by] [limit/offset]``
        """
        sql = [
            f"select {self.compile_columns(components.selects)}",
            f"from {self.wrap_table(components.table)}",
            self.compile_joins(components.joins),
            self.compile_wheres(components.wheres),
            self.compile_order_bys(components.order_bys),
            self.compile_limit_offset(components.limit, components.offset),
        ]

        return " ".join(part for part in sql if part)

    def compile_insert(self, table: str, values: Union[Row, Sequence[Row]]) -> str:
        """Build a (multi-row) INSERT statement.

        Column names come from the first row; every row gets one
        placeholder group of the same width.

        Args:
            table: Target table (without prefix)
            values: One row or a sequence of rows

        Returns:
            ``insert into T (a, b) values (?, ?), (?, ?)``, or the dialect's
            empty insert when no columns are supplied
        """
        rows = [values] if isinstance(values, Mapping) else list(values)
        wrapped_table = self.wrap_table(table)

        if not rows or not rows[0]:
            return self.empty_insert.format(table=wrapped_table)

        columns = list(rows[0].keys())
        wrapped_columns = ", ".join(self.wrap(column) for column in columns)

        placeholder = "(" + ", ".join("?" for _ in columns) + ")"
        placeholders = ", ".join(placeholder for _ in rows)

        return f"insert into {wrapped_table} ({wrapped_columns}) values {placeholders}"

    def compile_update(self, table: str, values: Row, wheres: Sequence[WhereClause]) -> str:
        """Build an UPDATE statement restricted by the given predicates."""
        assignments = ", ".join(f"{self.wrap(column)} = ?" for column in values.keys())
        sql = f"update {self.wrap_table(table)} set {assignments}"

        if wheres:
            sql += " " + self.compile_wheres(wheres)

        return sql

    def compile_delete(self, table: str, wheres: Sequence[WhereClause]) -> str:
        """Build a DELETE statement restricted by the given predicates."""
        sql = f"delete from {self.wrap_table(table)}"

        if wheres:
            sql += " " + self.compile_wheres(wheres)

        return sql

    def compile_columns(self, selects: Sequence[str]) -> str:
        return ", ".join(
            select if self.is_raw_expression(select) else self.wrap(select)
            for select in selects
        )

    def compile_wheres(self, wheres: Sequence[WhereClause]) -> str:
        """Compile WHERE predicates.

        The first predicate is always introduced by ``where``, whatever
        connector was recorded for it; later predicates use their own
        ``and``/``or`` connector.
        """
        if not wheres:
            return ""

        sql: List[str] = []
        for index, where in enumerate(wheres):
            boolean = "where" if index == 0 else BooleanConnector(where.boolean).value
            compiler = self._where_compilers[WhereType(where.type)]
            sql.append(f"{boolean} {compiler(where)}")

        return " ".join(sql)

    def compile_joins(self, joins: Sequence[JoinClause]) -> str:
        if not joins:
            return ""

        sql = []
        for join in joins:
            join_type = JoinType(join.type).value.upper()
            sql.append(
                f"{join_type} JOIN {self.wrap(join.table)} "
                f"ON {self.wrap(join.first)} {join.operator} {self.wrap(join.second)}"
            )

        return " ".join(sql)

    def compile_order_bys(self, order_bys: Sequence[OrderByClause]) -> str:
        if not order_bys:
            return ""

        orders = [
            f"{self.wrap(order.column)} {Direction(order.direction).value.upper()}"
            for order in order_bys
        ]
        return "order by " + ", ".join(orders)

    def compile_limit_offset(self, limit: Optional[int], offset: Optional[int]) -> str:
        return " ".join(self.limit_offset.compile(limit, offset))

    def _compile_basic_where(self, where: WhereClause) -> str:
        return f"{self.wrap(where.column)} {where.operator} ?"

    def _compile_in_where(self, where: WhereClause) -> str:
        placeholders = ", ".join("?" for _ in where.values)
        return f"{self.wrap(where.column)} in ({placeholders})"

    def _compile_null_where(self, where: WhereClause) -> str:
        return f"{self.wrap(where.column)} is null"

    def _compile_not_null_where(self, where: WhereClause) -> str:
        return f"{self.wrap(where.column)} is not null"
