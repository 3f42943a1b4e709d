"""Unit tests for SQL compilation across dialects."""

import pytest

from lightorm.common.exceptions import ErrorCode, LightORMError
from lightorm.constants.sql import BooleanConnector, Direction, JoinType, QueryType, WhereType
from lightorm.grammar import (
    GrammarFactory,
    MySqlGrammar,
    PostgresGrammar,
    SqliteGrammar,
    get_grammar,
)
from lightorm.types import JoinClause, OrderByClause, QueryComponents, WhereClause


class TestIdentifierWrapping:
    """Test identifier quoting per dialect."""

    def test_mysql_wraps_dotted_identifier_per_segment(self):
        """Test that dotted identifiers are wrapped segment by segment."""
        assert MySqlGrammar().wrap("users.name") == "`users`.`name`"

    def test_double_quote_dialects(self):
        """Test SQLite and PostgreSQL double-quote identifiers."""
        assert SqliteGrammar().wrap("users.name") == '"users"."name"'
        assert PostgresGrammar().wrap("name") == '"name"'

    def test_star_is_never_wrapped(self):
        """Test that * is left alone, also when qualified."""
        grammar = MySqlGrammar()
        assert grammar.wrap("*") == "*"
        assert grammar.wrap("users.*") == "`users`.*"

    def test_table_prefix_applies_to_target_table_only(self):
        """Test that the prefix is applied to FROM but not to joined tables."""
        grammar = MySqlGrammar(table_prefix="app_")
        components = QueryComponents(
            table="users",
            joins=[JoinClause(table="posts", first="users.id", second="posts.user_id")],
        )

        sql = grammar.compile_select(components)

        assert sql == (
            "select * from `app_users` "
            "INNER JOIN `posts` ON `users`.`id` = `posts`.`user_id`"
        )


class TestSelectCompilation:
    """Test SELECT layout and clause rendering."""

    def test_minimal_select(self):
        """Test the bare select."""
        assert SqliteGrammar().compile_select(QueryComponents(table="users")) == 'select * from "users"'

    def test_function_and_alias_expressions_pass_through(self):
        """Test that aggregate calls and aliased expressions are not wrapped."""
        components = QueryComponents(
            table="users",
            selects=["id", "COUNT(*) as count", "lower(name)", "name as label"],
        )

        sql = MySqlGrammar().compile_select(components)

        assert sql == "select `id`, COUNT(*) as count, lower(name), name as label from `users`"

    def test_where_predicates_in_declaration_order(self):
        """Test that the first connector is always where and later ones keep theirs."""
        components = QueryComponents(
            table="users",
            wheres=[
                WhereClause(type=WhereType.BASIC, column="age", operator=">", values=[18], boolean=BooleanConnector.OR),
                WhereClause(type=WhereType.IN, column="role", values=["a", "b", "c"]),
                WhereClause(type=WhereType.NULL, column="deleted_at", boolean=BooleanConnector.OR),
                WhereClause(type=WhereType.NOT_NULL, column="email"),
            ],
        )

        sql = PostgresGrammar().compile_select(components)

        assert sql == (
            'select * from "users" where "age" > ? and "role" in (?, ?, ?) '
            'or "deleted_at" is null and "email" is not null'
        )

    def test_joins_and_order_by(self):
        """Test LEFT JOIN and multi-column ordering."""
        components = QueryComponents(
            table="users",
            joins=[
                JoinClause(type=JoinType.LEFT, table="posts", first="users.id", operator="=", second="posts.user_id"),
            ],
            order_bys=[
                OrderByClause(column="name"),
                OrderByClause(column="id", direction=Direction.DESC),
            ],
        )

        sql = SqliteGrammar().compile_select(components)

        assert sql == (
            'select * from "users" LEFT JOIN "posts" ON "users"."id" = "posts"."user_id" '
            'order by "name" ASC, "id" DESC'
        )

    def test_compile_dispatches_by_query_type(self):
        """Test that compile() routes to the matching compiler."""
        grammar = SqliteGrammar()
        assert grammar.compile(QueryType.DELETE, "users", []) == 'delete from "users"'


class TestLimitOffset:
    """Test LIMIT/OFFSET rendering per dialect."""

    @pytest.mark.parametrize(
        "limit,offset,expected",
        [
            (10, None, 'select * from "users" limit 10'),
            (None, 5, 'select * from "users" limit -1 offset 5'),
            (10, 5, 'select * from "users" limit 10 offset 5'),
        ],
    )
    def test_sqlite_combined_clause(self, limit, offset, expected):
        """Test SQLite's single limit/offset clause."""
        components = QueryComponents(table="users", limit=limit, offset=offset)
        assert SqliteGrammar().compile_select(components) == expected

    def test_mysql_separate_clauses(self):
        """Test MySQL independent limit and offset clauses."""
        components = QueryComponents(table="users", limit=10, offset=5)
        assert MySqlGrammar().compile_select(components) == "select * from `users` limit 10 offset 5"

    def test_postgres_offset_without_limit(self):
        """Test PostgreSQL renders an offset on its own."""
        components = QueryComponents(table="users", offset=5)
        assert PostgresGrammar().compile_select(components) == 'select * from "users" offset 5'


class TestWriteCompilation:
    """Test INSERT, UPDATE and DELETE compilation."""

    def test_multi_row_insert(self):
        """Test one placeholder group per row, columns from the first row."""
        sql = MySqlGrammar().compile_insert(
            "users",
            [{"name": "a", "age": 1}, {"name": "b", "age": 2}],
        )
        assert sql == "insert into `users` (`name`, `age`) values (?, ?), (?, ?)"

    def test_single_row_mapping_insert(self):
        """Test that a single mapping compiles as one row."""
        sql = SqliteGrammar().compile_insert("users", {"name": "a"})
        assert sql == 'insert into "users" ("name") values (?)'

    @pytest.mark.parametrize(
        "grammar,expected",
        [
            (MySqlGrammar(), "insert into `users` () values ()"),
            (SqliteGrammar(), 'insert into "users" default values'),
            (PostgresGrammar(), 'insert into "users" default values'),
        ],
    )
    def test_empty_insert_per_dialect(self, grammar, expected):
        """Test each dialect's insert without columns."""
        assert grammar.compile_insert("users", {}) == expected

    def test_update_with_wheres(self):
        """Test SET assignments followed by the WHERE clause."""
        wheres = [WhereClause(type=WhereType.BASIC, column="id", operator="=", values=[1])]
        sql = SqliteGrammar().compile_update("users", {"name": "x", "age": 3}, wheres)
        assert sql == 'update "users" set "name" = ?, "age" = ? where "id" = ?'

    def test_delete_without_wheres(self):
        """Test an unrestricted DELETE."""
        assert MySqlGrammar(table_prefix="t_").compile_delete("users", []) == "delete from `t_users`"


class TestGrammarFactory:
    """Test grammar resolution from driver names."""

    @pytest.mark.parametrize(
        "driver,grammar_class",
        [
            ("mysql", MySqlGrammar),
            ("pgsql", PostgresGrammar),
            ("postgresql", PostgresGrammar),
            ("SQLite", SqliteGrammar),
        ],
    )
    def test_create_known_driver(self, driver, grammar_class):
        """Test that known drivers and aliases resolve."""
        assert isinstance(GrammarFactory.create(driver), grammar_class)

    def test_prefix_is_passed_through(self):
        """Test that the factory configures the table prefix."""
        assert get_grammar("mysql", table_prefix="app_").table_prefix == "app_"

    def test_unknown_driver_raises(self):
        """Test that an unsupported driver is a configuration error."""
        with pytest.raises(LightORMError) as exc_info:
            GrammarFactory.create("oracle")

        assert exc_info.value.error_code == ErrorCode.UNSUPPORTED_DRIVER
        assert "oracle" in exc_info.value.message
