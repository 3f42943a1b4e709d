"""Unit tests for the DatabaseManager."""

from unittest.mock import patch

import pytest

from lightorm.common.exceptions import ErrorCode, LightORMError
from lightorm.connections import SqliteConnection
from lightorm.grammar import MySqlGrammar, PostgresGrammar, SqliteGrammar
from lightorm.logging.filters import connection_var
from lightorm.manager import DatabaseManager
from lightorm.query import QueryBuilder
from lightorm.settings import ConnectionConfig


class TestConfiguration:
    """Test configuration registration and lookup."""

    def test_first_configuration_becomes_default(self):
        """Test the default connection is the first one added."""
        db = DatabaseManager()
        db.add_configuration("primary", {"driver": "sqlite"})
        db.add_configuration("secondary", ConnectionConfig(driver="mysql"))

        assert db.default_connection == "primary"
        assert db.connection_names == ["primary", "secondary"]
        assert db.has_connection("secondary")
        assert not db.has_connection("other")

    def test_set_default_connection(self):
        """Test switching and rejecting default connections."""
        db = DatabaseManager({"a": {"driver": "sqlite"}, "b": {"driver": "sqlite"}})

        db.set_default_connection("b")
        assert db.default_connection == "b"

        with pytest.raises(LightORMError) as exc_info:
            db.set_default_connection("c")
        assert exc_info.value.error_code == ErrorCode.CONFIG_MISSING

    def test_no_configuration(self):
        """Test acquiring a connection with nothing configured."""
        with pytest.raises(LightORMError) as exc_info:
            DatabaseManager().connection()
        assert exc_info.value.error_code == ErrorCode.CONFIG_MISSING

    def test_unknown_connection_name(self, manager):
        """Test acquiring an unconfigured name."""
        with pytest.raises(LightORMError) as exc_info:
            manager.connection("reporting")
        assert exc_info.value.details["config_key"] == "reporting"

    def test_unsupported_driver_rejected_at_acquisition(self):
        """Test the driver is validated when the connection is requested."""
        db = DatabaseManager({"default": {"driver": "oracle"}})

        with pytest.raises(LightORMError) as exc_info:
            db.table("users")

        assert exc_info.value.error_code == ErrorCode.UNSUPPORTED_DRIVER

    @pytest.mark.parametrize(
        "driver,port",
        [("mysql", 3306), ("pgsql", 5432), ("postgresql", 5432), ("sqlite", 0), ("oracle", 3306)],
    )
    def test_default_port(self, driver, port):
        """Test default ports per driver."""
        assert DatabaseManager.default_port(driver) == port


class TestConnections:
    """Test connection lifecycle."""

    def test_connection_is_cached(self, manager):
        """Test the same connection object is returned for a name."""
        connection = manager.connection()
        assert isinstance(connection, SqliteConnection)
        assert manager.connection("default") is connection

    def test_disconnect_opens_new_connection_next_time(self, manager):
        """Test disconnect drops the cached connection."""
        first = manager.connection()
        manager.disconnect()

        assert manager.connection() is not first
        with pytest.raises(LightORMError):
            first.handle

    def test_disconnect_all(self):
        """Test every open connection is closed."""
        db = DatabaseManager({"a": {"driver": "sqlite"}, "b": {"driver": "sqlite"}})
        a, b = db.connection("a"), db.connection("b")

        db.disconnect_all()

        assert a.transaction_level == 0
        with pytest.raises(LightORMError):
            b.handle

    def test_table_returns_wired_builder(self, fake_cache):
        """Test table() wires connection, prefixed grammar and cache."""
        db = DatabaseManager(
            {"default": {"driver": "sqlite", "prefix": "app_"}},
            query_cache=fake_cache,
        )
        try:
            builder = db.table("users")

            assert isinstance(builder, QueryBuilder)
            assert builder.connection is db.connection()
            assert builder.query_cache is fake_cache
            assert builder.to_sql() == 'select * from "app_users"'
        finally:
            db.disconnect_all()

    def test_get_grammar(self):
        """Test grammar resolution with and without an explicit driver."""
        db = DatabaseManager({"default": {"driver": "pgsql", "prefix": "p_"}})

        assert isinstance(db.get_grammar(), PostgresGrammar)
        assert db.get_grammar().table_prefix == "p_"
        assert isinstance(db.get_grammar("mysql"), MySqlGrammar)
        assert isinstance(db.get_grammar("sqlite"), SqliteGrammar)

    def test_set_profiler_reaches_open_and_future_connections(self, fake_profiler):
        """Test the profiler is attached everywhere."""
        db = DatabaseManager({"a": {"driver": "sqlite"}, "b": {"driver": "sqlite"}})
        try:
            opened = db.connection("a")
            db.set_profiler(fake_profiler)

            assert opened.profiler is fake_profiler
            assert db.connection("b").profiler is fake_profiler
        finally:
            db.disconnect_all()


class TestScopedHelpers:
    """Test on() and transaction()."""

    def test_on_binds_connection_name_for_logging(self):
        """Test the logging context carries the connection name during the callback."""
        db = DatabaseManager({"default": {"driver": "sqlite"}, "audit": {"driver": "sqlite"}})
        try:
            seen = db.on("audit", lambda conn: (conn.name, connection_var.get()))

            assert seen == ("audit", "audit")
            assert connection_var.get() is None
        finally:
            db.disconnect_all()

    def test_transaction_rolls_back_on_error(self, manager):
        """Test manager.transaction() delegates to the connection."""
        manager.connection().query("create table t (id integer)")

        def _work(conn):
            conn.query("insert into t values (?)", [1])
            raise KeyError("stop")

        with pytest.raises(KeyError):
            manager.transaction(_work)

        assert manager.table("t").count() == 0


class TestLoadFromEnv:
    """Test loading the default configuration from a .env file."""

    def test_missing_file_is_ignored(self, tmp_path):
        """Test nothing is configured when the file does not exist."""
        db = DatabaseManager()
        assert db.load_from_env(tmp_path / ".env") is False
        assert db.connection_names == []

    def test_loads_network_settings(self, tmp_path, monkeypatch):
        """Test DB_* values from the file build the default configuration."""
        for name in ("DB_DRIVER", "DB_CONNECTION", "DB_HOST", "DB_PORT", "DB_DATABASE", "DB_NAME",
                     "DB_USERNAME", "DB_USER", "DB_PASSWORD", "DB_PREFIX", "DB_FILE"):
            monkeypatch.delenv(name, raising=False)

        env_file = tmp_path / ".env"
        env_file.write_text(
            "DB_CONNECTION=pgsql\n"
            "DB_HOST=db.internal\n"
            "DB_DATABASE=app\n"
            "DB_USER=svc\n"
            "DB_PASSWORD=secret\n"
            "DB_PREFIX=app_\n"
        )

        db = DatabaseManager()
        assert db.load_from_env(env_file) is True

        config = db.get_configuration("default")
        assert config.resolved_driver.value == "pgsql"
        assert (config.host, config.port, config.dbname) == ("db.internal", 5432, "app")
        assert (config.username, config.password, config.prefix) == ("svc", "secret", "app_")
        assert db.default_connection == "default"

    def test_loads_sqlite_settings(self, tmp_path, monkeypatch):
        """Test sqlite falls back to an in-memory database."""
        for name in ("DB_DRIVER", "DB_CONNECTION", "DB_DATABASE", "DB_FILE", "DB_PORT"):
            monkeypatch.delenv(name, raising=False)

        env_file = tmp_path / ".env"
        env_file.write_text("DB_DRIVER=sqlite\n")

        db = DatabaseManager()
        db.load_from_env(env_file)

        config = db.get_configuration()
        assert config.database == ":memory:"
        assert config.port == 0
