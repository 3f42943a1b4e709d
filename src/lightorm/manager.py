"""Named connection registry.

The DatabaseManager owns the connection configurations of an application,
opens connections lazily, and hands out query builders wired to the right
connection and grammar. There is no process-wide instance; create one and
pass it where it is needed.
"""

from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, TypeVar, Union

from lightorm.common.exceptions import ErrorCode, configuration_error
from lightorm.connections.base import Connection
from lightorm.connections.factory import ConnectionFactory
from lightorm.constants.sql import DEFAULT_PORTS, Driver, normalize_driver
from lightorm.grammar.base import Grammar
from lightorm.grammar.factory import GrammarFactory
from lightorm.logging import get_logger
from lightorm.logging.filters import connection_var
from lightorm.protocols.collaborators import QueryCache, QueryProfiler
from lightorm.query.builder import QueryBuilder
from lightorm.settings.config import ConnectionConfig
from lightorm.settings.env import DatabaseSettings

logger = get_logger(__name__)

T = TypeVar("T")

ConfigInput = Union[ConnectionConfig, Mapping[str, Any]]


class DatabaseManager:
    """Registry of named connections.

    Example:
        >>> db = DatabaseManager({"default": {"driver": "sqlite", "database": ":memory:"}})
        >>> db.table("users").insert({"name": "Ada"})
        >>> db.transaction(lambda conn: conn.query("delete from users"))
    """

    def __init__(
        self,
        configurations: Optional[Mapping[str, ConfigInput]] = None,
        default_connection: Optional[str] = None,
        query_cache: Optional[QueryCache] = None,
        profiler: Optional[QueryProfiler] = None,
    ):
        self._configurations: Dict[str, ConnectionConfig] = {}
        self._connections: Dict[str, Connection] = {}
        self._default_connection: Optional[str] = None
        self._query_cache = query_cache
        self._profiler = profiler

        if configurations:
            self.set_configurations(configurations)
        if default_connection is not None:
            self.set_default_connection(default_connection)

    def __repr__(self) -> str:
        return (
            f"DatabaseManager(connections={self.connection_names!r}, "
            f"default={self._default_connection!r})"
        )

    @staticmethod
    def _to_config(config: ConfigInput) -> ConnectionConfig:
        if isinstance(config, ConnectionConfig):
            return config
        return ConnectionConfig.model_validate(dict(config))

    def set_configurations(self, configurations: Mapping[str, ConfigInput]) -> None:
        """Replace all configurations.

        Open connections are kept; they are replaced the next time the
        configuration is used after :meth:`disconnect`.
        """
        self._configurations = {}
        self._default_connection = None
        for name, config in configurations.items():
            self.add_configuration(name, config)

    def add_configuration(self, name: str, config: ConfigInput) -> None:
        """Register a named configuration; the first one becomes the default."""
        self._configurations[name] = self._to_config(config)
        if self._default_connection is None:
            self._default_connection = name

    def set_default_connection(self, name: str) -> None:
        if name not in self._configurations:
            raise configuration_error(
                f"Database connection [{name}] not configured",
                config_key=name,
                error_code=ErrorCode.CONFIG_MISSING,
            )
        self._default_connection = name

    @property
    def default_connection(self) -> Optional[str]:
        return self._default_connection

    @property
    def connection_names(self) -> List[str]:
        return list(self._configurations.keys())

    def has_connection(self, name: str) -> bool:
        return name in self._configurations

    def get_configuration(self, name: Optional[str] = None) -> ConnectionConfig:
        """Configuration for ``name`` (the default connection when omitted).

        Raises:
            LightORMError: CONFIG_MISSING when no name resolves or the name
                is not configured
        """
        name = name or self._default_connection
        if not name:
            raise configuration_error(
                "No database connection specified and no default connection configured",
                error_code=ErrorCode.CONFIG_MISSING,
            )

        config = self._configurations.get(name)
        if config is None:
            raise configuration_error(
                f"Database connection [{name}] not configured",
                config_key=name,
                error_code=ErrorCode.CONFIG_MISSING,
            )
        return config

    def connection(self, name: Optional[str] = None) -> Connection:
        """Get a named connection, opening it on first use.

        Args:
            name: Connection name, the default connection when omitted

        Returns:
            The cached Connection for ``name``

        Raises:
            LightORMError: CONFIG_MISSING for an unresolvable name,
                UNSUPPORTED_DRIVER for an unknown driver, CONNECTION_ERROR
                when the database cannot be reached
        """
        name = name or self._default_connection
        config = self.get_configuration(name)

        if name not in self._connections:
            self._connections[name] = ConnectionFactory.create(config, name=name, profiler=self._profiler)
            logger.debug(
                "Connection created",
                extra={"db.connection": name, "db.system": config.driver},
            )

        return self._connections[name]

    def get_grammar(self, driver: Optional[Union[str, Driver]] = None) -> Grammar:
        """Grammar for ``driver`` with the default connection's table prefix.

        When ``driver`` is omitted, the default connection's driver is used.
        """
        config = self.get_configuration()
        return GrammarFactory.create(driver or config.driver, table_prefix=config.prefix)

    def table(self, name: str, connection: Optional[str] = None) -> QueryBuilder:
        """Start a query against ``name`` on the given (or default) connection."""
        conn = self.connection(connection)
        grammar = GrammarFactory.create(conn.config.driver, table_prefix=conn.config.prefix)
        return QueryBuilder(conn, grammar, name, query_cache=self._query_cache)

    def disconnect(self, name: Optional[str] = None) -> None:
        name = name or self._default_connection
        connection = self._connections.pop(name, None) if name else None
        if connection is not None:
            connection.disconnect()

    def disconnect_all(self) -> None:
        for name in list(self._connections.keys()):
            self.disconnect(name)

    def on(self, name: str, callback: Callable[[Connection], T]) -> T:
        """Run ``callback`` with the named connection.

        Log records emitted during the callback carry the connection name.
        """
        connection = self.connection(name)
        token = connection_var.set(name)
        try:
            return callback(connection)
        finally:
            connection_var.reset(token)

    def transaction(self, callback: Callable[[Connection], T], connection: Optional[str] = None) -> T:
        """Run ``callback`` inside a transaction on the given (or default) connection."""
        return self.connection(connection).transaction(callback)

    def load_from_env(self, env_file: Union[str, Path] = ".env") -> bool:
        """Load the ``default`` configuration from ``DB_*`` variables.

        Args:
            env_file: Path of the ``.env`` file to read

        Returns:
            False when the file does not exist (nothing loaded), True otherwise
        """
        path = Path(env_file)
        if not path.is_file():
            logger.debug("Environment file not found", extra={"env_file": str(path)})
            return False

        settings = DatabaseSettings(_env_file=str(path))
        self.add_configuration("default", settings.to_connection_config())
        logger.info(
            "Loaded database configuration from environment",
            extra={"env_file": str(path), "db.system": settings.driver},
        )
        return True

    @staticmethod
    def default_port(driver: str) -> int:
        """Default port for a driver name; 3306 when the driver is unknown."""
        resolved = normalize_driver(driver)
        if resolved is None:
            return DEFAULT_PORTS[Driver.MYSQL]
        return DEFAULT_PORTS[resolved]

    def set_query_cache(self, cache: Optional[QueryCache]) -> None:
        self._query_cache = cache

    def set_profiler(self, profiler: Optional[QueryProfiler]) -> None:
        """Attach a profiler to open connections and to connections opened later."""
        self._profiler = profiler
        for connection in self._connections.values():
            connection.set_profiler(profiler)
