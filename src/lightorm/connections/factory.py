"""Connection Factory.

Resolves a connection configuration to the dialect-specific Connection
class and opens it.
"""

from typing import Any, Dict, Mapping, Optional, Type, Union

from lightorm.common.exceptions import unsupported_driver_error
from lightorm.connections.base import Connection
from lightorm.connections.mysql import MySqlConnection
from lightorm.connections.postgres import PostgresConnection
from lightorm.connections.sqlite import SqliteConnection
from lightorm.constants.sql import Driver
from lightorm.protocols.collaborators import QueryProfiler
from lightorm.settings.config import ConnectionConfig


class ConnectionFactory:
    """Factory for creating dialect-specific connections.

    Example:
        >>> conn = ConnectionFactory.create({"driver": "sqlite", "database": ":memory:"})
        >>> conn.driver_name
        'sqlite'
    """

    _connections: Dict[Driver, Type[Connection]] = {
        Driver.MYSQL: MySqlConnection,
        Driver.PGSQL: PostgresConnection,
        Driver.SQLITE: SqliteConnection,
    }

    @staticmethod
    def create(
        config: Union[ConnectionConfig, Mapping[str, Any]],
        name: str = "default",
        profiler: Optional[QueryProfiler] = None,
    ) -> Connection:
        """Create and open a connection.

        Args:
            config: Connection configuration
            name: Connection name
            profiler: Optional profiler attached to the connection

        Returns:
            Open connection for the configured driver

        Raises:
            LightORMError: UNSUPPORTED_DRIVER for an unknown driver,
                CONNECTION_ERROR when the database cannot be reached
        """
        if not isinstance(config, ConnectionConfig):
            config = ConnectionConfig.model_validate(dict(config))

        driver = config.resolved_driver
        if driver is None:
            raise unsupported_driver_error(config.driver, details={"connection": name})

        return ConnectionFactory._connections[driver](config, name=name, profiler=profiler)
