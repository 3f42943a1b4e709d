from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from lightorm.constants.sql import DEFAULT_PORTS, Driver, normalize_driver
from lightorm.settings.config import MEMORY_DATABASE, ConnectionConfig


class DatabaseSettings(BaseSettings):
    """Connection settings read from ``DB_*`` environment variables.

    Values come from the process environment and, when given, an ``.env``
    file (environment variables win). Several variables have aliases so
    existing ``.env`` files keep working::

        DB_DRIVER / DB_CONNECTION   driver name
        DB_DATABASE / DB_NAME       database name (network dialects)
        DB_DATABASE / DB_FILE       database file (sqlite)
        DB_USERNAME / DB_USER       user name

    Example:
        >>> settings = DatabaseSettings(_env_file=".env")
        >>> config = settings.to_connection_config()
    """

    model_config = SettingsConfigDict(
        env_file=None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    driver: str = Field(
        default=Driver.MYSQL.value,
        validation_alias=AliasChoices("DB_DRIVER", "DB_CONNECTION"),
    )
    host: str = Field(default="localhost", validation_alias="DB_HOST")
    port: Optional[int] = Field(default=None, validation_alias="DB_PORT")
    dbname: str = Field(default="", validation_alias=AliasChoices("DB_DATABASE", "DB_NAME"))
    username: str = Field(default="", validation_alias=AliasChoices("DB_USERNAME", "DB_USER"))
    password: str = Field(default="", validation_alias="DB_PASSWORD")
    charset: str = Field(default="utf8mb4", validation_alias="DB_CHARSET")
    database: Optional[str] = Field(default=None, validation_alias=AliasChoices("DB_DATABASE", "DB_FILE"))
    prefix: str = Field(default="", validation_alias="DB_PREFIX")

    def to_connection_config(self) -> ConnectionConfig:
        """Build the ConnectionConfig for the ``default`` connection.

        The port falls back to the driver's default port. For sqlite the
        database path falls back to an in-memory database.
        """
        driver = normalize_driver(self.driver)
        port = self.port
        if port is None:
            port = DEFAULT_PORTS.get(driver, DEFAULT_PORTS[Driver.MYSQL])

        config = {
            "driver": self.driver,
            "host": self.host,
            "port": port,
            "dbname": self.dbname,
            "username": self.username,
            "password": self.password,
            "charset": self.charset,
            "prefix": self.prefix,
        }
        if driver == Driver.SQLITE:
            config["database"] = self.database or MEMORY_DATABASE

        return ConnectionConfig.model_validate(config)
