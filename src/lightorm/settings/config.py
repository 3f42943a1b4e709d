"""Connection configuration model.

A ConnectionConfig is the validated form of the mapping callers hand to the
DatabaseManager for each named connection. The driver name is normalized
(lowercase, ``postgresql`` accepted for ``pgsql``) but deliberately not
rejected here: an unsupported driver is reported when the connection is
acquired, before any SQL is compiled.
"""

from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ConfigDict, Field, field_validator

from lightorm.constants.sql import DEFAULT_PORTS, Driver, normalize_driver
from lightorm.types.base import LightORMBaseModel

MEMORY_DATABASE = ":memory:"


class ConnectionConfig(LightORMBaseModel):
    """Settings for a single named connection.

    Network dialects use ``host``, ``port``, ``dbname``, ``username``,
    ``password`` and ``charset``. The embedded dialect uses ``database``,
    a file path or ``:memory:``.
    """

    driver: str = Field(default=Driver.MYSQL.value, description="mysql, pgsql/postgresql or sqlite")

    host: str = Field(default="localhost")
    port: Optional[int] = Field(default=None, ge=0, le=65535)
    dbname: Optional[str] = Field(default=None, description="Database name for network dialects")
    username: Optional[str] = None
    password: Optional[str] = None
    charset: Optional[str] = Field(default=None, description="MySQL connection charset (utf8mb4 when unset)")

    database: Optional[str] = Field(default=None, description="SQLite file path or :memory:")

    prefix: str = Field(default="", description="Prefix applied to the target table name")
    timezone: Optional[str] = None
    strict: bool = Field(default=False, description="Enable MySQL strict sql_mode")
    schema_name: Optional[str] = Field(
        default=None,
        alias="schema",
        description="PostgreSQL search_path",
    )
    journal_mode: Optional[str] = None
    synchronous: Optional[str] = None
    foreign_keys: bool = Field(default=True, description="SQLite foreign key enforcement")

    options: Dict[str, Any] = Field(
        default_factory=dict,
        description="Extra DBAPI connect arguments",
    )

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("driver", mode="before")
    @classmethod
    def normalize_driver_name(cls, v: Any) -> str:
        if isinstance(v, Driver):
            return v.value
        return str(v or "").strip().lower()

    @property
    def resolved_driver(self) -> Optional[Driver]:
        """The Driver for this config, or None when the name is unsupported."""
        return normalize_driver(self.driver)

    @property
    def effective_port(self) -> Optional[int]:
        if self.port is not None:
            return self.port
        driver = self.resolved_driver
        return DEFAULT_PORTS.get(driver) if driver else None

    @property
    def is_memory_database(self) -> bool:
        return not self.database or self.database == MEMORY_DATABASE

    @property
    def database_directory(self) -> Optional[Path]:
        """Parent directory of a file-based SQLite database."""
        if self.is_memory_database:
            return None
        return Path(self.database).expanduser().parent
