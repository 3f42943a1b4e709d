"""Configuration for lightorm connections.

Two layers are provided:

    - ConnectionConfig: a pydantic model, the validated form of one named
      connection's mapping (driver, host, port, dbname, ... or database).
    - DatabaseSettings: a pydantic-settings class that reads ``DB_*``
      environment variables (and an optional ``.env`` file) and produces a
      ConnectionConfig.

There is no process-wide settings singleton; configurations are handed to
a DatabaseManager explicitly.

Quick Start:
    >>> from lightorm.settings import ConnectionConfig
    >>> config = ConnectionConfig(driver="sqlite", database=":memory:")
"""

from lightorm.settings.config import MEMORY_DATABASE, ConnectionConfig
from lightorm.settings.env import DatabaseSettings

__all__ = [
    "MEMORY_DATABASE",
    "ConnectionConfig",
    "DatabaseSettings",
]
