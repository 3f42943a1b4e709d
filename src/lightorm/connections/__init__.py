"""Connection module for statement execution and transactions.

Architecture:
    - base.py: SQLAlchemy-backed Connection with the transaction-depth
      state machine shared by every dialect
    - mysql.py, sqlite.py, postgres.py: driver URLs, session setup and
      savepoint SQL per dialect
    - factory.py: configuration to connection resolution
"""

from lightorm.connections.base import Connection, adapt_placeholders
from lightorm.connections.factory import ConnectionFactory
from lightorm.connections.mysql import MySqlConnection
from lightorm.connections.postgres import PostgresConnection
from lightorm.connections.sqlite import SqliteConnection

__all__ = [
    "Connection",
    "ConnectionFactory",
    "MySqlConnection",
    "PostgresConnection",
    "SqliteConnection",
    "adapt_placeholders",
]
