from typing import List

from sqlalchemy.engine import URL

from lightorm.connections.base import Connection
from lightorm.constants.sql import Driver


class PostgresConnection(Connection):
    """PostgreSQL connection through the psycopg2 driver."""

    driver = Driver.PGSQL

    savepoint_sql = "SAVEPOINT {name}"
    release_savepoint_sql = "RELEASE SAVEPOINT {name}"
    rollback_to_savepoint_sql = "ROLLBACK TO {name}"

    def get_url(self) -> URL:
        return URL.create(
            "postgresql+psycopg2",
            username=self.config.username or None,
            password=self.config.password or None,
            host=self.config.host,
            port=self.config.effective_port,
            database=self.config.dbname,
        )

    def _session_statements(self) -> List[str]:
        statements = []

        if self.config.schema_name:
            statements.append(f"SET search_path TO {self.config.schema_name}")

        if self.config.timezone:
            statements.append(f"SET timezone = '{self.config.timezone}'")

        return statements
