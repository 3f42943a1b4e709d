from typing import List

from sqlalchemy.engine import URL

from lightorm.connections.base import Connection
from lightorm.constants.sql import Driver

DEFAULT_CHARSET = "utf8mb4"

STRICT_SQL_MODE = (
    "ONLY_FULL_GROUP_BY,STRICT_TRANS_TABLES,NO_ZERO_IN_DATE,NO_ZERO_DATE,"
    "ERROR_FOR_DIVISION_BY_ZERO,NO_ENGINE_SUBSTITUTION"
)


class MySqlConnection(Connection):
    """MySQL connection through the PyMySQL driver.

    The session charset, time zone and (optionally) strict SQL mode are
    applied once, right after connecting.
    """

    driver = Driver.MYSQL

    savepoint_sql = "SAVEPOINT {name}"
    release_savepoint_sql = "RELEASE SAVEPOINT {name}"
    rollback_to_savepoint_sql = "ROLLBACK TO SAVEPOINT {name}"

    @property
    def charset(self) -> str:
        return self.config.charset or DEFAULT_CHARSET

    def get_url(self) -> URL:
        return URL.create(
            "mysql+pymysql",
            username=self.config.username or None,
            password=self.config.password or None,
            host=self.config.host,
            port=self.config.effective_port,
            database=self.config.dbname,
            query={"charset": self.charset},
        )

    def _session_statements(self) -> List[str]:
        statements = [f"SET NAMES {self.charset}"]

        if self.config.timezone:
            statements.append(f"SET time_zone = '{self.config.timezone}'")

        if self.config.strict:
            statements.append(f"SET SESSION sql_mode = '{STRICT_SQL_MODE}'")

        return statements
