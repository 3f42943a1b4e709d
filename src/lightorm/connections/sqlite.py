from typing import Any, List

from sqlalchemy import event
from sqlalchemy.engine import URL, Engine

from lightorm.connections.base import Connection
from lightorm.constants.sql import Driver
from lightorm.logging import get_logger

logger = get_logger(__name__)


class SqliteConnection(Connection):
    """SQLite connection through the standard library driver.

    The driver's own transaction handling is switched off and BEGIN is
    emitted explicitly, so that SAVEPOINT/RELEASE nest inside the outer
    transaction instead of starting or ending one. PRAGMAs are applied on
    the raw DBAPI connection before any transaction exists, since SQLite
    ignores ``foreign_keys`` inside a transaction.
    """

    driver = Driver.SQLITE

    savepoint_sql = "SAVEPOINT {name}"
    release_savepoint_sql = "RELEASE {name}"
    rollback_to_savepoint_sql = "ROLLBACK TO {name}"

    def get_url(self) -> URL:
        if self.config.is_memory_database:
            return URL.create("sqlite+pysqlite")

        directory = self.config.database_directory
        if directory is not None and not directory.exists():
            directory.mkdir(mode=0o755, parents=True, exist_ok=True)
            logger.info("Created database directory", extra={"directory": str(directory)})

        return URL.create("sqlite+pysqlite", database=self.config.database)

    def _pragmas(self) -> List[str]:
        pragmas = []

        if self.config.foreign_keys:
            pragmas.append("PRAGMA foreign_keys = ON")

        if self.config.journal_mode:
            pragmas.append(f"PRAGMA journal_mode = {self.config.journal_mode}")

        if self.config.synchronous:
            pragmas.append(f"PRAGMA synchronous = {self.config.synchronous}")

        return pragmas

    def _on_engine_created(self, engine: Engine) -> None:
        event.listen(engine, "connect", self._configure_dbapi_connection)
        event.listen(engine, "begin", self._emit_begin)

    def _configure_dbapi_connection(self, dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None

        cursor = dbapi_connection.cursor()
        try:
            for pragma in self._pragmas():
                cursor.execute(pragma)
        finally:
            cursor.close()

    @staticmethod
    def _emit_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")
