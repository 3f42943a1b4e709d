import time
from abc import ABC, abstractmethod
from typing import Any, Callable, ClassVar, Dict, List, Mapping, Optional, Sequence, Tuple, TypeVar, Union

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Connection as SAConnection, CursorResult, Engine, RootTransaction
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from lightorm.common.exceptions import configuration_error, connection_error, query_execution_error
from lightorm.constants.sql import SAVEPOINT_PREFIX, Driver
from lightorm.logging import get_logger
from lightorm.protocols.collaborators import QueryProfiler
from lightorm.settings.config import ConnectionConfig
from lightorm.types.query import StatementResult
from lightorm.utils.decorators import traced

logger = get_logger(__name__)

T = TypeVar("T")

_POSITIONAL_PARAMSTYLES = {"qmark", "format", "pyformat", "numeric"}


def adapt_placeholders(sql: str, paramstyle: str) -> str:
    """Rewrite ``?`` placeholders into the driver's positional paramstyle.

    Placeholders inside quoted text (string literals or quoted identifiers)
    are left alone. For the ``format``/``pyformat`` styles literal ``%``
    characters are doubled, since the driver applies %-formatting to the
    statement when parameters are passed.

    Args:
        sql: Statement using ``?`` placeholders
        paramstyle: DBAPI paramstyle of the driver

    Returns:
        Statement in the driver's paramstyle

    Raises:
        LightORMError: If the paramstyle is not positional
    """
    if paramstyle == "qmark":
        return sql
    if paramstyle not in _POSITIONAL_PARAMSTYLES:
        raise configuration_error(f"Unsupported driver paramstyle: {paramstyle}", config_key="paramstyle")

    percent_escape = paramstyle != "numeric"
    adapted: List[str] = []
    quote: Optional[str] = None
    position = 0

    for char in sql:
        if char == "%" and percent_escape:
            adapted.append("%%")
            continue

        if quote is not None:
            if char == quote:
                quote = None
            adapted.append(char)
        elif char in ("'", '"', "`"):
            quote = char
            adapted.append(char)
        elif char == "?":
            position += 1
            adapted.append(f":{position}" if paramstyle == "numeric" else "%s")
        else:
            adapted.append(char)

    return "".join(adapted)


class Connection(ABC):
    """SQLAlchemy-backed connection owning one live database handle.

    A Connection opens a single SQLAlchemy ``Connection`` when it is
    constructed and keeps it until :meth:`disconnect`. Statements are
    executed with :meth:`query` using ``?`` placeholders and positional
    bindings; rows are fully materialized before returning.

    Transactions:
        The connection keeps one integer ``transaction_level``:

        - 0: no transaction, every statement is committed on its own
        - 1: a native transaction is open
        - n > 1: savepoint ``sp{n-1}`` is the innermost checkpoint

        :meth:`begin_transaction` opens the native transaction at depth 0
        and creates savepoint ``sp{n}`` at depth n. :meth:`commit` and
        :meth:`rollback` undo one level: the native transaction at depth 1,
        the innermost savepoint otherwise. At depth 0 both return False.

    Platform Customization:
        Dialect subclasses provide:
        - get_url(): SQLAlchemy URL for the configuration
        - _session_statements(): SET commands run right after connecting
        - _on_engine_created(): engine event hooks
        - savepoint SQL templates (class attributes)

    Thread safety:
        The transaction counter is unsynchronized. A Connection serves one
        logical call stack at a time.

    Example:
        >>> conn = SqliteConnection({"driver": "sqlite"})
        >>> conn.query("create table t (id integer)")
        >>> conn.transaction(lambda c: c.query("insert into t values (?)", [1]))
    """

    driver: ClassVar[Driver]

    savepoint_sql: ClassVar[str] = "SAVEPOINT {name}"
    release_savepoint_sql: ClassVar[str] = "RELEASE SAVEPOINT {name}"
    rollback_to_savepoint_sql: ClassVar[str] = "ROLLBACK TO SAVEPOINT {name}"

    def __init__(
        self,
        config: Union[ConnectionConfig, Mapping[str, Any]],
        name: str = "default",
        profiler: Optional[QueryProfiler] = None,
    ):
        """Initialize and connect.

        Args:
            config: Connection configuration (model or plain mapping)
            name: Connection name used in logs and errors
            profiler: Optional profiler receiving start/end events per statement

        Raises:
            LightORMError: CONNECTION_ERROR if the handle cannot be opened
        """
        self.config: ConnectionConfig = (
            config if isinstance(config, ConnectionConfig) else ConnectionConfig.model_validate(dict(config))
        )
        self.name = name
        self._profiler = profiler
        self._engine: Optional[Engine] = None
        self._handle: Optional[SAConnection] = None
        self._transaction: Optional[RootTransaction] = None
        self._transaction_level = 0

        self.connect()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, transaction_level={self._transaction_level})"

    @abstractmethod
    def get_url(self) -> URL:
        """Build the SQLAlchemy URL for this connection's configuration."""

    def _session_statements(self) -> List[str]:
        """Statements applied once, right after the handle is opened."""
        return []

    def _on_engine_created(self, engine: Engine) -> None:
        """Hook for registering engine events before the first connect."""

    def _create_engine(self) -> Engine:
        """Create the SQLAlchemy engine.

        NullPool is used: the connection holds exactly one live handle, so
        there is nothing to pool.
        """
        engine = create_engine(
            self.get_url(),
            poolclass=NullPool,
            connect_args=dict(self.config.options),
        )
        self._on_engine_created(engine)
        return engine

    def connect(self) -> None:
        """Open the live handle and apply session settings.

        Raises:
            LightORMError: CONNECTION_ERROR when the driver cannot connect
        """
        try:
            self._engine = self._create_engine()
            self._handle = self._engine.connect()

            for statement in self._session_statements():
                self._handle.exec_driver_sql(statement)
            self._handle.commit()

            logger.info(
                "Database connection established",
                extra={"db.connection": self.name, "db.system": self.driver.value},
            )
        except Exception as e:
            self._handle = None
            self._engine = None
            raise connection_error(
                f"{self.driver.value} connection failed: {e}",
                driver=self.driver.value,
                host=self.config.database if self.driver == Driver.SQLITE else self.config.host,
                cause=e,
            )

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise connection_error("Database connection not established", driver=self.driver.value)
        return self._engine

    @property
    def handle(self) -> SAConnection:
        """The live SQLAlchemy connection.

        Raises:
            LightORMError: CONNECTION_ERROR after :meth:`disconnect`
        """
        if self._handle is None:
            raise connection_error("Database connection not established", driver=self.driver.value)
        return self._handle

    @property
    def driver_name(self) -> str:
        return self.driver.value

    @property
    def profiler(self) -> Optional[QueryProfiler]:
        return self._profiler

    def set_profiler(self, profiler: Optional[QueryProfiler]) -> None:
        self._profiler = profiler

    def get_config(self) -> ConnectionConfig:
        return self.config

    def disconnect(self) -> None:
        """Close the handle and reset the transaction depth.

        Closing a handle with an open transaction rolls it back.
        """
        if self._handle is not None:
            self._handle.close()
        if self._engine is not None:
            self._engine.dispose()

        self._handle = None
        self._engine = None
        self._transaction = None
        self._transaction_level = 0

        logger.info("Database connection closed", extra={"db.connection": self.name})

    def _span_attributes(self, sql: str, bindings: Sequence[Any] = ()) -> Dict[str, Any]:
        """Build OpenTelemetry span attributes for a statement."""
        statement = (sql or "").strip()
        if len(statement) > 4096:
            statement = f"{statement[:4093]}..."

        return {
            "db.system": self.driver.value,
            "db.name": self.name,
            "db.operation": statement.split(" ", 1)[0].upper() if statement else None,
            "db.statement": statement,
            "db.bindings.count": len(bindings),
        }

    def _prepare(self, sql: str, bindings: Sequence[Any]) -> Tuple[str, Optional[tuple]]:
        if not bindings:
            return sql, None
        return adapt_placeholders(sql, self.engine.dialect.paramstyle), tuple(bindings)

    @traced(
        span_name="lightorm.connection.query",
        attribute_getter=lambda self, sql, bindings=(): self._span_attributes(sql, bindings),
    )
    def query(self, sql: str, bindings: Sequence[Any] = ()) -> StatementResult:
        """Execute a parameterized statement.

        Outside a transaction the statement is committed immediately (or
        rolled back if it fails, leaving the handle usable). Inside a
        transaction nothing is committed or rolled back implicitly.

        Args:
            sql: Statement with ``?`` placeholders
            bindings: Positional values, one per placeholder

        Returns:
            StatementResult with materialized rows and the affected-row count

        Raises:
            LightORMError: QUERY_EXECUTION_ERROR carrying the driver message
        """
        bindings = list(bindings)
        handle = self.handle

        query_id = None
        if self._profiler is not None and self._profiler.is_enabled():
            query_id = self._profiler.start_query(sql, bindings)

        start_time = time.time()
        try:
            statement, parameters = self._prepare(sql, bindings)
            if parameters is None:
                cursor = handle.exec_driver_sql(statement)
            else:
                cursor = handle.exec_driver_sql(statement, parameters)
            result = self._materialize(cursor)

            if not self.in_transaction():
                handle.commit()

        except SQLAlchemyError as exc:
            if not self.in_transaction():
                handle.rollback()

            duration = time.time() - start_time
            logger.error(
                "SQL statement failed",
                extra={
                    "db.connection": self.name,
                    "db.duration_ms": round(duration * 1000, 3),
                    "error": str(exc),
                },
            )
            if query_id is not None:
                self._profiler.end_query(query_id)
            raise query_execution_error(sql, exc)

        duration = time.time() - start_time
        affected = result.rowcount
        logger.debug(
            "SQL statement executed",
            extra={
                "db.connection": self.name,
                "db.duration_ms": round(duration * 1000, 3),
                "db.row_count": affected,
            },
        )
        if query_id is not None:
            self._profiler.end_query(query_id, affected)

        return result

    @staticmethod
    def _materialize(cursor: CursorResult) -> StatementResult:
        """Fetch every row; reads report the fetched row count as rowcount."""
        if cursor.returns_rows:
            rows = [dict(row) for row in cursor.mappings().all()]
            return StatementResult(rows=rows, rowcount=len(rows))

        return StatementResult(rowcount=cursor.rowcount, lastrowid=cursor.lastrowid)

    @property
    def transaction_level(self) -> int:
        return self._transaction_level

    def in_transaction(self) -> bool:
        return self._transaction_level > 0

    @staticmethod
    def savepoint_name(level: int) -> str:
        """Name of the savepoint created when moving from ``level`` to ``level + 1``."""
        return f"{SAVEPOINT_PREFIX}{level}"

    def _run_transaction_step(self, description: str, step: Callable[[], Any]) -> None:
        try:
            step()
        except SQLAlchemyError as exc:
            raise query_execution_error(description, exc)

        logger.debug(
            "Transaction step",
            extra={
                "db.connection": self.name,
                "db.transaction_step": description,
                "db.transaction_level": self._transaction_level,
            },
        )

    def _savepoint_statement(self, template: str, level: int) -> None:
        sql = template.format(name=self.savepoint_name(level))
        self._run_transaction_step(sql, lambda: self.handle.exec_driver_sql(sql))

    def begin_transaction(self) -> bool:
        """Open a transaction level.

        Returns:
            True once the native transaction or savepoint is in place
        """
        handle = self.handle
        level = self._transaction_level

        if level == 0:
            def _begin() -> None:
                self._transaction = handle.begin()
            self._run_transaction_step("BEGIN", _begin)
        else:
            self._savepoint_statement(self.savepoint_sql, level)

        self._transaction_level += 1
        return True

    def commit(self) -> bool:
        """Close the innermost transaction level, keeping its changes.

        Returns:
            False when no transaction is open, True otherwise
        """
        if self._transaction_level == 0:
            return False

        self._transaction_level -= 1

        if self._transaction_level == 0:
            transaction, self._transaction = self._transaction, None
            self._run_transaction_step("COMMIT", transaction.commit)
        else:
            self._savepoint_statement(self.release_savepoint_sql, self._transaction_level)

        return True

    def rollback(self) -> bool:
        """Close the innermost transaction level, discarding its changes.

        Returns:
            False when no transaction is open, True otherwise
        """
        if self._transaction_level == 0:
            return False

        self._transaction_level -= 1

        if self._transaction_level == 0:
            transaction, self._transaction = self._transaction, None
            self._run_transaction_step("ROLLBACK", transaction.rollback)
        else:
            self._savepoint_statement(self.rollback_to_savepoint_sql, self._transaction_level)

        return True

    def transaction(self, callback: Callable[["Connection"], T]) -> T:
        """Run ``callback`` inside a transaction level.

        Commits when the callback returns; rolls back and re-raises the
        original exception unchanged when it raises. A failing rollback is
        logged and does not replace the callback's exception.

        Args:
            callback: Receives this connection

        Returns:
            Whatever the callback returned
        """
        self.begin_transaction()

        try:
            result = callback(self)
        except Exception:
            try:
                self.rollback()
            except Exception as rollback_error:
                logger.error(
                    "Transaction rollback failed",
                    extra={
                        "db.connection": self.name,
                        "db.transaction_level": self._transaction_level,
                        "error": str(rollback_error),
                    },
                )
            raise

        self.commit()
        return result
