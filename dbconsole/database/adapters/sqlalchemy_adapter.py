"""
Shared SQLAlchemy plumbing for the socket based engines.

MySQL, PostgreSQL and SQLite all go through a single SQLAlchemy
connection. There is no pooling: every adapter opens exactly one DBAPI
connection in connect() (NullPool) and closes it in disconnect().
"""
import time
from abc import abstractmethod
from typing import Any, Dict, List, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from dbconsole.core.exceptions import DatabaseConnectionError, QueryExecutionError
from dbconsole.core.logging_config import get_logger
from dbconsole.database.adapters.base import DatabaseAdapter
from dbconsole.database.models import ConnectionDescriptor, QueryResult

logger = get_logger(__name__)

CONNECT_TIMEOUT_SECONDS = 10

# Sent verbatim to the cursor, so "%" and ":name" in user SQL stay literal
NO_PARAMETERS = {"no_parameters": True}


def native_error_message(error: SQLAlchemyError) -> str:
    """The driver's own error text, without SQLAlchemy's decoration."""
    orig = getattr(error, "orig", None)
    return str(orig) if orig is not None else str(error)


class SQLAlchemyAdapter(DatabaseAdapter):
    """Adapter base holding one live SQLAlchemy connection."""

    #: Human readable engine label for error messages
    engine_label = "database"

    def __init__(self, descriptor: ConnectionDescriptor):
        super().__init__(descriptor)
        self._engine: Optional[Engine] = None
        self._connection: Optional[Connection] = None

    @abstractmethod
    def _connection_url(self) -> URL:
        """SQLAlchemy URL for the descriptor."""

    def _connect_args(self) -> Dict[str, Any]:
        return {"connect_timeout": CONNECT_TIMEOUT_SECONDS}

    def _precheck(self) -> None:
        """Validate the descriptor before opening a socket."""

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    def connect(self) -> None:
        if self._connection is not None:
            return

        self._precheck()

        engine = None
        try:
            engine = create_engine(
                self._connection_url(),
                poolclass=NullPool,
                isolation_level="AUTOCOMMIT",
                connect_args=self._connect_args(),
            )
            connection = engine.connect()
        except SQLAlchemyError as e:
            if engine is not None:
                engine.dispose()
            logger.warning(f"Failed to connect to {self.descriptor.describe()}: {native_error_message(e)}")
            raise DatabaseConnectionError(
                f"Failed to connect to {self.engine_label}: {native_error_message(e)}",
                cause=e,
            ) from e

        # Only publish state once both objects exist
        self._engine = engine
        self._connection = connection
        logger.debug(f"Connected to {self.descriptor.describe()}")

    def disconnect(self) -> None:
        connection, engine = self._connection, self._engine
        self._connection = None
        self._engine = None

        if connection is not None:
            try:
                connection.close()
            except Exception as e:
                logger.warning(f"Error closing connection to {self.descriptor.describe()}: {e}")
        if engine is not None:
            engine.dispose()
            logger.debug(f"Disconnected from {self.descriptor.describe()}")

    def _require_connection(self) -> Connection:
        if self._connection is None:
            raise DatabaseConnectionError("Not connected to database")
        return self._connection

    def _result_columns(self, keys: List[str], rows: List[Dict[str, Any]]) -> List[str]:
        return keys

    def execute_query(self, sql: str) -> QueryResult:
        connection = self._require_connection()

        start_time = time.perf_counter()
        try:
            result = connection.exec_driver_sql(sql, execution_options=NO_PARAMETERS)

            if result.returns_rows:
                keys = list(result.keys())
                rows = [dict(row._mapping) for row in result]
                execution_time = (time.perf_counter() - start_time) * 1000
                return QueryResult(
                    columns=self._result_columns(keys, rows),
                    rows=rows,
                    execution_time_ms=execution_time,
                )

            affected = result.rowcount
            execution_time = (time.perf_counter() - start_time) * 1000
            return QueryResult(
                columns=[],
                rows=[],
                execution_time_ms=execution_time,
                affected_rows=affected if affected is not None and affected >= 0 else 0,
            )

        except SQLAlchemyError as e:
            error_msg = native_error_message(e)
            logger.warning(f"Query failed on {self.descriptor.describe()}: {error_msg}")
            raise QueryExecutionError(error_msg) from e

    def _fetch(self, sql: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Run an introspection query and return its rows.

        Queries with params use bound parameters; queries without params
        are sent verbatim so quoted identifiers pass through untouched.
        """
        connection = self._require_connection()
        try:
            if params:
                result = connection.execute(text(sql), params)
            else:
                result = connection.exec_driver_sql(sql, execution_options=NO_PARAMETERS)
            return [dict(row._mapping) for row in result]
        except SQLAlchemyError as e:
            raise QueryExecutionError(native_error_message(e)) from e
