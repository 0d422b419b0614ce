"""
Database Adapter contract.

Every engine implements the same operations so the session store and the
request handlers never branch on engine type:

    connect / disconnect / execute_query / get_tables /
    get_table_schema / get_table_metadata / test_connection

Adapters are single-use and single-owner: one operation builds one
adapter, uses it, and disconnects it. Use them as context managers:

    >>> with adapter:
    ...     result = adapter.execute_query("SELECT 1")
"""
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from dbconsole.core.exceptions import MetadataUnavailable
from dbconsole.core.logging_config import get_logger
from dbconsole.core.validators import quote_identifier
from dbconsole.database.models import (
    ConnectionDescriptor,
    QueryResult,
    TableMetadata,
    TableSchema,
)

logger = get_logger(__name__)


class DatabaseAdapter(ABC):
    """
    Uniform per-engine database access.

    Subclasses must keep connect() atomic: on failure no connection
    state is left behind, and disconnect() must be safe to call at any
    time, any number of times.
    """

    #: Character used to quote identifiers in this engine's SQL dialect
    quote_char = '"'

    def __init__(self, descriptor: ConnectionDescriptor):
        self.descriptor = descriptor

    # ------------------------------------------------------------------
    # Engine specific operations
    # ------------------------------------------------------------------

    @abstractmethod
    def connect(self) -> None:
        """Establish engine state. Raises DatabaseConnectionError."""

    @abstractmethod
    def disconnect(self) -> None:
        """Release engine state. Idempotent, never raises."""

    @abstractmethod
    def execute_query(self, sql: str) -> QueryResult:
        """Run one statement. Raises QueryExecutionError."""

    @abstractmethod
    def get_tables(self) -> List[str]:
        """List table names in the configured database/schema."""

    @abstractmethod
    def get_table_schema(self, table_name: str) -> TableSchema:
        """Introspect the columns of one table."""

    @abstractmethod
    def _fetch_table_stats(self, table_name: str) -> Optional[Tuple[int, int]]:
        """
        Cheap engine-native (row_count, size_bytes) lookup.

        Returns None when the metadata source has no entry for the table.
        """

    # ------------------------------------------------------------------
    # Shared behaviour
    # ------------------------------------------------------------------

    @property
    def dialect(self) -> str:
        return self.descriptor.engine.value

    def quote_identifier(self, name: str) -> str:
        return quote_identifier(name, self.quote_char)

    def get_table_metadata(self, table_name: str) -> TableMetadata:
        """
        Row count and size of a table. Never raises.

        Fast path is the engine's own statistics; a table missing from
        them falls back to COUNT(*) with a 0 byte size, and a failing
        fast path falls back to COUNT(*) with an "Unknown" size. When
        nothing answers, the "Unknown" sentinel with 0 rows is returned.
        """
        try:
            return self._measure_table(table_name)
        except MetadataUnavailable as e:
            logger.warning(e.message)
            return TableMetadata.unknown(table_name)
        except Exception as e:
            logger.warning(f"Metadata lookup crashed for table {table_name}: {e}")
            return TableMetadata.unknown(table_name)

    def _measure_table(self, table_name: str) -> TableMetadata:
        try:
            stats = self._fetch_table_stats(table_name)
        except Exception as e:
            logger.warning(f"Failed to get metadata for table {table_name}: {e}")
            try:
                return TableMetadata.unknown(table_name, row_count=self._count_rows(table_name))
            except Exception as count_error:
                logger.debug(f"COUNT(*) fallback failed for {table_name}: {count_error}")
                raise MetadataUnavailable(table_name)

        if stats is None:
            try:
                return TableMetadata.measured(table_name, self._count_rows(table_name), 0)
            except Exception as count_error:
                logger.debug(f"COUNT(*) fallback failed for {table_name}: {count_error}")
                raise MetadataUnavailable(table_name)

        row_count, size_bytes = stats
        return TableMetadata.measured(table_name, row_count, size_bytes)

    def _count_rows(self, table_name: str) -> int:
        result = self.execute_query(
            f"SELECT COUNT(*) AS row_count FROM {self.quote_identifier(table_name)}"
        )
        if not result.rows:
            return 0
        return to_int(next(iter(result.rows[0].values())))

    def test_connection(self) -> bool:
        """
        Connect, run SELECT 1, disconnect.

        Returns:
            True if the database answered, False otherwise
        """
        try:
            self.connect()
            self.execute_query("SELECT 1")
            return True
        except Exception as e:
            logger.warning(f"Connection test failed for {self.descriptor.describe()}: {e}")
            return False
        finally:
            self.disconnect()

    def __enter__(self) -> "DatabaseAdapter":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.disconnect()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.descriptor.describe()}>"


def to_int(value) -> int:
    """Coerce driver numerics (Decimal, str, None) to int."""
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0
