"""
Database Service - per-request database work on top of the session store.

Every call follows the same shape:
1. Resolve the session (lazy expiry happens here)
2. Take a brand-new adapter from the store
3. Connect, run one operation, disconnect, all within the query cutoff

No HTTP concerns live here; the API layer only translates requests.
"""
from typing import Dict, List, Optional, Tuple

from dbconsole.core.exceptions import ConsoleException
from dbconsole.core.logging_config import get_logger
from dbconsole.database.execution import run_adapter_operation, run_with_timeout
from dbconsole.database.factory import AdapterFactory
from dbconsole.database.models import (
    ConnectionDescriptor,
    QueryResult,
    TableMetadata,
    TableSchema,
)
from dbconsole.database.session_store import SessionStore

logger = get_logger(__name__)

DEFAULT_QUERY_TIMEOUT_SECONDS = 30.0


class DatabaseService:
    """
    Runs session-scoped database operations with a hard cutoff.

    Example:
        >>> service = DatabaseService(store)
        >>> result = service.execute_query(session_id, "SELECT 1")
        >>> result.row_count
        1
    """

    def __init__(
        self,
        store: SessionStore,
        query_timeout_seconds: float = DEFAULT_QUERY_TIMEOUT_SECONDS,
        factory: Optional[AdapterFactory] = None,
    ):
        self.store = store
        self.query_timeout_seconds = query_timeout_seconds
        self.factory = factory or store.factory

    def execute_query(self, session_id: str, sql: str) -> QueryResult:
        """Run raw SQL against the session's database."""
        adapter = self.store.get_connection(session_id)
        logger.info(f"Executing query for session {session_id[:8]}: {sql[:80]}")
        result = run_adapter_operation(
            adapter,
            lambda a: a.execute_query(sql),
            self.query_timeout_seconds,
        )
        logger.info(
            f"Query returned {result.row_count} rows in {result.execution_time_ms:.1f}ms"
        )
        return result

    def list_tables(self, session_id: str) -> List[str]:
        adapter = self.store.get_connection(session_id)
        return run_adapter_operation(
            adapter,
            lambda a: a.get_tables(),
            self.query_timeout_seconds,
            label="Table listing",
        )

    def describe_table(self, session_id: str, table_name: str) -> TableSchema:
        adapter = self.store.get_connection(session_id)
        return run_adapter_operation(
            adapter,
            lambda a: a.get_table_schema(table_name),
            self.query_timeout_seconds,
            label="Schema lookup",
        )

    def cached_metadata(self, session_id: str) -> Optional[Dict[str, TableMetadata]]:
        return self.store.get_cached_table_metadata(session_id)

    def refresh_metadata(self, session_id: str) -> Dict[str, TableMetadata]:
        return run_with_timeout(
            lambda: self.store.refresh_table_metadata(session_id),
            self.query_timeout_seconds,
            operation="Metadata refresh",
        )

    def test_connection(self, descriptor: ConnectionDescriptor) -> Tuple[bool, str]:
        """
        Probe a descriptor without creating a session.

        Returns:
            Tuple of (success, message)
        """
        adapter = self.factory.create(descriptor)
        try:
            ok = run_with_timeout(
                adapter.test_connection,
                self.store.validation_timeout_seconds,
                operation="Connection test",
            )
        except ConsoleException as e:
            logger.warning(f"Connection test failed for {descriptor.describe()}: {e.message}")
            return False, e.message

        if ok:
            return True, "Connection successful"
        return False, "Failed to connect to database"
