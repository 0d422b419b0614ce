"""
Database module - engine adapters and the session store.

This module handles:
- One adapter per engine behind a uniform interface
- Adapter construction from connection descriptors
- Sessions: validated descriptors behind opaque tokens
- Encrypted, restart-surviving session persistence
- Timeout-bounded adapter operations
"""
from dbconsole.database.adapters import (
    DatabaseAdapter,
    MySQLAdapter,
    MySQLProxyAdapter,
    PostgreSQLAdapter,
    SQLiteAdapter,
)
from dbconsole.database.execution import run_adapter_operation, run_with_timeout
from dbconsole.database.factory import AdapterFactory
from dbconsole.database.models import (
    ColumnInfo,
    ConnectionDescriptor,
    EngineType,
    QueryResult,
    SessionInfo,
    TableMetadata,
    TableSchema,
    format_bytes,
)
from dbconsole.database.session_storage import SessionFileStore
from dbconsole.database.session_store import SessionRecord, SessionStore, SessionSweeper

__all__ = [
    # Adapters
    "DatabaseAdapter",
    "MySQLAdapter",
    "MySQLProxyAdapter",
    "PostgreSQLAdapter",
    "SQLiteAdapter",
    "AdapterFactory",
    # Execution
    "run_adapter_operation",
    "run_with_timeout",
    # Models
    "ColumnInfo",
    "ConnectionDescriptor",
    "EngineType",
    "QueryResult",
    "SessionInfo",
    "TableMetadata",
    "TableSchema",
    "format_bytes",
    # Sessions
    "SessionFileStore",
    "SessionRecord",
    "SessionStore",
    "SessionSweeper",
]
