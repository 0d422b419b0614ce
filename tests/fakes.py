"""Hand-written adapter fakes shared by the store, service and API tests."""

from __future__ import annotations

import threading
from typing import Callable

from dbconsole.core.exceptions import DatabaseConnectionError, QueryExecutionError
from dbconsole.database.adapters import DatabaseAdapter
from dbconsole.database.models import (
    ColumnInfo,
    ConnectionDescriptor,
    EngineType,
    QueryResult,
    TableMetadata,
    TableSchema,
)

FAKE_DESCRIPTOR = ConnectionDescriptor(
    engine=EngineType.POSTGRESQL,
    name="Fake",
    host="db.internal",
    database="shop",
    username="console",
    password="hunter2",
)


class CountingAdapter(DatabaseAdapter):
    """In-memory adapter that counts connects and disconnects on its factory."""

    def __init__(self, descriptor: ConnectionDescriptor, factory: "CountingFactory") -> None:
        super().__init__(descriptor)
        self.factory = factory
        self.connected = False

    def connect(self) -> None:
        if self.factory.connect_hook is not None:
            self.factory.connect_hook(self)
        self.connected = True
        self.factory.bump("connects")

    def disconnect(self) -> None:
        if self.connected:
            self.connected = False
            self.factory.bump("disconnects")

    def _require(self) -> None:
        if not self.connected:
            raise DatabaseConnectionError("Not connected to database")

    def execute_query(self, sql: str) -> QueryResult:
        self._require()
        if self.factory.query_error is not None:
            raise QueryExecutionError(self.factory.query_error)
        return QueryResult(columns=["sql"], rows=[{"sql": sql}], execution_time_ms=0.1)

    def get_tables(self) -> list[str]:
        self._require()
        return list(self.factory.tables)

    def get_table_schema(self, table_name: str) -> TableSchema:
        self._require()
        return TableSchema(
            name=table_name,
            columns=[ColumnInfo(name="id", type="integer", nullable=False, key="PRI")],
        )

    def get_table_metadata(self, table_name: str) -> TableMetadata:
        if table_name in self.factory.exploding_tables:
            raise RuntimeError(f"metadata exploded for {table_name}")
        return super().get_table_metadata(table_name)

    def _fetch_table_stats(self, table_name: str) -> tuple[int, int]:
        self._require()
        return 10, 2048


class CountingFactory:
    """Drop-in replacement for AdapterFactory."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.counts = {"connects": 0, "disconnects": 0}
        self.created: list[CountingAdapter] = []
        self.tables = ["orders", "customers"]
        self.exploding_tables: set[str] = set()
        self.query_error: str | None = None
        self.connect_hook: Callable[[CountingAdapter], None] | None = None

    def bump(self, name: str) -> None:
        with self._lock:
            self.counts[name] += 1

    def create(self, descriptor: ConnectionDescriptor) -> CountingAdapter:
        adapter = CountingAdapter(descriptor, self)
        with self._lock:
            self.created.append(adapter)
        return adapter

    __call__ = create
