"""Tests for the MySQL and PostgreSQL adapters against a recording fake connection."""

from __future__ import annotations

from typing import Any

import pytest
from sqlalchemy.exc import OperationalError

from dbconsole.core.exceptions import DatabaseConnectionError, QueryExecutionError
from dbconsole.database.adapters import MySQLAdapter, PostgreSQLAdapter
from dbconsole.database.models import ConnectionDescriptor, EngineType


class _FakeRow:
    def __init__(self, mapping: dict[str, Any]) -> None:
        self._mapping = mapping


class _FakeResult:
    def __init__(self, rows: list[dict[str, Any]] | None = None, rowcount: int = -1) -> None:
        self._rows = rows
        self.returns_rows = rows is not None
        self.rowcount = rowcount

    def keys(self) -> list[str]:
        return list(self._rows[0].keys()) if self._rows else []

    def __iter__(self):
        return iter(_FakeRow(row) for row in self._rows or [])


class _RecordingConnection:
    """Answers by first matching SQL fragment; records every statement."""

    def __init__(self, answers: list[tuple[str, Any]]) -> None:
        self.answers = answers
        self.statements: list[tuple[str, dict[str, Any] | None]] = []
        self.closed = False

    def _answer(self, sql: str) -> _FakeResult:
        for fragment, answer in self.answers:
            if fragment in sql:
                if isinstance(answer, Exception):
                    raise answer
                if isinstance(answer, _FakeResult):
                    return answer
                return _FakeResult(answer)
        return _FakeResult([])

    def exec_driver_sql(self, sql: str, execution_options=None) -> _FakeResult:
        self.statements.append((sql, None))
        return self._answer(sql)

    def execute(self, clause, params=None) -> _FakeResult:
        sql = str(clause)
        self.statements.append((sql, params))
        return self._answer(sql)

    def close(self) -> None:
        self.closed = True


def _db_error(message: str) -> OperationalError:
    return OperationalError("stmt", {}, Exception(message))


def _mysql(answers: list[tuple[str, Any]]) -> tuple[MySQLAdapter, _RecordingConnection]:
    adapter = MySQLAdapter(
        ConnectionDescriptor(engine=EngineType.MYSQL, name="m", host="db", database="shop")
    )
    connection = _RecordingConnection(answers)
    adapter._connection = connection
    return adapter, connection


def _postgres(answers: list[tuple[str, Any]]) -> tuple[PostgreSQLAdapter, _RecordingConnection]:
    adapter = PostgreSQLAdapter(
        ConnectionDescriptor(engine=EngineType.POSTGRESQL, name="p", host="db", database="shop")
    )
    connection = _RecordingConnection(answers)
    adapter._connection = connection
    return adapter, connection


def test_mysql_lists_tables_from_show_tables() -> None:
    adapter, _ = _mysql([("SHOW TABLES", [{"Tables_in_shop": "orders"}, {"Tables_in_shop": "Order Items"}])])

    assert adapter.get_tables() == ["orders", "Order Items"]


def test_mysql_describe_quotes_table_name() -> None:
    adapter, connection = _mysql([
        ("DESCRIBE", [
            {"Field": "id", "Type": "int", "Null": "NO", "Key": "PRI", "Default": None, "Extra": "auto_increment"},
            {"Field": "qty", "Type": "int", "Null": "YES", "Key": "", "Default": "1", "Extra": ""},
        ]),
    ])

    schema = adapter.get_table_schema("Order Items")

    assert connection.statements[0][0] == "DESCRIBE `Order Items`"
    assert schema.columns[0].primary_key is True
    assert schema.columns[0].auto_increment is True
    assert schema.columns[1].key is None
    assert schema.columns[1].nullable is True


def test_mysql_metadata_uses_bound_information_schema_lookup() -> None:
    adapter, connection = _mysql([("information_schema", [{"row_count": 12, "size_bytes": 16384}])])

    meta = adapter.get_table_metadata("Order Items")

    sql, params = connection.statements[0]
    assert params == {"schema": "shop", "table": "Order Items"}
    assert "Order Items" not in sql
    assert (meta.row_count, meta.size_bytes, meta.size_formatted) == (12, 16384, "16.0 kB")


def test_mysql_metadata_falls_back_to_count_when_stats_missing() -> None:
    adapter, connection = _mysql([
        ("information_schema", []),
        ("COUNT(*)", [{"row_count": 7}]),
    ])

    meta = adapter.get_table_metadata("Order Items")

    assert connection.statements[-1][0] == "SELECT COUNT(*) AS row_count FROM `Order Items`"
    assert (meta.row_count, meta.size_formatted) == (7, "0 B")


def test_mysql_metadata_falls_back_to_count_when_stats_fail() -> None:
    adapter, _ = _mysql([
        ("information_schema", _db_error("denied")),
        ("COUNT(*)", [{"row_count": 3}]),
    ])

    meta = adapter.get_table_metadata("orders")

    assert (meta.row_count, meta.size_formatted) == (3, "Unknown")


def test_mysql_metadata_never_raises() -> None:
    adapter, _ = _mysql([
        ("information_schema", _db_error("gone")),
        ("COUNT(*)", _db_error("gone")),
    ])

    meta = adapter.get_table_metadata("orders")

    assert (meta.row_count, meta.size_bytes, meta.size_formatted) == (0, 0, "Unknown")


def test_mysql_execute_reports_affected_rows() -> None:
    adapter, _ = _mysql([("DELETE", _FakeResult(None, rowcount=4))])

    result = adapter.execute_query("DELETE FROM orders WHERE id < 5")

    assert result.affected_rows == 4
    assert result.columns == []


def test_mysql_execute_wraps_driver_error() -> None:
    adapter, _ = _mysql([("SELEC", _db_error("You have an error in your SQL syntax"))])

    with pytest.raises(QueryExecutionError) as excinfo:
        adapter.execute_query("SELEC 1")

    assert excinfo.value.native_error == "You have an error in your SQL syntax"


def test_mysql_requires_host() -> None:
    adapter = MySQLAdapter(ConnectionDescriptor(engine=EngineType.MYSQL, name="m"))

    with pytest.raises(DatabaseConnectionError):
        adapter.connect()


def test_disconnect_is_idempotent() -> None:
    adapter, connection = _mysql([])

    adapter.disconnect()
    adapter.disconnect()

    assert connection.closed is True
    assert adapter.is_connected is False


def test_postgres_lists_public_tables() -> None:
    adapter, connection = _postgres([("information_schema.tables", [{"table_name": "orders"}])])

    assert adapter.get_tables() == ["orders"]
    assert connection.statements[0][1] == {"schema": "public"}


def test_postgres_schema_types_keys_and_serials() -> None:
    adapter, connection = _postgres([
        ("information_schema.columns", [
            {
                "column_name": "id",
                "data_type": "integer",
                "is_nullable": "NO",
                "column_default": "nextval('orders_id_seq'::regclass)",
                "character_maximum_length": None,
            },
            {
                "column_name": "label",
                "data_type": "character varying",
                "is_nullable": "YES",
                "column_default": None,
                "character_maximum_length": 255,
            },
        ]),
        ("pg_index", [{"column_name": "id"}]),
    ])

    schema = adapter.get_table_schema("Order Items")

    assert connection.statements[1][1] == {"relation": '"public"."Order Items"'}
    id_col, label_col = schema.columns
    assert id_col.key == "PRI"
    assert id_col.auto_increment is True
    assert id_col.nullable is False
    assert label_col.type == "character varying(255)"
    assert label_col.key is None


def test_postgres_count_fallback_uses_qualified_name() -> None:
    adapter, connection = _postgres([
        ("pg_total_relation_size", []),
        ("COUNT(*)", [{"row_count": 2}]),
    ])

    meta = adapter.get_table_metadata("Order Items")

    assert connection.statements[-1][0] == 'SELECT COUNT(*) AS row_count FROM "public"."Order Items"'
    assert meta.row_count == 2
