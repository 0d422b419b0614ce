"""Tests for the SQLite adapter against real database files."""

from __future__ import annotations

from pathlib import Path

import pytest

from dbconsole.core.exceptions import DatabaseConnectionError, QueryExecutionError
from dbconsole.database.adapters import SQLiteAdapter
from dbconsole.database.models import ConnectionDescriptor, EngineType


def test_lists_tables(sqlite_descriptor: ConnectionDescriptor) -> None:
    with SQLiteAdapter(sqlite_descriptor) as adapter:
        assert adapter.get_tables() == ["Order Items", "t"]


def test_table_schema_marks_primary_key(sqlite_descriptor: ConnectionDescriptor) -> None:
    with SQLiteAdapter(sqlite_descriptor) as adapter:
        schema = adapter.get_table_schema("t")

    columns = {col.name: col for col in schema.columns}
    assert schema.get_column_names() == ["id", "name", "note"]
    assert columns["id"].key == "PRI"
    assert columns["id"].auto_increment is True
    assert columns["name"].nullable is False
    assert columns["note"].default == "'n/a'"


def test_select_returns_rows_and_columns(sqlite_descriptor: ConnectionDescriptor) -> None:
    with SQLiteAdapter(sqlite_descriptor) as adapter:
        result = adapter.execute_query("SELECT id, name FROM t ORDER BY id")

    assert result.columns == ["id", "name"]
    assert result.row_count == 3
    assert result.rows[0] == {"id": 1, "name": "alpha"}
    assert result.affected_rows is None


def test_empty_select_reports_no_columns(sqlite_descriptor: ConnectionDescriptor) -> None:
    with SQLiteAdapter(sqlite_descriptor) as adapter:
        result = adapter.execute_query("SELECT * FROM t WHERE 1 = 0")

    assert result.columns == []
    assert result.rows == []


def test_writes_report_affected_rows_and_persist(sqlite_descriptor: ConnectionDescriptor) -> None:
    with SQLiteAdapter(sqlite_descriptor) as adapter:
        result = adapter.execute_query("UPDATE t SET note = 'x' WHERE id <= 2")

    assert result.affected_rows == 2

    with SQLiteAdapter(sqlite_descriptor) as adapter:
        rows = adapter.execute_query("SELECT COUNT(*) AS n FROM t WHERE note = 'x'").rows

    assert rows == [{"n": 2}]


def test_literal_percent_and_colon_pass_through(sqlite_descriptor: ConnectionDescriptor) -> None:
    with SQLiteAdapter(sqlite_descriptor) as adapter:
        result = adapter.execute_query("SELECT '100%' AS pct, ':name' AS label")

    assert result.rows == [{"pct": "100%", "label": ":name"}]


def test_bad_sql_raises_with_native_message(sqlite_descriptor: ConnectionDescriptor) -> None:
    with SQLiteAdapter(sqlite_descriptor) as adapter:
        with pytest.raises(QueryExecutionError) as excinfo:
            adapter.execute_query("SELECT * FROM missing_table")

    assert "no such table" in excinfo.value.native_error


def test_metadata_counts_rows_and_measures_size(sqlite_descriptor: ConnectionDescriptor) -> None:
    with SQLiteAdapter(sqlite_descriptor) as adapter:
        meta = adapter.get_table_metadata("t")
        spaced = adapter.get_table_metadata("Order Items")

    assert meta.row_count == 3
    assert meta.size_bytes > 0
    assert meta.size_formatted != "Unknown"
    assert spaced.row_count == 1


def test_metadata_for_missing_table_is_sentinel(sqlite_descriptor: ConnectionDescriptor) -> None:
    with SQLiteAdapter(sqlite_descriptor) as adapter:
        meta = adapter.get_table_metadata("does_not_exist")

    assert meta.row_count == 0
    assert meta.size_formatted == "Unknown"


def test_metadata_without_connection_is_sentinel(sqlite_descriptor: ConnectionDescriptor) -> None:
    meta = SQLiteAdapter(sqlite_descriptor).get_table_metadata("t")

    assert meta.size_formatted == "Unknown"


def test_missing_file_is_a_connect_failure(tmp_path: Path) -> None:
    path = tmp_path / "nope.db"
    adapter = SQLiteAdapter(
        ConnectionDescriptor(engine=EngineType.SQLITE, name="x", filename=str(path))
    )

    with pytest.raises(DatabaseConnectionError):
        adapter.connect()

    assert adapter.is_connected is False
    assert not path.exists()
    assert adapter.test_connection() is False


def test_context_manager_disconnects_on_error(sqlite_descriptor: ConnectionDescriptor) -> None:
    adapter = SQLiteAdapter(sqlite_descriptor)

    with pytest.raises(QueryExecutionError):
        with adapter:
            adapter.execute_query("NOT SQL")

    assert adapter.is_connected is False
    adapter.disconnect()


def test_test_connection(sqlite_descriptor: ConnectionDescriptor) -> None:
    adapter = SQLiteAdapter(sqlite_descriptor)

    assert adapter.test_connection() is True
    assert adapter.is_connected is False
