"""
SQLite adapter (SQLAlchemy + the stdlib sqlite3 driver).

Row-returning statements report the columns of the first returned row,
so a query that returns no rows reports no columns.
"""
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.engine import URL

from dbconsole.core.exceptions import DatabaseConnectionError, QueryExecutionError
from dbconsole.database.adapters.base import to_int
from dbconsole.database.adapters.sqlalchemy_adapter import SQLAlchemyAdapter
from dbconsole.database.models import ColumnInfo, TableSchema

TABLES_SQL = """
    SELECT name FROM sqlite_master
    WHERE type = 'table' AND name NOT LIKE 'sqlite_%'
    ORDER BY name
"""

TABLE_PAGES_SQL = "SELECT COUNT(*) AS pages FROM dbstat WHERE name = :table"


class SQLiteAdapter(SQLAlchemyAdapter):
    """File based SQLite database."""

    quote_char = '"'
    engine_label = "SQLite"

    def _precheck(self) -> None:
        filename = self.descriptor.filename
        if not filename:
            raise DatabaseConnectionError("SQLite filename is required")
        # Opening a missing path would silently create an empty database
        if not Path(filename).is_file():
            raise DatabaseConnectionError(f"SQLite database file not found: {filename}")

    def _connection_url(self) -> URL:
        return URL.create("sqlite", database=self.descriptor.filename)

    def _connect_args(self) -> Dict[str, Any]:
        # Operations may hop threads under the request timeout wrapper
        return {"check_same_thread": False, "timeout": 10}

    def _result_columns(self, keys: List[str], rows: List[Dict[str, Any]]) -> List[str]:
        return list(rows[0].keys()) if rows else []

    def get_tables(self) -> List[str]:
        return [row["name"] for row in self._fetch(TABLES_SQL)]

    def get_table_schema(self, table_name: str) -> TableSchema:
        rows = self._fetch(f"PRAGMA table_info({self.quote_identifier(table_name)})")

        columns = []
        for row in rows:
            declared_type = str(row.get("type") or "")
            is_primary = bool(row.get("pk"))
            columns.append(ColumnInfo(
                name=row["name"],
                type=declared_type,
                nullable=not row.get("notnull"),
                key="PRI" if is_primary else None,
                default=row.get("dflt_value"),
                auto_increment=is_primary and "integer" in declared_type.lower(),
            ))

        return TableSchema(name=table_name, columns=columns)

    def _fetch_table_stats(self, table_name: str) -> Optional[Tuple[int, int]]:
        """
        Row count plus page based size.

        Pages owned by the table come from the dbstat virtual table; builds
        of SQLite without dbstat fall back to the whole file's page_count.
        """
        if not self.get_table_schema(table_name).columns:
            return None

        row_count = self._count_rows(table_name)
        page_size = to_int(self._fetch("PRAGMA page_size")[0].get("page_size"))

        try:
            pages = to_int(self._fetch(TABLE_PAGES_SQL, {"table": table_name})[0].get("pages"))
        except QueryExecutionError:
            pages = to_int(self._fetch("PRAGMA page_count")[0].get("page_count"))

        return row_count, pages * page_size
