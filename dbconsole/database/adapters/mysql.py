"""
MySQL adapter over a direct TCP connection (SQLAlchemy + PyMySQL).
"""
from typing import List, Optional, Tuple

from sqlalchemy.engine import URL

from dbconsole.core.exceptions import DatabaseConnectionError
from dbconsole.database.adapters.base import to_int
from dbconsole.database.adapters.sqlalchemy_adapter import SQLAlchemyAdapter
from dbconsole.database.models import ColumnInfo, TableSchema

# Parameters are bound by the driver; table names never reach this text
TABLE_STATS_SQL = """
    SELECT
        table_rows AS row_count,
        (data_length + index_length) AS size_bytes
    FROM information_schema.tables
    WHERE table_schema = :schema AND table_name = :table
"""


def describe_rows_to_columns(rows) -> List[ColumnInfo]:
    """Map DESCRIBE output (Field/Type/Null/Key/Default/Extra) to ColumnInfo."""
    return [
        ColumnInfo(
            name=row["Field"],
            type=str(row["Type"]),
            nullable=row["Null"] == "YES",
            key=row.get("Key") or None,
            default=row.get("Default"),
            auto_increment="auto_increment" in str(row.get("Extra") or "").lower(),
        )
        for row in rows
    ]


class MySQLAdapter(SQLAlchemyAdapter):
    """Direct MySQL connection."""

    quote_char = "`"
    engine_label = "MySQL"

    def _precheck(self) -> None:
        if not self.descriptor.host:
            raise DatabaseConnectionError("MySQL connection requires a host")

    def _connection_url(self) -> URL:
        d = self.descriptor
        return URL.create(
            "mysql+pymysql",
            username=d.username,
            password=d.password,
            host=d.host,
            port=d.effective_port,
            database=d.database or None,
        )

    def get_tables(self) -> List[str]:
        rows = self._fetch("SHOW TABLES")
        return [str(next(iter(row.values()))) for row in rows]

    def get_table_schema(self, table_name: str) -> TableSchema:
        rows = self._fetch(f"DESCRIBE {self.quote_identifier(table_name)}")
        return TableSchema(name=table_name, columns=describe_rows_to_columns(rows))

    def _fetch_table_stats(self, table_name: str) -> Optional[Tuple[int, int]]:
        rows = self._fetch(
            TABLE_STATS_SQL,
            {"schema": self.descriptor.database, "table": table_name},
        )
        if not rows:
            return None
        return to_int(rows[0].get("row_count")), to_int(rows[0].get("size_bytes"))
