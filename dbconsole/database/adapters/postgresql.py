"""
PostgreSQL adapter (SQLAlchemy + psycopg2).

Tables are listed from the public schema. Dynamic table names are
passed to the server as quoted, schema qualified relation names
(public."Order Items") so mixed case and reserved words resolve.
"""
from typing import List, Optional, Tuple

from sqlalchemy.engine import URL

from dbconsole.core.exceptions import DatabaseConnectionError
from dbconsole.database.adapters.base import to_int
from dbconsole.database.adapters.sqlalchemy_adapter import SQLAlchemyAdapter
from dbconsole.database.models import ColumnInfo, TableSchema

PUBLIC_SCHEMA = "public"

TABLES_SQL = """
    SELECT table_name
    FROM information_schema.tables
    WHERE table_schema = :schema
    ORDER BY table_name
"""

COLUMNS_SQL = """
    SELECT
        column_name,
        data_type,
        is_nullable,
        column_default,
        character_maximum_length
    FROM information_schema.columns
    WHERE table_schema = :schema AND table_name = :table
    ORDER BY ordinal_position
"""

PRIMARY_KEY_SQL = """
    SELECT a.attname AS column_name
    FROM pg_index i
    JOIN pg_attribute a
        ON a.attrelid = i.indrelid AND a.attnum = ANY(i.indkey)
    WHERE i.indrelid = to_regclass(:relation) AND i.indisprimary
"""

TABLE_STATS_SQL = """
    SELECT
        COALESCE(s.n_live_tup, 0) AS row_count,
        pg_total_relation_size(c.oid) AS size_bytes
    FROM pg_class c
    LEFT JOIN pg_stat_user_tables s ON s.relid = c.oid
    WHERE c.oid = to_regclass(:relation) AND c.relkind IN ('r', 'p')
"""


class PostgreSQLAdapter(SQLAlchemyAdapter):
    """Direct PostgreSQL connection."""

    quote_char = '"'
    engine_label = "PostgreSQL"

    def _precheck(self) -> None:
        if not self.descriptor.host:
            raise DatabaseConnectionError("PostgreSQL connection requires a host")

    def _connection_url(self) -> URL:
        d = self.descriptor
        return URL.create(
            "postgresql+psycopg2",
            username=d.username,
            password=d.password,
            host=d.host,
            port=d.effective_port,
            database=d.database or None,
        )

    def _relation_name(self, table_name: str) -> str:
        return f"{self.quote_identifier(PUBLIC_SCHEMA)}.{self.quote_identifier(table_name)}"

    def get_tables(self) -> List[str]:
        rows = self._fetch(TABLES_SQL, {"schema": PUBLIC_SCHEMA})
        return [row["table_name"] for row in rows]

    def get_table_schema(self, table_name: str) -> TableSchema:
        rows = self._fetch(COLUMNS_SQL, {"schema": PUBLIC_SCHEMA, "table": table_name})
        primary_keys = {
            row["column_name"]
            for row in self._fetch(PRIMARY_KEY_SQL, {"relation": self._relation_name(table_name)})
        }

        columns = []
        for row in rows:
            data_type = row["data_type"]
            if row.get("character_maximum_length"):
                data_type = f"{data_type}({row['character_maximum_length']})"
            default = row.get("column_default")

            columns.append(ColumnInfo(
                name=row["column_name"],
                type=data_type,
                nullable=row["is_nullable"] == "YES",
                key="PRI" if row["column_name"] in primary_keys else None,
                default=default,
                auto_increment="nextval(" in str(default or ""),
            ))

        return TableSchema(name=table_name, columns=columns)

    def _fetch_table_stats(self, table_name: str) -> Optional[Tuple[int, int]]:
        rows = self._fetch(TABLE_STATS_SQL, {"relation": self._relation_name(table_name)})
        if not rows:
            return None
        return to_int(rows[0].get("row_count")), to_int(rows[0].get("size_bytes"))

    def _count_rows(self, table_name: str) -> int:
        result = self.execute_query(
            f"SELECT COUNT(*) AS row_count FROM {self._relation_name(table_name)}"
        )
        if not result.rows:
            return 0
        return to_int(result.rows[0].get("row_count"))
