"""
MySQL over an HTTP query proxy.

The proxy is connectionless: every statement is one authenticated POST

    POST <host>
    Authorization: Basic <username:password>
    {"server": <upstream>, "db": <database>, "query": <sql>, "params": [...]}

and answers with {"data": [...]} for row-returning statements,
{"result": {"affected_rows": n}} (or "mysqli") for DML, and
{"result": {"error": "..."}} when MySQL rejected the statement.
"""
import time
from typing import Any, Dict, List, Optional, Sequence, Tuple

import requests

from dbconsole.core.exceptions import DatabaseConnectionError, QueryExecutionError
from dbconsole.core.logging_config import get_logger
from dbconsole.database.adapters.base import DatabaseAdapter, to_int
from dbconsole.database.adapters.mysql import describe_rows_to_columns
from dbconsole.database.models import ConnectionDescriptor, QueryResult, TableSchema

logger = get_logger(__name__)

DEFAULT_PROXY_TIMEOUT_SECONDS = 30

TABLE_STATS_SQL = """
    SELECT
        table_rows AS row_count,
        (data_length + index_length) AS size_bytes
    FROM information_schema.tables
    WHERE table_schema = ? AND table_name = ?
"""


class MySQLProxyAdapter(DatabaseAdapter):
    """MySQL reached through an HTTP proxy; no persistent connection."""

    quote_char = "`"

    def __init__(
        self,
        descriptor: ConnectionDescriptor,
        timeout_seconds: float = DEFAULT_PROXY_TIMEOUT_SECONDS,
        http: Optional[requests.Session] = None,
    ):
        super().__init__(descriptor)
        self.timeout_seconds = timeout_seconds
        self._http = http
        self._owns_http = http is None

    def connect(self) -> None:
        # Authentication happens on every request
        self._check_descriptor()

    def disconnect(self) -> None:
        if self._owns_http and self._http is not None:
            self._http.close()
            self._http = None

    def _check_descriptor(self) -> None:
        d = self.descriptor
        if not (d.host and d.username and d.password and d.server):
            raise DatabaseConnectionError("MySQL proxy requires host, username, password, and server")

    def _post(self, sql: str, params: Sequence[Any] = ()) -> Dict[str, Any]:
        self._check_descriptor()
        d = self.descriptor

        if self._http is None:
            self._http = requests.Session()

        try:
            response = self._http.post(
                d.host,
                json={
                    "server": d.server,
                    "db": d.database,
                    "query": sql,
                    "params": list(params),
                },
                auth=(d.username, d.password),
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as e:
            logger.warning(f"Proxy request failed for {d.describe()}: {e}")
            raise DatabaseConnectionError("Failed to connect to database proxy", cause=e) from e

        if not response.ok:
            logger.warning(f"Proxy answered HTTP {response.status_code} for {d.describe()}")
            raise DatabaseConnectionError(
                f"Failed to connect to database proxy (HTTP {response.status_code})"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise DatabaseConnectionError("Database proxy returned invalid JSON", cause=e) from e

        if not isinstance(payload, dict):
            raise DatabaseConnectionError("Database proxy returned an unexpected payload")
        return payload

    def _run(self, sql: str, params: Sequence[Any] = ()) -> QueryResult:
        start_time = time.perf_counter()
        payload = self._post(sql, params)
        execution_time = (time.perf_counter() - start_time) * 1000

        result_meta = payload.get("result") or {}
        if isinstance(result_meta, dict) and result_meta.get("error"):
            raise QueryExecutionError(str(result_meta["error"]))

        data = payload.get("data")
        if isinstance(data, list):
            columns = list(data[0].keys()) if data else []
            return QueryResult(columns=columns, rows=data, execution_time_ms=execution_time)

        mysqli_meta = payload.get("mysqli") or {}
        affected = (
            (result_meta.get("affected_rows") if isinstance(result_meta, dict) else None)
            or mysqli_meta.get("affected_rows")
            or 0
        )
        return QueryResult(
            columns=[],
            rows=[],
            execution_time_ms=execution_time,
            affected_rows=to_int(affected),
        )

    def execute_query(self, sql: str) -> QueryResult:
        return self._run(sql)

    def _fetch(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        return self._run(sql, params).rows

    def get_tables(self) -> List[str]:
        rows = self._fetch("SHOW TABLES")
        return [str(next(iter(row.values()))) for row in rows]

    def get_table_schema(self, table_name: str) -> TableSchema:
        rows = self._fetch(f"DESCRIBE {self.quote_identifier(table_name)}")
        return TableSchema(name=table_name, columns=describe_rows_to_columns(rows))

    def _fetch_table_stats(self, table_name: str) -> Optional[Tuple[int, int]]:
        rows = self._fetch(TABLE_STATS_SQL, (self.descriptor.database, table_name))
        if not rows:
            return None
        return to_int(rows[0].get("row_count")), to_int(rows[0].get("size_bytes"))
