"""Tests for the HTTP proxy MySQL adapter."""

from __future__ import annotations

from typing import Any

import pytest
import requests

from dbconsole.core.exceptions import DatabaseConnectionError, QueryExecutionError
from dbconsole.database.adapters import MySQLProxyAdapter
from dbconsole.database.models import ConnectionDescriptor, EngineType


class _FakeResponse:
    def __init__(self, payload: Any, status_code: int = 200) -> None:
        self.payload = payload
        self.status_code = status_code
        self.ok = 200 <= status_code < 300

    def json(self) -> Any:
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class _FakeHTTP:
    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def post(self, url: str, **kwargs: Any) -> _FakeResponse:
        self.calls.append({"url": url, **kwargs})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        self.closed = True


DESCRIPTOR = ConnectionDescriptor(
    engine=EngineType.MYSQL_PROXY,
    name="proxy",
    host="https://proxy.example/query",
    server="mysql-a",
    database="shop",
    username="console",
    password="s3cret",
)


def test_select_posts_wire_format() -> None:
    http = _FakeHTTP(_FakeResponse({"data": [{"id": 1, "name": "a"}]}))
    adapter = MySQLProxyAdapter(DESCRIPTOR, timeout_seconds=5, http=http)

    with adapter:
        result = adapter.execute_query("SELECT id, name FROM t")

    call = http.calls[0]
    assert call["url"] == "https://proxy.example/query"
    assert call["json"] == {"server": "mysql-a", "db": "shop", "query": "SELECT id, name FROM t", "params": []}
    assert call["auth"] == ("console", "s3cret")
    assert call["timeout"] == 5
    assert result.columns == ["id", "name"]
    assert result.row_count == 1
    assert http.closed is False


def test_dml_reports_affected_rows() -> None:
    http = _FakeHTTP(
        _FakeResponse({"result": {"affected_rows": 3}}),
        _FakeResponse({"mysqli": {"affected_rows": 2}}),
    )
    adapter = MySQLProxyAdapter(DESCRIPTOR, http=http)

    assert adapter.execute_query("UPDATE t SET x = 1").affected_rows == 3
    assert adapter.execute_query("DELETE FROM t").affected_rows == 2


def test_proxy_error_becomes_query_error() -> None:
    http = _FakeHTTP(_FakeResponse({"result": {"error": "Unknown column 'x'"}}))
    adapter = MySQLProxyAdapter(DESCRIPTOR, http=http)

    with pytest.raises(QueryExecutionError) as excinfo:
        adapter.execute_query("SELECT x FROM t")

    assert excinfo.value.native_error == "Unknown column 'x'"


@pytest.mark.parametrize(
    "response",
    [
        _FakeResponse({}, status_code=502),
        _FakeResponse(ValueError("not json")),
        requests.ConnectionError("refused"),
    ],
)
def test_transport_failures_become_connection_errors(response: Any) -> None:
    adapter = MySQLProxyAdapter(DESCRIPTOR, http=_FakeHTTP(response))

    with pytest.raises(DatabaseConnectionError):
        adapter.execute_query("SELECT 1")


def test_requires_credentials_and_server() -> None:
    adapter = MySQLProxyAdapter(
        ConnectionDescriptor(engine=EngineType.MYSQL_PROXY, name="p", host="https://proxy.example"),
        http=_FakeHTTP(),
    )

    with pytest.raises(DatabaseConnectionError):
        adapter.connect()


def test_metadata_lookup_sends_bound_params() -> None:
    http = _FakeHTTP(_FakeResponse({"data": [{"row_count": 5, "size_bytes": 2048}]}))
    adapter = MySQLProxyAdapter(DESCRIPTOR, http=http)

    meta = adapter.get_table_metadata("Order Items")

    assert http.calls[0]["json"]["params"] == ["shop", "Order Items"]
    assert (meta.row_count, meta.size_formatted) == (5, "2.0 kB")


def test_describe_quotes_with_backticks() -> None:
    http = _FakeHTTP(_FakeResponse({"data": [
        {"Field": "sku", "Type": "varchar(20)", "Null": "NO", "Key": "PRI", "Default": None, "Extra": ""},
    ]}))
    adapter = MySQLProxyAdapter(DESCRIPTOR, http=http)

    schema = adapter.get_table_schema("Order Items")

    assert http.calls[0]["json"]["query"] == "DESCRIBE `Order Items`"
    assert schema.columns[0].primary_key is True


def test_test_connection_false_on_failure() -> None:
    adapter = MySQLProxyAdapter(DESCRIPTOR, http=_FakeHTTP(requests.Timeout("slow")))

    assert adapter.test_connection() is False
