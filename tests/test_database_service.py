"""Tests for session-scoped database operations."""

from __future__ import annotations

import threading

import pytest

from dbconsole.core.exceptions import QueryTimeoutError, SessionNotFoundError
from dbconsole.database.models import ConnectionDescriptor
from dbconsole.database.session_store import SessionStore
from dbconsole.services.database_service import DatabaseService
from tests.fakes import FAKE_DESCRIPTOR, CountingFactory


def test_execute_and_browse_sqlite(store: SessionStore, sqlite_descriptor: ConnectionDescriptor) -> None:
    service = DatabaseService(store)
    session_id = store.create_session(sqlite_descriptor).session_id

    result = service.execute_query(session_id, "SELECT name FROM t WHERE id = 2")

    assert result.rows == [{"name": "beta"}]
    assert service.list_tables(session_id) == ["Order Items", "t"]
    assert service.describe_table(session_id, "t").get_column_names() == ["id", "name", "note"]
    assert service.describe_table(session_id, "Order Items").name == "Order Items"


def test_operations_balance_connections(storage, clock) -> None:  # type: ignore[no-untyped-def]
    factory = CountingFactory()
    store = SessionStore(storage, factory=factory, clock=clock)
    service = DatabaseService(store)
    session_id = store.create_session(FAKE_DESCRIPTOR).session_id

    service.execute_query(session_id, "SELECT 1")
    service.list_tables(session_id)
    service.refresh_metadata(session_id)

    assert factory.counts["connects"] == factory.counts["disconnects"] == 4


def test_timeout_cuts_off_slow_operation(storage, clock) -> None:  # type: ignore[no-untyped-def]
    factory = CountingFactory()
    store = SessionStore(storage, factory=factory, clock=clock)
    service = DatabaseService(store, query_timeout_seconds=0.05)
    session_id = store.create_session(FAKE_DESCRIPTOR).session_id
    release = threading.Event()
    factory.connect_hook = lambda adapter: release.wait(5)

    with pytest.raises(QueryTimeoutError):
        service.execute_query(session_id, "SELECT pg_sleep(60)")

    release.set()


def test_unknown_session_is_rejected_before_any_connection(storage, clock) -> None:  # type: ignore[no-untyped-def]
    factory = CountingFactory()
    service = DatabaseService(SessionStore(storage, factory=factory, clock=clock))

    with pytest.raises(SessionNotFoundError):
        service.execute_query("00000000-0000-4000-8000-000000000000", "SELECT 1")

    assert factory.created == []


def test_test_connection_reports_outcome(store: SessionStore, sqlite_descriptor, tmp_path) -> None:  # type: ignore[no-untyped-def]
    service = DatabaseService(store)
    missing = ConnectionDescriptor(engine=sqlite_descriptor.engine, name="x", filename=str(tmp_path / "no.db"))

    assert service.test_connection(sqlite_descriptor) == (True, "Connection successful")
    assert service.test_connection(missing) == (False, "Failed to connect to database")


def test_concurrent_queries_return_their_own_rows(
    store: SessionStore, sqlite_descriptor: ConnectionDescriptor
) -> None:
    service = DatabaseService(store)
    session_id = store.create_session(sqlite_descriptor).session_id
    results: dict[int, list[dict]] = {}
    errors: list[BaseException] = []
    results_lock = threading.Lock()

    def _request(i: int) -> None:
        try:
            rows = service.execute_query(session_id, f"SELECT {i} AS v").rows
            with results_lock:
                results[i] = rows
        except BaseException as e:
            errors.append(e)

    threads = [threading.Thread(target=_request, args=(i,)) for i in range(50)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert results == {i: [{"v": i}] for i in range(50)}
