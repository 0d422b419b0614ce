"""Shared fixtures: SQLite files, a manual clock and session stores."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from cryptography.fernet import Fernet

from dbconsole.core.crypto import SessionCipher
from dbconsole.database.factory import AdapterFactory
from dbconsole.database.models import ConnectionDescriptor, EngineType
from dbconsole.database.session_storage import SessionFileStore
from dbconsole.database.session_store import SessionStore


class ManualClock:
    """Clock the tests move by hand."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def make_sqlite_db(path: Path) -> Path:
    with sqlite3.connect(path) as conn:
        conn.executescript(
            """
            CREATE TABLE t (
                id INTEGER PRIMARY KEY,
                name TEXT NOT NULL,
                note TEXT DEFAULT 'n/a'
            );
            CREATE TABLE "Order Items" (sku TEXT, qty INTEGER);
            INSERT INTO t (name) VALUES ('alpha'), ('beta'), ('gamma');
            INSERT INTO "Order Items" VALUES ('A-1', 2);
            """
        )
    return path


@pytest.fixture
def sqlite_path(tmp_path: Path) -> Path:
    return make_sqlite_db(tmp_path / "console.db")


@pytest.fixture
def sqlite_descriptor(sqlite_path: Path) -> ConnectionDescriptor:
    return ConnectionDescriptor(engine=EngineType.SQLITE, name="Local", filename=str(sqlite_path))


@pytest.fixture
def cipher() -> SessionCipher:
    return SessionCipher(Fernet.generate_key())


@pytest.fixture
def storage(tmp_path: Path, cipher: SessionCipher) -> SessionFileStore:
    return SessionFileStore(tmp_path / "sessions", cipher)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def store(storage: SessionFileStore, clock: ManualClock) -> SessionStore:
    return SessionStore(storage, factory=AdapterFactory(), clock=clock)
