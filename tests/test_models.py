"""Tests for descriptors, projections and metadata helpers."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from dbconsole.core.exceptions import UnsupportedEngineError, ValidationError
from dbconsole.database.models import (
    ConnectionDescriptor,
    EngineType,
    SessionInfo,
    TableMetadata,
    format_bytes,
)


@pytest.mark.parametrize(
    ("size", "expected"),
    [
        (0, "0 B"),
        (-5, "0 B"),
        (512, "512.0 B"),
        (1536, "1.5 kB"),
        (1048576, "1.0 MB"),
        (5 * 1024 ** 3, "5.0 GB"),
    ],
)
def test_format_bytes(size: int, expected: str) -> None:
    assert format_bytes(size) == expected


def test_descriptor_from_dict_accepts_type_key() -> None:
    descriptor = ConnectionDescriptor.from_dict(
        {"type": "postgresql", "name": "Prod", "host": "db", "database": "app", "port": "6543"}
    )

    assert descriptor.engine is EngineType.POSTGRESQL
    assert descriptor.port == 6543
    assert descriptor.effective_port == 6543


def test_descriptor_default_ports() -> None:
    mysql = ConnectionDescriptor(engine=EngineType.MYSQL, name="m", host="h")
    postgres = ConnectionDescriptor(engine=EngineType.POSTGRESQL, name="p", host="h")

    assert mysql.effective_port == 3306
    assert postgres.effective_port == 5432


def test_descriptor_rejects_unknown_engine() -> None:
    with pytest.raises(UnsupportedEngineError):
        ConnectionDescriptor.from_dict({"engine": "oracle", "name": "x"})


def test_descriptor_requires_name() -> None:
    with pytest.raises(ValidationError):
        ConnectionDescriptor.from_dict({"engine": "sqlite", "filename": "/tmp/x.db"})


def test_descriptor_describe_and_repr_hide_password() -> None:
    descriptor = ConnectionDescriptor(
        engine=EngineType.MYSQL,
        name="m",
        host="db.internal",
        database="shop",
        username="root",
        password="hunter2",
    )

    assert descriptor.describe() == "mysql://db.internal:3306/shop"
    assert "hunter2" not in repr(descriptor)


def test_descriptor_round_trip_keeps_secrets_for_storage() -> None:
    descriptor = ConnectionDescriptor(
        engine=EngineType.MYSQL_PROXY,
        name="proxy",
        host="https://proxy.example/query",
        server="mysql-a",
        database="shop",
        username="u",
        password="p",
    )

    assert ConnectionDescriptor.from_dict(descriptor.to_dict()) == descriptor


def test_session_info_projection_has_no_secrets() -> None:
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    info = SessionInfo(
        session_id="0b6c3c5e-9d0c-4a43-8d3e-8d6a3c3f2a11",
        name="Local",
        engine=EngineType.SQLITE,
        database="",
        created_at=now,
        expires_at=now,
    )

    data = info.to_dict()

    assert set(data) == {"session_id", "name", "engine", "database", "created_at", "expires_at"}
    assert SessionInfo.from_dict(data) == info


def test_table_metadata_unknown_sentinel() -> None:
    meta = TableMetadata.unknown("orders")

    assert meta.row_count == 0
    assert meta.size_bytes == 0
    assert meta.size_formatted == "Unknown"
