"""
Data model shared by the adapters and the session store.

- ConnectionDescriptor : everything needed to reach one database (secrets included)
- SessionInfo          : the public projection of a session (no secrets)
- ColumnInfo / TableSchema, TableMetadata, QueryResult : adapter results
"""
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from dbconsole.core.exceptions import UnsupportedEngineError, ValidationError


class EngineType(str, Enum):
    """Database engines the console can talk to."""
    MYSQL = "mysql"
    MYSQL_PROXY = "mysql-proxy"
    POSTGRESQL = "postgresql"
    SQLITE = "sqlite"

    @classmethod
    def parse(cls, value: Any) -> "EngineType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnsupportedEngineError(value)


DEFAULT_PORTS = {
    EngineType.MYSQL: 3306,
    EngineType.POSTGRESQL: 5432,
}


@dataclass(frozen=True)
class ConnectionDescriptor:
    """
    Connection parameters for one database.

    Frozen because a session keeps using the exact descriptor it was
    validated with.

    Attributes:
        engine: Engine tag selecting the adapter
        name: Display name chosen by the user
        database: Target database (schema) name
        host: Server host, or the proxy endpoint URL for mysql-proxy
        port: Server port (engine default when omitted)
        username: Login user
        password: Login password
        filename: Database file path (SQLite only)
        server: Upstream server name behind the proxy (mysql-proxy only)
        id: Client-side connection id, if the client keeps one
    """
    engine: EngineType
    name: str
    database: str = ""
    host: Optional[str] = None
    port: Optional[int] = None
    username: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)
    filename: Optional[str] = None
    server: Optional[str] = None
    id: Optional[str] = None

    @property
    def effective_port(self) -> Optional[int]:
        return self.port or DEFAULT_PORTS.get(self.engine)

    def describe(self) -> str:
        """Redacted one-line description, safe for logs."""
        if self.engine == EngineType.SQLITE:
            return f"sqlite://{self.filename}"
        if self.engine == EngineType.MYSQL_PROXY:
            return f"mysql-proxy://{self.host} -> {self.server}/{self.database}"
        return f"{self.engine.value}://{self.host}:{self.effective_port}/{self.database}"

    def to_dict(self) -> Dict[str, Any]:
        """Full serialization, secrets included. Only the session store calls this."""
        data = asdict(self)
        data["engine"] = self.engine.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConnectionDescriptor":
        """
        Build a descriptor from JSON.

        Accepts both 'engine' and the older 'type' key.

        Raises:
            UnsupportedEngineError: If the engine tag is unknown
            ValidationError: If the name is missing
        """
        engine = EngineType.parse(data.get("engine") or data.get("type"))

        name = data.get("name")
        if not name:
            raise ValidationError("Connection name is required", field="name")

        port = data.get("port")
        if port in ("", None):
            port = None
        else:
            try:
                port = int(port)
            except (TypeError, ValueError):
                raise ValidationError(f"Invalid port: {port}", field="port")

        return cls(
            engine=engine,
            name=name,
            database=data.get("database") or "",
            host=data.get("host") or None,
            port=port,
            username=data.get("username") or None,
            password=data.get("password"),
            filename=data.get("filename") or None,
            server=data.get("server") or None,
            id=data.get("id") or None,
        )


@dataclass(frozen=True)
class SessionInfo:
    """Public projection of a session: what API callers are allowed to see."""
    session_id: str
    name: str
    engine: EngineType
    database: str
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "name": self.name,
            "engine": self.engine.value,
            "database": self.database,
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionInfo":
        return cls(
            session_id=data["session_id"],
            name=data["name"],
            engine=EngineType.parse(data["engine"]),
            database=data.get("database", ""),
            created_at=datetime.fromisoformat(data["created_at"]),
            expires_at=datetime.fromisoformat(data["expires_at"]),
        )


@dataclass
class ColumnInfo:
    """Information about a database column."""
    name: str
    type: str
    nullable: bool
    key: Optional[str] = None
    default: Any = None
    auto_increment: bool = False

    @property
    def primary_key(self) -> bool:
        return self.key == "PRI"


@dataclass
class TableSchema:
    """Column layout of one table."""
    name: str
    columns: List[ColumnInfo] = field(default_factory=list)

    def get_column_names(self) -> List[str]:
        return [col.name for col in self.columns]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "columns": [asdict(col) for col in self.columns],
        }


UNKNOWN_SIZE = "Unknown"


@dataclass
class TableMetadata:
    """Row count and storage size of one table."""
    name: str
    row_count: int
    size_bytes: int
    size_formatted: str

    @classmethod
    def unknown(cls, table_name: str, row_count: int = 0) -> "TableMetadata":
        """Sentinel used whenever no size source answered."""
        return cls(name=table_name, row_count=row_count, size_bytes=0, size_formatted=UNKNOWN_SIZE)

    @classmethod
    def measured(cls, table_name: str, row_count: int, size_bytes: int) -> "TableMetadata":
        return cls(
            name=table_name,
            row_count=row_count,
            size_bytes=size_bytes,
            size_formatted=format_bytes(size_bytes),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TableMetadata":
        return cls(
            name=data["name"],
            row_count=int(data.get("row_count", 0)),
            size_bytes=int(data.get("size_bytes", 0)),
            size_formatted=data.get("size_formatted", UNKNOWN_SIZE),
        )


@dataclass
class QueryResult:
    """
    Result of one statement.

    Attributes:
        columns: Column names (may be empty when no rows came back)
        rows: List of rows as dictionaries
        execution_time_ms: Statement execution time in milliseconds
        affected_rows: Row count for statements that return no rows
    """
    columns: List[str]
    rows: List[Dict[str, Any]]
    execution_time_ms: float
    affected_rows: Optional[int] = None

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "columns": self.columns,
            "rows": self.rows,
            "row_count": self.row_count,
            "execution_time_ms": self.execution_time_ms,
            "affected_rows": self.affected_rows,
        }


_SIZE_UNITS = ["B", "kB", "MB", "GB", "TB"]


def format_bytes(size_bytes: int) -> str:
    """
    Human readable size, base 1024, one decimal place.

    >>> format_bytes(0)
    '0 B'
    >>> format_bytes(1536)
    '1.5 kB'
    >>> format_bytes(1048576)
    '1.0 MB'
    """
    if size_bytes <= 0:
        return "0 B"

    value = float(size_bytes)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{value:.1f} {_SIZE_UNITS[unit]}"
