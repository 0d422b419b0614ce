"""
Request and Response models for the console API.

These Pydantic models define the contract between client and server.
They provide:
- Type validation
- Automatic documentation
- Conversion to the database layer's dataclasses
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from dbconsole.database.models import ColumnInfo, ConnectionDescriptor, TableSchema


class ConnectionRequest(BaseModel):
    """
    Connection descriptor as sent by the client.

    Accepts the engine tag as either 'engine' or 'type'.
    """
    engine: Optional[str] = Field(
        default=None,
        description="mysql, mysql-proxy, postgresql or sqlite",
        examples=["postgresql"],
    )
    type: Optional[str] = Field(default=None, description="Alias of engine")
    name: str = Field(..., min_length=1, max_length=200, description="Display name")
    database: str = Field(default="", description="Target database name")
    host: Optional[str] = Field(default=None, description="Host, or proxy URL for mysql-proxy")
    port: Optional[int] = Field(default=None, ge=1, le=65535)
    username: Optional[str] = None
    password: Optional[str] = None
    filename: Optional[str] = Field(default=None, description="SQLite database file")
    server: Optional[str] = Field(default=None, description="Upstream server behind the proxy")
    id: Optional[str] = Field(default=None, description="Client-side connection id")

    def to_descriptor(self) -> ConnectionDescriptor:
        return ConnectionDescriptor.from_dict(self.model_dump(exclude_none=True))


class SessionResponse(BaseModel):
    """Public projection of a session."""
    session_id: str
    name: str
    engine: str
    database: str
    created_at: datetime
    expires_at: datetime


class SessionCreateResponse(BaseModel):
    session: SessionResponse


class SessionListResponse(BaseModel):
    sessions: List[SessionResponse]
    total: int


class SessionDeleteResponse(BaseModel):
    success: bool = True
    message: str = "Session destroyed"


class QueryRequest(BaseModel):
    """Raw SQL to run against the session's database."""
    query: str = Field(
        ...,
        min_length=1,
        description="SQL statement",
        examples=["SELECT * FROM users LIMIT 10"],
    )


class TablesResponse(BaseModel):
    tables: List[str]


class TableMetadataResponse(BaseModel):
    name: str
    row_count: int
    size_bytes: int
    size_formatted: str


class MetadataResponse(BaseModel):
    metadata: Optional[Dict[str, TableMetadataResponse]] = None


class ConnectionTestResponse(BaseModel):
    success: bool
    message: str


class ColumnModel(BaseModel):
    """One column as the client describes it."""
    model_config = ConfigDict(populate_by_name=True)

    name: str
    type: str
    nullable: bool = True
    key: Optional[str] = None
    default: Any = None
    auto_increment: bool = Field(default=False, alias="autoIncrement")

    def to_column(self) -> ColumnInfo:
        return ColumnInfo(
            name=self.name,
            type=self.type,
            nullable=self.nullable,
            key=self.key,
            default=self.default,
            auto_increment=self.auto_increment,
        )


class TableSchemaModel(BaseModel):
    name: str
    columns: List[ColumnModel] = Field(default_factory=list)

    def to_schema(self) -> TableSchema:
        return TableSchema(name=self.name, columns=[col.to_column() for col in self.columns])


class GenerateSQLRequest(BaseModel):
    """Natural language request plus the tables the query may use."""
    model_config = ConfigDict(populate_by_name=True)

    description: str = Field(
        ...,
        min_length=1,
        max_length=2000,
        examples=["Ten most recent orders with their customer names"],
    )
    schema_: List[TableSchemaModel] = Field(..., min_length=1, alias="schema")
    database_type: str = Field(..., alias="databaseType", examples=["postgresql"])


class GenerateSQLResponse(BaseModel):
    query: str
    explanation: str


class HealthResponse(BaseModel):
    """Response model for the /health endpoint."""
    status: str = Field(default="healthy")
    version: str
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    active_sessions: Optional[int] = None


class ErrorResponse(BaseModel):
    """Standard error response model."""
    error: str
    message: str
    details: Optional[str] = None
    timestamp: Optional[datetime] = None
