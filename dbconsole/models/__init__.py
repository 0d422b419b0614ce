"""
Models module - Pydantic schemas for data validation.

This module defines:
- Request models: Input validation for API endpoints
- Response models: Output formatting for API responses
"""
from dbconsole.models.console import (
    ConnectionRequest,
    ConnectionTestResponse,
    ErrorResponse,
    GenerateSQLRequest,
    GenerateSQLResponse,
    HealthResponse,
    MetadataResponse,
    QueryRequest,
    SessionCreateResponse,
    SessionDeleteResponse,
    SessionListResponse,
    SessionResponse,
    TablesResponse,
)

__all__ = [
    "ConnectionRequest",
    "ConnectionTestResponse",
    "ErrorResponse",
    "GenerateSQLRequest",
    "GenerateSQLResponse",
    "HealthResponse",
    "MetadataResponse",
    "QueryRequest",
    "SessionCreateResponse",
    "SessionDeleteResponse",
    "SessionListResponse",
    "SessionResponse",
    "TablesResponse",
]
