"""
Custom Exceptions - Application-specific error classes.

This module defines a hierarchy of exceptions for clean error handling:
- Each exception has a status code and error code
- Used by the API layer for consistent error responses
- Callers can tell "log in again" (session errors) apart from
  "your query/credentials are wrong" and "timed out, try again"
"""
from typing import Optional


class ConsoleException(Exception):
    """
    Base exception for all console errors.

    Subclass this for specific error types.
    """
    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        """Convert to error response dict."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details
        }


class ValidationError(ConsoleException):
    """Raised when input validation fails."""
    status_code = 400
    error_code = "validation_error"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, details=f"field={field}" if field else None)
        self.field = field


class UnsupportedEngineError(ConsoleException):
    """Raised when a descriptor names an engine with no adapter."""
    status_code = 400
    error_code = "unsupported_engine"

    def __init__(self, engine: object):
        super().__init__(
            message=f"Unsupported database type: {engine}",
            details=f"engine={engine}"
        )
        self.engine = engine


class DatabaseConnectionError(ConsoleException):
    """Raised when an adapter cannot reach its database."""
    status_code = 502
    error_code = "database_connection_error"

    def __init__(self, message: str = "Failed to connect to database", cause: Optional[BaseException] = None):
        super().__init__(message, details=str(cause) if cause else None)
        self.cause = cause


class ConnectionTestFailed(ConsoleException):
    """Raised when a descriptor fails validation; no session is created."""
    status_code = 400
    error_code = "connection_test_failed"

    def __init__(self, message: str = "Connection test failed", details: Optional[str] = None):
        super().__init__(message, details)


class QueryExecutionError(ConsoleException):
    """Wraps the native driver error text of a failed statement."""
    status_code = 400
    error_code = "query_execution_failed"

    def __init__(self, native_error: str):
        super().__init__(
            message=f"Query execution failed: {native_error}",
            details=native_error
        )
        self.native_error = native_error


class MetadataUnavailable(ConsoleException):
    """Raised internally when no metadata source answers; never surfaced."""
    status_code = 503
    error_code = "metadata_unavailable"

    def __init__(self, table_name: str):
        super().__init__(message=f"Metadata unavailable for table {table_name}")
        self.table_name = table_name


class QueryTimeoutError(ConsoleException):
    """Raised when a database operation exceeds its cutoff."""
    status_code = 504
    error_code = "query_timeout"

    def __init__(self, timeout_seconds: float = 30, operation: str = "Query"):
        super().__init__(
            message=f"{operation} timed out after {timeout_seconds:g} seconds",
            details=f"timeout={timeout_seconds:g}s"
        )
        self.timeout_seconds = timeout_seconds


class SessionNotFoundError(ConsoleException):
    """Raised when a session id is unknown."""
    status_code = 401
    error_code = "session_not_found"

    def __init__(self, session_id: str, message: Optional[str] = None):
        super().__init__(
            message=message or f"Session not found: {session_id[:8]}...",
        )
        self.session_id = session_id


class SessionExpiredError(SessionNotFoundError):
    """Raised when a session existed but its TTL has elapsed."""
    error_code = "session_expired"

    def __init__(self, session_id: str):
        super().__init__(session_id, message=f"Session expired: {session_id[:8]}...")


class SessionAlreadyClosedError(ConsoleException):
    """Raised when revoking a token that names no live session."""
    status_code = 404
    error_code = "session_not_found"

    def __init__(self, session_id: str):
        super().__init__(f"Session not found: {session_id[:8]}...")
        self.session_id = session_id


class LLMError(ConsoleException):
    """Raised when LLM API calls fail."""
    status_code = 503
    error_code = "llm_error"

    def __init__(self, message: str = "LLM service unavailable"):
        super().__init__(message)


class SQLGenerationError(ConsoleException):
    """Raised when SQL generation fails."""
    status_code = 400
    error_code = "sql_generation_error"

    def __init__(self, message: str = "Could not generate SQL for this request"):
        super().__init__(message)
