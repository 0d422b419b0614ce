"""
Input Validators - Sanitization and validation utilities.

This module provides security-focused input validation:
- Session ID validation (ids double as file names on disk)
- Bearer token extraction
- Identifier quoting for dynamic table names
"""
import uuid
from typing import Optional, Tuple

from dbconsole.core.logging_config import get_logger

logger = get_logger(__name__)


def validate_session_id(session_id: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a session ID is a proper UUID.

    Args:
        session_id: Session ID to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not session_id:
        return False, "Session ID is required"

    try:
        parsed = uuid.UUID(session_id)
    except ValueError:
        return False, "Invalid session_id format (must be UUID)"

    # Reject alternate spellings (braces, urn: prefix, uppercase) so one
    # session maps to exactly one file name.
    if str(parsed) != session_id:
        return False, "Invalid session_id format (must be canonical UUID)"

    return True, None


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """
    Extract the session id from an Authorization header.

    Args:
        authorization: Raw header value, e.g. "Bearer 1f0c..."

    Returns:
        The token, or None when the header is missing or malformed
    """
    if not authorization:
        return None

    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None

    return token.strip()


def quote_identifier(name: str, quote_char: str = '"') -> str:
    """
    Quote a SQL identifier, doubling any embedded quote characters.

    Args:
        name: Raw identifier, e.g. a table name with spaces or mixed case
        quote_char: '"' for PostgreSQL/SQLite, '`' for MySQL

    Returns:
        Quoted identifier safe to interpolate into SQL text
    """
    if "\x00" in name:
        raise ValueError("Identifiers cannot contain NUL characters")
    escaped = name.replace(quote_char, quote_char * 2)
    return f"{quote_char}{escaped}{quote_char}"
