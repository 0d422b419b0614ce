"""
Request dependencies shared by the routers.

Everything long-lived hangs off app.state, set up by create_app():
- session_store     : SessionStore
- database_service  : DatabaseService
- sql_generator     : SQLGenerator (built on first use)
"""
from typing import Optional

from fastapi import Header, Request

from dbconsole.core.exceptions import SessionNotFoundError
from dbconsole.core.validators import extract_bearer_token
from dbconsole.database.session_store import SessionStore
from dbconsole.llm import SQLGenerator
from dbconsole.services.database_service import DatabaseService


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_database_service(request: Request) -> DatabaseService:
    return request.app.state.database_service


def get_sql_generator(request: Request) -> SQLGenerator:
    generator = getattr(request.app.state, "sql_generator", None)
    if generator is None:
        generator = SQLGenerator()
        request.app.state.sql_generator = generator
    return generator


def require_session_id(authorization: Optional[str] = Header(default=None)) -> str:
    """
    Session id from 'Authorization: Bearer <id>'.

    Raises:
        SessionNotFoundError: If the header is missing or malformed (401)
    """
    session_id = extract_bearer_token(authorization)
    if session_id is None:
        raise SessionNotFoundError(
            "",
            message="Authorization header with session ID is required",
        )
    return session_id
