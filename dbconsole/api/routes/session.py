"""
Session Routes - API endpoints for the session lifecycle.

Endpoints:
- POST /sessions: Validate a connection descriptor and open a session
- GET /sessions: List active sessions
- GET /sessions/current: Info for the bearer token's session
- DELETE /sessions: Revoke the bearer token's session
"""
from fastapi import APIRouter, Depends

from dbconsole.api.dependencies import get_session_store, require_session_id
from dbconsole.core.exceptions import SessionAlreadyClosedError
from dbconsole.core.logging_config import get_logger
from dbconsole.database.session_store import SessionStore
from dbconsole.models.console import (
    ConnectionRequest,
    ErrorResponse,
    SessionCreateResponse,
    SessionDeleteResponse,
    SessionListResponse,
    SessionResponse,
)

logger = get_logger(__name__)
router = APIRouter(prefix="/sessions", tags=["Sessions"])


@router.post(
    "",
    response_model=SessionCreateResponse,
    summary="Create Session",
    responses={400: {"model": ErrorResponse, "description": "Connection test failed"}},
    description="""
    Validate a connection descriptor (connect, SELECT 1, disconnect)
    and open a session for it.

    The response carries only the public session fields; use the
    returned session_id as a bearer token on every other endpoint.
    """,
)
def create_session(
    request: ConnectionRequest,
    store: SessionStore = Depends(get_session_store),
) -> SessionCreateResponse:
    descriptor = request.to_descriptor()
    info = store.create_session(descriptor)
    return SessionCreateResponse(session=SessionResponse(**info.to_dict()))


@router.get(
    "",
    response_model=SessionListResponse,
    summary="List Sessions",
)
def list_sessions(store: SessionStore = Depends(get_session_store)) -> SessionListResponse:
    sessions = [SessionResponse(**info.to_dict()) for info in store.list_active_sessions()]
    return SessionListResponse(sessions=sessions, total=len(sessions))


@router.get(
    "/current",
    response_model=SessionResponse,
    summary="Get Current Session",
    responses={401: {"model": ErrorResponse, "description": "Unknown or expired session"}},
)
def get_current_session(
    session_id: str = Depends(require_session_id),
    store: SessionStore = Depends(get_session_store),
) -> SessionResponse:
    return SessionResponse(**store.get_session(session_id).to_dict())


@router.delete(
    "",
    response_model=SessionDeleteResponse,
    summary="Destroy Session",
    responses={
        401: {"model": ErrorResponse, "description": "Missing bearer token"},
        404: {"model": ErrorResponse, "description": "Session already closed"},
    },
)
def destroy_session(
    session_id: str = Depends(require_session_id),
    store: SessionStore = Depends(get_session_store),
) -> SessionDeleteResponse:
    if not store.destroy_session(session_id):
        raise SessionAlreadyClosedError(session_id)
    return SessionDeleteResponse()
