"""
Query Routes - raw SQL and schema browsing for a session.

Each request takes a fresh adapter from the session store, connects,
runs one operation and disconnects, under the query cutoff.
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends

from dbconsole.api.dependencies import get_database_service, require_session_id
from dbconsole.core.logging_config import get_logger
from dbconsole.models.console import ErrorResponse, QueryRequest, TablesResponse
from dbconsole.services.database_service import DatabaseService

logger = get_logger(__name__)
router = APIRouter(prefix="/query", tags=["Query"])


@router.post(
    "",
    summary="Execute SQL",
    responses={
        400: {"model": ErrorResponse, "description": "Query rejected by the database"},
        401: {"model": ErrorResponse, "description": "Unknown or expired session"},
        504: {"model": ErrorResponse, "description": "Query timed out"},
    },
    description="Run one SQL statement against the session's database.",
)
def execute_query(
    request: QueryRequest,
    session_id: str = Depends(require_session_id),
    service: DatabaseService = Depends(get_database_service),
) -> Dict[str, Any]:
    return service.execute_query(session_id, request.query).to_dict()


@router.get(
    "/tables",
    response_model=TablesResponse,
    summary="List Tables",
)
def list_tables(
    session_id: str = Depends(require_session_id),
    service: DatabaseService = Depends(get_database_service),
) -> TablesResponse:
    return TablesResponse(tables=service.list_tables(session_id))


@router.get(
    "/tables/{table_name}",
    summary="Describe Table",
)
def describe_table(
    table_name: str,
    session_id: str = Depends(require_session_id),
    service: DatabaseService = Depends(get_database_service),
) -> Dict[str, Any]:
    return {"schema": service.describe_table(session_id, table_name).to_dict()}
