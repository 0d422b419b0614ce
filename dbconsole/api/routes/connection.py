"""
Connection Routes - probe a connection descriptor without a session.
"""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from dbconsole.api.dependencies import get_database_service
from dbconsole.core.logging_config import get_logger
from dbconsole.models.console import ConnectionRequest, ConnectionTestResponse
from dbconsole.services.database_service import DatabaseService

logger = get_logger(__name__)

router = APIRouter(
    prefix="/connections",
    tags=["Connection"],
)


@router.post(
    "/test",
    response_model=ConnectionTestResponse,
    summary="Test database connection",
    description="""
    Test a database connection with provided credentials.

    Nothing is stored: a throwaway adapter connects, runs SELECT 1 and
    disconnects. Answers 400 with success=false when the database did
    not respond.
    """,
)
def test_connection(
    request: ConnectionRequest,
    service: DatabaseService = Depends(get_database_service),
):
    descriptor = request.to_descriptor()
    logger.info(f"Testing connection to {descriptor.describe()}")

    success, message = service.test_connection(descriptor)
    body = ConnectionTestResponse(success=success, message=message)
    if not success:
        return JSONResponse(status_code=400, content=body.model_dump())
    return body
