"""
Metadata Routes - cached table row counts and sizes.

- GET /metadata: Cached map, or null if never refreshed (no database access)
- POST /metadata/refresh: Re-measure every table and cache the result
"""
from typing import Dict, Optional

from fastapi import APIRouter, Depends

from dbconsole.api.dependencies import get_database_service, require_session_id
from dbconsole.database.models import TableMetadata
from dbconsole.models.console import MetadataResponse
from dbconsole.services.database_service import DatabaseService

router = APIRouter(prefix="/metadata", tags=["Metadata"])


def _to_response(metadata: Optional[Dict[str, TableMetadata]]) -> MetadataResponse:
    if metadata is None:
        return MetadataResponse(metadata=None)
    return MetadataResponse(metadata={name: meta.to_dict() for name, meta in metadata.items()})


@router.get("", response_model=MetadataResponse, summary="Get Cached Metadata")
def get_metadata(
    session_id: str = Depends(require_session_id),
    service: DatabaseService = Depends(get_database_service),
) -> MetadataResponse:
    return _to_response(service.cached_metadata(session_id))


@router.post("/refresh", response_model=MetadataResponse, summary="Refresh Metadata")
def refresh_metadata(
    session_id: str = Depends(require_session_id),
    service: DatabaseService = Depends(get_database_service),
) -> MetadataResponse:
    return _to_response(service.refresh_metadata(session_id))
