"""
API Routes module - Endpoint definitions.

Each file in this module defines routes for a specific domain:
- health.py     : Health check endpoints
- session.py    : Session lifecycle
- query.py      : Raw SQL and schema browsing
- metadata.py   : Cached table metadata
- connection.py : Descriptor probing
- llm.py        : SQL generation
"""
from dbconsole.api.routes.connection import router as connection_router
from dbconsole.api.routes.health import router as health_router
from dbconsole.api.routes.llm import router as llm_router
from dbconsole.api.routes.metadata import router as metadata_router
from dbconsole.api.routes.query import router as query_router
from dbconsole.api.routes.session import router as session_router

__all__ = [
    "connection_router",
    "health_router",
    "llm_router",
    "metadata_router",
    "query_router",
    "session_router",
]
