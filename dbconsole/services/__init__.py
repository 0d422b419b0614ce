"""
Services module - Business logic and orchestration.

Services contain the core application logic:
- No HTTP concerns (those belong in api/)
- No engine specifics (those belong in database/adapters/)
"""
from dbconsole.services.database_service import DatabaseService

__all__ = [
    "DatabaseService",
]
