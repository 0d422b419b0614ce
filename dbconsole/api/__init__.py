"""
API module - FastAPI routes and HTTP handling.

This module handles:
- Request validation and parsing
- Response formatting
- Error handling
- Route definitions
"""
from dbconsole.api.main import create_app

__all__ = ["create_app"]
