"""
Database console root package.

This package contains all application source code organized by responsibility:
- api/       : FastAPI routes and HTTP handling
- core/      : Configuration, logging, encryption and cross-cutting utilities
- database/  : Engine adapters, the session store and its encrypted storage
- services/  : Session-scoped database operations with timeouts
- llm/       : LLM integration and prompt management
- models/    : Pydantic models for request/response schemas
"""

__version__ = "0.9.0"
