"""
FastAPI Application Entry Point.

This module creates and configures the FastAPI application instance.
It handles:
1. Application initialization (session store, services)
2. Router registration
3. Middleware configuration (audit & security headers)
4. Exception handlers (ConsoleException hierarchy)
5. Startup/shutdown of the session sweeper

Run with: uvicorn dbconsole.api.main:create_app --factory --reload
"""
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dbconsole import __version__
from dbconsole.api.routes import (
    connection_router,
    health_router,
    llm_router,
    metadata_router,
    query_router,
    session_router,
)
from dbconsole.core.audit import AuditMiddleware, SecurityHeadersMiddleware
from dbconsole.core.config import Settings, get_settings
from dbconsole.core.exceptions import ConsoleException
from dbconsole.core.logging_config import get_logger, setup_logging
from dbconsole.database.session_store import SessionStore
from dbconsole.llm import SQLGenerator
from dbconsole.services.database_service import DatabaseService

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    session_store: Optional[SessionStore] = None,
    sql_generator: Optional[SQLGenerator] = None,
) -> FastAPI:
    """
    Build the console application.

    Args:
        settings: Configuration (environment-based when omitted)
        session_store: Pre-built store; built from settings when omitted
        sql_generator: Pre-built generator; built on first use when omitted

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_dir)

    store = session_store or SessionStore.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan manager.

        - Startup: start the background expiry sweep
        - Shutdown: stop it
        """
        logger.info(f"Starting {settings.app_name} in {settings.app_env} mode")
        logger.info(f"Session TTL: {settings.session_ttl_hours}h, sweep every {settings.session_sweep_interval_seconds}s")
        logger.info(f"Audit Logging: {settings.enable_audit_logging}")

        store.start()

        yield  # Application runs here

        logger.info(f"Shutting down {settings.app_name}")
        store.stop()

    app = FastAPI(
        title="Database Console API",
        description="""
        A web console for MySQL, MySQL-over-proxy, PostgreSQL and SQLite.

        ## Features

        - **Sessions**: Credentials are stored once, server-side and encrypted;
          clients only hold an opaque bearer token
        - **Schema Browsing**: Tables, columns, row counts and sizes
        - **Raw SQL**: Run statements with a hard timeout
        - **SQL Generation**: Natural language to SQL via Gemini / Groq
        """,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.settings = settings
    app.state.session_store = store
    app.state.database_service = DatabaseService(
        store,
        query_timeout_seconds=settings.query_timeout_seconds,
    )
    app.state.sql_generator = sql_generator

    # ============================================================
    # Middleware Configuration (Order matters!)
    # ============================================================

    app.add_middleware(SecurityHeadersMiddleware)

    if settings.enable_audit_logging:
        app.add_middleware(AuditMiddleware)
        logger.info("Audit logging middleware enabled")

    if settings.is_development():
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        logger.warning("CORS configured for development (all origins allowed)")

    # ============================================================
    # Exception Handlers
    # ============================================================

    @app.exception_handler(ConsoleException)
    async def console_exception_handler(request: Request, exc: ConsoleException):
        """Handle all custom console exceptions."""
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict()
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Handle uncaught exceptions globally.

        Detailed error information is only included in development mode.
        """
        logger.exception(f"Unhandled exception: {exc}")

        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_error",
                "message": "An unexpected error occurred",
                "details": str(exc) if settings.is_development() else None,
                "timestamp": datetime.utcnow().isoformat()
            }
        )

    # ============================================================
    # Routers
    # ============================================================

    app.include_router(health_router)
    app.include_router(session_router)
    app.include_router(query_router)
    app.include_router(metadata_router)
    app.include_router(connection_router)
    app.include_router(llm_router)

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "message": "Database Console API",
            "version": __version__,
            "documentation": "/docs",
            "health": "/health"
        }

    return app


def run() -> None:
    """Console script entry point."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "dbconsole.api.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development()
    )


if __name__ == "__main__":
    run()
