"""
FastAPI Application

Main application setup and configuration.

Usage:
    uvicorn api.app:app --reload

    # Or run directly
    python -m api.app
"""

import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from api.errors import (
    APIError,
    api_error_handler,
    engine_error_handler,
    generic_error_handler,
    validation_error_handler,
)
from api.routes import applications, catalogue, health
from core.config.runtime import get_default_config
from core.schemas.errors import EmpanelmentException


# Configure logging from APCD_LOG_LEVEL or the config file log_level
def _resolve_log_level() -> int:
    """Resolve log level from the runtime config, defaulting to INFO."""
    raw = get_default_config().log_level
    return getattr(logging, (raw or "INFO").upper(), logging.INFO)


logging.basicConfig(
    level=_resolve_log_level(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="APCD Empanelment API",
        description="""
HTTP API for the APCD OEM empanelment evaluation and status-transition engine.

## Endpoints

- **GET /criteria** - Evaluation rubric
- **GET /device-types** - Selectable APCD categories
- **POST /applications** - Open a DRAFT application
- **GET /applications/{id}** - Current snapshot
- **POST /applications/{id}/events** - Apply one lifecycle event
- **GET /applications/{id}/evaluation** - Score preview
- **GET /applications/{id}/fees** - Fee quote
- **GET /health** - Health check

## Acting user

Event endpoints read the actor from `X-User-Id` and `X-User-Role`
(APPLICANT, EVALUATOR, FIELD_VERIFIER, OFFICER, SYSTEM).
        """,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register exception handlers
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(EmpanelmentException, engine_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(catalogue.router)
    app.include_router(applications.router)

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
