"""
FastAPI application for the Users REST API.

This module sets up the FastAPI application with lifecycle management,
error handling, static assets, and includes all API routes.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from users_api.config import Settings
from users_api.api.errors import UNKNOWN_ERROR_MESSAGE
from users_api.api.models import ApiInfo, ErrorResponse
from users_api.api.routes import router, get_service_container

API_VERSION = "1.0.0"

settings = Settings.from_env()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


# ============================================================================
# Lifespan Context Manager
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Lifespan context manager for startup and shutdown events.

    Startup:
    - Resolve settings and open the user store
    - Log where the collection lives

    Shutdown:
    - Release the store
    """
    # Startup
    logger.info("=" * 70)
    logger.info("  Users API Server Starting")
    logger.info("=" * 70)

    try:
        services = get_service_container()
        services.initialize(settings)

        logger.info(f"  - Users file: {services.settings.users_file}")
        logger.info(f"  - Id strategy: {services.settings.id_strategy}")
        logger.info(f"  - Write error status: {services.settings.write_error_status}")
        logger.info(f"Web server: http://{services.settings.host}:{services.settings.port}")
        logger.info("=" * 70)

    except Exception as e:
        logger.error(f"✗ Startup failed: {e}", exc_info=True)
        raise

    yield

    # Shutdown
    logger.info("=" * 70)
    logger.info("  Users API Server Shutting Down")
    logger.info("=" * 70)
    get_service_container().cleanup()


# ============================================================================
# FastAPI Application
# ============================================================================

app = FastAPI(
    title="Users API",
    description="""
# Users API

A small REST API for a "users" resource stored in a single JSON file.

## Endpoints

- **POST /api/users** - create a user (id assigned by the server)
- **GET /api/users** - list every user in creation order
- **GET /api/users/{id}** - fetch one user

## Storage

Each request reads the JSON file from disk; creates rewrite it in full.
    """,
    version=API_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)


# ============================================================================
# Error Handlers
# ============================================================================

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTP errors as a message body."""
    logger.warning(f"HTTP {exc.status_code}: {exc.detail}")

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(message=str(exc.detail)).model_dump(),
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors."""
    logger.warning(f"Validation error: {exc.errors()}")

    first = exc.errors()[0] if exc.errors() else {}
    message = first.get("msg", "Invalid request")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(message=f"Invalid request: {message}").model_dump()
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle all uncaught exceptions without leaking details."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(message=UNKNOWN_ERROR_MESSAGE).model_dump()
    )


# ============================================================================
# Include Routers
# ============================================================================

app.include_router(router)


# ============================================================================
# Root Endpoint
# ============================================================================

@app.get("/", response_model=ApiInfo, tags=["Root"])
async def root():
    """
    Root endpoint.

    Serves the static index page when the static directory has one,
    otherwise returns basic information about the API.
    """
    index_page = Path(settings.static_dir) / "index.html"
    if index_page.is_file():
        return FileResponse(index_page, media_type="text/html")

    return ApiInfo(
        message="Users API Server",
        version=API_VERSION,
        docs="/docs",
        health="/health",
        endpoints={
            "create": "POST /api/users",
            "list": "GET /api/users",
            "get": "GET /api/users/{id}",
            "health": "GET /health"
        }
    )


# ============================================================================
# Static Assets
# ============================================================================

# Mounted last so API routes take precedence; "/" itself is served by root().
if Path(settings.static_dir).is_dir():
    app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")


# ============================================================================
# Development Server
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "users_api.api.app:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level="info"
    )
