"""
FastAPI application entry point.
Builds the application for the configured storage backend.
"""

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
from pydantic import ValidationError as PydanticValidationError
from typing import Optional
import logging

from homeverse.config import Settings, get_settings
from homeverse.database import Database
from homeverse.repositories.interface import StorageRepository
from homeverse.repositories.memory import MemoryState
from homeverse.routers import (
    auth_router,
    properties_router,
    users_router,
    inquiries_router,
    favorites_router,
)
from homeverse.utils.dependencies import get_storage
from homeverse.utils.exceptions import APIException, ServiceUnavailableError
from homeverse.utils.file_utils import UPLOAD_URL_PREFIX
from homeverse.services.error_handler import ErrorHandlerService
from homeverse.middleware import RequestLoggingMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    settings: Settings = app.state.settings
    database: Optional[Database] = app.state.database

    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}, storage: {settings.storage_backend}")

    if database is not None:
        if await database.test_connection():
            await database.create_tables()
        else:
            logger.error("Failed to connect to database on startup")

    yield

    logger.info("Shutting down application")
    if database is not None:
        await database.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Explicit settings; the cached environment settings are used when omitted

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="""
    Real-estate listing API for browsing, listing and bookmarking properties.

    ## Features

    * **Listings**: Browse with location, type, status, price, room and area filters
    * **Dashboard**: Sellers and agents manage their own listings with image uploads
    * **Inquiries**: Visitors contact agents about a property
    * **Favorites**: Logged-in users bookmark properties

    ## Authentication

    Log in with `/api/login`; the session is kept in an HttpOnly cookie.
    """,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_tags=[
            {"name": "Authentication", "description": "Registration, login and sessions"},
            {"name": "Properties", "description": "Property listing management and browsing"},
            {"name": "Users", "description": "Profiles and user administration"},
            {"name": "Inquiries", "description": "Contact messages about listings"},
            {"name": "Favorites", "description": "Bookmarked properties"},
            {"name": "Health", "description": "System health endpoints"},
        ],
        lifespan=lifespan,
    )

    app.state.settings = settings
    if settings.uses_memory_storage:
        app.state.memory_state = MemoryState()
        app.state.database = None
    else:
        app.state.memory_state = None
        app.state.database = Database(settings.database_url, echo=settings.debug)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Processing-Time"],
    )

    app.add_middleware(
        RequestLoggingMiddleware,
        max_request_size=settings.max_request_size,
        enable_request_logging=settings.debug,
    )

    # Include API routers
    app.include_router(auth_router, prefix=settings.api_prefix)
    app.include_router(properties_router, prefix=settings.api_prefix)
    app.include_router(users_router, prefix=settings.api_prefix)
    app.include_router(inquiries_router, prefix=settings.api_prefix)
    app.include_router(favorites_router, prefix=settings.api_prefix)

    app.mount(
        UPLOAD_URL_PREFIX,
        StaticFiles(directory=settings.upload_dir, check_dir=False),
        name="uploads"
    )

    _register_exception_handlers(app)
    _register_health_routes(app)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    """Route every error through ErrorHandlerService."""

    @app.exception_handler(APIException)
    async def api_exception_handler(request: Request, exc: APIException):
        return ErrorHandlerService.handle_api_exception(exc, request)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return ErrorHandlerService.handle_validation_error(exc.errors(), request)

    @app.exception_handler(PydanticValidationError)
    async def pydantic_validation_exception_handler(request: Request, exc: PydanticValidationError):
        return ErrorHandlerService.handle_validation_error(exc.errors(), request)

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError):
        return ErrorHandlerService.handle_database_error(exc, request)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return ErrorHandlerService.handle_http_exception(exc, request)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        return ErrorHandlerService.handle_unexpected_error(exc, request)


def _register_health_routes(app: FastAPI) -> None:
    settings: Settings = app.state.settings

    @app.get("/", tags=["Health"])
    async def root():
        """Basic API information."""
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.app_version,
            "environment": settings.environment,
            "documentation": {
                "swagger_ui": "/docs",
                "redoc": "/redoc",
                "openapi_json": "/openapi.json"
            },
            "api_prefix": settings.api_prefix
        }

    @app.get("/health", tags=["Health"])
    async def health_check(storage: StorageRepository = Depends(get_storage)):
        """
        Health check endpoint with a storage connectivity test.
        Used by container health checks and load balancers.
        """
        if not await storage.ping():
            raise ServiceUnavailableError("Storage backend unreachable")

        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
            "storage": settings.storage_backend,
        }


app = create_app()


if __name__ == "__main__":
    import uvicorn
    current_settings = get_settings()
    uvicorn.run(
        "homeverse.main:app",
        host=current_settings.host,
        port=current_settings.port,
        reload=current_settings.debug
    )
