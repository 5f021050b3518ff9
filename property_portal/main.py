"""
FastAPI application entry point.
Main application setup and configuration.
"""

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
from pathlib import Path
from sqlalchemy.exc import SQLAlchemyError
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from property_portal.config import settings
from property_portal.database import test_database_connection, create_tables, close_db_connection
from property_portal.routers import (
    admin_router,
    auth_router,
    manager_requests_router,
    property_owners_router,
    rental_applications_router,
    stripe_router,
    tenant_router,
    uploads_router,
    users_router,
)
from property_portal.utils.exceptions import APIException
from property_portal.services.error_handler import ErrorHandlerService
from property_portal.middleware.timing import RequestTimingMiddleware

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    db_connected = await test_database_connection()
    if not db_connected:
        logger.error("Failed to connect to database on startup")
    else:
        await create_tables()

    yield

    # Shutdown
    logger.info("Shutting down application")
    await close_db_connection()


# Create FastAPI application instance
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Property management portal API.

    ## Features

    * **Maintenance requests**: intake, status workflow, owner approval, conversation and retention cleanup
    * **Tenant payments**: checking account, security deposit and credit card setup
    * **Property owners**: owner records with their properties and users
    * **Accounts**: signup, password and Google sign-in, identity verification

    ## Authentication

    Use `/auth/login` or `/auth/google` to obtain a session token, then include it
    in the Authorization header as `Bearer <token>`.
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {"name": "Authentication", "description": "Signup, login and password reset"},
        {"name": "Manager Requests", "description": "Maintenance request intake and workflow"},
        {"name": "Admin", "description": "Administration and scheduled cleanup"},
        {"name": "Tenant Payments", "description": "Payment setup wizard and payment history"},
        {"name": "Property Owners", "description": "Owner records and property listings"},
        {"name": "Rental Applications", "description": "Tenant applications"},
        {"name": "Users", "description": "Profile address and verification documents"},
        {"name": "Stripe", "description": "Identity verification and processor webhooks"},
        {"name": "Uploads", "description": "Image and document uploads"},
        {"name": "Health", "description": "System health endpoints"},
    ],
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Processing-Time"],
)

app.add_middleware(
    RequestTimingMiddleware,
    slow_request_threshold=2.0,  # Log requests slower than 2 seconds
    enable_request_logging=settings.debug,
)

# Include API routers
for router in (
    auth_router,
    users_router,
    manager_requests_router,
    admin_router,
    tenant_router,
    stripe_router,
    property_owners_router,
    rental_applications_router,
    uploads_router,
):
    app.include_router(router, prefix=settings.api_prefix)

# Locally stored uploads
if settings.blob_backend == "local":
    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount(settings.public_upload_base_url, StaticFiles(directory=str(upload_dir)), name="uploads")


# Global exception handlers using ErrorHandlerService
@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    """Handle custom API exceptions with structured error responses."""
    return ErrorHandlerService.handle_api_exception(exc, request)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle FastAPI request validation errors with detailed field information."""
    return ErrorHandlerService.handle_validation_error(exc.errors(), request)


@app.exception_handler(PydanticValidationError)
async def pydantic_validation_exception_handler(request: Request, exc: PydanticValidationError):
    """Handle Pydantic validation errors raised inside handlers."""
    return ErrorHandlerService.handle_validation_error(exc.errors(), request)


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    """Handle database errors with appropriate error responses."""
    return ErrorHandlerService.handle_database_error(exc, request)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions (including unknown routes) with structured error responses."""
    return ErrorHandlerService.handle_http_exception(exc, request)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions with secure error responses."""
    return ErrorHandlerService.handle_unexpected_error(exc, request)


@app.get("/", tags=["Health"])
async def root():
    """Basic API information."""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.environment,
        "status": "healthy",
        "documentation": {
            "swagger_ui": "/docs",
            "redoc": "/redoc",
            "openapi_json": "/openapi.json"
        },
        "api_prefix": settings.api_prefix
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint with database connectivity test.
    Used by container health checks and load balancers.
    """
    db_healthy = await test_database_connection()

    if not db_healthy:
        raise HTTPException(
            status_code=503,
            detail="Database connection failed"
        )

    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "database": "connected"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "property_portal.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
