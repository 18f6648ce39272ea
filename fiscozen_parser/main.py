"""
FastAPI application entry point for the Fiscozen parser backend.

This module creates the FastAPI app instance, registers the error handlers
and mounts the routers:
- /api/fiscozen/*  provider workflow (login, search, clients, invoices, ...)
- /api/data/*      stored session records and export
- /health          public status
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fiscozen_parser import __version__
from fiscozen_parser.config import settings
from fiscozen_parser.provider.errors import ProviderError
from fiscozen_parser.routes.auth import router as auth_router
from fiscozen_parser.routes.clients import router as clients_router
from fiscozen_parser.routes.data import router as data_router
from fiscozen_parser.routes.extraction import router as extraction_router
from fiscozen_parser.routes.health import router as health_router
from fiscozen_parser.routes.invoices import router as invoices_router
from fiscozen_parser.routes.lookups import router as lookups_router

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)

API_PREFIX = "/api/fiscozen"


def _get_cors_origins() -> list[str]:
    """
    Get allowed CORS origins based on environment.

    - ENVIRONMENT=production: CORS_ALLOWED_ORIGINS (none allowed if unset)
    - anything else: all origins, for the local frontend
    """
    if settings.is_production():
        if settings.CORS_ALLOWED_ORIGINS:
            logger.info(
                f"CORS configured for production with {len(settings.CORS_ALLOWED_ORIGINS)} allowed origins"
            )
            return settings.CORS_ALLOWED_ORIGINS
        logger.warning(
            "CORS_ALLOWED_ORIGINS not set in production. "
            "No web origins allowed. Set CORS_ALLOWED_ORIGINS for the frontend."
        )
        return []

    logger.info(f"CORS configured for {settings.ENVIRONMENT}: allowing all origins")
    return ["*"]


# Create FastAPI app
app = FastAPI(
    title="Fiscozen Parser API",
    description="Turns payment notifications into Fiscozen customers and invoices",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)


@app.exception_handler(ProviderError)
async def provider_error_handler(request: Request, exc: ProviderError):
    """Render every provider workflow failure as {success: false, error, code, details?}."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(f"{request.method} {request.url.path} failed: [{exc.code}] {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may hold exception instances that JSONResponse cannot encode
    return [
        {key: value for key, value in error.items() if key != "ctx"}
        for error in exc.errors()
    ]


# Custom validation error handler to log detailed errors
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Log detailed validation errors for debugging.

    The body preview is not logged for /login: it carries the password.
    """
    logger.error(
        f"Validation error on {request.method} {request.url.path}: {exc.errors()}"
    )
    if not request.url.path.endswith("/login"):
        logger.error(f"Request body preview: {str(await request.body())[:500]}")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "success": False,
            "error": "validation_error",
            "details": jsonable_errors(exc),
        }
    )


# Configure CORS with environment-based origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=_get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(auth_router, prefix=API_PREFIX)
app.include_router(clients_router, prefix=API_PREFIX)
app.include_router(invoices_router, prefix=API_PREFIX)
app.include_router(lookups_router, prefix=API_PREFIX)
app.include_router(extraction_router, prefix=API_PREFIX)
app.include_router(data_router, prefix="/api/data")
app.include_router(health_router)

logger.info("FastAPI app initialized successfully")
