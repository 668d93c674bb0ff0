# twr_engine/main.py
"""
FastAPI application entry point.

This file:
- Configures application-wide logging
- Creates the FastAPI application
- Registers global exception handlers
- Registers all routers
- Defines the health endpoint

Run with:
    uvicorn twr_engine.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from twr_engine import __version__
from twr_engine.config import settings
from twr_engine.middleware import CorrelationIdMiddleware
from twr_engine.routers import analytics_router, entities_router
from twr_engine.schemas.errors import ErrorDetail, FieldError, ValidationErrorDetail
from twr_engine.services.analytics.types import RangeKey
from twr_engine.services.exceptions import (
    AxisTooLongError,
    EntityNotFoundError,
    InvalidRangeError,
    NotFoundError,
    ProviderUnavailableError,
    ServiceError,
    ValidationError,
)
from twr_engine.utils import setup_logging

logger = logging.getLogger(__name__)

# =============================================================================
# LOGGING SETUP (must be before app creation)
# =============================================================================

setup_logging()

# =============================================================================
# APPLICATION SETUP
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description="Time-weighted return and risk statistics for investment portfolios",
    version=__version__,
    debug=settings.debug,
)

app.add_middleware(CorrelationIdMiddleware)


# =============================================================================
# GLOBAL EXCEPTION HANDLERS
# =============================================================================
# Service-layer exceptions carry no HTTP knowledge; they are mapped here.
# Starlette resolves handlers by walking the exception's MRO, so subclasses
# registered below take precedence over ServiceError.
# =============================================================================


@app.exception_handler(InvalidRangeError)
async def invalid_range_handler(request: Request, exc: InvalidRangeError) -> JSONResponse:
    """Handle unknown range keys and inverted ranges (400)."""
    logger.warning(f"Invalid range: {exc}")
    details = {"valid_options": [key.value for key in RangeKey]}
    if exc.start is not None:
        details["start"] = exc.start.isoformat()
    if exc.end is not None:
        details["end"] = exc.end.isoformat()
    return JSONResponse(
        status_code=400,
        content=ErrorDetail(
            error="InvalidRangeError",
            message=str(exc),
            details=details,
        ).model_dump(),
    )


@app.exception_handler(AxisTooLongError)
async def axis_too_long_handler(request: Request, exc: AxisTooLongError) -> JSONResponse:
    """Handle axes over the configured maximum (400)."""
    logger.warning(f"Axis too long: {exc.days} days")
    return JSONResponse(
        status_code=400,
        content=ErrorDetail(
            error="AxisTooLongError",
            message=str(exc),
            details={"days": exc.days, "max_days": exc.max_days},
        ).model_dump(),
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Handle validation errors (400)."""
    logger.warning(f"Validation error: {exc}")
    return JSONResponse(
        status_code=400,
        content=ErrorDetail(
            error="ValidationError",
            message=str(exc),
            details={"field": exc.field} if exc.field else None,
        ).model_dump(),
    )


@app.exception_handler(EntityNotFoundError)
async def entity_not_found_handler(request: Request, exc: EntityNotFoundError) -> JSONResponse:
    """Handle unknown aggregator entities (404)."""
    logger.warning(f"Entity not found: {exc.entity_key}")
    return JSONResponse(
        status_code=404,
        content=ErrorDetail(
            error="EntityNotFoundError",
            message=str(exc),
            details={"entity_key": exc.entity_key},
        ).model_dump(),
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """Handle generic not found errors (404)."""
    logger.warning(f"Not found: {exc}")
    return JSONResponse(
        status_code=404,
        content=ErrorDetail(
            error="NotFoundError",
            message=str(exc),
            details={
                "resource_type": exc.resource_type,
                "resource_id": exc.resource_id,
            } if exc.resource_type else None,
        ).model_dump(),
    )


@app.exception_handler(ProviderUnavailableError)
async def provider_unavailable_handler(request: Request, exc: ProviderUnavailableError) -> JSONResponse:
    """Handle data provider unavailable (503)."""
    logger.error(f"Provider unavailable: {exc}")
    return JSONResponse(
        status_code=503,
        content=ErrorDetail(
            error="ProviderUnavailableError",
            message=str(exc),
            details={"provider": exc.provider} if exc.provider else None,
        ).model_dump(),
    )


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Handle generic service errors (500)."""
    logger.error(f"Service error: {exc}")
    return JSONResponse(
        status_code=500,
        content=ErrorDetail(
            error="ServiceError",
            message=str(exc),
            details=None,
        ).model_dump(),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Handle all HTTPExceptions with consistent error format.

    Converts FastAPI's default {"detail": "..."} format to ErrorDetail.
    """
    error_types = {
        400: "BadRequestError",
        404: "NotFoundError",
        405: "MethodNotAllowedError",
        409: "ConflictError",
        422: "ValidationError",
        500: "InternalServerError",
        503: "ServiceUnavailableError",
    }
    error_type = error_types.get(exc.status_code, "HTTPError")

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorDetail(
            error=error_type,
            message=str(exc.detail) if exc.detail else "An error occurred",
            details=None,
        ).model_dump(),
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
        request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Convert the default 422 body into ValidationErrorDetail."""
    field_errors = [
        FieldError(
            field=".".join(str(loc) for loc in error["loc"]),
            message=error["msg"],
            type=error["type"],
        )
        for error in exc.errors()
    ]
    logger.info(f"Rejected {request.method} {request.url.path}: {len(field_errors)} invalid fields")

    return JSONResponse(
        status_code=422,
        content=ValidationErrorDetail(details=field_errors).model_dump(),
    )


# =============================================================================
# ROUTER REGISTRATION
# =============================================================================

app.include_router(analytics_router)  # /analytics/*
app.include_router(entities_router)  # /entities/*


# =============================================================================
# GLOBAL ENDPOINTS
# =============================================================================

@app.get("/health", tags=["Health"])
def health_check():
    """
    Liveness check.

    The engine holds no connections, so being able to answer is the whole
    check.
    """
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": __version__,
        "environment": settings.environment,
    }
