"""
Application factory for FastAPI.

This module provides the create_app() function that creates and configures
the FastAPI application instance.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from ticketdesk.api.v1 import api_router
from ticketdesk.core.config import settings
from ticketdesk.core.exceptions import TicketDeskError, ValidationError
from ticketdesk.core.instrumentator import instrumentator
from ticketdesk.core.lifespan import lifespan
from ticketdesk.core.middleware import CORRELATION_ID_HEADER, CorrelationIdMiddleware
from ticketdesk.core.rate_limit import limiter
from ticketdesk.core.security import USER_ID_HEADER, USER_ROLE_HEADER
from ticketdesk.schemas import describe_validation_error

from .routes import health_router

logger = logging.getLogger(__name__)


async def ticketdesk_error_handler(request: Request, exc: TicketDeskError) -> JSONResponse:
    """Render any ticket error as {"detail", "code"} with its HTTP status."""
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Body, path and header validation failures render like ValidationError."""
    error = ValidationError(describe_validation_error(exc))
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def create_app() -> FastAPI:
    """
    Application factory function.

    Creates and configures the FastAPI application with all necessary
    middleware, routes, and instrumentation.
    """
    app = FastAPI(
        title=settings.api.app_name,
        version=settings.api.app_version,
        description="Support ticket lifecycle and messaging service",
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_exception_handler(TicketDeskError, ticketdesk_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)

    app.add_middleware(CorrelationIdMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=[
            "Content-Type",
            "Accept",
            "Origin",
            USER_ID_HEADER,
            USER_ROLE_HEADER,
            CORRELATION_ID_HEADER,
        ],
        expose_headers=[CORRELATION_ID_HEADER],
    )

    app.include_router(health_router)
    app.include_router(api_router, prefix=settings.api.api_v1_prefix)

    if settings.monitoring.enable_metrics:
        instrumentator.instrument(app)
        instrumentator.expose(app, endpoint="/metrics")

    return app
