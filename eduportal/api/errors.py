# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exception handlers mapping failures to ``{"error", "code"}`` responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from eduportal.api.middleware.rate_limit import rate_limit_exceeded_handler
from eduportal.core.errors import PortalError
from eduportal.infrastructure.database.connection import DatabaseError

logger = logging.getLogger(__name__)


async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    """Render a business error with its own status code."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def request_validation_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Render malformed request bodies as 400 validation errors."""
    errors = exc.errors()
    message = "Invalid request body"
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))

    return JSONResponse(
        status_code=400,
        content={"error": message, "code": "validation_error"},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected failures and hide their details from the client."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "code": "internal_error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach every exception handler to the application."""
    app.add_exception_handler(PortalError, portal_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(DatabaseError, unhandled_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
