# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Rate limiting using slowapi.

This module provides per-IP rate limiting for the API. Every route gets
the default limit through SlowAPIMiddleware, and the login and
registration endpoints carry their own limit against credential stuffing.
Limit strings are read from the environment at import; create_app()
switches the limiter on or off from its own settings.

Example:
    # Limit login attempts
    @router.post("/login")
    @limiter.limit(RATE_LIMIT_AUTH)
    async def login(request: Request, ...):
        ...
"""

import logging

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from eduportal.core.config import get_settings

logger = logging.getLogger(__name__)


# Create the limiter instance
settings = get_settings()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.rate_limit.requests_per_minute}/minute"],
    storage_uri=settings.rate_limit.storage_uri,
    enabled=settings.rate_limit.enabled,
)

# Login and registration attempts
RATE_LIMIT_AUTH = settings.rate_limit.auth_limit


def rate_limit_exceeded_handler(
    request: Request,
    exc: RateLimitExceeded,
) -> Response:
    """Handle rate limit exceeded errors.

    Returns a 429 Too Many Requests response in the portal error format.

    Args:
        request: HTTP request.
        exc: Rate limit exceeded exception.

    Returns:
        JSON response with error details.
    """
    logger.warning(
        "Rate limit exceeded: %s for %s",
        exc.detail,
        get_remote_address(request),
    )

    return Response(
        content='{"error": "Too many requests. Please try again later.", "code": "rate_limited"}',
        status_code=429,
        media_type="application/json",
        headers={"Retry-After": "60"},
    )
