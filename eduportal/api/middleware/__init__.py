# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""HTTP middleware for the portal API."""

from eduportal.api.middleware.rate_limit import limiter
from eduportal.api.middleware.request_context import RequestContextMiddleware

__all__ = [
    "limiter",
    "RequestContextMiddleware",
]
