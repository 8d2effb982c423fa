# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Business error taxonomy shared by the domain services and the API layer.

Every error carries a human-readable message, a machine-readable code and
the HTTP status it maps to at the request boundary. The API layer renders
them as ``{"error": message, "code": code}``.

Example:
    >>> raise ConflictError("Link request already pending")
"""

from typing import Any


class PortalError(Exception):
    """Base exception for business-rule failures.

    Attributes:
        message: Human-readable error description.
        code: Machine-readable error code.
        status_code: HTTP status used when surfaced to a client.
    """

    status_code: int = 400
    default_code: str = "error"

    def __init__(self, message: str, code: str | None = None) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error description.
            code: Optional override for the machine-readable code.
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code

    def to_body(self) -> dict[str, Any]:
        """Build the JSON error body."""
        return {"error": self.message, "code": self.code}


class ValidationError(PortalError):
    """Raised when input is missing or malformed."""

    status_code = 400
    default_code = "validation_error"


class AuthenticationError(PortalError):
    """Raised when the caller cannot be authenticated."""

    status_code = 401
    default_code = "authentication_failed"


class InvalidTokenError(AuthenticationError):
    """Raised when a bearer token was never issued or has been superseded."""

    default_code = "invalid_token"


class AuthorizationError(PortalError):
    """Raised when an authenticated caller lacks the required role."""

    status_code = 403
    default_code = "forbidden"


class NotFoundError(PortalError):
    """Raised when a link, user or target student does not exist."""

    status_code = 404
    default_code = "not_found"


class ConflictError(PortalError):
    """Raised on duplicate links, duplicate accounts or exceeded capacity."""

    status_code = 409
    default_code = "conflict"
