# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication API endpoints.

This module provides endpoints for accounts and sessions:
- POST /register - Register an account (parents may request a student link)
- POST /login - Log in with username or email, returns a bearer token
- POST /logout - End the current session
- GET /profile - Get current user info
- POST /change-password - Replace the current password

Example:
    POST /api/v1/auth/login
    Body:
        {"username": "alice", "password": "secret"}
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from pydantic import AliasChoices, BaseModel, Field

from eduportal.api.dependencies import get_auth_service
from eduportal.api.guards import AuthenticatedUser, require_auth
from eduportal.api.middleware.rate_limit import RATE_LIMIT_AUTH, limiter
from eduportal.domains.auth.service import AuthService
from eduportal.models.common import Role, StudentType

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Request/Response Models
# =============================================================================


class RegisterRequest(BaseModel):
    """Registration request. Presence of fields is checked by the service."""

    username: str | None = Field(default=None, max_length=50)
    email: str | None = Field(default=None, max_length=100)
    password: str | None = None
    role: str | None = Field(default=None, description="admin, teacher, student or parent")
    student_type: str | None = Field(
        default=None,
        description="school or university; required for students",
    )
    student_identifier: str | int | None = Field(
        default=None,
        validation_alias=AliasChoices("student_identifier", "studentIdentifier"),
        description="Parents only: id or username of a school student to link",
    )


class LoginRequest(BaseModel):
    """Login request. Email takes precedence over username."""

    username: str | None = None
    email: str | None = None
    password: str | None = None


class ChangePasswordRequest(BaseModel):
    """Password change request."""

    old_password: str | None = Field(
        default=None,
        validation_alias=AliasChoices("old_password", "oldPassword"),
    )
    new_password: str | None = Field(
        default=None,
        validation_alias=AliasChoices("new_password", "newPassword"),
    )


class UserPublic(BaseModel):
    """Non-sensitive user fields."""

    id: int
    username: str
    email: str
    role: Role
    student_type: StudentType | None = None


class LoginUser(UserPublic):
    """User fields returned on login."""

    token: str
    has_access: bool | None = Field(
        default=None,
        description="Parents only: whether at least one student accepted the link",
    )


class RegisterResponse(BaseModel):
    """Response for registration."""

    message: str
    user: UserPublic
    link_created: bool = False


class LoginResponse(BaseModel):
    """Response for login."""

    message: str
    user: LoginUser


class ProfileResponse(BaseModel):
    """Response for the current user's profile."""

    user: UserPublic


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str


# =============================================================================
# Endpoints
# =============================================================================


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register an account",
)
@limiter.limit(RATE_LIMIT_AUTH)
async def register(
    request: Request,
    data: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> RegisterResponse:
    """Register an account.

    A parent registering with ``student_identifier`` also sends a link
    request to that school student; if the student cannot be found nothing
    is stored.
    """
    result = await auth_service.register(
        username=data.username,
        email=data.email,
        password=data.password,
        role=data.role,
        student_type=data.student_type,
        student_identifier=data.student_identifier,
    )

    message = f"{result.user.role.value} registration successful"
    if result.link_created:
        message = "Parent registered and link request sent to student"

    return RegisterResponse(
        message=message,
        user=UserPublic.model_validate(result.user, from_attributes=True),
        link_created=result.link_created,
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Log in",
)
@limiter.limit(RATE_LIMIT_AUTH)
async def login(
    request: Request,
    data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    """Log in and receive a bearer token.

    The returned token replaces any token issued earlier to the same user.
    """
    result = await auth_service.login(
        password=data.password,
        username=data.username,
        email=data.email,
    )
    user = result.user

    return LoginResponse(
        message="Login successful",
        user=LoginUser(
            id=user.id,
            username=user.username,
            email=user.email,
            role=user.role,
            student_type=user.student_type,
            token=result.token,
            has_access=result.has_access,
        ),
    )


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Log out",
)
async def logout(
    current_user: AuthenticatedUser = Depends(require_auth),
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Clear the caller's session token."""
    await auth_service.logout(current_user.id)
    return MessageResponse(message="Logout successful")


@router.get(
    "/profile",
    response_model=ProfileResponse,
    summary="Get current user",
)
async def profile(
    current_user: AuthenticatedUser = Depends(require_auth),
) -> ProfileResponse:
    """Return the caller's own non-sensitive fields."""
    return ProfileResponse(
        user=UserPublic.model_validate(current_user, from_attributes=True),
    )


@router.post(
    "/change-password",
    response_model=MessageResponse,
    summary="Change password",
)
async def change_password(
    data: ChangePasswordRequest,
    current_user: AuthenticatedUser = Depends(require_auth),
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Replace the caller's password. The current token stays valid."""
    await auth_service.change_password(
        current_user.id,
        data.old_password,
        data.new_password,
    )
    return MessageResponse(message="Password changed successfully")
