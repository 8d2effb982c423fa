# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints.
Dependencies are used to:
- Get database sessions
- Get service instances configured from settings

Authentication dependencies live in ``eduportal.api.guards``.

Example:
    @router.get("/children")
    async def list_children(
        links: ParentLinkService = Depends(get_parent_link_service),
        user: AuthenticatedUser = Depends(require_parent),
    ):
        ...
"""

from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from eduportal.core.config import Settings, get_settings
from eduportal.domains.auth.password import PasswordCredential
from eduportal.domains.auth.service import AuthService
from eduportal.domains.auth.session import SessionStore
from eduportal.domains.parent_link.service import ParentLinkService
from eduportal.infrastructure.database.connection import get_session


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get database session.

    The session is committed when the request succeeds and rolled back
    when it fails. Guards and handlers of one request share it.

    Yields:
        AsyncSession for the portal database.
    """
    async with get_session() as session:
        yield session


def get_password_credential(
    settings: Settings = Depends(get_settings),
) -> PasswordCredential:
    return PasswordCredential(
        iterations=settings.auth.pbkdf2_iterations,
        key_length=settings.auth.pbkdf2_key_length,
        digest=settings.auth.pbkdf2_digest,
        salt_bytes=settings.auth.salt_bytes,
    )


def get_parent_link_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> ParentLinkService:
    """Get parent link service bound to the request session."""
    return ParentLinkService(
        db=db,
        max_accepted_parents=settings.auth.max_accepted_parents,
    )


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    credential: PasswordCredential = Depends(get_password_credential),
    links: ParentLinkService = Depends(get_parent_link_service),
) -> AuthService:
    """Get authentication service bound to the request session."""
    return AuthService(
        db=db,
        credential=credential,
        sessions=SessionStore(db, token_bytes=settings.auth.token_bytes),
        links=links,
    )
