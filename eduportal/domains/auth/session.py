# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Opaque bearer token sessions.

A session token is random hex with no embedded structure; it is valid only
while it equals the ``token`` column of its user. Each user holds exactly
one live token, so issuing a new one supersedes every earlier session.
Tokens never expire on their own: they stop resolving only after a newer
login or an explicit logout.

Example:
    >>> store = SessionStore(db)
    >>> token = await store.issue(user.id)
    >>> (await store.resolve(token)).id == user.id
    True
"""

import logging
import secrets

from sqlalchemy.ext.asyncio import AsyncSession

from eduportal.core.errors import InvalidTokenError
from eduportal.infrastructure.database.models.user import User
from eduportal.infrastructure.database.repositories.users import UserRepository

logger = logging.getLogger(__name__)


class SessionStore:
    """Issues, resolves and revokes single-session bearer tokens.

    Attributes:
        _db: Async database session.
        _users: User repository bound to the same session.
        _token_bytes: Random bytes per token before hex encoding.
    """

    def __init__(self, db: AsyncSession, token_bytes: int = 24) -> None:
        """Initialize the session store.

        Args:
            db: Async database session.
            token_bytes: Length of generated tokens in bytes.
        """
        self._db = db
        self._users = UserRepository(db)
        self._token_bytes = token_bytes

    def generate_token(self) -> str:
        """Generate a fresh opaque token."""
        return secrets.token_hex(self._token_bytes)

    async def issue(self, user_id: int) -> str:
        """Issue a new token for a user, replacing the previous one.

        Args:
            user_id: User to log in.

        Returns:
            The new bearer token.
        """
        token = self.generate_token()
        await self._users.set_token(user_id, token)
        await self._db.commit()

        logger.info("Session issued for user: %s", user_id)
        return token

    async def revoke(self, user_id: int) -> None:
        """Clear the token of a user. Revoking twice is a no-op."""
        await self._users.set_token(user_id, None)
        await self._db.commit()

        logger.info("Session revoked for user: %s", user_id)

    async def resolve(self, token: str | None) -> User:
        """Resolve a bearer token to its user.

        Args:
            token: Token presented by the client.

        Returns:
            The user currently holding the token.

        Raises:
            InvalidTokenError: If the token was never issued, was superseded
                by a newer login or was revoked.
        """
        if not token:
            raise InvalidTokenError("Invalid token")

        user = await self._users.get_by_token(token)
        if user is None:
            raise InvalidTokenError("Invalid token")
        return user
