# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User repository: lookups and field updates on the users table."""

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from eduportal.infrastructure.database.models.base import MAX_ID, is_storable_id
from eduportal.infrastructure.database.models.user import User
from eduportal.models.common import Role, StudentType


class UserRepository:
    """Async data access for User rows.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_by_id(self, user_id: int) -> User | None:
        if not is_storable_id(user_id):
            return None
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> User | None:
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_by_token(self, token: str) -> User | None:
        result = await self.db.execute(select(User).where(User.token == token))
        return result.scalar_one_or_none()

    async def exists_with_email_or_username(self, email: str, username: str) -> bool:
        """Check whether either identity field is already taken."""
        result = await self.db.execute(
            select(User.id)
            .where(or_(User.email == email, User.username == username))
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def find_school_student(self, identifier: str) -> User | None:
        """Resolve a school student by numeric id or by username.

        All-digit identifiers are treated as ids, anything else as a username.
        Ids outside the key range match nothing.

        Args:
            identifier: Id or username as supplied by the client.

        Returns:
            The matching school student, or None.
        """
        query = select(User).where(
            User.role == Role.STUDENT,
            User.student_type == StudentType.SCHOOL,
        )
        if identifier.isascii() and identifier.isdigit():
            digits = identifier.lstrip("0")
            if len(digits) > len(str(MAX_ID)) or not is_storable_id(int(digits or "0")):
                return None
            query = query.where(User.id == int(digits))
        else:
            query = query.where(User.username == identifier)

        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def lock(self, user_id: int) -> None:
        """Take a row lock on a user until the transaction ends.

        Renders ``SELECT ... FOR UPDATE`` on PostgreSQL. SQLite has no row
        locks; there the transaction already holds the database write lock.
        """
        await self.db.execute(select(User.id).where(User.id == user_id).with_for_update())

    async def add(self, user: User) -> User:
        """Insert a user and flush so the id is assigned."""
        self.db.add(user)
        await self.db.flush()
        return user

    async def set_token(self, user_id: int, token: str | None) -> None:
        """Overwrite (or clear) the current session token of a user."""
        await self.db.execute(
            update(User)
            .where(User.id == user_id)
            .values(token=token)
        )

    async def set_password(self, user_id: int, password_hash: str, password_salt: str) -> None:
        await self.db.execute(
            update(User)
            .where(User.id == user_id)
            .values(password_hash=password_hash, password_salt=password_salt)
        )
