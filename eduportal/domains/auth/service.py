# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication service for accounts and sessions.

This module provides the main AuthService that orchestrates:
- Registration for every role, with an optional parent link request
- Login with a single live session token per user
- Logout
- Password change

Example:
    >>> auth_service = AuthService(db)
    >>> result = await auth_service.login(username="alice", password="secret")
    >>> result.token
    '9f2c...'
"""

import logging
from typing import NamedTuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eduportal.core.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    PortalError,
    ValidationError,
)
from eduportal.domains.auth.password import PasswordCredential
from eduportal.domains.auth.session import SessionStore
from eduportal.domains.parent_link.service import ParentLinkService
from eduportal.infrastructure.database.models.user import User
from eduportal.infrastructure.database.repositories.users import UserRepository
from eduportal.models.common import Role, StudentType

logger = logging.getLogger(__name__)


class RegistrationResult(NamedTuple):
    """Outcome of a registration."""

    user: User
    link_created: bool = False


class LoginResult(NamedTuple):
    """Outcome of a successful login.

    ``has_access`` is only computed for parents and tells whether the
    parent has at least one accepted link.
    """

    user: User
    token: str
    has_access: bool | None = None


class AuthService:
    """Authentication service for accounts and sessions.

    Attributes:
        _db: Database session for queries.
        _credential: Password hashing primitive.
        _sessions: Session token store.
        _links: Parent link service used by parent registration.

    Example:
        >>> auth_service = AuthService(db)
        >>> result = await auth_service.register(
        ...     username="p1",
        ...     email="p1@example.com",
        ...     password="secret",
        ...     role="parent",
        ...     student_identifier="stu123",
        ... )
    """

    def __init__(
        self,
        db: AsyncSession,
        credential: PasswordCredential | None = None,
        sessions: SessionStore | None = None,
        links: ParentLinkService | None = None,
    ) -> None:
        """Initialize the authentication service.

        Args:
            db: Async database session.
            credential: Password hashing primitive. Defaults to PBKDF2 with
                the standard parameters.
            sessions: Session store bound to ``db``.
            links: Parent link service bound to ``db``.
        """
        self._db = db
        self._users = UserRepository(db)
        self._credential = credential or PasswordCredential()
        self._sessions = sessions or SessionStore(db)
        self._links = links or ParentLinkService(db)

    async def register(
        self,
        username: str | None,
        email: str | None,
        password: str | None,
        role: str | None,
        student_type: str | None = None,
        student_identifier: str | int | None = None,
    ) -> RegistrationResult:
        """Register a new account.

        A parent may name a school student by id or username; a pending link
        request is then created in the same transaction as the account. If
        the identifier does not resolve, or the link cannot be created, no
        account is stored.

        Args:
            username: Unique login name.
            email: Unique email address.
            password: Plain text password.
            role: admin, teacher, student or parent.
            student_type: school or university. Required for students.
            student_identifier: Optional student id or username (parents).

        Returns:
            RegistrationResult with the new user and whether a link was created.

        Raises:
            ValidationError: If fields are missing or invalid.
            ConflictError: If the email or username is taken.
        """
        if not username or not email or not password or not role:
            raise ValidationError("Missing required fields")

        try:
            user_role = Role(role)
        except ValueError:
            raise ValidationError("Invalid role") from None

        if await self._users.exists_with_email_or_username(email, username):
            raise ConflictError("Email or username already registered")

        user_student_type: StudentType | None = None
        if user_role is Role.STUDENT:
            if not student_type:
                raise ValidationError("Student type is required for students")
            try:
                user_student_type = StudentType(student_type)
            except ValueError:
                raise ValidationError("Invalid student type") from None

        wants_link = user_role is Role.PARENT and student_identifier not in (None, "")
        if wants_link:
            student = await self._users.find_school_student(str(student_identifier).strip())
            if student is None:
                raise ValidationError("Invalid student identifier: No school student found")

        hashed = self._credential.hash(password)
        user = User(
            username=username,
            email=email,
            password_hash=hashed.digest,
            password_salt=hashed.salt,
            role=user_role,
            student_type=user_student_type,
        )
        try:
            await self._users.add(user)
        except IntegrityError as e:
            await self._db.rollback()
            raise ConflictError("Email or username already registered") from e

        link_created = False
        if wants_link:
            try:
                await self._links.request_link(user.id, student_identifier, commit=False)
            except PortalError:
                await self._db.rollback()
                raise
            link_created = True

        await self._db.commit()

        logger.info("User registered: id=%s role=%s link=%s", user.id, user_role.value, link_created)
        return RegistrationResult(user=user, link_created=link_created)

    async def login(
        self,
        password: str | None,
        username: str | None = None,
        email: str | None = None,
    ) -> LoginResult:
        """Authenticate by email (preferred) or username and issue a token.

        The new token replaces the user's previous one, ending every other
        session of that user.

        Raises:
            ValidationError: If no identity or no password is given.
            AuthenticationError: If the user is unknown or the password is wrong.
        """
        if (not username and not email) or not password:
            raise ValidationError("Missing login credentials")

        if email:
            user = await self._users.get_by_email(email)
        else:
            user = await self._users.get_by_username(username)

        if user is None:
            logger.warning("Login failed: unknown user")
            raise AuthenticationError("User not found")

        if not self._credential.verify(password, user.password_hash, user.password_salt):
            logger.warning("Login failed: invalid password for user %s", user.id)
            raise AuthenticationError("Invalid password")

        has_access = None
        if user.role is Role.PARENT:
            has_access = await self._links.has_accepted_link(user.id)

        token = await self._sessions.issue(user.id)

        logger.info("User logged in: %s", user.id)
        return LoginResult(user=user, token=token, has_access=has_access)

    async def logout(self, user_id: int) -> None:
        """End the current session of a user."""
        await self._sessions.revoke(user_id)

    async def change_password(
        self,
        user_id: int,
        old_password: str | None,
        new_password: str | None,
    ) -> None:
        """Replace a user's password after checking the current one.

        A fresh salt is generated. The current session token stays valid.

        Raises:
            ValidationError: If either password is missing.
            NotFoundError: If the user no longer exists.
            AuthenticationError: If the current password is wrong.
        """
        if not old_password or not new_password:
            raise ValidationError("Both old and new passwords are required")

        user = await self._users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")

        if not self._credential.verify(old_password, user.password_hash, user.password_salt):
            logger.warning("Password change refused for user %s", user_id)
            raise AuthenticationError("Current password is incorrect")

        hashed = self._credential.hash(new_password)
        await self._users.set_password(user_id, hashed.digest, hashed.salt)
        await self._db.commit()

        logger.info("Password changed for user: %s", user_id)
