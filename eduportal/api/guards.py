# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Bearer token authentication and role guards.

A guard inspects a request and returns either ``Continue`` (possibly with
a resolved identity) or ``Terminate`` carrying the error to send back.
A GuardChain runs its guards strictly in order and stops at the first
Terminate, so no later guard and no handler runs after a rejection.

Chains are used as FastAPI dependencies. On success the authenticated
identity is attached to ``request.state.user`` and returned to the
handler.

Example:
    @router.get("/children")
    async def list_children(user: AuthenticatedUser = Depends(require_parent)):
        ...

    # Request with Bearer token
    GET /api/v1/parent/children
    Authorization: Bearer 3f9a0c...
"""

import logging
from dataclasses import dataclass
from typing import Mapping, Protocol, Union

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from eduportal.api.dependencies import get_db
from eduportal.core.errors import (
    AuthenticationError,
    AuthorizationError,
    InvalidTokenError,
    PortalError,
)
from eduportal.domains.auth.session import SessionStore
from eduportal.infrastructure.database.models.user import User
from eduportal.models.common import Role, StudentType
from eduportal.utils.logging import bind_context

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity attached to a request once authentication succeeds.

    Attributes:
        id: User id.
        username: Login name.
        email: Email address.
        role: Account role.
        student_type: School or university for students, else None.
    """

    id: int
    username: str
    email: str
    role: Role
    student_type: StudentType | None = None

    @classmethod
    def from_user(cls, user: User) -> "AuthenticatedUser":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            role=user.role,
            student_type=user.student_type,
        )

    def has_any_role(self, *roles: Role) -> bool:
        """Check if the user has any of the specified roles."""
        return self.role in roles


@dataclass
class GuardRequest:
    """What a guard may look at: request headers, the session store and
    the identity established by earlier guards."""

    headers: Mapping[str, str]
    sessions: SessionStore
    user: AuthenticatedUser | None = None


@dataclass(frozen=True)
class Continue:
    """Guard passed; ``user`` is the identity known so far."""

    user: AuthenticatedUser | None = None


@dataclass(frozen=True)
class Terminate:
    """Guard rejected the request with ``error``."""

    error: PortalError

    @property
    def status_code(self) -> int:
        return self.error.status_code

    @property
    def body(self) -> dict:
        return self.error.to_body()


GuardResult = Union[Continue, Terminate]


class Guard(Protocol):
    """A single check in a guard chain."""

    async def intercept(self, request: GuardRequest) -> GuardResult: ...


class Authenticate:
    """Resolve the ``Authorization: Bearer <token>`` header to a user."""

    async def intercept(self, request: GuardRequest) -> GuardResult:
        header = request.headers.get("authorization")
        if not header or not header.startswith(BEARER_PREFIX):
            return Terminate(AuthenticationError("No token provided"))

        token = header.split(" ")[1]
        try:
            user = await request.sessions.resolve(token)
        except InvalidTokenError as e:
            return Terminate(e)

        return Continue(AuthenticatedUser.from_user(user))

    def __repr__(self) -> str:
        return "Authenticate()"


class RequireAuth:
    """Accept any authenticated identity."""

    async def intercept(self, request: GuardRequest) -> GuardResult:
        if request.user is None:
            return Terminate(AuthenticationError("Authentication required"))
        return Continue(request.user)

    def __repr__(self) -> str:
        return "RequireAuth()"


class RequireAnyRole:
    """Accept an authenticated identity whose role is in ``roles``."""

    def __init__(self, *roles: Role) -> None:
        self.roles = frozenset(roles)

    async def intercept(self, request: GuardRequest) -> GuardResult:
        if request.user is None:
            return Terminate(AuthenticationError("Authentication required"))
        if not request.user.has_any_role(*self.roles):
            return Terminate(AuthorizationError("Insufficient permissions"))
        return Continue(request.user)

    def __repr__(self) -> str:
        names = ", ".join(sorted(role.value for role in self.roles))
        return f"{type(self).__name__}({names})"


class RequireRole(RequireAnyRole):
    """Accept an authenticated identity with exactly ``role``."""

    def __init__(self, role: Role) -> None:
        super().__init__(role)
        self.role = role


class GuardChain:
    """Ordered guards used as a FastAPI dependency.

    Example:
        require_admin = GuardChain(Authenticate(), RequireRole(Role.ADMIN))

        @router.get("/admin")
        async def admin_only(user: AuthenticatedUser = Depends(require_admin)):
            ...
    """

    def __init__(self, *guards: Guard) -> None:
        """Initialize the chain.

        Args:
            guards: Guards applied left to right.
        """
        self.guards = guards

    async def run(self, request: GuardRequest) -> GuardResult:
        """Apply the guards in order, stopping at the first Terminate.

        Args:
            request: Request view shared by every guard of the chain.

        Returns:
            Continue with the final identity, or the first Terminate.
        """
        for guard in self.guards:
            result = await guard.intercept(request)
            if isinstance(result, Terminate):
                logger.warning(
                    "Request rejected by %r: %s (%s)",
                    guard,
                    result.error.message,
                    result.status_code,
                )
                return result
            request.user = result.user

        return Continue(request.user)

    async def __call__(
        self,
        request: Request,
        db: AsyncSession = Depends(get_db),
    ) -> AuthenticatedUser:
        """Run the chain for an incoming HTTP request.

        Returns:
            The authenticated identity.

        Raises:
            PortalError: The error of the first guard that terminated.
        """
        result = await self.run(GuardRequest(headers=request.headers, sessions=SessionStore(db)))
        if isinstance(result, Terminate):
            raise result.error

        if result.user is None:
            raise AuthenticationError("Authentication required")

        request.state.user = result.user
        bind_context(user_id=result.user.id)
        return result.user

    def __repr__(self) -> str:
        return f"GuardChain({', '.join(repr(g) for g in self.guards)})"


require_auth = GuardChain(Authenticate(), RequireAuth())
require_student = GuardChain(Authenticate(), RequireRole(Role.STUDENT))
require_parent = GuardChain(Authenticate(), RequireRole(Role.PARENT))
require_admin = GuardChain(Authenticate(), RequireRole(Role.ADMIN))
require_staff = GuardChain(Authenticate(), RequireAnyRole(Role.ADMIN, Role.TEACHER))
