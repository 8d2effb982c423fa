# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for authentication guards and guard chains."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from fastapi import Depends, FastAPI

from eduportal.api.errors import register_exception_handlers
from eduportal.api.guards import (
    Authenticate,
    AuthenticatedUser,
    Continue,
    GuardChain,
    GuardRequest,
    RequireAnyRole,
    RequireAuth,
    RequireRole,
    Terminate,
    require_admin,
    require_staff,
)
from eduportal.core.errors import AuthorizationError, InvalidTokenError
from eduportal.domains.auth.session import SessionStore
from eduportal.models.common import Role, StudentType

pytestmark = pytest.mark.unit


def _user_row(role: Role, user_id: int = 7) -> MagicMock:
    user = MagicMock()
    user.id = user_id
    user.username = f"{role.value}_user"
    user.email = f"{role.value}@example.com"
    user.role = role
    user.student_type = StudentType.SCHOOL if role is Role.STUDENT else None
    return user


@pytest.fixture
def sessions() -> AsyncMock:
    """Session store resolving only the token ``good``."""
    store = AsyncMock()

    async def resolve(token):
        if token == "good":
            return _user_row(Role.STUDENT)
        raise InvalidTokenError("Invalid token")

    store.resolve.side_effect = resolve
    return store


def _request(sessions, authorization: str | None = None) -> GuardRequest:
    headers = {"authorization": authorization} if authorization is not None else {}
    return GuardRequest(headers=headers, sessions=sessions)


class TestAuthenticate:
    """Tests for the Authenticate guard."""

    async def test_missing_header_terminates(self, sessions) -> None:
        """Test that a request without Authorization is rejected with 401."""
        result = await Authenticate().intercept(_request(sessions))

        assert isinstance(result, Terminate)
        assert result.status_code == 401
        assert result.body == {"error": "No token provided", "code": "authentication_failed"}
        sessions.resolve.assert_not_called()

    async def test_non_bearer_scheme_terminates(self, sessions) -> None:
        """Test that only the Bearer scheme is accepted."""
        result = await Authenticate().intercept(_request(sessions, "Basic abc"))

        assert isinstance(result, Terminate)
        assert result.error.message == "No token provided"

    async def test_unknown_token_terminates(self, sessions) -> None:
        """Test that an unresolvable token is rejected as invalid."""
        result = await Authenticate().intercept(_request(sessions, "Bearer stale"))

        assert isinstance(result, Terminate)
        assert result.status_code == 401
        assert result.body["error"] == "Invalid token"

    async def test_token_is_second_space_separated_field(self, sessions) -> None:
        """Test that anything after the token is ignored."""
        result = await Authenticate().intercept(_request(sessions, "Bearer good extra"))

        assert isinstance(result, Continue)
        sessions.resolve.assert_awaited_once_with("good")

    async def test_valid_token_continues_with_identity(self, sessions) -> None:
        """Test that a valid token yields the resolved identity."""
        result = await Authenticate().intercept(_request(sessions, "Bearer good"))

        assert isinstance(result, Continue)
        assert result.user == AuthenticatedUser(
            id=7,
            username="student_user",
            email="student@example.com",
            role=Role.STUDENT,
            student_type=StudentType.SCHOOL,
        )


class TestRoleGuards:
    """Tests for RequireAuth, RequireRole and RequireAnyRole."""

    async def test_require_auth_without_identity(self, sessions) -> None:
        """Test that RequireAuth rejects when no identity is known."""
        result = await RequireAuth().intercept(_request(sessions))

        assert isinstance(result, Terminate)
        assert result.body["error"] == "Authentication required"

    async def test_require_role_mismatch_is_forbidden(self, sessions) -> None:
        """Test that a student is refused by an admin-only guard."""
        request = _request(sessions)
        request.user = AuthenticatedUser.from_user(_user_row(Role.STUDENT))

        result = await RequireRole(Role.ADMIN).intercept(request)

        assert isinstance(result, Terminate)
        assert result.status_code == 403
        assert result.body == {"error": "Insufficient permissions", "code": "forbidden"}

    async def test_require_any_role_accepts_listed_roles(self, sessions) -> None:
        """Test that any listed role passes."""
        guard = RequireAnyRole(Role.ADMIN, Role.TEACHER)

        for role in (Role.ADMIN, Role.TEACHER):
            request = _request(sessions)
            request.user = AuthenticatedUser.from_user(_user_row(role))
            assert isinstance(await guard.intercept(request), Continue)

    async def test_require_any_role_without_identity(self, sessions) -> None:
        """Test that role guards also report missing authentication."""
        result = await RequireAnyRole(Role.ADMIN).intercept(_request(sessions))

        assert isinstance(result, Terminate)
        assert result.status_code == 401


class TestGuardChain:
    """Tests for GuardChain.run."""

    async def test_stops_at_first_terminate(self, sessions) -> None:
        """Test that guards after a rejection never run."""
        later = AsyncMock()
        later.intercept = AsyncMock(return_value=Continue())
        chain = GuardChain(Authenticate(), later)

        result = await chain.run(_request(sessions))

        assert isinstance(result, Terminate)
        later.intercept.assert_not_called()

    async def test_identity_flows_to_later_guards(self, sessions) -> None:
        """Test that the identity from Authenticate reaches the role check."""
        chain = GuardChain(Authenticate(), RequireRole(Role.STUDENT))

        result = await chain.run(_request(sessions, "Bearer good"))

        assert isinstance(result, Continue)
        assert result.user.id == 7

    async def test_admin_chain_refuses_student(self, sessions) -> None:
        """Test that an authenticated student is refused by require_admin."""
        result = await require_admin.run(_request(sessions, "Bearer good"))

        assert isinstance(result, Terminate)
        assert isinstance(result.error, AuthorizationError)

    def test_repr_lists_guards(self) -> None:
        """Test the chain representation used in rejection logs."""
        assert repr(require_staff) == "GuardChain(Authenticate(), RequireAnyRole(admin, teacher))"


class TestGuardChainDependency:
    """Tests for guard chains mounted as FastAPI dependencies."""

    @pytest.fixture
    async def guarded_client(self, database):
        app = FastAPI()
        register_exception_handlers(app)

        @app.get("/admin")
        async def admin_only(user: AuthenticatedUser = Depends(require_admin)) -> dict:
            return {"id": user.id}

        @app.get("/staff")
        async def staff_only(user: AuthenticatedUser = Depends(require_staff)) -> dict:
            return {"role": user.role.value}

        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            yield client

    async def _login(self, db_session, make_user, username: str, role: Role) -> str:
        user = await make_user(username, role=role)
        token = await SessionStore(db_session).issue(user.id)
        await db_session.close()
        return token

    async def test_student_gets_403_from_admin_route(
        self, guarded_client, db_session, make_user
    ) -> None:
        """Test that the handler never runs for a student on an admin route."""
        token = await self._login(db_session, make_user, "stu", Role.STUDENT)

        response = await guarded_client.get(
            "/admin", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 403
        assert response.json() == {"error": "Insufficient permissions", "code": "forbidden"}

    async def test_admin_passes_admin_route(self, guarded_client, db_session, make_user) -> None:
        """Test that an admin reaches the handler."""
        token = await self._login(db_session, make_user, "root", Role.ADMIN)

        response = await guarded_client.get(
            "/admin", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 200

    async def test_teacher_passes_staff_route(self, guarded_client, db_session, make_user) -> None:
        """Test that teachers count as staff."""
        token = await self._login(db_session, make_user, "teach", Role.TEACHER)

        response = await guarded_client.get(
            "/staff", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 200
        assert response.json() == {"role": "teacher"}

    async def test_missing_token_gets_401(self, guarded_client) -> None:
        """Test that unauthenticated requests are rejected before the role check."""
        response = await guarded_client.get("/staff")

        assert response.status_code == 401
        assert response.json()["error"] == "No token provided"
