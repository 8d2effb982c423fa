# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for the authentication endpoints."""

import json

import pytest

API = "/api/v1"

pytestmark = pytest.mark.integration


class TestRegisterEndpoint:
    """Tests for POST /auth/register."""

    async def test_register_teacher(self, register) -> None:
        """Test a plain registration response."""
        response = await register("teach", "teacher")

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "teacher registration successful"
        assert body["user"]["username"] == "teach"
        assert body["user"]["role"] == "teacher"
        assert "password" not in body["user"]
        assert "token" not in body["user"]

    async def test_register_missing_fields(self, register) -> None:
        """Test that missing fields are a 400 in the portal error format."""
        response = await register("teach", "")

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields", "code": "validation_error"}

    async def test_register_duplicate(self, register) -> None:
        """Test that a taken username is a 409."""
        await register("teach", "teacher")

        response = await register("teach", "teacher")

        assert response.status_code == 409

    async def test_register_student_without_type(self, register) -> None:
        """Test that students must give a student type."""
        response = await register("stu", "student")

        assert response.status_code == 400
        assert response.json()["error"] == "Student type is required for students"

    async def test_parent_with_student_identifier_creates_request(
        self, register, account, client
    ) -> None:
        """Test that a parent can name a student at registration time."""
        student = await account("stu123", "student")

        response = await register("p1", "parent", studentIdentifier="stu123")

        assert response.status_code == 201
        assert response.json()["message"] == "Parent registered and link request sent to student"
        assert response.json()["link_created"] is True

        pending = await client.get(f"{API}/student/parent-requests", headers=student.headers)
        assert [r["parent_username"] for r in pending.json()["requests"]] == ["p1"]

    async def test_parent_with_unknown_student_stores_nothing(self, register, login) -> None:
        """Test that a failed registration leaves no account behind."""
        response = await register("p1", "parent", student_identifier="stu123")

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid student identifier: No school student found"

        login_response = await login("p1")
        assert login_response.status_code == 401
        assert login_response.json()["error"] == "User not found"

    async def test_parent_with_out_of_range_student_id(self, register, login) -> None:
        """Test that an id too large for the key column is an unknown student."""
        response = await register(
            "p1", "parent", studentIdentifier="99999999999999999999999"
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid student identifier: No school student found"
        assert (await login("p1")).status_code == 401

    async def test_register_with_lone_surrogate_password(self, client) -> None:
        """Test that any decodable JSON string is accepted as a password."""

        async def post(path: str, body: dict) -> int:
            response = await client.post(
                f"{API}/auth/{path}",
                content=json.dumps(body),
                headers={"Content-Type": "application/json"},
            )
            return response.status_code

        registered = await post(
            "register",
            {
                "username": "teach",
                "email": "teach@example.com",
                "password": "\ud800secret",
                "role": "teacher",
            },
        )

        assert registered == 201
        assert await post("login", {"username": "teach", "password": "\ud800secret"}) == 200
        assert await post("login", {"username": "teach", "password": "\udc00secret"}) == 401


class TestLoginEndpoint:
    """Tests for POST /auth/login and the session lifecycle."""

    async def test_login_returns_token(self, register, login) -> None:
        """Test that login returns a 48 character hex token."""
        await register("teach", "teacher")

        response = await login("teach")

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Login successful"
        assert len(body["user"]["token"]) == 48
        assert body["user"]["has_access"] is None

    async def test_login_wrong_password(self, register, login) -> None:
        """Test that a wrong password is a 401."""
        await register("teach", "teacher")

        response = await login("teach", "wrong")

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid password", "code": "authentication_failed"}

    async def test_login_by_email(self, register, client) -> None:
        """Test that email can be used instead of username."""
        await register("teach", "teacher")

        response = await client.post(
            f"{API}/auth/login",
            json={"email": "teach@example.com", "password": "password123"},
        )

        assert response.status_code == 200

    async def test_second_login_invalidates_first_token(self, account, login, client) -> None:
        """Test that only the latest session survives."""
        teacher = await account("teach", "teacher")

        second = await login("teach")
        new_token = second.json()["user"]["token"]

        stale = await client.get(f"{API}/auth/profile", headers=teacher.headers)
        fresh = await client.get(
            f"{API}/auth/profile", headers={"Authorization": f"Bearer {new_token}"}
        )
        assert stale.status_code == 401
        assert stale.json()["error"] == "Invalid token"
        assert fresh.status_code == 200

    async def test_logout_then_token_rejected(self, account, client) -> None:
        """Test that a logged out token is rejected."""
        teacher = await account("teach", "teacher")

        response = await client.post(f"{API}/auth/logout", headers=teacher.headers)
        assert response.json() == {"message": "Logout successful"}

        profile = await client.get(f"{API}/auth/profile", headers=teacher.headers)
        assert profile.status_code == 401

    async def test_parent_has_access_flag(self, account, login, client) -> None:
        """Test has_access before and after a student accepts."""
        student = await account("stu123", "student")
        await account("p1", "parent")

        # The new login supersedes the token issued by the account fixture
        parent = (await login("p1")).json()["user"]
        assert parent["has_access"] is False

        request = await client.post(
            f"{API}/parent/children/request-link",
            json={"studentIdentifier": "stu123"},
            headers={"Authorization": f"Bearer {parent['token']}"},
        )
        assert request.status_code == 201, request.text
        link_id = request.json()["link"]["id"]
        await client.post(
            f"{API}/student/parent-requests/accept",
            json={"linkId": link_id},
            headers=student.headers,
        )

        assert (await login("p1")).json()["user"]["has_access"] is True


class TestProfileEndpoints:
    """Tests for /auth/profile and /auth/change-password."""

    async def test_profile_requires_token(self, client) -> None:
        """Test that the profile needs a bearer token."""
        response = await client.get(f"{API}/auth/profile")

        assert response.status_code == 401
        assert response.json()["error"] == "No token provided"

    async def test_profile_returns_own_fields(self, account, client) -> None:
        """Test that the profile has no sensitive fields."""
        student = await account("stu123", "student")

        response = await client.get(f"{API}/auth/profile", headers=student.headers)

        assert response.status_code == 200
        assert response.json()["user"] == {
            "id": student.id,
            "username": "stu123",
            "email": "stu123@example.com",
            "role": "student",
            "student_type": "school",
        }

    async def test_change_password(self, account, login, client) -> None:
        """Test that the old password stops working and the token stays valid."""
        teacher = await account("teach", "teacher")

        response = await client.post(
            f"{API}/auth/change-password",
            json={"oldPassword": "password123", "newPassword": "n3w-secret"},
            headers=teacher.headers,
        )

        assert response.status_code == 200
        assert (await login("teach", "password123")).status_code == 401
        assert (await client.get(f"{API}/auth/profile", headers=teacher.headers)).status_code == 200

    async def test_change_password_wrong_current(self, account, client) -> None:
        """Test that the current password must match."""
        teacher = await account("teach", "teacher")

        response = await client.post(
            f"{API}/auth/change-password",
            json={"old_password": "nope", "new_password": "n3w-secret"},
            headers=teacher.headers,
        )

        assert response.status_code == 401
        assert response.json()["error"] == "Current password is incorrect"
