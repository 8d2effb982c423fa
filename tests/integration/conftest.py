# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Fixtures for API integration tests.

Accounts are created and logged in through the HTTP API itself, so every
test exercises the same paths a client would.
"""

from collections.abc import Awaitable, Callable
from typing import Any

import httpx
import pytest

API = "/api/v1"
PASSWORD = "password123"


class Account:
    """A registered account with its bearer headers."""

    def __init__(self, user: dict[str, Any], token: str) -> None:
        self.id: int = user["id"]
        self.username: str = user["username"]
        self.token = token
        self.headers = {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register(client: httpx.AsyncClient) -> Callable[..., Awaitable[httpx.Response]]:
    """Register an account and return the raw response."""

    async def _register(
        username: str,
        role: str,
        student_type: str | None = None,
        password: str = PASSWORD,
        **extra: Any,
    ) -> httpx.Response:
        body: dict[str, Any] = {
            "username": username,
            "email": f"{username}@example.com",
            "password": password,
            "role": role,
        }
        if student_type is not None:
            body["student_type"] = student_type
        body.update(extra)
        return await client.post(f"{API}/auth/register", json=body)

    return _register


@pytest.fixture
def login(client: httpx.AsyncClient) -> Callable[..., Awaitable[httpx.Response]]:
    """Log in by username and return the raw response."""

    async def _login(username: str, password: str = PASSWORD) -> httpx.Response:
        return await client.post(
            f"{API}/auth/login",
            json={"username": username, "password": password},
        )

    return _login


@pytest.fixture
def account(register, login) -> Callable[..., Awaitable[Account]]:
    """Register and log in an account in one step."""

    async def _account(username: str, role: str, student_type: str | None = None) -> Account:
        if role == "student" and student_type is None:
            student_type = "school"

        registered = await register(username, role, student_type)
        assert registered.status_code == 201, registered.text

        response = await login(username)
        assert response.status_code == 200, response.text
        user = response.json()["user"]
        return Account(user, user["token"])

    return _account
