# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests (services and repositories on a real SQLite file)
- Integration tests (the HTTP API through an in-process ASGI client)

Environment variables are set before any portal module is imported, since
the rate limiter reads the settings at import time.
"""

import os

os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DB_URL"] = "sqlite+aiosqlite:///./eduportal-test.db"

from collections.abc import AsyncGenerator, Awaitable, Callable
from pathlib import Path

import httpx
import pytest
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession

from eduportal.api.app import create_app
from eduportal.core.config import Settings
from eduportal.core.config.settings import DatabaseSettings, RateLimitSettings
from eduportal.domains.auth.password import hash_password
from eduportal.infrastructure.database.connection import (
    close_database,
    get_sessionmaker,
    init_database,
)
from eduportal.infrastructure.database.models.parent_link import ParentStudentLink
from eduportal.infrastructure.database.models.user import User
from eduportal.models.common import LinkStatus, Role, StudentType

DEFAULT_PASSWORD = "password123"


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    """SQLite file private to one test."""
    return f"sqlite+aiosqlite:///{tmp_path / 'portal.db'}"


@pytest.fixture
def test_settings(database_url: str) -> Settings:
    """Settings for an isolated test database without rate limiting."""
    return Settings(
        environment="test",
        debug=False,
        log_level="WARNING",
        database=DatabaseSettings(url=database_url),
        rate_limit=RateLimitSettings(enabled=False),
    )


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
async def database(test_settings: Settings) -> AsyncGenerator[None, None]:
    """Initialize the connection pool and create the schema."""
    await init_database(test_settings, create_schema=True)
    yield
    await close_database()


@pytest.fixture
async def db_session(database: None) -> AsyncGenerator[AsyncSession, None]:
    """Session for service-level tests.

    Services commit on their own; the session is only closed here.
    """
    async with get_sessionmaker()() as session:
        yield session


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Factory storing a user with a known password."""

    async def _make_user(
        username: str,
        role: Role = Role.STUDENT,
        student_type: StudentType | None = None,
        password: str = DEFAULT_PASSWORD,
        email: str | None = None,
    ) -> User:
        if role is Role.STUDENT and student_type is None:
            student_type = StudentType.SCHOOL

        hashed = hash_password(password)
        user = User(
            username=username,
            email=email or f"{username}@example.com",
            password_hash=hashed.digest,
            password_salt=hashed.salt,
            role=role,
            student_type=student_type,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make_user


@pytest.fixture
def make_link(db_session: AsyncSession) -> Callable[..., Awaitable[ParentStudentLink]]:
    """Factory storing a link between two existing users."""

    async def _make_link(
        parent: User,
        student: User,
        status: LinkStatus = LinkStatus.PENDING,
    ) -> ParentStudentLink:
        link = ParentStudentLink(parent_id=parent.id, student_id=student.id, status=status)
        db_session.add(link)
        await db_session.commit()
        return link

    return _make_link


# =============================================================================
# API Fixtures
# =============================================================================


@pytest.fixture
async def app(test_settings: Settings, database: None) -> FastAPI:
    """Application bound to the test database.

    The ASGI transport does not run the lifespan, so the database fixture
    initializes the pool instead.
    """
    return create_app(test_settings)


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    """In-process HTTP client."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
