# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database infrastructure.

This package provides SQLAlchemy async connections to the portal store:
PostgreSQL through asyncpg in production, SQLite through aiosqlite for
development and tests.

Example:
    from eduportal.infrastructure.database import get_session, init_database

    await init_database(settings)

    async with get_session() as session:
        result = await session.execute(select(User))
"""

from eduportal.infrastructure.database.connection import (
    DatabaseError,
    build_engine,
    close_database,
    get_engine,
    get_session,
    get_sessionmaker,
    init_database,
)

__all__ = [
    "DatabaseError",
    "build_engine",
    "close_database",
    "get_engine",
    "get_session",
    "get_sessionmaker",
    "init_database",
]
