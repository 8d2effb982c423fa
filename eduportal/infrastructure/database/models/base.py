# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Declarative base and shared column helpers for ORM models."""

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from eduportal.utils.datetime import utc_now


class Base(DeclarativeBase):
    """Base class for all ORM models."""


# Integer primary keys are 32-bit signed on PostgreSQL
MAX_ID = 2**31 - 1


def is_storable_id(value: int) -> bool:
    """Check whether a client-supplied id can name a row at all."""
    return 1 <= value <= MAX_ID


def enum_values(enum_cls: type[Enum]) -> list[str]:
    """Persist enum members by value rather than by name."""
    return [member.value for member in enum_cls]


class CreatedAtMixin:
    """Adds a creation timestamp populated on insert."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
    )


class TimestampMixin(CreatedAtMixin):
    """Adds creation and last-update timestamps."""

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
        server_default=func.now(),
    )
