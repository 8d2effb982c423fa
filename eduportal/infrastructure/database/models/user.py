# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User account model.

A user holds at most one live session token. Login overwrites it and
logout clears it, so a new login invalidates every earlier session.
"""

from sqlalchemy import CheckConstraint, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from eduportal.infrastructure.database.models.base import Base, CreatedAtMixin, enum_values
from eduportal.models.common import Role, StudentType


class User(CreatedAtMixin, Base):
    """Portal account for any role.

    Attributes:
        id: Numeric identifier.
        username: Unique login name.
        email: Unique email address.
        password_hash: Hex PBKDF2 digest (column ``password``).
        password_salt: Hex salt used for the digest (column ``salt``).
        token: Current opaque session token, None when logged out.
        role: Account role.
        student_type: School or university, only set for students.
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "role IN ('admin', 'teacher', 'student', 'parent')",
            name="valid_user_role",
        ),
        CheckConstraint(
            "student_type IN ('school', 'university') OR student_type IS NULL",
            name="valid_student_type",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column("password", String(255), nullable=False)
    password_salt: Mapped[str] = mapped_column("salt", String(255), nullable=False)
    token: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    role: Mapped[Role] = mapped_column(
        Enum(Role, native_enum=False, length=20, values_callable=enum_values),
        nullable=False,
        index=True,
    )
    student_type: Mapped[StudentType | None] = mapped_column(
        Enum(StudentType, native_enum=False, length=20, values_callable=enum_values),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r} role={self.role.value}>"
