# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Parent-student consent link model."""

from sqlalchemy import CheckConstraint, Enum, ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from eduportal.infrastructure.database.models.base import Base, TimestampMixin, enum_values
from eduportal.models.common import LinkStatus


class ParentStudentLink(TimestampMixin, Base):
    """Consent relationship between one parent and one student.

    At most one row exists per (parent_id, student_id) pair. Rows are removed
    together with either referenced user.

    Attributes:
        id: Numeric identifier.
        parent_id: Parent user id.
        student_id: Student user id.
        status: pending, accepted or rejected.
    """

    __tablename__ = "parent_student_links"
    __table_args__ = (
        UniqueConstraint("parent_id", "student_id", name="uq_parent_student_pair"),
        CheckConstraint(
            "status IN ('pending', 'accepted', 'rejected')",
            name="valid_link_status",
        ),
        Index("ix_parent_student_links_status", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    parent_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    student_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status: Mapped[LinkStatus] = mapped_column(
        Enum(LinkStatus, native_enum=False, length=20, values_callable=enum_values),
        nullable=False,
        default=LinkStatus.PENDING,
        server_default=LinkStatus.PENDING.value,
    )

    def __repr__(self) -> str:
        return (
            f"<ParentStudentLink id={self.id} parent={self.parent_id} "
            f"student={self.student_id} status={self.status.value}>"
        )
