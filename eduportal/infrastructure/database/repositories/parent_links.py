# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Parent-student link repository.

Every query is filtered by the party the caller acts as, so a parent only
ever sees rows where it is the parent and a student only rows where it is
the student.
"""

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from eduportal.infrastructure.database.models.base import is_storable_id
from eduportal.infrastructure.database.models.parent_link import ParentStudentLink
from eduportal.infrastructure.database.models.user import User
from eduportal.models.common import LinkStatus
from eduportal.utils.datetime import utc_now


class ParentLinkRepository:
    """Async data access for ParentStudentLink rows.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_pair(self, parent_id: int, student_id: int) -> ParentStudentLink | None:
        """Get the single link row for a (parent, student) pair, if any."""
        if not is_storable_id(student_id):
            return None
        result = await self.db.execute(
            select(ParentStudentLink).where(
                ParentStudentLink.parent_id == parent_id,
                ParentStudentLink.student_id == student_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_for_student(
        self,
        link_id: int,
        student_id: int,
        status: LinkStatus | None = None,
    ) -> ParentStudentLink | None:
        """Get a link by id, only if it targets the given student.

        Args:
            link_id: Link identifier.
            student_id: Student the link must target.
            status: Optional status the link must currently have.

        Returns:
            The link, or None when it does not exist for that student.
        """
        if not is_storable_id(link_id):
            return None
        query = select(ParentStudentLink).where(
            ParentStudentLink.id == link_id,
            ParentStudentLink.student_id == student_id,
        )
        if status is not None:
            query = query.where(ParentStudentLink.status == status)

        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def count_accepted(self, student_id: int) -> int:
        result = await self.db.execute(
            select(func.count(ParentStudentLink.id)).where(
                ParentStudentLink.student_id == student_id,
                ParentStudentLink.status == LinkStatus.ACCEPTED,
            )
        )
        return result.scalar_one()

    async def has_accepted(self, parent_id: int, student_id: int | None = None) -> bool:
        """Check whether a parent has an accepted link (to a given student)."""
        query = select(ParentStudentLink.id).where(
            ParentStudentLink.parent_id == parent_id,
            ParentStudentLink.status == LinkStatus.ACCEPTED,
        )
        if student_id is not None:
            if not is_storable_id(student_id):
                return False
            query = query.where(ParentStudentLink.student_id == student_id)

        result = await self.db.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def add(self, parent_id: int, student_id: int) -> ParentStudentLink:
        """Insert a pending link and flush so the id is assigned.

        Raises:
            sqlalchemy.exc.IntegrityError: If a row for the pair already exists.
        """
        link = ParentStudentLink(
            parent_id=parent_id,
            student_id=student_id,
            status=LinkStatus.PENDING,
        )
        self.db.add(link)
        await self.db.flush()
        return link

    async def set_status(self, link: ParentStudentLink, status: LinkStatus) -> ParentStudentLink:
        link.status = status
        link.updated_at = utc_now()
        await self.db.flush()
        return link

    async def accept_within_capacity(
        self,
        link_id: int,
        student_id: int,
        max_accepted: int,
    ) -> bool:
        """Accept a pending link only while the student is below capacity.

        The capacity check and the status change are a single UPDATE, so no
        other writer can slip in between the count and the write.

        Args:
            link_id: Link to accept.
            student_id: Student the link must target.
            max_accepted: Maximum accepted links per student.

        Returns:
            True if the row was accepted, False if it was not pending or the
            student is already at capacity.
        """
        other = aliased(ParentStudentLink)
        accepted_count = (
            select(func.count(other.id))
            .where(
                other.student_id == student_id,
                other.status == LinkStatus.ACCEPTED,
            )
            .scalar_subquery()
        )
        result = await self.db.execute(
            update(ParentStudentLink)
            .where(
                ParentStudentLink.id == link_id,
                ParentStudentLink.student_id == student_id,
                ParentStudentLink.status == LinkStatus.PENDING,
                accepted_count < max_accepted,
            )
            .values(status=LinkStatus.ACCEPTED, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def delete(self, link: ParentStudentLink) -> None:
        await self.db.delete(link)
        await self.db.flush()

    async def list_with_parent(
        self,
        student_id: int,
        status: LinkStatus,
    ) -> list[tuple[ParentStudentLink, User]]:
        """List links targeting a student, joined with the parent account.

        Newest requests come first.
        """
        result = await self.db.execute(
            select(ParentStudentLink, User)
            .join(User, User.id == ParentStudentLink.parent_id)
            .where(
                ParentStudentLink.student_id == student_id,
                ParentStudentLink.status == status,
            )
            .order_by(ParentStudentLink.created_at.desc(), ParentStudentLink.id.desc())
        )
        return [(link, parent) for link, parent in result.all()]

    async def list_accepted_children(self, parent_id: int) -> list[tuple[ParentStudentLink, User]]:
        """List accepted links of a parent, joined with the student account."""
        result = await self.db.execute(
            select(ParentStudentLink, User)
            .join(User, User.id == ParentStudentLink.student_id)
            .where(
                ParentStudentLink.parent_id == parent_id,
                ParentStudentLink.status == LinkStatus.ACCEPTED,
            )
            .order_by(ParentStudentLink.id)
        )
        return [(link, student) for link, student in result.all()]
