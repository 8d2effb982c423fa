# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Parent-student link service.

This module provides the ParentLinkService class for:
- Creating link requests from a parent to a school student
- Accepting or rejecting requests as the targeted student
- Removing links from either side
- Listing pending requests, linked parents and accepted children

Link states are pending, accepted and rejected. Only a pending link can be
answered; a rejected link can be requested again, which moves the same row
back to pending. A student holds at most ``max_accepted_parents`` accepted
links; the limit is re-checked atomically when a request is accepted.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eduportal.core.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from eduportal.infrastructure.database.models.parent_link import ParentStudentLink
from eduportal.infrastructure.database.models.user import User
from eduportal.infrastructure.database.repositories.parent_links import ParentLinkRepository
from eduportal.infrastructure.database.repositories.users import UserRepository
from eduportal.models.common import LinkAction, LinkStatus, Role

logger = logging.getLogger(__name__)


class ParentLinkService:
    """Service for managing parent-student links.

    Every mutating operation is scoped by the caller's own id: a parent only
    touches rows where it is the parent party, a student only rows that
    target it.

    Attributes:
        db: Async database session.
        max_accepted_parents: Accepted links allowed per student.
    """

    def __init__(self, db: AsyncSession, max_accepted_parents: int = 2) -> None:
        """Initialize parent link service.

        Args:
            db: Async database session.
            max_accepted_parents: Accepted links allowed per student.
        """
        self.db = db
        self.max_accepted_parents = max_accepted_parents
        self._users = UserRepository(db)
        self._links = ParentLinkRepository(db)

    def _capacity_error(self) -> ConflictError:
        return ConflictError(
            f"Student already has the maximum of {self.max_accepted_parents} linked parents"
        )

    async def request_link(
        self,
        parent_id: int,
        student_identifier: str | int | None,
        *,
        commit: bool = True,
    ) -> ParentStudentLink:
        """Create a pending link request from a parent to a school student.

        Args:
            parent_id: Requesting parent.
            student_identifier: Student id (all digits) or username.
            commit: Commit on success. Registration passes False so the new
                account and its link are committed together.

        Returns:
            The pending link.

        Raises:
            ValidationError: If no identifier is given.
            AuthorizationError: If the requester is not a parent.
            NotFoundError: If no school student matches the identifier.
            ConflictError: If the student is at capacity or the pair is
                already accepted or pending.
        """
        identifier = str(student_identifier).strip() if student_identifier is not None else ""
        if not identifier:
            raise ValidationError("Student identifier is required")

        parent = await self._users.get_by_id(parent_id)
        if parent is None or parent.role is not Role.PARENT:
            raise AuthorizationError("Insufficient permissions")

        student = await self._users.find_school_student(identifier)
        if student is None:
            raise NotFoundError("School student not found with provided identifier")

        if await self._links.count_accepted(student.id) >= self.max_accepted_parents:
            raise self._capacity_error()

        existing = await self._links.get_pair(parent_id, student.id)
        if existing is not None:
            if existing.status is LinkStatus.ACCEPTED:
                raise ConflictError("Already linked to this student")
            if existing.status is LinkStatus.PENDING:
                raise ConflictError("Link request already pending")

            link = await self._links.set_status(existing, LinkStatus.PENDING)
            logger.info(
                "Rejected link reopened: link=%s parent=%s student=%s",
                link.id,
                parent_id,
                student.id,
            )
        else:
            try:
                link = await self._links.add(parent_id, student.id)
            except IntegrityError as e:
                # A concurrent request for the same pair won the insert
                await self.db.rollback()
                raise ConflictError("Link request already pending") from e

            logger.info(
                "Link requested: link=%s parent=%s student=%s",
                link.id,
                parent_id,
                student.id,
            )

        if commit:
            await self.db.commit()
        return link

    async def respond_to_request(
        self,
        link_id: int | None,
        action: str | None,
        student_id: int,
    ) -> ParentStudentLink:
        """Accept or reject a pending request targeting the student.

        Both actions first lock the student row (PostgreSQL), so responses for
        one student serialize. Acceptance applies the capacity check and the
        status change in one conditional UPDATE, so concurrent acceptances can
        never exceed the limit.

        Args:
            link_id: Link to answer.
            action: ``accept`` or ``reject``.
            student_id: Responding student.

        Returns:
            The updated link.

        Raises:
            ValidationError: If the action is not accept or reject.
            NotFoundError: If no pending link with that id targets the student.
            ConflictError: If accepting would exceed capacity.
        """
        try:
            link_action = LinkAction(action)
        except ValueError:
            raise ValidationError("Invalid action") from None

        if link_id is None:
            raise ValidationError("Link ID is required")

        await self._users.lock(student_id)

        link = await self._links.get_for_student(link_id, student_id, LinkStatus.PENDING)
        if link is None:
            raise NotFoundError("Link request not found")

        if link_action is LinkAction.REJECT:
            await self._links.set_status(link, LinkStatus.REJECTED)
            await self.db.commit()

            logger.info("Link rejected: link=%s student=%s", link_id, student_id)
            return link

        accepted = await self._links.accept_within_capacity(
            link_id, student_id, self.max_accepted_parents
        )
        if not accepted:
            logger.warning(
                "Link acceptance refused at capacity: link=%s student=%s",
                link_id,
                student_id,
            )
            raise self._capacity_error()

        await self.db.refresh(link)
        await self.db.commit()

        logger.info("Link accepted: link=%s student=%s", link_id, student_id)
        return link

    async def remove_link(self, parent_id: int, student_id: int | None) -> None:
        """Delete the parent's link to a student, whatever its status.

        Raises:
            ValidationError: If no student id is given.
            NotFoundError: If the pair has no link.
        """
        if student_id is None:
            raise ValidationError("Student ID is required")

        link = await self._links.get_pair(parent_id, student_id)
        if link is None:
            raise NotFoundError("Link not found")

        await self._links.delete(link)
        await self.db.commit()

        logger.info(
            "Link removed by parent: link=%s parent=%s student=%s",
            link.id,
            parent_id,
            student_id,
        )

    async def remove_link_for_student(self, link_id: int | None, student_id: int) -> None:
        """Delete a link targeting the student, whatever its status.

        Raises:
            ValidationError: If no link id is given.
            NotFoundError: If no link with that id targets the student.
        """
        if link_id is None:
            raise ValidationError("Link ID is required")

        link = await self._links.get_for_student(link_id, student_id)
        if link is None:
            raise NotFoundError("Link not found")

        await self._links.delete(link)
        await self.db.commit()

        logger.info("Link removed by student: link=%s student=%s", link_id, student_id)

    async def list_pending_requests(self, student_id: int) -> list[tuple[ParentStudentLink, User]]:
        """List pending requests targeting a student with the requesting parent."""
        return await self._links.list_with_parent(student_id, LinkStatus.PENDING)

    async def list_linked_parents(self, student_id: int) -> list[tuple[ParentStudentLink, User]]:
        """List accepted links of a student with the parent account."""
        return await self._links.list_with_parent(student_id, LinkStatus.ACCEPTED)

    async def list_accepted_children(self, parent_id: int) -> list[User]:
        """List the student accounts a parent is linked to."""
        rows = await self._links.list_accepted_children(parent_id)
        return [student for _, student in rows]

    async def has_accepted_link(self, parent_id: int) -> bool:
        return await self._links.has_accepted(parent_id)

    async def get_child(self, parent_id: int, student_id: int) -> User:
        """Get a child profile through an accepted link.

        Raises:
            AuthorizationError: If the parent has no accepted link to the student.
            NotFoundError: If the student account no longer exists.
        """
        if not await self._links.has_accepted(parent_id, student_id):
            raise AuthorizationError("Unauthorized access to child data")

        child = await self._users.get_by_id(student_id)
        if child is None:
            raise NotFoundError("Child not found")
        return child
