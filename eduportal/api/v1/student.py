# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student API endpoints for parent links.

This module provides endpoints for school students to:
- See and answer pending parent link requests
- See and remove accepted parent links

Every endpoint requires the student role and only acts on links that
target the caller.

Example:
    GET /api/v1/student/parent-requests
    POST /api/v1/student/parent-requests/accept
    Body:
        {"link_id": 12}
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import AliasChoices, BaseModel, Field

from eduportal.api.dependencies import get_parent_link_service
from eduportal.api.guards import AuthenticatedUser, require_student
from eduportal.core.errors import AuthorizationError, ValidationError
from eduportal.domains.parent_link.service import ParentLinkService
from eduportal.infrastructure.database.models.parent_link import ParentStudentLink
from eduportal.infrastructure.database.models.user import User
from eduportal.models.common import LinkAction, LinkStatus
from eduportal.utils.datetime import ensure_utc

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Request/Response Models
# =============================================================================


class LinkIdRequest(BaseModel):
    """Request naming one link."""

    link_id: int | None = Field(
        default=None,
        validation_alias=AliasChoices("link_id", "linkId"),
    )


class StudentIdRequest(BaseModel):
    """Request naming the student acting."""

    student_id: int | None = None


class RespondRequest(BaseModel):
    """Answer to a pending link request."""

    link_id: int | None = None
    action: str | None = Field(default=None, description="accept or reject")
    student_id: int | None = None


class PendingRequestItem(BaseModel):
    """Pending request with the requesting parent."""

    id: int = Field(description="Link id")
    parent_id: int
    parent_username: str
    parent_email: str
    created_at: datetime


class LinkedParentItem(BaseModel):
    """Accepted link with the parent."""

    link_id: int
    parent_id: int
    parent_username: str
    parent_email: str
    status: LinkStatus
    created_at: datetime


class PendingRequestsResponse(BaseModel):
    """Response for pending request listings."""

    requests: list[PendingRequestItem]


class LinkedParentsResponse(BaseModel):
    """Response for the linked parents listing."""

    parents: list[LinkedParentItem]


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str


# =============================================================================
# Helper Functions
# =============================================================================


def _pending_item(link: ParentStudentLink, parent: User) -> PendingRequestItem:
    return PendingRequestItem(
        id=link.id,
        parent_id=parent.id,
        parent_username=parent.username,
        parent_email=parent.email,
        created_at=ensure_utc(link.created_at),
    )


def _require_self(user: AuthenticatedUser, student_id: int | None) -> None:
    """Verify a body-supplied student id names the caller.

    Raises:
        ValidationError: If no student id is given.
        AuthorizationError: If it names another account.
    """
    if student_id is None:
        raise ValidationError("Student ID is required")
    if student_id != user.id:
        raise AuthorizationError("Insufficient permissions")


async def _respond(
    service: ParentLinkService,
    user: AuthenticatedUser,
    link_id: int | None,
    action: LinkAction,
) -> MessageResponse:
    await service.respond_to_request(link_id, action.value, user.id)
    return MessageResponse(message=f"Parent request {action.value}ed successfully")


# =============================================================================
# Endpoints
# =============================================================================


@router.get("/parent-requests", response_model=PendingRequestsResponse)
async def get_pending_parent_requests(
    user: AuthenticatedUser = Depends(require_student),
    service: ParentLinkService = Depends(get_parent_link_service),
) -> PendingRequestsResponse:
    """List pending link requests targeting the caller, newest first."""
    rows = await service.list_pending_requests(user.id)
    return PendingRequestsResponse(requests=[_pending_item(link, parent) for link, parent in rows])


@router.post("/parent-requests/list", response_model=PendingRequestsResponse)
async def list_pending_requests(
    data: StudentIdRequest,
    user: AuthenticatedUser = Depends(require_student),
    service: ParentLinkService = Depends(get_parent_link_service),
) -> PendingRequestsResponse:
    """List pending requests for ``student_id``, which must be the caller."""
    _require_self(user, data.student_id)

    rows = await service.list_pending_requests(user.id)
    return PendingRequestsResponse(requests=[_pending_item(link, parent) for link, parent in rows])


@router.post("/parent-requests/respond", response_model=MessageResponse)
async def respond_to_request(
    data: RespondRequest,
    user: AuthenticatedUser = Depends(require_student),
    service: ParentLinkService = Depends(get_parent_link_service),
) -> MessageResponse:
    """Accept or reject a pending request with ``action``."""
    if data.link_id is None or not data.action or data.student_id is None:
        raise ValidationError("Missing required fields")
    _require_self(user, data.student_id)

    await service.respond_to_request(data.link_id, data.action, user.id)
    return MessageResponse(message=f"Parent request {data.action}ed successfully")


@router.post("/parent-requests/accept", response_model=MessageResponse)
async def accept_parent_request(
    data: LinkIdRequest,
    user: AuthenticatedUser = Depends(require_student),
    service: ParentLinkService = Depends(get_parent_link_service),
) -> MessageResponse:
    """Accept a pending request, subject to the accepted-parents limit."""
    return await _respond(service, user, data.link_id, LinkAction.ACCEPT)


@router.post("/parent-requests/reject", response_model=MessageResponse)
async def reject_parent_request(
    data: LinkIdRequest,
    user: AuthenticatedUser = Depends(require_student),
    service: ParentLinkService = Depends(get_parent_link_service),
) -> MessageResponse:
    """Reject a pending request."""
    return await _respond(service, user, data.link_id, LinkAction.REJECT)


@router.get("/linked-parents", response_model=LinkedParentsResponse)
async def get_linked_parents(
    user: AuthenticatedUser = Depends(require_student),
    service: ParentLinkService = Depends(get_parent_link_service),
) -> LinkedParentsResponse:
    """List accepted parent links of the caller, newest first."""
    rows = await service.list_linked_parents(user.id)
    return LinkedParentsResponse(
        parents=[
            LinkedParentItem(
                link_id=link.id,
                parent_id=parent.id,
                parent_username=parent.username,
                parent_email=parent.email,
                status=link.status,
                created_at=ensure_utc(link.created_at),
            )
            for link, parent in rows
        ]
    )


@router.post("/remove-parent-link", response_model=MessageResponse)
async def remove_parent_link(
    data: LinkIdRequest,
    user: AuthenticatedUser = Depends(require_student),
    service: ParentLinkService = Depends(get_parent_link_service),
) -> MessageResponse:
    """Delete a link targeting the caller, whatever its status."""
    await service.remove_link_for_student(data.link_id, user.id)
    return MessageResponse(message="Parent link removed successfully")
