# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Parent API endpoints.

This module provides endpoints for parents to:
- Request a link to a school student
- Remove a link to a student
- View their linked children

Example:
    POST /api/v1/parent/children/request-link
    Body:
        {"studentIdentifier": "stu123"}
    GET /api/v1/parent/children
"""

import logging

from fastapi import APIRouter, Depends, status
from pydantic import AliasChoices, BaseModel, Field

from eduportal.api.dependencies import get_parent_link_service
from eduportal.api.guards import AuthenticatedUser, require_parent
from eduportal.domains.parent_link.service import ParentLinkService
from eduportal.models.common import LinkStatus, StudentType

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Request/Response Models
# =============================================================================


class RequestLinkRequest(BaseModel):
    """Request to link a school student, by id or username."""

    student_identifier: str | int | None = Field(
        default=None,
        validation_alias=AliasChoices("studentIdentifier", "student_identifier"),
    )


class RemoveLinkRequest(BaseModel):
    """Request to remove the link to a student."""

    student_id: int | None = Field(
        default=None,
        validation_alias=AliasChoices("studentId", "student_id"),
    )


class LinkInfo(BaseModel):
    """Link state after a request."""

    id: int
    parent_id: int
    student_id: int
    status: LinkStatus


class RequestLinkResponse(BaseModel):
    """Response for a link request."""

    message: str
    link: LinkInfo


class ChildInfo(BaseModel):
    """Basic child information."""

    id: int
    username: str
    email: str
    student_type: StudentType | None = None


class ChildrenResponse(BaseModel):
    """Response for children list."""

    children: list[ChildInfo]


class ChildResponse(BaseModel):
    """Response for a single child."""

    child: ChildInfo


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str


# =============================================================================
# Endpoints
# =============================================================================


@router.post(
    "/children/request-link",
    response_model=RequestLinkResponse,
    status_code=status.HTTP_201_CREATED,
)
async def request_link(
    data: RequestLinkRequest,
    user: AuthenticatedUser = Depends(require_parent),
    service: ParentLinkService = Depends(get_parent_link_service),
) -> RequestLinkResponse:
    """Send a link request to a school student.

    A previously rejected request is reopened instead of duplicated.
    """
    link = await service.request_link(user.id, data.student_identifier)
    return RequestLinkResponse(
        message="Link request sent to student",
        link=LinkInfo.model_validate(link, from_attributes=True),
    )


@router.post("/children/remove-link", response_model=MessageResponse)
async def remove_link(
    data: RemoveLinkRequest,
    user: AuthenticatedUser = Depends(require_parent),
    service: ParentLinkService = Depends(get_parent_link_service),
) -> MessageResponse:
    """Remove the link to a student in any state, freeing an accepted slot."""
    await service.remove_link(user.id, data.student_id)
    return MessageResponse(message="Student link removed successfully")


@router.get("/children", response_model=ChildrenResponse)
async def get_children(
    user: AuthenticatedUser = Depends(require_parent),
    service: ParentLinkService = Depends(get_parent_link_service),
) -> ChildrenResponse:
    """Get all children that accepted the parent's link."""
    children = await service.list_accepted_children(user.id)
    return ChildrenResponse(
        children=[ChildInfo.model_validate(child, from_attributes=True) for child in children]
    )


@router.get("/children/{student_id}", response_model=ChildResponse)
async def get_child(
    student_id: int,
    user: AuthenticatedUser = Depends(require_parent),
    service: ParentLinkService = Depends(get_parent_link_service),
) -> ChildResponse:
    """Get one child's profile through an accepted link."""
    child = await service.get_child(user.id, student_id)
    return ChildResponse(child=ChildInfo.model_validate(child, from_attributes=True))
