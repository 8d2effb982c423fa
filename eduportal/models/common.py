# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Closed enumerations shared by the ORM models, services and API schemas."""

from enum import Enum


class Role(str, Enum):
    """Account role. Immutable after registration."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"
    PARENT = "parent"


class StudentType(str, Enum):
    """Student category. Only school students can be linked to parents."""

    SCHOOL = "school"
    UNIVERSITY = "university"


class LinkStatus(str, Enum):
    """Parent-student link state."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class LinkAction(str, Enum):
    """Student response to a pending link request."""

    ACCEPT = "accept"
    REJECT = "reject"
