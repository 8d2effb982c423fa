# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Repositories over the users and parent_student_links tables."""

from eduportal.infrastructure.database.repositories.parent_links import ParentLinkRepository
from eduportal.infrastructure.database.repositories.users import UserRepository

__all__ = [
    "ParentLinkRepository",
    "UserRepository",
]
