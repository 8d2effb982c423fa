# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ORM models.

Importing this package registers every table on Base.metadata.
"""

from eduportal.infrastructure.database.models.base import Base
from eduportal.infrastructure.database.models.parent_link import ParentStudentLink
from eduportal.infrastructure.database.models.user import User

__all__ = [
    "Base",
    "ParentStudentLink",
    "User",
]
